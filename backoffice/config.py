from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # App
    APP_NAME: str = "Event Backoffice"
    HOST: str = "0.0.0.0"
    PORT: int = 8001
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Auth
    API_TOKEN: Optional[str] = None  # unset = gate open (dev only)

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB_NAME: str = "backoffice"
    MONGO_COLL_NAME: str = "events"
    MONGO_SERVER_SELECTION_TIMEOUT_MS: int = 5000
    MONGO_OPERATION_TIMEOUT_MS: int = 10000

    # Event ids must look like an ObjectId before we hit the store
    VALIDATE_EVENT_ID_FORMAT: bool = True

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
