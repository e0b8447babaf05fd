import logging

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from backoffice.config import settings

logger = logging.getLogger(__name__)


class Database:
    client: AsyncIOMotorClient = None

    def connect(self):
        # retryWrites off: a replayed $set merge is not safe to apply twice
        self.client = AsyncIOMotorClient(
            settings.MONGO_URI,
            serverSelectionTimeoutMS=settings.MONGO_SERVER_SELECTION_TIMEOUT_MS,
            retryWrites=False,
        )
        logger.info("Connected to MongoDB at %s", settings.MONGO_URI)

    def close(self):
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")

    def get_db(self):
        if self.client is None:
            self.connect()
        return self.client[settings.MONGO_DB_NAME]

    def get_collection(self, name: str):
        return self.get_db()[name]

db = Database()

def get_event_collection():
    return db.get_collection(settings.MONGO_COLL_NAME)

async def ensure_indexes(coll):
    try:
        await coll.create_index("eventId", unique=True)
    except PyMongoError as e:
        logger.warning("Error creating indexes: %s", e)
