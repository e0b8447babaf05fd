from typing import Optional

from fastapi import Header, HTTPException

from backoffice.config import settings


def require_api_key(x_api_key: Optional[str] = Header(None)):
    if settings.API_TOKEN and x_api_key != settings.API_TOKEN:
        raise HTTPException(status_code=401, detail="Invalid API token")
    return True
