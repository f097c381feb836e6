from fastapi import HTTPException, Security
from fastapi.security.api_key import APIKeyHeader

from . import config

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


async def require_api_key(api_key: str = Security(api_key_header)):
    if api_key is None:
        raise HTTPException(status_code=401, detail="Missing API key")
    if api_key != config.API_KEY:
        raise HTTPException(status_code=403, detail="Invalid API key")
    return True
