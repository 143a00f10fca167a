import bcrypt
from fastapi import HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from starlette.status import HTTP_401_UNAUTHORIZED

from pulsehr.core.config import get_settings

api_key_header = APIKeyHeader(name="x-api-key", auto_error=False)

# bcrypt hard-limit: 72 bytes
BCRYPT_MAX_BYTES = 72


def get_api_key(api_key: str = Security(api_key_header)) -> str:
    """
    Check that the API key sent in the header matches the admin key.
    """
    if api_key and api_key == get_settings().API_KEY:
        return api_key
    raise HTTPException(
        status_code=HTTP_401_UNAUTHORIZED,
        detail="Invalid API key",
    )


def password_bytes_ok(password: str) -> bool:
    return len(password.encode("utf-8")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password_bytes_ok(password):
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False
