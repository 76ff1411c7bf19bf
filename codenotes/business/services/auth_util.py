import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from codenotes.config import Config, logger

auth_logger = logger.getChild("auth")


def create_access_token(user_data: dict, expiry: Optional[timedelta] = None) -> str:
    """
    Signs a bearer token carrying `user_data` under the "user" claim.

    Tokens are normally issued by the external auth service; this is kept
    for local use and tests.
    """
    lifetime = expiry or timedelta(seconds=Config.JWT_ACCESS_TOKEN_EXPIRY)
    return encode_token(
        {
            "user": user_data,
            "exp": datetime.now(timezone.utc) + lifetime,
            "jti": uuid.uuid4().hex,
        }
    )


def encode_token(payload: Dict[str, Any]) -> str:
    return jwt.encode(payload, Config.JWT_SECRET, algorithm=Config.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Returns the claims, or None for a bad signature, expiry or malformed token."""
    try:
        return jwt.decode(token, Config.JWT_SECRET, algorithms=[Config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        auth_logger.info("Rejected expired token")
    except jwt.PyJWTError as e:
        auth_logger.warning(f"Rejected token: {e}")
    return None
