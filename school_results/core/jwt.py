from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from school_results.core.config import Settings, settings
from school_results.core.logger import logger


def create_access_token(
        data: dict,
        app_settings: Settings = settings,
        expires_delta: Optional[timedelta] = None
) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=app_settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, app_settings.SECRET_KEY, algorithm=app_settings.ALGORITHM)


def verify_token(token: str, app_settings: Settings = settings) -> Optional[dict]:
    """Decoded payload, or None for a malformed, forged or expired token."""
    try:
        payload = jwt.decode(token, app_settings.SECRET_KEY, algorithms=[app_settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"[TOKEN] Rejected token: {str(e)}")
        return None

    if payload.get("sub") is None or payload.get("id") is None:
        logger.warning("[TOKEN] Token payload is missing sub or id")
        return None
    return payload
