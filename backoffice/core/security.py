# backoffice/core/security.py
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from backoffice.core.config import settings

SECRET_KEY = settings.JWT_SECRET_KEY
ALGORITHM = settings.JWT_ALGORITHM


@dataclass(frozen=True)
class TenantContext:
    """Caller identity passed explicitly into every service call."""

    account_id: uuid.UUID
    user_id: uuid.UUID


class InvalidTokenError(Exception):
    pass


def create_access_token(data: dict, expires_minutes: int = None) -> str:
    to_encode = {k: str(v) if isinstance(v, uuid.UUID) else v for k, v in data.items()}
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=expires_minutes or settings.JWT_EXPIRE_MINUTES
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TenantContext:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        raise InvalidTokenError("Invalid token") from e

    user_id = payload.get("sub")
    account_id = payload.get("account_id")
    if not user_id or not account_id:
        raise InvalidTokenError("Token is missing account claims")

    try:
        return TenantContext(
            account_id=uuid.UUID(account_id),
            user_id=uuid.UUID(user_id),
        )
    except ValueError as e:
        raise InvalidTokenError("Malformed account claims") from e
