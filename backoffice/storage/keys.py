"""Storage key layout: ``{account_id}/{namespace}/{year}/{file_id}{ext}``.

The leading account segment is the tenant namespace. A key is only accepted
at confirmation time when that segment equals the caller's account.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple

from backoffice.core.constants import THUMBNAIL_SUFFIX
from backoffice.core.errors import UnauthorizedError, ValidationError

RECEIPTS_NAMESPACE = "receipts"


@dataclass(frozen=True)
class StorageKey:
    account_id: uuid.UUID
    namespace: str
    year: int
    file_name: str


def build_storage_keys(
    account_id: uuid.UUID,
    namespace: str,
    extension: str,
    now: Optional[datetime] = None,
) -> Tuple[str, str]:
    """Return ``(storage_key, thumbnail_storage_key)`` for a new upload."""
    now = now or datetime.now(timezone.utc)
    file_id = uuid.uuid4()
    prefix = f"{account_id}/{namespace}/{now.year}/{file_id}"
    return f"{prefix}{extension}", f"{prefix}{THUMBNAIL_SUFFIX}"


def parse_storage_key(storage_key: str) -> StorageKey:
    if not storage_key or not storage_key.strip():
        raise ValidationError(
            "Invalid storage key format",
            errors={"storage_key": ["Storage key is required"]},
        )

    parts = storage_key.split("/")
    try:
        account_id = uuid.UUID(parts[0])
    except ValueError:
        raise ValidationError(
            "Invalid storage key format",
            errors={"storage_key": ["Storage key must start with an account id"]},
        )

    if len(parts) < 4 or not all(parts[1:]):
        raise ValidationError(
            "Invalid storage key format",
            errors={"storage_key": ["Expected {account}/{namespace}/{year}/{file}"]},
        )

    year = parts[2]
    if len(year) != 4 or not year.isdigit():
        raise ValidationError(
            "Invalid storage key format",
            errors={"storage_key": [f"Invalid year segment '{year}'"]},
        )

    return StorageKey(
        account_id=account_id,
        namespace=parts[1],
        year=int(year),
        file_name="/".join(parts[3:]),
    )


def verify_storage_key(storage_key: str, account_id: uuid.UUID, namespace: str) -> StorageKey:
    """Parse a client supplied key and check it belongs to ``account_id``.

    Malformed keys raise ``ValidationError``; keys from another account raise
    ``UnauthorizedError``.
    """
    key = parse_storage_key(storage_key)

    if key.account_id != account_id:
        raise UnauthorizedError("Cannot confirm upload for another account")

    if key.namespace != namespace:
        raise ValidationError(
            "Invalid storage key format",
            errors={"storage_key": [f"Expected namespace '{namespace}', got '{key.namespace}'"]},
        )

    return key


def thumbnail_key_for(storage_key: str) -> str:
    base, _, _ = storage_key.rpartition(".")
    return f"{base or storage_key}{THUMBNAIL_SUFFIX}"
