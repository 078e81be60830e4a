"""Upload URL issuing and upload confirmation for receipts and photos."""

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from backoffice.core.constants import (
    MAX_UPLOAD_SIZE_BYTES,
    PHOTO_CONTENT_TYPES,
    RECEIPT_CONTENT_TYPES,
)
from backoffice.core.errors import ValidationError
from backoffice.core.security import TenantContext
from backoffice.db.session import transaction
from backoffice.models import OwnerRef, Photo, Receipt
from backoffice.services import record_store
from backoffice.storage.gateway import UploadUrlResult
from backoffice.storage.keys import (
    RECEIPTS_NAMESPACE,
    thumbnail_key_for,
    verify_storage_key,
)
from backoffice.utils.log_sanitizer import mask_id, mask_storage_key, sanitize

logger = logging.getLogger(__name__)


# -------------------------------------------------
# INPUT CHECKS (no database round-trip)
# -------------------------------------------------

def _check_file(content_type: str, file_size_bytes: int, allowed: dict) -> str:
    content_type = (content_type or "").strip().lower()
    if content_type not in allowed:
        raise ValidationError(
            "Unsupported content type",
            errors={"content_type": [f"Allowed types: {', '.join(sorted(allowed))}"]},
        )

    if file_size_bytes is None or file_size_bytes <= 0:
        raise ValidationError(
            "Invalid file size",
            errors={"file_size_bytes": ["File size must be greater than 0"]},
        )
    if file_size_bytes > MAX_UPLOAD_SIZE_BYTES:
        raise ValidationError(
            "File too large",
            errors={"file_size_bytes": [f"Maximum size is {MAX_UPLOAD_SIZE_BYTES} bytes"]},
        )

    return content_type


def _thumbnail_key(
    ctx: TenantContext,
    storage_key: str,
    thumbnail_storage_key: Optional[str],
    namespace: str,
) -> str:
    if not thumbnail_storage_key:
        return thumbnail_key_for(storage_key)
    verify_storage_key(thumbnail_storage_key, ctx.account_id, namespace)
    return thumbnail_storage_key


# -------------------------------------------------
# UPLOAD URLS
# -------------------------------------------------

def generate_receipt_upload_url(
    db: Session,
    blob_store,
    ctx: TenantContext,
    content_type: str,
    file_size_bytes: int,
    property_id: Optional[uuid.UUID] = None,
    original_file_name: Optional[str] = None,
) -> UploadUrlResult:
    content_type = _check_file(content_type, file_size_bytes, RECEIPT_CONTENT_TYPES)

    if property_id is not None:
        record_store.get_property(db, ctx.account_id, property_id)

    return blob_store.generate_upload_url(
        ctx.account_id,
        RECEIPTS_NAMESPACE,
        content_type,
        RECEIPT_CONTENT_TYPES[content_type],
        original_file_name=original_file_name,
    )


def generate_photo_upload_url(
    db: Session,
    blob_store,
    ctx: TenantContext,
    owner: OwnerRef,
    content_type: str,
    file_size_bytes: int,
    original_file_name: Optional[str] = None,
) -> UploadUrlResult:
    content_type = _check_file(content_type, file_size_bytes, PHOTO_CONTENT_TYPES)
    record_store.get_owner(db, ctx.account_id, owner)

    return blob_store.generate_upload_url(
        ctx.account_id,
        owner.kind.storage_namespace,
        content_type,
        PHOTO_CONTENT_TYPES[content_type],
        original_file_name=original_file_name,
    )


# -------------------------------------------------
# CONFIRMATION
# -------------------------------------------------

def confirm_receipt_upload(
    db: Session,
    thumbnailer,
    ctx: TenantContext,
    storage_key: str,
    content_type: str,
    file_size_bytes: int,
    original_file_name: Optional[str] = None,
    property_id: Optional[uuid.UUID] = None,
    thumbnail_storage_key: Optional[str] = None,
) -> Receipt:
    verify_storage_key(storage_key, ctx.account_id, RECEIPTS_NAMESPACE)
    content_type = _check_file(content_type, file_size_bytes, RECEIPT_CONTENT_TYPES)
    thumb_key = _thumbnail_key(ctx, storage_key, thumbnail_storage_key, RECEIPTS_NAMESPACE)

    if property_id is not None:
        record_store.get_property(db, ctx.account_id, property_id)

    # the uploaded object is trusted to exist; a failed thumbnail leaves the key null
    thumb_key = thumbnailer.generate(storage_key, thumb_key, content_type)

    receipt = Receipt(
        id=uuid.uuid4(),
        account_id=ctx.account_id,
        property_id=property_id,
        storage_key=storage_key,
        thumbnail_storage_key=thumb_key,
        original_file_name=original_file_name,
        content_type=content_type,
        file_size_bytes=file_size_bytes,
        created_by_user_id=ctx.user_id,
    )

    with transaction(db):
        db.add(receipt)

    logger.info(
        "Receipt %s created from %s (%s)",
        mask_id(receipt.id),
        mask_storage_key(storage_key),
        sanitize(original_file_name),
    )
    return receipt


def confirm_photo_upload(
    db: Session,
    thumbnailer,
    ctx: TenantContext,
    owner: OwnerRef,
    storage_key: str,
    content_type: str,
    file_size_bytes: int,
    original_file_name: Optional[str] = None,
    thumbnail_storage_key: Optional[str] = None,
) -> Photo:
    namespace = owner.kind.storage_namespace
    verify_storage_key(storage_key, ctx.account_id, namespace)
    content_type = _check_file(content_type, file_size_bytes, PHOTO_CONTENT_TYPES)
    thumb_key = _thumbnail_key(ctx, storage_key, thumbnail_storage_key, namespace)

    record_store.get_owner(db, ctx.account_id, owner)

    thumb_key = thumbnailer.generate(storage_key, thumb_key, content_type)

    with transaction(db):
        record_store.lock_owner(db, ctx.account_id, owner)

        is_first = record_store.count_photos(db, ctx.account_id, owner) == 0
        photo = Photo(
            id=uuid.uuid4(),
            account_id=ctx.account_id,
            owner_type=owner.kind,
            owner_id=owner.id,
            storage_key=storage_key,
            thumbnail_storage_key=thumb_key,
            original_file_name=original_file_name,
            content_type=content_type,
            file_size_bytes=file_size_bytes,
            is_primary=is_first,
            display_order=0 if is_first else record_store.max_display_order(db, ctx.account_id, owner) + 1,
            created_by_user_id=ctx.user_id,
        )
        db.add(photo)

    logger.info(
        "Photo %s confirmed for %s %s (primary=%s, order=%s)",
        mask_id(photo.id),
        owner.kind.label,
        mask_id(owner.id),
        photo.is_primary,
        photo.display_order,
    )
    return photo
