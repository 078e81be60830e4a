"""Primary/Order Engine for property and work-order photos.

Every mutation runs inside one transaction that first row-locks the owner
record, so set-primary, reorder and delete on the same owner are serialized.
The partial unique index ``uq_photos_primary_per_owner`` backs the
"at most one primary" rule at the storage layer.
"""

import logging
import uuid
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.core.errors import ConflictError, NotFoundError, StorageError, ValidationError
from backoffice.core.security import TenantContext
from backoffice.db.base import utcnow
from backoffice.db.session import transaction
from backoffice.models import OwnerRef, Photo
from backoffice.schemas.photo import PhotoResponse
from backoffice.services import record_store
from backoffice.storage.keys import thumbnail_key_for
from backoffice.utils.log_sanitizer import mask_id, mask_storage_key

logger = logging.getLogger(__name__)


# --------------------------------------------------
# SET PRIMARY
# --------------------------------------------------

def set_primary(db: Session, ctx: TenantContext, owner: OwnerRef, photo_id: uuid.UUID) -> Photo:
    record_store.get_owner(db, ctx.account_id, owner)
    photo = record_store.find_photo(db, ctx.account_id, owner, photo_id)
    if photo.is_primary:
        return photo

    with transaction(db):
        record_store.lock_owner(db, ctx.account_id, owner)
        photo = record_store.find_photo(db, ctx.account_id, owner, photo_id, for_update=True)

        for other in record_store.list_photos(db, ctx.account_id, owner, for_update=True):
            if other.is_primary and other.id != photo.id:
                other.is_primary = False

        # the old primary must be cleared before the index sees a second one
        db.flush()

        photo.is_primary = True
        try:
            db.flush()
        except IntegrityError as e:
            raise ConflictError("Photo", photo.id, "could not become primary", original_error=e)

    logger.info("Photo %s is now primary for %s %s", mask_id(photo.id), owner.kind.label, mask_id(owner.id))
    return photo


# --------------------------------------------------
# REORDER
# --------------------------------------------------

def reorder(
    db: Session,
    ctx: TenantContext,
    owner: OwnerRef,
    ordered_photo_ids: List[uuid.UUID],
) -> List[Photo]:
    if not ordered_photo_ids:
        raise ValidationError(
            "Photo order is required",
            errors={"photo_ids": ["At least one photo id is required"]},
        )

    seen = set()
    duplicates = []
    for photo_id in ordered_photo_ids:
        if photo_id in seen and photo_id not in duplicates:
            duplicates.append(photo_id)
        seen.add(photo_id)
    if duplicates:
        raise ValidationError(
            "Photo order contains duplicate ids",
            errors={"photo_ids": [f"Duplicate id {d}" for d in duplicates]},
        )

    with transaction(db):
        record_store.lock_owner(db, ctx.account_id, owner)
        photos = {p.id: p for p in record_store.list_photos(db, ctx.account_id, owner, for_update=True)}

        for photo_id in ordered_photo_ids:
            if photo_id not in photos:
                raise NotFoundError("Photo", photo_id)

        missing = [photo_id for photo_id in photos if photo_id not in seen]
        if missing:
            raise ValidationError(
                "Photo order must include every photo",
                errors={"photo_ids": [f"Missing id {m}" for m in missing]},
            )

        now = utcnow()
        ordered = []
        for index, photo_id in enumerate(ordered_photo_ids):
            photo = photos[photo_id]
            photo.display_order = index
            # resubmitting the same order still writes every row
            photo.updated_at = now
            ordered.append(photo)

    logger.info("Reordered %d photos for %s %s", len(ordered), owner.kind.label, mask_id(owner.id))
    return ordered


# --------------------------------------------------
# DELETE
# --------------------------------------------------

def delete_photo(db: Session, blob_store, ctx: TenantContext, owner: OwnerRef, photo_id: uuid.UUID) -> bool:
    """Delete a photo's blobs, then its row. Returns whether it was primary.

    Blob removal comes first; its failure is only logged and the row is
    deleted anyway.
    No other photo is promoted; callers follow up with ``set_primary``.
    """
    with transaction(db):
        record_store.lock_owner(db, ctx.account_id, owner)
        photo = record_store.find_photo(db, ctx.account_id, owner, photo_id, for_update=True)
        was_primary = photo.is_primary

        try:
            blob_store.delete_photo(photo.storage_key, photo.thumbnail_storage_key)
        except StorageError as e:
            logger.warning(
                "Failed to delete blobs for photo %s (%s), deleting record anyway: %s",
                mask_id(photo.id),
                mask_storage_key(photo.storage_key),
                e,
            )

        db.delete(photo)
        db.flush()

        # close the gap left in display_order
        for index, remaining in enumerate(record_store.list_photos(db, ctx.account_id, owner)):
            if remaining.display_order != index:
                remaining.display_order = index

    logger.info(
        "Deleted photo %s from %s %s (was_primary=%s)",
        mask_id(photo_id),
        owner.kind.label,
        mask_id(owner.id),
        was_primary,
    )
    return was_primary


# --------------------------------------------------
# LIST
# --------------------------------------------------

def _ensure_thumbnail(db: Session, thumbnailer, photo: Photo) -> None:
    if photo.thumbnail_storage_key or thumbnailer is None:
        return

    thumb_key = thumbnailer.generate(
        photo.storage_key,
        thumbnail_key_for(photo.storage_key),
        photo.content_type,
    )
    if thumb_key is None:
        return

    with transaction(db):
        photo.thumbnail_storage_key = thumb_key


def to_photo_response(photo: Photo, blob_store) -> PhotoResponse:
    return PhotoResponse(
        id=photo.id,
        owner_type=photo.owner_type.value,
        owner_id=photo.owner_id,
        is_primary=photo.is_primary,
        display_order=photo.display_order,
        original_file_name=photo.original_file_name,
        content_type=photo.content_type,
        file_size_bytes=photo.file_size_bytes,
        photo_url=blob_store.get_photo_url(photo.storage_key),
        thumbnail_url=(
            blob_store.get_thumbnail_url(photo.thumbnail_storage_key)
            if photo.thumbnail_storage_key
            else None
        ),
        created_at=photo.created_at,
    )


def list_photos(
    db: Session,
    blob_store,
    thumbnailer,
    ctx: TenantContext,
    owner: OwnerRef,
) -> List[PhotoResponse]:
    """Photos in display order. Missing thumbnails get one regeneration try."""
    record_store.get_owner(db, ctx.account_id, owner)
    photos = record_store.list_photos(db, ctx.account_id, owner)

    for photo in photos:
        _ensure_thumbnail(db, thumbnailer, photo)

    return [to_photo_response(p, blob_store) for p in photos]
