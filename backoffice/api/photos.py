"""Photo routes, shared by properties and work orders.

``make_photo_router(kind)`` returns a router whose paths start at
``/{owner_id}/photos``; it is mounted under each owner's prefix.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_context, get_storage, get_thumbnail_generator
from backoffice.core.security import TenantContext
from backoffice.db.session import get_db
from backoffice.models import OwnerKind, OwnerRef
from backoffice.schemas.photo import PhotoResponse, ReorderPhotosRequest
from backoffice.schemas.upload import ConfirmUploadRequest, UploadUrlRequest, UploadUrlResponse
from backoffice.services import photo_service, upload_service


def make_photo_router(kind: OwnerKind) -> APIRouter:
    router = APIRouter()

    @router.post("/{owner_id}/photos/upload-url", response_model=UploadUrlResponse)
    def generate_upload_url(
        owner_id: UUID,
        payload: UploadUrlRequest,
        db: Session = Depends(get_db),
        blob_store=Depends(get_storage),
        ctx: TenantContext = Depends(get_current_context),
    ):
        result = upload_service.generate_photo_upload_url(
            db,
            blob_store,
            ctx,
            OwnerRef(kind, owner_id),
            content_type=payload.content_type,
            file_size_bytes=payload.file_size_bytes,
            original_file_name=payload.original_file_name,
        )
        return UploadUrlResponse.model_validate(result)

    @router.post("/{owner_id}/photos", response_model=PhotoResponse, status_code=status.HTTP_201_CREATED)
    def confirm_upload(
        owner_id: UUID,
        payload: ConfirmUploadRequest,
        db: Session = Depends(get_db),
        blob_store=Depends(get_storage),
        thumbnailer=Depends(get_thumbnail_generator),
        ctx: TenantContext = Depends(get_current_context),
    ):
        photo = upload_service.confirm_photo_upload(
            db,
            thumbnailer,
            ctx,
            OwnerRef(kind, owner_id),
            storage_key=payload.storage_key,
            thumbnail_storage_key=payload.thumbnail_storage_key,
            content_type=payload.content_type,
            file_size_bytes=payload.file_size_bytes,
            original_file_name=payload.original_file_name,
        )
        return photo_service.to_photo_response(photo, blob_store)

    @router.get("/{owner_id}/photos", response_model=List[PhotoResponse])
    def list_photos(
        owner_id: UUID,
        db: Session = Depends(get_db),
        blob_store=Depends(get_storage),
        thumbnailer=Depends(get_thumbnail_generator),
        ctx: TenantContext = Depends(get_current_context),
    ):
        return photo_service.list_photos(db, blob_store, thumbnailer, ctx, OwnerRef(kind, owner_id))

    @router.put("/{owner_id}/photos/{photo_id}/primary", status_code=status.HTTP_204_NO_CONTENT)
    def set_primary(
        owner_id: UUID,
        photo_id: UUID,
        db: Session = Depends(get_db),
        ctx: TenantContext = Depends(get_current_context),
    ):
        photo_service.set_primary(db, ctx, OwnerRef(kind, owner_id), photo_id)

    @router.put("/{owner_id}/photos/reorder", status_code=status.HTTP_204_NO_CONTENT)
    def reorder(
        owner_id: UUID,
        payload: ReorderPhotosRequest,
        db: Session = Depends(get_db),
        ctx: TenantContext = Depends(get_current_context),
    ):
        photo_service.reorder(db, ctx, OwnerRef(kind, owner_id), payload.photo_ids)

    @router.delete("/{owner_id}/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_photo(
        owner_id: UUID,
        photo_id: UUID,
        db: Session = Depends(get_db),
        blob_store=Depends(get_storage),
        ctx: TenantContext = Depends(get_current_context),
    ):
        photo_service.delete_photo(db, blob_store, ctx, OwnerRef(kind, owner_id), photo_id)

    return router
