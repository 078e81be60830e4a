from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_context, get_storage, get_thumbnail_generator
from backoffice.core.security import TenantContext
from backoffice.db.session import get_db
from backoffice.schemas.receipt import (
    ConfirmReceiptRequest,
    ProcessReceiptRequest,
    ProcessReceiptResponse,
    ReceiptResponse,
    UnprocessedReceiptsResponse,
)
from backoffice.schemas.upload import ReceiptUploadUrlRequest, UploadUrlResponse
from backoffice.services import deletion_service, receipt_linking_service, receipt_service, upload_service

# main.py mounts this router with prefix="/api/receipts"
router = APIRouter(tags=["receipts"])


# -------------------------------------------------------------------
# UPLOAD
# -------------------------------------------------------------------

@router.post("/upload-url", response_model=UploadUrlResponse)
def generate_upload_url(
    payload: ReceiptUploadUrlRequest,
    db: Session = Depends(get_db),
    blob_store=Depends(get_storage),
    ctx: TenantContext = Depends(get_current_context),
):
    result = upload_service.generate_receipt_upload_url(
        db,
        blob_store,
        ctx,
        content_type=payload.content_type,
        file_size_bytes=payload.file_size_bytes,
        property_id=payload.property_id,
        original_file_name=payload.original_file_name,
    )
    return UploadUrlResponse.model_validate(result)


@router.post("", response_model=ReceiptResponse, status_code=status.HTTP_201_CREATED)
def confirm_upload(
    payload: ConfirmReceiptRequest,
    db: Session = Depends(get_db),
    blob_store=Depends(get_storage),
    thumbnailer=Depends(get_thumbnail_generator),
    ctx: TenantContext = Depends(get_current_context),
):
    receipt = upload_service.confirm_receipt_upload(
        db,
        thumbnailer,
        ctx,
        storage_key=payload.storage_key,
        thumbnail_storage_key=payload.thumbnail_storage_key,
        content_type=payload.content_type,
        file_size_bytes=payload.file_size_bytes,
        original_file_name=payload.original_file_name,
        property_id=payload.property_id,
    )
    return receipt_service.get_receipt(db, blob_store, ctx, receipt.id)


# -------------------------------------------------------------------
# READ
# -------------------------------------------------------------------

@router.get("/unprocessed", response_model=UnprocessedReceiptsResponse)
def list_unprocessed(
    db: Session = Depends(get_db),
    blob_store=Depends(get_storage),
    ctx: TenantContext = Depends(get_current_context),
):
    return receipt_service.list_unprocessed(db, blob_store, ctx)


@router.get("/{receipt_id}", response_model=ReceiptResponse)
def get_receipt(
    receipt_id: UUID,
    db: Session = Depends(get_db),
    blob_store=Depends(get_storage),
    ctx: TenantContext = Depends(get_current_context),
):
    return receipt_service.get_receipt(db, blob_store, ctx, receipt_id)


# -------------------------------------------------------------------
# PROCESS / DELETE
# -------------------------------------------------------------------

@router.post("/{receipt_id}/process", response_model=ProcessReceiptResponse, status_code=status.HTTP_201_CREATED)
def process_receipt(
    receipt_id: UUID,
    payload: ProcessReceiptRequest,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    expense_id = receipt_linking_service.process_receipt(
        db,
        ctx,
        receipt_id,
        property_id=payload.property_id,
        amount=payload.amount,
        date=payload.date,
        category_id=payload.category_id,
        description=payload.description,
    )
    return ProcessReceiptResponse(expense_id=expense_id)


@router.delete("/{receipt_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_receipt(
    receipt_id: UUID,
    db: Session = Depends(get_db),
    blob_store=Depends(get_storage),
    ctx: TenantContext = Depends(get_current_context),
):
    deletion_service.delete_receipt(db, blob_store, ctx, receipt_id)
