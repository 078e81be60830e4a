"""Read side for receipts: single receipt and the unprocessed queue."""

import uuid

from sqlalchemy.orm import Session

from backoffice.core.security import TenantContext
from backoffice.models import Receipt
from backoffice.schemas.receipt import ReceiptResponse, UnprocessedReceiptsResponse
from backoffice.services import record_store

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def to_receipt_response(receipt: Receipt, blob_store) -> ReceiptResponse:
    # URLs are presigned per response, never stored
    return ReceiptResponse(
        id=receipt.id,
        property_id=receipt.property_id,
        property_name=receipt.property_record.name if receipt.property_record else None,
        expense_id=receipt.expense_id,
        processed_at=receipt.processed_at,
        original_file_name=receipt.original_file_name,
        content_type=receipt.content_type or DEFAULT_CONTENT_TYPE,
        file_size_bytes=receipt.file_size_bytes,
        view_url=blob_store.get_photo_url(receipt.storage_key),
        thumbnail_url=(
            blob_store.get_thumbnail_url(receipt.thumbnail_storage_key)
            if receipt.thumbnail_storage_key
            else None
        ),
        created_at=receipt.created_at,
    )


def get_receipt(db: Session, blob_store, ctx: TenantContext, receipt_id: uuid.UUID) -> ReceiptResponse:
    receipt = record_store.get_receipt(db, ctx.account_id, receipt_id)
    return to_receipt_response(receipt, blob_store)


def list_unprocessed(db: Session, blob_store, ctx: TenantContext) -> UnprocessedReceiptsResponse:
    receipts = record_store.list_unprocessed_receipts(db, ctx.account_id)
    items = [to_receipt_response(r, blob_store) for r in receipts]
    return UnprocessedReceiptsResponse(items=items, total_count=len(items))
