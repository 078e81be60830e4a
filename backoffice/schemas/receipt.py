from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from backoffice.schemas.upload import ConfirmUploadRequest


class ConfirmReceiptRequest(ConfirmUploadRequest):
    property_id: Optional[UUID] = None


class ReceiptResponse(BaseModel):
    id: UUID
    property_id: Optional[UUID] = None
    property_name: Optional[str] = None
    expense_id: Optional[UUID] = None
    processed_at: Optional[datetime] = None

    original_file_name: Optional[str] = None
    content_type: str
    file_size_bytes: Optional[int] = None

    view_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    created_at: datetime


class UnprocessedReceiptsResponse(BaseModel):
    items: List[ReceiptResponse]
    total_count: int


class ProcessReceiptRequest(BaseModel):
    property_id: UUID
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    date: date
    category_id: UUID
    description: Optional[str] = Field(default=None, max_length=500)


class ProcessReceiptResponse(BaseModel):
    expense_id: UUID
