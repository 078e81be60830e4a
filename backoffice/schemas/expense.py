from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID


class ExpenseCreate(BaseModel):
    property_id: UUID
    category_id: UUID
    amount: Decimal = Field(gt=0, max_digits=12, decimal_places=2)
    date: date
    description: Optional[str] = Field(default=None, max_length=500)
    work_order_id: Optional[UUID] = None
    receipt_id: Optional[UUID] = None


class ExpenseResponse(BaseModel):
    id: UUID
    property_id: UUID
    category_id: UUID
    work_order_id: Optional[UUID] = None
    receipt_id: Optional[UUID] = None

    amount: Decimal
    date: date
    description: Optional[str] = None

    created_at: datetime

    class Config:
        from_attributes = True


class LinkReceiptRequest(BaseModel):
    receipt_id: UUID
