from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_context
from backoffice.core.security import TenantContext
from backoffice.db.session import get_db
from backoffice.schemas.expense import ExpenseCreate, ExpenseResponse, LinkReceiptRequest
from backoffice.services import deletion_service, expense_service, receipt_linking_service

router = APIRouter(tags=["expenses"])


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    return expense_service.create_expense(db, ctx, payload)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    return expense_service.get_expense(db, ctx, expense_id)


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(
    expense_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    deletion_service.delete_expense(db, ctx, expense_id)


# -------------------------
# RECEIPT LINK
# -------------------------
@router.post("/{expense_id}/link-receipt", response_model=ExpenseResponse)
def link_receipt(
    expense_id: UUID,
    payload: LinkReceiptRequest,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    return receipt_linking_service.link_receipt_to_expense(db, ctx, expense_id, payload.receipt_id)


@router.delete("/{expense_id}/receipt", response_model=ExpenseResponse)
def unlink_receipt(
    expense_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    return receipt_linking_service.unlink_receipt(db, ctx, expense_id)
