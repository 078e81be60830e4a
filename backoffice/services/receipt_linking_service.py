"""Receipt Linking Engine.

Keeps ``expenses.receipt_id`` and ``receipts.expense_id`` in step. Both
columns are only written here, always together and inside one transaction.
Both rows are locked before the precondition checks, and both columns carry
a unique constraint, so of two concurrent links on the same expense or
receipt exactly one commits and the other gets ``ConflictError``.
"""

import logging
import uuid
from datetime import date as date_type
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.core.errors import ConflictError, NotFoundError
from backoffice.core.security import TenantContext
from backoffice.db.base import utcnow
from backoffice.db.session import transaction
from backoffice.models import Expense, Receipt
from backoffice.services import record_store
from backoffice.utils.log_sanitizer import mask_id

logger = logging.getLogger(__name__)

EXPENSE_ALREADY_LINKED = "already has a linked receipt"
RECEIPT_ALREADY_PROCESSED = "is already processed"


def _ensure_linkable(expense: Expense, receipt: Receipt) -> None:
    if expense.receipt_id is not None:
        raise ConflictError("Expense", expense.id, EXPENSE_ALREADY_LINKED)
    if receipt.is_processed or receipt.expense_id is not None:
        raise ConflictError("Receipt", receipt.id, RECEIPT_ALREADY_PROCESSED)


def attach(expense: Expense, receipt: Receipt) -> None:
    """Write both sides of the link. Callers hold the transaction."""
    _ensure_linkable(expense, receipt)

    expense.receipt_id = receipt.id
    receipt.expense_id = expense.id
    receipt.processed_at = utcnow()

    # a receipt uploaded without a property inherits the expense's
    if receipt.property_id is None:
        receipt.property_id = expense.property_id


def detach(expense: Expense, receipt: Optional[Receipt]) -> None:
    """Clear both sides of the link. Callers hold the transaction."""
    expense.receipt_id = None
    if receipt is not None:
        receipt.expense_id = None
        receipt.processed_at = None


def flush_link(db: Session, expense: Expense, receipt: Receipt) -> None:
    try:
        db.flush()
    except IntegrityError as e:
        # the unique constraint caught a concurrent link the locks did not
        raise ConflictError("Receipt", receipt.id, RECEIPT_ALREADY_PROCESSED, original_error=e)


# --------------------------------------------------
# LINK / UNLINK
# --------------------------------------------------

def link_receipt_to_expense(
    db: Session,
    ctx: TenantContext,
    expense_id: uuid.UUID,
    receipt_id: uuid.UUID,
) -> Expense:
    with transaction(db):
        expense = record_store.get_expense(db, ctx.account_id, expense_id, for_update=True)
        receipt = record_store.get_receipt(db, ctx.account_id, receipt_id, for_update=True)

        attach(expense, receipt)
        flush_link(db, expense, receipt)

    logger.info(
        "Linked receipt %s to expense %s",
        mask_id(receipt.id),
        mask_id(expense.id),
    )
    return expense


def unlink_receipt(db: Session, ctx: TenantContext, expense_id: uuid.UUID) -> Expense:
    with transaction(db):
        expense = record_store.get_expense(db, ctx.account_id, expense_id, for_update=True)
        if expense.receipt_id is None:
            raise NotFoundError("Receipt", message="No receipt linked to this expense")

        receipt = (
            db.query(Receipt)
            .filter(Receipt.id == expense.receipt_id, Receipt.account_id == ctx.account_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        receipt_id = expense.receipt_id
        detach(expense, receipt)

    logger.info(
        "Unlinked receipt %s from expense %s",
        mask_id(receipt_id),
        mask_id(expense.id),
    )
    return expense


# --------------------------------------------------
# PROCESS (create expense + link)
# --------------------------------------------------

def process_receipt(
    db: Session,
    ctx: TenantContext,
    receipt_id: uuid.UUID,
    property_id: uuid.UUID,
    amount: Decimal,
    date: date_type,
    category_id: uuid.UUID,
    description: Optional[str] = None,
) -> uuid.UUID:
    """Create an expense from an unprocessed receipt and link the two.

    Returns the new expense id.
    """
    with transaction(db):
        receipt = record_store.get_receipt(db, ctx.account_id, receipt_id, for_update=True)
        if receipt.is_processed or receipt.expense_id is not None:
            raise ConflictError("Receipt", receipt.id, RECEIPT_ALREADY_PROCESSED)

        record_store.get_property(db, ctx.account_id, property_id)
        record_store.get_category(db, category_id)

        expense = Expense(
            id=uuid.uuid4(),
            account_id=ctx.account_id,
            property_id=property_id,
            category_id=category_id,
            amount=amount,
            date=date,
            description=description.strip() if description else None,
            created_by_user_id=ctx.user_id,
        )
        db.add(expense)
        # the expense row must exist before receipts.expense_id can point at it
        db.flush()

        receipt.property_id = property_id
        attach(expense, receipt)
        flush_link(db, expense, receipt)

    logger.info(
        "Processed receipt %s into expense %s",
        mask_id(receipt.id),
        mask_id(expense.id),
    )
    return expense.id
