import logging
import uuid

from sqlalchemy.orm import Session

from backoffice.core.errors import ValidationError
from backoffice.core.security import TenantContext
from backoffice.db.session import transaction
from backoffice.models import Expense
from backoffice.schemas.expense import ExpenseCreate
from backoffice.services import record_store
from backoffice.services.receipt_linking_service import attach, flush_link
from backoffice.utils.log_sanitizer import mask_id

logger = logging.getLogger(__name__)


def create_expense(db: Session, ctx: TenantContext, payload: ExpenseCreate) -> Expense:
    with transaction(db):
        record_store.get_property(db, ctx.account_id, payload.property_id)
        record_store.get_category(db, payload.category_id)

        if payload.work_order_id is not None:
            work_order = record_store.get_work_order(db, ctx.account_id, payload.work_order_id)
            if work_order.property_id != payload.property_id:
                raise ValidationError(
                    "Work order must belong to the same property as the expense",
                    errors={"work_order_id": ["Work order belongs to a different property"]},
                )

        receipt = None
        if payload.receipt_id is not None:
            receipt = record_store.get_receipt(db, ctx.account_id, payload.receipt_id, for_update=True)

        expense = Expense(
            id=uuid.uuid4(),
            account_id=ctx.account_id,
            property_id=payload.property_id,
            category_id=payload.category_id,
            work_order_id=payload.work_order_id,
            amount=payload.amount,
            date=payload.date,
            description=payload.description.strip() if payload.description else None,
            created_by_user_id=ctx.user_id,
        )
        db.add(expense)
        db.flush()

        if receipt is not None:
            attach(expense, receipt)
            flush_link(db, expense, receipt)

    logger.info(
        "Expense %s created (receipt=%s)",
        mask_id(expense.id),
        mask_id(expense.receipt_id),
    )
    return expense


def get_expense(db: Session, ctx: TenantContext, expense_id: uuid.UUID) -> Expense:
    return record_store.get_expense(db, ctx.account_id, expense_id)
