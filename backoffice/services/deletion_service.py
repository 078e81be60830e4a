"""Soft deletes for receipts and their owning business records."""

import logging
import uuid

from sqlalchemy.orm import Session

from backoffice.core.errors import ConflictError, StorageError
from backoffice.core.security import TenantContext
from backoffice.db.base import utcnow
from backoffice.db.session import transaction
from backoffice.models import Expense
from backoffice.services import record_store
from backoffice.services.receipt_linking_service import detach
from backoffice.utils.log_sanitizer import mask_id, mask_storage_key

logger = logging.getLogger(__name__)


def delete_receipt(db: Session, blob_store, ctx: TenantContext, receipt_id: uuid.UUID) -> None:
    """Soft delete a receipt, then remove its blobs best-effort.

    The soft delete is committed first and stands even when blob removal
    fails; the failure is only logged. A linked expense is released in the
    same transaction. Locks are taken expense first, then receipt, the same
    order as every other link operation.
    """
    with transaction(db):
        linked_expense_id = record_store.get_receipt(db, ctx.account_id, receipt_id).expense_id

        expense = None
        if linked_expense_id is not None:
            expense = (
                db.query(Expense)
                .filter(Expense.id == linked_expense_id, Expense.account_id == ctx.account_id)
                .with_for_update()
                .populate_existing()
                .first()
            )

        receipt = record_store.get_receipt(db, ctx.account_id, receipt_id, for_update=True)

        if receipt.expense_id != linked_expense_id:
            # relinked between the unlocked read and the lock
            raise ConflictError("Receipt", receipt.id, "was modified concurrently")

        if receipt.expense_id is not None:
            if expense is not None and expense.receipt_id == receipt.id:
                detach(expense, receipt)
            else:
                receipt.expense_id = None
                receipt.processed_at = None

        receipt.deleted_at = utcnow()

    logger.info("Receipt %s soft-deleted", mask_id(receipt.id))

    for key in (receipt.storage_key, receipt.thumbnail_storage_key):
        if not key:
            continue
        try:
            blob_store.delete_file(key)
        except StorageError as e:
            logger.warning(
                "Failed to delete blob %s for receipt %s: %s",
                mask_storage_key(key),
                mask_id(receipt.id),
                e,
            )


def delete_expense(db: Session, ctx: TenantContext, expense_id: uuid.UUID) -> None:
    with transaction(db):
        expense = record_store.get_expense(db, ctx.account_id, expense_id, for_update=True)
        # linked receipt stays processed; the link is left as is
        expense.deleted_at = utcnow()

    logger.info("Expense %s soft-deleted", mask_id(expense_id))


def delete_property(db: Session, ctx: TenantContext, property_id: uuid.UUID) -> None:
    with transaction(db):
        prop = record_store.get_property(db, ctx.account_id, property_id, for_update=True)
        prop.deleted_at = utcnow()

    logger.info("Property %s soft-deleted", mask_id(property_id))


def delete_work_order(db: Session, ctx: TenantContext, work_order_id: uuid.UUID) -> None:
    with transaction(db):
        work_order = record_store.get_work_order(db, ctx.account_id, work_order_id, for_update=True)
        work_order.deleted_at = utcnow()

    logger.info("WorkOrder %s soft-deleted", mask_id(work_order_id))
