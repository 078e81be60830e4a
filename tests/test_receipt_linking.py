import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest

from backoffice.core.constants import EXPENSE_CATEGORIES
from backoffice.core.errors import ConflictError, NotFoundError, ValidationError
from backoffice.models import Expense, Receipt
from backoffice.schemas.expense import ExpenseCreate
from backoffice.services import expense_service, receipt_linking_service, receipt_service

CATEGORY_ID = uuid.UUID(EXPENSE_CATEGORIES[0][0])


def assert_linked(expense, receipt):
    assert expense.receipt_id == receipt.id
    assert receipt.expense_id == expense.id
    assert receipt.processed_at is not None


def assert_unlinked(expense, receipt):
    assert expense.receipt_id is None
    assert receipt.expense_id is None
    assert receipt.processed_at is None


# -------------------------------------------------
# PROCESS
# -------------------------------------------------

def test_process_receipt_creates_linked_expense(db, ctx, make_property, make_receipt):
    prop = make_property(ctx)
    receipt = make_receipt(ctx)

    expense_id = receipt_linking_service.process_receipt(
        db,
        ctx,
        receipt.id,
        property_id=prop.id,
        amount=Decimal("99.99"),
        date=date(2026, 1, 15),
        category_id=CATEGORY_ID,
        description="  Plumber visit  ",
    )

    expense = db.get(Expense, expense_id)
    db.refresh(receipt)
    assert_linked(expense, receipt)
    assert expense.amount == Decimal("99.99")
    assert expense.description == "Plumber visit"
    assert receipt.property_id == prop.id


def test_process_already_processed_receipt(db, ctx, make_property, make_receipt):
    prop = make_property(ctx)
    receipt = make_receipt(ctx)
    kwargs = dict(property_id=prop.id, amount=Decimal("10"), date=date(2026, 1, 1), category_id=CATEGORY_ID)
    receipt_linking_service.process_receipt(db, ctx, receipt.id, **kwargs)

    with pytest.raises(ConflictError, match="is already processed"):
        receipt_linking_service.process_receipt(db, ctx, receipt.id, **kwargs)

    assert db.query(Expense).count() == 1


def test_process_with_unknown_category_writes_nothing(db, ctx, make_property, make_receipt):
    prop = make_property(ctx)
    receipt = make_receipt(ctx)

    with pytest.raises(NotFoundError):
        receipt_linking_service.process_receipt(
            db, ctx, receipt.id,
            property_id=prop.id, amount=Decimal("10"), date=date(2026, 1, 1), category_id=uuid.uuid4(),
        )

    db.refresh(receipt)
    assert receipt.processed_at is None
    assert db.query(Expense).count() == 0


def test_process_with_other_accounts_property(db, ctx, other_ctx, make_property, make_receipt):
    foreign = make_property(other_ctx)
    receipt = make_receipt(ctx)

    with pytest.raises(NotFoundError):
        receipt_linking_service.process_receipt(
            db, ctx, receipt.id,
            property_id=foreign.id, amount=Decimal("10"), date=date(2026, 1, 1), category_id=CATEGORY_ID,
        )


# -------------------------------------------------
# LINK / UNLINK
# -------------------------------------------------

def test_link_and_unlink_keep_both_sides_in_step(db, ctx, make_property, make_expense, make_receipt):
    prop = make_property(ctx)
    expense = make_expense(ctx, prop.id)
    receipt = make_receipt(ctx)

    receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, receipt.id)
    assert_linked(expense, receipt)
    assert receipt.property_id == prop.id

    receipt_linking_service.unlink_receipt(db, ctx, expense.id)
    assert_unlinked(expense, receipt)

    receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, receipt.id)
    assert_linked(expense, receipt)


def test_link_keeps_existing_receipt_property(db, ctx, make_property, make_expense, make_receipt):
    expense_prop = make_property(ctx, name="Expense home")
    receipt_prop = make_property(ctx, name="Receipt home")
    expense = make_expense(ctx, expense_prop.id)
    receipt = make_receipt(ctx, property_id=receipt_prop.id)

    receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, receipt.id)

    assert receipt.property_id == receipt_prop.id


def test_link_expense_that_already_has_a_receipt(db, ctx, make_property, make_expense, make_receipt):
    expense = make_expense(ctx, make_property(ctx).id)
    first = make_receipt(ctx)
    second = make_receipt(ctx)
    receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, first.id)

    with pytest.raises(ConflictError) as exc:
        receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, second.id)

    assert str(expense.id) in exc.value.message
    assert "already has a linked receipt" in exc.value.message
    db.refresh(second)
    assert second.expense_id is None
    assert second.processed_at is None


def test_link_receipt_already_linked_elsewhere(db, ctx, make_property, make_expense, make_receipt):
    prop = make_property(ctx)
    first = make_expense(ctx, prop.id)
    second = make_expense(ctx, prop.id)
    receipt = make_receipt(ctx)
    receipt_linking_service.link_receipt_to_expense(db, ctx, first.id, receipt.id)

    with pytest.raises(ConflictError, match="is already processed"):
        receipt_linking_service.link_receipt_to_expense(db, ctx, second.id, receipt.id)

    db.refresh(second)
    assert second.receipt_id is None


def test_relinking_same_pair_is_a_conflict(db, ctx, make_property, make_expense, make_receipt):
    expense = make_expense(ctx, make_property(ctx).id)
    receipt = make_receipt(ctx)
    receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, receipt.id)

    with pytest.raises(ConflictError):
        receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, receipt.id)

    assert_linked(expense, receipt)


def test_link_with_missing_receipt_names_it(db, ctx, make_property, make_expense):
    expense = make_expense(ctx, make_property(ctx).id)

    with pytest.raises(NotFoundError) as exc:
        receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, uuid.uuid4())

    assert exc.value.entity == "Receipt"


def test_link_across_accounts_is_not_found(db, ctx, other_ctx, make_property, make_expense, make_receipt):
    expense = make_expense(ctx, make_property(ctx).id)
    foreign_receipt = make_receipt(other_ctx)

    with pytest.raises(NotFoundError):
        receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, foreign_receipt.id)


def test_unlink_without_receipt(db, ctx, make_property, make_expense):
    expense = make_expense(ctx, make_property(ctx).id)

    with pytest.raises(NotFoundError) as exc:
        receipt_linking_service.unlink_receipt(db, ctx, expense.id)

    assert "no receipt linked to this expense" in exc.value.message.lower()


def test_link_unlink_sequence_never_diverges(db, ctx, make_property, make_expense, make_receipt):
    prop = make_property(ctx)
    expenses = [make_expense(ctx, prop.id) for _ in range(2)]
    receipts = [make_receipt(ctx) for _ in range(2)]
    steps = [
        ("link", 0, 0), ("link", 1, 1), ("link", 0, 1), ("unlink", 0, None),
        ("link", 0, 1), ("unlink", 1, None), ("link", 1, 0), ("unlink", 0, None),
    ]

    for op, e, r in steps:
        try:
            if op == "link":
                receipt_linking_service.link_receipt_to_expense(db, ctx, expenses[e].id, receipts[r].id)
            else:
                receipt_linking_service.unlink_receipt(db, ctx, expenses[e].id)
        except (ConflictError, NotFoundError):
            pass

        db.expire_all()
        for receipt in db.query(Receipt).all():
            if receipt.expense_id is None:
                assert receipt.processed_at is None
                assert db.query(Expense).filter(Expense.receipt_id == receipt.id).count() == 0
            else:
                assert receipt.processed_at is not None
                assert db.get(Expense, receipt.expense_id).receipt_id == receipt.id


# -------------------------------------------------
# EXPENSE CREATION
# -------------------------------------------------

def test_create_expense_with_receipt_links_it(db, ctx, make_property, make_receipt):
    prop = make_property(ctx)
    receipt = make_receipt(ctx)

    expense = expense_service.create_expense(
        db,
        ctx,
        ExpenseCreate(
            property_id=prop.id,
            category_id=CATEGORY_ID,
            amount=Decimal("42.50"),
            date=date(2026, 2, 1),
            receipt_id=receipt.id,
        ),
    )

    assert_linked(expense, receipt)


def test_create_expense_with_work_order_from_other_property(db, ctx, make_property, make_work_order):
    prop = make_property(ctx)
    elsewhere = make_work_order(ctx, make_property(ctx, name="Elsewhere").id)

    with pytest.raises(ValidationError):
        expense_service.create_expense(
            db,
            ctx,
            ExpenseCreate(
                property_id=prop.id,
                category_id=CATEGORY_ID,
                amount=Decimal("42.50"),
                date=date(2026, 2, 1),
                work_order_id=elsewhere.id,
            ),
        )

    assert db.query(Expense).count() == 0


# -------------------------------------------------
# UNPROCESSED QUEUE
# -------------------------------------------------

def test_unprocessed_queue_newest_first(db, blob_store, ctx, make_property, make_expense, make_receipt):
    prop = make_property(ctx, name="Maple Court")
    older = make_receipt(ctx, property_id=prop.id)
    newer = make_receipt(ctx)
    linked = make_receipt(ctx)
    newer.created_at = older.created_at.replace(year=older.created_at.year + 1)
    db.commit()
    receipt_linking_service.link_receipt_to_expense(db, ctx, make_expense(ctx, prop.id).id, linked.id)

    queue = receipt_service.list_unprocessed(db, blob_store, ctx)

    assert queue.total_count == 2
    assert [item.id for item in queue.items] == [newer.id, older.id]
    assert queue.items[1].property_name == "Maple Court"
    assert queue.items[0].property_name is None
    assert queue.items[0].view_url.endswith(newer.storage_key)


# -------------------------------------------------
# STORAGE-LEVEL UNIQUENESS
# -------------------------------------------------

def test_duplicate_expense_side_is_rejected_by_storage(db, ctx, make_property, make_expense, make_receipt):
    prop = make_property(ctx)
    first, second = make_expense(ctx, prop.id), make_expense(ctx, prop.id)
    receipt = make_receipt(ctx)
    receipt_linking_service.link_receipt_to_expense(db, ctx, first.id, receipt.id)

    with patch.object(receipt_linking_service, "_ensure_linkable"):
        with pytest.raises(ConflictError):
            receipt_linking_service.link_receipt_to_expense(db, ctx, second.id, receipt.id)

    db.expire_all()
    assert db.get(Expense, second.id).receipt_id is None
    assert db.get(Receipt, receipt.id).expense_id == first.id
    assert db.query(Expense).filter(Expense.receipt_id == receipt.id).count() == 1


def test_duplicate_receipt_side_is_rejected_by_storage(db, ctx, make_property, make_expense, make_receipt):
    expense = make_expense(ctx, make_property(ctx).id)
    first, second = make_receipt(ctx), make_receipt(ctx)
    receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, first.id)

    with patch.object(receipt_linking_service, "_ensure_linkable"):
        with pytest.raises(ConflictError):
            receipt_linking_service.link_receipt_to_expense(db, ctx, expense.id, second.id)

    db.expire_all()
    assert db.get(Expense, expense.id).receipt_id == first.id
    unlinked = db.get(Receipt, second.id)
    assert unlinked.expense_id is None
    assert unlinked.processed_at is None
