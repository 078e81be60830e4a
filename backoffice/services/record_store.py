"""Attachment Record Store: tenant-scoped reads over owners and attachments.

Every function takes ``account_id`` explicitly and puts it in the WHERE
clause; soft-deleted rows are never returned. ``for_update=True`` takes a
row lock (``SELECT ... FOR UPDATE``) and refreshes any instance already in
the session, which is how per-owner and per-link operations are serialized.
"""

import uuid
from typing import List, Union

from sqlalchemy import func
from sqlalchemy.orm import Query, Session, joinedload

from backoffice.core.constants import EXPENSE_CATEGORIES
from backoffice.core.errors import NotFoundError
from backoffice.models import (
    Expense,
    ExpenseCategory,
    OwnerKind,
    OwnerRef,
    Photo,
    Property,
    Receipt,
    WorkOrder,
)

Owner = Union[Property, WorkOrder]

_OWNER_MODELS = {
    OwnerKind.PROPERTY: Property,
    OwnerKind.WORK_ORDER: WorkOrder,
}


def _locked(query: Query, for_update: bool) -> Query:
    if for_update:
        return query.with_for_update().populate_existing()
    return query


def _get_scoped(db: Session, model, entity: str, account_id, entity_id, for_update: bool):
    query = db.query(model).filter(
        model.id == entity_id,
        model.account_id == account_id,
        model.deleted_at.is_(None),
    )
    row = _locked(query, for_update).first()
    if row is None:
        raise NotFoundError(entity, entity_id)
    return row


# --------------------------------------------------
# OWNERS
# --------------------------------------------------

def get_property(db: Session, account_id, property_id, for_update: bool = False) -> Property:
    return _get_scoped(db, Property, "Property", account_id, property_id, for_update)


def get_work_order(db: Session, account_id, work_order_id, for_update: bool = False) -> WorkOrder:
    return _get_scoped(db, WorkOrder, "WorkOrder", account_id, work_order_id, for_update)


def get_owner(db: Session, account_id, owner: OwnerRef, for_update: bool = False) -> Owner:
    model = _OWNER_MODELS[owner.kind]
    return _get_scoped(db, model, owner.kind.label, account_id, owner.id, for_update)


def lock_owner(db: Session, account_id, owner: OwnerRef) -> Owner:
    return get_owner(db, account_id, owner, for_update=True)


def get_category(db: Session, category_id) -> ExpenseCategory:
    category = db.query(ExpenseCategory).filter(ExpenseCategory.id == category_id).first()
    if category is None:
        raise NotFoundError("ExpenseCategory", category_id)
    return category


# --------------------------------------------------
# EXPENSES / RECEIPTS
# --------------------------------------------------

def get_expense(db: Session, account_id, expense_id, for_update: bool = False) -> Expense:
    return _get_scoped(db, Expense, "Expense", account_id, expense_id, for_update)


def get_receipt(db: Session, account_id, receipt_id, for_update: bool = False) -> Receipt:
    return _get_scoped(db, Receipt, "Receipt", account_id, receipt_id, for_update)


def list_unprocessed_receipts(db: Session, account_id) -> List[Receipt]:
    return (
        db.query(Receipt)
        .options(joinedload(Receipt.property_record))
        .filter(
            Receipt.account_id == account_id,
            Receipt.deleted_at.is_(None),
            Receipt.processed_at.is_(None),
        )
        .order_by(Receipt.created_at.desc())
        .all()
    )


# --------------------------------------------------
# PHOTOS
# --------------------------------------------------

def _owner_photos(db: Session, account_id, owner: OwnerRef) -> Query:
    return db.query(Photo).filter(
        Photo.account_id == account_id,
        Photo.owner_type == owner.kind,
        Photo.owner_id == owner.id,
        Photo.deleted_at.is_(None),
    )


def find_photo(
    db: Session,
    account_id,
    owner: OwnerRef,
    photo_id: uuid.UUID,
    for_update: bool = False,
) -> Photo:
    query = _owner_photos(db, account_id, owner).filter(Photo.id == photo_id)
    photo = _locked(query, for_update).first()
    if photo is None:
        raise NotFoundError("Photo", photo_id)
    return photo


def list_photos(db: Session, account_id, owner: OwnerRef, for_update: bool = False) -> List[Photo]:
    query = _owner_photos(db, account_id, owner).order_by(
        Photo.display_order, Photo.created_at
    )
    return _locked(query, for_update).all()


def count_photos(db: Session, account_id, owner: OwnerRef) -> int:
    return _owner_photos(db, account_id, owner).count()


def max_display_order(db: Session, account_id, owner: OwnerRef) -> int:
    """Highest display order for the owner, or -1 when it has no photos."""
    value = (
        _owner_photos(db, account_id, owner)
        .with_entities(func.max(Photo.display_order))
        .scalar()
    )
    return -1 if value is None else value


# --------------------------------------------------
# REFERENCE DATA
# --------------------------------------------------

def seed_expense_categories(db: Session) -> int:
    """Insert any missing Schedule E categories. Returns how many were added."""
    existing = {row.id for row in db.query(ExpenseCategory.id).all()}
    added = 0
    for category_id, name, line, sort_order in EXPENSE_CATEGORIES:
        category_id = uuid.UUID(category_id)
        if category_id in existing:
            continue
        db.add(ExpenseCategory(id=category_id, name=name, schedule_e_line=line, sort_order=sort_order))
        added += 1
    db.flush()
    return added
