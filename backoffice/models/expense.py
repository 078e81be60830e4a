import uuid

from sqlalchemy import (
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
)

from backoffice.db.base import Base, GUID, SoftDeleteMixin, TimestampMixin


class ExpenseCategory(Base):
    """Global Schedule E category, shared by every account."""

    __tablename__ = "expense_categories"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    schedule_e_line = Column(String(20), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)


class Expense(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "expenses"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    account_id = Column(GUID(), nullable=False)

    property_id = Column(
        GUID(),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
    )
    category_id = Column(
        GUID(),
        ForeignKey("expense_categories.id"),
        nullable=False,
    )
    work_order_id = Column(
        GUID(),
        ForeignKey("work_orders.id", ondelete="SET NULL"),
        nullable=True,
    )

    # mirrors receipts.expense_id; both sides are only ever written together
    # by services/receipt_linking_service.py
    receipt_id = Column(
        GUID(),
        ForeignKey("receipts.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )

    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String(500), nullable=True)

    created_by_user_id = Column(GUID(), nullable=False)

    __table_args__ = (
        Index("ix_expenses_account_id", "account_id"),
        Index("ix_expenses_property_id", "property_id"),
    )
