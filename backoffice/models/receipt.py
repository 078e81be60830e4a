import uuid

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
)
from sqlalchemy.orm import relationship

from backoffice.db.base import Base, GUID, SoftDeleteMixin, TimestampMixin


class Receipt(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "receipts"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    account_id = Column(GUID(), nullable=False)

    property_id = Column(
        GUID(),
        ForeignKey("properties.id", ondelete="SET NULL"),
        nullable=True,
    )

    # mirrors expenses.receipt_id (see models/expense.py)
    expense_id = Column(
        GUID(),
        ForeignKey(
            "expenses.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_receipts_expense_id",
        ),
        nullable=True,
        unique=True,
    )
    processed_at = Column(DateTime(timezone=True), nullable=True)

    storage_key = Column(String(500), nullable=False)
    thumbnail_storage_key = Column(String(500), nullable=True)
    original_file_name = Column(String(255), nullable=True)
    content_type = Column(String(100), nullable=True)
    file_size_bytes = Column(BigInteger, nullable=True)

    created_by_user_id = Column(GUID(), nullable=False)

    property_record = relationship("Property", lazy="select")

    __table_args__ = (
        Index("ix_receipts_account_id_processed_at", "account_id", "processed_at"),
    )

    @property
    def is_processed(self) -> bool:
        return self.processed_at is not None
