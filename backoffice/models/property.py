import uuid

from sqlalchemy import Column, String, Index

from backoffice.db.base import Base, GUID, SoftDeleteMixin, TimestampMixin


class Property(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "properties"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    account_id = Column(GUID(), nullable=False)

    name = Column(String(255), nullable=False)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(2), nullable=True)
    zip_code = Column(String(10), nullable=True)

    __table_args__ = (
        Index("ix_properties_account_id", "account_id"),
    )
