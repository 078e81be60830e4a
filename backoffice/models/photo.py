import uuid

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Enum,
    Index,
    Integer,
    String,
    text,
)

from backoffice.db.base import Base, GUID, SoftDeleteMixin, TimestampMixin
from backoffice.models.owner import OwnerKind, OwnerRef


class Photo(TimestampMixin, SoftDeleteMixin, Base):
    """Property or work-order photo.

    ``(account_id, owner_type, owner_id)`` is the partition every primary and
    display-order rule is evaluated in.
    """

    __tablename__ = "photos"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    account_id = Column(GUID(), nullable=False)

    owner_type = Column(
        Enum(
            OwnerKind,
            name="photo_owner_type",
            values_callable=lambda kinds: [k.value for k in kinds],
        ),
        nullable=False,
    )
    owner_id = Column(GUID(), nullable=False)

    storage_key = Column(String(500), nullable=False)
    thumbnail_storage_key = Column(String(500), nullable=True)
    original_file_name = Column(String(255), nullable=True)
    content_type = Column(String(100), nullable=False)
    file_size_bytes = Column(BigInteger, nullable=False)

    is_primary = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0)

    created_by_user_id = Column(GUID(), nullable=False)

    __table_args__ = (
        Index("ix_photos_owner", "account_id", "owner_type", "owner_id"),
        # at most one live primary photo per owner, enforced by the database
        Index(
            "uq_photos_primary_per_owner",
            "account_id",
            "owner_type",
            "owner_id",
            unique=True,
            postgresql_where=text("is_primary AND deleted_at IS NULL"),
            sqlite_where=text("is_primary = 1 AND deleted_at IS NULL"),
        ),
    )

    @property
    def owner(self) -> OwnerRef:
        return OwnerRef(self.owner_type, self.owner_id)
