import enum
import uuid

from sqlalchemy import Column, Enum, ForeignKey, Index, String, Text

from backoffice.db.base import Base, GUID, SoftDeleteMixin, TimestampMixin


class WorkOrderStatus(str, enum.Enum):
    reported = "reported"
    assigned = "assigned"
    completed = "completed"


class WorkOrder(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "work_orders"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    account_id = Column(GUID(), nullable=False)

    property_id = Column(
        GUID(),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
    )

    description = Column(Text, nullable=False)
    status = Column(
        Enum(WorkOrderStatus, name="work_order_status"),
        default=WorkOrderStatus.reported,
        nullable=False,
    )
    vendor_name = Column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_work_orders_account_id", "account_id"),
    )
