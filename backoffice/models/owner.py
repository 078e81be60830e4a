"""Polymorphic owner reference for photos."""

import enum
import uuid
from dataclasses import dataclass


class OwnerKind(str, enum.Enum):
    PROPERTY = "property"
    WORK_ORDER = "work_order"

    @property
    def storage_namespace(self) -> str:
        # second segment of {account_id}/{namespace}/{year}/... storage keys
        return _NAMESPACES[self]

    @property
    def label(self) -> str:
        return _LABELS[self]


_NAMESPACES = {
    OwnerKind.PROPERTY: "properties",
    OwnerKind.WORK_ORDER: "workorders",
}

_LABELS = {
    OwnerKind.PROPERTY: "Property",
    OwnerKind.WORK_ORDER: "WorkOrder",
}


@dataclass(frozen=True)
class OwnerRef:
    kind: OwnerKind
    id: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.kind, OwnerKind):
            object.__setattr__(self, "kind", OwnerKind(self.kind))
        if not isinstance(self.id, uuid.UUID):
            object.__setattr__(self, "id", uuid.UUID(str(self.id)))

    @classmethod
    def for_property(cls, property_id) -> "OwnerRef":
        return cls(OwnerKind.PROPERTY, property_id)

    @classmethod
    def for_work_order(cls, work_order_id) -> "OwnerRef":
        return cls(OwnerKind.WORK_ORDER, work_order_id)

    def __str__(self) -> str:
        return f"{self.kind.label} {self.id}"
