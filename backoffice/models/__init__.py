from backoffice.models.owner import OwnerKind, OwnerRef
from backoffice.models.property import Property
from backoffice.models.work_order import WorkOrder, WorkOrderStatus
from backoffice.models.expense import Expense, ExpenseCategory
from backoffice.models.receipt import Receipt
from backoffice.models.photo import Photo

__all__ = [
    "OwnerKind",
    "OwnerRef",
    "Property",
    "WorkOrder",
    "WorkOrderStatus",
    "Expense",
    "ExpenseCategory",
    "Receipt",
    "Photo",
]
