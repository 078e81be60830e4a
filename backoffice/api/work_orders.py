from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from backoffice.api.deps import get_current_context
from backoffice.api.photos import make_photo_router
from backoffice.core.security import TenantContext
from backoffice.db.session import get_db
from backoffice.models import OwnerKind
from backoffice.services import deletion_service

router = APIRouter(tags=["work-orders"])


@router.delete("/{work_order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_work_order(
    work_order_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_current_context),
):
    deletion_service.delete_work_order(db, ctx, work_order_id)


router.include_router(make_photo_router(OwnerKind.WORK_ORDER))
