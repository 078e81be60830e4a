from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backoffice.core.config import settings
from backoffice.core.errors import register_exception_handlers
from backoffice.db.base import Base
from backoffice.db.session import SessionLocal, engine, transaction
from backoffice.services.record_store import seed_expense_categories
from backoffice.utils.logging import configure_logging

from backoffice.api.expenses import router as expenses_router
from backoffice.api.properties import router as properties_router
from backoffice.api.receipts import router as receipts_router
from backoffice.api.work_orders import router as work_orders_router

import backoffice.models  # noqa: F401  (registers tables on Base.metadata)

configure_logging(settings.LOG_LEVEL)

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_BASE_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# DEV ONLY: production schema comes from alembic
if settings.is_development:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db, transaction(db):
        seed_expense_categories(db)

# ROUTERS
app.include_router(receipts_router, prefix="/api/receipts", tags=["receipts"])
app.include_router(expenses_router, prefix="/api/expenses", tags=["expenses"])
app.include_router(properties_router, prefix="/api/properties", tags=["properties"])
app.include_router(work_orders_router, prefix="/api/work-orders", tags=["work-orders"])


@app.get("/api/health")
def health():
    return {"status": "ok"}
