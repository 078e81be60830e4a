"""Pytest configuration and shared fixtures."""

import os

# must be set before backoffice.core.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["ENV"] = "test"

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice.api.deps import get_storage, get_thumbnail_generator
from backoffice.core.constants import EXPENSE_CATEGORIES
from backoffice.core.errors import StorageError
from backoffice.core.security import TenantContext, create_access_token
from backoffice.db.base import Base
from backoffice.db.session import get_db
from backoffice.main import app
from backoffice.models import Expense, OwnerRef, Property, WorkOrder
from backoffice.services import upload_service
from backoffice.services.record_store import seed_expense_categories
from backoffice.storage.gateway import UploadUrlResult
from backoffice.storage.keys import RECEIPTS_NAMESPACE, build_storage_keys

REPAIRS_CATEGORY_ID = uuid.UUID(EXPENSE_CATEGORIES[9][0])


class FakeBlobStore:
    """In-memory stand-in for S3BlobStore. Set ``fail_deletes`` to simulate outages."""

    def __init__(self):
        self.deleted = []
        self.fail_deletes = False
        self.upload_names = []

    def generate_upload_url(
        self, account_id, namespace, content_type, extension, original_file_name=None, with_thumbnail=True
    ):
        self.upload_names.append(original_file_name)
        key, thumb = build_storage_keys(account_id, namespace, extension)
        return UploadUrlResult(
            upload_url=f"https://blobs.test/put/{key}",
            storage_key=key,
            thumbnail_storage_key=thumb if with_thumbnail else None,
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=15),
        )

    def presigned_put_url(self, storage_key, content_type):
        return f"https://blobs.test/put/{storage_key}"

    def presigned_download_url(self, storage_key):
        return f"https://blobs.test/get/{storage_key}"

    def get_photo_url(self, storage_key):
        return self.presigned_download_url(storage_key)

    def get_thumbnail_url(self, thumbnail_storage_key):
        return self.presigned_download_url(thumbnail_storage_key)

    def delete_file(self, storage_key):
        if self.fail_deletes:
            raise StorageError("blob store unavailable")
        self.deleted.append(storage_key)

    def delete_photo(self, storage_key, thumbnail_storage_key=None):
        self.delete_file(storage_key)
        if thumbnail_storage_key:
            self.delete_file(thumbnail_storage_key)


class FakeThumbnailer:
    def __init__(self):
        self.fail = False
        self.calls = []

    def generate(self, storage_key, thumbnail_storage_key, content_type):
        self.calls.append(storage_key)
        if self.fail:
            return None
        return thumbnail_storage_key


# ---------------------------------------------------------------------------
# DATABASE
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    session = Session()
    seed_expense_categories(session)
    session.commit()
    yield session
    session.close()


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def thumbnailer():
    return FakeThumbnailer()


@pytest.fixture
def ctx():
    return TenantContext(account_id=uuid.uuid4(), user_id=uuid.uuid4())


@pytest.fixture
def other_ctx():
    return TenantContext(account_id=uuid.uuid4(), user_id=uuid.uuid4())


# ---------------------------------------------------------------------------
# RECORD FACTORIES
# ---------------------------------------------------------------------------

@pytest.fixture
def make_property(db):
    def _make(ctx, name="Oak Street Duplex"):
        prop = Property(id=uuid.uuid4(), account_id=ctx.account_id, name=name)
        db.add(prop)
        db.commit()
        return prop

    return _make


@pytest.fixture
def make_work_order(db):
    def _make(ctx, property_id, description="Leaking faucet"):
        work_order = WorkOrder(
            id=uuid.uuid4(),
            account_id=ctx.account_id,
            property_id=property_id,
            description=description,
        )
        db.add(work_order)
        db.commit()
        return work_order

    return _make


@pytest.fixture
def make_expense(db):
    def _make(ctx, property_id, amount="125.00"):
        expense = Expense(
            id=uuid.uuid4(),
            account_id=ctx.account_id,
            property_id=property_id,
            category_id=REPAIRS_CATEGORY_ID,
            amount=Decimal(amount),
            date=date(2026, 3, 14),
            created_by_user_id=ctx.user_id,
        )
        db.add(expense)
        db.commit()
        return expense

    return _make


@pytest.fixture
def make_receipt(db, blob_store, thumbnailer):
    """Receipt created through the real confirmation path."""

    def _make(ctx, property_id=None, content_type="image/jpeg"):
        upload = blob_store.generate_upload_url(ctx.account_id, RECEIPTS_NAMESPACE, content_type, ".jpg")
        return upload_service.confirm_receipt_upload(
            db,
            thumbnailer,
            ctx,
            storage_key=upload.storage_key,
            content_type=content_type,
            file_size_bytes=2048,
            original_file_name="receipt.jpg",
            property_id=property_id,
        )

    return _make


@pytest.fixture
def confirm_photo(db, blob_store, thumbnailer):
    def _confirm(ctx, owner: OwnerRef, name="photo.jpg"):
        upload = blob_store.generate_upload_url(
            ctx.account_id, owner.kind.storage_namespace, "image/jpeg", ".jpg"
        )
        return upload_service.confirm_photo_upload(
            db,
            thumbnailer,
            ctx,
            owner,
            storage_key=upload.storage_key,
            thumbnail_storage_key=upload.thumbnail_storage_key,
            content_type="image/jpeg",
            file_size_bytes=4096,
            original_file_name=name,
        )

    return _confirm


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def client(db, blob_store, thumbnailer):
    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_storage] = lambda: blob_store
    app.dependency_overrides[get_thumbnail_generator] = lambda: thumbnailer
    return TestClient(app)


@pytest.fixture
def auth_headers(ctx):
    token = create_access_token({"sub": ctx.user_id, "account_id": ctx.account_id})
    return {"Authorization": f"Bearer {token}"}
