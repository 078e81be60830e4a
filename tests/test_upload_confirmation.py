import uuid

import pytest

from backoffice.core.constants import MAX_UPLOAD_SIZE_BYTES
from backoffice.core.errors import NotFoundError, UnauthorizedError, ValidationError
from backoffice.models import OwnerRef, Photo
from backoffice.services import deletion_service, photo_service, upload_service
from backoffice.storage.keys import RECEIPTS_NAMESPACE


# -------------------------------------------------
# UPLOAD URLS
# -------------------------------------------------

def test_photo_upload_url_uses_owner_namespace(db, blob_store, ctx, make_property):
    prop = make_property(ctx)

    result = upload_service.generate_photo_upload_url(
        db, blob_store, ctx, OwnerRef.for_property(prop.id), "image/png", 1024
    )

    assert result.storage_key.startswith(f"{ctx.account_id}/properties/")
    assert result.storage_key.endswith(".png")
    assert result.thumbnail_storage_key.endswith("_thumb.jpg")


def test_upload_url_passes_file_name_to_store(db, blob_store, ctx, make_property):
    prop = make_property(ctx)

    upload_service.generate_photo_upload_url(
        db, blob_store, ctx, OwnerRef.for_property(prop.id), "image/jpeg", 1024, original_file_name="porch.jpg"
    )
    upload_service.generate_receipt_upload_url(
        db, blob_store, ctx, "application/pdf", 2048, original_file_name="invoice.pdf"
    )

    assert blob_store.upload_names == ["porch.jpg", "invoice.pdf"]


def test_upload_url_rejects_unsupported_type(db, blob_store, ctx, make_property):
    prop = make_property(ctx)

    with pytest.raises(ValidationError) as exc:
        upload_service.generate_photo_upload_url(
            db, blob_store, ctx, OwnerRef.for_property(prop.id), "application/pdf", 1024
        )

    assert "content_type" in exc.value.errors


@pytest.mark.parametrize("size", [0, MAX_UPLOAD_SIZE_BYTES + 1])
def test_upload_url_rejects_bad_size(db, blob_store, ctx, size):
    with pytest.raises(ValidationError):
        upload_service.generate_receipt_upload_url(db, blob_store, ctx, "application/pdf", size)


def test_upload_url_for_missing_owner(db, blob_store, ctx):
    with pytest.raises(NotFoundError):
        upload_service.generate_photo_upload_url(
            db, blob_store, ctx, OwnerRef.for_work_order(uuid.uuid4()), "image/jpeg", 1024
        )


# -------------------------------------------------
# RECEIPT CONFIRMATION
# -------------------------------------------------

def test_confirm_receipt_creates_unprocessed_record(ctx, make_receipt, thumbnailer):
    receipt = make_receipt(ctx)

    assert receipt.account_id == ctx.account_id
    assert receipt.processed_at is None
    assert receipt.expense_id is None
    assert receipt.thumbnail_storage_key.endswith("_thumb.jpg")
    assert thumbnailer.calls == [receipt.storage_key]


def test_confirm_receipt_with_other_accounts_key(db, thumbnailer, ctx, other_ctx):
    key = f"{other_ctx.account_id}/{RECEIPTS_NAMESPACE}/2026/{uuid.uuid4()}.jpg"

    with pytest.raises(UnauthorizedError):
        upload_service.confirm_receipt_upload(db, thumbnailer, ctx, key, "image/jpeg", 100)

    assert thumbnailer.calls == []


def test_confirm_receipt_thumbnail_failure_is_not_fatal(ctx, make_receipt, thumbnailer):
    thumbnailer.fail = True

    receipt = make_receipt(ctx)

    assert receipt.id is not None
    assert receipt.thumbnail_storage_key is None


# -------------------------------------------------
# PHOTO CONFIRMATION
# -------------------------------------------------

def test_first_photo_is_primary_and_later_ones_append(ctx, make_property, confirm_photo):
    owner = OwnerRef.for_property(make_property(ctx).id)

    a = confirm_photo(ctx, owner)
    b = confirm_photo(ctx, owner)
    c = confirm_photo(ctx, owner)

    assert [a.display_order, b.display_order, c.display_order] == [0, 1, 2]
    assert [a.is_primary, b.is_primary, c.is_primary] == [True, False, False]


def test_confirm_photo_with_other_accounts_key(db, thumbnailer, ctx, other_ctx, make_property):
    owner = OwnerRef.for_property(make_property(ctx).id)
    key = f"{other_ctx.account_id}/properties/2026/{uuid.uuid4()}.jpg"

    with pytest.raises(UnauthorizedError):
        upload_service.confirm_photo_upload(db, thumbnailer, ctx, owner, key, "image/jpeg", 100)

    assert db.query(Photo).count() == 0


def test_confirm_photo_with_malformed_key(db, thumbnailer, ctx, make_property):
    owner = OwnerRef.for_property(make_property(ctx).id)

    with pytest.raises(ValidationError):
        upload_service.confirm_photo_upload(db, thumbnailer, ctx, owner, "photos/abc.jpg", "image/jpeg", 100)


def test_confirm_photo_for_owner_in_other_account(db, thumbnailer, ctx, other_ctx, make_property):
    foreign = make_property(other_ctx)
    key = f"{ctx.account_id}/properties/2026/{uuid.uuid4()}.jpg"

    with pytest.raises(NotFoundError):
        upload_service.confirm_photo_upload(
            db, thumbnailer, ctx, OwnerRef.for_property(foreign.id), key, "image/jpeg", 100
        )


def test_confirm_photo_for_soft_deleted_owner(
    db, thumbnailer, ctx, make_property, make_work_order
):
    work_order = make_work_order(ctx, make_property(ctx).id)
    deletion_service.delete_work_order(db, ctx, work_order.id)
    key = f"{ctx.account_id}/workorders/2026/{uuid.uuid4()}.jpg"

    with pytest.raises(NotFoundError):
        upload_service.confirm_photo_upload(
            db, thumbnailer, ctx, OwnerRef.for_work_order(work_order.id), key, "image/jpeg", 100
        )


def test_missing_thumbnail_is_retried_on_list(db, blob_store, thumbnailer, ctx, make_property, confirm_photo):
    owner = OwnerRef.for_property(make_property(ctx).id)
    thumbnailer.fail = True
    photo = confirm_photo(ctx, owner)
    assert photo.thumbnail_storage_key is None

    thumbnailer.fail = False
    listed = photo_service.list_photos(db, blob_store, thumbnailer, ctx, owner)

    assert listed[0].thumbnail_url is not None
    db.refresh(photo)
    assert photo.thumbnail_storage_key.endswith("_thumb.jpg")
