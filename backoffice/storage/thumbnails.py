"""Thumbnail generation with Pillow (PDF first page rendered with PyMuPDF)."""

import io
import logging
from typing import Optional

import fitz  # PyMuPDF
import requests
from PIL import Image, ImageOps

from backoffice.core.config import settings
from backoffice.core.constants import THUMBNAIL_CONTENT_TYPE
from backoffice.utils.log_sanitizer import mask_storage_key

logger = logging.getLogger(__name__)

THUMBNAIL_QUALITY = 85


def pdf_first_page(pdf_bytes: bytes, dpi: int = 100) -> Image.Image:
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        zoom = dpi / 72.0
        page = doc.load_page(0)
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
        return Image.frombytes("RGB", [pix.width, pix.height], pix.samples)
    finally:
        doc.close()


def make_thumbnail(content: bytes, content_type: str, max_size: int = None) -> bytes:
    max_size = max_size or settings.THUMBNAIL_MAX_SIZE

    if content_type == "application/pdf":
        image = pdf_first_page(content)
    else:
        image = Image.open(io.BytesIO(content))
        image = ImageOps.exif_transpose(image)

    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    image.thumbnail((max_size, max_size))

    out = io.BytesIO()
    image.save(out, format="JPEG", quality=THUMBNAIL_QUALITY)
    return out.getvalue()


class Thumbnailer:
    """Downloads an uploaded original, shrinks it and uploads the thumbnail.

    Generation is best-effort: any failure is logged and ``None`` is
    returned so the caller can persist the record without a thumbnail.
    """

    def __init__(self, blob_store, http=None, max_size: int = None):
        self.blob_store = blob_store
        self.http = http or requests
        self.max_size = max_size or settings.THUMBNAIL_MAX_SIZE

    def generate(
        self,
        storage_key: str,
        thumbnail_storage_key: str,
        content_type: str,
    ) -> Optional[str]:
        try:
            download_url = self.blob_store.presigned_download_url(storage_key)
            resp = self.http.get(download_url, timeout=settings.HTTP_TIMEOUT)
            resp.raise_for_status()

            thumbnail = make_thumbnail(resp.content, content_type, self.max_size)

            upload_url = self.blob_store.presigned_put_url(
                thumbnail_storage_key, THUMBNAIL_CONTENT_TYPE
            )
            put = self.http.put(
                upload_url,
                data=thumbnail,
                headers={"Content-Type": THUMBNAIL_CONTENT_TYPE},
                timeout=settings.HTTP_TIMEOUT,
            )
            put.raise_for_status()
        except Exception as e:
            logger.warning(
                "Failed to generate thumbnail for %s, continuing without thumbnail: %s",
                mask_storage_key(storage_key),
                e,
            )
            return None

        logger.info("Thumbnail generated: %s", mask_storage_key(thumbnail_storage_key))
        return thumbnail_storage_key
