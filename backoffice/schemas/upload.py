from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from uuid import UUID


class UploadUrlRequest(BaseModel):
    content_type: str
    file_size_bytes: int
    original_file_name: Optional[str] = None


class ReceiptUploadUrlRequest(UploadUrlRequest):
    property_id: Optional[UUID] = None


class UploadUrlResponse(BaseModel):
    upload_url: str
    storage_key: str
    thumbnail_storage_key: Optional[str] = None
    expires_at: datetime

    class Config:
        from_attributes = True


class ConfirmUploadRequest(BaseModel):
    storage_key: str
    thumbnail_storage_key: Optional[str] = None
    content_type: str
    file_size_bytes: int
    original_file_name: Optional[str] = None
