from pydantic import BaseModel
from datetime import datetime
from typing import List, Optional
from uuid import UUID


class PhotoResponse(BaseModel):
    id: UUID
    owner_type: str
    owner_id: UUID
    is_primary: bool
    display_order: int

    original_file_name: Optional[str] = None
    content_type: str
    file_size_bytes: int

    photo_url: Optional[str] = None
    thumbnail_url: Optional[str] = None

    created_at: datetime


class ReorderPhotosRequest(BaseModel):
    photo_ids: List[UUID]
