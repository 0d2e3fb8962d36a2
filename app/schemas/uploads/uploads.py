# app/schemas/uploads.py
from pydantic import BaseModel, Field
from typing import Optional, Dict
from datetime import datetime

class Base64UploadRequest(BaseModel):
    image: str = Field(..., description="data:image/...;base64,... URL or bare base64")
    filename: str = "upload"

class UploadResponse(BaseModel):
    ref: str
    id: str
    inline: bool
    content_type: str
    size: int
    width: Optional[int] = None
    height: Optional[int] = None

class PreviewResponse(BaseModel):
    preview: str

class DeleteRequest(BaseModel):
    ref: str = Field(..., min_length=1)

class DeleteResponse(BaseModel):
    deleted: bool

class CacheEntryOut(BaseModel):
    id: str
    size: int
    created_at: datetime
    source_ref: str
    content_type: str
    inline: bool
    original_size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None

class UploadMetadataResponse(BaseModel):
    images: Dict[str, CacheEntryOut]
    count: int
