# app/schemas/common.py
from pydantic import BaseModel
from typing import Optional

class ErrorResponse(BaseModel):
    success: bool = False
    data: None = None
    error: str
    kind: Optional[str] = None

class MessageResponse(BaseModel):
    message: str
