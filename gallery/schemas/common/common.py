# gallery/schemas/common/common.py
from pydantic import BaseModel
from typing import List, Optional


class MessageResponse(BaseModel):
    message: str


class ValidationErrorItem(BaseModel):
    # filename for rejected uploads, field for malformed requests
    filename: Optional[str] = None
    field: Optional[str] = None
    message: str


class ErrorResponse(BaseModel):
    message: str
    errors: Optional[List[ValidationErrorItem]] = None


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    storage: str
    assistant_available: bool
    timestamp: str
