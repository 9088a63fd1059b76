# gallery/db/models/media/image.py
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Text, func
from sqlmodel import SQLModel, Field


class ImageRecord(SQLModel, table=True):
    __tablename__ = "images"
    id: Optional[int] = Field(default=None, primary_key=True)
    filename: str
    originalname: str
    mimetype: str
    size: int
    # Base64 encoded image bytes
    data: str = Field(sa_column=Column(Text, nullable=False))
    upload_date: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False, server_default=func.now(), index=True),
    )
