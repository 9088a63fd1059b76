# gallery/schemas/images/image.py
import base64
import binascii
from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...validation import ACCEPTED_IMAGE_TYPES


class ImageCreate(BaseModel):
    """Validated fields of a new image row; id and upload date are store-assigned."""

    filename: str = Field(min_length=1, max_length=255)
    originalname: str = Field(min_length=1, max_length=255)
    mimetype: str
    size: int = Field(gt=0)
    data: str = Field(min_length=1)

    @field_validator("mimetype")
    @classmethod
    def check_mimetype(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in ACCEPTED_IMAGE_TYPES:
            raise ValueError("Only JPEG, PNG, and GIF images are supported")
        return value

    @model_validator(mode="after")
    def check_size_matches_data(self):
        try:
            decoded = base64.b64decode(self.data, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("data must be base64 encoded")
        if len(decoded) != self.size:
            raise ValueError(f"size {self.size} does not match data length {len(decoded)}")
        return self


class ImageSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    filename: str
    originalname: str
    mimetype: str
    size: int
    upload_date: datetime = Field(alias="uploadDate")


class ImageResponse(ImageSummary):
    data: str


class UploadResponse(BaseModel):
    message: str
    images: List[ImageSummary]
