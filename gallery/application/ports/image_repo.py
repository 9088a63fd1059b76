from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from ...schemas.images.image import ImageCreate


@dataclass(frozen=True)
class ImageRecordDto:
    id: int
    filename: str
    originalname: str
    mimetype: str
    size: int
    data: str
    upload_date: datetime


class ImageRepository(Protocol):
    def create(self, image: ImageCreate) -> ImageRecordDto:
        ...

    def create_many(self, images: List[ImageCreate]) -> List[ImageRecordDto]:
        """Insert every image or none of them."""
        ...

    def list_all(self) -> List[ImageRecordDto]:
        """All records, newest first."""
        ...

    def get(self, image_id: int) -> Optional[ImageRecordDto]:
        ...

    def delete(self, image_id: int) -> bool:
        ...
