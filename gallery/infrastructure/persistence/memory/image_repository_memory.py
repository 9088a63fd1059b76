from datetime import datetime
from typing import Dict, List, Optional

from ....application.ports.image_repo import ImageRepository, ImageRecordDto
from ....schemas.images.image import ImageCreate


class InMemoryImageRepository(ImageRepository):
    """Process-local store for development and tests; lost on restart."""

    def __init__(self) -> None:
        self._store: Dict[int, ImageRecordDto] = {}
        self._next_id = 1

    def create(self, image: ImageCreate) -> ImageRecordDto:
        return self.create_many([image])[0]

    def create_many(self, images: List[ImageCreate]) -> List[ImageRecordDto]:
        # Build every record before touching the store
        now = datetime.utcnow()
        created = [
            ImageRecordDto(id=self._next_id + offset, upload_date=now, **image.model_dump())
            for offset, image in enumerate(images)
        ]
        for record in created:
            self._store[record.id] = record
        self._next_id += len(created)
        return created

    def list_all(self) -> List[ImageRecordDto]:
        return sorted(self._store.values(), key=lambda r: (r.upload_date, r.id), reverse=True)

    def get(self, image_id: int) -> Optional[ImageRecordDto]:
        return self._store.get(image_id)

    def delete(self, image_id: int) -> bool:
        return self._store.pop(image_id, None) is not None
