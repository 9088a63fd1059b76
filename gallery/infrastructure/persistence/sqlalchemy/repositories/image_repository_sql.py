from typing import List, Optional
from sqlalchemy.engine import Engine
from sqlmodel import Session, select
import logging

from .....db.models import ImageRecord
from .....application.ports.image_repo import ImageRepository, ImageRecordDto
from .....schemas.images.image import ImageCreate

logger = logging.getLogger(__name__)


class SqlImageRepository(ImageRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def _to_dto(self, row: ImageRecord) -> ImageRecordDto:
        return ImageRecordDto(
            id=row.id,
            filename=row.filename,
            originalname=row.originalname,
            mimetype=row.mimetype,
            size=row.size,
            data=row.data,
            upload_date=row.upload_date,
        )

    def create(self, image: ImageCreate) -> ImageRecordDto:
        return self.create_many([image])[0]

    def create_many(self, images: List[ImageCreate]) -> List[ImageRecordDto]:
        with Session(self.engine) as session:
            rows = [ImageRecord(**image.model_dump()) for image in images]
            try:
                session.add_all(rows)
                session.commit()
            except Exception:
                session.rollback()
                raise
            for row in rows:
                session.refresh(row)
            logger.info(f"Stored {len(rows)} image(s): ids={[row.id for row in rows]}")
            return [self._to_dto(row) for row in rows]

    def list_all(self) -> List[ImageRecordDto]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(ImageRecord).order_by(ImageRecord.upload_date.desc(), ImageRecord.id.desc())
            ).all()
            return [self._to_dto(row) for row in rows]

    def get(self, image_id: int) -> Optional[ImageRecordDto]:
        with Session(self.engine) as session:
            row = session.get(ImageRecord, image_id)
            return self._to_dto(row) if row else None

    def delete(self, image_id: int) -> bool:
        with Session(self.engine) as session:
            row = session.get(ImageRecord, image_id)
            if not row:
                return False
            session.delete(row)
            session.commit()
            logger.info(f"Deleted image {image_id}")
            return True
