import base64
import logging
from dataclasses import dataclass
from typing import List, Optional

from fastapi import HTTPException, UploadFile
from pydantic import ValidationError

from ..ports.image_repo import ImageRepository, ImageRecordDto
from ...schemas.images.image import ImageCreate
from ...validation import (
    MAX_FILE_SIZE,
    MAX_FILES_PER_UPLOAD,
    normalize_content_type,
    normalize_filename,
    partition,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    """A fully read multipart part."""

    name: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


class UploadRejected(HTTPException):
    def __init__(self, message: str, errors: Optional[List[dict]] = None):
        super().__init__(status_code=400, detail={"message": message, "errors": errors or []})


@dataclass
class ImageService:
    image_repo: ImageRepository
    max_file_size: int = MAX_FILE_SIZE
    max_files: int = MAX_FILES_PER_UPLOAD

    async def read_uploads(self, files: List[UploadFile]) -> List[IncomingFile]:
        incoming: List[IncomingFile] = []
        for uploaded in files:
            content = await uploaded.read()
            incoming.append(IncomingFile(
                name=uploaded.filename or "upload",
                content_type=uploaded.content_type or "application/octet-stream",
                content=content,
            ))
        return incoming

    def upload_batch(self, files: List[IncomingFile]) -> List[ImageRecordDto]:
        """Validate the whole batch, then persist it in one go.

        Any invalid file fails the request and nothing is stored.
        """
        if not files:
            raise UploadRejected("No files were uploaded")
        if len(files) > self.max_files:
            raise UploadRejected(f"Too many files (max {self.max_files} per upload)")

        result = partition(files, self.max_file_size)
        if result.rejected:
            logger.warning(f"Rejected upload batch: {result.errors()}")
            raise UploadRejected("Invalid image data", result.errors())

        records: List[ImageCreate] = []
        for incoming in files:
            try:
                records.append(ImageCreate(
                    filename=normalize_filename(incoming.name),
                    originalname=incoming.name,
                    mimetype=normalize_content_type(incoming.content_type),
                    size=incoming.size,
                    data=base64.b64encode(incoming.content).decode("ascii"),
                ))
            except ValidationError as e:
                errors = [
                    {"filename": incoming.name, "message": err["msg"]}
                    for err in e.errors()
                ]
                logger.warning(f"Validation error: {errors}")
                raise UploadRejected("Invalid image data", errors)

        return self.image_repo.create_many(records)

    def list_images(self) -> List[ImageRecordDto]:
        return self.image_repo.list_all()

    def get_image(self, image_id: int) -> ImageRecordDto:
        image = self.image_repo.get(image_id)
        if not image:
            raise HTTPException(status_code=404, detail="Image not found")
        return image

    def decode_image(self, image: ImageRecordDto) -> bytes:
        if not image.data:
            raise HTTPException(status_code=404, detail="Image data not found")
        return base64.b64decode(image.data)

    def delete_image(self, image_id: int) -> None:
        if not self.image_repo.delete(image_id):
            raise HTTPException(status_code=404, detail="Image not found")
        logger.info(f"Image {image_id} deleted")
