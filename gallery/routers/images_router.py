from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
import logging

from ..application.services.image_service import ImageService
from ..schemas.images.image import ImageResponse, ImageSummary, UploadResponse
from ..schemas.common.common import ErrorResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Images"],
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


def get_image_service(request: Request) -> ImageService:
    app_settings = request.app.state.settings
    return ImageService(
        image_repo=request.app.state.image_repo,
        max_file_size=app_settings.MAX_FILE_SIZE,
        max_files=app_settings.MAX_FILES_PER_UPLOAD,
    )


def parse_image_id(raw_id: str) -> int:
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        raise HTTPException(status_code=400, detail="Invalid image ID")


@router.get("/api/images", response_model=List[ImageResponse])
def list_images(image_service: ImageService = Depends(get_image_service)):
    try:
        return image_service.list_images()
    except Exception as e:
        logger.error(f"Error fetching images: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch images")


@router.get("/api/images/{image_id}", response_model=ImageResponse)
def get_image(image_id: str, image_service: ImageService = Depends(get_image_service)):
    parsed_id = parse_image_id(image_id)
    try:
        return image_service.get_image(parsed_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error fetching image {parsed_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch image")


@router.get("/images/{image_id}", response_class=Response)
def serve_image(image_id: str, image_service: ImageService = Depends(get_image_service)):
    parsed_id = parse_image_id(image_id)
    try:
        image = image_service.get_image(parsed_id)
        content = image_service.decode_image(image)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error serving image {parsed_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to serve image")
    return Response(
        content=content,
        media_type=image.mimetype,
        headers={"Content-Disposition": f'inline; filename="{image.filename}"'},
    )


@router.post("/api/images/upload", status_code=201, response_model=UploadResponse)
async def upload_images(
    files: Optional[List[UploadFile]] = File(default=None),
    image_service: ImageService = Depends(get_image_service),
):
    try:
        incoming = await image_service.read_uploads(files or [])
        saved = await run_in_threadpool(image_service.upload_batch, incoming)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error uploading images: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to upload images")

    logger.info(f"Uploaded {len(saved)} image(s)")
    return UploadResponse(
        message=f"Successfully uploaded {len(saved)} image(s)",
        images=[ImageSummary.model_validate(image) for image in saved],
    )


@router.delete("/api/images/{image_id}", response_model=MessageResponse)
def delete_image(image_id: str, image_service: ImageService = Depends(get_image_service)):
    parsed_id = parse_image_id(image_id)
    try:
        image_service.delete_image(parsed_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting image {parsed_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete image")
    return MessageResponse(message="Image deleted successfully")
