import base64
import logging
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from .api_client import ApiError
from .models import GalleryImage
from .notifications import NotificationCenter

logger = logging.getLogger(__name__)

_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


def format_file_size(size: int) -> str:
    if size <= 0:
        return "0 Bytes"
    exponent = 0
    while size >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(size / 1024 ** exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


class ViewMode(str, Enum):
    GRID = "grid"
    LIST = "list"


class GalleryApi(Protocol):
    async def list_images(self) -> List[GalleryImage]: ...

    async def delete_image(self, image_id: int) -> dict: ...


class GalleryProjection:
    """Read-only copy of the server's image list plus viewer state.

    The list is only ever replaced by a full refetch; nothing is inserted
    locally ahead of the server.
    """

    def __init__(self, api: GalleryApi, notifications: NotificationCenter, base_url: str = ""):
        self.api = api
        self.notifications = notifications
        self.base_url = base_url.rstrip("/")
        self.images: List[GalleryImage] = []
        self.view_mode = ViewMode.GRID
        self._viewer_index: Optional[int] = None

    async def refresh(self) -> bool:
        try:
            images = await self.api.list_images()
        except ApiError as e:
            logger.warning(f"Could not refresh gallery: {e}")
            return False
        self.images = list(images)
        self._clamp_viewer()
        return True

    # ---------- presentation ----------
    def toggle_view(self) -> ViewMode:
        self.view_mode = ViewMode.LIST if self.view_mode is ViewMode.GRID else ViewMode.GRID
        return self.view_mode

    def share_url(self, image: GalleryImage) -> str:
        return f"{self.base_url}/images/{image.id}"

    def rows(self) -> List[Dict[str, object]]:
        rows = []
        for image in self.images:
            row = {"id": image.id, "name": image.originalname, "url": self.share_url(image)}
            if self.view_mode is ViewMode.LIST:
                row["size"] = format_file_size(image.size)
                row["uploaded"] = image.upload_date.strftime("%b %d, %Y")
                row["type"] = image.mimetype
            rows.append(row)
        return rows

    # ---------- viewer ----------
    @property
    def viewing(self) -> Optional[GalleryImage]:
        if self._viewer_index is None:
            return None
        return self.images[self._viewer_index]

    def open(self, image_id: int) -> Optional[GalleryImage]:
        for index, image in enumerate(self.images):
            if image.id == image_id:
                self._viewer_index = index
                return image
        return None

    def next(self) -> Optional[GalleryImage]:
        if self._viewer_index is None:
            return None
        self._viewer_index = (self._viewer_index + 1) % len(self.images)
        return self.viewing

    def previous(self) -> Optional[GalleryImage]:
        if self._viewer_index is None:
            return None
        self._viewer_index = (self._viewer_index - 1) % len(self.images)
        return self.viewing

    def close_viewer(self) -> None:
        self._viewer_index = None

    def _clamp_viewer(self) -> None:
        if self._viewer_index is None:
            return
        if not self.images:
            self._viewer_index = None
        elif self._viewer_index >= len(self.images):
            self._viewer_index = len(self.images) - 1

    # ---------- actions ----------
    def download(self, image: GalleryImage, directory: Union[str, Path]) -> Path:
        """Rebuild the file from its stored base64 data and save it locally."""
        if not image.data:
            raise ValueError(f"Image {image.id} has no data loaded")
        target = Path(directory) / Path(image.originalname).name
        target.write_bytes(base64.b64decode(image.data))
        logger.info(f"Downloaded image {image.id} to {target}")
        return target

    async def delete(self, image_id: int) -> bool:
        try:
            await self.api.delete_image(image_id)
        except ApiError as e:
            self.notifications.error("Delete Failed", str(e) or "Failed to delete image. Please try again.")
            return False
        await self.refresh()
        self.notifications.success("Image Deleted", "Image has been deleted successfully")
        return True
