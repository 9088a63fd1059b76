import logging
from typing import List, Optional, Sequence

from ..validation import ValidationResult, describe_limit, partition
from .api_client import GalleryApiClient
from .config import ClientSettings, get_client_settings
from .gallery import GalleryProjection
from .models import SelectedFile
from .notifications import NotificationCenter
from .uploads import UploadCoordinator

logger = logging.getLogger(__name__)


class UploaderSession:
    """One user's uploader: selection, uploads, gallery and banners together."""

    def __init__(self, api: GalleryApiClient, settings: Optional[ClientSettings] = None):
        self.settings = settings or get_client_settings()
        self.api = api
        self.notifications = NotificationCenter(dismiss_after=self.settings.NOTIFICATION_DISMISS_S)
        self.gallery = GalleryProjection(api, self.notifications, base_url=api.base_url)
        self.uploads = UploadCoordinator(
            api,
            self.notifications,
            on_success=self._after_upload,
            tick_interval=self.settings.PROGRESS_TICK_S,
            progress_step=self.settings.PROGRESS_STEP,
            progress_cap=self.settings.PROGRESS_CAP,
            removal_delay=self.settings.SUCCESS_REMOVAL_DELAY_S,
        )
        self.selected: List[SelectedFile] = []

    @classmethod
    def connect(cls, settings: Optional[ClientSettings] = None) -> "UploaderSession":
        settings = settings or get_client_settings()
        api = GalleryApiClient(settings.API_URL, timeout=settings.REQUEST_TIMEOUT_S)
        return cls(api, settings)

    async def start(self) -> None:
        await self.gallery.refresh()

    # ---------- selection ----------
    def select(self, files: Sequence[SelectedFile]) -> ValidationResult:
        result = partition(files, self.settings.MAX_FILE_SIZE)
        notice = result.notice()
        if notice == "rejected":
            self.notifications.error(
                "Invalid files",
                "None of the selected files are supported. Please upload JPEG, PNG, or GIF images.",
            )
        elif notice == "partial":
            self.notifications.error(
                "Unsupported file type",
                f"{len(result.rejected)} file(s) were rejected. "
                f"Only JPEG, PNG, and GIF images up to {describe_limit(self.settings.MAX_FILE_SIZE)} are supported.",
            )
        self.selected = self.selected + result.accepted
        return result

    def remove(self, file: SelectedFile) -> None:
        self.selected = [f for f in self.selected if f is not file]

    def clear(self) -> None:
        self.selected = []

    # ---------- uploads ----------
    def upload(self) -> List[str]:
        if not self.selected:
            return []
        return self.uploads.start_batch(self.selected)

    def retry(self, task_id: str) -> bool:
        return self.uploads.retry(task_id)

    async def _after_upload(self, uploaded: List[SelectedFile]) -> None:
        done = {id(f) for f in uploaded}
        self.selected = [f for f in self.selected if id(f) not in done]
        await self.gallery.refresh()

    # ---------- gallery ----------
    async def delete_image(self, image_id: int) -> bool:
        return await self.gallery.delete(image_id)

    async def close(self) -> None:
        self.uploads.close()
        self.notifications.close()
        await self.api.aclose()
