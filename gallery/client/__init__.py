# Client package (re-export for stable imports)
from .api_client import ApiError, GalleryApiClient
from .config import ClientSettings, get_client_settings
from .gallery import GalleryProjection, ViewMode
from .models import GalleryImage, NotificationEvent, NotificationKind, SelectedFile, UploadStatus, UploadTask
from .notifications import NotificationCenter
from .session import UploaderSession
from .uploads import BatchOutcome, TaskStore, UploadCoordinator

__all__ = [
    "ApiError",
    "BatchOutcome",
    "ClientSettings",
    "GalleryApiClient",
    "GalleryImage",
    "GalleryProjection",
    "NotificationCenter",
    "NotificationEvent",
    "NotificationKind",
    "SelectedFile",
    "TaskStore",
    "UploadCoordinator",
    "UploadStatus",
    "UploadTask",
    "UploaderSession",
    "ViewMode",
    "get_client_settings",
]
