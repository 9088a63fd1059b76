import mimetypes
import random
import string
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_ID_ALPHABET[rem])
    return "".join(reversed(digits)) or "0"


def generate_id() -> str:
    """Client-side token: millisecond clock in base 36 plus random suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=10))
    return _base36(int(time.time() * 1000)) + suffix


class UploadStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, eq=False)
class SelectedFile:
    """A file picked for upload; compared by identity, like a browser File."""

    name: str
    content: bytes
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "SelectedFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            name=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


@dataclass(frozen=True)
class UploadTask:
    id: str
    source: SelectedFile
    progress: int = 0
    status: UploadStatus = UploadStatus.IDLE
    error: Optional[str] = None
    # Bumped on every retry; progress ticks from an older attempt are ignored
    attempt: int = 0


@dataclass(frozen=True)
class NotificationEvent:
    id: str
    kind: NotificationKind
    title: str
    message: str
    auto_dismiss: bool = True


@dataclass(frozen=True)
class GalleryImage:
    id: int
    filename: str
    originalname: str
    mimetype: str
    size: int
    upload_date: datetime
    data: Optional[str] = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "GalleryImage":
        return cls(
            id=int(payload["id"]),
            filename=payload["filename"],
            originalname=payload["originalname"],
            mimetype=payload["mimetype"],
            size=int(payload["size"]),
            upload_date=datetime.fromisoformat(payload["uploadDate"]),
            data=payload.get("data"),
        )
