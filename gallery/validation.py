"""Upload rules shared by the API and the client.

Both sides call :func:`partition` so a file the browser-side filter lets
through is judged by exactly the same rules on the server.
"""
import re
from dataclasses import dataclass, field
from typing import Generic, List, Optional, Protocol, Sequence, TypeVar

ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif")
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
MAX_FILES_PER_UPLOAD = 10

_WHITESPACE = re.compile(r"\s+")


class Candidate(Protocol):
    """Anything with a declared name, content type and byte size."""

    @property
    def name(self) -> str: ...

    @property
    def content_type(self) -> str: ...

    @property
    def size(self) -> int: ...


C = TypeVar("C", bound=Candidate)


@dataclass(frozen=True)
class Rejection(Generic[C]):
    candidate: C
    reason: str


@dataclass
class ValidationResult(Generic[C]):
    accepted: List[C] = field(default_factory=list)
    rejected: List[Rejection[C]] = field(default_factory=list)

    def notice(self) -> Optional[str]:
        """``"rejected"`` when nothing survived, ``"partial"`` when some did."""
        if not self.rejected:
            return None
        return "partial" if self.accepted else "rejected"

    def errors(self) -> List[dict]:
        return [
            {"filename": r.candidate.name, "message": r.reason}
            for r in self.rejected
        ]


def describe_limit(max_file_size: int) -> str:
    if max_file_size >= 1024 * 1024 and max_file_size % (1024 * 1024) == 0:
        return f"{max_file_size // (1024 * 1024)}MB"
    return f"{max_file_size} bytes"


def normalize_content_type(content_type: Optional[str]) -> str:
    """``Image/JPEG; charset=x`` -> ``image/jpeg``"""
    return (content_type or "").split(";", 1)[0].strip().lower()


def is_acceptable_image_type(content_type: Optional[str]) -> bool:
    return normalize_content_type(content_type) in ACCEPTED_IMAGE_TYPES


def rejection_reason(candidate: Candidate, max_file_size: int = MAX_FILE_SIZE) -> Optional[str]:
    if not is_acceptable_image_type(candidate.content_type):
        return "Only images (JPEG, PNG, GIF) are allowed"
    if candidate.size <= 0:
        return "File is empty"
    if candidate.size > max_file_size:
        return f"File too large (max {describe_limit(max_file_size)})"
    return None


def partition(candidates: Sequence[C], max_file_size: int = MAX_FILE_SIZE) -> ValidationResult[C]:
    result: ValidationResult[C] = ValidationResult()
    for candidate in candidates:
        reason = rejection_reason(candidate, max_file_size)
        if reason is None:
            result.accepted.append(candidate)
        else:
            result.rejected.append(Rejection(candidate, reason))
    return result


def normalize_filename(original_name: str) -> str:
    return _WHITESPACE.sub("_", original_name).lower()
