from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .models import GalleryImage, SelectedFile

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    def __init__(self, status_code: int, message: str, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GalleryApiClient:
    """Async client for the gallery HTTP API."""

    def __init__(self, base_url: str, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            r = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            # status 0: the request never produced a response
            raise ApiError(0, f"Network error: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
                msg = payload.get("message") or payload.get("detail") or r.text
            except ValueError:
                payload = r.text
                msg = r.text
            raise ApiError(r.status_code, msg, payload)
        if r.headers.get("content-type", "").startswith("application/json"):
            return r.json()
        return r.content

    # ---------- IMAGES ----------
    async def list_images(self) -> List[GalleryImage]:
        data = await self._request("GET", "/api/images")
        return [GalleryImage.from_json(item) for item in data]

    async def get_image(self, image_id: int) -> GalleryImage:
        data = await self._request("GET", f"/api/images/{image_id}")
        return GalleryImage.from_json(data)

    async def get_image_bytes(self, image_id: int) -> bytes:
        return await self._request("GET", f"/images/{image_id}")

    async def upload(self, files: Sequence[SelectedFile]) -> Dict[str, Any]:
        """Send every file as one multipart body under the ``files`` field."""
        multipart = [("files", (f.name, f.content, f.content_type)) for f in files]
        # No client-side deadline on uploads
        return await self._request("POST", "/api/images/upload", files=multipart, timeout=None)

    async def delete_image(self, image_id: int) -> Dict[str, Any]:
        return await self._request("DELETE", f"/api/images/{image_id}")

    # ---------- ASSISTANT ----------
    async def ask_assistant(self, query: str, include_image: bool = False) -> Dict[str, Any]:
        return await self._request("POST", "/api/ai/query", json={"query": query, "includeImage": include_image})

    async def welcome(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/ai/welcome")

    async def aclose(self) -> None:
        await self._client.aclose()
