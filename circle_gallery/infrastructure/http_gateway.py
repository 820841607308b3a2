"""httpx-backed implementation of `GalleryGateway`.

Every response is a JSON envelope `{success, ...}`. A transport failure, a
non-2xx status or `success: false` is a failure. Listing calls log and return
empty results; mutating calls log and raise.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from circle_gallery.core.errors import GalleryError, ServerError, TransportError
from circle_gallery.core.models import (
    Album,
    FilterType,
    GalleryFilters,
    GalleryStats,
    Photo,
    PhotoPage,
    Scope,
)
from circle_gallery.core.normalizer import (
    normalize_album,
    normalize_albums,
    normalize_photo,
    normalize_photo_page,
    normalize_stats,
)
from circle_gallery.infrastructure.settings import GatewayConfig

# Entity fields the server accepts on album/photo updates, keyed by model name.
_ALBUM_UPDATE_FIELDS = {
    "name": "name",
    "description": "description",
    "color": "color",
    "parent_id": "parentId",
    "cover_photo_id": "coverPhotoId",
}
_PHOTO_UPDATE_FIELDS = {
    "title": "title",
    "filename": "filename",
    "metadata": "metadata",
}


def photo_query_params(filters: GalleryFilters, album_id: str | None = None) -> dict[str, str]:
    """Translate listing filters into query parameters.

    "favorites" is not a server filter: it is sent as `type=all&isFavorite=true`.
    """
    params: dict[str, str] = {}
    filter_type = FilterType(filters.type)
    if filter_type is FilterType.FAVORITES:
        params["type"] = FilterType.ALL.value
        params["isFavorite"] = "true"
    elif filter_type is not FilterType.ALL:
        params["type"] = filter_type.value
    if filters.search_query:
        params["search"] = filters.search_query
    if album_id:
        params["albumId"] = album_id
    return params


def _to_wire(updates: Mapping[str, Any], fields: Mapping[str, str]) -> dict[str, Any]:
    """Rename model field names to the API's camelCase; unknown keys pass through."""
    return {fields.get(key, key): value for key, value in updates.items()}


def _segment(value: str) -> str:
    """Escape an id for use as a single URL path segment."""
    return quote(str(value), safe="")


class HttpGalleryGateway:
    """Gallery API client.

    Holds no state besides the `httpx.AsyncClient`, so a single instance can be
    shared by concurrent calls.
    """

    def __init__(self, client: httpx.AsyncClient, base_path: str = "/gallery") -> None:
        self._client = client
        self._base = "/" + base_path.strip("/") if base_path.strip("/") else ""

    @classmethod
    def from_config(
        cls, config: GatewayConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> HttpGalleryGateway:
        """Build a gateway with its own client from `config`.

        Args:
            config: Connection settings.
            transport: Optional transport override (e.g. `httpx.MockTransport`).
        """
        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            headers=headers,
            transport=transport,
        )
        return cls(client, base_path=config.base_path)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpGalleryGateway:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def _scope_path(self, scope: Scope) -> str:
        if scope.is_personal:
            return f"{self._base}/personal"
        return f"{self._base}/circles/{_segment(scope.circle_id)}"

    async def _request(
        self,
        method: str,
        path: str,
        fallback_message: str,
        *,
        params: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded success envelope.

        Raises:
            TransportError: The request did not complete.
            ServerError: Non-2xx status, undecodable body or `success` not true.
        """
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as ex:
            raise TransportError(f"{fallback_message}: {ex}", operation=f"{method} {path}") from ex

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {}

        if response.is_error or not body.get("success"):
            message = body.get("error") or body.get("message") or fallback_message
            raise ServerError(
                str(message), status_code=response.status_code, operation=f"{method} {path}"
            )
        return body

    # ------------------------------------------------------------------ #
    # Listing (degrades to empty results)
    # ------------------------------------------------------------------ #

    async def fetch_photos(
        self, scope: Scope, filters: GalleryFilters, album_id: str | None = None
    ) -> PhotoPage:
        try:
            body = await self._request(
                "GET",
                f"{self._scope_path(scope)}/photos",
                f"Failed to fetch {scope} photos",
                params=photo_query_params(filters, album_id),
            )
            return normalize_photo_page(body)
        except GalleryError as ex:
            logger.error("Error fetching {} photos: {}", scope, ex.to_dict())
            return PhotoPage()

    async def fetch_albums(self, scope: Scope, parent_id: str | None = None) -> list[Album]:
        params = {"parentId": parent_id} if parent_id else None
        try:
            body = await self._request(
                "GET",
                f"{self._scope_path(scope)}/albums",
                f"Failed to fetch {scope} albums",
                params=params,
            )
            return normalize_albums(body.get("albums"))
        except GalleryError as ex:
            logger.error("Error fetching {} albums: {}", scope, ex.to_dict())
            return []

    async def get_stats(self, scope: Scope | None = None) -> GalleryStats:
        scope = scope or Scope.personal()
        params = None if scope.is_personal else {"circleId": str(scope.circle_id)}
        try:
            body = await self._request(
                "GET", f"{self._base}/stats", "Failed to get gallery stats", params=params
            )
            return normalize_stats(body.get("stats"))
        except GalleryError as ex:
            logger.error("Error getting {} gallery stats: {}", scope, ex.to_dict())
            return GalleryStats()

    # ------------------------------------------------------------------ #
    # Mutations (raise on failure)
    # ------------------------------------------------------------------ #

    async def _mutate(
        self, method: str, path: str, fallback_message: str, json: Any = None
    ) -> dict[str, Any]:
        try:
            return await self._request(method, path, fallback_message, json=json)
        except GalleryError as ex:
            logger.error("{} failed: {}", fallback_message, ex.to_dict())
            raise

    async def create_album(
        self,
        scope: Scope,
        name: str,
        description: str | None = None,
        parent_id: str | None = None,
        color: str | None = None,
        cover_photo_id: str | None = None,
    ) -> Album:
        payload: dict[str, Any] = {"name": name}
        for key, value in (
            ("description", description),
            ("parentId", parent_id),
            ("color", color),
            ("coverPhotoId", cover_photo_id),
        ):
            if value is not None:
                payload[key] = value
        body = await self._mutate(
            "POST", f"{self._scope_path(scope)}/albums", f"Failed to create {scope} album", payload
        )
        album = normalize_album(body.get("album") or {})
        logger.info("Created album {} ({}) in {}", album.id, album.name, scope)
        return album

    async def toggle_favorite(self, photo_id: str) -> bool:
        body = await self._mutate(
            "PATCH",
            f"{self._base}/photos/{_segment(photo_id)}/favorite",
            "Failed to toggle favorite",
        )
        return bool(body.get("isFavorite"))

    async def move_to_album(self, photo_id: str, album_id: str | None) -> Photo:
        body = await self._mutate(
            "POST",
            f"{self._base}/photos/{_segment(photo_id)}/move",
            "Failed to move photo",
            {"albumId": album_id},
        )
        return normalize_photo(body.get("photo") or {})

    async def update_photo(self, photo_id: str, updates: Mapping[str, Any]) -> Photo:
        body = await self._mutate(
            "PATCH",
            f"{self._base}/photos/{_segment(photo_id)}",
            "Failed to update photo",
            _to_wire(updates, _PHOTO_UPDATE_FIELDS),
        )
        return normalize_photo(body.get("photo") or {})

    async def delete_photo(self, photo_id: str) -> None:
        await self._mutate(
            "DELETE", f"{self._base}/photos/{_segment(photo_id)}", "Failed to delete photo"
        )

    async def set_album_cover(self, album_id: str, photo_id: str) -> None:
        await self._mutate(
            "PUT",
            f"{self._base}/albums/{_segment(album_id)}/cover",
            "Failed to set album cover",
            {"photoId": photo_id},
        )

    async def update_album(self, album_id: str, updates: Mapping[str, Any]) -> Album:
        body = await self._mutate(
            "PUT",
            f"{self._base}/albums/{_segment(album_id)}",
            "Failed to update album",
            _to_wire(updates, _ALBUM_UPDATE_FIELDS),
        )
        return normalize_album(body.get("album") or {})

    async def delete_album(self, album_id: str) -> None:
        await self._mutate(
            "DELETE", f"{self._base}/albums/{_segment(album_id)}", "Failed to delete album"
        )
