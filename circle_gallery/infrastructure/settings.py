"""Settings access helpers for JSON-based configuration."""

from __future__ import annotations

from dataclasses import dataclass
import json
import os
from pathlib import Path
from typing import Any

from circle_gallery.core.models import GalleryFilters, GalleryMode

TOKEN_ENV_VAR = "CIRCLE_GALLERY_TOKEN"


class JsonSettings:
    """Lightweight JSON settings reader with dotted-key access."""

    def __init__(self, settings_path: str | Path) -> None:
        self._path = Path(settings_path)
        if not self._path.exists():
            raise FileNotFoundError(f"settings.json not found: {self._path}")
        with self._path.open("r", encoding="utf-8") as f:
            self._data = json.load(f)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return value for dotted `key`, or `default` if not present."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if isinstance(node, dict) and part in node:
                node = node[part]
            else:
                return default
        return node


@dataclass(frozen=True)
class GatewayConfig:
    """Connection settings for the remote gallery API."""

    base_url: str
    base_path: str = "/gallery"
    timeout_seconds: float = 15.0
    token: str | None = None

    @classmethod
    def from_settings(cls, settings: JsonSettings) -> GatewayConfig:
        """Read `api.*` keys; the token env var wins over the file."""
        base_url = settings.get("api.base_url")
        if not base_url:
            raise ValueError(f"api.base_url missing in {settings.path}")
        return cls(
            base_url=str(base_url),
            base_path=str(settings.get("api.base_path", "/gallery")),
            timeout_seconds=float(settings.get("api.timeout_seconds", 15.0)),
            token=os.environ.get(TOKEN_ENV_VAR) or settings.get("api.token"),
        )


def initial_mode(settings: JsonSettings) -> tuple[GalleryMode, str | None]:
    """Return the gallery mode to start in: circle when `gallery.circle_id` is set."""
    circle_id = settings.get("gallery.circle_id")
    if circle_id:
        return GalleryMode.CIRCLE, str(circle_id)
    return GalleryMode.PERSONAL, None


def default_filters(settings: JsonSettings) -> dict[str, Any]:
    """Return `gallery.default_filters` restricted to known filter fields."""
    raw = settings.get("gallery.default_filters", {})
    if not isinstance(raw, dict):
        return {}
    known = GalleryFilters.__dataclass_fields__.keys()
    return {k: v for k, v in raw.items() if k in known}
