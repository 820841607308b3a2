from __future__ import annotations

import asyncio
import os
from pathlib import Path
import sys

import httpx
from loguru import logger

from circle_gallery.app.viewmodels.gallery_vm import GalleryVM
from circle_gallery.core.models import GalleryMode
from circle_gallery.infrastructure.http_gateway import HttpGalleryGateway
from circle_gallery.infrastructure.logging import find_latest_log_file, init_logging
from circle_gallery.infrastructure.settings import (
    GatewayConfig,
    JsonSettings,
    default_filters,
    initial_mode,
)
from circle_gallery.infrastructure.utils import format_file_size

BASE_DIR = Path(__file__).resolve().parent.parent
SETTINGS_ENV_VAR = "CIRCLE_GALLERY_SETTINGS"


def build_view_model(settings: JsonSettings, gateway: HttpGalleryGateway) -> GalleryVM:
    """Create a GalleryVM in the mode and with the filters named by `settings`."""
    vm = GalleryVM(gateway)
    mode, circle_id = initial_mode(settings)
    if mode is GalleryMode.CIRCLE:
        vm.set_mode(mode, circle_id)
    filters = default_filters(settings)
    if filters:
        vm.update_filters(**filters)
    return vm


async def run(
    settings: JsonSettings, transport: httpx.AsyncBaseTransport | None = None
) -> GalleryVM:
    """Load one snapshot of the configured gallery and log a summary."""
    config = GatewayConfig.from_settings(settings)
    async with HttpGalleryGateway.from_config(config, transport=transport) as gateway:
        vm = build_view_model(settings, gateway)
        await vm.refresh()

    state = vm.state
    logger.info(
        "Gallery {}: {} photos, {} albums",
        state.scope,
        len(state.photos),
        len(state.albums),
    )
    if state.stats:
        logger.info(
            "Stats: {} photos, {} videos, {} total",
            state.stats.total_photos,
            state.stats.total_videos,
            format_file_size(state.stats.total_size),
        )
    if state.error:
        logger.warning("Gallery error ({}): {}", state.error_kind, state.error)
    return vm


def main() -> int:
    settings_path = os.environ.get(SETTINGS_ENV_VAR) or str(BASE_DIR / "settings.json")
    settings = JsonSettings(settings_path)
    log_dir = init_logging(settings.get("logging.directory"), settings.get("logging.level", "INFO"))
    logger.add(sys.stderr, level="INFO")

    vm = asyncio.run(run(settings))
    if vm.state.error:
        log_file = find_latest_log_file(str(log_dir))
        if log_file is not None:
            logger.info("Details in {}", log_file)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
