"""
Template asset loading.

Templates are read-only PNGs addressed by fixed names. Loading is awaitable and
either yields a fully decoded RGBA image or raises AssetLoadError, so nothing
is drawn until the whole base image is available.
"""
from __future__ import annotations

import asyncio
import io
import logging
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from domain.errors import AssetLoadError
from domain.models import DocumentFamily, SafVariant
from settings import settings

logger = logging.getLogger(__name__)

PIC_TEMPLATE = "PIC.png"
SAF_TEMPLATE = "SAF.png"
SAF_VICTORY_TEMPLATE = "SAF_victory.png"
CHECK_ICON = "check.png"

ASSET_USER_AGENT = "pledge-forms/1.0 (template-fetch)"
ASSET_HEADERS = {"User-Agent": ASSET_USER_AGENT}


def base_asset_for(family: DocumentFamily, variant: SafVariant = SafVariant.STANDARD) -> str:
    if family == DocumentFamily.PIC:
        return PIC_TEMPLATE
    if variant == SafVariant.VICTORY:
        return SAF_VICTORY_TEMPLATE
    return SAF_TEMPLATE


def _decode(name: str, data: bytes) -> Image.Image:
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise AssetLoadError(name, f"not a readable image ({exc})") from exc


class TemplateAssets:
    """Source of template images. Subclasses provide `_read_bytes`."""

    def _read_bytes(self, name: str) -> bytes:
        raise NotImplementedError

    def _load_sync(self, name: str) -> Image.Image:
        data = self._read_bytes(name)
        return _decode(name, data)

    async def load_image(self, name: str) -> Image.Image:
        """Load and decode a template; every call returns a fresh image."""
        image = await asyncio.to_thread(self._load_sync, name)
        logger.debug("[assets] loaded %s size=%sx%s", name, image.width, image.height)
        return image


class FileTemplateAssets(TemplateAssets):
    """Templates read from a local directory."""

    def __init__(self, root: Optional[Path] = None) -> None:
        self.root = Path(root) if root is not None else settings.ASSETS_DIR

    def _read_bytes(self, name: str) -> bytes:
        path = self.root / name
        try:
            return path.read_bytes()
        except OSError as exc:
            raise AssetLoadError(name, f"cannot read {path} ({exc})") from exc


class HttpTemplateAssets(TemplateAssets):
    """Templates fetched from a static host, e.g. the site's /images/ directory."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or settings.ASSETS_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.ASSET_TIMEOUT
        self.session = session or requests.Session()

    def _read_bytes(self, name: str) -> bytes:
        if not self.base_url:
            raise AssetLoadError(name, "no asset base URL configured")
        url = f"{self.base_url}/{name}"
        try:
            resp = self.session.get(url, headers=ASSET_HEADERS, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise AssetLoadError(name, f"GET {url} failed ({exc})") from exc
        return resp.content


def default_assets() -> TemplateAssets:
    if settings.ASSETS_BASE_URL:
        return HttpTemplateAssets()
    return FileTemplateAssets()
