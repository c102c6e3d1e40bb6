import os
from pathlib import Path

# Basic settings helper to read environment configuration.

BACKEND_ROOT = Path(__file__).resolve().parent
DEFAULT_ASSETS_DIR = BACKEND_ROOT / "assets" / "templates"


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.ASSETS_DIR: Path = Path(os.getenv("FORMS_ASSETS_DIR", str(DEFAULT_ASSETS_DIR)))
        self.ASSETS_BASE_URL: str = os.getenv("FORMS_ASSETS_BASE_URL", "")
        self.ASSET_TIMEOUT: float = _as_float(os.getenv("FORMS_ASSET_TIMEOUT"), 10.0)
        self.FONT_PATH: str = os.getenv("FORMS_FONT_PATH", "DejaVuSans.ttf")
        self.PREVIEW_DEBOUNCE_MS: float = _as_float(os.getenv("FORMS_PREVIEW_DEBOUNCE_MS"), 50.0)
        self.DEBUG_RENDERING: bool = _as_bool(os.getenv("FORMS_DEBUG_RENDERING"), False)


settings = Settings()
