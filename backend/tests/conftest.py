import io
import sys
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

TEMPLATE_SIZE = (800, 500)


def _make_img(path: Path, color, size=TEMPLATE_SIZE) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path, format="PNG")


def _make_check(path: Path) -> None:
    img = Image.new("RGBA", (48, 48), (0, 0, 0, 0))
    ImageDraw.Draw(img).line([(6, 26), (18, 40), (42, 8)], fill=(0, 128, 0, 255), width=6)
    img.save(path, format="PNG")


def make_signature_png(size=(300, 100), stroke=(0, 0, 0, 255)) -> bytes:
    img = Image.new("RGBA", size, (0, 0, 0, 0))
    ImageDraw.Draw(img).line([(10, size[1] - 10), (size[0] // 2, 10), (size[0] - 10, size[1] - 20)], fill=stroke, width=1)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def templates_dir(tmp_path) -> Path:
    """Placeholder template set: flat colors so untouched pixels are easy to check."""
    root = tmp_path / "templates"
    _make_img(root / "PIC.png", (240, 240, 230))
    _make_img(root / "SAF.png", (230, 240, 250))
    _make_img(root / "SAF_victory.png", (250, 235, 235))
    _make_check(root / "check.png")
    return root


@pytest.fixture
def assets(templates_dir):
    from services.template_assets import FileTemplateAssets

    return FileTemplateAssets(templates_dir)


@pytest.fixture
def signature_png() -> bytes:
    return make_signature_png()
