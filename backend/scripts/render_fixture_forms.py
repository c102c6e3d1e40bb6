"""Render a deterministic fixture PIC/SAF pair.

Usage:
    PYTHONPATH=backend python -m scripts.render_fixture_forms [--out DIR] [--victory]

Outputs go to `backend/tests/artifacts/fixture_forms/` and are gitignored.

The real template artwork is not needed: placeholder templates (ruled boxes
with field labels) and a hand-drawn-looking signature are generated with Pillow
into `backend/tests/fixtures/templates/` when missing. Useful for eyeballing
field positions, wrapping and the checkbox offset after changing the registry.
"""

from __future__ import annotations

import argparse
import asyncio
import io
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw

from domain.errors import FormRenderError
from domain.models import FormSnapshot
from domain.questions import ACCOUNTABILITY_QUESTIONS, GENERAL_FUND
from services.compositor import render_documents
from services.positions import PIC_POSITIONS, SAF_POSITIONS
from services.template_assets import (
    CHECK_ICON,
    PIC_TEMPLATE,
    SAF_TEMPLATE,
    SAF_VICTORY_TEMPLATE,
    FileTemplateAssets,
)
from storage.exports import ExportWriter

ROOT = Path(__file__).resolve().parents[1]
TEMPLATES_DIR = ROOT / "tests" / "fixtures" / "templates"
ARTIFACTS_DIR = ROOT / "tests" / "artifacts" / "fixture_forms"

TEMPLATE_SIZE = (1600, 1000)

LOG = logging.getLogger("render_fixture_forms")

FIXTURE_COUNTRIES = [
    {"name": "Japan", "code": "JP"},
    {"name": "Philippines", "code": "PH"},
    {"name": "United States", "code": "US"},
]


def _draw_template(path: Path, title: str, positions, box_shift: float = 0.0) -> None:
    img = Image.new("RGB", TEMPLATE_SIZE, (252, 250, 245))
    d = ImageDraw.Draw(img)
    w, h = TEMPLATE_SIZE
    d.rectangle((0, 0, w, int(h * 0.12)), fill=(21, 74, 143))
    d.text((40, 40), title, fill=(255, 255, 255))
    for name, spec in positions.items():
        cx, cy = spec.x * w, spec.y * h
        if spec.is_area:
            bw, bh = spec.width * w, spec.height * h
            d.rectangle((cx - bw / 2, cy - bh / 2, min(w - 1, cx + bw / 2), cy + bh / 2), outline=(180, 180, 180))
            continue
        if name.startswith(("unable", "rerouted", "canceled")):
            cy += box_shift * h
            d.rectangle((cx - 14, cy - 14, cx + 14, cy + 14), outline=(60, 60, 60), width=2)
            d.text((cx + 24, cy - 6), name, fill=(90, 90, 90))
            continue
        d.line((cx - w * 0.12, cy + 18, cx + w * 0.12, cy + 18), fill=(160, 160, 160), width=2)
        d.text((cx - w * 0.12, cy + 24), name, fill=(140, 140, 140))
    img.save(path, format="PNG")


def _draw_check(path: Path) -> None:
    img = Image.new("RGBA", (64, 64), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)
    d.line([(10, 34), (26, 50), (54, 14)], fill=(21, 74, 143, 255), width=9)
    img.save(path, format="PNG")


def ensure_placeholder_templates(templates_dir: Path = TEMPLATES_DIR) -> Path:
    templates_dir.mkdir(parents=True, exist_ok=True)
    jobs = [
        (PIC_TEMPLATE, lambda p: _draw_template(p, "Partner Information Card", PIC_POSITIONS)),
        # the standard SAF prints its checkbox column higher than the victory SAF
        (SAF_TEMPLATE, lambda p: _draw_template(p, "Support Accountability Form", SAF_POSITIONS, -0.08)),
        (SAF_VICTORY_TEMPLATE, lambda p: _draw_template(p, "Support Accountability Form (Victory)", SAF_POSITIONS)),
        (CHECK_ICON, _draw_check),
    ]
    for name, draw in jobs:
        p = templates_dir / name
        if p.exists():
            continue
        draw(p)
        LOG.info("Generated placeholder template %s", p)
    return templates_dir


def make_fixture_signature() -> bytes:
    """A thin transparent-background scribble, like a canvas-drawn signature."""
    img = Image.new("RGBA", (600, 200), (0, 0, 0, 0))
    d = ImageDraw.Draw(img)
    points = [(20, 150), (80, 40), (120, 160), (180, 60), (240, 140), (300, 70), (380, 130), (460, 90), (580, 110)]
    d.line(points, fill=(0, 0, 0, 255), width=2)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def build_fixture_snapshot(victory: bool = False) -> FormSnapshot:
    return FormSnapshot(
        missioner_name="Maria Clara de los Santos",
        nation="JP",
        travel_date=date(2025, 3, 7),
        sending_church="Every Nation Church Makati",
        partner_name="Juan Dela Cruz",
        amount="1234.5",
        denomination="USD",
        email="juan@example.com",
        mobile="+63 917 000 0000",
        local_church="Victory Fort Bonifacio",
        is_victory_member=victory,
        answers={
            0: ACCOUNTABILITY_QUESTIONS[0].choices[0],
            1: GENERAL_FUND,
            2: GENERAL_FUND,
        },
        signature=make_fixture_signature(),
    )


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--out", type=Path, default=ARTIFACTS_DIR)
    parser.add_argument("--templates", type=Path, default=TEMPLATES_DIR)
    parser.add_argument("--victory", action="store_true", help="use the victory SAF template")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    templates = ensure_placeholder_templates(args.templates)
    snapshot = build_fixture_snapshot(victory=args.victory)

    try:
        documents = asyncio.run(
            render_documents(snapshot, FileTemplateAssets(templates), countries=FIXTURE_COUNTRIES)
        )
    except FormRenderError:
        LOG.exception("Failed to render fixture forms")
        return 2

    paths = ExportWriter(args.out).write_all(documents)
    for p in paths:
        print(f"{p.name}: {p}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
