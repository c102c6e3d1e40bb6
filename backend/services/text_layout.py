"""
Text layout engine.

Greedy word-wrap driven by measured glyph advance, with each wrapped block
centered on a field's center point. Lines are centered individually.
"""
from functools import lru_cache
from typing import Callable, List, Optional
import logging

from PIL import ImageDraw, ImageFont

from domain.models import RenderTarget
from settings import settings

logger = logging.getLogger(__name__)

TEXT_COLOR = "#154a8f"
FONT_SIZE_PIC = 28
FONT_SIZE_SAF = 28
LINE_HEIGHT_FACTOR = 1.2

Measure = Callable[[str], float]


@lru_cache(maxsize=8)
def load_font(font_size: int, font_path: Optional[str] = None) -> ImageFont.FreeTypeFont:
    path = font_path or settings.FONT_PATH
    try:
        return ImageFont.truetype(path, font_size)
    except OSError:
        logger.warning("[text] font %s not found; using Pillow default at %spx", path, font_size)
        return ImageFont.load_default(size=font_size)


def wrap_words(text: str, measure: Measure, max_width: float) -> List[str]:
    """
    Split text into lines no wider than max_width where possible.

    A word is never broken: a single word wider than max_width gets its own line.
    """
    words = [w for w in text.split(" ") if w]
    if not words:
        return []
    lines: List[str] = []
    line = words[0]
    for word in words[1:]:
        candidate = f"{line} {word}"
        if measure(candidate) <= max_width:
            line = candidate
        else:
            lines.append(line)
            line = word
    lines.append(line)
    return lines


def draw_text(
    target: RenderTarget,
    text: str,
    center_x: float,
    center_y: float,
    max_width: Optional[float] = None,
    font_size: int = FONT_SIZE_PIC,
    font: Optional[ImageFont.FreeTypeFont] = None,
) -> None:
    if not text:
        return
    font = font or load_font(font_size)
    draw = ImageDraw.Draw(target.image)

    if not max_width:
        width = font.getlength(text)
        draw.text((center_x - width / 2, center_y - font_size / 2), text, fill=TEXT_COLOR, font=font)
        return

    lines = wrap_words(text, font.getlength, max_width)
    if not lines:
        return
    pitch = font_size * LINE_HEIGHT_FACTOR
    line_y = center_y - (len(lines) * pitch) / 2
    for line in lines:
        width = font.getlength(line)
        draw.text((center_x - width / 2, line_y), line, fill=TEXT_COLOR, font=font)
        line_y += pitch
