"""
Checkbox stamper.

Unchecked boxes are never drawn; the blank template already shows them.
"""
from typing import List, Optional, Sequence

from PIL import Image

from domain.models import RenderTarget

CHECK_ICON_SIZE = 24  # px, independent of template resolution


def choice_states(answer: Optional[str], choices: Sequence[str]) -> List[bool]:
    """One predicate per choice; at most one is true, none when unanswered."""
    if not answer:
        return [False] * len(choices)
    return [answer == choice for choice in choices]


def prepare_icon(icon: Image.Image) -> Image.Image:
    icon = icon.convert("RGBA")
    if icon.size == (CHECK_ICON_SIZE, CHECK_ICON_SIZE):
        return icon
    return icon.resize((CHECK_ICON_SIZE, CHECK_ICON_SIZE), resample=Image.Resampling.LANCZOS)


def draw_checkbox(
    target: RenderTarget,
    center_x: float,
    center_y: float,
    checked: bool,
    icon: Image.Image,
) -> None:
    if not checked:
        return
    stamp = prepare_icon(icon)
    left = int(round(center_x - CHECK_ICON_SIZE / 2))
    top = int(round(center_y - CHECK_ICON_SIZE / 2))
    target.composite(stamp, left, top)
