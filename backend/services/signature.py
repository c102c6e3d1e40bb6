"""
Signature processor.

Pointer and touch input often produce thin, faint strokes, so signatures are
thickened with a one-pass max-alpha dilation before being fitted (aspect
preserved, never cropped) into the SAF signature box.
"""
from __future__ import annotations

import base64
import binascii
import io
import logging
import math
import re
from dataclasses import dataclass

import numpy as np
from PIL import Image, UnidentifiedImageError

from domain.errors import SignatureDecodeError
from domain.models import RenderTarget, SignatureBuffer

logger = logging.getLogger(__name__)

DILATION_RADIUS = 1

_DATA_URL_RE = re.compile(r"^data:image/[\w.+-]+;base64,(?P<payload>.*)$", re.DOTALL)


@dataclass(frozen=True)
class SignatureFit:
    width: float
    height: float
    offset_x: float
    offset_y: float


def signature_bytes_from_data_url(data_url: str) -> bytes:
    """Extract raw image bytes from a `data:image/...;base64,` URL (drawn signatures)."""
    match = _DATA_URL_RE.match(data_url.strip())
    if not match:
        raise SignatureDecodeError("Signature is not a base64 image data URL")
    try:
        return base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureDecodeError(f"Signature data URL is not valid base64: {exc}") from exc


def decode_signature(raw: bytes) -> SignatureBuffer:
    if not raw:
        raise SignatureDecodeError("Signature is empty")
    try:
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise SignatureDecodeError(f"Could not decode signature image: {exc}") from exc
    if rgba.width == 0 or rgba.height == 0:
        raise SignatureDecodeError("Signature image has no pixels")
    return SignatureBuffer(image=rgba)


def dilate(buffer: SignatureBuffer, radius: int = DILATION_RADIUS) -> SignatureBuffer:
    """
    Single-pass max-alpha dilation.

    Every pixel with alpha > 0 pushes its RGBA into neighbors within `radius`
    whose current alpha is strictly lower. Sources are always read from the
    input buffer; results go to a copy so writes never cascade. Offsets are
    applied in source scan order (row-major), which matches visiting every
    source pixel in turn.
    """
    src = np.asarray(buffer.image.convert("RGBA"), dtype=np.uint8)
    out = src.copy()
    if radius <= 0:
        return SignatureBuffer(image=Image.fromarray(out))
    h, w = src.shape[:2]
    padded = np.zeros((h + 2 * radius, w + 2 * radius, 4), dtype=np.uint8)
    padded[radius:radius + h, radius:radius + w] = src

    for oy in range(-radius, radius + 1):
        for ox in range(-radius, radius + 1):
            if ox == 0 and oy == 0:
                continue
            # neighbor[y, x] = src[y + oy, x + ox]
            neighbor = padded[radius + oy:radius + oy + h, radius + ox:radius + ox + w]
            n_alpha = neighbor[..., 3]
            take = out[..., 3] < n_alpha
            out[take] = neighbor[take]
    return SignatureBuffer(image=Image.fromarray(out))


def process_signature(raw: bytes) -> SignatureBuffer:
    return dilate(decode_signature(raw))


def fit_to_area(src_width: float, src_height: float, area_width: float, area_height: float) -> SignatureFit:
    """Scale to touch the area on one axis and center on the other."""
    src_aspect = src_width / src_height
    area_aspect = area_width / area_height
    if src_aspect > area_aspect:
        width = area_width
        height = area_width / src_aspect
        return SignatureFit(width=width, height=height, offset_x=0.0, offset_y=(area_height - height) / 2)
    height = area_height
    width = area_height * src_aspect
    return SignatureFit(width=width, height=height, offset_x=(area_width - width) / 2, offset_y=0.0)


def place_signature(
    target: RenderTarget,
    buffer: SignatureBuffer,
    area_center_x: float,
    area_center_y: float,
    area_width: float,
    area_height: float,
) -> None:
    fit = fit_to_area(buffer.width, buffer.height, area_width, area_height)
    size = (max(1, math.ceil(fit.width)), max(1, math.ceil(fit.height)))
    scaled = buffer.image
    if scaled.size != size:
        scaled = scaled.resize(size, resample=Image.Resampling.LANCZOS)
    left = area_center_x - area_width / 2 + fit.offset_x
    top = area_center_y - area_height / 2 + fit.offset_y
    logger.debug(
        "[signature] native=%sx%s scaled=%sx%s at=(%.1f, %.1f)",
        buffer.width,
        buffer.height,
        size[0],
        size[1],
        left,
        top,
    )
    target.composite(scaled, int(round(left)), int(round(top)))
