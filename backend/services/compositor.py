"""
Template compositor.

Burns a FormSnapshot into the PIC and SAF template images and returns PNG bytes.

Each compose call owns its RenderTarget and SignatureBuffer. Suspension points
are exactly: loading template images, decoding the signature and encoding the
PNG. Everything between them draws synchronously, base image first, overlays in
the fixed order produced by services.field_layout. Identical snapshots and
assets yield byte-identical output.
"""
from __future__ import annotations

import asyncio
import io
import logging
from typing import Iterable, List, Optional, Sequence

from PIL import Image

from domain.errors import ConfigurationError, EncodeError, FormRenderError
from domain.models import (
    AccountabilityQuestion,
    DocumentFamily,
    FormSnapshot,
    RenderedDocument,
    RenderTarget,
    SignatureBuffer,
)
from domain.questions import ACCOUNTABILITY_QUESTIONS
from services.checkboxes import draw_checkbox
from services.field_layout import CheckboxOp, DrawOp, SignatureOp, TextOp, plan_pic, plan_saf
from services.formatting import CountryLike
from services.positions import validate_registry
from services.signature import place_signature, process_signature
from services.template_assets import CHECK_ICON, TemplateAssets, base_asset_for, default_assets
from services.text_layout import FONT_SIZE_PIC, FONT_SIZE_SAF, draw_text
from settings import settings
from storage.exports import export_filename

logger = logging.getLogger(__name__)

# A missing position is a programming defect; refuse to start with one.
validate_registry()


def draw_plan(
    target: RenderTarget,
    ops: Sequence[DrawOp],
    font_size: int,
    icon: Optional[Image.Image] = None,
    signature: Optional[SignatureBuffer] = None,
) -> None:
    """Apply draw operations in order onto target."""
    for op in ops:
        if settings.DEBUG_RENDERING:
            logger.info("[compose] draw %s", op)
        if isinstance(op, TextOp):
            draw_text(target, op.text, op.x, op.y, op.max_width, font_size)
        elif isinstance(op, CheckboxOp):
            if icon is None:
                raise ConfigurationError(f"checkbox {op.field} planned without a check icon")
            draw_checkbox(target, op.x, op.y, True, icon)
        elif isinstance(op, SignatureOp):
            if signature is None:
                raise ConfigurationError(f"{op.field} planned without a signature buffer")
            place_signature(target, signature, op.x, op.y, op.width, op.height)


def render_pic(
    base: Image.Image,
    snapshot: FormSnapshot,
    countries: Optional[Iterable[CountryLike]] = None,
) -> RenderTarget:
    target = RenderTarget.from_base(base)
    ops = plan_pic(snapshot, countries, target.width, target.height)
    draw_plan(target, ops, FONT_SIZE_PIC)
    return target


def render_saf(
    base: Image.Image,
    snapshot: FormSnapshot,
    questions: Sequence[AccountabilityQuestion],
    icon: Optional[Image.Image],
    signature: Optional[SignatureBuffer],
) -> RenderTarget:
    target = RenderTarget.from_base(base)
    ops = plan_saf(snapshot, questions, target.width, target.height)
    draw_plan(target, ops, FONT_SIZE_SAF, icon=icon, signature=signature)
    return target


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    try:
        image.save(buf, format="PNG")
    except (OSError, ValueError) as exc:
        raise EncodeError(f"PNG encode failed: {exc}") from exc
    return buf.getvalue()


async def load_signature(raw: Optional[bytes]) -> Optional[SignatureBuffer]:
    """Decode and thicken the signature; None when no signature was given."""
    if not raw:
        return None
    return await asyncio.to_thread(process_signature, raw)


async def compose_pic(
    snapshot: FormSnapshot,
    assets: Optional[TemplateAssets] = None,
    countries: Optional[Iterable[CountryLike]] = None,
) -> bytes:
    assets = assets or default_assets()
    try:
        base = await assets.load_image(base_asset_for(DocumentFamily.PIC))
        target = render_pic(base, snapshot, countries)
        data = await asyncio.to_thread(encode_png, target.image)
    except FormRenderError:
        logger.exception("[compose] PIC render failed")
        raise
    logger.info("[compose] PIC size=%sx%s bytes=%s", target.width, target.height, len(data))
    return data


async def compose_saf(
    snapshot: FormSnapshot,
    assets: Optional[TemplateAssets] = None,
    questions: Sequence[AccountabilityQuestion] = ACCOUNTABILITY_QUESTIONS,
) -> bytes:
    assets = assets or default_assets()
    variant = snapshot.saf_variant
    try:
        base = await assets.load_image(base_asset_for(DocumentFamily.SAF, variant))
        icon = await assets.load_image(CHECK_ICON)
        signature = await load_signature(snapshot.signature)
        target = render_saf(base, snapshot, questions, icon, signature)
        data = await asyncio.to_thread(encode_png, target.image)
    except FormRenderError:
        logger.exception("[compose] SAF render failed variant=%s", variant.value)
        raise
    logger.info(
        "[compose] SAF variant=%s size=%sx%s signature=%s bytes=%s",
        variant.value,
        target.width,
        target.height,
        signature is not None,
        len(data),
    )
    return data


async def render_documents(
    snapshot: FormSnapshot,
    assets: Optional[TemplateAssets] = None,
    countries: Optional[Iterable[CountryLike]] = None,
    questions: Sequence[AccountabilityQuestion] = ACCOUNTABILITY_QUESTIONS,
) -> List[RenderedDocument]:
    """
    Render both documents for a submitted questionnaire.

    Either both documents are returned or the first error propagates; a partial
    pair is never handed to the export collaborator.
    """
    assets = assets or default_assets()
    countries = list(countries) if countries is not None else None
    pic_bytes, saf_bytes = await asyncio.gather(
        compose_pic(snapshot, assets, countries),
        compose_saf(snapshot, assets, questions),
    )
    return [
        RenderedDocument(DocumentFamily.PIC, export_filename(DocumentFamily.PIC), pic_bytes),
        RenderedDocument(DocumentFamily.SAF, export_filename(DocumentFamily.SAF), saf_bytes),
    ]
