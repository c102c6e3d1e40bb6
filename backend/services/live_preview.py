"""
Live preview controller.

Re-renders the document beside the questionnaire as the answers change. Updates
are debounced so a burst of keystrokes renders once, and a frame that finishes
after a newer update was issued is dropped. Moving between the PIC steps (1-2)
and the SAF steps (3-4) plays a flip: the card flips out, the new document is
swapped in part way through, then it flips back in.

Frames are drawn with the same field plan as the final export, so the preview
matches the downloaded documents.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Protocol, Sequence, Set

from PIL import Image

from domain.models import (
    AccountabilityQuestion,
    DocumentFamily,
    FormSnapshot,
    family_for_step,
)
from domain.questions import ACCOUNTABILITY_QUESTIONS
from services.compositor import load_signature, render_pic, render_saf
from services.formatting import CountryLike
from services.template_assets import CHECK_ICON, TemplateAssets, base_asset_for, default_assets
from settings import settings

logger = logging.getLogger(__name__)

FLIP_OUT_MS = 500  # flip-out animation length
SWAP_DELAY_MS = 200  # image swaps this far into the flip-out
FLIP_IN_MS = 500


class FlipPhase(str, Enum):
    IDLE = "idle"
    FLIPPING_OUT = "flipping_out"
    FLIPPING_IN = "flipping_in"


class FlipTransition:
    """
    Flip animation state machine.

    IDLE -> FLIPPING_OUT when the document family changes, FLIPPING_OUT ->
    FLIPPING_IN once the swap delay elapses (the displayed image is replaced
    at that moment), FLIPPING_IN -> IDLE when the flip-in finishes. Events that
    do not apply to the current phase are ignored. A family change while a flip
    is running restarts the flip-out.
    """

    def __init__(self) -> None:
        self.phase = FlipPhase.IDLE

    def family_changed(self, changed: bool) -> FlipPhase:
        if changed:
            self.phase = FlipPhase.FLIPPING_OUT
        return self.phase

    def swap_delay_elapsed(self) -> bool:
        """Returns True when the image should be swapped now."""
        if self.phase != FlipPhase.FLIPPING_OUT:
            return False
        self.phase = FlipPhase.FLIPPING_IN
        return True

    def flip_in_elapsed(self) -> bool:
        if self.phase != FlipPhase.FLIPPING_IN:
            return False
        self.phase = FlipPhase.IDLE
        return True


class PreviewSurface(Protocol):
    """Where preview frames end up (a widget, a window, a test recorder)."""

    def show(self, image: Image.Image) -> None: ...

    def set_phase(self, phase: FlipPhase) -> None: ...


@dataclass(frozen=True)
class PreviewState:
    step: int
    snapshot: FormSnapshot

    @property
    def family(self) -> Optional[DocumentFamily]:
        return family_for_step(self.step)


class LivePreviewController:
    def __init__(
        self,
        assets: Optional[TemplateAssets],
        surface: PreviewSurface,
        countries: Optional[Iterable[CountryLike]] = None,
        questions: Sequence[AccountabilityQuestion] = ACCOUNTABILITY_QUESTIONS,
        debounce: Optional[float] = None,
        swap_delay: float = SWAP_DELAY_MS / 1000,
        flip_in: float = FLIP_IN_MS / 1000,
    ) -> None:
        self.assets = assets or default_assets()
        self.surface = surface
        self.countries: Optional[List[CountryLike]] = list(countries) if countries is not None else None
        self.questions = questions
        self.debounce = debounce if debounce is not None else settings.PREVIEW_DEBOUNCE_MS / 1000
        self.swap_delay = swap_delay
        self.flip_in = flip_in
        self.transition = FlipTransition()

        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()
        self._flip_task: Optional[asyncio.Task] = None
        self._icon: Optional[Image.Image] = None
        self._family: Optional[DocumentFamily] = None
        self._held_frame: Optional[Image.Image] = None
        self._closed = False

    def update(self, state: PreviewState) -> None:
        """Schedule a render of state; must be called from the running loop."""
        if self._closed:
            raise RuntimeError("preview controller is closed")
        self._generation += 1
        task = asyncio.get_running_loop().create_task(self._run(self._generation, state))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, generation: int, state: PreviewState) -> None:
        await asyncio.sleep(self.debounce)
        if generation != self._generation:
            # superseded during the debounce window
            return
        family = state.family
        if family is None:
            return
        try:
            image = await self.render_frame(state)
        except Exception:
            logger.exception("[preview] frame %s skipped step=%s", generation, state.step)
            return
        if generation != self._generation:
            logger.debug("[preview] dropping stale frame %s (latest=%s)", generation, self._generation)
            return
        self._present(family, image)

    async def _check_icon(self) -> Image.Image:
        if self._icon is None:
            self._icon = await self.assets.load_image(CHECK_ICON)
        return self._icon

    async def render_frame(self, state: PreviewState) -> Image.Image:
        """Render one preview frame from a fresh copy of the base template."""
        snapshot = state.snapshot
        if state.family == DocumentFamily.PIC:
            base = await self.assets.load_image(base_asset_for(DocumentFamily.PIC))
            return render_pic(base, snapshot, self.countries).image
        base = await self.assets.load_image(base_asset_for(DocumentFamily.SAF, snapshot.saf_variant))
        icon = await self._check_icon()
        signature = await load_signature(snapshot.signature)
        return render_saf(base, snapshot, self.questions, icon, signature).image

    def _present(self, family: DocumentFamily, image: Image.Image) -> None:
        changed = self._family is not None and family != self._family
        self._family = family
        if changed:
            self._held_frame = image
            self.surface.set_phase(self.transition.family_changed(True))
            if self._flip_task is not None and not self._flip_task.done():
                self._flip_task.cancel()
            self._flip_task = asyncio.get_running_loop().create_task(self._flip())
            logger.debug("[preview] flipping to %s", family.value)
            return
        if self.transition.phase == FlipPhase.FLIPPING_OUT:
            # newer frame for the document about to be swapped in
            self._held_frame = image
            return
        self.surface.show(image)

    async def _flip(self) -> None:
        await asyncio.sleep(self.swap_delay)
        if not self.transition.swap_delay_elapsed():
            return
        frame, self._held_frame = self._held_frame, None
        if frame is not None:
            self.surface.show(frame)
        self.surface.set_phase(FlipPhase.FLIPPING_IN)
        await asyncio.sleep(self.flip_in)
        if self.transition.flip_in_elapsed():
            self.surface.set_phase(FlipPhase.IDLE)

    async def settle(self) -> None:
        """Wait until every scheduled render and any running flip has finished."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if self._flip_task is not None and not self._flip_task.done():
                pending.append(self._flip_task)
            if not pending:
                return
            await asyncio.wait(pending)

    async def aclose(self) -> None:
        """Cancel pending renders and any flip in progress."""
        self._closed = True
        pending = list(self._tasks)
        if self._flip_task is not None:
            pending.append(self._flip_task)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks.clear()
        self._flip_task = None
        self._held_frame = None
