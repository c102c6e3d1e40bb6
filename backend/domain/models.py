"""
Core domain models for the pledge form compositor.
These are framework-agnostic and shared by the compositor and the live preview.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from PIL import Image


class DocumentFamily(str, Enum):
    """The two documents a completed questionnaire produces."""
    PIC = "pic"  # Partner Information Card (steps 1-2)
    SAF = "saf"  # Support Accountability Form (steps 3-4)


class SafVariant(str, Enum):
    """
    Base template variants for the SAF.

    The SAF coordinate table is authored against the victory template; the
    standard template shifts its checkbox column up (see services.positions).
    """
    STANDARD = "standard"
    VICTORY = "victory"


class Denomination(str, Enum):
    PHP = "PHP"
    USD = "USD"


def family_for_step(step: int) -> Optional[DocumentFamily]:
    """Map a questionnaire step (1-4) to the document shown beside it."""
    if step in (1, 2):
        return DocumentFamily.PIC
    if step in (3, 4):
        return DocumentFamily.SAF
    return None


@dataclass(frozen=True)
class PositionSpec:
    """
    Template-relative position of a field.

    x/y are normalized (0-1) and denote the CENTER of the element.
    Area fields (the signature box) also carry a normalized width/height.
    """
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_area(self) -> bool:
        return self.width is not None and self.height is not None


@dataclass(frozen=True)
class Country:
    name: str
    code: str

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "Country":
        return cls(name=data.get("name", ""), code=data.get("code", ""))


@dataclass(frozen=True)
class AccountabilityQuestion:
    """A categorical SAF question; choices are compared by equality only."""
    question: str
    choices: tuple[str, ...]


@dataclass(frozen=True)
class FormSnapshot:
    """
    Read-only union of the answers needed to render either document.

    Created by the form owner per render and discarded afterwards. Empty strings
    and None both mean "not answered".
    """
    # Step 1 - recipient
    missioner_name: str = ""
    nation: str = ""
    travel_date: Optional[date] = None
    sending_church: str = ""
    # Step 2 - partner
    partner_name: str = ""
    amount: str = ""
    denomination: str = Denomination.PHP.value
    email: str = ""
    mobile: str = ""
    local_church: str = ""
    is_victory_member: Optional[bool] = None
    # Step 3 - question index -> chosen choice text
    answers: Mapping[int, str] = field(default_factory=dict)
    # Step 4 - raw image bytes (upload or drawn canvas)
    signature: Optional[bytes] = None

    def __post_init__(self) -> None:
        # Freeze the answers so a caller-owned dict can't change mid-render.
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers or {})))

    @property
    def saf_variant(self) -> SafVariant:
        return SafVariant.VICTORY if self.is_victory_member is True else SafVariant.STANDARD

    def answer_for(self, index: int) -> Optional[str]:
        answer = self.answers.get(index)
        return answer or None


@dataclass
class RenderTarget:
    """
    Owned RGBA8 drawing surface for a single render pass.

    Never shared between renders; the preview replaces it wholesale per frame.
    """
    image: Image.Image

    @classmethod
    def from_base(cls, base: Image.Image) -> "RenderTarget":
        canvas = Image.new("RGBA", base.size, (0, 0, 0, 0))
        # Pure copy of the template, not an alpha composite.
        canvas.paste(base.convert("RGBA"), (0, 0))
        return cls(image=canvas)

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    def composite(self, overlay: Image.Image, left: int, top: int) -> None:
        """Alpha-composite overlay with its top-left at (left, top); off-canvas parts are clipped."""
        layer = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        layer.paste(overlay.convert("RGBA"), (left, top))
        self.image.alpha_composite(layer)


@dataclass
class SignatureBuffer:
    """Decoded RGBA8 signature; native resolution until it is placed."""
    image: Image.Image

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class RenderedDocument:
    """A finished document handed to the export collaborator."""
    family: DocumentFamily
    filename: str
    data: bytes
