"""
Field layout shared by the final export and the live preview.

Turns a FormSnapshot into an ordered list of draw operations in absolute
pixel coordinates for a given template size. Both render paths consume the
same plan, so the preview matches the downloaded documents pixel for pixel.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

from domain.models import AccountabilityQuestion, FormSnapshot
from services.checkboxes import choice_states
from services.formatting import CountryLike, format_amount, format_travel_date, resolve_nation
from services.positions import (
    PIC_FIELDS,
    PIC_POSITIONS,
    SAF_CHECKBOX_FIELDS,
    SAF_POSITIONS,
    absolute,
    checkbox_offset,
    lookup,
)

# Wrapped fields may use at most this share of the canvas width.
MAX_TEXT_WIDTH_FRACTION = 0.25


@dataclass(frozen=True)
class TextOp:
    field: str
    text: str
    x: float
    y: float
    max_width: Optional[float]


@dataclass(frozen=True)
class CheckboxOp:
    field: str
    x: float
    y: float


@dataclass(frozen=True)
class SignatureOp:
    field: str
    x: float
    y: float
    width: float
    height: float


DrawOp = Union[TextOp, CheckboxOp, SignatureOp]


def pic_field_values(snapshot: FormSnapshot, countries: Optional[Iterable[CountryLike]]) -> dict:
    return {
        "partner_name": snapshot.partner_name,
        "email": snapshot.email,
        "mobile": snapshot.mobile,
        "local_church": snapshot.local_church,
        "missioner_name": snapshot.missioner_name,
        "amount": format_amount(snapshot.amount, snapshot.denomination),
        "nation": resolve_nation(snapshot.nation, countries),
        "travel_date": format_travel_date(snapshot.travel_date),
        "sending_church": snapshot.sending_church,
    }


def plan_pic(
    snapshot: FormSnapshot,
    countries: Optional[Iterable[CountryLike]],
    width: int,
    height: int,
) -> List[DrawOp]:
    values = pic_field_values(snapshot, countries)
    max_width = width * MAX_TEXT_WIDTH_FRACTION
    ops: List[DrawOp] = []
    for field in PIC_FIELDS:
        text = values[field]
        if not text:
            continue
        x, y = absolute(lookup(PIC_POSITIONS, field), width, height)
        ops.append(TextOp(field=field, text=text, x=x, y=y, max_width=max_width))
    return ops


def plan_saf(
    snapshot: FormSnapshot,
    questions: Sequence[AccountabilityQuestion],
    width: int,
    height: int,
) -> List[DrawOp]:
    ops: List[DrawOp] = []
    dx, dy = checkbox_offset(snapshot.saf_variant, width, height)

    for index, fields in SAF_CHECKBOX_FIELDS.items():
        answer = snapshot.answer_for(index)
        if answer is None or index >= len(questions):
            continue
        states = choice_states(answer, questions[index].choices)
        for field, checked in zip(fields, states):
            if not checked:
                continue
            x, y = absolute(lookup(SAF_POSITIONS, field), width, height)
            ops.append(CheckboxOp(field=field, x=x + dx, y=y + dy))

    if snapshot.signature:
        x, y, w, h = absolute(lookup(SAF_POSITIONS, "signature"), width, height)
        ops.append(SignatureOp(field="signature", x=x, y=y, width=w, height=h))

    if snapshot.partner_name:
        x, y = absolute(lookup(SAF_POSITIONS, "partner_name_under_signature"), width, height)
        ops.append(
            TextOp(
                field="partner_name_under_signature",
                text=snapshot.partner_name,
                x=x,
                y=y,
                max_width=width * MAX_TEXT_WIDTH_FRACTION,
            )
        )
    return ops
