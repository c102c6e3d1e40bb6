"""
Position registry.

Compiled-in, normalized (0-1) coordinate tables for every field the compositor
draws. All coordinates are CENTER points; the signature entry is an area with
its own width/height. Tables are read-only and validated once at import of the
compositor so a missing entry fails at startup, not mid-render.
"""
from types import MappingProxyType
from typing import Dict, Mapping, Tuple, Union

from domain.errors import ConfigurationError
from domain.models import PositionSpec, SafVariant

PositionTable = Mapping[str, PositionSpec]

PIC_POSITIONS: PositionTable = MappingProxyType({
    # Partner section
    "partner_name": PositionSpec(0.215, 0.32),
    "email": PositionSpec(0.215, 0.485),
    "mobile": PositionSpec(0.215, 0.645),
    "local_church": PositionSpec(0.215, 0.802),
    # Recipient section
    "missioner_name": PositionSpec(0.7, 0.32),
    "amount": PositionSpec(0.69, 0.485),
    "nation": PositionSpec(0.66, 0.645),
    "travel_date": PositionSpec(0.9, 0.645),
    "sending_church": PositionSpec(0.696, 0.802),
})

SAF_POSITIONS: PositionTable = MappingProxyType({
    # Question 0 - unable to go
    "unable_to_go_team_fund": PositionSpec(0.04, 0.608),
    "unable_to_go_general_fund": PositionSpec(0.04, 0.608 + 0.059),
    # Question 1 - rerouted
    "rerouted_retain": PositionSpec(0.357, 0.57),
    "rerouted_general_fund": PositionSpec(0.357, 0.63),
    # Question 2 - canceled
    "canceled_general_fund": PositionSpec(0.695, 0.572),
    # Signature box: top-left (0.58, 0.71), 0.5 x 0.2
    "signature": PositionSpec(0.58 + 0.5 / 2, 0.71 + 0.2 / 2, width=0.5, height=0.2),
    "partner_name_under_signature": PositionSpec(0.817, 0.875),
})

# Checkbox-only shift per SAF base image. Signature and name are never shifted.
SAF_CHECKBOX_OFFSETS: Mapping[SafVariant, Tuple[float, float]] = MappingProxyType({
    SafVariant.STANDARD: (0.0, -0.08),
    SafVariant.VICTORY: (0.0, 0.0),
})

# Draw order of the PIC fields: partner section then recipient section.
PIC_FIELDS: Tuple[str, ...] = (
    "partner_name",
    "email",
    "mobile",
    "local_church",
    "missioner_name",
    "amount",
    "nation",
    "travel_date",
    "sending_church",
)

# Question index -> checkbox fields, in the question's choice order.
SAF_CHECKBOX_FIELDS: Mapping[int, Tuple[str, ...]] = MappingProxyType({
    0: ("unable_to_go_team_fund", "unable_to_go_general_fund"),
    1: ("rerouted_retain", "rerouted_general_fund"),
    2: ("canceled_general_fund",),
})

SAF_SIGNATURE_FIELDS: Tuple[str, ...] = ("signature", "partner_name_under_signature")

AbsolutePosition = Union[Tuple[float, float], Tuple[float, float, float, float]]


def lookup(table: PositionTable, field: str) -> PositionSpec:
    try:
        return table[field]
    except KeyError:
        raise ConfigurationError(f"No position configured for field '{field}'") from None


def absolute(spec: PositionSpec, canvas_width: int, canvas_height: int) -> AbsolutePosition:
    """Scale a normalized spec to pixels: (x, y) or (x, y, w, h) for area specs."""
    x = spec.x * canvas_width
    y = spec.y * canvas_height
    if spec.is_area:
        return (x, y, spec.width * canvas_width, spec.height * canvas_height)
    return (x, y)


def checkbox_offset(variant: SafVariant, canvas_width: int, canvas_height: int) -> Tuple[float, float]:
    dx, dy = SAF_CHECKBOX_OFFSETS[variant]
    return (dx * canvas_width, dy * canvas_height)


def validate_registry() -> None:
    """Fail fast if any referenced field lacks a usable position."""
    required: Dict[str, Tuple[PositionTable, Tuple[str, ...]]] = {
        "PIC": (PIC_POSITIONS, PIC_FIELDS),
        "SAF": (
            SAF_POSITIONS,
            tuple(f for fields in SAF_CHECKBOX_FIELDS.values() for f in fields) + SAF_SIGNATURE_FIELDS,
        ),
    }
    problems = []
    for table_name, (table, fields) in required.items():
        for field in fields:
            spec = table.get(field)
            if spec is None:
                problems.append(f"{table_name}.{field}: missing")
                continue
            if not (0.0 <= spec.x <= 1.0 and 0.0 <= spec.y <= 1.0):
                problems.append(f"{table_name}.{field}: center outside the template")
    signature = SAF_POSITIONS.get("signature")
    if signature is not None and not signature.is_area:
        problems.append("SAF.signature: area needs width and height")
    missing_variants = [v.value for v in SafVariant if v not in SAF_CHECKBOX_OFFSETS]
    if missing_variants:
        problems.append(f"SAF offsets missing for: {', '.join(missing_variants)}")
    if problems:
        raise ConfigurationError("Invalid position registry: " + "; ".join(problems))
