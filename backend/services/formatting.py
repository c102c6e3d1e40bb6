"""Display formatting for PIC fields (nation, travel date, pledged amount)."""
from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Iterable, Mapping, Optional, Union
import logging

from domain.models import Country, Denomination

logger = logging.getLogger(__name__)

# Amounts with more integer digits than this render nothing.
MAX_AMOUNT_DIGITS = 64

CountryLike = Union[Country, Mapping[str, str]]


def resolve_nation(code: str, countries: Optional[Iterable[CountryLike]]) -> str:
    """Country display name for a code, falling back to the raw code."""
    if not code:
        return ""
    for entry in countries or []:
        country = entry if isinstance(entry, Country) else Country.from_dict(entry)
        if country.code == code:
            return country.name or code
    return code


def format_travel_date(value: Optional[date]) -> str:
    if value is None:
        return ""
    return f"{value.month:02d} / {value.day:02d} / {value.year}"


def format_amount(amount: str, denomination: Optional[str] = None) -> str:
    """'1234.5', 'USD' -> 'USD 1,234.50'. Empty or unparseable amounts render nothing."""
    raw = (amount or "").strip()
    if not raw:
        return ""
    try:
        value = Decimal(raw.replace(",", ""))
    except InvalidOperation:
        logger.warning("[format] ignoring unparseable amount %r", amount)
        return ""
    if not value.is_finite():
        logger.warning("[format] ignoring non-finite amount %r", amount)
        return ""
    if value.adjusted() >= MAX_AMOUNT_DIGITS:
        logger.warning("[format] ignoring out-of-range amount %r", amount)
        return ""
    currency = getattr(denomination, "value", denomination) or Denomination.PHP.value
    with localcontext() as ctx:
        # every integer digit, a rounding carry and the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 4)
        value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        return f"{currency} {value:,.2f}"
