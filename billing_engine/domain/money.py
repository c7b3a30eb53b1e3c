"""Money codec: integer cents <-> pt-BR currency text"""

import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from billing_engine.config import settings
from billing_engine.domain.exceptions import InvalidAmount

_NON_NUMERIC = re.compile(r"[^\d,.\-]", re.ASCII)
_LEADING_NUMBER = re.compile(r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)
_DIGIT = re.compile(r"\d", re.ASCII)
_NON_DIGIT = re.compile(r"\D", re.ASCII)
_CENT = Decimal("1")


def _to_cents(value: Decimal) -> int:
    return int((value * 100).quantize(_CENT, rounding=ROUND_HALF_UP))


def format_currency(amount_cents: int) -> str:
    """
    Render cents as localized currency text with exactly two fraction digits.

    Integer arithmetic only, so the output is exact for any int.

    Example:
        123456 → "R$ 1.234,56"
        -1000  → "-R$ 10,00"
    """
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise InvalidAmount(f"Amount must be integer cents, got {amount_cents!r}")

    sign = "-" if amount_cents < 0 else ""
    units, cents = divmod(abs(amount_cents), 100)
    grouped = f"{units:,}".replace(",", settings.thousands_separator)
    return f"{sign}{settings.currency_symbol} {grouped}{settings.decimal_separator}{cents:02d}"


def parse_currency_text(text: Optional[str]) -> int:
    """
    Parse free-form currency text into cents.

    Rules:
    - Empty or unparseable input → 0
    - A lone comma is the decimal separator ("10,50" → 1050)
    - With both comma and dot, commas are thousands separators ("1,234.50" → 123450)
    - Result is clamped to >= 0
    """
    if not text or not text.strip():
        return 0

    clean = _NON_NUMERIC.sub("", text)
    if not _DIGIT.search(clean):
        return 0

    if "," in clean and "." not in clean:
        clean = clean.replace(",", ".", 1)
    elif "," in clean and "." in clean:
        clean = clean.replace(",", "")

    # Read the longest leading number, ignoring trailing garbage
    match = _LEADING_NUMBER.match(clean)
    if match is None:
        return 0

    try:
        value = Decimal(match.group())
    except InvalidOperation:
        return 0

    return max(0, _to_cents(value))


def parse_masked_cents(text: Optional[str]) -> int:
    """Read a masked currency field where every typed digit shifts in from the right"""
    digits = _NON_DIGIT.sub("", text or "")
    return int(digits) if digits else 0


def format_plan_price(price: Union[int, float, Decimal, None]) -> str:
    """Format a subscription plan price given in major units (reais, not cents)"""
    if price is None:
        return format_currency(0)
    if isinstance(price, float) and math.isnan(price):
        return format_currency(0)
    return format_currency(_to_cents(Decimal(str(price))))
