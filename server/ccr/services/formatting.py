from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from ccr.core.clock import now_utc
from ccr.core.config import settings

# fr-FR groups thousands with a narrow no-break space.
GROUP_SEPARATOR = "\u202f"

SHORT_MONTHS_FR = (
    "janv.",
    "févr.",
    "mars",
    "avr.",
    "mai",
    "juin",
    "juil.",
    "août",
    "sept.",
    "oct.",
    "nov.",
    "déc.",
)

COMPACT_UNITS = ((1_000_000, "M"), (1_000, "K"))


def format_number(value: int | float | Decimal) -> str:
    """Compact dashboard counter: 1500 -> "1.5K", 2500000 -> "2.5M"."""

    for threshold, suffix in COMPACT_UNITS:
        if value >= threshold:
            # Round the exact quotient, ties away from zero.
            scaled = Decimal(value / threshold).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
            return f"{scaled}{suffix}"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _group_thousands(amount: int | float | Decimal) -> str:
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}{int(abs(rounded)):,}".replace(",", GROUP_SEPARATOR)


def format_amount(amount: int | float | Decimal, symbol: str | None = None) -> str:
    return f"{_group_thousands(amount)} {symbol or settings.CURRENCY_SYMBOL}"


def _as_aware(value: datetime | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_relative_date(value: datetime | str, now: datetime | None = None) -> str:
    """Short French label for how long ago ``value`` happened."""

    moment = _as_aware(value)
    reference = _as_aware(now) if now is not None else now_utc()
    minutes = int((reference - moment).total_seconds() // 60)
    if minutes < 1:
        return "À l'instant"
    if minutes < 60:
        return f"Il y a {minutes} min"
    hours = minutes // 60
    if hours < 24:
        return f"Il y a {hours}h"
    days = hours // 24
    if days < 7:
        return f"Il y a {days}j"
    return f"{moment.day} {SHORT_MONTHS_FR[moment.month - 1]}"


def full_name(first_name: str | None, last_name: str | None) -> str:
    return f"{first_name or ''} {last_name or ''}".strip()


def initials(first_name: str | None, last_name: str | None) -> str:
    return f"{(first_name or '')[:1]}{(last_name or '')[:1]}".upper()
