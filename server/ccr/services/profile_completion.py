from __future__ import annotations

from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

# Identity and contact basics weigh twice as much as the cosmetic details.
FIELD_WEIGHTS: dict[str, Decimal] = {
    "first_name": Decimal("1"),
    "last_name": Decimal("1"),
    "gender": Decimal("1"),
    "phone": Decimal("1"),
    "email": Decimal("1"),
    "date_of_birth": Decimal("1"),
    "city": Decimal("1"),
    "neighborhood": Decimal("0.5"),
    "marital_status": Decimal("1"),
    "profession": Decimal("0.5"),
    "photo_url": Decimal("0.5"),
    "address": Decimal("0.5"),
}

TOTAL_WEIGHT = sum(FIELD_WEIGHTS.values(), Decimal("0"))


def _field_value(profile: Any, field: str) -> Any:
    if isinstance(profile, Mapping):
        return profile.get(field)
    return getattr(profile, field, None)


def is_filled(value: Any) -> bool:
    return value is not None and value != ""


def missing_fields(profile: Any) -> list[str]:
    return [field for field in FIELD_WEIGHTS if not is_filled(_field_value(profile, field))]


def calculate_profile_completion(profile: Any) -> int:
    """Return the 0-100 completion score of a profile.

    ``profile`` may be a mapping or any object exposing the scored fields as
    attributes. Missing, ``None`` and empty-string values count as unfilled.
    """

    filled = sum(
        (weight for field, weight in FIELD_WEIGHTS.items() if is_filled(_field_value(profile, field))),
        Decimal("0"),
    )
    ratio = filled / TOTAL_WEIGHT * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
