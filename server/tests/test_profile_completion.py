from __future__ import annotations

from itertools import combinations
from types import SimpleNamespace

import pytest

from ccr.models.profile import Profile
from ccr.services.profile_completion import (
    FIELD_WEIGHTS,
    TOTAL_WEIGHT,
    calculate_profile_completion,
    missing_fields,
)

FULL_VALUES = {
    "first_name": "Jean",
    "last_name": "Dupont",
    "gender": "Homme",
    "phone": "+2250701020304",
    "email": "jean@example.com",
    "date_of_birth": "1990-01-15",
    "city": "Abidjan",
    "neighborhood": "Cocody",
    "marital_status": "Célibataire",
    "profession": "Ingénieur",
    "photo_url": "https://example.com/photo.jpg",
    "address": "123 Rue Example",
}
ESSENTIAL_FIELDS = [field for field, weight in FIELD_WEIGHTS.items() if weight == 1]
DETAIL_FIELDS = [field for field, weight in FIELD_WEIGHTS.items() if weight != 1]


def empty_profile(**overrides):
    values = {field: None for field in FIELD_WEIGHTS}
    values.update(
        {
            "whatsapp": None,
            "employer": None,
            "role": "fidele",
            "status": "Pending",
            "is_baptized": False,
            "profile_completion": 0,
        }
    )
    values.update(overrides)
    return values


def test_weight_table() -> None:
    assert len(FIELD_WEIGHTS) == 12
    assert TOTAL_WEIGHT == 10
    assert len(ESSENTIAL_FIELDS) == 8
    assert sorted(DETAIL_FIELDS) == ["address", "neighborhood", "photo_url", "profession"]


def test_empty_profile_scores_zero() -> None:
    assert calculate_profile_completion(empty_profile()) == 0
    assert calculate_profile_completion({}) == 0


def test_full_profile_scores_hundred() -> None:
    assert calculate_profile_completion(empty_profile(**FULL_VALUES)) == 100


def test_essential_fields_only_score_eighty() -> None:
    values = {field: FULL_VALUES[field] for field in ESSENTIAL_FIELDS}
    values.update({field: "" for field in DETAIL_FIELDS})
    assert calculate_profile_completion(empty_profile(**values)) == 80


def test_detail_fields_only_score_twenty() -> None:
    values = {field: FULL_VALUES[field] for field in DETAIL_FIELDS}
    assert calculate_profile_completion(empty_profile(**values)) == 20


def test_empty_strings_count_as_unfilled() -> None:
    assert calculate_profile_completion(empty_profile(first_name="", last_name="")) == 0


def test_absent_keys_count_as_unfilled() -> None:
    profile = empty_profile()
    del profile["first_name"]
    del profile["last_name"]
    assert calculate_profile_completion(profile) == 0


def test_whitespace_is_a_value() -> None:
    assert calculate_profile_completion({"first_name": " "}) == 10


def test_essential_field_outweighs_detail_field() -> None:
    assert calculate_profile_completion({"first_name": "Jean"}) == 10
    assert calculate_profile_completion({"neighborhood": "Cocody"}) == 5


def test_unscored_fields_are_ignored() -> None:
    profile = empty_profile(whatsapp="+2250700000000", employer="CCR", is_baptized=True)
    assert calculate_profile_completion(profile) == 0


def test_accepts_attribute_objects() -> None:
    namespace = SimpleNamespace(first_name="Jean", last_name="Dupont", city="Abidjan")
    assert calculate_profile_completion(namespace) == 30

    orm_profile = Profile(**FULL_VALUES)
    assert calculate_profile_completion(orm_profile) == 100


@pytest.mark.parametrize("size", range(len(FIELD_WEIGHTS) + 1))
def test_scores_are_bounded_integers(size: int) -> None:
    for fields in list(combinations(FIELD_WEIGHTS, size))[:50]:
        score = calculate_profile_completion({field: FULL_VALUES[field] for field in fields})
        assert isinstance(score, int)
        assert 0 <= score <= 100
        expected = sum(FIELD_WEIGHTS[field] for field in fields) * 10
        assert score == expected


def test_filling_a_field_never_lowers_the_score() -> None:
    profile: dict[str, str] = {}
    previous = calculate_profile_completion(profile)
    for field in ["address", "first_name", "photo_url", "city", "gender", "profession"]:
        profile[field] = FULL_VALUES[field]
        current = calculate_profile_completion(profile)
        assert current > previous
        previous = current


def test_missing_fields_lists_unfilled_in_table_order() -> None:
    profile = empty_profile(first_name="Jean", city="", address="Rue 12")
    missing = missing_fields(profile)
    assert "first_name" not in missing
    assert "address" not in missing
    assert missing[0] == "last_name"
    assert "city" in missing
    assert missing_fields(empty_profile(**FULL_VALUES)) == []
