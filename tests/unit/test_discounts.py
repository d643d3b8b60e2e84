"""Discount code validation and amount computation."""

from datetime import datetime, timedelta, timezone

import pytest

from app.domain.discounts import apply_discount, normalize_code
from app.domain.exceptions import ValidationException

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def _code(**overrides) -> dict:
    return {
        "code": "welcome20",
        "type": "percentage",
        "value": 20,
        "applicable_to": "all",
        "is_active": True,
        "use_count": 0,
        **overrides,
    }


def _apply(discount: dict, amount: int = 19900, program_id: str = "prog1", uses: int = 0):
    return apply_discount("d1", discount, program_id, amount, uses, NOW)


def test_percentage_rounds_half_up():
    applied = _apply(_code(value=15), amount=1010)
    assert applied.discount_amount == 152
    assert applied.final_amount == 858
    assert applied.code == "WELCOME20"
    assert applied.discount_code_id == "d1"


def test_fixed_is_capped_at_the_price():
    applied = _apply(_code(type="fixed", value=50000), amount=19900)
    assert applied.discount_amount == 19900
    assert applied.final_amount == 0


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"is_active": False}, "no longer active"),
        ({"starts_at": NOW + timedelta(days=1)}, "not yet active"),
        ({"expires_at": NOW - timedelta(seconds=1)}, "expired"),
        ({"max_uses": 5, "use_count": 5}, "maximum uses"),
        ({"applicable_to": "squads"}, "not valid for programs"),
        ({"program_ids": ["other"]}, "not valid for this program"),
        (
            {"applicable_to": "custom", "squad_ids": ["sq1"]},
            "not valid for programs",
        ),
    ],
)
def test_rejected_codes(overrides, message):
    with pytest.raises(ValidationException) as exc_info:
        _apply(_code(**overrides))
    assert message in exc_info.value.message
    assert exc_info.value.details == {"field": "discount_code"}


def test_per_user_limit():
    with pytest.raises(ValidationException):
        _apply(_code(max_uses_per_user=1), uses=1)
    assert _apply(_code(max_uses_per_user=2), uses=1).final_amount == 15920


def test_program_restricted_code_applies_to_listed_program():
    assert _apply(_code(program_ids=["prog1"])).discount_amount == 3980


def test_normalize_code():
    assert normalize_code("  spring-10 ") == "SPRING-10"
