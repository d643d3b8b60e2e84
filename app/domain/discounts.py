"""Discount code rules for program purchases.

Amounts are integer cents. Rule failures raise ValidationException with the
message shown to the buyer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from app.domain.enums import DiscountApplicability, DiscountType
from app.domain.exceptions import ValidationException
from app.shared.utils.datetime import ensure_utc


@dataclass(frozen=True)
class AppliedDiscount:
    code: str
    discount_code_id: str
    original_amount: int
    discount_amount: int
    final_amount: int


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _check_applicability(discount: dict[str, Any], program_id: str) -> None:
    program_ids = discount.get("program_ids") or []
    applicable_to = discount.get("applicable_to", DiscountApplicability.ALL.value)
    if applicable_to in (DiscountApplicability.SQUADS.value, DiscountApplicability.CONTENT.value):
        raise ValidationException("This discount code is not valid for programs", field="discount_code")
    if applicable_to == DiscountApplicability.CUSTOM.value:
        restricted_elsewhere = bool(discount.get("squad_ids") or discount.get("content_ids"))
        if not program_ids and restricted_elsewhere:
            raise ValidationException("This discount code is not valid for programs", field="discount_code")
    if program_ids and program_id not in program_ids:
        raise ValidationException("This discount code is not valid for this program", field="discount_code")


def apply_discount(
    discount_id: str,
    discount: dict[str, Any],
    program_id: str,
    amount: int,
    user_use_count: int,
    now: datetime,
) -> AppliedDiscount:
    """Validate a discount code document and compute the discounted amount.

    Args:
        discount_id: Firestore id of the discount code document.
        discount: Discount code document.
        program_id: Program being purchased.
        amount: Full price in cents.
        user_use_count: Times this buyer already used the code.
        now: Current instant.

    Raises:
        ValidationException: When the code cannot be applied.
    """
    if not discount.get("is_active", False):
        raise ValidationException("This discount code is no longer active", field="discount_code")
    starts_at = ensure_utc(discount.get("starts_at"))
    if starts_at and starts_at > now:
        raise ValidationException("This discount code is not yet active", field="discount_code")
    expires_at = ensure_utc(discount.get("expires_at"))
    if expires_at and expires_at < now:
        raise ValidationException("This discount code has expired", field="discount_code")
    max_uses = discount.get("max_uses")
    if max_uses is not None and discount.get("use_count", 0) >= max_uses:
        raise ValidationException(
            "This discount code has reached its maximum uses", field="discount_code"
        )
    per_user = discount.get("max_uses_per_user")
    if per_user and user_use_count >= per_user:
        raise ValidationException(
            "You have already used this discount code the maximum number of times",
            field="discount_code",
        )
    _check_applicability(discount, program_id)

    value = discount.get("value") or 0
    if discount.get("type") == DiscountType.PERCENTAGE.value:
        off = math.floor(amount * value / 100 + 0.5)
    else:
        off = min(int(value), amount)
    return AppliedDiscount(
        code=normalize_code(discount.get("code", "")),
        discount_code_id=discount_id,
        original_amount=amount,
        discount_amount=off,
        final_amount=max(0, amount - off),
    )
