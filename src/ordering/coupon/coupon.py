"""Coupon aggregate — discount rules with a validity window and a usage limit.

A coupon grants either a percentage of the order amount (optionally capped by
``max_discount``) or a fixed amount that never exceeds the order amount. It
qualifies only while active, inside its validity window, below its usage
limit and above its minimum purchase.

Usage is consumed by ``redeem()``, the single place where ``usage_count``
moves. A coupon that was already redeemed for a cart is re-checked with
``honour()``, which applies the same rules minus the usage limit and never
consumes another use.
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text, ValueObject

from ordering.coupon.events import CouponCreated, CouponRedeemed
from ordering.domain import ordering
from ordering.errors import InvalidCouponError
from ordering.shared.money import Money


class DiscountType(Enum):
    PERCENTAGE = "Percentage"
    FIXED = "Fixed"

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup by value (``"percentage"`` -> PERCENTAGE)."""
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValidationError({"discount_type": [f"Unknown discount type: {value}"]})


def normalize_code(code):
    return str(code).strip().upper()


def as_utc(moment):
    """Treat naive datetimes as UTC so they compare with aware ones."""
    if moment is None or moment.tzinfo is not None:
        return moment
    return moment.replace(tzinfo=UTC)


@ordering.aggregate
class Coupon:
    code = String(required=True, max_length=50, unique=True)
    description = Text()
    discount_type = String(choices=DiscountType, required=True)
    rate = Integer(min_value=0, max_value=100)  # Percentage coupons
    amount = ValueObject(Money)  # Fixed coupons
    min_purchase = ValueObject(Money)
    max_discount = ValueObject(Money)  # Caps percentage discounts
    starts_at = DateTime(required=True)
    ends_at = DateTime(required=True)
    active = Boolean(default=True)
    usage_limit = Integer(min_value=1)  # None means unlimited
    usage_count = Integer(default=0, min_value=0)
    created_at = DateTime()

    @invariant.post
    def usage_count_must_not_exceed_limit(self):
        if self.usage_limit is not None and (self.usage_count or 0) > self.usage_limit:
            raise ValidationError({"usage_count": ["Coupon usage exceeds its limit"]})

    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.starts_at and self.ends_at and as_utc(self.ends_at) < as_utc(self.starts_at):
            raise ValidationError({"ends_at": ["Coupon cannot end before it starts"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        discount_type,
        value,
        starts_at,
        ends_at,
        description=None,
        min_purchase=None,
        max_discount=None,
        usage_limit=None,
        active=True,
    ):
        """Create a coupon from administrator input.

        ``value`` is the percentage rate for Percentage coupons (1-100, whole
        numbers) and the discount amount for Fixed coupons.
        """
        code = normalize_code(code)
        if not code:
            raise ValidationError({"code": ["Coupon code is required"]})

        kind = DiscountType.parse(discount_type)
        rate = None
        amount = None
        if kind == DiscountType.PERCENTAGE:
            rate = _whole_percentage(value)
        else:
            amount = Money.of(value)
            if amount.cents <= 0:
                raise ValidationError({"value": ["Fixed discount must be greater than zero"]})

        coupon = cls(
            code=code,
            description=description,
            discount_type=kind.value,
            rate=rate,
            amount=amount,
            min_purchase=Money.of(min_purchase) if min_purchase is not None else Money.zero(),
            max_discount=Money.of(max_discount) if max_discount is not None else None,
            starts_at=as_utc(starts_at),
            ends_at=as_utc(ends_at),
            active=active,
            usage_limit=usage_limit,
            usage_count=0,
            created_at=datetime.now(UTC),
        )

        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                discount_type=coupon.discount_type,
                rate=coupon.rate,
                amount=str(amount) if amount else None,
                min_purchase=str(coupon.min_purchase),
                max_discount=str(coupon.max_discount) if coupon.max_discount else None,
                usage_limit=usage_limit,
                starts_at=coupon.starts_at,
                ends_at=coupon.ends_at,
            )
        )
        return coupon

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    @property
    def usage_exhausted(self):
        return self.usage_limit is not None and (self.usage_count or 0) >= self.usage_limit

    def rejection_reason(self, order_amount, now=None, enforce_usage_limit=True):
        """Why the coupon does not qualify for ``order_amount`` at ``now``; None when it does."""
        now = as_utc(now) or datetime.now(UTC)

        if not self.active:
            return "Coupon is not active"
        if now < as_utc(self.starts_at):
            return "Coupon is not valid yet"
        if now > as_utc(self.ends_at):
            return "Coupon has expired"
        if enforce_usage_limit and self.usage_exhausted:
            return "Coupon usage limit has been reached"
        if order_amount < (self.min_purchase or Money.zero()):
            return f"Minimum purchase of {self.min_purchase} required"
        return None

    def is_valid(self, order_amount, now=None, enforce_usage_limit=True):
        return self.rejection_reason(order_amount, now, enforce_usage_limit) is None

    # -------------------------------------------------------------------
    # Discount computation
    # -------------------------------------------------------------------
    def _discount_for(self, order_amount):
        if DiscountType(self.discount_type) == DiscountType.PERCENTAGE:
            discount = order_amount.percentage(self.rate or 0)
            if self.max_discount is not None:
                discount = Money.min(discount, self.max_discount)
        else:
            discount = Money.min(self.amount, order_amount)
        return discount

    def calculate_discount(self, order_amount, now=None, enforce_usage_limit=True):
        """Discount for ``order_amount``; zero when the coupon does not qualify."""
        if not self.is_valid(order_amount, now, enforce_usage_limit):
            return Money.zero()
        return self._discount_for(order_amount)

    def redeem(self, order_amount, now=None):
        """Consume one use of the coupon and return the discount it grants.

        Raises ``InvalidCouponError`` with the rejection reason when the
        coupon does not qualify. Unlimited coupons do not count uses.
        """
        now = as_utc(now) or datetime.now(UTC)
        reason = self.rejection_reason(order_amount, now)
        if reason:
            raise InvalidCouponError(self.code, reason)

        discount = self._discount_for(order_amount)
        if self.usage_limit is not None:
            self.usage_count = (self.usage_count or 0) + 1

        self.raise_(
            CouponRedeemed(
                coupon_id=str(self.id),
                code=self.code,
                order_amount=str(order_amount),
                discount=str(discount),
                usage_count=self.usage_count,
                redeemed_at=now,
            )
        )
        return discount

    def honour(self, order_amount, now=None):
        """Re-validate a coupon whose use was already consumed and return its discount."""
        reason = self.rejection_reason(order_amount, now, enforce_usage_limit=False)
        if reason:
            raise InvalidCouponError(self.code, reason)
        return self._discount_for(order_amount)


def _whole_percentage(value):
    try:
        rate = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError({"value": [f"'{value}' is not a valid percentage"]}) from None
    if rate != rate.to_integral_value() or not 0 < rate <= 100:
        raise ValidationError({"value": ["Percentage must be a whole number between 1 and 100"]})
    return int(rate)
