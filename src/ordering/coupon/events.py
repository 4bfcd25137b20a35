"""Domain events for the Coupon aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Coupon")
class CouponCreated:
    """A new discount coupon was made available."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    discount_type = String(required=True)
    rate = Integer()
    amount = String()
    min_purchase = String()
    max_discount = String()
    usage_limit = Integer()
    starts_at = DateTime(required=True)
    ends_at = DateTime(required=True)


@ordering.event(part_of="Coupon")
class CouponRedeemed:
    """One use of a coupon was consumed against an order amount."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    order_amount = String(required=True)
    discount = String(required=True)
    usage_count = Integer(required=True)
    redeemed_at = DateTime(required=True)
