"""Domain events for the Order aggregate.

Amounts are carried as decimal strings ("25.00").
"""

from protean.fields import DateTime, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was checked out into a price-frozen order."""

    __version__ = 1

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    line_count = Integer(required=True)
    subtotal = String(required=True)
    shipping_fee = String(required=True)
    tax = String(required=True)
    discount_amount = String()
    grand_total = String(required=True)
    coupon_code = String()
    payment_method = String()
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusUpdated:
    """An administrator changed the order or payment status."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_order_status = String(required=True)
    order_status = String(required=True)
    previous_payment_status = String(required=True)
    payment_status = String(required=True)
    updated_at = DateTime(required=True)
