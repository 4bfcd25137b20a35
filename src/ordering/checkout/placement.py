"""Checkout — converts the owner's cart into a price-frozen Order.

Flow, inside a single unit of work:
    1. Load the owner's cart; an empty or missing cart cannot be checked out.
    2. Compute the subtotal from the cart lines at their captured prices.
    3. Resolve the coupon: the code given at checkout, else the cart's
       applied code. The cart's own coupon was redeemed when it was applied
       and is only re-validated; any other code is redeemed now.
    4. Persist the order, then the redeemed coupon, then the emptied cart.

Any failure rolls the whole unit of work back: the coupon keeps its usage
count, the cart keeps its contents and no order is stored.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.coupon.coupon import Coupon
from ordering.domain import ordering
from ordering.errors import EmptyCartError, InvalidCouponError
from ordering.order.order import Order
from ordering.shared.money import Money

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class PlaceOrder:
    """Check out the owner's cart."""

    owner_id = Identifier(required=True)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    payment_method = String(required=True, max_length=50)
    shipping_fee = String(default="0.00")  # Decimal string, computed upstream
    tax = String(default="0.00")  # Decimal string, computed upstream
    coupon_code = String(max_length=50)


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.for_owner(command.owner_id)
        if cart is None or cart.is_empty:
            raise EmptyCartError("Cannot check out an empty cart")

        subtotal = Money.total(item.line_total for item in cart.items)
        coupon, discount, redeemed = self._resolve_coupon(cart, command.coupon_code, subtotal)

        order = Order.place(
            owner_id=command.owner_id,
            lines=[
                {
                    "product_id": item.product_id,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                }
                for item in cart.items
            ],
            shipping_address={
                "street": command.street,
                "city": command.city,
                "state": command.state,
                "postal_code": command.postal_code,
                "country": command.country,
            },
            payment_method=command.payment_method,
            shipping_fee=Money.of(command.shipping_fee or "0"),
            tax=Money.of(command.tax or "0"),
            discount=discount,
            coupon_code=coupon.code if coupon else None,
        )

        current_domain.repository_for(Order).add(order)
        if redeemed:
            current_domain.repository_for(Coupon).add(coupon)

        cart.check_out(order.id)
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            owner_id=str(command.owner_id),
            grand_total=str(order.grand_total),
            coupon_code=order.coupon_code,
        )
        return str(order.id)

    def _resolve_coupon(self, cart, requested_code, subtotal):
        """Return ``(coupon, discount, redeemed_now)`` for the checkout."""
        code = requested_code or cart.applied_coupon_code
        if not code:
            return None, None, False

        coupon = current_domain.repository_for(Coupon).find_by_code(code)
        if coupon is None:
            raise InvalidCouponError(code)

        now = datetime.now(UTC)
        if coupon.code == cart.applied_coupon_code:
            return coupon, coupon.honour(subtotal, now), False
        return coupon, coupon.redeem(subtotal, now), True
