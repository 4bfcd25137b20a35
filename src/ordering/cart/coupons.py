"""Cart coupon management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.coupon.coupon import Coupon
from ordering.domain import ordering
from ordering.errors import EmptyCartError, InvalidCouponError

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class ApplyCouponToCart:
    """Redeem a coupon code against the owner's cart."""

    owner_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)


@ordering.command(part_of="ShoppingCart")
class RemoveCouponFromCart:
    """Take the applied coupon off the owner's cart without refunding its use."""

    owner_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class CartCouponsHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        cart, _ = cart_repo.get_or_create(command.owner_id)
        if cart.is_empty:
            raise EmptyCartError("Cannot apply a coupon to an empty cart")

        coupon_repo = current_domain.repository_for(Coupon)
        coupon = coupon_repo.find_by_code(command.coupon_code)
        if coupon is None:
            raise InvalidCouponError(command.coupon_code)

        cart.apply_coupon(coupon)
        coupon_repo.add(coupon)
        cart_repo.add(cart)

        logger.info(
            "Coupon applied to cart",
            cart_id=str(cart.id),
            coupon_code=coupon.code,
            discount=str(cart.discount_amount),
            usage_count=coupon.usage_count,
        )
        return str(cart.id)

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create(command.owner_id)
        if cart.remove_coupon():
            repo.add(cart)
        return str(cart.id)
