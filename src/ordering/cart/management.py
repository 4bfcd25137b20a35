"""Cart management — commands and handler.

Carts are created lazily the first time their owner touches them, and can
be emptied at any time.
"""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.coupon.coupon import Coupon
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="ShoppingCart")
class OpenCart:
    """Load the owner's cart, creating it on first access."""

    owner_id = Identifier(required=True)


@ordering.command(part_of="ShoppingCart")
class ClearCart:
    """Remove every item and the applied coupon from the owner's cart."""

    owner_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart, created = repo.get_or_create(command.owner_id)

        if created:
            logger.info("Cart created", cart_id=str(cart.id), owner_id=str(command.owner_id))
        elif cart.applied_coupon_code:
            # Coupon state may have moved since the last mutation
            cart.recompute(current_domain.repository_for(Coupon).applied_to(cart))
            repo.add(cart)

        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create(command.owner_id)
        cart.clear()
        repo.add(cart)
        return str(cart.id)
