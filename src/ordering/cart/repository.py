"""Repository for the ShoppingCart aggregate."""

import structlog
from protean.exceptions import ValidationError

from ordering.cart.cart import ShoppingCart
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_owner(self, owner_id) -> ShoppingCart | None:
        return self._dao.query.filter(owner_id=str(owner_id)).all().first

    def get_or_create(self, owner_id) -> tuple[ShoppingCart, bool]:
        """Return the owner's cart and whether it had to be created.

        ``owner_id`` is unique, so when another worker creates the cart first
        the insert is rejected and the stored cart is returned instead.
        """
        cart = self.for_owner(owner_id)
        if cart is not None:
            return cart, False

        cart = ShoppingCart.create(owner_id=str(owner_id))
        try:
            self.add(cart)
        except ValidationError as exc:
            if "owner_id" not in exc.messages:
                raise
            existing = self.for_owner(owner_id)
            if existing is None:
                raise
            logger.info("Cart created concurrently, reusing it", owner_id=str(owner_id))
            return existing, False
        return cart, True
