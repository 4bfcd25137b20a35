"""Repository for the Order aggregate."""

from ordering.domain import ordering
from ordering.order.order import Order


@ordering.repository(part_of=Order)
class OrderRepository:
    def for_owner(self, owner_id) -> list[Order]:
        """The owner's orders, newest first."""
        orders = self._dao.query.filter(owner_id=str(owner_id)).all().items
        return sorted(orders, key=lambda order: order.created_at, reverse=True)

    def all_orders(self) -> list[Order]:
        return sorted(self._dao.query.all().items, key=lambda order: order.created_at, reverse=True)
