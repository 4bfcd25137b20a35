"""Order status administration — command and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.shared.roles import require_admin

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    """Set the order status and/or the payment status of an order."""

    order_id = Identifier(required=True)
    actor_role = String(required=True, max_length=20)
    order_status = String(max_length=20)
    payment_status = String(max_length=20)


@ordering.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        require_admin(command.actor_role, "update order status")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.update_status(
            order_status=command.order_status,
            payment_status=command.payment_status,
        )
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            order_status=order.order_status,
            payment_status=order.payment_status,
        )
        return str(order.id)
