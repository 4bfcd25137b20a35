"""Coupon administration — command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.coupon.coupon import Coupon
from ordering.domain import ordering
from ordering.shared.roles import require_admin

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Coupon")
class CreateCoupon:
    """Make a new discount coupon available to customers."""

    actor_role = String(required=True, max_length=20)
    code = String(required=True, max_length=50)
    description = Text()
    discount_type = String(required=True, max_length=20)
    value = String(required=True, max_length=20)  # Rate for Percentage, amount for Fixed
    min_purchase = String(max_length=20)
    max_discount = String(max_length=20)
    starts_at = DateTime(required=True)
    ends_at = DateTime(required=True)
    usage_limit = Integer(min_value=1)
    active = Boolean(default=True)


@ordering.command_handler(part_of=Coupon)
class ManageCouponsHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        require_admin(command.actor_role, "create coupons")

        repo = current_domain.repository_for(Coupon)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": [f"Coupon code {command.code.strip().upper()} already exists"]})

        coupon = Coupon.create(
            code=command.code,
            discount_type=command.discount_type,
            value=command.value,
            starts_at=command.starts_at,
            ends_at=command.ends_at,
            description=command.description,
            min_purchase=command.min_purchase,
            max_discount=command.max_discount,
            usage_limit=command.usage_limit,
            active=command.active,
        )
        repo.add(coupon)

        logger.info("Coupon created", coupon_id=str(coupon.id), code=coupon.code)
        return str(coupon.id)
