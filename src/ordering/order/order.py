"""Order aggregate — the immutable, price-frozen result of a checkout.

An Order is a standard CQRS aggregate. Its lines and amounts are fixed when
the cart is checked out: later catalogue price changes or coupon edits never
reach an existing order. Only the order status and the payment status move
afterwards, through administrator updates.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusUpdated
from ordering.shared.money import Money


class _ParsableEnum(Enum):
    @classmethod
    def parse(cls, value, field):
        """Case-insensitive lookup by value (``"shipped"`` -> SHIPPED)."""
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValidationError({field: [f"Unknown {field.replace('_', ' ')}: {value}"]})


class OrderStatus(_ParsableEnum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(_ParsableEnum):
    PENDING = "Pending"
    COMPLETED = "Completed"
    FAILED = "Failed"
    REFUNDED = "Refunded"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout time."""

    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderLine:
    """A product and quantity at the unit price captured in the cart."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = ValueObject(Money, required=True)

    @property
    def line_total(self) -> Money:
        return self.unit_price.multiply(self.quantity)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    owner_id = Identifier(required=True)
    lines = HasMany(OrderLine)
    shipping_address = ValueObject(ShippingAddress)
    payment_method = String(max_length=50)
    subtotal = ValueObject(Money, required=True)
    shipping_fee = ValueObject(Money, required=True)
    tax = ValueObject(Money, required=True)
    discount_amount = ValueObject(Money)
    grand_total = ValueObject(Money, required=True)
    coupon_code = String(max_length=50)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def grand_total_must_add_up(self):
        if self.subtotal is None or self.grand_total is None:
            return
        discount = self.discount_amount.cents if self.discount_amount else 0
        expected = self.subtotal.cents + self.shipping_fee.cents + self.tax.cents - discount
        if self.grand_total.cents != expected:
            raise ValidationError({"grand_total": ["Grand total must equal subtotal + shipping + tax - discount"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        owner_id,
        lines,
        shipping_address,
        payment_method,
        shipping_fee,
        tax,
        discount=None,
        coupon_code=None,
    ):
        """Create a pending order from checkout data.

        Args:
            owner_id: The customer placing the order.
            lines: Iterable of dicts with product_id, quantity and unit_price (Money).
            shipping_address: Dict with street, city, state, postal_code, country.
            payment_method: Opaque payment method label.
            shipping_fee: Already computed shipping fee (Money).
            tax: Already computed tax (Money).
            discount: Coupon discount (Money), if a coupon was used.
            coupon_code: Code of the coupon used, if any.
        """
        if not lines:
            raise ValidationError({"lines": ["An order needs at least one line"]})
        if shipping_fee.cents < 0 or tax.cents < 0:
            raise ValidationError({"amounts": ["Shipping fee and tax cannot be negative"]})

        order_lines = [
            OrderLine(
                product_id=str(line["product_id"]),
                quantity=line["quantity"],
                unit_price=line["unit_price"],
            )
            for line in lines
        ]
        subtotal = Money.total(line.line_total for line in order_lines)
        grand_total = subtotal.add(shipping_fee).add(tax).subtract(discount or Money.zero())

        now = datetime.now(UTC)
        order = cls(
            owner_id=str(owner_id),
            lines=order_lines,
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method,
            subtotal=subtotal,
            shipping_fee=shipping_fee,
            tax=tax,
            discount_amount=discount,
            grand_total=grand_total,
            coupon_code=coupon_code,
            order_status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                owner_id=str(owner_id),
                line_count=len(order_lines),
                subtotal=str(subtotal),
                shipping_fee=str(shipping_fee),
                tax=str(tax),
                discount_amount=str(discount) if discount is not None else None,
                grand_total=str(grand_total),
                coupon_code=coupon_code,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status management
    # -------------------------------------------------------------------
    def update_status(self, order_status=None, payment_status=None):
        """Set either or both statuses. Any state may move to any other state."""
        if order_status is None and payment_status is None:
            raise ValidationError({"status": ["Provide an order status or a payment status"]})

        previous_order_status = self.order_status
        previous_payment_status = self.payment_status

        if order_status is not None:
            self.order_status = OrderStatus.parse(order_status, "order_status").value
        if payment_status is not None:
            self.payment_status = PaymentStatus.parse(payment_status, "payment_status").value

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            OrderStatusUpdated(
                order_id=str(self.id),
                previous_order_status=previous_order_status,
                order_status=self.order_status,
                previous_payment_status=previous_payment_status,
                payment_status=self.payment_status,
                updated_at=now,
            )
        )
