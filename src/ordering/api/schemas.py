"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Monetary amounts are accepted as decimal numbers
or strings and always returned as decimal strings ("25.00").
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


def _money(value) -> str | None:
    return str(value) if value is not None else None


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class AddressSchema(BaseModel):
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str


class LineSchema(BaseModel):
    product_id: str
    quantity: int
    unit_price: str
    line_total: str


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1, default=1)

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-001", "quantity": 2}]}}


class ApplyCouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)


class CheckoutRequest(BaseModel):
    shipping_address: AddressSchema
    payment_method: str = Field(min_length=1, max_length=50)
    shipping_fee: Decimal = Field(ge=0, default=Decimal("0"))
    tax: Decimal = Field(ge=0, default=Decimal("0"))
    coupon_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "street": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "postal_code": "62701",
                        "country": "US",
                    },
                    "payment_method": "credit_card",
                    "shipping_fee": "3.00",
                    "tax": "2.00",
                }
            ]
        }
    }


class CartResponse(BaseModel):
    cart_id: str
    owner_id: str
    items: list[LineSchema]
    applied_coupon_code: str | None = None
    discount_amount: str | None = None
    subtotal: str
    net_total: str
    updated_at: datetime | None = None

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        return cls(
            cart_id=str(cart.id),
            owner_id=str(cart.owner_id),
            items=[
                LineSchema(
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                    unit_price=str(item.unit_price),
                    line_total=str(item.line_total),
                )
                for item in cart.items
            ],
            applied_coupon_code=cart.applied_coupon_code,
            discount_amount=_money(cart.discount_amount),
            subtotal=str(cart.subtotal),
            net_total=str(cart.net_total),
            updated_at=cart.updated_at,
        )


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    order_status: str | None = None
    payment_status: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    owner_id: str
    lines: list[LineSchema]
    shipping_address: AddressSchema | None = None
    payment_method: str | None = None
    subtotal: str
    shipping_fee: str
    tax: str
    discount_amount: str | None = None
    grand_total: str
    coupon_code: str | None = None
    order_status: str
    payment_status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        address = order.shipping_address
        return cls(
            order_id=str(order.id),
            owner_id=str(order.owner_id),
            lines=[
                LineSchema(
                    product_id=str(line.product_id),
                    quantity=line.quantity,
                    unit_price=str(line.unit_price),
                    line_total=str(line.line_total),
                )
                for line in order.lines
            ],
            shipping_address=(
                AddressSchema(
                    street=address.street,
                    city=address.city,
                    state=address.state,
                    postal_code=address.postal_code,
                    country=address.country,
                )
                if address
                else None
            ),
            payment_method=order.payment_method,
            subtotal=str(order.subtotal),
            shipping_fee=str(order.shipping_fee),
            tax=str(order.tax),
            discount_amount=_money(order.discount_amount),
            grand_total=str(order.grand_total),
            coupon_code=order.coupon_code,
            order_status=order.order_status,
            payment_status=order.payment_status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
class CreateCouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None
    discount_type: str  # "Percentage" or "Fixed", any case
    value: Decimal = Field(gt=0)
    min_purchase: Decimal | None = Field(default=None, ge=0)
    max_discount: Decimal | None = Field(default=None, gt=0)
    starts_at: datetime
    ends_at: datetime
    usage_limit: int | None = Field(default=None, ge=1)
    active: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "code": "SAVE10",
                    "discount_type": "Percentage",
                    "value": "10",
                    "max_discount": "5.00",
                    "starts_at": "2026-01-01T00:00:00Z",
                    "ends_at": "2026-12-31T23:59:59Z",
                    "usage_limit": 100,
                }
            ]
        }
    }


class CouponIdResponse(BaseModel):
    coupon_id: str


class CouponResponse(BaseModel):
    coupon_id: str
    code: str
    description: str | None = None
    discount_type: str
    rate: int | None = None
    amount: str | None = None
    min_purchase: str | None = None
    max_discount: str | None = None
    starts_at: datetime
    ends_at: datetime
    active: bool
    usage_limit: int | None = None
    usage_count: int

    @classmethod
    def from_coupon(cls, coupon) -> "CouponResponse":
        return cls(
            coupon_id=str(coupon.id),
            code=coupon.code,
            description=coupon.description,
            discount_type=coupon.discount_type,
            rate=coupon.rate,
            amount=_money(coupon.amount),
            min_purchase=_money(coupon.min_purchase),
            max_discount=_money(coupon.max_discount),
            starts_at=coupon.starts_at,
            ends_at=coupon.ends_at,
            active=bool(coupon.active),
            usage_limit=coupon.usage_limit,
            usage_count=coupon.usage_count or 0,
        )


class CouponPreviewResponse(BaseModel):
    code: str
    amount: str
    discount: str
    net_amount: str
