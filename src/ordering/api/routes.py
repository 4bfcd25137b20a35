"""FastAPI routes for the Ordering domain — cart, orders and coupons.

Every mutation runs through ``process_serialized`` so that commands on the
same cart or order, and redemptions of the same coupon, never interleave.
"""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from ordering.api.auth import Principal, current_user
from ordering.api.schemas import (
    AddItemRequest,
    ApplyCouponRequest,
    CartResponse,
    CheckoutRequest,
    CouponIdResponse,
    CouponPreviewResponse,
    CouponResponse,
    CreateCouponRequest,
    OrderResponse,
    UpdateOrderStatusRequest,
)
from ordering.cart.cart import ShoppingCart
from ordering.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from ordering.cart.items import AddToCart, RemoveFromCart
from ordering.cart.management import ClearCart, OpenCart
from ordering.checkout.placement import PlaceOrder
from ordering.coupon.coupon import Coupon
from ordering.coupon.management import CreateCoupon
from ordering.errors import ForbiddenError, InvalidCouponError
from ordering.order.order import Order
from ordering.order.status import UpdateOrderStatus
from ordering.shared.money import Money
from ordering.shared.roles import require_admin
from ordering.utils.concurrency import cart_key, coupon_key, order_key, process_serialized


def _cart_response(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    return CartResponse.from_cart(cart)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(user: Principal = Depends(current_user)) -> CartResponse:
    cart_id = process_serialized(OpenCart(owner_id=user.user_id), cart_key(user.user_id))
    return _cart_response(cart_id)


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddItemRequest, user: Principal = Depends(current_user)) -> CartResponse:
    command = AddToCart(
        owner_id=user.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    cart_id = process_serialized(command, cart_key(user.user_id))
    return _cart_response(cart_id)


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, user: Principal = Depends(current_user)) -> CartResponse:
    command = RemoveFromCart(owner_id=user.user_id, product_id=product_id)
    cart_id = process_serialized(command, cart_key(user.user_id))
    return _cart_response(cart_id)


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(user: Principal = Depends(current_user)) -> CartResponse:
    cart_id = process_serialized(ClearCart(owner_id=user.user_id), cart_key(user.user_id))
    return _cart_response(cart_id)


@cart_router.post("/coupon", response_model=CartResponse)
async def apply_cart_coupon(body: ApplyCouponRequest, user: Principal = Depends(current_user)) -> CartResponse:
    command = ApplyCouponToCart(owner_id=user.user_id, coupon_code=body.code)
    cart_id = process_serialized(command, cart_key(user.user_id), coupon_key(body.code))
    return _cart_response(cart_id)


@cart_router.delete("/coupon", response_model=CartResponse)
async def remove_cart_coupon(user: Principal = Depends(current_user)) -> CartResponse:
    cart_id = process_serialized(RemoveCouponFromCart(owner_id=user.user_id), cart_key(user.user_id))
    return _cart_response(cart_id)


@cart_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout_cart(body: CheckoutRequest, user: Principal = Depends(current_user)) -> OrderResponse:
    address = body.shipping_address
    command = PlaceOrder(
        owner_id=user.user_id,
        street=address.street,
        city=address.city,
        state=address.state,
        postal_code=address.postal_code,
        country=address.country,
        payment_method=body.payment_method,
        shipping_fee=str(body.shipping_fee),
        tax=str(body.tax),
        coupon_code=body.coupon_code,
    )
    order_id = process_serialized(command, cart_key(user.user_id), coupon_key(body.coupon_code))
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(user: Principal = Depends(current_user)) -> list[OrderResponse]:
    repo = current_domain.repository_for(Order)
    orders = repo.all_orders() if user.is_admin else repo.for_owner(user.user_id)
    return [OrderResponse.from_order(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, user: Principal = Depends(current_user)) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    if not user.is_admin and str(order.owner_id) != user.user_id:
        raise ForbiddenError("You can only view your own orders")
    return OrderResponse.from_order(order)


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    user: Principal = Depends(current_user),
) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        actor_role=user.role.value,
        order_status=body.order_status,
        payment_status=body.payment_status,
    )
    process_serialized(command, order_key(order_id))
    return OrderResponse.from_order(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.get("", response_model=list[CouponResponse])
async def list_coupons(user: Principal = Depends(current_user)) -> list[CouponResponse]:
    require_admin(user.role.value, "list coupons")
    return [CouponResponse.from_coupon(coupon) for coupon in current_domain.repository_for(Coupon).list_all()]


@coupon_router.post("", status_code=201, response_model=CouponIdResponse)
async def create_coupon(body: CreateCouponRequest, user: Principal = Depends(current_user)) -> CouponIdResponse:
    command = CreateCoupon(
        actor_role=user.role.value,
        code=body.code,
        description=body.description,
        discount_type=body.discount_type,
        value=str(body.value),
        min_purchase=str(body.min_purchase) if body.min_purchase is not None else None,
        max_discount=str(body.max_discount) if body.max_discount is not None else None,
        starts_at=body.starts_at,
        ends_at=body.ends_at,
        usage_limit=body.usage_limit,
        active=body.active,
    )
    coupon_id = process_serialized(command, coupon_key(body.code))
    return CouponIdResponse(coupon_id=coupon_id)


@coupon_router.get("/{code}/preview", response_model=CouponPreviewResponse)
async def preview_coupon(
    code: str,
    amount: Decimal = Query(ge=0),
    user: Principal = Depends(current_user),  # noqa: ARG001
) -> CouponPreviewResponse:
    """The discount ``code`` would give on ``amount`` right now. No usage is consumed."""
    coupon = current_domain.repository_for(Coupon).find_by_code(code)
    if coupon is None:
        raise InvalidCouponError(code)

    order_amount = Money.of(amount)
    reason = coupon.rejection_reason(order_amount)
    if reason:
        raise InvalidCouponError(coupon.code, reason)

    discount = coupon.calculate_discount(order_amount)
    return CouponPreviewResponse(
        code=coupon.code,
        amount=str(order_amount),
        discount=str(discount),
        net_amount=str(order_amount.subtract(discount)),
    )
