"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.coupons import ApplyCouponToCart
from ordering.cart.items import AddToCart
from ordering.cart.management import OpenCart
from ordering.coupon.coupon import Coupon
from ordering.errors import EmptyCartError, InvalidCouponError
from ordering.order.order import Order
from ordering.shared.money import Money
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def owner_id():
    return "cust-bdd-001"


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def placed():
    """Container for the id of the order placed by a checkout step."""
    return {"order_id": None}


def _cart(owner_id):
    return current_domain.repository_for(ShoppingCart).for_owner(owner_id)


def _coupon(code):
    return current_domain.repository_for(Coupon).find_by_code(code)


def _attempt(error, command):
    try:
        return current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        error["exc"] = exc
        return None


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalogue lists "{product_id}" at "{price}"'))
def catalogue_lists(seed_product, product_id, price):
    seed_product(product_id, price)


@given("an empty cart")
def empty_cart(owner_id):
    current_domain.process(OpenCart(owner_id=owner_id), asynchronous=False)


@given(
    parsers.cfparse(
        'a fixed coupon "{code}" worth "{value}" with minimum purchase "{min_purchase}" limited to {limit:d} {unit}'
    )
)
def fixed_coupon(seed_coupon, code, value, min_purchase, limit, unit):
    seed_coupon(code=code, discount_type="Fixed", value=value, min_purchase=min_purchase, usage_limit=limit)


@given(parsers.cfparse('the coupon "{code}" was already used elsewhere'))
def coupon_used_elsewhere(code):
    coupon = _coupon(code)
    coupon.redeem(Money.of("100.00"))
    current_domain.repository_for(Coupon).add(coupon)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('{quantity:d} of "{product_id}" {verb} added to the cart'))
def add_to_cart(owner_id, quantity, product_id, verb):
    current_domain.process(
        AddToCart(owner_id=owner_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


@when(parsers.cfparse('the coupon "{code}" is applied to the cart'))
def apply_coupon(owner_id, code, error):
    _attempt(error, ApplyCouponToCart(owner_id=owner_id, coupon_code=code))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart subtotal is "{amount}"'))
def cart_subtotal_is(owner_id, amount):
    assert _cart(owner_id).subtotal == Money.of(amount)


@then(parsers.cfparse('the cart net total is "{amount}"'))
def cart_net_total_is(owner_id, amount):
    assert _cart(owner_id).net_total == Money.of(amount)


@then(parsers.cfparse('the cart discount is "{amount}"'))
def cart_discount_is(owner_id, amount):
    assert _cart(owner_id).discount_amount == Money.of(amount)


@then("the cart is empty")
def cart_is_empty(owner_id):
    assert _cart(owner_id).is_empty


@then(parsers.cfparse("the cart still has {count:d} line"))
def cart_line_count(owner_id, count):
    assert len(_cart(owner_id).items) == count


@then(parsers.cfparse('the coupon "{code}" has been used {count:d} time'))
def coupon_usage_is(code, count):
    assert _coupon(code).usage_count == count


@then(parsers.cfparse('the order grand total is "{amount}"'))
def order_grand_total_is(placed, amount):
    order = current_domain.repository_for(Order).get(placed["order_id"])
    assert order.grand_total == Money.of(amount)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(placed, status):
    assert current_domain.repository_for(Order).get(placed["order_id"]).order_status == status


@then("the cart action fails because the cart is empty")
def fails_with_empty_cart(error):
    assert isinstance(error["exc"], EmptyCartError)


@then("the cart action fails because the coupon is invalid")
def fails_with_invalid_coupon(error):
    assert isinstance(error["exc"], InvalidCouponError)
