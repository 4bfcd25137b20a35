"""Application tests for cart commands processed through the domain."""

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from ordering.cart.cart import ShoppingCart
from ordering.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from ordering.cart.items import AddToCart, RemoveFromCart
from ordering.cart.management import ClearCart, OpenCart
from ordering.catalogue.price_sync import CataloguePriceEventHandler
from ordering.coupon.coupon import Coupon
from ordering.errors import EmptyCartError, InvalidCouponError, ProductNotFoundError
from ordering.shared.money import Money
from protean import current_domain
from protean.exceptions import ValidationError
from shared.events.catalogue import ProductPriced

OWNER = "cust-app-001"


def _cart():
    return current_domain.repository_for(ShoppingCart).for_owner(OWNER)


def _add(product_id, quantity=1, owner_id=OWNER):
    return current_domain.process(
        AddToCart(owner_id=owner_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


@pytest.fixture()
def products(seed_product):
    seed_product("prod-a", "10.00")
    seed_product("prod-b", "5.00")
    seed_product("prod-sale", "20.00", sale_price="15.00")


class TestOpenCart:
    def test_creates_cart_on_first_access(self):
        cart_id = current_domain.process(OpenCart(owner_id=OWNER), asynchronous=False)
        assert cart_id is not None
        assert str(_cart().id) == cart_id
        assert _cart().subtotal == Money.zero()

    def test_returns_the_same_cart(self):
        first = current_domain.process(OpenCart(owner_id=OWNER), asynchronous=False)
        second = current_domain.process(OpenCart(owner_id=OWNER), asynchronous=False)
        assert first == second

    def test_one_cart_per_owner(self):
        current_domain.process(OpenCart(owner_id="cust-x"), asynchronous=False)
        current_domain.process(OpenCart(owner_id="cust-y"), asynchronous=False)
        repo = current_domain.repository_for(ShoppingCart)
        assert repo.for_owner("cust-x").id != repo.for_owner("cust-y").id

    def test_get_or_create_reports_creation(self):
        repo = current_domain.repository_for(ShoppingCart)
        _, created = repo.get_or_create("cust-new")
        _, created_again = repo.get_or_create("cust-new")
        assert created is True
        assert created_again is False

    def test_store_rejects_a_second_cart_for_the_owner(self):
        repo = current_domain.repository_for(ShoppingCart)
        repo.add(ShoppingCart.create(owner_id="cust-dup"))

        with pytest.raises(ValidationError) as exc:
            repo.add(ShoppingCart.create(owner_id="cust-dup"))

        assert "owner_id" in exc.value.messages
        assert len(repo._dao.query.filter(owner_id="cust-dup").all().items) == 1

    def test_get_or_create_reuses_cart_created_concurrently(self):
        repo = current_domain.repository_for(ShoppingCart)
        existing = ShoppingCart.create(owner_id="cust-race")
        repo.add(existing)

        # The first lookup misses, as if another worker inserted in between
        with patch.object(type(repo), "for_owner", side_effect=[None, existing]):
            cart, created = repo.get_or_create("cust-race")

        assert created is False
        assert cart.id == existing.id
        assert len(repo._dao.query.filter(owner_id="cust-race").all().items) == 1


class TestAddToCart:
    def test_add_item(self, products):
        _add("prod-a", 2)
        cart = _cart()
        assert len(cart.items) == 1
        assert cart.subtotal == Money.of("20.00")

    def test_add_item_uses_sale_price(self, products):
        _add("prod-sale")
        assert _cart().items[0].unit_price == Money.of("15.00")

    def test_unknown_product(self, products):
        with pytest.raises(ProductNotFoundError):
            _add("prod-missing")
        assert _cart() is None

    def test_price_change_affects_only_new_lines(self, products):
        _add("prod-a")
        CataloguePriceEventHandler().on_product_priced(
            ProductPriced(product_id="prod-a", list_price="12.00", priced_at=datetime.now(UTC))
        )
        _add("prod-a")
        cart = _cart()
        assert cart.items[0].quantity == 2
        assert cart.items[0].unit_price == Money.of("10.00")
        assert cart.subtotal == Money.of("20.00")

    def test_subtotal_matches_items_after_sequence(self, products):
        _add("prod-a", 2)
        _add("prod-b", 3)
        current_domain.process(RemoveFromCart(owner_id=OWNER, product_id="prod-a"), asynchronous=False)
        _add("prod-sale", 1)
        _add("prod-a", 1)
        cart = _cart()
        expected = Money.total(item.line_total for item in cart.items)
        assert cart.subtotal == expected == Money.of("40.00")
        assert cart.net_total == cart.subtotal


class TestRemoveFromCart:
    def test_remove_twice_equals_remove_once(self, products):
        _add("prod-a", 2)
        _add("prod-b", 1)
        command = RemoveFromCart(owner_id=OWNER, product_id="prod-a")
        current_domain.process(command, asynchronous=False)
        after_once = _cart().subtotal
        current_domain.process(command, asynchronous=False)
        assert _cart().subtotal == after_once == Money.of("5.00")

    def test_remove_from_missing_cart_creates_empty_cart(self):
        current_domain.process(RemoveFromCart(owner_id=OWNER, product_id="prod-a"), asynchronous=False)
        assert _cart().is_empty


class TestClearCart:
    def test_clear(self, products, seed_coupon):
        seed_coupon()
        _add("prod-a", 3)
        current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="SAVE5"), asynchronous=False)
        current_domain.process(ClearCart(owner_id=OWNER), asynchronous=False)
        cart = _cart()
        assert cart.is_empty
        assert cart.applied_coupon_code is None
        assert cart.net_total == Money.zero()


class TestCartCoupons:
    def test_apply_coupon(self, products, seed_coupon):
        seed_coupon(min_purchase="20.00", usage_limit=10)
        _add("prod-a", 2)
        _add("prod-b", 1)
        current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="save5"), asynchronous=False)

        cart = _cart()
        assert cart.applied_coupon_code == "SAVE5"
        assert cart.discount_amount == Money.of("5.00")
        assert cart.net_total == Money.of("20.00")
        assert current_domain.repository_for(Coupon).find_by_code("SAVE5").usage_count == 1

    def test_apply_coupon_to_empty_cart(self, seed_coupon):
        seed_coupon()
        with pytest.raises(EmptyCartError):
            current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="SAVE5"), asynchronous=False)

    def test_unknown_coupon(self, products):
        _add("prod-a")
        with pytest.raises(InvalidCouponError):
            current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="NOPE"), asynchronous=False)

    def test_coupon_below_min_purchase(self, products, seed_coupon):
        seed_coupon(min_purchase="50.00", usage_limit=10)
        _add("prod-a")
        with pytest.raises(InvalidCouponError):
            current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="SAVE5"), asynchronous=False)
        assert _cart().applied_coupon_code is None
        assert current_domain.repository_for(Coupon).find_by_code("SAVE5").usage_count == 0

    def test_apply_then_remove_keeps_usage(self, products, seed_coupon):
        seed_coupon(usage_limit=10)
        _add("prod-a", 3)
        current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="SAVE5"), asynchronous=False)
        current_domain.process(RemoveCouponFromCart(owner_id=OWNER), asynchronous=False)

        cart = _cart()
        assert cart.applied_coupon_code is None
        assert cart.net_total == cart.subtotal
        assert current_domain.repository_for(Coupon).find_by_code("SAVE5").usage_count == 1

    def test_discount_recomputed_after_item_changes(self, products, seed_coupon):
        seed_coupon(code="TENPCT", discount_type="Percentage", value="10")
        _add("prod-a", 10)
        current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="TENPCT"), asynchronous=False)
        assert _cart().discount_amount == Money.of("10.00")

        _add("prod-b", 2)
        cart = _cart()
        assert cart.discount_amount == Money.of("11.00")
        assert cart.net_total == Money.of("99.00")

    def test_deactivated_coupon_discounts_nothing_on_next_read(self, products, seed_coupon):
        seed_coupon(usage_limit=10)
        _add("prod-a", 3)
        current_domain.process(ApplyCouponToCart(owner_id=OWNER, coupon_code="SAVE5"), asynchronous=False)

        coupon = current_domain.repository_for(Coupon).find_by_code("SAVE5")
        coupon.active = False
        current_domain.repository_for(Coupon).add(coupon)

        current_domain.process(OpenCart(owner_id=OWNER), asynchronous=False)
        cart = _cart()
        assert cart.applied_coupon_code == "SAVE5"
        assert cart.discount_amount == Money.zero()
        assert cart.net_total == Money.of("30.00")
