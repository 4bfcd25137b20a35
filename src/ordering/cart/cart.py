"""Shopping Cart aggregate — one mutable cart per owner with derived totals.

The cart is a standard CQRS aggregate (not event sourced). Each line captures
the product's effective price when it is first added; later catalogue price
changes do not touch existing lines. Subtotal, discount and net total are
derived values: every structural mutation recomputes them from the lines and
from the live state of the applied coupon, so they can never drift from the
items they summarise.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, ValueObject

from ordering.cart.events import (
    CartCheckedOut,
    CartCleared,
    CartCouponApplied,
    CartCouponRemoved,
    CartItemAdded,
    CartItemRemoved,
)
from ordering.domain import ordering
from ordering.errors import EmptyCartError, InvalidCouponError
from ordering.shared.money import Money


def _cents(money):
    return money.cents if money is not None else 0


@ordering.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = ValueObject(Money, required=True)  # Effective price when first added
    added_at = DateTime()

    @property
    def line_total(self) -> Money:
        return self.unit_price.multiply(self.quantity)


@ordering.aggregate
class ShoppingCart:
    owner_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    applied_coupon_code = String(max_length=50)
    discount_amount = ValueObject(Money)
    subtotal = ValueObject(Money)
    net_total = ValueObject(Money)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_must_match_items(self):
        expected = sum(_cents(item.unit_price) * item.quantity for item in self.items)
        if _cents(self.subtotal) != expected:
            raise ValidationError({"subtotal": ["Subtotal does not match the cart items"]})
        if _cents(self.net_total) != _cents(self.subtotal) - _cents(self.discount_amount):
            raise ValidationError({"net_total": ["Net total must equal subtotal minus discount"]})

    @invariant.post
    def discount_must_stay_within_subtotal(self):
        discount = _cents(self.discount_amount)
        if discount < 0 or discount > _cents(self.subtotal):
            raise ValidationError({"discount_amount": ["Discount must be between zero and the subtotal"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, owner_id):
        now = datetime.now(UTC)
        return cls(
            owner_id=owner_id,
            subtotal=Money.zero(),
            net_total=Money.zero(),
            created_at=now,
            updated_at=now,
        )

    @property
    def is_empty(self):
        return not self.items

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    def _recompute(self, coupon=None, now=None):
        """Derive subtotal, discount and net total from the lines.

        The applied coupon's use was consumed when it was applied, so its
        usage limit is not checked again. A coupon that no longer qualifies
        stays applied with a zero discount.
        """
        subtotal = Money.total(item.line_total for item in self.items)
        discount = None
        if self.applied_coupon_code:
            discount = Money.zero()
            if coupon is not None:
                discount = coupon.calculate_discount(subtotal, now, enforce_usage_limit=False)

        self.subtotal = subtotal
        self.discount_amount = discount
        self.net_total = subtotal.subtract(discount or Money.zero())
        self.updated_at = datetime.now(UTC)

    def recompute(self, coupon=None, now=None):
        """Refresh the derived totals against the current state of ``coupon``."""
        with atomic_change(self):
            self._recompute(coupon, now)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity, coupon=None, now=None):
        """Add ``quantity`` units of ``product``.

        An existing line keeps its captured price and only grows in
        quantity; a new line captures the product's current effective price.
        """
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        with atomic_change(self):
            existing = self.line_for(product.product_id)
            if existing:
                existing.quantity += quantity
                line = existing
            else:
                line = CartItem(
                    product_id=str(product.product_id),
                    quantity=quantity,
                    unit_price=product.effective_price(),
                    added_at=datetime.now(UTC),
                )
                self.add_items(line)
            self._recompute(coupon, now)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                product_id=str(product.product_id),
                quantity=quantity,
                line_quantity=line.quantity,
                unit_price=str(line.unit_price),
                subtotal=str(self.subtotal),
            )
        )

    def remove_item(self, product_id, coupon=None, now=None):
        """Remove every line for ``product_id``. Removing an absent product changes nothing."""
        lines = [i for i in self.items if str(i.product_id) == str(product_id)]
        if not lines:
            return False

        with atomic_change(self):
            for line in lines:
                self.remove_items(line)
            self._recompute(coupon, now)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                product_id=str(product_id),
                subtotal=str(self.subtotal),
            )
        )
        return True

    def clear(self):
        """Drop every line and the applied coupon."""
        with atomic_change(self):
            for line in list(self.items):
                self.remove_items(line)
            self.applied_coupon_code = None
            self._recompute()

        self.raise_(CartCleared(cart_id=str(self.id), owner_id=str(self.owner_id)))

    # -------------------------------------------------------------------
    # Coupon management
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon, now=None):
        """Redeem ``coupon`` against the current subtotal and keep it applied.

        Consumes one use of the coupon; the caller persists the coupon in
        the same unit of work as the cart.
        """
        if self.is_empty:
            raise EmptyCartError("Cannot apply a coupon to an empty cart")
        if self.applied_coupon_code == coupon.code:
            raise InvalidCouponError(coupon.code, "Coupon is already applied to this cart")

        subtotal = Money.total(item.line_total for item in self.items)
        coupon.redeem(subtotal, now)

        with atomic_change(self):
            self.applied_coupon_code = coupon.code
            self._recompute(coupon, now)

        self.raise_(
            CartCouponApplied(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                coupon_code=coupon.code,
                discount=str(self.discount_amount),
                net_total=str(self.net_total),
            )
        )

    def remove_coupon(self):
        """Take the applied coupon off the cart. The consumed use is not given back."""
        code = self.applied_coupon_code
        if not code:
            return False

        with atomic_change(self):
            self.applied_coupon_code = None
            self._recompute()

        self.raise_(
            CartCouponRemoved(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                coupon_code=code,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def check_out(self, order_id):
        """Empty the cart after its contents became order ``order_id``."""
        if self.is_empty:
            raise EmptyCartError()

        with atomic_change(self):
            for line in list(self.items):
                self.remove_items(line)
            self.applied_coupon_code = None
            self._recompute()

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                owner_id=str(self.owner_id),
                order_id=str(order_id),
            )
        )
