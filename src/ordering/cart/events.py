"""Domain events for the ShoppingCart aggregate.

Amounts are carried as decimal strings ("25.00").
"""

from protean.fields import Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)
    unit_price = String(required=True)
    subtotal = String(required=True)


@ordering.event(part_of="ShoppingCart")
class CartItemRemoved:
    """Every line for a product was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    subtotal = String(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCleared:
    """All lines and the applied coupon were dropped from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCouponApplied:
    """A coupon was redeemed against the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    coupon_code = String(required=True)
    discount = String(required=True)
    net_total = String(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCouponRemoved:
    """The applied coupon was taken off the cart. Its consumed use is not returned."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    coupon_code = String(required=True)


@ordering.event(part_of="ShoppingCart")
class CartCheckedOut:
    """The cart contents became an order and the cart was emptied."""

    __version__ = 1

    cart_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    order_id = Identifier(required=True)
