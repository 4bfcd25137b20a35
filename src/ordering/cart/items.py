"""Cart item management — commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import ShoppingCart
from ordering.catalogue.product import Product
from ordering.coupon.coupon import Coupon
from ordering.domain import ordering


@ordering.command(part_of="ShoppingCart")
class AddToCart:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@ordering.command(part_of="ShoppingCart")
class RemoveFromCart:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get_product(command.product_id)

        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create(command.owner_id)
        cart.add_item(
            product=product,
            quantity=command.quantity,
            coupon=current_domain.repository_for(Coupon).applied_to(cart),
        )
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart, _ = repo.get_or_create(command.owner_id)
        removed = cart.remove_item(
            product_id=command.product_id,
            coupon=current_domain.repository_for(Coupon).applied_to(cart),
        )
        if removed:
            repo.add(cart)
        return str(cart.id)
