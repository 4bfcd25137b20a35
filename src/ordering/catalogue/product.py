"""Product price read model — the catalogue as seen from the Ordering domain.

Ordering never edits products. It keeps the list and sale price of each
product, synchronised from Catalogue events, so that a cart line can capture
the effective price at the moment the product is added.
"""

from protean.fields import DateTime, Identifier, String, ValueObject

from ordering.domain import ordering
from ordering.errors import ProductNotFoundError
from ordering.shared.money import Money


@ordering.aggregate
class Product:
    product_id = Identifier(identifier=True)
    name = String(max_length=255)
    list_price = ValueObject(Money, required=True)
    sale_price = ValueObject(Money)  # Zero or missing when not on sale
    priced_at = DateTime()

    def effective_price(self) -> Money:
        """The sale price when the product is on sale, else the list price."""
        if self.sale_price is not None and self.sale_price.cents > 0:
            return self.sale_price
        return self.list_price


@ordering.repository(part_of=Product)
class ProductRepository:
    def get_product(self, product_id) -> Product:
        product = self._dao.query.filter(product_id=str(product_id)).all().first
        if product is None:
            raise ProductNotFoundError(product_id)
        return product
