"""Inbound cross-domain event handler — Ordering tracks Catalogue prices.

Listens for ProductPriced events from the Catalogue domain and upserts the
Product read model. Cart lines keep the price they were added at; only
products added afterwards see the new price.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.catalogue import ProductPriced

from ordering.catalogue.product import Product
from ordering.domain import ordering
from ordering.errors import ProductNotFoundError
from ordering.shared.money import Money

logger = structlog.get_logger(__name__)

ordering.register_external_event(ProductPriced, "Catalogue.ProductPriced.v1")


@ordering.event_handler(part_of=Product, stream_category="catalogue::product")
class CataloguePriceEventHandler:
    """Keeps the ordering view of product prices current."""

    @handle(ProductPriced)
    def on_product_priced(self, event: ProductPriced) -> None:
        repo = current_domain.repository_for(Product)
        list_price = Money.of(event.list_price)
        sale_price = Money.of(event.sale_price) if event.sale_price else Money.zero()

        try:
            product = repo.get_product(event.product_id)
        except ProductNotFoundError:
            product = Product(
                product_id=str(event.product_id),
                name=event.name,
                list_price=list_price,
                sale_price=sale_price,
                priced_at=event.priced_at,
            )
            logger.info("Product price recorded", product_id=str(event.product_id), list_price=str(list_price))
        else:
            product.name = event.name or product.name
            product.list_price = list_price
            product.sale_price = sale_price
            product.priced_at = event.priced_at
            logger.info(
                "Product price changed",
                product_id=str(event.product_id),
                list_price=str(list_price),
                sale_price=str(sale_price),
            )

        repo.add(product)
