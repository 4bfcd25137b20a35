"""Cross-domain event contracts for Catalogue domain events.

These classes define the event shape consumed by the Ordering domain. They
are registered as external events via domain.register_external_event() with
matching __type__ strings so Protean's stream deserialization works
correctly. Prices travel as decimal strings ("19.99").
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class ProductPriced(BaseEvent):
    """A product's list price or sale price was set or changed."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(max_length=255)
    list_price = String(required=True)
    sale_price = String()  # Empty or "0.00" when the product is not on sale
    priced_at = DateTime(required=True)
