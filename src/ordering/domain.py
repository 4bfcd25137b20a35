"""Ordering bounded context — carts, coupons and orders.

Owns the pricing rules of the storefront: cart totals are derived from the
captured line prices and the live state of the applied coupon, coupons are
redeemed under usage limits, and checkout freezes a cart into an Order.
"""

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="ordering")

logger = get_logger(__name__)

ordering = Domain(name="ordering")
