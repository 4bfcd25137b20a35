"""Error taxonomy of the Ordering domain.

Business rule violations build on protean's exception types so that the
framework's FastAPI handlers map them to the right status codes
(ValidationError -> 400, ObjectNotFoundError -> 404). The remaining errors
are mapped in ``ordering.api.errors``.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class EmptyCartError(ValidationError):
    """Raised when a coupon or a checkout targets a cart without line items."""

    def __init__(self, message="Cart is empty"):
        super().__init__({"cart": [message]})


class InvalidCouponError(ValidationError):
    """Raised when a coupon code is unknown or does not qualify for the amount."""

    def __init__(self, code, reason="Invalid coupon code"):
        self.code = code
        self.reason = reason
        super().__init__({"coupon_code": [reason]})


class ProductNotFoundError(ObjectNotFoundError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__({"product_id": [f"Product {product_id} does not exist"]})


class ForbiddenError(Exception):
    """The authenticated user is not allowed to perform the operation."""


class UnauthenticatedError(Exception):
    """No user identity accompanies the request."""


class ConflictError(Exception):
    """A concurrent modification could not be reconciled after retrying."""


class NegativeResultError(ArithmeticError):
    """A monetary subtraction would have produced a negative amount."""
