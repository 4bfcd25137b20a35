"""Repository for the Coupon aggregate."""

from ordering.coupon.coupon import Coupon, normalize_code
from ordering.domain import ordering


@ordering.repository(part_of=Coupon)
class CouponRepository:
    def find_by_code(self, code) -> Coupon | None:
        """Look a coupon up by code, ignoring case and surrounding whitespace."""
        return self._dao.query.filter(code=normalize_code(code)).all().first

    def list_all(self) -> list[Coupon]:
        return sorted(self._dao.query.all().items, key=lambda coupon: coupon.code)

    def applied_to(self, cart) -> Coupon | None:
        """The coupon currently applied to ``cart``, if any."""
        if not cart.applied_coupon_code:
            return None
        return self.find_by_code(cart.applied_coupon_code)
