from datetime import UTC, datetime, timedelta

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db, setup_db

    bed = DomainFixture(ordering)
    bed.setup()
    setup_db(ordering)
    yield bed
    drop_db(ordering)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Catalogue and coupon seeding
# ---------------------------------------------------------------------------
def _seed_product(product_id, list_price, sale_price="0", name=None):
    """Store a Product read model the way the catalogue price sync would."""
    from ordering.catalogue.product import Product
    from ordering.shared.money import Money

    product = Product(
        product_id=product_id,
        name=name or product_id,
        list_price=Money.of(list_price),
        sale_price=Money.of(sale_price),
        priced_at=datetime.now(UTC),
    )
    current_domain.repository_for(Product).add(product)
    return product


def _seed_coupon(code="SAVE5", discount_type="Fixed", value="5.00", **overrides):
    """Store an active coupon valid from yesterday until next week."""
    from ordering.coupon.coupon import Coupon

    now = datetime.now(UTC)
    options = {
        "starts_at": now - timedelta(days=1),
        "ends_at": now + timedelta(days=7),
    }
    options.update(overrides)
    coupon = Coupon.create(code=code, discount_type=discount_type, value=value, **options)
    current_domain.repository_for(Coupon).add(coupon)
    return current_domain.repository_for(Coupon).find_by_code(code)


@pytest.fixture()
def seed_product():
    return _seed_product


@pytest.fixture()
def seed_coupon():
    return _seed_coupon
