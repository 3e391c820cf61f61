import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    bed = DomainFixture(storefront)
    bed.setup()
    setup_db(storefront)
    yield bed
    drop_db(storefront)
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Collaborator fakes
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalogue():
    from storefront.catalogue import set_catalogue
    from storefront.catalogue.fake_adapter import FakeProductCatalogue

    fake = FakeProductCatalogue()
    fake.add_product("rice-basmati", "Basmati Rice 1kg", 120.0, 10, farmer_name="Green Valley Farm")
    fake.add_product("rice-sona", "Sona Masoori 1kg", 62.0, 5, farmer_name="Krishna Farms")
    fake.add_product("rice-red", "Red Matta Rice 1kg", 90.0, 0)
    set_catalogue(fake)
    return fake


@pytest.fixture()
def cart_storage():
    from storefront.cart.storage import set_cart_storage
    from storefront.cart.storage.memory_adapter import InMemoryCartStorage

    storage = InMemoryCartStorage()
    set_cart_storage(storage)
    return storage


@pytest.fixture()
def notifier():
    from storefront.notifier import set_notifier
    from storefront.notifier.fake_adapter import FakeNotifier

    fake = FakeNotifier()
    set_notifier(fake)
    return fake


@pytest.fixture()
def shipping_address():
    return {
        "full_name": "Asha Rao",
        "address_line1": "12 Paddy Field Road",
        "city": "Mandya",
        "state": "Karnataka",
        "postal_code": "571401",
        "country": "India",
        "phone_number": "9876543210",
    }
