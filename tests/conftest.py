import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay before the domain module is first imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path or "/bdd/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def run_around_tests(_ctx):
    """Clear stores, event store and outbound fakes after every test."""
    yield

    from protean import current_domain

    from storefront.channel import reset_channels
    from storefront.media import reset_image_store

    for _, provider in current_domain.providers.items():
        provider._data_reset()
    current_domain.event_store.store._data_reset()

    reset_channels()
    reset_image_store()


# ---------------------------------------------------------------------------
# Builders shared across areas
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Return a function that lists a product through the catalogue and returns its id."""
    import json

    from protean import current_domain

    from storefront.catalogue.management import AddProduct

    def _make(
        name="Wool Parka",
        price=2500.0,
        category="Outerwear",
        subcategory="Parka",
        gender="Men",
        age="Adult",
        season="Winter",
        stock=None,
        **extra,
    ):
        command = AddProduct(
            name=name,
            price=price,
            category=category,
            subcategory=subcategory,
            gender=gender,
            age=age,
            season=season,
            stock=json.dumps(stock if stock is not None else [{"size": "M", "quantity": 3}]),
            **extra,
        )
        return current_domain.process(command, asynchronous=False)

    return _make


@pytest.fixture()
def make_user():
    """Return a function that registers a directory user and returns its id."""
    from protean import current_domain

    from storefront.identity.registration import RegisterUser

    def _make(user_id, name="Amina", email=None, role="customer"):
        command = RegisterUser(
            user_id=user_id,
            name=name,
            email=email or f"{user_id}@example.com",
            role=role,
        )
        return current_domain.process(command, asynchronous=False)

    return _make
