"""Pytest configuration and shared fixtures."""
import pytest

from metaobject import (
    DefaultObjectFactory,
    clear_cache_registry,
    clear_metadata_cache,
    reset_reflection_config,
)
from sample_records import Address, Customer, Item, Order


class CountingObjectFactory(DefaultObjectFactory):
    """Object factory that records every type it was asked to create."""

    def __init__(self):
        self.created = []

    def create(self, type_, *args, **kwargs):
        instance = super().create(type_, *args, **kwargs)
        self.created.append(type(instance))
        return instance


@pytest.fixture(autouse=True)
def reset_registries():
    """Reset module-level registries before and after each test."""
    clear_metadata_cache()
    reset_reflection_config()
    clear_cache_registry()

    yield

    clear_metadata_cache()
    reset_reflection_config()
    clear_cache_registry()


@pytest.fixture
def order():
    """Provide an order with a customer and two items."""
    return Order(
        id=7,
        customer=Customer(name="Ann", address=Address(city="Oslo")),
        items=[Item(sku="A-1", price=2.5), Item(sku="B-2", price=4.0)],
        tags={"priority": "high"},
    )


@pytest.fixture
def counting_factory():
    """Provide an object factory that records what it creates."""
    return CountingObjectFactory()
