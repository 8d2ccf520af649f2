"""
Order records navigated by property path.

Shows reads and writes through records, mappings and lists, lazy creation of
intermediate objects, per-context configuration, and a namespaced cache
fronted by BlockingCache so concurrent loaders compute each key once.

Run with ``python examples/orders.py``.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from metaobject import (
    BlockingCache,
    CacheKey,
    LruCache,
    PerpetualCache,
    assign,
    get_cache,
    meta_object,
    reflection_context,
    resolve,
)

logger = logging.getLogger(__name__)


@dataclass
class Address:
    street: str = ""
    city: str = ""


@dataclass
class Customer:
    name: str = ""
    shipping_address: Optional[Address] = None


@dataclass
class LineItem:
    sku: str = ""
    quantity: int = 0


@dataclass
class Order:
    number: int = 0
    customer: Optional[Customer] = None
    lines: List[LineItem] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)


def _order_cache():
    return BlockingCache(LruCache(PerpetualCache("orders"), size=128), timeout=10)


def load_order(number: int) -> Order:
    """Load an order once per number, building it through property paths."""
    cache = get_cache("orders", lambda namespace: _order_cache())
    key = CacheKey.from_args("order", number)
    order = cache.get(key)
    if order is not None:
        return order

    try:
        order = Order(number=number)
        assign(order, "customer.name", "Ada")
        assign(order, "customer.shipping_address.city", "London")
        assign(order, "lines[0].sku", "BOOK-1")
        assign(order, "lines[0].quantity", 2)
        assign(order, "attributes.channel", "web")
    except Exception:
        cache.remove(key)
        raise
    cache.put(key, order)
    return order


def main():
    logging.basicConfig(level=logging.DEBUG)

    order = load_order(1001)
    logger.info(f"city={resolve(order, 'customer.shipping_address.city')}")
    logger.info(f"first sku={resolve(order, 'lines[0].sku')}")

    mo = meta_object(order)
    logger.info(f"line quantity type={mo.getter_type('lines[0].quantity').__name__}")
    with reflection_context(relaxed_casing=True):
        logger.info(f"relaxed lookup={meta_object(order).find_property('CUSTOMER.SHIPPINGADDRESS')}")

    payload = {}
    assign(payload, "order.lines[0].sku", resolve(order, "lines[0].sku"))
    logger.info(f"payload={payload}")


if __name__ == "__main__":
    main()
