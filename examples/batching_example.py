"""
Batching walkthrough with an in-memory loader.

Usage:
    python examples/batching_example.py
"""

import asyncio
import logging

from lazy_record import KeyState, LazyRecord, get_metrics_report
from lazy_record.utils.logging_config import initialize_logging

PRODUCTS = {
    42: {"name": "Kettle", "price": 39.9, "stock": 12},
}


async def load_product(record, keys):
    """Pretend to be a slow API returning only the requested fields."""
    await asyncio.sleep(0.1)
    product = PRODUCTS[record["id"]]
    return {key: product[key] for key in keys if key in product}


async def main():
    initialize_logging(level=logging.DEBUG)

    product = LazyRecord({"id": 42}, load_product, ["name", "price", "stock"])

    # Same tick: one loader call for both keys
    name, price = product.name, product.price
    print("state of name:", product.state("name"))
    print("loaded:", await name, await price)

    # Cached now
    print("name again:", product.name)

    # Not in the allow list: None right away, no loader call
    print("colour:", product.colour, product.state("colour") is KeyState.BLOCKED)

    print("stock:", await product.aget("stock"))
    print("loader calls:", product.stats.loader_calls)
    print(get_metrics_report())


if __name__ == "__main__":
    asyncio.run(main())
