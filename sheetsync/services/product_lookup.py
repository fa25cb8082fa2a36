# Product name -> brand / product type.
#
# The mapping table is loaded once per process and kept until
# clear_product_mapping_cache() is called; it never expires on its own.

from typing import Dict, Optional

from sheetsync.core.logger import logger
from sheetsync.core.mapping import PRODUCT_KEYWORDS, UNKNOWN_PRODUCT


PRODUCT_MAPPING_TABLE = "product_mapping"

_product_mapping_cache: Optional[Dict[str, str]] = None


async def load_product_mappings(store) -> Dict[str, str]:

    global _product_mapping_cache

    if _product_mapping_cache is not None:
        return _product_mapping_cache

    rows = await store.select(PRODUCT_MAPPING_TABLE, columns="product_name, product_type")

    mappings = {}

    for row in rows:

        name = str(row.get("product_name") or "").strip().lower()

        if name:
            mappings[name] = row.get("product_type") or UNKNOWN_PRODUCT

    logger.info(f"Loaded {len(mappings)} product mappings")

    _product_mapping_cache = mappings

    return mappings


def clear_product_mapping_cache():

    global _product_mapping_cache

    _product_mapping_cache = None


def resolve_product_type(product_name, mappings: Dict[str, str]) -> str:
    """exact -> substring either way -> keyword -> "Unknown"."""

    name = str(product_name or "").strip().lower()

    if not name:
        return UNKNOWN_PRODUCT

    if name in mappings:
        return mappings[name]

    for key, product_type in mappings.items():

        if key in name or name in key:
            return product_type

    for keyword, product_type in PRODUCT_KEYWORDS:

        if keyword in name:
            return product_type

    return UNKNOWN_PRODUCT


class ProductLookup:

    def __init__(self, store=None):
        self.store = store


    async def lookup(self, product_name) -> str:

        mappings = {}

        if self.store is not None:
            mappings = await load_product_mappings(self.store)

        return resolve_product_type(product_name, mappings)
