import asyncio

import pytest

from sheetsync.services.product_lookup import (
    ProductLookup,
    clear_product_mapping_cache,
    load_product_mappings,
    resolve_product_type,
)

from conftest import FakeStore


MAPPINGS = {
    "roove blueberry 30ml": "Roove",
    "almona glow": "Almona",
}


@pytest.mark.parametrize("name, expected", [
    ("Roove Blueberry 30ml", "Roove"),
    ("Roove Blueberry 30ml Bundle", "Roove"),
    ("glow", "Almona"),
    ("Clola Night Serum", "YUV"),
    ("Dr Hyun Toner", "DrHyun"),
    ("Mystery Bundle", "Unknown"),
    ("", "Unknown"),
    (None, "Unknown"),
])
def test_resolve_product_type(name, expected):
    assert resolve_product_type(name, MAPPINGS) == expected


def test_mappings_loaded_once_until_cleared():
    store = FakeStore({"product_mapping": [
        {"product_name": "Roove Blueberry 30ml", "product_type": "Roove"},
    ]})

    first = asyncio.run(load_product_mappings(store))
    assert first == {"roove blueberry 30ml": "Roove"}

    store.tables["product_mapping"].append({"product_name": "Mystery Bundle", "product_type": "Other"})

    asyncio.run(load_product_mappings(store))
    assert store.calls.count(("select", "product_mapping")) == 1
    assert asyncio.run(ProductLookup(store).lookup("Mystery Bundle")) == "Unknown"

    clear_product_mapping_cache()

    assert asyncio.run(ProductLookup(store).lookup("Mystery Bundle")) == "Other"
    assert store.calls.count(("select", "product_mapping")) == 2


def test_lookup_without_store_uses_keywords():
    assert asyncio.run(ProductLookup().lookup("Pluve Hair Tonic")) == "Pluve"
