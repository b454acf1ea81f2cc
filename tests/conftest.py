"""
Pytest configuration and shared fixtures.
"""

import pytest

from duplicatable import Cardinality, MemoryStore, TableSchema


@pytest.fixture
def order_schema() -> TableSchema:
    """Orders with items (with discounts), tags (many-to-many) and a shipment (has-one)."""
    orders = TableSchema("Orders", primary_key=("id",), finders={"translations"}, required=("code",))
    items = TableSchema("Items", primary_key=("id",), finders={"active"}, required=("sku",))
    discounts = TableSchema("Discounts", primary_key=("id",))
    tags = TableSchema("Tags", primary_key=("id",))
    shipments = TableSchema("Shipments", primary_key=("id",))

    orders.add_relationship("Items", items, Cardinality.many, foreign_key="order_id")
    orders.add_relationship("Tags", tags, Cardinality.many_to_many)
    orders.add_relationship("Shipment", shipments, Cardinality.one, foreign_key="order_id")
    items.add_relationship("Discounts", discounts, Cardinality.many, foreign_key="item_id")
    return orders


@pytest.fixture
def store() -> MemoryStore:
    store = MemoryStore()
    store.insert("Orders", {"id": 1, "code": "A", "name": "First order"})
    store.insert("Orders", {"id": 2, "code": "B", "name": "Empty order"})
    store.insert("Items", {"id": 10, "order_id": 1, "sku": "S-1", "qty": 2, "active": True})
    store.insert("Items", {"id": 11, "order_id": 1, "sku": "S-2", "qty": 5, "active": False})
    store.insert("Discounts", {"id": 100, "item_id": 10, "code": "D1", "percent": 5})
    store.insert("Discounts", {"id": 101, "item_id": 10, "code": "D2", "percent": 10})
    store.insert("Tags", {"id": 500, "label": "red"})
    store.insert("Tags", {"id": 501, "label": "blue"})
    store.insert("Shipments", {"id": 900, "order_id": 1, "carrier": "UPS"})
    store.link("Orders", "Tags", 1, 500, position=1)
    store.link("Orders", "Tags", 1, 501, position=2)
    store.add_finder("Items", "active", lambda row: row["active"])
    store.add_translation("Orders", 1, locale="fr", name="Première commande")
    return store


@pytest.fixture
def orders(order_schema, store):
    return store.repository(order_schema)
