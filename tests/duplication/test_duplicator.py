"""Tests for Duplicator and the module level duplicate functions.

These run against an in-memory store, so they cover the whole fetch,
transform and save cycle without a database.
"""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from duplicatable import (
    DuplicatableNotFoundError,
    DuplicatableSchemaError,
    DuplicationConfig,
    Duplicator,
    duplicate,
    duplicate_entity,
)
from duplicatable.duplication.finder import ContainEntry, EagerLoadSpec

FULL_GRAPH = ["Items", "Items.Discounts", "Tags", "Shipment"]


def snapshot(store) -> dict:
    return {table: {key: dict(row) for key, row in rows.items()} for table, rows in store.rows.items()}


class TestDuplicateEntity:
    """Tests for fetching and transforming without saving."""

    def test_root_only(self, orders, store):
        before = snapshot(store)
        copy = duplicate_entity(orders, 1)

        assert copy.is_new
        assert copy.to_dict() == {"code": "A", "name": "First order"}
        assert snapshot(store) == before

    def test_with_contain(self, orders):
        copy = duplicate_entity(orders, 1, contain=FULL_GRAPH)

        assert [item.to_dict() for item in copy["items"]] == [
            {"sku": "S-1", "qty": 2, "active": True, "discounts": [{"code": "D1", "percent": 5}, {"code": "D2", "percent": 10}]},
            {"sku": "S-2", "qty": 5, "active": False, "discounts": []},
        ]
        assert [tag.to_dict() for tag in copy["tags"]] == [{"id": 500, "label": "red"}, {"id": 501, "label": "blue"}]
        assert copy["shipment"].to_dict() == {"carrier": "UPS"}

    def test_set_generator(self, orders):
        copy = duplicate_entity(orders, 1, set={"code": lambda record: record["code"] + "-dup"})
        assert copy["code"] == "A-dup"

    def test_fetch_arguments(self, orders):
        duplicator = Duplicator(orders, DuplicationConfig(contain=["Items", "Shipment"], finder="active"))

        with patch.object(orders, "get", wraps=orders.get) as get:
            duplicator.duplicate_entity(1)

        get.assert_called_once_with(
            1,
            contain=EagerLoadSpec((ContainEntry("Items", "active"), ContainEntry("Shipment"))),
            finder="all",
        )

    def test_finder_applies_per_node(self, orders):
        copy = duplicate_entity(orders, 1, contain=["Items"], finder="active")
        assert [item["sku"] for item in copy["items"]] == ["S-1"]

    def test_include_translations(self, orders):
        with pytest.warns(DeprecationWarning):
            copy = duplicate_entity(orders, 1, contain=["Items"], includeTranslations=True)

        assert [t.to_dict() for t in copy.translations] == [{"locale": "fr", "name": "Première commande"}]
        assert all(t.is_new for t in copy.translations)
        # Items have no translations finder, so all items are loaded.
        assert len(copy["items"]) == 2

    def test_unknown_path_fails_before_fetch(self, orders):
        with patch.object(orders, "get") as get:
            with pytest.raises(DuplicatableSchemaError, match="Invoices"):
                duplicate_entity(orders, 1, contain=["Items.Invoices"])
        get.assert_not_called()

    def test_unknown_action_path_fails_before_fetch(self, orders):
        with patch.object(orders, "get") as get:
            with pytest.raises(DuplicatableSchemaError):
                Duplicator.from_config(orders, remove=["Invoices.code"])
        get.assert_not_called()

    def test_not_found(self, orders):
        with pytest.raises(DuplicatableNotFoundError):
            duplicate_entity(orders, 99)

    def test_not_found_through_finder(self, order_schema, store):
        items = store.repository(order_schema.relationship("Items").target)
        with pytest.raises(DuplicatableNotFoundError):
            duplicate_entity(items, 11, finder="active")


class TestDuplicate:
    """Tests for saving duplicates."""

    def test_saves_root(self, orders, store):
        result = duplicate(orders, 1)

        assert result.ok
        assert result
        assert result.record["id"] == 3
        assert not result.record.is_new
        assert store.rows["Orders"][(3,)] == {"id": 3, "code": "A", "name": "First order"}

    def test_saves_graph(self, orders, store):
        result = duplicate(orders, 1, contain=FULL_GRAPH, append={"name": " (copy)"})

        copy = result.record
        assert result.ok
        assert store.rows["Orders"][(3,)]["name"] == "First order (copy)"
        new_items = [row for row in store.rows["Items"].values() if row["order_id"] == 3]
        assert [row["sku"] for row in new_items] == ["S-1", "S-2"]
        assert {row["id"] for row in new_items} == {12, 13}
        new_discounts = [row for row in store.rows["Discounts"].values() if row["item_id"] == copy["items"][0]["id"]]
        assert [row["code"] for row in new_discounts] == ["D1", "D2"]
        assert store.rows["Shipments"][(901,)] == {"id": 901, "order_id": 3, "carrier": "UPS"}

    def test_many_to_many_links_existing_targets(self, orders, store):
        duplicate(orders, 1, contain=["Tags"])

        assert len(store.rows["Tags"]) == 2
        links = [link for link in store.links[("Orders", "Tags")] if link.parent == (3,)]
        assert [link.target for link in links] == [(500,), (501,)]
        # Join data is not carried over to the new links.
        assert [link.data for link in links] == [{}, {}]

    def test_source_unchanged(self, orders, store):
        before = snapshot(store)
        duplicate(orders, 1, contain=FULL_GRAPH, set={"Items.qty": 0})

        after = snapshot(store)
        for table, rows in before.items():
            for key, row in rows.items():
                assert after[table][key] == row

    def test_translations_saved(self, orders, store):
        with pytest.warns(DeprecationWarning):
            duplicate(orders, 1, include_translations=True)
        assert store.translations["Orders"][(3,)] == [{"locale": "fr", "name": "Première commande"}]

    def test_validation_failure(self, orders, store, caplog):
        before = snapshot(store)
        with caplog.at_level(logging.WARNING, logger="duplicatable"):
            result = duplicate(orders, 1, contain=["Items"], set={"code": None})

        assert not result.ok
        assert not result
        assert result.failed_fields == ["code"]
        assert result.record.is_new
        assert "id" not in result.record
        assert snapshot(store) == before
        assert "failed validation" in caplog.text

    def test_nested_validation_failure(self, orders):
        result = duplicate(orders, 1, contain=["Items"], set={"Items.sku": ""})
        assert result.failed_fields == ["items.0.sku", "items.1.sku"]

    def test_save_options_passed_through(self, orders, store):
        result = duplicate(orders, 1, set={"code": None}, saveOptions={"validate": False})
        assert result.ok
        assert store.rows["Orders"][(3,)]["code"] is None

    def test_save_defaults_to_contain(self, orders):
        duplicator = Duplicator.from_config(orders, contain=["Items"])
        with patch.object(orders, "save", wraps=orders.save) as save:
            duplicator.duplicate(1)
        assert save.call_args.kwargs == {"associated": ["Items"]}

    def test_explicit_associated_wins(self, orders, store):
        result = duplicate(orders, 1, contain=["Items"], save_options={"associated": []})

        assert result.ok
        assert [row for row in store.rows["Items"].values() if row["order_id"] == 3] == []

    def test_repeated_duplicates_are_independent(self, orders, store):
        duplicator = Duplicator.from_config(orders, contain=["Items"])
        first = duplicator.duplicate(1)
        second = duplicator.duplicate(1)

        assert first.record["id"] == 3
        assert second.record["id"] == 4
        assert len(store.rows["Items"]) == 6
