"""
Tests for field actions.
"""

from duplicatable.model.actions import (
    Append,
    GeneratorValue,
    LiteralValue,
    Prepend,
    Remove,
    Set,
    apply_action,
    as_set_value,
)
from duplicatable.model.record import Record


def test_as_set_value():
    assert as_set_value("x") == LiteralValue("x")
    assert as_set_value(None) == LiteralValue(None)
    assert isinstance(as_set_value(lambda record: 1), GeneratorValue)
    wrapped = GeneratorValue(str)
    assert as_set_value(wrapped) is wrapped


def test_remove():
    record = Record("Orders", {"code": "42", "name": "n"})
    apply_action(Remove(), record, "code")
    assert record.to_dict() == {"name": "n"}
    apply_action(Remove(), record, "code")
    assert record.to_dict() == {"name": "n"}


def test_set_literal_overwrites():
    record = Record("Orders", {"code": "42"})
    apply_action(Set(LiteralValue("new")), record, "code")
    apply_action(Set(LiteralValue(3)), record, "count")
    assert record.to_dict() == {"code": "new", "count": 3}


def test_set_generator_receives_record():
    first = Record("Items", {"sku": "S-1"})
    second = Record("Items", {"sku": "S-2"})
    action = Set(GeneratorValue(lambda record: record["sku"] + "-copy"))
    apply_action(action, first, "sku")
    apply_action(action, second, "sku")
    assert first["sku"] == "S-1-copy"
    assert second["sku"] == "S-2-copy"


def test_prepend_and_append():
    record = Record("Orders", {"code": "42"})
    apply_action(Prepend("X-"), record, "code")
    assert record["code"] == "X-42"
    apply_action(Append("-Y"), record, "code")
    assert record["code"] == "X-42-Y"


def test_missing_and_null_fields_concatenate_as_empty():
    record = Record("Orders", {"name": None})
    apply_action(Prepend("X-"), record, "name")
    apply_action(Append("-Y"), record, "code")
    assert record.to_dict() == {"name": "X-", "code": "-Y"}


def test_non_string_values_are_concatenated_as_text():
    record = Record("Orders", {"number": 42})
    apply_action(Append("-Y"), record, "number")
    assert record["number"] == "42-Y"
