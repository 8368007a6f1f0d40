from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from actflow import ActivityUnit
from actflow.descriptor import Conditional, Single, Terminal
from actflow.errors import FlowError, MalformedDescriptor


def _unit() -> ActivityUnit:
    unit = ActivityUnit(["channel"])
    unit.add("Order::create", "Order::check", start=True)
    unit.add("Order::check", "{true: Order::pay, false: Order::cancel}", dims={"channel": "web"})
    unit.add("Order::check", "Order::pay", dims={"channel": "shop"})
    unit.add("Order::pay")
    unit.add("Order::cancel")
    return unit


def test_combinations_follow_declared_values() -> None:
    labels = [dimension.label for dimension in _unit().combinations()]

    assert labels == ["web", "shop"]


def test_table_selects_variant_and_adds_entry() -> None:
    unit = _unit()
    web, shop = list(unit.combinations())

    web_table = unit.table_for(web)
    shop_table = unit.table_for(shop)

    assert web_table["start"] == Single("Order::create")
    assert isinstance(web_table["Order::check"], Conditional)
    assert shop_table["Order::check"] == Single("Order::pay")
    assert shop_table["Order::pay"] == Terminal()


def test_specific_variant_wins_over_generic() -> None:
    unit = ActivityUnit(["flag"])
    unit.add("a", "generic", start=True)
    unit.add("a", "specific", start=True, dims={"flag": "on"})
    unit.add("x", None, dims={"flag": "off"})

    tables = {dimension.label: table for dimension, table in unit.tables()}

    assert tables["on"]["a"] == Single("specific")
    assert tables["off"]["a"] == Single("generic")


def test_unit_without_dimensions_has_single_combination() -> None:
    unit = ActivityUnit()
    unit.add("start", "b").add("b")

    tables = list(unit.tables())

    assert len(tables) == 1
    dimension, table = tables[0]
    assert dimension.label == ""
    assert table["start"] == Single("b")


def test_dimension_without_values_still_yields_a_table(caplog: pytest.LogCaptureFixture) -> None:
    unit = ActivityUnit(["channel", "locale"])
    unit.add("start", "b", dims={"channel": "web"})
    unit.add("b")

    with caplog.at_level(logging.WARNING, logger="actflow.unit"):
        tables = list(unit.tables())

    assert len(tables) == 1
    dimension, table = tables[0]
    assert dimension.values == (("channel", "web"), ("locale", ""))
    assert table["start"] == Single("b")
    assert "locale" in caplog.text


def test_classes_include_successor_classes() -> None:
    assert _unit().classes() == ("Order",)


def test_unknown_dimension_is_rejected() -> None:
    unit = ActivityUnit(["flag"])

    with pytest.raises(MalformedDescriptor):
        unit.add("a", dims={"color": "red"})


def test_load_workflow_document(tmp_path: Path) -> None:
    path = tmp_path / "workflow.json"
    path.write_text(
        json.dumps(
            {
                "dimensions": ["channel"],
                "colors": {"Order": "#ff9090"},
                "actions": {
                    "Order::create": {"start": True, "next": "Order::check"},
                    "Order::check": [
                        {"next": {"true": "Order::pay", "false": "Order::cancel"}, "dims": {"channel": "web"}},
                        {"next": "Order::pay", "dims": {"channel": "shop"}},
                    ],
                    "Order::pay": {"next": None},
                    "Order::cancel": {},
                },
            }
        ),
        "utf-8",
    )

    unit = ActivityUnit.load(path)

    assert unit.dimensions == ("channel",)
    assert unit.colors == {"Order": "#ff9090"}
    assert unit.actions() == ("Order::create", "Order::check", "Order::pay", "Order::cancel")
    assert unit.dimension_values() == {"channel": ("web", "shop")}


def test_invalid_document_shapes_raise() -> None:
    with pytest.raises(FlowError):
        ActivityUnit.from_json({"actions": []})
    with pytest.raises(MalformedDescriptor):
        ActivityUnit.from_json({"actions": {"a": "b"}})
