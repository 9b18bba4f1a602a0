"""Tests for the selection aggregator."""

import json

from collapsible_tree.core.node import NodeStore
from collapsible_tree.core.selection import (
    SelectionRecord,
    aggregate_selection,
    selection_json,
    selection_path,
)

HIERARCHY = ["Region", "Country", "City"]


def _make_store():
    store = NodeStore.from_dict(
        {
            "name": "World",
            "children": [
                {
                    "name": "Europe",
                    "children": [
                        {"name": "France", "children": [{"name": "Paris"}, {"name": "Lyon"}]},
                        {"name": "Spain", "children": [{"name": "Madrid"}]},
                    ],
                },
                {"name": "Asia", "children": [{"name": "Japan"}]},
            ],
        }
    )
    for node in store.iter_nodes():
        store.assign_identity(node)
    return store


def _node(store, name):
    return next(n for n in store.iter_nodes() if n.name == name)


def test_empty_selection():
    store = _make_store()
    assert aggregate_selection(store, HIERARCHY) == []


def test_root_is_never_reported():
    store = _make_store()
    store.root.selected = True
    assert aggregate_selection(store, HIERARCHY) == []


def test_single_selection_record():
    store = _make_store()
    europe = _node(store, "Europe")
    europe.selected = True
    records = aggregate_selection(store, HIERARCHY)
    assert records == [
        SelectionRecord(identity=europe.identity, parent="World", level="Region", value="Europe")
    ]


def test_records_grouped_by_depth_one_ancestor():
    store = _make_store()
    europe = _node(store, "Europe")
    for name in ("Europe", "France", "Paris"):
        _node(store, name).selected = True
    records = aggregate_selection(store, HIERARCHY)
    assert [r.value for r in records] == ["Europe", "France", "Paris"]
    assert [r.level for r in records] == ["Region", "Country", "City"]
    assert [r.parent for r in records] == ["World", "Europe", "France"]
    assert {r.identity for r in records} == {europe.identity}


def test_breadth_first_order():
    store = _make_store()
    for name in ("Paris", "Asia", "Spain", "Japan"):
        _node(store, name).selected = True
    values = [r.value for r in aggregate_selection(store, HIERARCHY)]
    assert values == ["Asia", "Spain", "Japan", "Paris"]


def test_collapsed_selection_is_hidden():
    """Selected nodes inside a collapsed subtree are not reported."""
    store = _make_store()
    _node(store, "France").selected = True
    _node(store, "Japan").selected = True
    store.toggle_expanded(_node(store, "Europe"))
    assert [r.value for r in aggregate_selection(store, HIERARCHY)] == ["Japan"]


def test_reexpanding_restores_hidden_selection():
    store = _make_store()
    europe = _node(store, "Europe")
    _node(store, "France").selected = True
    store.toggle_expanded(europe)
    store.toggle_expanded(europe)
    assert [r.value for r in aggregate_selection(store, HIERARCHY)] == ["France"]


def test_short_hierarchy_gives_no_label():
    store = _make_store()
    _node(store, "Paris").selected = True
    records = aggregate_selection(store, ["Region"])
    assert records[0].level is None


def test_selection_json():
    store = _make_store()
    europe = _node(store, "Europe")
    europe.selected = True
    payload = json.loads(selection_json(aggregate_selection(store, HIERARCHY)))
    assert payload == [
        {"id": europe.identity, "parent": "World", "level": "Region", "value": "Europe"}
    ]


def test_selection_json_empty():
    assert selection_json([]) == "[]"


def test_selection_path_collects_selected_ancestors():
    store = _make_store()
    for name in ("Europe", "Paris"):
        _node(store, name).selected = True
    path = selection_path(_node(store, "Paris"), HIERARCHY)
    assert path == {"City": ["Paris"], "Region": ["Europe"]}


def test_selection_path_of_root_is_empty():
    store = _make_store()
    store.root.selected = True
    assert selection_path(store.root, HIERARCHY) == {}
