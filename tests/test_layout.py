"""Tests for the tidy tree layout, separation and responsive sizing."""

import pytest

from collapsible_tree.core.node import NodeStore
from collapsible_tree.layouts.sizing import MIN_LINK_LENGTH, compute_link_length
from collapsible_tree.layouts.tree import TidyTreeLayout, separation


def _make_store():
    return NodeStore.from_dict(
        {
            "name": "root",
            "children": [
                {"name": "A", "children": [{"name": "A1"}, {"name": "A2"}]},
                {"name": "B"},
            ],
        }
    )


def _make_wide_store():
    return NodeStore.from_dict(
        {
            "name": "root",
            "children": [
                {
                    "name": f"n{i}",
                    "SizeOfNode": 10 * (i + 1),
                    "children": [{"name": f"n{i}.{j}", "SizeOfNode": 4 + j} for j in range(i + 1)],
                }
                for i in range(4)
            ],
        }
    )


def _positions(placements):
    return {p.node.name: (p.x, p.y) for p in placements}


def test_sibling_separation_scales_with_radius():
    store = NodeStore.from_dict(
        {"name": "root", "children": [{"name": "a", "SizeOfNode": 16}, {"name": "b", "SizeOfNode": 9}]}
    )
    a, b = store.root.children
    assert separation(a, b) == pytest.approx(0.28)


def test_non_sibling_separation_is_constant():
    store = NodeStore.from_dict(
        {
            "name": "root",
            "children": [
                {"name": "a", "children": [{"name": "a1", "SizeOfNode": 400}]},
                {"name": "b", "children": [{"name": "b1", "SizeOfNode": 900}]},
            ],
        }
    )
    a1 = store.root.children[0].children[0]
    b1 = store.root.children[1].children[0]
    assert separation(a1, b1) == 1


def test_link_length_floor():
    assert compute_link_length(300, 4) == MIN_LINK_LENGTH == 175


def test_link_length_scales_with_width():
    assert compute_link_length(1000, 4) == 500


def test_link_length_with_no_levels():
    assert compute_link_length(1000, 0) == 2000


def test_single_node_is_centred():
    store = NodeStore.from_dict({"name": "root"})
    layout = TidyTreeLayout(size=(400, 800))
    placements = layout.layout(store.root)
    assert len(placements) == 1
    assert placements[0].x == pytest.approx(200)
    assert placements[0].y == 0


def test_placements_breadth_first():
    store = _make_store()
    layout = TidyTreeLayout(size=(460, 940))
    names = [p.node.name for p in layout.layout(store.root)]
    assert names == ["root", "A", "B", "A1", "A2"]


def test_two_children_positions():
    store = _make_store()
    store.root.children[0].expanded = False
    layout = TidyTreeLayout(size=(460, 940))
    pos = _positions(layout.layout(store.root))
    assert pos["root"][0] == pytest.approx(230)
    assert pos["A"][0] == pytest.approx(115)
    assert pos["B"][0] == pytest.approx(345)
    assert pos["A"][1] == pytest.approx(940)


def test_collapsed_children_not_placed():
    store = _make_store()
    store.root.children[0].expanded = False
    layout = TidyTreeLayout(size=(460, 940))
    names = {p.node.name for p in layout.layout(store.root)}
    assert names == {"root", "A", "B"}


def test_depth_spacing():
    store = _make_store()
    layout = TidyTreeLayout(size=(460, 900))
    pos = _positions(layout.layout(store.root))
    assert pos["root"][1] == 0
    assert pos["A"][1] == pytest.approx(450)
    assert pos["A1"][1] == pytest.approx(900)


def test_within_bounds():
    store = _make_wide_store()
    layout = TidyTreeLayout(size=(500, 600))
    eps = 1e-6
    for p in layout.layout(store.root):
        assert -eps <= p.x <= 500 + eps
        assert -eps <= p.y <= 600 + eps


def test_parents_centred_over_children():
    store = _make_wide_store()
    layout = TidyTreeLayout(size=(500, 600))
    placements = layout.layout(store.root)
    xs = {p.node: p.x for p in placements}
    for node, x in xs.items():
        if node.visible_children:
            first = xs[node.visible_children[0]]
            last = xs[node.visible_children[-1]]
            assert x == pytest.approx((first + last) / 2)


def test_no_crossing_within_a_level():
    """Nodes on the same level keep their order and do not overlap."""
    store = _make_wide_store()
    layout = TidyTreeLayout(size=(500, 600))
    levels = {}
    for p in layout.layout(store.root):
        levels.setdefault(p.node.depth, []).append(p.x)
    for xs in levels.values():
        assert all(a < b for a, b in zip(xs, xs[1:]))


def test_custom_separation():
    store = _make_store()
    store.root.children[0].expanded = False
    layout = TidyTreeLayout(size=(100, 100), separation=lambda a, b: 2)
    pos = _positions(layout.layout(store.root))
    # left/right nodes sit one half-separation in from the edges
    assert pos["A"][0] == pytest.approx(25)
    assert pos["B"][0] == pytest.approx(75)
