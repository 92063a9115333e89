"""Tests for pane tree structural operations"""

import pytest

from helpers import H, V, assert_valid_tree, leaf, sample_trees, split
from panehub.pane import (
    PaneLeaf,
    PaneSplit,
    SplitDirection,
    collect_leaf_ids,
    count_agent_panes,
    count_leaves,
    find_node,
    find_pane,
    is_agent_command,
    remove_leaf,
    resize_pane,
    set_session_id,
    split_pane,
    tree_to_dict,
)


class TestQueries:
    """Tests for read-only tree helpers"""

    def test_count_leaves(self):
        assert count_leaves(leaf("a")) == 1
        assert count_leaves(split("s1", H, leaf("a"), leaf("b"))) == 2
        assert count_leaves(split("s1", H, leaf("a"), split("s2", V, leaf("b"), leaf("c")))) == 3

    def test_collect_leaf_ids_in_traversal_order(self):
        tree = split("s1", H, split("s2", V, leaf("a"), leaf("b")), leaf("c"))
        assert collect_leaf_ids(tree) == ["a", "b", "c"]

    def test_find_pane_ignores_splits(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert find_pane(tree, "b").id == "b"
        assert find_pane(tree, "s1") is None
        assert find_pane(tree, "missing") is None

    def test_find_node_returns_splits(self):
        tree = split("s1", H, leaf("a"), split("s2", V, leaf("b"), leaf("c")))
        assert isinstance(find_node(tree, "s2"), PaneSplit)
        assert isinstance(find_node(tree, "c"), PaneLeaf)


class TestAgentCommand:
    """Tests for agent launch detection"""

    @pytest.mark.parametrize("cmd", ["claude", "claude --resume", "npx claude --print hi"])
    def test_agent_commands(self, cmd):
        assert is_agent_command(cmd) is True

    @pytest.mark.parametrize("cmd", [None, "", "npm test", "claudette", "vim claude.md"])
    def test_non_agent_commands(self, cmd):
        assert is_agent_command(cmd) is False

    def test_count_agent_panes(self):
        tree = split("s1", H, leaf("a", "claude"), split("s2", V, leaf("b"), leaf("c", "claude -c")))
        assert count_agent_panes(tree) == 2


class TestSplitPane:
    """Tests for split_pane"""

    def test_split_single_leaf(self):
        tree = leaf("p1", "npm run dev")
        result = split_pane(tree, "p1", SplitDirection.HORIZONTAL)

        assert result is not None
        new_tree, new_id = result
        assert isinstance(new_tree, PaneSplit)
        assert new_tree.direction == SplitDirection.HORIZONTAL
        assert new_tree.ratio == 0.5
        assert new_tree.first.id == "p1"
        assert new_tree.first.initial_command == "npm run dev"
        assert new_tree.second.id == new_id
        assert new_tree.second.initial_command is None
        assert new_id != "p1"

    def test_split_nested_leaf_keeps_rest_of_tree(self):
        tree = split("s1", H, leaf("a"), leaf("b"), ratio=0.3)
        new_tree, new_id = split_pane(tree, "b", SplitDirection.VERTICAL)

        assert new_tree.id == "s1"
        assert new_tree.ratio == 0.3
        assert new_tree.first is tree.first
        assert isinstance(new_tree.second, PaneSplit)
        assert new_tree.second.direction == SplitDirection.VERTICAL
        assert collect_leaf_ids(new_tree) == ["a", "b", new_id]

    def test_split_does_not_mutate_input(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        before = tree_to_dict(tree)
        split_pane(tree, "a", SplitDirection.VERTICAL)
        assert tree_to_dict(tree) == before

    def test_split_accepts_string_direction(self):
        new_tree, _ = split_pane(leaf("a"), "a", "vertical")
        assert new_tree.direction == SplitDirection.VERTICAL

    @pytest.mark.parametrize("tree", [t for t in sample_trees() if count_leaves(t) < 4])
    def test_split_adds_exactly_one_leaf(self, tree):
        for leaf_id in collect_leaf_ids(tree):
            new_tree, _ = split_pane(tree, leaf_id, SplitDirection.HORIZONTAL)
            assert count_leaves(new_tree) == count_leaves(tree) + 1
            assert_valid_tree(new_tree)

    @pytest.mark.parametrize("tree", [t for t in sample_trees() if count_leaves(t) == 4])
    def test_split_rejected_at_cap(self, tree):
        before = tree_to_dict(tree)
        for leaf_id in collect_leaf_ids(tree):
            assert split_pane(tree, leaf_id, SplitDirection.HORIZONTAL) is None
        assert tree_to_dict(tree) == before

    def test_split_unknown_leaf(self):
        assert split_pane(leaf("a"), "missing", SplitDirection.HORIZONTAL) is None

    def test_split_on_split_id_rejected(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert split_pane(tree, "s1", SplitDirection.HORIZONTAL) is None


class TestRemoveLeaf:
    """Tests for remove_leaf"""

    def test_remove_sole_leaf_empties_tree(self):
        assert remove_leaf(leaf("a"), "a") is None

    def test_remove_direct_child_promotes_sibling(self):
        sibling = split("s2", V, leaf("b"), leaf("c"))
        tree = split("s1", H, leaf("a"), sibling)
        assert remove_leaf(tree, "a") is sibling

    def test_remove_nested_leaf(self):
        tree = split("s1", H, leaf("a"), split("s2", V, leaf("b"), leaf("c")))
        new_tree = remove_leaf(tree, "c")

        assert new_tree.id == "s1"
        assert new_tree.first is tree.first
        assert new_tree.second.id == "b"

    def test_remove_unknown_leaf_returns_same_tree(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert remove_leaf(tree, "missing") is tree

    @pytest.mark.parametrize("tree", [t for t in sample_trees() if count_leaves(t) >= 2])
    def test_remove_any_leaf(self, tree):
        n = count_leaves(tree)
        for leaf_id in collect_leaf_ids(tree):
            new_tree = remove_leaf(tree, leaf_id)
            assert new_tree is not None
            assert count_leaves(new_tree) == n - 1
            assert leaf_id not in collect_leaf_ids(new_tree)
            assert_valid_tree(new_tree)


class TestResizePane:
    """Tests for resize_pane"""

    def test_resize_sets_ratio(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert resize_pane(tree, "s1", 0.7).ratio == 0.7

    @pytest.mark.parametrize(
        "ratio,expected", [(0.0, 0.1), (1.0, 0.9), (-5, 0.1), (42, 0.9), (0.1, 0.1), (0.9, 0.9)]
    )
    def test_resize_clamps(self, ratio, expected):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert resize_pane(tree, "s1", ratio).ratio == pytest.approx(expected)

    def test_resize_nested_split(self):
        tree = split("s1", H, leaf("a"), split("s2", V, leaf("b"), leaf("c")))
        new_tree = resize_pane(tree, "s2", 0.25)
        assert new_tree.ratio == 0.5
        assert new_tree.second.ratio == 0.25
        assert tree.second.ratio == 0.5

    def test_resize_unknown_split_is_noop(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert resize_pane(tree, "missing", 0.3) is tree

    def test_resize_leaf_id_is_noop(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        assert resize_pane(tree, "a", 0.3) is tree


class TestSetSessionId:
    """Tests for set_session_id"""

    def test_binds_session(self):
        tree = split("s1", H, leaf("a"), leaf("b"))
        new_tree = set_session_id(tree, "b", "pty-7")
        assert find_pane(new_tree, "b").session_id == "pty-7"
        assert find_pane(new_tree, "a").session_id is None
        assert find_pane(tree, "b").session_id is None

    def test_unknown_leaf(self):
        tree = leaf("a")
        assert set_session_id(tree, "missing", "pty-1") is tree


class TestSerialization:
    """Tests for tree_to_dict"""

    def test_leaf_dict(self):
        data = tree_to_dict(PaneLeaf(id="a", session_id="pty-1", initial_command="ls"))
        assert data == {
            "type": "leaf",
            "id": "a",
            "session_id": "pty-1",
            "initial_command": "ls",
            "external_session_id": None,
        }

    def test_split_dict_keeps_child_order(self):
        tree = split("s1", V, leaf("a"), split("s2", H, leaf("b"), leaf("c")), ratio=0.3)
        data = tree_to_dict(tree)

        assert data["type"] == "split"
        assert data["direction"] == "vertical"
        assert data["ratio"] == 0.3
        assert [c["id"] for c in data["children"]] == ["a", "s2"]
        assert [c["id"] for c in data["children"][1]["children"]] == ["b", "c"]
