"""Test-only pane tree builders and geometry checks"""

import itertools

from panehub.pane import PaneLeaf, PaneNode, PaneRect, PaneSplit, SplitDirection
from panehub.pane.tree import collect_leaf_ids

EPS = 1e-9

H = SplitDirection.HORIZONTAL
V = SplitDirection.VERTICAL


def leaf(pane_id: str, command: str | None = None) -> PaneLeaf:
    return PaneLeaf(id=pane_id, initial_command=command)


def split(
    split_id: str,
    direction: SplitDirection,
    first: PaneNode,
    second: PaneNode,
    ratio: float = 0.5,
) -> PaneSplit:
    return PaneSplit(id=split_id, direction=direction, children=(first, second), ratio=ratio)


def sample_trees() -> list[PaneNode]:
    """Every shape up to four leaves, with a few uneven ratios."""
    return [
        leaf("a"),
        split("s1", H, leaf("a"), leaf("b")),
        split("s1", V, leaf("a"), leaf("b"), ratio=0.3),
        split("s1", H, leaf("a"), split("s2", V, leaf("b"), leaf("c")), ratio=0.7),
        split("s1", V, split("s2", H, leaf("a"), leaf("b"), ratio=0.2), leaf("c")),
        split(
            "s1",
            H,
            split("s2", V, leaf("a"), leaf("b")),
            split("s3", V, leaf("c"), leaf("d"), ratio=0.9),
            ratio=0.1,
        ),
        split(
            "s1",
            V,
            leaf("a"),
            split("s2", H, leaf("b"), split("s3", V, leaf("c"), leaf("d"), ratio=0.35)),
            ratio=0.65,
        ),
    ]


def overlap_area(a: PaneRect, b: PaneRect) -> float:
    dx = min(a.x + a.w, b.x + b.w) - max(a.x, b.x)
    dy = min(a.y + a.h, b.y + b.h) - max(a.y, b.y)
    if dx <= EPS or dy <= EPS:
        return 0.0
    return dx * dy


def assert_tiles(rects: list[PaneRect], x=0.0, y=0.0, w=1.0, h=1.0) -> None:
    """Rects are pairwise disjoint, stay inside the region and cover it."""
    for a, b in itertools.combinations(rects, 2):
        assert overlap_area(a, b) == 0.0, f"{a.leaf_id} overlaps {b.leaf_id}"
    for r in rects:
        assert r.x >= x - EPS and r.y >= y - EPS
        assert r.x + r.w <= x + w + EPS and r.y + r.h <= y + h + EPS
    total = sum(r.w * r.h for r in rects)
    assert abs(total - w * h) < 1e-9


def assert_valid_tree(node: PaneNode) -> None:
    """Structural invariants: splits have two children, ratio in range, ids unique."""
    ids = []

    def walk(n: PaneNode) -> None:
        ids.append(n.id)
        if isinstance(n, PaneSplit):
            assert len(n.children) == 2
            assert 0.1 <= n.ratio <= 0.9
            walk(n.first)
            walk(n.second)
        else:
            assert isinstance(n, PaneLeaf)

    walk(node)
    assert len(ids) == len(set(ids))
    assert collect_leaf_ids(node)
