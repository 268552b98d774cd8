"""Tests for the project tree."""

from conftest import make_task

from task_projections.views.tree import ancestors, build_tree, flatten, would_create_cycle


def test_build_tree_nests_children() -> None:
    tasks = [
        make_task("root"),
        make_task("child-a", parent_id="root"),
        make_task("grandchild", parent_id="child-a"),
        make_task("child-b", parent_id="root"),
    ]
    roots = build_tree(tasks)

    assert [node.task.id for node in roots] == ["root"]
    assert [node.task.id for node in roots[0].children] == ["child-a", "child-b"]
    assert [node.task.id for node in roots[0].children[0].children] == ["grandchild"]


def test_missing_parent_becomes_root() -> None:
    roots = build_tree([make_task("orphan", parent_id="gone")])
    assert [node.task.id for node in roots] == ["orphan"]


def test_cyclic_edge_is_dropped() -> None:
    """a -> b -> c -> a: the edge that closes the loop is ignored."""
    tasks = [
        make_task("a", parent_id="c"),
        make_task("b", parent_id="a"),
        make_task("c", parent_id="b"),
    ]
    roots = build_tree(tasks)

    assert [node.task.id for node in roots] == ["c"]
    assert [t.id for t in flatten(roots)] == ["c", "a", "b"]


def test_self_parent_is_dropped() -> None:
    roots = build_tree([make_task("loop", parent_id="loop")])
    assert [node.task.id for node in roots] == ["loop"]
    assert roots[0].children == []


def test_every_task_appears_once() -> None:
    tasks = [make_task(f"t{i}", parent_id=f"t{(i + 1) % 6}") for i in range(6)]
    tasks.append(make_task("free"))

    flat = flatten(build_tree(tasks))
    assert sorted(t.id for t in flat) == sorted(t.id for t in tasks)


def test_ancestors_stops_on_loop() -> None:
    tasks = [make_task("a", parent_id="b"), make_task("b", parent_id="a")]
    assert ancestors(tasks, "a") == ["b"]


def test_would_create_cycle() -> None:
    tasks = [
        make_task("root"),
        make_task("child", parent_id="root"),
        make_task("grandchild", parent_id="child"),
    ]
    assert would_create_cycle(tasks, "root", "grandchild")
    assert would_create_cycle(tasks, "child", "child")
    assert not would_create_cycle(tasks, "grandchild", "root")
    assert not would_create_cycle(tasks, "root", None)
