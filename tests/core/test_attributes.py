"""Tests for explicit-or-inherited attributes."""

from typeloader.core.attributes import INHERITED, Explicit, InheritableAttribute


class Node:
    label = InheritableAttribute(cast=str)
    size = InheritableAttribute(cast=int, default=1)
    title = InheritableAttribute(default=lambda node: f"node {node.name}", cache_default=True)

    def __init__(self, name, ancestor=None):
        self.name = name
        self.ancestor = ancestor
        self._attributes = {}


def test_value_inherited_from_ancestor():
    root = Node("root")
    child = Node("child", root)
    root.label = "Root"

    assert child.label == "Root"
    assert not Node.label.is_explicit(child)


def test_empty_value_is_explicit_not_inherited():
    """CRITICAL: An explicit empty value is distinct from inheritance.

    Why: Users must be able to blank an inherited label.
    """
    root = Node("root")
    child = Node("child", root)
    root.label = "Root"
    child.label = ""

    assert child.label == ""
    assert Node.label.slot(child) == Explicit("")


def test_none_resets_to_inherited():
    root = Node("root")
    child = Node("child", root)
    root.label = "Root"
    child.label = "Child"
    child.label = None

    assert child.label == "Root"
    assert Node.label.slot(child) is INHERITED


def test_default_when_no_explicit_value_in_chain():
    node = Node("n", Node("root"))

    assert node.size == 1
    assert node.label is None


def test_cast_applied_to_explicit_values():
    node = Node("n")
    node.size = "3"

    assert node.size == 3


def test_cached_default_computed_once():
    node = Node("a")
    first = node.title
    node.name = "b"

    assert first == "node a"
    assert node.title == "node a"
