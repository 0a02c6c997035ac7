"""Tests for the role/resource hierarchy registry."""

from __future__ import annotations

import logging

import pytest
from contextacl import (
    DuplicateEntryError,
    EntryNotFoundError,
    HierarchyRegistry,
    InvalidEntryError,
)
from contextacl.permissions import print_path


@pytest.fixture
def registry() -> HierarchyRegistry:
    """Two trees: a -> (b -> d, c) and x."""
    reg = HierarchyRegistry("role")
    reg.add("a")
    reg.add("b", "a")
    reg.add("c", "a")
    reg.add("d", "b")
    reg.add("x")
    return reg


class TestAdd:
    """Tests for HierarchyRegistry.add."""

    def test_add_root_level(self) -> None:
        reg = HierarchyRegistry()
        reg.add("a")
        assert reg.has("a")
        assert reg.parent("a") is None
        assert reg.size() == 1

    def test_add_under_parent(self, registry: HierarchyRegistry) -> None:
        assert registry.parent("d") == "b"
        assert registry.has_child("b")
        assert not registry.has_child("d")

    def test_duplicate_rejected(self, registry: HierarchyRegistry) -> None:
        """Duplicates raise and leave the entry where it was."""
        with pytest.raises(DuplicateEntryError):
            registry.add("d", "x")
        assert registry.parent("d") == "b"
        assert registry.size() == 5

    def test_missing_parent_rejected(self) -> None:
        """Adding under an unregistered parent is an error, not a dangling link."""
        reg = HierarchyRegistry()
        with pytest.raises(EntryNotFoundError):
            reg.add("child", "ghost")
        assert not reg.has("child")
        assert reg.size() == 0

    def test_wildcard_parent_means_root(self) -> None:
        reg = HierarchyRegistry()
        reg.add("a", "*")
        assert reg.parent("a") is None

    @pytest.mark.parametrize("bad", ["", "*"])
    def test_reserved_ids_rejected(self, bad: str) -> None:
        reg = HierarchyRegistry()
        with pytest.raises(InvalidEntryError):
            reg.add(bad)

    def test_has_none(self, registry: HierarchyRegistry) -> None:
        assert registry.has(None) is False
        assert "a" in registry
        assert "zzz" not in registry


class TestTraverseRoot:
    """Tests for ancestor chain construction."""

    def test_deep_entry(self, registry: HierarchyRegistry) -> None:
        assert registry.traverse_root("d") == ["d", "b", "a", "*"]

    def test_root_level_entry(self, registry: HierarchyRegistry) -> None:
        assert registry.traverse_root("x") == ["x", "*"]

    def test_none_is_wildcard_only(self, registry: HierarchyRegistry) -> None:
        assert registry.traverse_root(None) == ["*"]

    def test_unregistered_is_wildcard_only(self, registry: HierarchyRegistry) -> None:
        assert registry.traverse_root("nobody") == ["*"]

    def test_recomputed_after_mutation(self, registry: HierarchyRegistry) -> None:
        assert registry.traverse_root("d") == ["d", "b", "a", "*"]
        registry.remove("b")
        assert registry.traverse_root("d") == ["d", "a", "*"]

    def test_cycle_terminates(self, caplog: pytest.LogCaptureFixture) -> None:
        """A cyclic snapshot cannot hang traversal."""
        reg = HierarchyRegistry("role")
        reg.import_registry({"a": "b", "b": "a"})
        with caplog.at_level(logging.WARNING):
            path = reg.traverse_root("a")
        assert path == ["a", "b", "*"]
        assert any("Cycle detected" in r.getMessage() for r in caplog.records)

    def test_print_path(self) -> None:
        assert print_path(["d", "b", "*"]) == "- -> d -> b -> * <"


class TestRemove:
    """Tests for removal with and without cascade."""

    def test_remove_leaf(self, registry: HierarchyRegistry) -> None:
        assert registry.remove("d") == ["d"]
        assert not registry.has("d")
        assert not registry.has_child("b")

    def test_remove_reparents_children(self, registry: HierarchyRegistry) -> None:
        removed = registry.remove("b")
        assert removed == ["b"]
        assert registry.parent("d") == "a"
        assert registry.size() == 4

    def test_remove_root_level_reparents_to_root(self, registry: HierarchyRegistry) -> None:
        registry.remove("a")
        assert registry.parent("b") is None
        assert registry.parent("c") is None
        assert registry.traverse_root("d") == ["d", "b", "*"]

    def test_cascade_removes_subtree(self, registry: HierarchyRegistry) -> None:
        removed = registry.remove("a", cascade=True)
        assert set(removed) == {"a", "b", "c", "d"}
        assert removed[-1] == "a"
        assert registry.export() == {"x": ""}

    def test_cascade_on_leaf(self, registry: HierarchyRegistry) -> None:
        assert registry.remove("x", cascade=True) == ["x"]

    def test_remove_missing(self, registry: HierarchyRegistry) -> None:
        with pytest.raises(EntryNotFoundError):
            registry.remove("ghost")
        assert registry.size() == 5

    def test_descendants_breadth_first(self, registry: HierarchyRegistry) -> None:
        result = registry.descendants("a")
        assert set(result[:2]) == {"b", "c"}
        assert result[2] == "d"


class TestSnapshots:
    """Tests for export/import and display."""

    def test_export_is_a_copy(self, registry: HierarchyRegistry) -> None:
        exported = registry.export()
        exported["d"] = "x"
        exported["new"] = ""
        assert registry.parent("d") == "b"
        assert not registry.has("new")

    def test_round_trip(self, registry: HierarchyRegistry) -> None:
        exported = registry.export()
        other = HierarchyRegistry()
        other.import_registry(exported)
        assert other.export() == exported
        assert other.traverse_root("d") == ["d", "b", "a", "*"]

    def test_import_none_parent(self) -> None:
        reg = HierarchyRegistry()
        reg.import_registry({"a": None, "b": "a"})
        assert reg.export() == {"a": "", "b": "a"}

    def test_clear(self, registry: HierarchyRegistry) -> None:
        registry.clear()
        assert len(registry) == 0

    def test_display_tree(self, registry: HierarchyRegistry) -> None:
        assert registry.display() == "- a\n - b\n  - d\n - c\n- x\n"

    def test_display_with_labels(self, registry: HierarchyRegistry) -> None:
        text = registry.display(describe=str.upper)
        assert "- A\n" in text
        assert "  - D\n" in text

    def test_str_lists_parents(self, registry: HierarchyRegistry) -> None:
        text = str(registry)
        assert "a - *" in text
        assert "d - b" in text
