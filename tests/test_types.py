import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from diagram.types import (
    ListType,
    NamedType,
    OptionalType,
    PrimitiveType,
    SetType,
    SourceType,
    VoidType,
)


def test_string_forms():
    assert str(PrimitiveType("int")) == "int"
    assert str(VoidType()) == "void"
    assert str(ListType(NamedType("Item"))) == "List<Item>"
    assert str(SetType(OptionalType(PrimitiveType("string")))) == "Set<Optional<string>>"
    assert str(SourceType("Map<String, Item>")) == "Map<String, Item>"


def test_collect_names_walks_collections():
    t = ListType(OptionalType(NamedType("Item")))
    assert t.collect_names() == ["Item"]
    assert PrimitiveType("int").collect_names() == []
    assert VoidType().collect_names() == []


def test_source_type_names_are_unique_and_ordered():
    t = SourceType("Map<Item, List<Item>>")
    assert t.collect_names() == ["Map", "Item", "List"]


def test_source_type_splits_on_whitespace():
    t = SourceType("? extends Item")
    assert "Item" in t.collect_names()
    assert "extends" in t.collect_names()


def test_substitute_renames_nested_named_types():
    t = ListType(NamedType("T"))
    t.substitute({"T": "Item"})
    assert str(t) == "List<Item>"


def test_clone_is_independent():
    original = SetType(NamedType("A"))
    copy = original.clone()
    copy.substitute({"A": "B"})
    assert str(original) == "Set<A>"
    assert str(copy) == "Set<B>"
    assert isinstance(copy, SetType)
