"""
Declared types of attributes, arguments and results.

Closed hierarchy:
  - PrimitiveType(name)      boolean, byte, char, short, int, long,
                             float, double, string
  - NamedType(name)          nominal reference, possibly unresolved
  - VoidType
  - ListType / SetType / OptionalType (item)
  - SourceType(source)       raw source text, not structurally parsed

By default all values are non-nullable, OptionalType makes them nullable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List

# delimiters used to pull names out of unparsed type text
_SOURCE_DELIMS = re.compile(r"[<>()\[\]{},|.\s]+")


def _unique(names: List[str]) -> List[str]:
    seen: Dict[str, None] = {}
    for n in names:
        if n and n not in seen:
            seen[n] = None
    return list(seen)


class Type:
    kind = "type"

    def substitute(self, mapping: Dict[str, str]) -> None:
        pass

    def collect_names(self) -> List[str]:
        """Nominal type names referenced by this type, unique, in textual order."""
        return []

    def clone(self) -> "Type":
        return self

    def __str__(self) -> str:
        return "<type>"


@dataclass(eq=False)
class NamedType(Type):
    name: str
    kind = "named"

    def substitute(self, mapping: Dict[str, str]) -> None:
        if self.name in mapping:
            self.name = mapping[self.name]

    def collect_names(self) -> List[str]:
        return [self.name]

    def clone(self) -> "NamedType":
        return NamedType(self.name)

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class PrimitiveType(Type):
    name: str
    kind = "primitive"

    def clone(self) -> "PrimitiveType":
        return PrimitiveType(self.name)

    def __str__(self) -> str:
        return self.name


class VoidType(Type):
    kind = "void"

    def __str__(self) -> str:
        return "void"


@dataclass(eq=False)
class CollectionType(Type):
    item: Type
    kind = "collection"

    def substitute(self, mapping: Dict[str, str]) -> None:
        self.item.substitute(mapping)

    def collect_names(self) -> List[str]:
        return self.item.collect_names()

    def clone(self) -> "CollectionType":
        return type(self)(self.item.clone())

    def __str__(self) -> str:
        return f"Collection<{self.item}>"


class ListType(CollectionType):
    kind = "list"

    def __str__(self) -> str:
        return f"List<{self.item}>"


class SetType(CollectionType):
    kind = "set"

    def __str__(self) -> str:
        return f"Set<{self.item}>"


class OptionalType(CollectionType):
    kind = "optional"

    def __str__(self) -> str:
        return f"Optional<{self.item}>"


@dataclass(eq=False)
class SourceType(Type):
    source: str
    kind = "source"

    def collect_names(self) -> List[str]:
        return _unique(_SOURCE_DELIMS.split(self.source))

    def clone(self) -> "SourceType":
        return SourceType(self.source)

    def __str__(self) -> str:
        return self.source
