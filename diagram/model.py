"""
Entity model: Diagram, diagram objects, class members and relations.

Objects are keyed by unique name inside a Diagram. Relations are kept in
insertion order, which is also the emit order of every renderer. Parsers
point relations at UnresolvedObject placeholders; the resolution pass
swaps them for the registered objects (or a StubObject when the name is
unknown) and nothing ever goes back the other way.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Iterable, List, Literal, Optional

from diagram.errors import DuplicateObjectError, ObjectKindConflictError
from diagram.types import Type, VoidType

Visibility = Literal["+", "-", "#", "~"]

VISIBILITY_BY_MODIFIER: Dict[str, Visibility] = {
    "public": "+",
    "private": "-",
    "protected": "#",
    "package": "~",
}


# ---------------- Doc comments ----------------

@dataclass
class DocTag:
    name: str                     # including the leading "@"
    params: List[str] = field(default_factory=list)
    value: str = ""


@dataclass
class DocComment:
    content: str = ""
    tags: List[DocTag] = field(default_factory=list)

    def get(self, name: str) -> Optional[DocTag]:
        for tag in self.tags:
            if tag.name == name:
                return tag
        return None

    def get_all(self, name: str) -> List[DocTag]:
        return [tag for tag in self.tags if tag.name == name]

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    def is_empty(self) -> bool:
        return not self.content and not self.tags


# ---------------- Members ----------------

class ClassMember:
    kind = "member"

    def __init__(self, visibility: Visibility, name: str):
        self.visibility = visibility
        self.name = name
        self.is_static = False
        self.is_important = False
        self.stereotypes: List[str] = []
        self.doc = DocComment()

    @property
    def stereotype_prefix(self) -> str:
        if not self.stereotypes:
            return ""
        return "«" + ", ".join(self.stereotypes) + "» "

    def signature_key(self) -> tuple:
        return (self.kind, self.name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.visibility}{self.name})"


class Argument:
    def __init__(self, name: str, type: Type):
        self.name = name
        self.type = type

    def __repr__(self) -> str:
        return f"Argument({self.name}: {self.type})"


class Attribute(ClassMember):
    kind = "attribute"

    def __init__(self, visibility: Visibility, name: str, type: Type):
        super().__init__(visibility, name)
        self.type = type


class Method(ClassMember):
    kind = "method"

    def __init__(
        self,
        visibility: Visibility,
        name: str,
        args: List[Argument],
        result: Optional[Type] = None,
    ):
        super().__init__(visibility, name)
        self.args = list(args)
        self.result = result if result is not None else VoidType()
        self.is_abstract = False

    def signature_key(self) -> tuple:
        return (self.kind, self.name, tuple(str(arg.type) for arg in self.args))


class Constructor(ClassMember):
    kind = "constructor"

    def __init__(self, visibility: Visibility, name: str, args: List[Argument]):
        super().__init__(visibility, name)
        self.args = list(args)

    def signature_key(self) -> tuple:
        return (self.kind, tuple(str(arg.type) for arg in self.args))


class Constant(ClassMember):
    """Enum value."""

    kind = "constant"

    def __init__(self, name: str):
        super().__init__("+", name)
        self.is_static = True


# ---------------- Objects ----------------

class DiagramObject:
    kind = "object"

    def __init__(self, name: str, package: Optional[Iterable[str]] = None):
        self.name = name
        self.package: List[str] = list(package or [])
        self.doc = DocComment()
        self.stereotypes: List[str] = []
        self.generics: List[Type] = []
        self.is_important = False

    def stereotype_labels(self) -> List[str]:
        """Built-in stereotypes (abstract, interface, ...) followed by custom ones."""
        return list(self.stereotypes)

    def collect_objects(self) -> List["DiagramObject"]:
        return [self]

    @property
    def qualified_name(self) -> str:
        return ".".join([*self.package, self.name])

    def fuse(self, other: "DiagramObject") -> None:
        if type(other) is not type(self):
            raise ObjectKindConflictError(self.name, self.kind, other.kind)
        if self.doc.is_empty():
            self.doc = other.doc
        for label in other.stereotypes:
            if label not in self.stereotypes:
                self.stereotypes.append(label)
        if not self.generics:
            self.generics = list(other.generics)
        if not self.package:
            self.package = list(other.package)
        self.is_important = self.is_important or other.is_important

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.qualified_name})"


def _merge_members(ours: List[ClassMember], theirs: List[ClassMember]) -> None:
    known = {m.signature_key() for m in ours}
    for member in theirs:
        if member.signature_key() not in known:
            ours.append(member)
            known.add(member.signature_key())


class ClassObject(DiagramObject):
    kind = "class"

    def __init__(self, name: str, package: Optional[Iterable[str]] = None):
        super().__init__(name, package)
        self.is_abstract = False
        self.attributes: List[Attribute] = []
        self.constructors: List[Constructor] = []
        self.methods: List[Method] = []

    def stereotype_labels(self) -> List[str]:
        base = ["abstract"] if self.is_abstract else []
        return base + self.stereotypes

    def add_attribute(self, attribute: Attribute) -> None:
        self.attributes.append(attribute)

    def add_method(self, method: Method) -> None:
        self.methods.append(method)

    def add_constructor(self, constructor: Constructor) -> None:
        self.constructors.append(constructor)

    def has_method(self, name: str) -> bool:
        return any(m.name == name for m in self.methods)

    def members(self) -> List[ClassMember]:
        return [*self.attributes, *self.constructors, *self.methods]

    def fuse(self, other: DiagramObject) -> None:
        super().fuse(other)
        self.is_abstract = self.is_abstract or other.is_abstract
        _merge_members(self.attributes, other.attributes)
        _merge_members(self.constructors, other.constructors)
        _merge_members(self.methods, other.methods)


class EnumObject(ClassObject):
    kind = "enum"

    def __init__(self, name: str, package: Optional[Iterable[str]] = None):
        super().__init__(name, package)
        self.constants: List[Constant] = []

    def stereotype_labels(self) -> List[str]:
        return ["enumeration"] + self.stereotypes

    def add_constant(self, constant: Constant) -> None:
        self.constants.append(constant)

    def members(self) -> List[ClassMember]:
        return [*self.constants, *super().members()]

    def fuse(self, other: DiagramObject) -> None:
        super().fuse(other)
        _merge_members(self.constants, other.constants)


class InterfaceObject(DiagramObject):
    kind = "interface"

    def __init__(self, name: str, package: Optional[Iterable[str]] = None):
        super().__init__(name, package)
        self.methods: List[Method] = []

    def stereotype_labels(self) -> List[str]:
        return ["interface"] + self.stereotypes

    def add_method(self, method: Method) -> None:
        self.methods.append(method)

    def has_method(self, name: str) -> bool:
        return any(m.name == name for m in self.methods)

    def members(self) -> List[ClassMember]:
        return list(self.methods)

    def fuse(self, other: DiagramObject) -> None:
        super().fuse(other)
        _merge_members(self.methods, other.methods)


class UnresolvedObject(DiagramObject):
    """Parse-time placeholder for a type name that may not be registered yet."""

    kind = "unresolved"


class StubObject(DiagramObject):
    """Permanent stand-in for a relation endpoint no source defines."""

    kind = "stub"


class PackageObject(DiagramObject):
    """
    Package tree node. Child packages and leaf objects are keyed
    separately, so a leaf may share its name with a sibling package.
    """

    kind = "package"

    def __init__(self, name: str, path: Optional[Iterable[str]] = None):
        # path: full package path this node stands for
        self.path: List[str] = list(path) if path is not None else ([name] if name else [])
        super().__init__(name, self.path[:-1])
        self.subpackages: Dict[str, "PackageObject"] = {}
        self.objects: Dict[str, DiagramObject] = {}

    def add_object(self, obj: DiagramObject) -> None:
        if isinstance(obj, PackageObject):
            self.subpackages[obj.name] = obj
        else:
            self.objects[obj.name] = obj

    def insert(self, path: List[str], obj: DiagramObject) -> None:
        if not path:
            self.add_object(obj)
            return
        head = path[0]
        child = self.subpackages.get(head)
        if child is None:
            child = PackageObject(head, [*self.path, head])
            self.add_object(child)
        child.insert(path[1:], obj)

    def get(self, path: List[str]) -> Optional[DiagramObject]:
        """Walk down packages; the last segment may name a package or a leaf (package first)."""
        if not path:
            return self
        head, rest = path[0], path[1:]
        child = self.subpackages.get(head)
        if rest:
            return child.get(rest) if child is not None else None
        return child if child is not None else self.objects.get(head)

    def children(self) -> List[DiagramObject]:
        return [*self.subpackages.values(), *self.objects.values()]

    def collect_objects(self) -> List[DiagramObject]:
        collected: Dict[int, DiagramObject] = {}
        for obj in self.children():
            for leaf in obj.collect_objects():
                collected.setdefault(id(leaf), leaf)
        return list(collected.values())

    def fuse(self, other: DiagramObject) -> None:
        super().fuse(other)
        for name, package in other.subpackages.items():
            if name in self.subpackages:
                self.subpackages[name].fuse(package)
            else:
                self.subpackages[name] = package
        for name, obj in other.objects.items():
            if name in self.objects:
                self.objects[name].fuse(obj)
            else:
                self.objects[name] = obj


# ---------------- Relations ----------------

class ArrowHead(str, Enum):
    NONE = "none"
    DIRECTED = "directed"
    AGGREGATION = "aggregation"
    COMPOSITION = "composition"

    @classmethod
    def from_char(cls, char: str) -> "ArrowHead":
        if char in (">", "<"):
            return cls.DIRECTED
        if char == "o":
            return cls.AGGREGATION
        if char == "*":
            return cls.COMPOSITION
        return cls.NONE


class Relation:
    kind = "relation"

    def __init__(self, a: DiagramObject, b: DiagramObject):
        self.a = a
        self.b = b

    def resolve(self, lookup: Callable[[str], DiagramObject]) -> None:
        if isinstance(self.a, UnresolvedObject):
            self.a = lookup(self.a.name)
        if isinstance(self.b, UnresolvedObject):
            self.b = lookup(self.b.name)

    def is_resolved(self) -> bool:
        return not isinstance(self.a, UnresolvedObject) and not isinstance(self.b, UnresolvedObject)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.a.name} -> {self.b.name})"


class InheritanceRelation(Relation):
    kind = "inheritance"


class ImplementsRelation(Relation):
    kind = "implements"


class AssociativeRelation(Relation):
    kind = "association"

    def __init__(self, a: DiagramObject, b: DiagramObject):
        super().__init__(a, b)
        self.name = ""
        self.role_a = ""
        self.role_b = ""
        self.multiplicity_a = ""
        self.multiplicity_b = ""
        self.head_a = ArrowHead.NONE
        self.head_b = ArrowHead.NONE
        self.options: Dict[str, bool] = {}


# ---------------- Diagram ----------------

@dataclass
class Diagnostic:
    level: Literal["warning", "error"]
    code: str                 # unresolved-object, malformed-annotation, ...
    message: str
    name: Optional[str] = None


class Diagram:
    def __init__(self) -> None:
        self.objects: Dict[str, DiagramObject] = {}
        self.relations: List[Relation] = []
        self.diagnostics: List[Diagnostic] = []
        self.parse_errors: List[Dict[str, str]] = []
        self.stubs: Dict[str, StubObject] = {}

    def add_object(self, obj: DiagramObject) -> None:
        if obj.name in self.objects:
            raise DuplicateObjectError(obj.name)
        self.objects[obj.name] = obj

    def has_object(self, name: str) -> bool:
        return name in self.objects

    def get_object(self, name: str) -> Optional[DiagramObject]:
        return self.objects.get(name)

    def add_relation(self, relation: Relation) -> None:
        self.relations.append(relation)

    def stub(self, name: str) -> StubObject:
        """Shared stand-in node for an unknown name."""
        if name not in self.stubs:
            self.stubs[name] = StubObject(name)
        return self.stubs[name]

    def warn(self, code: str, message: str, name: Optional[str] = None) -> Diagnostic:
        diagnostic = Diagnostic("warning", code, message, name)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def fuse(self, other: "Diagram") -> None:
        """
        Merge another diagram into this one.
        Same-named objects are fused recursively. Kind conflicts are
        checked up front, so a failed fuse leaves this diagram untouched.
        Relations are copied and re-pointed at this diagram's objects;
        `other` keeps its own relation instances.
        """
        for name, obj in other.objects.items():
            ours = self.objects.get(name)
            if ours is None or isinstance(ours, UnresolvedObject) or isinstance(obj, UnresolvedObject):
                continue
            if type(ours) is not type(obj):
                raise ObjectKindConflictError(name, ours.kind, obj.kind)

        for name, obj in other.objects.items():
            ours = self.objects.get(name)
            if ours is None or isinstance(ours, UnresolvedObject):
                self.objects[name] = obj
            elif not isinstance(obj, UnresolvedObject):
                ours.fuse(obj)

        def lookup(obj: DiagramObject) -> DiagramObject:
            if isinstance(obj, (UnresolvedObject, StubObject)):
                return obj
            return self.objects.get(obj.name, obj)

        for relation in other.relations:
            relation = copy.copy(relation)
            if isinstance(relation, AssociativeRelation):
                relation.options = dict(relation.options)
            relation.a = lookup(relation.a)
            relation.b = lookup(relation.b)
            self.relations.append(relation)

        self.diagnostics.extend(other.diagnostics)
        self.parse_errors.extend(other.parse_errors)

    def view_all(self):
        from diagram.view import View
        return View(self.objects.values(), self)

    def view(self, roots):
        from diagram.view import View
        if isinstance(roots, DiagramObject):
            roots = [roots]
        return View(roots, self)
