"""
View -> Java source skeletons, one compilation unit per object.

render_java returns {"com/a/Name.java": source}. Only declarations are
emitted: method bodies throw UnsupportedOperationException.
"""

from __future__ import annotations

from typing import Dict, List, Set

from diagram.model import (
    Attribute,
    ClassMember,
    ClassObject,
    Constructor,
    DiagramObject,
    EnumObject,
    ImplementsRelation,
    InheritanceRelation,
    InterfaceObject,
    Method,
    Relation,
)
from diagram.types import (
    ListType,
    NamedType,
    OptionalType,
    PrimitiveType,
    SetType,
    SourceType,
    Type,
    VoidType,
)
from diagram.view import View

PRIMITIVES = {
    "boolean": "boolean",
    "byte": "byte",
    "char": "char",
    "short": "short",
    "int": "int",
    "long": "long",
    "float": "float",
    "double": "double",
    "string": "String",
}

BOXED = {
    "boolean": "Boolean",
    "byte": "Byte",
    "char": "Character",
    "short": "Short",
    "int": "Integer",
    "long": "Long",
    "float": "Float",
    "double": "Double",
    "string": "String",
}

MODIFIERS = {"+": "public", "-": "private", "#": "protected", "~": ""}


def java_type(t: Type, imports: Set[str], boxed: bool = False) -> str:
    if isinstance(t, PrimitiveType):
        table = BOXED if boxed else PRIMITIVES
        return table.get(t.name, t.name)
    if isinstance(t, OptionalType):
        # nullable: reference types are already nullable in Java
        return java_type(t.item, imports, boxed=True)
    if isinstance(t, ListType):
        imports.add("java.util.List")
        return f"List<{java_type(t.item, imports, boxed=True)}>"
    if isinstance(t, SetType):
        imports.add("java.util.Set")
        return f"Set<{java_type(t.item, imports, boxed=True)}>"
    if isinstance(t, VoidType):
        return "void"
    if isinstance(t, (NamedType, SourceType)):
        return str(t)
    return "Object"


def _modifiers(member: ClassMember, interface: bool = False) -> str:
    mods = [] if interface else [MODIFIERS[member.visibility]]
    if member.is_static:
        mods.append("static")
    abstract = getattr(member, "is_abstract", False)
    if abstract and not interface:
        mods.append("abstract")
    if interface and isinstance(member, Method) and not abstract and not member.is_static:
        mods.append("default")
    return " ".join(m for m in mods if m)


def _args(member, imports: Set[str]) -> str:
    return ", ".join(f"{java_type(a.type, imports)} {a.name}" for a in member.args)


def _javadoc(member_or_obj, indent: str) -> List[str]:
    doc = member_or_obj.doc
    if doc.is_empty():
        return []
    lines = [f"{indent}/**"]
    lines += [f"{indent} * {line}".rstrip() for line in doc.content.splitlines()]
    for tag in doc.tags:
        params = " ".join(tag.params)
        text = " ".join(p for p in (tag.name, params, tag.value) if p)
        lines.append(f"{indent} * {text}")
    lines.append(f"{indent} */")
    return lines


def member_to_java(member: ClassMember, imports: Set[str], interface: bool = False) -> List[str]:
    indent = "    "
    lines = _javadoc(member, indent)
    mods = _modifiers(member, interface)
    lead = f"{indent}{mods} " if mods else indent

    if isinstance(member, Attribute):
        lines.append(f"{lead}{java_type(member.type, imports)} {member.name};")
    elif isinstance(member, Constructor):
        lines.append(f"{lead}{member.name}({_args(member, imports)}) {{")
        lines.append(f"{indent}}}")
    elif isinstance(member, Method):
        signature = f"{lead}{java_type(member.result, imports)} {member.name}({_args(member, imports)})"
        if member.is_abstract:
            lines.append(signature + ";")
        else:
            lines.append(signature + " {")
            lines.append(f'{indent}    throw new UnsupportedOperationException("{member.name}");')
            lines.append(f"{indent}}}")
    return lines


def _declaration(obj: DiagramObject, outgoing: List[Relation]) -> str:
    extends = [r.b.name for r in outgoing if isinstance(r, InheritanceRelation)]
    implements = [r.b.name for r in outgoing if isinstance(r, ImplementsRelation)]
    generics = f"<{', '.join(str(g) for g in obj.generics)}>" if obj.generics else ""

    if isinstance(obj, EnumObject):
        head = f"public enum {obj.name}"
    elif isinstance(obj, InterfaceObject):
        head = f"public interface {obj.name}{generics}"
        # interfaces extend interfaces through either relation kind
        extends = extends + implements
        implements = []
    else:
        abstract = "abstract " if obj.is_abstract else ""
        head = f"public {abstract}class {obj.name}{generics}"

    if extends:
        head += " extends " + ", ".join(extends)
    if implements:
        head += " implements " + ", ".join(implements)
    return head + " {"


def object_to_java(obj: DiagramObject, outgoing: List[Relation]) -> str:
    imports: Set[str] = set()
    body: List[str] = []

    if isinstance(obj, EnumObject):
        names = [c.name for c in obj.constants]
        body.append("    " + ", ".join(names) + ";")
    if isinstance(obj, ClassObject):
        for member in obj.members():
            if member.kind == "constant":
                continue
            body += member_to_java(member, imports)
            body.append("")
    elif isinstance(obj, InterfaceObject):
        for member in obj.methods:
            body += member_to_java(member, imports, interface=True)
            body.append("")

    while body and not body[-1]:
        body.pop()

    lines: List[str] = []
    if obj.package:
        lines += [f"package {'.'.join(obj.package)};", ""]
    if imports:
        lines += [f"import {name};" for name in sorted(imports)]
        lines.append("")
    lines += _javadoc(obj, "")
    lines.append(_declaration(obj, outgoing))
    lines += body
    lines.append("}")
    return "\n".join(lines) + "\n"


def render_java(view: View) -> Dict[str, str]:
    plan = view.plan_render()

    outgoing: Dict[int, List[Relation]] = {}
    for relation in view.diagram.relations:
        outgoing.setdefault(id(relation.a), []).append(relation)

    files: Dict[str, str] = {}
    for obj in plan.objects:
        if not isinstance(obj, (ClassObject, InterfaceObject)):
            continue
        path = "/".join([*obj.package, f"{obj.name}.java"])
        files[path] = object_to_java(obj, outgoing.get(id(obj), []))
    return files
