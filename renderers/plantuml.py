from __future__ import annotations

import re
from typing import List

from diagram.model import (
    ArrowHead,
    AssociativeRelation,
    ClassMember,
    ClassObject,
    Constructor,
    DiagramObject,
    EnumObject,
    ImplementsRelation,
    InheritanceRelation,
    InterfaceObject,
    Method,
    PackageObject,
    Relation,
)
from diagram.view import View

# arrow-end glyphs: (A side, B side)
HEAD_GLYPHS = {
    ArrowHead.NONE: ("", ""),
    ArrowHead.DIRECTED: ("<", ">"),
    ArrowHead.AGGREGATION: ("o", "o"),
    ArrowHead.COMPOSITION: ("*", "*"),
}


def _clean_type_for_display(raw_type: str) -> str:
    """
    Regex-style helper:
      - Shorten fully qualified names: com.example.Person -> Person
      - Normalise spacing after commas inside generics
    """
    if not raw_type:
        return "void"

    t = re.sub(r"\b(?:[a-z_][\w]*\.)+([A-Z]\w*)", r"\1", raw_type)
    t = re.sub(r",\s*", ", ", t)
    return t


def _format_mods(member: ClassMember) -> str:
    """
    Render modifiers in PlantUML-friendly form.
    """
    out: List[str] = []
    if member.is_static:
        out.append("{static}")
    if getattr(member, "is_abstract", False):
        out.append("{abstract}")
    return " ".join(out)


def _safe_name(name: str) -> str:
    return name if re.fullmatch(r"\w+", name) else f'"{name}"'


def _header(obj: DiagramObject) -> str:
    if isinstance(obj, EnumObject):
        kind = "enum"
    elif isinstance(obj, InterfaceObject):
        kind = "interface"
    elif isinstance(obj, ClassObject) and obj.is_abstract:
        kind = "abstract class"
    else:
        kind = "class"

    header = f"{kind} {_safe_name(obj.name)}"
    if obj.stereotypes:
        header += " " + " ".join(f"<<{label}>>" for label in obj.stereotypes)
    return header


def _member_line(member: ClassMember) -> str:
    mods = _format_mods(member)
    prefix = f"{member.visibility} {mods + ' ' if mods else ''}{member.stereotype_prefix}"
    if isinstance(member, Constructor):
        params = ", ".join(f"{a.name}: {_clean_type_for_display(str(a.type))}" for a in member.args)
        return f"  {member.visibility} <<create>> {member.name}({params})"
    if isinstance(member, Method):
        params = ", ".join(f"{a.name}: {_clean_type_for_display(str(a.type))}" for a in member.args)
        return f"  {prefix}{member.name}({params}) : {_clean_type_for_display(str(member.result))}"
    return f"  {prefix}{member.name} : {_clean_type_for_display(str(member.type))}"


def object_lines(obj: DiagramObject, indent: str = "", external: bool = False) -> List[str]:
    if isinstance(obj, PackageObject):
        lines = [f'{indent}package "{obj.name or "(default)"}" {{']
        for child in obj.children():
            lines += object_lines(child, indent + "  ")
        lines.append(f"{indent}}}")
        return lines

    if external or not isinstance(obj, (ClassObject, InterfaceObject)):
        suffix = f" <<{'.'.join(obj.package)}>>" if external and obj.package else ""
        return [f"{indent}{_header(obj)}{suffix}"]

    lines = [f"{indent}{_header(obj)} {{"]
    if isinstance(obj, EnumObject):
        lines += [f"{indent}  {c.name}" for c in obj.constants]
    for member in obj.members():
        if member.kind == "constant":
            continue
        lines.append(indent + _member_line(member))
    lines.append(f"{indent}}}")
    return lines


def _end_label(role: str, multiplicity: str) -> str:
    text = " ".join(p for p in (role, multiplicity) if p)
    return f' "{text}"' if text else ""


def relation_line(relation: Relation) -> str:
    a = _safe_name(relation.a.name)
    b = _safe_name(relation.b.name)

    if isinstance(relation, InheritanceRelation):
        return f"{a} --|> {b}"
    if isinstance(relation, ImplementsRelation):
        return f"{a} ..|> {b}"
    if isinstance(relation, AssociativeRelation):
        left = HEAD_GLYPHS[relation.head_a][0]
        right = HEAD_GLYPHS[relation.head_b][1]
        line = "-" if relation.options.get("flat") else "--"
        arrow = f"{left}{line}{right}"
        text = f"{a}{_end_label(relation.role_a, relation.multiplicity_a)} {arrow}"
        text += f"{_end_label(relation.role_b, relation.multiplicity_b)} {b}"
        if relation.name:
            text += f" : {relation.name}"
        return text
    return f"{a} --> {b}"


def render_plantuml(view: View) -> str:
    """
    View -> PlantUML class diagram text.
    Rule-based and deterministic: roots in view order, adjacent objects as
    bare declarations, relations in diagram order.
    """
    plan = view.plan_render()

    lines: List[str] = []
    lines.append("@startuml")
    lines.append("skinparam classAttributeIconSize 0")
    lines.append("set namespaceSeparator none")

    for obj in plan.roots:
        lines += object_lines(obj)
    for obj in plan.adjacent:
        lines += object_lines(obj, external=True)

    for relation in plan.relations:
        lines.append(relation_line(relation))

    lines.append("@enduml")
    return "\n".join(lines)
