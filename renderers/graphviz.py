"""
View -> GraphViz (dot) text.

Objects become HTML-table nodes, package nodes become clusters, adjacent
objects are drawn as header-only nodes with a "(from package)" line.
"""

from __future__ import annotations

import html
from typing import List

from diagram.config import GRAPHVIZ_DPI
from diagram.model import (
    ArrowHead,
    AssociativeRelation,
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
    PackageObject,
    Relation,
)
from diagram.view import View

ARROW_TYPES = {
    ArrowHead.NONE: "none",
    ArrowHead.DIRECTED: "vee",
    ArrowHead.AGGREGATION: "odiamond",
    ArrowHead.COMPOSITION: "diamond",
}


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _escape(text: str) -> str:
    return html.escape(text, quote=False)


class BlockSection:
    def __init__(self, align: str, lines: List[str]):
        self.align = align
        self.lines = lines

    def add_line(self, line: str) -> None:
        self.lines.append(line)

    def to_html_table(self) -> str:
        rows = "".join(f'<tr><td align="{self.align}">{line}</td></tr>' for line in self.lines)
        content = f'<table border="0">{rows}</table>' if rows else ""
        return f'<tr><td align="{self.align}">{content}</td></tr>'


class BlockNode:
    def __init__(self, sections: List[BlockSection]):
        self.sections = sections

    def to_html_table(self) -> str:
        sections = "".join(section.to_html_table() for section in self.sections)
        return f'<table border="0" cellborder="1" cellspacing="0">{sections}</table>'


# ---------------- Members ----------------

def _args(member) -> str:
    return ", ".join(f"{arg.name}: {_escape(str(arg.type))}" for arg in member.args)


def member_html(member: ClassMember) -> str:
    prefix = f"{member.visibility} {_escape(member.stereotype_prefix)}"
    if isinstance(member, Attribute):
        line = f"{prefix}{_escape(member.name)}: {_escape(str(member.type))}"
    elif isinstance(member, Method):
        line = f"{prefix}{_escape(member.name)}({_args(member)}): {_escape(str(member.result))}"
        if member.is_abstract:
            line = f"<i>{line}</i>"
    elif isinstance(member, Constructor):
        line = f"{member.visibility} «create» {_escape(member.name)}({_args(member)})"
    else:
        line = _escape(member.name)
    if member.is_static and not isinstance(member, Constructor):
        line = f"<u>{line}</u>"
    if member.is_important:
        line = f"<b>{line}</b>"
    return line


def _sections(obj: DiagramObject) -> List[BlockSection]:
    sections: List[BlockSection] = []
    if isinstance(obj, EnumObject):
        sections.append(BlockSection("left", [_escape(c.name) for c in obj.constants]))
    if isinstance(obj, ClassObject):
        sections.append(BlockSection("left", [member_html(a) for a in obj.attributes]))
        sections.append(BlockSection("left", [member_html(m) for m in [*obj.constructors, *obj.methods]]))
    elif isinstance(obj, InterfaceObject):
        sections.append(BlockSection("left", [member_html(m) for m in obj.methods]))
    return sections


# ---------------- Objects ----------------

def object_to_graphviz(obj: DiagramObject, external: bool = False) -> str:
    if isinstance(obj, PackageObject):
        children = "\n".join(object_to_graphviz(child) for child in obj.children())
        return (
            "subgraph {\n"
            "cluster=true;\n"
            "color=black;\n"
            f"label={_quote(obj.name)};\n"
            "labeljust=l;\n"
            'labelloc="b";\n'
            "fontsize=16;\n"
            f"{children}\n"
            "};"
        )

    header = BlockSection("center", [])
    labels = obj.stereotype_labels()
    if labels:
        header.add_line(_escape("«" + ", ".join(labels) + "»"))
    header.add_line(f"<b>{_escape(obj.name)}</b>" if obj.is_important else _escape(obj.name))
    block = BlockNode([header])
    if external:
        header.add_line(_escape(f"(from {'.'.join(obj.package)})"))
    else:
        block.sections += _sections(obj)

    return f"{_quote(obj.name)} [shape=none, label=<{block.to_html_table()}>];"


# ---------------- Relations ----------------

def relation_to_graphviz(relation: Relation) -> str:
    a = _quote(relation.a.name)
    b = _quote(relation.b.name)
    if isinstance(relation, InheritanceRelation):
        return f"{a} -> {b} [arrowhead=onormal, weight=10];"
    if isinstance(relation, ImplementsRelation):
        return f"{a} -> {b} [arrowhead=onormal, weight=10, style=dashed];"
    if isinstance(relation, AssociativeRelation):
        head = relation.role_b + "\n" + relation.multiplicity_b
        tail = relation.role_a + "\n" + relation.multiplicity_a
        attrs = [
            "weight=1",
            f"label={_quote(relation.name)}",
            f"headlabel={_quote(head)}",
            f"taillabel={_quote(tail)}",
            f"arrowtail={ARROW_TYPES[relation.head_a]}",
            f"arrowhead={ARROW_TYPES[relation.head_b]}",
            "dir=both",
        ]
        if relation.options.get("flat"):
            attrs.append("constraint=false")
        return f"{a} -> {b} [{', '.join(attrs)}];"
    return f"{a} -> {b};"


def render_graphviz(view: View, dpi: int = GRAPHVIZ_DPI) -> str:
    plan = view.plan_render()

    lines = ["digraph {", "rankdir=BT;", f"dpi={dpi};"]
    for obj in plan.roots:
        lines.append(object_to_graphviz(obj))
    for obj in plan.adjacent:
        lines.append(object_to_graphviz(obj, external=True))
    for relation in plan.relations:
        lines.append(relation_to_graphviz(relation))
    lines.append("}")
    return "\n".join(lines) + "\n"
