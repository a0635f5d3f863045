"""
View -> LaTeX documentation sections.

One \\subsection per object (sorted by package, then name) with its doc
text, @param lists, member subsections and extends/implements references.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

from diagram.model import (
    ClassMember,
    ClassObject,
    Constructor,
    DiagramObject,
    DocComment,
    EnumObject,
    ImplementsRelation,
    InheritanceRelation,
    InterfaceObject,
    Method,
    Relation,
)
from diagram.view import View


@dataclass
class LatexConfig:
    package_prefix: List[str] = field(default_factory=list)
    use_fa_icons: bool = False
    translations: Dict[str, str] = field(default_factory=lambda: {
        "constants": "Constants",
        "attributes": "Attributes",
        "methods": "Methods",
        "extends": "Extends",
        "implements": "Implements",
    })


# ---------------- LaTeX helpers ----------------

_SPECIAL = re.compile(r"[\\&%$#_{}]")


def encode(text: str) -> str:
    return _SPECIAL.sub(lambda m: "\\textbackslash{}" if m.group() == "\\" else "\\" + m.group(), text)


def textbf(text: str) -> str:
    return f"\\textbf{{{text}}}"


def texttt(text: str) -> str:
    return f"\\texttt{{{text}}}"


def subsection(title: str, starred: bool = False, toc_title: str | None = None) -> str:
    cmd = "\\subsection*" if starred else "\\subsection"
    if toc_title:
        return f"{cmd}[{toc_title}]{{{title}}}"
    return f"{cmd}{{{title}}}"


def subsectionmark(mark: str) -> str:
    return f"\\subsectionmark{{{mark}}}"


def itemize(items: List[str], options: str = "") -> str:
    if not items:
        return ""
    body = "".join(f"\\item {item}\n" for item in items)
    return f"\\begin{{itemize}}[{options}]\n{body}\\end{{itemize}}\n"


def _remove_prefix(path: List[str], prefix: List[str]) -> List[str]:
    count = 0
    while count < len(path) and count < len(prefix) and path[count] == prefix[count]:
        count += 1
    return path[count:]


# ---------------- Model -> LaTeX ----------------

def doc_to_latex(doc: DocComment) -> str:
    params = [
        f"{texttt(encode(tag.params[0]))}: {encode(tag.value)}"
        for tag in doc.get_all("@param")
        if tag.params
    ]
    return encode(doc.content) + "\n" + itemize(params, "label=")


def _args(member) -> str:
    return ", ".join(f"{a.name}: {a.type}" for a in member.args)


def member_to_latex(member: ClassMember) -> str:
    prefix = f"{member.visibility} {member.stereotype_prefix}"
    if isinstance(member, Method):
        signature = f"{prefix}{member.name}({_args(member)}): {member.result}"
    elif isinstance(member, Constructor):
        signature = f"{prefix}{member.name}({_args(member)})"
    elif hasattr(member, "type"):
        signature = f"{prefix}{member.name}: {member.type}"
    else:
        signature = member.name

    text = texttt(textbf(encode(signature)))
    if member.doc.content:
        text += "\\\\\n" + doc_to_latex(member.doc)
    return text


def members_to_latex(title: str, members: List[ClassMember]) -> str:
    if not members:
        return ""
    items = [f" {member_to_latex(m)}" for m in members]
    return (
        subsectionmark(title) + "\n"
        + subsection(title, starred=True) + "\n"
        + itemize(items, "label=,leftmargin=0pt") + "\n"
    )


def _references(title: str, relations: List[Relation]) -> str:
    if not relations:
        return ""
    refs = ", ".join(texttt(f"\\ref{{{r.b.name}}}") for r in relations)
    return textbf(f"{title}: ") + refs + "\\\\\n"


def object_to_latex(obj: DiagramObject, config: LatexConfig, outgoing: List[Relation]) -> str:
    package = ".".join(_remove_prefix(obj.package, config.package_prefix))
    package_label = f"\\faIcon{{folder}} {package}" if config.use_fa_icons else package
    title = texttt(textbf(encode(obj.name))) + "\\hfill" + texttt(textbf(encode(package_label))) + "\n"

    section = subsectionmark(obj.name) + "\n"
    section += subsection(title, toc_title=obj.name) + "\n"
    section += doc_to_latex(obj.doc) + "\n"

    t = config.translations
    if isinstance(obj, EnumObject):
        section += members_to_latex(t["constants"], obj.constants)
    if isinstance(obj, ClassObject):
        section += members_to_latex(t["attributes"], obj.attributes)
        section += members_to_latex(t["methods"], [*obj.constructors, *obj.methods])
    elif isinstance(obj, InterfaceObject):
        section += members_to_latex(t["methods"], obj.methods)

    section += _references(t["extends"], [r for r in outgoing if isinstance(r, InheritanceRelation)])
    section += _references(t["implements"], [r for r in outgoing if isinstance(r, ImplementsRelation)])
    return section


def render_latex(view: View, config: LatexConfig | None = None) -> str:
    config = config or LatexConfig()
    plan = view.plan_render()

    outgoing: Dict[int, List[Relation]] = {}
    for relation in view.diagram.relations:
        outgoing.setdefault(id(relation.a), []).append(relation)

    objects = sorted(plan.objects, key=lambda o: (tuple(o.package), o.name))
    return "".join(object_to_latex(o, config, outgoing.get(id(o), [])) + "\n" for o in objects)
