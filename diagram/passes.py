"""
Diagram passes, run once per diagram in this order:

  1. resolve_objects       placeholder endpoints -> registered objects
  2. infer_associations    explicit @assoc + attribute-type associations
  3. synthesize_accessors  @getter / @setter methods
  4. mark_important        @important objects and members

Resolution assumes every object from every input is registered.
Association inference assumes resolution already ran.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

from diagram.config import PipelineConfig
from diagram.errors import AnnotationError
from diagram.model import (
    Argument,
    ArrowHead,
    AssociativeRelation,
    ClassObject,
    Diagram,
    DiagramObject,
    Method,
    UnresolvedObject,
)
from diagram.types import PrimitiveType, VoidType

logger = logging.getLogger(__name__)

MULTIPLICITY_RE = re.compile(r"^(\*|[0-9]+)(\.\.(\*|[0-9]+))?$")


# ---------------- Resolution ----------------

def resolve_objects(diagram: Diagram) -> int:
    """
    Point every relation endpoint at a registered object.
    Unknown names get a shared StubObject and one warning per name.
    Returns the number of names that could not be resolved.
    """
    missing: Dict[str, None] = {}

    def lookup(name: str) -> DiagramObject:
        obj = diagram.get_object(name)
        if obj is not None and not isinstance(obj, UnresolvedObject):
            return obj
        if name not in missing:
            missing[name] = None
            logger.warning("Unable to resolve object `%s`", name)
            diagram.warn("unresolved-object", f"unable to resolve object `{name}`", name)
        return diagram.stub(name)

    for relation in diagram.relations:
        relation.resolve(lookup)

    logger.debug("resolved %d relations, %d unknown names", len(diagram.relations), len(missing))
    return len(missing)


# ---------------- @assoc annotations ----------------

def _reject(diagram: Diagram, value: str, reason: str, strict: bool) -> None:
    if strict:
        raise AnnotationError("@assoc", value, reason)
    logger.warning("Ignoring @assoc `%s`: %s", value, reason)
    diagram.warn("malformed-annotation", f"ignoring @assoc `{value}`: {reason}")


def parse_assoc(
    diagram: Diagram,
    source: DiagramObject,
    value: str,
    strict: bool = True,
) -> Optional[AssociativeRelation]:
    """
    Build the relation described by an @assoc value, e.g.

        1 roleA relName *-> 0..* roleB $flat Target

    The last token names the target object. The single token containing a
    dash carries the arrow heads (left of the dash: A side, right of it:
    B side) and splits the remaining tokens into an A side and a B side.
    On each side multiplicities match MULTIPLICITY_RE and `$name` tokens
    set visual flags. Free tokens are role A then the relation name on
    the A side, and role B on the B side.

    Malformed values raise AnnotationError when strict, otherwise they
    are dropped with a warning and None is returned.
    """
    tokens = value.split()
    if len(tokens) < 2:
        _reject(diagram, value, "expected an arrow and a target object", strict)
        return None

    *body, target_name = tokens
    target = diagram.get_object(target_name)
    if target is None:
        _reject(diagram, value, f"unknown target object `{target_name}`", strict)
        return None

    arrows = [t for t in body if "-" in t]
    if len(arrows) != 1:
        _reject(diagram, value, f"expected exactly one arrow token, found {len(arrows)}", strict)
        return None

    relation = AssociativeRelation(source, target)
    free: Dict[str, List[str]] = {"a": [], "b": []}
    side = "a"
    for token in body:
        if "-" in token:
            left = token.index("-")
            right = token.rindex("-")
            relation.head_a = ArrowHead.from_char(token[left - 1] if left > 0 else "")
            relation.head_b = ArrowHead.from_char(token[right + 1] if right + 1 < len(token) else "")
            side = "b"
        elif MULTIPLICITY_RE.match(token):
            current = relation.multiplicity_a if side == "a" else relation.multiplicity_b
            if current:
                _reject(diagram, value, f"second multiplicity `{token}` on side {side.upper()}", strict)
                return None
            if side == "a":
                relation.multiplicity_a = token
            else:
                relation.multiplicity_b = token
        elif token.startswith("$"):
            if len(token) == 1:
                _reject(diagram, value, "empty visual flag", strict)
                return None
            relation.options[token[1:]] = True
        else:
            free[side].append(token)

    if len(free["a"]) > 2 or len(free["b"]) > 1:
        _reject(diagram, value, "too many role or name tokens", strict)
        return None

    if free["a"]:
        relation.role_a = free["a"][0]
    if len(free["a"]) > 1:
        relation.name = free["a"][1]
    if free["b"]:
        relation.role_b = free["b"][0]
    return relation


def _add_explicit(diagram: Diagram, source: DiagramObject, value: str, strict: bool) -> List[AssociativeRelation]:
    relation = parse_assoc(diagram, source, value, strict)
    if relation is None:
        return []
    diagram.add_relation(relation)
    return [relation]


# ---------------- Association inference ----------------

def infer_associations(
    diagram: Diagram,
    merge: bool = False,
    max_roles: int = -1,
    strict: bool = True,
) -> List[AssociativeRelation]:
    """
    Add explicit (@assoc) and inferred associations.

    For class-like objects without @noassoc every attribute that has no
    @assoc/@noassoc tag records its name as a role towards each diagram
    object its type refers to. With merge, roles towards the same target
    become one relation labelled "r1, r2" (empty when there are more than
    max_roles, -1 = unbounded); otherwise each role gets its own relation.
    """
    added: List[AssociativeRelation] = []

    for obj in list(diagram.objects.values()):
        for tag in obj.doc.get_all("@assoc"):
            added += _add_explicit(diagram, obj, tag.value, strict)

        if obj.doc.has("@noassoc") or not isinstance(obj, ClassObject):
            continue

        roles: Dict[str, List[str]] = {}
        for attribute in obj.attributes:
            tags = attribute.doc.get_all("@assoc")
            if tags:
                for tag in tags:
                    added += _add_explicit(diagram, obj, tag.value, strict)
                continue
            if attribute.doc.has("@noassoc"):
                continue
            for ref in attribute.type.collect_names():
                if diagram.has_object(ref):
                    roles.setdefault(ref, []).append(attribute.name)

        for target_name, names in roles.items():
            target = diagram.objects[target_name]
            if merge:
                relation = AssociativeRelation(obj, target)
                if max_roles < 0 or len(names) <= max_roles:
                    relation.role_b = ", ".join(names)
                diagram.add_relation(relation)
                added.append(relation)
            else:
                for role in names:
                    relation = AssociativeRelation(obj, target)
                    relation.role_b = role
                    diagram.add_relation(relation)
                    added.append(relation)

    logger.debug("added %d associations", len(added))
    return added


# ---------------- Accessors / importance ----------------

def _capitalize(name: str) -> str:
    return name[:1].upper() + name[1:]


def synthesize_accessors(diagram: Diagram) -> List[Method]:
    """Add getX()/isX() for @getter and setX(x) for @setter attributes."""
    added: List[Method] = []
    for obj in diagram.objects.values():
        if not isinstance(obj, ClassObject):
            continue
        for attribute in list(obj.attributes):
            suffix = _capitalize(attribute.name)
            if attribute.doc.has("@getter"):
                is_bool = isinstance(attribute.type, PrimitiveType) and attribute.type.name == "boolean"
                name = ("is" if is_bool else "get") + suffix
                if not obj.has_method(name):
                    getter = Method("+", name, [], attribute.type)
                    getter.is_static = attribute.is_static
                    obj.add_method(getter)
                    added.append(getter)
            if attribute.doc.has("@setter"):
                name = "set" + suffix
                if not obj.has_method(name):
                    setter = Method("+", name, [Argument(attribute.name, attribute.type)], VoidType())
                    setter.is_static = attribute.is_static
                    obj.add_method(setter)
                    added.append(setter)
    return added


def mark_important(diagram: Diagram) -> int:
    marked = 0
    for obj in diagram.objects.values():
        targets = [obj]
        if hasattr(obj, "members"):
            targets += obj.members()
        for item in targets:
            if item.doc.has("@important") and not item.is_important:
                item.is_important = True
                if "important" not in item.stereotypes:
                    item.stereotypes.append("important")
                marked += 1
    return marked


def run_pipeline(diagram: Diagram, config: Optional[PipelineConfig] = None) -> Diagram:
    config = config or PipelineConfig()
    resolve_objects(diagram)
    if config.associations:
        infer_associations(diagram, merge=config.merge, max_roles=config.max_roles, strict=config.strict)
    if config.accessors:
        synthesize_accessors(diagram)
    if config.important:
        mark_important(diagram)
    return diagram
