import os
import sys

import pytest # type: ignore

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from diagram.config import PipelineConfig
from diagram.errors import AnnotationError
from diagram.model import (
    ArrowHead,
    AssociativeRelation,
    Attribute,
    ClassObject,
    Diagram,
    DocComment,
    DocTag,
    ImplementsRelation,
    InheritanceRelation,
    InterfaceObject,
    StubObject,
    UnresolvedObject,
)
from diagram.passes import (
    infer_associations,
    mark_important,
    parse_assoc,
    resolve_objects,
    run_pipeline,
    synthesize_accessors,
)
from diagram.types import ListType, NamedType, PrimitiveType


def _doc(*tags):
    return DocComment(tags=[DocTag(name, [], value) for name, value in tags])


def _two_classes():
    diagram = Diagram()
    a = ClassObject("A")
    b = ClassObject("B")
    diagram.add_object(a)
    diagram.add_object(b)
    return diagram, a, b


def _associations(diagram):
    return [r for r in diagram.relations if isinstance(r, AssociativeRelation)]


# ---------------- Resolution ----------------

def test_resolution_points_at_registered_objects():
    diagram, a, b = _two_classes()
    diagram.add_relation(InheritanceRelation(a, UnresolvedObject("B")))

    assert resolve_objects(diagram) == 0
    assert diagram.relations[0].b is b
    assert diagram.diagnostics == []


def test_unknown_names_share_one_stub_and_one_diagnostic():
    diagram, a, b = _two_classes()
    diagram.add_relation(InheritanceRelation(a, UnresolvedObject("Base")))
    diagram.add_relation(ImplementsRelation(b, UnresolvedObject("Base")))

    assert resolve_objects(diagram) == 1
    first, second = diagram.relations
    assert isinstance(first.b, StubObject)
    assert first.b is second.b
    assert "Base" not in diagram.objects
    assert [d.name for d in diagram.diagnostics] == ["Base"]
    assert diagram.diagnostics[0].code == "unresolved-object"


def test_resolution_is_idempotent():
    diagram, a, _ = _two_classes()
    diagram.add_relation(InheritanceRelation(a, UnresolvedObject("Base")))

    resolve_objects(diagram)
    stub = diagram.relations[0].b
    assert resolve_objects(diagram) == 0
    assert diagram.relations[0].b is stub
    assert len(diagram.diagnostics) == 1


# ---------------- Association inference ----------------

def test_attribute_type_infers_association():
    diagram, a, b = _two_classes()
    a.add_attribute(Attribute("-", "myAttribute", NamedType("B")))

    infer_associations(diagram)
    (relation,) = _associations(diagram)
    assert relation.a is a
    assert relation.b is b
    assert relation.role_b == "myAttribute"
    assert relation.role_a == ""
    assert relation.name == ""


def test_explicit_assoc_annotation():
    diagram, a, b = _two_classes()
    a.doc = _doc(("@assoc", "1 roleA relName *-> 0..* roleB $flat B"))

    infer_associations(diagram)
    (relation,) = _associations(diagram)
    assert relation.b is b
    assert relation.multiplicity_a == "1"
    assert relation.role_a == "roleA"
    assert relation.name == "relName"
    assert relation.head_a == ArrowHead.COMPOSITION
    assert relation.head_b == ArrowHead.DIRECTED
    assert relation.multiplicity_b == "0..*"
    assert relation.role_b == "roleB"
    assert relation.options == {"flat": True}


def test_merge_boundary_suppresses_long_role_lists():
    for max_roles, expected in ((1, ""), (-1, "roleX, roleY")):
        diagram, a, b = _two_classes()
        a.add_attribute(Attribute("-", "roleX", NamedType("B")))
        a.add_attribute(Attribute("-", "roleY", ListType(NamedType("B"))))

        infer_associations(diagram, merge=True, max_roles=max_roles)
        (relation,) = _associations(diagram)
        assert relation.role_b == expected


def test_without_merge_one_relation_per_role():
    diagram, a, b = _two_classes()
    a.add_attribute(Attribute("-", "roleX", NamedType("B")))
    a.add_attribute(Attribute("-", "roleY", NamedType("B")))

    infer_associations(diagram)
    assert [r.role_b for r in _associations(diagram)] == ["roleX", "roleY"]


def test_inference_is_deterministic():
    def run():
        diagram, a, b = _two_classes()
        c = ClassObject("C")
        diagram.add_object(c)
        a.add_attribute(Attribute("-", "c", NamedType("C")))
        a.add_attribute(Attribute("-", "b", NamedType("B")))
        b.add_attribute(Attribute("-", "a", NamedType("A")))
        infer_associations(diagram)
        return [(r.a.name, r.b.name, r.role_b) for r in diagram.relations]

    assert run() == run() == [("A", "C", "c"), ("A", "B", "b"), ("B", "A", "a")]


def test_noassoc_on_object_and_attribute():
    diagram, a, b = _two_classes()
    a.add_attribute(Attribute("-", "skipped", NamedType("B")))
    a.attributes[0].doc = _doc(("@noassoc", ""))
    a.add_attribute(Attribute("-", "kept", NamedType("B")))
    b.doc = _doc(("@noassoc", ""))
    b.add_attribute(Attribute("-", "back", NamedType("A")))

    infer_associations(diagram)
    assert [(r.a.name, r.role_b) for r in _associations(diagram)] == [("A", "kept")]


def test_attribute_assoc_replaces_inference():
    diagram, a, b = _two_classes()
    a.add_attribute(Attribute("-", "b", NamedType("B")))
    a.attributes[0].doc = _doc(("@assoc", "- 1 owner B"))

    infer_associations(diagram)
    (relation,) = _associations(diagram)
    assert relation.role_b == "owner"
    assert relation.multiplicity_b == "1"


def test_primitive_and_unknown_types_are_ignored():
    diagram, a, _ = _two_classes()
    a.add_attribute(Attribute("-", "n", PrimitiveType("int")))
    a.add_attribute(Attribute("-", "u", NamedType("Unknown")))

    assert infer_associations(diagram) == []


def test_interfaces_do_not_infer_but_may_annotate():
    diagram, _, b = _two_classes()
    iface = InterfaceObject("Shape")
    iface.doc = _doc(("@assoc", "-> B"))
    diagram.add_object(iface)

    (relation,) = infer_associations(diagram)
    assert relation.a is iface
    assert relation.b is b
    assert relation.head_b == ArrowHead.DIRECTED


@pytest.mark.parametrize("value", [
    "B",                       # no arrow
    "- - B",                   # two arrows
    "-> Missing",              # unknown target
    "1 2 -> B",                # second multiplicity on A
    "a b c -> B",              # too many free A tokens
    "-> x y B",                # too many free B tokens
    "$ -> B",                  # empty flag
])
def test_malformed_assoc_strict_raises(value):
    diagram, a, _ = _two_classes()
    with pytest.raises(AnnotationError):
        parse_assoc(diagram, a, value, strict=True)


def test_malformed_assoc_lenient_records_diagnostic():
    diagram, a, _ = _two_classes()
    a.doc = _doc(("@assoc", "-> Missing"))

    assert infer_associations(diagram, strict=False) == []
    assert [d.code for d in diagram.diagnostics] == ["malformed-annotation"]


# ---------------- Accessors / importance ----------------

def test_accessors_for_tagged_attributes():
    diagram, a, _ = _two_classes()
    a.add_attribute(Attribute("-", "name", PrimitiveType("string")))
    a.attributes[0].doc = _doc(("@getter", ""), ("@setter", ""))
    a.add_attribute(Attribute("-", "active", PrimitiveType("boolean")))
    a.attributes[1].doc = _doc(("@getter", ""))

    synthesize_accessors(diagram)
    assert [m.name for m in a.methods] == ["getName", "setName", "isActive"]
    setter = a.methods[1]
    assert setter.args[0].name == "name"
    assert str(setter.result) == "void"

    assert synthesize_accessors(diagram) == []


def test_important_marks_objects_and_members():
    diagram, a, _ = _two_classes()
    a.doc = _doc(("@important", ""))
    a.add_attribute(Attribute("-", "x", PrimitiveType("int")))
    a.attributes[0].doc = _doc(("@important", ""))

    assert mark_important(diagram) == 2
    assert a.is_important and "important" in a.stereotypes
    assert a.attributes[0].is_important


def test_pipeline_switches():
    diagram, a, _ = _two_classes()
    a.add_attribute(Attribute("-", "b", NamedType("B")))
    a.attributes[0].doc = _doc(("@getter", ""))

    run_pipeline(diagram, PipelineConfig(associations=False, accessors=True))
    assert _associations(diagram) == []
    assert a.has_method("getB")
