import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from diagram.model import (
    Argument,
    ArrowHead,
    AssociativeRelation,
    Attribute,
    ClassObject,
    Constant,
    Diagram,
    DocComment,
    DocTag,
    EnumObject,
    ImplementsRelation,
    InheritanceRelation,
    InterfaceObject,
    Method,
)
from diagram.package_tree import build_package_tree
from diagram.types import ListType, NamedType, OptionalType, PrimitiveType
from renderers.graphviz import render_graphviz
from renderers.java import render_java
from renderers.latex import LatexConfig, encode, render_latex
from renderers.plantuml import render_plantuml


def build_diagram():
    diagram = Diagram()

    shape = InterfaceObject("Shape", ["com", "geo"])
    area = Method("+", "area", [], PrimitiveType("double"))
    area.is_abstract = True
    shape.add_method(area)

    base = ClassObject("Base", ["com", "geo"])
    base.is_abstract = True

    circle = ClassObject("Circle", ["com", "geo"])
    circle.doc = DocComment("A round shape.")
    radius = Attribute("-", "radius", PrimitiveType("double"))
    radius.is_important = True
    circle.add_attribute(radius)
    circle.add_attribute(Attribute("-", "tags", ListType(PrimitiveType("string"))))
    scale = Method("+", "scale", [Argument("factor", OptionalType(PrimitiveType("int")))], NamedType("Circle"))
    scale.doc = DocComment("Scaled copy.", [DocTag("@param", ["factor"], "multiplier")])
    circle.add_method(scale)

    color = EnumObject("Color", ["com", "paint"])
    color.add_constant(Constant("RED"))
    color.add_constant(Constant("GREEN"))

    for obj in (shape, base, circle, color):
        diagram.add_object(obj)

    diagram.add_relation(InheritanceRelation(circle, base))
    diagram.add_relation(ImplementsRelation(circle, shape))
    assoc = AssociativeRelation(circle, color)
    assoc.role_b = "fill"
    assoc.multiplicity_b = "0..1"
    assoc.head_a = ArrowHead.COMPOSITION
    assoc.head_b = ArrowHead.DIRECTED
    assoc.options["flat"] = True
    diagram.add_relation(assoc)
    return diagram


def test_graphviz():
    diagram = build_diagram()
    text = render_graphviz(diagram.view_all(), dpi=96)

    assert text.startswith("digraph {\nrankdir=BT;\ndpi=96;")
    assert '"Circle" -> "Base" [arrowhead=onormal, weight=10];' in text
    assert '"Circle" -> "Shape" [arrowhead=onormal, weight=10, style=dashed];' in text
    assert "arrowtail=diamond" in text
    assert "arrowhead=vee" in text
    assert "constraint=false" in text
    assert "<b>- radius: double</b>" in text
    assert "«enumeration»" in text
    assert "<i>+ area(): double</i>" in text


def test_graphviz_package_cluster_and_adjacent():
    diagram = build_diagram()
    tree = build_package_tree(diagram)
    text = render_graphviz(diagram.view([tree.get(["geo"])]).with_adjacent())

    assert "cluster=true;" in text
    assert 'label="geo";' in text
    assert "(from com.paint)" in text
    assert '"Circle" -> "Color"' in text


def test_plantuml():
    diagram = build_diagram()
    text = render_plantuml(diagram.view_all())
    lines = text.splitlines()

    assert lines[0] == "@startuml"
    assert lines[-1] == "@enduml"
    assert "interface Shape {" in lines
    assert "abstract class Base {" in lines
    assert "  - radius : double" in lines
    assert "  + scale(factor: Optional<int>) : Circle" in lines
    assert "  + {abstract} area() : double" in lines
    assert "Circle --|> Base" in lines
    assert "Circle ..|> Shape" in lines
    assert 'Circle *-> "fill 0..1" Color' in lines


def test_plantuml_package_blocks():
    diagram = build_diagram()
    tree = build_package_tree(diagram)
    text = render_plantuml(diagram.view([tree]))

    assert 'package "geo" {' in text
    assert 'package "paint" {' in text


def test_latex():
    diagram = build_diagram()
    text = render_latex(diagram.view_all(), LatexConfig(package_prefix=["com"]))

    # sorted by package, then name
    order = [text.index(f"subsectionmark{{{name}}}") for name in ("Base", "Circle", "Shape", "Color")]
    assert order == sorted(order)

    assert "A round shape." in text
    assert "\\texttt{factor}: multiplier" in text
    assert "\\textbf{Extends: }\\texttt{\\ref{Base}}" in text
    assert "\\textbf{Implements: }\\texttt{\\ref{Shape}}" in text
    assert "\\texttt{\\textbf{geo}}" in text


def test_latex_escaping():
    assert encode("a_b & 50%") == "a\\_b \\& 50\\%"
    assert encode("\\x{}") == "\\textbackslash{}x\\{\\}"


def test_java_stubs():
    diagram = build_diagram()
    files = render_java(diagram.view_all())

    assert set(files) == {
        "com/geo/Shape.java",
        "com/geo/Base.java",
        "com/geo/Circle.java",
        "com/paint/Color.java",
    }

    circle = files["com/geo/Circle.java"]
    assert circle.startswith("package com.geo;\n\nimport java.util.List;\n")
    assert "public class Circle extends Base implements Shape {" in circle
    assert "    private double radius;" in circle
    assert "    private List<String> tags;" in circle
    assert "    public Circle scale(Integer factor) {" in circle
    assert "     * @param factor multiplier" in circle

    assert "public abstract class Base {" in files["com/geo/Base.java"]
    assert "    double area();" in files["com/geo/Shape.java"]
    assert "    RED, GREEN;" in files["com/paint/Color.java"]
