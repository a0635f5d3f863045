from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from diagram.model import Diagram, DiagramObject, Relation


@dataclass
class RenderPlan:
    """
    What a renderer draws for a view:
      - roots:     the view roots as given (package nodes stay nodes)
      - objects:   every leaf object under the roots
      - adjacent:  one-hop context objects, drawn as stubs
      - relations: relations to draw, in diagram order
    """
    roots: List[DiagramObject] = field(default_factory=list)
    objects: List[DiagramObject] = field(default_factory=list)
    adjacent: List[DiagramObject] = field(default_factory=list)
    relations: List[Relation] = field(default_factory=list)


class View:
    def __init__(self, roots: Iterable[DiagramObject], diagram: Diagram):
        self.roots: List[DiagramObject] = []
        for root in roots:
            if all(root is not r for r in self.roots):
                self.roots.append(root)
        self.diagram = diagram
        self.show_adjacent = False

    def with_adjacent(self) -> "View":
        self.show_adjacent = True
        return self

    def plan_render(self) -> RenderPlan:
        rendered: Dict[int, DiagramObject] = {}
        for root in self.roots:
            for obj in root.collect_objects():
                rendered.setdefault(id(obj), obj)

        adjacent: Dict[int, DiagramObject] = {}
        relations: List[Relation] = []
        for relation in self.diagram.relations:
            has_a = id(relation.a) in rendered
            has_b = id(relation.b) in rendered
            if has_a and has_b:
                relations.append(relation)
            elif self.show_adjacent and has_a:
                relations.append(relation)
                adjacent.setdefault(id(relation.b), relation.b)

        return RenderPlan(
            roots=list(self.roots),
            objects=list(rendered.values()),
            adjacent=list(adjacent.values()),
            relations=relations,
        )
