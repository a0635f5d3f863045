import networkx as nx # type: ignore
from typing import Any, Dict

from diagram.model import (
    AssociativeRelation,
    ClassMember,
    Diagram,
    DiagramObject,
    ImplementsRelation,
    InheritanceRelation,
    Relation,
)

MEMBER_EDGE = {
    "attribute": "HAS_ATTRIBUTE",
    "method": "HAS_METHOD",
    "constructor": "HAS_CONSTRUCTOR",
    "constant": "HAS_CONSTANT",
}


def _object_attrs(obj: DiagramObject) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {
        "name": obj.name,
        "package": list(obj.package),
        "stereotypes": obj.stereotype_labels(),
        "doc": obj.doc.content,
        "important": obj.is_important,
    }
    if obj.generics:
        attrs["generics"] = [str(g) for g in obj.generics]
    if hasattr(obj, "is_abstract"):
        attrs["is_abstract"] = obj.is_abstract
    return attrs


def _member_attrs(member: ClassMember) -> Dict[str, Any]:
    attrs: Dict[str, Any] = {
        "name": member.name,
        "visibility": member.visibility,
        "is_static": member.is_static,
        "stereotypes": list(member.stereotypes),
    }
    if hasattr(member, "type"):
        attrs["type"] = str(member.type)
    if hasattr(member, "args"):
        attrs["args"] = [{"name": a.name, "type": str(a.type)} for a in member.args]
    if hasattr(member, "result"):
        attrs["result"] = str(member.result)
        attrs["is_abstract"] = member.is_abstract
    return attrs


def _edge_type(relation: Relation) -> str:
    if isinstance(relation, InheritanceRelation):
        return "INHERITS"
    if isinstance(relation, ImplementsRelation):
        return "IMPLEMENTS"
    if isinstance(relation, AssociativeRelation):
        return "ASSOCIATES"
    return "RELATES"


class DiagramGraph:
    """
    Typed multi-graph view of a Diagram.
    Nodes: objects (class/interface/enum/stub) and their members.
    Edges: HAS_ATTRIBUTE, HAS_METHOD, HAS_CONSTRUCTOR, HAS_CONSTANT,
           INHERITS, IMPLEMENTS, ASSOCIATES
    """
    def __init__(self) -> None:
        self.g = nx.MultiDiGraph()

    def add_node(self, node_id: str, kind: str, payload: Any) -> None:
        self.g.add_node(node_id, kind=kind, payload=payload)

    def add_edge(self, src: str, dst: str, etype: str, **attrs: Any) -> None:
        self.g.add_edge(src, dst, etype=etype, **attrs)

    @classmethod
    def from_diagram(cls, diagram: Diagram) -> "DiagramGraph":
        graph = cls()

        def ensure_object(obj: DiagramObject) -> str:
            node_id = f"{obj.kind}:{obj.qualified_name}"
            if node_id not in graph.g:
                graph.add_node(node_id, obj.kind, _object_attrs(obj))
            return node_id

        for obj in diagram.objects.values():
            obj_id = ensure_object(obj)
            members = obj.members() if hasattr(obj, "members") else []
            for index, member in enumerate(members):
                member_id = f"{member.kind}:{obj.qualified_name}:{member.name}#{index}"
                graph.add_node(member_id, member.kind, _member_attrs(member))
                graph.add_edge(obj_id, member_id, MEMBER_EDGE[member.kind])

        for relation in diagram.relations:
            src = ensure_object(relation.a)
            dst = ensure_object(relation.b)
            attrs: Dict[str, Any] = {}
            if isinstance(relation, AssociativeRelation):
                attrs = {
                    "name": relation.name,
                    "role_a": relation.role_a,
                    "role_b": relation.role_b,
                    "multiplicity_a": relation.multiplicity_a,
                    "multiplicity_b": relation.multiplicity_b,
                    "head_a": relation.head_a.value,
                    "head_b": relation.head_b.value,
                    "options": dict(relation.options),
                }
            graph.add_edge(src, dst, _edge_type(relation), **attrs)

        return graph

    def to_debug_json(self) -> Dict[str, Any]:
        """
        Convert graph to JSON-like dict for debugging / API responses.
        """
        nodes = []
        for node_id, data in self.g.nodes(data=True):
            nodes.append({
                "id": node_id,
                "kind": data.get("kind"),
                "attrs": dict(data.get("payload") or {}),
            })

        edges = []
        for src, dst, data in self.g.edges(data=True):
            edge = {
                "src": src,
                "dst": dst,
                "type": data.get("etype"),
            }
            extra = {k: v for k, v in data.items() if k != "etype"}
            if extra:
                edge["attrs"] = extra
            edges.append(edge)

        return {"nodes": nodes, "edges": edges}
