"""
GraphQL schema (SDL) → Diagram builder.

  - object types       → ClassObject (plain fields → private attributes,
                         fields with arguments → public methods)
  - interface types    → InterfaceObject
  - enum types         → EnumObject
  - input object types → ClassObject in the `inputs` sub-package
  - implements         → ImplementsRelation towards UnresolvedObject

Every object lives in the package named after the schema. Nullable
fields become OptionalType, non-null ones their plain type.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from graphql import GraphQLSyntaxError, parse  # type: ignore
from graphql.language import (  # type: ignore
    EnumTypeDefinitionNode,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
)

from adapters.javadoc import parse_doc_comment
from diagram.config import PipelineConfig
from diagram.model import (
    Argument,
    Attribute,
    ClassObject,
    Constant,
    Diagram,
    DiagramObject,
    EnumObject,
    ImplementsRelation,
    InterfaceObject,
    Method,
    UnresolvedObject,
)
from diagram.passes import run_pipeline
from diagram.types import ListType, NamedType, OptionalType, PrimitiveType, Type

logger = logging.getLogger(__name__)

SCALARS = {
    "Int": "int",
    "Float": "double",
    "String": "string",
    "Boolean": "boolean",
    "ID": "string",
}


class GraphQLAdapter:
    language = "graphql"

    default_visibility = "-"

    # ---------------- Helpers ----------------

    def _named(self, node) -> Type:
        if isinstance(node, ListTypeNode):
            return ListType(self._to_type(node.type))
        if isinstance(node, NamedTypeNode):
            name = node.name.value
            if name in SCALARS:
                return PrimitiveType(SCALARS[name])
            return NamedType(name)
        raise ValueError(f"Unknown GraphQL type node: {node.kind}")

    def _to_type(self, node) -> Type:
        if isinstance(node, NonNullTypeNode):
            return self._named(node.type)
        return OptionalType(self._named(node))

    def _apply_doc(self, target, node) -> None:
        description = getattr(node, "description", None)
        if description is not None:
            target.doc = parse_doc_comment(description.value)

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str):
        try:
            return parse(code)
        except GraphQLSyntaxError as e:
            raise ValueError(f"GraphQL syntax error: {e.message}")

    def build_diagram_for_code(
        self,
        code: str,
        filename: str | None = None,
        config: Optional[PipelineConfig] = None,
    ) -> Diagram:
        diagram = Diagram()
        self.populate(diagram, code, schema_name=self._schema_name(filename))
        return run_pipeline(diagram, config)

    def build_diagram_for_files(
        self,
        files: List[str],
        config: Optional[PipelineConfig] = None,
    ) -> Diagram:
        diagram = Diagram()
        for path in files:
            try:
                code = Path(path).read_text(encoding="utf-8")
                self.populate(diagram, code, schema_name=self._schema_name(path))
            except ValueError as e:
                logger.warning("Skipping %s: %s", path, e)
                diagram.parse_errors.append({"file": path, "error": str(e)})
        return run_pipeline(diagram, config)

    def _schema_name(self, filename: str | None) -> str:
        return Path(filename).stem if filename else "schema"

    # ---------------- Core processing ----------------

    def populate(self, diagram: Diagram, code: str, schema_name: str = "schema") -> None:
        document = self.parse_to_ast(code)
        package = [schema_name]

        for definition in document.definitions:
            if isinstance(definition, ObjectTypeDefinitionNode):
                obj = self._object_type(definition)
            elif isinstance(definition, InterfaceTypeDefinitionNode):
                obj = self._interface_type(definition)
            elif isinstance(definition, EnumTypeDefinitionNode):
                obj = self._enum_type(definition)
            elif isinstance(definition, InputObjectTypeDefinitionNode):
                obj = self._input_type(definition)
                obj.package = package + ["inputs"]
                diagram.add_object(obj)
                continue
            else:
                logger.debug("skipping GraphQL definition %s", definition.kind)
                continue

            obj.package = list(package)
            diagram.add_object(obj)
            for iface in getattr(definition, "interfaces", None) or []:
                diagram.add_relation(ImplementsRelation(obj, UnresolvedObject(iface.name.value)))

    def _fields_into(self, definition, add_attribute, add_method) -> None:
        for field in definition.fields or []:
            if getattr(field, "arguments", None):
                args = [Argument(a.name.value, self._to_type(a.type)) for a in field.arguments]
                method = Method("+", field.name.value, args, self._to_type(field.type))
                self._apply_doc(method, field)
                add_method(method)
            else:
                attr = Attribute(self.default_visibility, field.name.value, self._to_type(field.type))
                self._apply_doc(attr, field)
                add_attribute(attr)

    def _object_type(self, definition) -> DiagramObject:
        obj = ClassObject(definition.name.value)
        self._apply_doc(obj, definition)
        self._fields_into(definition, obj.add_attribute, obj.add_method)
        return obj

    def _interface_type(self, definition) -> DiagramObject:
        obj = InterfaceObject(definition.name.value)
        self._apply_doc(obj, definition)

        def as_getter(attr: Attribute) -> None:
            method = Method("+", attr.name, [], attr.type)
            method.is_abstract = True
            method.doc = attr.doc
            obj.add_method(method)

        def as_abstract(method: Method) -> None:
            method.is_abstract = True
            obj.add_method(method)

        self._fields_into(definition, as_getter, as_abstract)
        return obj

    def _enum_type(self, definition) -> DiagramObject:
        obj = EnumObject(definition.name.value)
        self._apply_doc(obj, definition)
        for value in definition.values or []:
            constant = Constant(value.name.value)
            self._apply_doc(constant, value)
            obj.add_constant(constant)
        return obj

    def _input_type(self, definition) -> ClassObject:
        obj = ClassObject(definition.name.value)
        self._apply_doc(obj, definition)
        for field in definition.fields or []:
            attr = Attribute(self.default_visibility, field.name.value, self._to_type(field.type))
            self._apply_doc(attr, field)
            obj.add_attribute(attr)
        return obj
