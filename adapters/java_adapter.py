import logging

import javalang  # type: ignore
from typing import Any, List, Optional, Tuple

from adapters.javadoc import parse_doc_comment
from diagram.config import PipelineConfig
from diagram.model import (
    VISIBILITY_BY_MODIFIER,
    Argument,
    Attribute,
    ClassObject,
    Constant,
    Constructor,
    Diagram,
    DiagramObject,
    EnumObject,
    ImplementsRelation,
    InheritanceRelation,
    InterfaceObject,
    Method,
    UnresolvedObject,
    Visibility,
)
from diagram.passes import run_pipeline
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

logger = logging.getLogger(__name__)


class JavaAdapter:
    """
    Java → Diagram builder.
    Parses one or more Java compilation units and registers:
      - ClassObject / EnumObject / InterfaceObject per top-level type
      - attributes, constructors, methods, enum constants
      - InheritanceRelation (extends) and ImplementsRelation (implements)
        towards UnresolvedObject placeholders

    Includes:
      - Multi-file (project-level) support, resolution runs after all files
      - Generics & collections mapped onto List/Set/Optional types
      - Modifier flags (static/abstract), interface methods default public
      - Javadoc → DocComment (@assoc, @noassoc, @stereotype, ...)
      - Skips invalid Java files during project parsing (collect errors)
    """

    language = "java"

    # ---------------- Helpers ----------------

    LIST_TYPES = {"List", "ArrayList", "LinkedList", "Collection", "Iterable"}
    SET_TYPES = {"Set", "HashSet", "TreeSet", "LinkedHashSet", "SortedSet"}
    OPTIONAL_TYPES = {"Optional"}

    def __init__(self, strict_docs: bool = False) -> None:
        self.strict_docs = strict_docs

    def _visibility_from_mods(self, mods: set[str] | None) -> Visibility:
        mods = mods or set()
        for modifier in ("public", "private", "protected"):
            if modifier in mods:
                return VISIBILITY_BY_MODIFIER[modifier]
        return VISIBILITY_BY_MODIFIER["package"]

    def _flags_from_mods(self, mods: set[str] | None) -> Tuple[bool, bool]:
        """
        Returns (is_static, is_abstract)
        """
        mods = mods or set()
        return ("static" in mods, "abstract" in mods)

    def _reference_parts(self, t) -> Tuple[str, List[Any]]:
        # java.util.List<Item> arrives as java -> util -> List(arguments)
        while getattr(t, "sub_type", None) is not None:
            t = t.sub_type
        return t.name, list(getattr(t, "arguments", None) or [])

    def _type_text(self, t) -> str:
        if t is None:
            return "void"
        if isinstance(t, javalang.tree.TypeArgument):
            if t.type is None:
                return "?"
            inner = self._type_text(t.type)
            if t.pattern_type in ("extends", "super"):
                return f"? {t.pattern_type} {inner}"
            return inner

        name, args = self._reference_parts(t)
        text = name
        if args:
            text += "<" + ", ".join(self._type_text(a) for a in args) + ">"
        return text + "[]" * len(getattr(t, "dimensions", None) or [])

    def _base_type(self, t) -> Type:
        if isinstance(t, javalang.tree.BasicType):
            return PrimitiveType(t.name)

        name, args = self._reference_parts(t)
        if not args:
            if name == "String":
                return PrimitiveType("string")
            return NamedType(name)

        plain = len(args) == 1 and args[0].type is not None and args[0].pattern_type is None
        if plain and name in self.LIST_TYPES:
            return ListType(self._to_type(args[0].type))
        if plain and name in self.SET_TYPES:
            return SetType(self._to_type(args[0].type))
        if plain and name in self.OPTIONAL_TYPES:
            return OptionalType(self._to_type(args[0].type))

        text = name + "<" + ", ".join(self._type_text(a) for a in args) + ">"
        return SourceType(text)

    def _to_type(self, t) -> Type:
        """
        From a javalang Type node derive a model Type:
          int -> PrimitiveType, List<Item> -> ListType(NamedType),
          Item[] -> ListType, Map<K, V> -> SourceType("Map<K, V>")
        """
        if t is None:
            return VoidType()
        result = self._base_type(t)
        for _ in getattr(t, "dimensions", None) or []:
            result = ListType(result)
        return result

    def _apply_doc(self, target: Any, node) -> None:
        doc = parse_doc_comment(getattr(node, "documentation", None), strict=self.strict_docs)
        target.doc = doc
        for tag in doc.get_all("@stereotype"):
            if tag.value:
                target.stereotypes.append(tag.value)

    def _arguments(self, parameters) -> List[Argument]:
        args: List[Argument] = []
        for p in parameters or []:
            arg_type = self._to_type(p.type)
            if getattr(p, "varargs", False):
                arg_type = ListType(arg_type)
            args.append(Argument(p.name, arg_type))
        return args

    # ---------------- Parsing entry points ----------------

    def parse_to_ast(self, code: str):
        try:
            return javalang.parse.parse(code)
        except javalang.parser.JavaSyntaxError as e:
            raise ValueError(f"Java syntax error: {e}")
        except Exception as e:
            raise ValueError(f"Failed to parse Java code: {e}")

    def build_diagram_for_code(
        self,
        code: str,
        filename: str | None = None,
        config: Optional[PipelineConfig] = None,
    ) -> Diagram:
        """
        Single-compilation-unit helper (for /parse).
        """
        diagram = Diagram()
        self.populate(diagram, code, source_file=filename)
        return run_pipeline(diagram, config)

    def build_diagram_for_files(
        self,
        files: List[str],
        config: Optional[PipelineConfig] = None,
    ) -> Diagram:
        """
        Multi-file/project-level builder.
        Skips invalid Java files but continues parsing the rest; passes
        run once every file is registered.
        """
        diagram = Diagram()

        for path in files:
            try:
                with open(path, "r", encoding="utf-8") as f:
                    code = f.read()
                self.populate(diagram, code, source_file=path)
            except ValueError as e:
                logger.warning("Skipping %s: %s", path, e)
                diagram.parse_errors.append({"file": path, "error": str(e)})
                continue

        return run_pipeline(diagram, config)

    # ---------------- Core processing ----------------

    def populate(self, diagram: Diagram, code: str, source_file: str | None = None) -> None:
        tree = self.parse_to_ast(code)
        package_name = getattr(getattr(tree, "package", None), "name", None)
        package = package_name.split(".") if package_name else []

        for t in tree.types:
            if isinstance(t, javalang.tree.EnumDeclaration):
                obj = self._enum(t)
            elif isinstance(t, javalang.tree.InterfaceDeclaration):
                obj = self._interface(t)
            elif isinstance(t, javalang.tree.ClassDeclaration):
                obj = self._class(t)
            else:
                continue

            obj.package = list(package)
            self._apply_doc(obj, t)
            obj.generics = [NamedType(p.name) for p in getattr(t, "type_parameters", None) or []]
            diagram.add_object(obj)
            self._add_type_relations(diagram, obj, t)

        logger.debug("parsed %s: %d types", source_file or "<code>", len(tree.types))

    def _add_type_relations(self, diagram: Diagram, obj: DiagramObject, t) -> None:
        extends = getattr(t, "extends", None)
        if extends:
            bases = extends if isinstance(extends, list) else [extends]
            for base in bases:
                name, _ = self._reference_parts(base)
                diagram.add_relation(InheritanceRelation(obj, UnresolvedObject(name)))

        for iface in getattr(t, "implements", None) or []:
            name, _ = self._reference_parts(iface)
            diagram.add_relation(ImplementsRelation(obj, UnresolvedObject(name)))

    def _class(self, t) -> ClassObject:
        obj = ClassObject(t.name)
        _, obj.is_abstract = self._flags_from_mods(t.modifiers)
        self._class_body(t.body or [], obj)
        return obj

    def _enum(self, t) -> EnumObject:
        obj = EnumObject(t.name)
        body = t.body
        for c in getattr(body, "constants", None) or []:
            constant = Constant(c.name)
            self._apply_doc(constant, c)
            obj.add_constant(constant)
        self._class_body(getattr(body, "declarations", None) or [], obj)
        return obj

    def _interface(self, t) -> InterfaceObject:
        obj = InterfaceObject(t.name)
        for decl in t.body or []:
            if not isinstance(decl, javalang.tree.MethodDeclaration):
                continue
            method = self._method(decl)
            if method.visibility == "~":
                method.visibility = "+"
            mods = decl.modifiers or set()
            if "default" not in mods and "static" not in mods:
                method.is_abstract = True
            obj.add_method(method)
        return obj

    def _class_body(self, body, obj: ClassObject) -> None:
        for decl in body:
            if isinstance(decl, javalang.tree.FieldDeclaration):
                for attribute in self._attributes(decl):
                    obj.add_attribute(attribute)
            elif isinstance(decl, javalang.tree.MethodDeclaration):
                obj.add_method(self._method(decl))
            elif isinstance(decl, javalang.tree.ConstructorDeclaration):
                ctor = Constructor(
                    self._visibility_from_mods(decl.modifiers),
                    decl.name,
                    self._arguments(decl.parameters),
                )
                self._apply_doc(ctor, decl)
                obj.add_constructor(ctor)

    def _attributes(self, field) -> List[Attribute]:
        visibility = self._visibility_from_mods(field.modifiers)
        is_static, _ = self._flags_from_mods(field.modifiers)
        attributes: List[Attribute] = []
        for decl in field.declarators:
            attr = Attribute(visibility, decl.name, self._to_type(field.type))
            attr.is_static = is_static
            self._apply_doc(attr, field)
            attributes.append(attr)
        return attributes

    def _method(self, decl) -> Method:
        method = Method(
            self._visibility_from_mods(decl.modifiers),
            decl.name,
            self._arguments(decl.parameters),
            self._to_type(decl.return_type),
        )
        method.is_static, method.is_abstract = self._flags_from_mods(decl.modifiers)
        self._apply_doc(method, decl)
        return method
