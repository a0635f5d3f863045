"""
Exception hierarchy for diagram building.

Structural conflicts abort the build. Annotation and doc-comment problems
are only raised in strict mode; lenient callers get a Diagnostic instead.
"""

from typing import Any, Dict, Optional


class DiagramError(Exception):
    """Base exception for all diagram errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class DuplicateObjectError(DiagramError):
    """An object with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(
            f"Duplicate object `{name}`: multiple objects with the same name",
            details={"name": name},
        )
        self.name = name


class ObjectKindConflictError(DiagramError):
    """Two same-named objects of different kinds cannot be fused."""

    def __init__(self, name: str, kind_a: str, kind_b: str):
        super().__init__(
            f"Cannot fuse object `{name}`: {kind_a} and {kind_b}",
            details={"name": name, "kinds": [kind_a, kind_b]},
        )
        self.name = name


class AnnotationError(DiagramError):
    """Malformed @assoc value."""

    def __init__(self, tag: str, value: str, reason: str):
        super().__init__(
            f"Malformed {tag} annotation `{value}`: {reason}",
            details={"tag": tag, "value": value, "reason": reason},
        )
        self.reason = reason


class DocCommentError(DiagramError):
    """Doc comment block violating the line-prefix grammar."""

    def __init__(self, reason: str, line: Optional[str] = None):
        super().__init__(
            f"Malformed doc comment: {reason}",
            details={"reason": reason, "line": line},
        )
