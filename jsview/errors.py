"""Errors raised while rendering a code model."""

from __future__ import annotations


class RenderError(Exception):
    """Base for all rendering failures. Partial output is not rolled back."""


class UnsupportedNodeKind(RenderError):
    """A node, operator or table key outside the closed catalog."""

    def __init__(self, category: str, node: object) -> None:
        kind = node if isinstance(node, str) else type(node).__name__
        super().__init__(f"unsupported {category}: {kind}")
        self.category = category
        self.node = node


class UnsupportedLiteralType(RenderError):
    """A literal value whose runtime type has no textual form."""

    def __init__(self, value: object, kind: str | None = None) -> None:
        detail = f" as {kind}" if kind else ""
        super().__init__(f"unsupported literal {value!r}{detail}")
        self.value = value
        self.kind = kind


class InvalidArgument(RenderError, ValueError):
    """A required node was absent or malformed."""

    def __init__(self, name: str, reason: str = "must not be None") -> None:
        super().__init__(f"{name} {reason}")
        self.name = name
        self.reason = reason
