"""Formatter sink: the only outbound interface of the renderer.

The renderer never builds strings for its callers. It emits a stream of
tokens into a sink, which decides how to display them. A viewer sink binds
declaration and reference tokens to their model entities for navigation and
tooltips. TextFormatter discards the bindings and produces plain text.
"""

from __future__ import annotations

from typing import Protocol


class Formatter(Protocol):
    """Token sink consumed by LanguageWriter.

    | Operation         | Meaning                                                  |
    |-------------------|----------------------------------------------------------|
    | write_text        | punctuation, keywords and literal text                   |
    | write_declaration | a name introduced here, bound to its entity (may be None) |
    | write_reference   | a name used here, with hover text and its entity         |
    | write_line_break  | end of the current line                                  |
    | push_indent       | one level deeper for following lines                     |
    | pop_indent        | one level shallower for following lines                  |
    """

    def write_text(self, text: str) -> None: ...

    def write_declaration(self, name: str, target: object | None = None) -> None: ...

    def write_reference(self, name: str, tooltip: str, target: object | None) -> None: ...

    def write_line_break(self) -> None: ...

    def push_indent(self) -> None: ...

    def pop_indent(self) -> None: ...


class TextFormatter:
    """Plain-text sink. Indentation is applied lazily at the first write of a line."""

    INDENT = "    "

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._indent = 0
        self._new_line = False

    def __str__(self) -> str:
        return "".join(self._parts)

    @property
    def text(self) -> str:
        return str(self)

    def write_text(self, text: str) -> None:
        self._apply_indent()
        self._parts.append(text)

    def write_declaration(self, name: str, target: object | None = None) -> None:
        self.write_text(name)

    def write_reference(self, name: str, tooltip: str, target: object | None) -> None:
        self.write_text(name)

    def write_line_break(self) -> None:
        self._parts.append("\n")
        self._new_line = True

    def push_indent(self) -> None:
        self._indent += 1

    def pop_indent(self) -> None:
        self._indent -= 1

    def _apply_indent(self) -> None:
        if self._new_line:
            # a negative level writes nothing
            self._parts.append(self.INDENT * self._indent)
            self._new_line = False
