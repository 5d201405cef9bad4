"""jsview - render resolved code models as JavaScript source text."""

from .backend.declarations import LanguageWriter
from .errors import InvalidArgument, RenderError, UnsupportedLiteralType, UnsupportedNodeKind
from .formatter import Formatter, TextFormatter
from .language import JavaScriptLanguage, render_text
from .options import RenderOptions

__all__ = [
    "Formatter",
    "InvalidArgument",
    "JavaScriptLanguage",
    "LanguageWriter",
    "RenderError",
    "RenderOptions",
    "TextFormatter",
    "UnsupportedLiteralType",
    "UnsupportedNodeKind",
    "render_text",
]
