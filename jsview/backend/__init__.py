"""Writers for the JavaScript view, layered types -> expressions -> statements -> declarations."""

from .declarations import LanguageWriter

__all__ = ["LanguageWriter"]
