"""Language descriptor and one-shot text rendering."""

from __future__ import annotations

from collections.abc import Mapping

from .backend.declarations import LanguageWriter
from .errors import UnsupportedNodeKind
from .formatter import Formatter, TextFormatter
from .model import (
    Assembly,
    AssemblyReference,
    EventDeclaration,
    Expr,
    FieldDeclaration,
    MethodDeclaration,
    Module,
    ModuleReference,
    Namespace,
    PropertyDeclaration,
    Resource,
    Stmt,
    Type,
    TypeDeclaration,
)
from .options import RenderOptions


class JavaScriptLanguage:
    """The JavaScript view offered to a decompiler host."""

    name = "JavaScript"
    file_extension = ".js"
    translate = False

    def writer(
        self,
        formatter: Formatter,
        configuration: RenderOptions | Mapping[str, object] | None = None,
    ) -> LanguageWriter:
        return LanguageWriter(formatter, configuration)


def render_text(
    entity: object, configuration: RenderOptions | Mapping[str, object] | None = None
) -> str:
    """Render any model entity to plain text."""
    formatter = TextFormatter()
    writer = LanguageWriter(formatter, configuration)
    match entity:
        case Assembly():
            writer.write_assembly(entity)
        case AssemblyReference():
            writer.write_assembly_reference(entity)
        case Module():
            writer.write_module(entity)
        case ModuleReference():
            writer.write_module_reference(entity)
        case Resource():
            writer.write_resource(entity)
        case Namespace():
            writer.write_namespace(entity)
        case TypeDeclaration():
            writer.write_type_declaration(entity)
        case FieldDeclaration():
            writer.write_field_declaration(entity)
        case MethodDeclaration():
            writer.write_method_declaration(entity)
        case PropertyDeclaration():
            writer.write_property_declaration(entity)
        case EventDeclaration():
            writer.write_event_declaration(entity)
        case Stmt():
            writer.write_statement(entity)
        case Expr():
            writer.write_expression(entity)
        case Type():
            writer.write_type(entity)
        case _:
            raise UnsupportedNodeKind("entity", entity)
    return str(formatter)
