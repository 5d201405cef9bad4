"""Type rendering and hover descriptions.

TypeWriter is the root of the writer chain:

    TypeWriter -> ExpressionWriter -> StatementWriter -> LanguageWriter

Each layer adds one concern and shares the formatter, options and session.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from ..errors import InvalidArgument, UnsupportedNodeKind
from ..formatter import Formatter, TextFormatter
from ..model import (
    CORE_NAMESPACE,
    ArrayDimension,
    ArrayType,
    EventReference,
    FieldReference,
    FunctionPointer,
    GenericArgument,
    GenericParameter,
    MethodReference,
    OptionalModifier,
    ParameterDeclaration,
    PointerType,
    PropertyReference,
    ReferenceType,
    RequiredModifier,
    Type,
    TypeReference,
    VariableDeclaration,
    is_constructor,
)
from ..names import declared_method_name, escape_declaration, escape_reference
from ..options import RenderOptions

log = structlog.get_logger(__name__)

SPECIAL_TYPE_NAMES: dict[str, str] = {
    "Void": "void",
    "Object": "TObject",
    "String": "string",
    "SByte": "Shortint",
    "Byte": "Byte",
    "Int16": "Smallint",
    "UInt16": "Word",
    "Int32": "Integer",
    "UInt32": "Cardinal",
    "Int64": "Int64",
    "UInt64": "UInt64",
    "Char": "Char",
    "Boolean": "boolean",
    "Single": "Single",
    "Double": "Double",
    "Decimal": "Decimal",
}
"""Built-in names for core-namespace types, keyed by simple name."""

VOID = "void"
UNNAMED_PARAMETER = "A"
INDEXER_NAME = "Item"


def builtin_type_name(ref: TypeReference) -> str | None:
    if ref.namespace != CORE_NAMESPACE or ref.owner is not None:
        return None
    return SPECIAL_TYPE_NAMES.get(ref.name)


def resolution_scope(ref: TypeReference) -> str:
    """Dotted name of a type through its enclosing types and namespace."""
    if ref.owner is not None:
        return resolution_scope(ref.owner) + "." + ref.name
    if ref.namespace:
        return ref.namespace + "." + ref.name
    return ref.name


def variable_description(variable: VariableDeclaration) -> str:
    return f"var {escape_declaration(variable.name)}; // Local Variable"


def parameter_description(parameter: ParameterDeclaration) -> str:
    return f"{escape_declaration(parameter.name or UNNAMED_PARAMETER)}; // Parameter"


def _dimension_text(dimension: ArrayDimension) -> str:
    lower, upper = dimension.lower_bound, dimension.upper_bound
    if lower == 0 or upper == -1:
        return ""
    lower_text = str(lower) if lower != -1 else "."
    return f"{lower_text}..{upper}"


class TypeWriter:
    """Writes type nodes and produces hover text for members."""

    def __init__(self, formatter: Formatter, options: RenderOptions | None = None) -> None:
        self.formatter = formatter
        self.options = options if options is not None else RenderOptions()

    # --------------------------------------------------------
    # Token helpers
    # --------------------------------------------------------

    def _text(self, text: str) -> None:
        self.formatter.write_text(text)

    def _declaration(self, name: str, target: object | None = None) -> None:
        self.formatter.write_declaration(escape_declaration(name), target)

    def _reference(self, name: str, tooltip: str, target: object | None) -> None:
        self.formatter.write_reference(escape_reference(name), tooltip, target)

    def _line_break(self) -> None:
        self.formatter.write_line_break()

    # --------------------------------------------------------
    # Types
    # --------------------------------------------------------

    def write_type(self, typ: Type) -> None:
        self._type(typ)

    def _type(self, typ: Type | None) -> None:
        match typ:
            case None:
                raise InvalidArgument("type")
            case TypeReference():
                self._type_reference(typ)
            case ArrayType(element_type=element, dimensions=dimensions):
                self._type(element)
                self._text("[" + ",".join(_dimension_text(d) for d in dimensions) + "]")
            case PointerType(element_type=element):
                self._type(element)
                self._text("*")
            case ReferenceType(element_type=element):
                self._type(element)
            case OptionalModifier(element_type=element, modifier=modifier):
                self._type(element)
                self._text(" modopt(")
                self._type_reference(modifier)
                self._text(")")
            case RequiredModifier(element_type=element, modifier=modifier):
                self._type(element)
                self._text(" modreq(")
                self._type_reference(modifier)
                self._text(")")
            case FunctionPointer(return_type=return_type, parameter_types=parameter_types):
                self._return_type(return_type)
                self._text(" *(")
                for i, parameter_type in enumerate(parameter_types):
                    if i:
                        self._text(", ")
                    self._type(parameter_type)
                self._text(")")
            case GenericParameter(name=name):
                self._text(name)
            case GenericArgument(target=target):
                if target is None:
                    raise InvalidArgument("generic argument", "is unresolved")
                self._type(target)
            case _:
                log.debug("unsupported_node", category="type", kind=type(typ).__name__)
                raise UnsupportedNodeKind("type", typ)

    def _type_reference(self, ref: TypeReference) -> None:
        # generic instantiations render as their definition
        definition = ref.generic_type if ref.generic_type is not None else ref
        tooltip = resolution_scope(definition)
        builtin = builtin_type_name(definition)
        if builtin is not None:
            self.formatter.write_reference(builtin, tooltip, definition)
        else:
            self._reference(tooltip, tooltip, definition)

    def _return_type(self, typ: Type | None) -> None:
        if typ is None:
            self._text(VOID)
        else:
            self._type(typ)

    def _parameter_list(self, parameters: list[ParameterDeclaration]) -> None:
        for i, parameter in enumerate(parameters):
            if parameter.parameter_type is None and i == len(parameters) - 1:
                break
            if i:
                self._text(", ")
            self._declaration(parameter.name or UNNAMED_PARAMETER, parameter)

    def _declaring_prefix(self, declaring_type: TypeReference | None) -> None:
        if declaring_type is not None:
            self._text(resolution_scope(declaring_type) + ".")

    # --------------------------------------------------------
    # Descriptions
    # --------------------------------------------------------

    def _describe(self, write: Callable[[TypeWriter], None]) -> str:
        scratch = TextFormatter()
        write(TypeWriter(scratch, self.options))
        return str(scratch)

    def field_description(self, field: FieldReference) -> str:
        def write(w: TypeWriter) -> None:
            w._type(field.field_type)
            w._text(" ")
            w._declaring_prefix(field.declaring_type)
            w._declaration(field.name)
            w._text(";")

        return self._describe(write)

    def method_description(self, method: MethodReference) -> str:
        def write(w: TypeWriter) -> None:
            if not is_constructor(method):
                w._return_type(method.return_type)
                w._text(" ")
            w._declaring_prefix(method.declaring_type)
            w._declaration(declared_method_name(method.name))
            w._text("(")
            w._parameter_list(method.parameters)
            if method.varargs:
                w._text(", ..." if method.parameters else "...")
            w._text(");")

        return self._describe(write)

    def property_description(self, prop: PropertyReference) -> str:
        def write(w: TypeWriter) -> None:
            w._type(prop.property_type)
            w._text(" ")
            w._declaring_prefix(prop.declaring_type)
            if prop.name == INDEXER_NAME:
                w._text("this")
            else:
                w._declaration(prop.name)
            if prop.parameters:
                w._text("[")
                w._parameter_list(prop.parameters)
                w._text("]")
            w._text(" {")
            if prop.get_method is not None:
                w._text(" get;")
            if prop.set_method is not None:
                w._text(" set;")
            w._text(" }")

        return self._describe(write)

    def event_description(self, event: EventReference) -> str:
        def write(w: TypeWriter) -> None:
            w._text("event ")
            w._type(event.event_type)
            w._text(" ")
            w._declaring_prefix(event.declaring_type)
            w._declaration(event.name)
            w._text(";")

        return self._describe(write)
