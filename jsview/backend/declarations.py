"""Declaration rendering: the public writer for every top-level entity."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

import structlog

from ..errors import InvalidArgument, UnsupportedNodeKind
from ..formatter import Formatter
from ..model import (
    CORE_NAMESPACE,
    Assembly,
    AssemblyReference,
    CustomAttribute,
    EventDeclaration,
    FieldDeclaration,
    LiteralExpression,
    MethodDeclaration,
    MethodReference,
    Module,
    ModuleReference,
    Namespace,
    PropertyDeclaration,
    Resource,
    TypeDeclaration,
    find_method,
    is_delegate,
    is_enumeration,
    is_type,
    is_value_type,
)
from ..names import declared_method_name
from ..options import RenderOptions
from .statements import StatementWriter
from .types import resolution_scope

log = structlog.get_logger(__name__)

MEMBER_VISIBILITY: dict[str, str] = {
    "public": "public",
    "private": "strict private",
    "private_scope": "private {scope}",
    "family": "strict protected",
    "assembly": "private",
    "family_or_assembly": "protected",
    "family_and_assembly": "protected {internal}",
}

ASSEMBLY_KINDS: dict[str, str] = {
    "application": "Windows Application",
    "console": "Console Application",
    "library": "Library",
}

ATTRIBUTE_SUFFIX = "Attribute"
SKIPPED_ATTRIBUTES = frozenset({"DefaultParameterValueAttribute"})


def _is_backing_field(fld: FieldDeclaration, owner: TypeDeclaration) -> bool:
    """The compiler-synthesized value field of an enumeration."""
    return fld.special_name and fld.runtime_special_name and fld.field_type != owner


def _visibility(table: dict[str, str], value: str) -> str:
    keyword = table.get(value)
    if keyword is None:
        raise UnsupportedNodeKind("visibility", value)
    return keyword + " "


class LanguageWriter(StatementWriter):
    """Renders code model entities as JavaScript through a formatter sink.

    Each public write_* call is one top-level render with its own session.
    Calls made while a render is in progress join it.
    """

    def __init__(
        self,
        formatter: Formatter,
        configuration: RenderOptions | Mapping[str, object] | None = None,
    ) -> None:
        if isinstance(configuration, RenderOptions):
            options = configuration
        else:
            options = RenderOptions.from_configuration(configuration or {})
        super().__init__(formatter, options)

    # --------------------------------------------------------
    # Containers
    # --------------------------------------------------------

    def write_assembly(self, assembly: Assembly) -> None:
        with self._render_session():
            log.debug("render_declaration", kind="assembly", name=assembly.name)
            self._text("// JS Assembly ")
            self._declaration(assembly.name, assembly)
            if assembly.version:
                self._text(", Version " + assembly.version)
            self._line_break()
            self._custom_attributes(assembly.attributes, "assembly")
            self._detail("Location", assembly.location)
            if assembly.kind is not None:
                self._detail("Type", ASSEMBLY_KINDS[assembly.kind])

    def write_assembly_reference(self, reference: AssemblyReference) -> None:
        with self._render_session():
            self._text("// Assembly Reference ")
            self._declaration(reference.name, reference)
            self._line_break()
            self._detail("Version", reference.version)

    def write_module(self, module: Module) -> None:
        with self._render_session():
            log.debug("render_declaration", kind="module", name=module.name)
            self._text("// Module ")
            self._declaration(module.name, module)
            self._line_break()
            self._custom_attributes(module.attributes, "module")
            self._detail("Version", module.version)
            self._detail("Location", module.location)
            if module.size is not None:
                self._detail("Size", f"{module.size} bytes")

    def write_module_reference(self, reference: ModuleReference) -> None:
        with self._render_session():
            self._text("// Module Reference ")
            self._declaration(reference.name, reference)
            self._line_break()

    def write_resource(self, resource: Resource) -> None:
        with self._render_session():
            self._text(f"// {resource.visibility} resource ")
            self._declaration(resource.name, resource)
            self._line_break()
            if resource.data is not None:
                self._detail("Size", f"{len(resource.data)} bytes")
            self._detail("Location", resource.location)

    def write_namespace(self, namespace: Namespace) -> None:
        with self._render_session():
            log.debug("render_declaration", kind="namespace", name=namespace.name)
            self._text("// Namespace ")
            self._declaration(namespace.name, namespace)
            self._line_break()
            if not self.options.show_namespace_body:
                return
            for decl in namespace.types:
                self._line_break()
                self.write_type_declaration(decl)
                self._line_break()

    def _detail(self, label: str, value: str | None) -> None:
        if value is not None:
            self._text(f"// {label}: {value}")
            self._line_break()

    # --------------------------------------------------------
    # Types
    # --------------------------------------------------------

    def write_type_declaration(self, decl: TypeDeclaration) -> None:
        with self._render_session():
            log.debug("render_declaration", kind="type", name=decl.name)
            self._custom_attributes(decl.attributes)
            scope = resolution_scope(decl)
            if decl.owner is not None or decl.namespace:
                self._text(scope[: -len(decl.name)])
            self._declaration(decl.name, decl)
            if is_delegate(decl):
                self._delegate_signature(decl)
            elif is_enumeration(decl):
                self._enumeration_elements(decl)
            else:
                self._text(" = function() { };")
                base = decl.base_type
                if (
                    base is not None
                    and not decl.interface
                    and not is_value_type(decl)
                    and not is_type(base, CORE_NAMESPACE, "Object")
                ):
                    self._line_break()
                    self._text(scope + ".prototype = new ")
                    self._type_reference(base)
                    self._text("();")
            if self.options.show_type_declaration_body and not (
                is_delegate(decl) or is_enumeration(decl)
            ):
                self._type_body(decl)

    def _delegate_signature(self, decl: TypeDeclaration) -> None:
        invoke = find_method(decl, "Invoke")
        if invoke is None:
            raise InvalidArgument(f"delegate {decl.name}", "has no Invoke method")
        is_function = invoke.return_type is not None and not is_type(
            invoke.return_type, CORE_NAMESPACE, "Void"
        )
        self._text(" = function " if is_function else " = procedure ")
        self._declaration(invoke.name, invoke)
        self._text("(")
        self._parameter_list(invoke.parameters)
        self._text(")")
        if is_function:
            self._text(": ")
            self._type(invoke.return_type)
        self._text(";")

    def _enumeration_elements(self, decl: TypeDeclaration) -> None:
        self._text("(")
        elements = [f for f in decl.fields if not _is_backing_field(f, decl)]
        for i, element in enumerate(elements):
            if i:
                self._text(", ")
            self._declaration(element.name, element)
            if element.initializer is not None:
                self._text("=")
                self._expr(element.initializer)
        self._text(");")

    def _type_body(self, decl: TypeDeclaration) -> None:
        groups: list[tuple[str, Sequence[object], Callable[..., None]]] = [
            ("Events", decl.events, self.write_event_declaration),
            ("Methods", decl.methods, self.write_method_declaration),
            ("Properties", decl.properties, self.write_property_declaration),
            (
                "Fields",
                [f for f in decl.fields if not _is_backing_field(f, decl)],
                self.write_field_declaration,
            ),
            ("Nested Types", decl.nested_types, self.write_type_declaration),
        ]
        for title, members, write in groups:
            if not members:
                continue
            self._line_break()
            self._line_break()
            self._text("// " + title)
            nested = title == "Nested Types"
            if nested:
                self._indent()
            for member in members:
                self._line_break()
                write(member)
            if nested:
                self._outdent()

    # --------------------------------------------------------
    # Members
    # --------------------------------------------------------

    def write_field_declaration(self, fld: FieldDeclaration) -> None:
        with self._render_session():
            owner = fld.declaring_type
            element = isinstance(owner, TypeDeclaration) and is_enumeration(owner)
            self._custom_attributes(fld.attributes)
            if not element:
                self._text(_visibility(MEMBER_VISIBILITY, fld.visibility))
                if fld.static and fld.literal:
                    self._text("const ")
                else:
                    if fld.static:
                        self._text("class var ")
                    if fld.read_only:
                        self._text("{readonly} ")
            self._declaration(fld.name, fld)
            if not element:
                self._text(": ")
                self._type(fld.field_type)
            data = fld.initializer
            if isinstance(data, LiteralExpression) and isinstance(data.value, (bytes, bytearray)):
                self._text(f"; // data size: {len(data.value)} bytes")
                return
            if data is not None:
                self._text(" = ")
                self._expr(data)
            if not element:
                self._text(";")

    def write_method_declaration(self, method: MethodDeclaration) -> None:
        with self._render_session():
            log.debug("render_declaration", kind="method", name=method.name)
            if method.body is None:
                self._custom_attributes(method.attributes)
                self._custom_attributes(method.return_attributes, "return")
                self._text(self._method_modifiers(method))
                if method.abstract:
                    self._text("abstract ")
                if method.external:
                    self._text("extern ")
            elif method.declaring_type is not None:
                self._text(resolution_scope(method.declaring_type) + ".")
                if not method.static:
                    self._text("prototype.")
            self._declaration(declared_method_name(method.name, method.special_name), method)
            self._text(" = function(")
            self._parameter_list(method.parameters)
            self._text(") {")
            self._line_break()
            self._indent()
            self._function_body(method.body)
            self._outdent()
            self._text("}")

    def write_property_declaration(self, prop: PropertyDeclaration) -> None:
        with self._render_session():
            getter, setter = prop.get_method, prop.set_method
            self._custom_attributes(prop.attributes)
            getter_modifiers = self._method_modifiers(getter)
            setter_modifiers = self._method_modifiers(setter)
            shared = getter_modifiers if getter is not None else setter_modifiers
            self._text(shared)
            self._text("property ")
            self._declaration(prop.name, prop)
            if prop.parameters:
                self._text("(")
                self._parameter_list(prop.parameters)
                self._text(")")
            self._text(": ")
            self._type(prop.property_type)
            for keyword, accessor, modifiers in (
                ("read", getter, getter_modifiers),
                ("write", setter, setter_modifiers),
            ):
                if accessor is None:
                    continue
                self._text(f" {keyword} ")
                if modifiers != shared:
                    self._text("{" + modifiers.strip() + "} ")
                self._reference(accessor.name, self.method_description(accessor), accessor)
            if prop.initializer is not None:
                self._text(" /* = ")
                self._expr(prop.initializer)
                self._text(" */")
            self._text(";")

    def write_event_declaration(self, event: EventDeclaration) -> None:
        with self._render_session():
            self._custom_attributes(event.attributes)
            owner = event.declaring_type
            in_interface = isinstance(owner, TypeDeclaration) and owner.interface
            add = event.add_method
            if isinstance(add, MethodDeclaration):
                if not in_interface:
                    self._text(_visibility(MEMBER_VISIBILITY, add.visibility))
                if add.static:
                    self._text("static ")
            self._text("event ")
            self._type(event.event_type)
            self._text(" ")
            self._declaration(event.name, event)
            self._text(";")

    def _method_modifiers(self, method: MethodReference | None) -> str:
        if not isinstance(method, MethodDeclaration):
            return ""
        text = _visibility(MEMBER_VISIBILITY, method.visibility)
        if method.static:
            text += "class "
        return text

    # --------------------------------------------------------
    # Custom attributes
    # --------------------------------------------------------

    def _custom_attributes(self, attributes: list[CustomAttribute], target: str | None = None) -> None:
        """Write `[A, B(x)]` on its own line, or one `[target: A]` line each for a target.

        Nothing is written when attributes are hidden or all of them are skipped.
        """
        if not self.options.show_custom_attributes:
            return
        shown = [a for a in attributes if self._attribute_name(a) not in SKIPPED_ATTRIBUTES]
        if not shown:
            return
        if target is not None and target != "return":
            self._line_break()
            for attribute in shown:
                self._text(f"[{target}: ")
                self._custom_attribute(attribute)
                self._text("]")
                self._line_break()
            return
        self._text("[")
        if target is not None:
            self._text(f"{target}: ")
        for i, attribute in enumerate(shown):
            if i:
                self._text(", ")
            self._custom_attribute(attribute)
        self._text("]")
        self._line_break()

    def _custom_attribute(self, attribute: CustomAttribute) -> None:
        name = self._attribute_name(attribute)
        if name.endswith(ATTRIBUTE_SUFFIX) and len(name) > len(ATTRIBUTE_SUFFIX):
            name = name[: -len(ATTRIBUTE_SUFFIX)]
        constructor = attribute.constructor
        self._reference(name, self.method_description(constructor), constructor)
        if attribute.arguments:
            self._text("(")
            self._arguments(attribute.arguments)
            self._text(")")

    def _attribute_name(self, attribute: CustomAttribute) -> str:
        declaring = attribute.constructor.declaring_type
        if declaring is None:
            raise InvalidArgument("custom attribute constructor", "has no declaring type")
        return declaring.name
