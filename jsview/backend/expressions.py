"""Expression rendering."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from decimal import Decimal

import structlog

from ..errors import InvalidArgument, UnsupportedLiteralType, UnsupportedNodeKind
from ..formatter import Formatter
from ..model import (
    AddressDereferenceExpression,
    AddressOfExpression,
    AddressOutExpression,
    AddressReferenceExpression,
    AnonymousMethodExpression,
    ArgumentListExpression,
    ArgumentReferenceExpression,
    ArrayCreateExpression,
    ArrayIndexerExpression,
    AssignExpression,
    BaseReferenceExpression,
    BinaryExpression,
    BlockExpression,
    BlockStatement,
    CanCastExpression,
    CastExpression,
    ConditionExpression,
    DelegateCreateExpression,
    DelegateInvokeExpression,
    EventReferenceExpression,
    Expr,
    FieldOfExpression,
    FieldReference,
    FieldReferenceExpression,
    FromClause,
    GenericDefaultExpression,
    GroupOperation,
    JoinClause,
    LambdaExpression,
    LetClause,
    LiteralExpression,
    MemberInitializerExpression,
    MethodInvokeExpression,
    MethodOfExpression,
    MethodReference,
    MethodReferenceExpression,
    NullCoalescingExpression,
    ObjectCreateExpression,
    OrderClause,
    PropertyIndexerExpression,
    PropertyReference,
    PropertyReferenceExpression,
    QueryBody,
    QueryExpression,
    SelectOperation,
    SizeOfExpression,
    SnippetExpression,
    StackAllocateExpression,
    ThisReferenceExpression,
    TryCastExpression,
    TypedReferenceCreateExpression,
    TypeOfExpression,
    TypeOfTypedReferenceExpression,
    TypeReference,
    TypeReferenceExpression,
    UnaryExpression,
    ValueOfTypedReferenceExpression,
    VariableDeclaration,
    VariableDeclarationExpression,
    VariableReferenceExpression,
    WhereClause,
)
from ..numbers import (
    INTEGER_WIDTHS,
    format_decimal,
    format_double,
    format_integer,
    format_single,
    quote_string,
)
from ..options import NumberFormat, RenderOptions
from .session import Session
from .types import (
    TypeWriter,
    builtin_type_name,
    parameter_description,
    resolution_scope,
    variable_description,
)

log = structlog.get_logger(__name__)

BINARY_OPERATORS: dict[str, str] = {
    "add": "+",
    "subtract": "-",
    "multiply": "*",
    "divide": "/",
    "modulus": "%",
    "shift_left": "<<",
    "shift_right": ">>",
    "identity_equality": "===",
    "identity_inequality": "!==",
    "value_equality": "===",
    "value_inequality": "!==",
    "bitwise_or": "|",
    "bitwise_and": "&",
    "bitwise_exclusive_or": "^",
    "boolean_or": "||",
    "boolean_and": "&&",
    "less_than": "<",
    "less_than_or_equal": "<=",
    "greater_than": ">",
    "greater_than_or_equal": ">=",
}

PREFIX_OPERATORS: dict[str, str] = {
    "negate": "-",
    "boolean_not": "!",
    "bitwise_not": "~",
    "pre_increment": "++",
    "pre_decrement": "--",
}

POSTFIX_OPERATORS: dict[str, str] = {
    "post_increment": "++",
    "post_decrement": "--",
}

# Block expressions break the line every this many items.
BLOCK_WRAP = 16


def literal_text(expr: LiteralExpression, mode: NumberFormat = "auto") -> str:
    """Source text of a literal at its declared kind."""
    value = expr.value
    kind = expr.literal_kind
    match kind:
        case "null":
            return "null"
        case "boolean" if isinstance(value, bool):
            return "true" if value else "false"
        case "string" if isinstance(value, str):
            return quote_string(value)
        case "char" if isinstance(value, str) and len(value) == 1:
            return quote_string(value)
        case "char" if isinstance(value, int) and not isinstance(value, bool):
            return quote_string(chr(value))
        case "single" if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format_single(float(value))
        case "double" if isinstance(value, (int, float)) and not isinstance(value, bool):
            return format_double(float(value))
        case "decimal" if isinstance(value, (Decimal, int)) and not isinstance(value, bool):
            return format_decimal(Decimal(value))
        case _ if kind in INTEGER_WIDTHS and isinstance(value, int):
            return format_integer(value, mode, kind)
    raise UnsupportedLiteralType(value, kind)


class ExpressionWriter(TypeWriter):
    """Writes expression trees. Holds the session for nested bodies."""

    def __init__(self, formatter: Formatter, options: RenderOptions | None = None) -> None:
        super().__init__(formatter, options)
        self._session: Session | None = None

    @contextmanager
    def _render_session(self) -> Iterator[Session]:
        """Open a session for a top-level call, or join the active one."""
        if self._session is not None:
            yield self._session
            return
        self._session = Session()
        try:
            yield self._session
        finally:
            self._session = None

    def _indent(self) -> None:
        self._session.depth += 1
        self.formatter.push_indent()

    def _outdent(self) -> None:
        self._session.depth -= 1
        self.formatter.pop_indent()

    def write_expression(self, expr: Expr) -> None:
        with self._render_session():
            self._expr(expr)

    def _function_body(self, body: BlockStatement | None) -> None:
        """Write a nested function body: hoisted variables then statements."""
        raise NotImplementedError

    # --------------------------------------------------------
    # Dispatch
    # --------------------------------------------------------

    def _expr(self, expr: Expr | None) -> None:
        match expr:
            case None:
                raise InvalidArgument("expression")
            case LiteralExpression():
                self._text(literal_text(expr, self.options.number_format))
            case AssignExpression(target=target, expression=value):
                self._assign(target, value)
            case TypeOfExpression(type=typ):
                self._text("typeof(")
                self._type(typ)
                self._text(")")
            case FieldOfExpression(field=fld, type=typ):
                self._text("fieldof(")
                self._member_of(fld.declaring_type)
                self._field_name(fld)
                if typ is not None:
                    self._text(", ")
                    self._type(typ)
                self._text(")")
            case MethodOfExpression(method=method, type=typ):
                self._text("methodof(")
                self._member_of(method.declaring_type)
                self._method_name(method)
                if typ is not None:
                    self._text(", ")
                    self._type(typ)
                self._text(")")
            case MemberInitializerExpression(member=member, value=value):
                if isinstance(member, PropertyReference):
                    self._reference(member.name, self.property_description(member), member)
                else:
                    self._field_name(member)
                self._text("=")
                self._expr(value)
            case TypeReferenceExpression(type=typ):
                self._type_reference(typ)
            case FieldReferenceExpression(field=fld, target=target):
                self._member_target(target)
                self._field_name(fld)
            case EventReferenceExpression(event=event, target=target):
                self._member_target(target)
                self._reference(event.name, self.event_description(event), event)
            case MethodReferenceExpression(method=method, target=target):
                self._member_target(target)
                self._method_name(method)
            case PropertyReferenceExpression(property=prop, target=target):
                self._accessor_call(prop, target, prop.get_method, [])
            case PropertyIndexerExpression(target=target, indices=indices):
                if not isinstance(target, PropertyReferenceExpression):
                    raise InvalidArgument("property indexer target", "must be a property reference")
                self._accessor_call(target.property, target.target, target.property.get_method, indices)
            case ArgumentListExpression():
                self._text("arguments")
            case StackAllocateExpression(type=typ, expression=size):
                self._text("stackalloc ")
                self._type(typ)
                self._text("[")
                self._expr(size)
                self._text("]")
            case ArrayCreateExpression(dimensions=dimensions, initializer=initializer):
                if initializer is not None:
                    self._block(initializer)
                elif len(dimensions) == 1 and _is_zero(dimensions[0]):
                    self._text("[]")
                else:
                    self._text("Array(")
                    self._arguments(dimensions)
                    self._text(")")
            case BlockExpression():
                self._block(expr)
            case BaseReferenceExpression() | ThisReferenceExpression():
                self._text("this")
            case UnaryExpression(operator=op, expression=operand):
                if op in PREFIX_OPERATORS:
                    self._text(PREFIX_OPERATORS[op])
                    self._expr(operand)
                elif op in POSTFIX_OPERATORS:
                    self._expr(operand)
                    self._text(POSTFIX_OPERATORS[op])
                else:
                    raise UnsupportedNodeKind("unary operator", op)
            case BinaryExpression(left=left, operator=op, right=right):
                symbol = BINARY_OPERATORS.get(op)
                if symbol is None:
                    raise UnsupportedNodeKind("binary operator", op)
                self._text("(")
                self._expr(left)
                self._text(f" {symbol} ")
                self._expr(right)
                self._text(")")
            case TryCastExpression(expression=operand, target_type=typ):
                self._text("(")
                self._expr(operand)
                self._text(" as ")
                self._type(typ)
                self._text(")")
            case CanCastExpression(expression=operand, target_type=typ):
                self._text("(")
                self._expr(operand)
                self._text(" is ")
                self._type(typ)
                self._text(")")
            case CastExpression(expression=operand):
                self._expr(operand)
            case ConditionExpression(condition=cond, then=then, else_=else_):
                self._text("(")
                self._expr(cond)
                self._text(" ? ")
                self._expr(then)
                self._text(" : ")
                self._expr(else_)
                self._text(")")
            case NullCoalescingExpression(condition=cond, expression=fallback):
                self._text("((")
                self._expr(cond)
                self._text(" !== null) ? ")
                self._expr(cond)
                self._text(" : ")
                self._expr(fallback)
                self._text(")")
            case DelegateCreateExpression(delegate_type=typ, method=method, target=target):
                self._type(typ)
                self._text(".Create(")
                if target is not None:
                    self._expr(target)
                    self._text(", ")
                self._method_name(method)
                self._text(")")
            case AnonymousMethodExpression(parameters=parameters, body=body):
                self._text("function(")
                self._parameter_list(parameters)
                self._text(") {")
                self._line_break()
                self._indent()
                self._function_body(body)
                self._outdent()
                self._text("}")
            case LambdaExpression(parameters=parameters, body=body):
                self._text("function(")
                for i, variable in enumerate(parameters):
                    if i:
                        self._text(", ")
                    self._declaration(variable.name, variable)
                self._text(") { return ")
                self._expr(body)
                self._text("; }")
            case ArgumentReferenceExpression(parameter=parameter):
                name = parameter.name or "A"
                self._reference(name, parameter_description(parameter), parameter)
            case VariableDeclarationExpression(variable=variable) | VariableReferenceExpression(
                variable=variable
            ):
                self._variable_reference(variable)
            case ArrayIndexerExpression(target=target, indices=indices):
                self._expr(target)
                for index in indices:
                    self._text("[")
                    self._expr(index)
                    self._text("]")
            case MethodInvokeExpression(method=method, arguments=arguments):
                if isinstance(method, MethodReferenceExpression):
                    self._expr(method)
                else:
                    self._text("(")
                    self._expr(method)
                    self._text(")")
                self._text("(")
                self._arguments(arguments)
                self._text(")")
            case DelegateInvokeExpression(target=target, arguments=arguments):
                self._expr(target)
                self._text("(")
                self._arguments(arguments)
                self._text(")")
            case ObjectCreateExpression(
                type=typ, constructor=constructor, arguments=arguments, initializer=initializer
            ):
                self._text("(new ")
                if constructor is not None and isinstance(typ, TypeReference):
                    self._constructed_type(typ, constructor)
                else:
                    self._type(typ)
                self._text("()).ctor(")
                self._arguments(arguments)
                self._text(")")
                if initializer is not None and initializer.expressions:
                    self._text(" ")
                    self._block(initializer)
            case AddressOfExpression(expression=operand) | AddressReferenceExpression(
                expression=operand
            ) | AddressOutExpression(expression=operand):
                self._text("[")
                self._expr(operand)
                self._text("]")
            case AddressDereferenceExpression(expression=operand):
                if isinstance(operand, AddressOfExpression):
                    self._expr(operand.expression)
                else:
                    self._expr(operand)
            case SizeOfExpression(type=typ):
                self._text("sizeof(")
                self._type(typ)
                self._text(")")
            case TypeOfTypedReferenceExpression(expression=operand):
                self._text("__reftype(")
                self._expr(operand)
                self._text(")")
            case ValueOfTypedReferenceExpression(expression=operand, type=typ):
                self._text("__refvalue(")
                self._expr(operand)
                if typ is not None:
                    self._text(", ")
                    self._type(typ)
                self._text(")")
            case TypedReferenceCreateExpression(expression=operand):
                self._text("__makeref(")
                self._expr(operand)
                self._text(")")
            case GenericDefaultExpression(generic_argument=typ):
                self._text("default(")
                self._type(typ)
                self._text(")")
            case QueryExpression(from_clause=from_clause, body=body):
                self._query(from_clause, body)
            case SnippetExpression(text=text):
                self._text(text)
            case _:
                log.debug("unsupported_node", category="expression", kind=type(expr).__name__)
                raise UnsupportedNodeKind("expression", expr)

    # --------------------------------------------------------
    # Helpers
    # --------------------------------------------------------

    def _arguments(self, arguments: list[Expr]) -> None:
        for i, argument in enumerate(arguments):
            if i:
                self._text(", ")
            self._expr(argument)

    def _assign(self, target: Expr, value: Expr) -> None:
        if (
            isinstance(value, BinaryExpression)
            and value.operator in ("add", "subtract")
            and value.left == target
        ):
            self._text("inc(" if value.operator == "add" else "dec(")
            self._expr(target)
            self._text(", ")
            self._expr(value.right)
            self._text(")")
            return
        match target:
            case PropertyReferenceExpression(property=prop, target=owner):
                self._accessor_call(prop, owner, prop.set_method, [value])
            case PropertyIndexerExpression(
                target=PropertyReferenceExpression(property=prop, target=owner), indices=indices
            ):
                self._accessor_call(prop, owner, prop.set_method, [*indices, value])
            case _:
                self._expr(target)
                self._text(" = ")
                self._expr(value)

    def _accessor_call(
        self,
        prop: PropertyReference,
        owner: Expr | None,
        accessor: MethodReference | None,
        arguments: list[Expr],
    ) -> None:
        if accessor is None:
            raise InvalidArgument(f"property {prop.name}", "has no accessor for this access")
        self._member_target(owner)
        self._reference(accessor.name, self.method_description(accessor), accessor)
        self._text("(")
        self._arguments(arguments)
        self._text(")")

    def _member_target(self, target: Expr | None) -> None:
        if target is None:
            return
        if isinstance(target, BinaryExpression):
            self._text("(")
            self._expr(target)
            self._text(")")
        elif isinstance(
            target,
            (UnaryExpression, AssignExpression, LambdaExpression, AnonymousMethodExpression),
        ):
            self._text("(")
            self._expr(target)
            self._text(")")
        else:
            self._expr(target)
        self._text(".")

    def _member_of(self, declaring_type: TypeReference | None) -> None:
        if declaring_type is not None:
            self._type_reference(declaring_type)
            self._text(".")

    def _field_name(self, fld: FieldReference) -> None:
        self._reference(fld.name, self.field_description(fld), fld)

    def _method_name(self, method: MethodReference) -> None:
        definition = method.generic_method if method.generic_method is not None else method
        self._reference(method.name, self.method_description(definition), definition)

    def _variable_reference(self, variable: VariableDeclaration) -> None:
        self._reference(variable.name, variable_description(variable), variable)

    def _constructed_type(self, typ: TypeReference, constructor: MethodReference) -> None:
        definition = typ.generic_type if typ.generic_type is not None else typ
        tooltip = self.method_description(constructor)
        builtin = builtin_type_name(definition)
        if builtin is not None:
            self.formatter.write_reference(builtin, tooltip, constructor)
        else:
            self._reference(resolution_scope(definition), tooltip, constructor)

    def _block(self, block: BlockExpression) -> None:
        items = block.expressions
        wrap = len(items) > BLOCK_WRAP
        self._text("[")
        if wrap:
            self._indent()
            self._line_break()
        for i, item in enumerate(items):
            if i and i % BLOCK_WRAP == 0:
                self._text(",")
                self._line_break()
            elif i:
                self._text(", ")
            self._expr(item)
        if wrap:
            self._outdent()
            self._line_break()
        self._text("]")

    def _query(self, from_clause: FromClause, body: QueryBody) -> None:
        self._text("(")
        self._from_clause(from_clause)
        self._indent()
        self._query_body(body)
        self._outdent()
        self._text(")")

    def _from_clause(self, clause: FromClause) -> None:
        self._text("from ")
        self._declaration(clause.variable.name, clause.variable)
        self._text(" in ")
        self._expr(clause.expression)

    def _query_body(self, body: QueryBody) -> None:
        for clause in body.clauses:
            self._line_break()
            match clause:
                case FromClause():
                    self._from_clause(clause)
                case WhereClause(expression=cond):
                    self._text("where ")
                    self._expr(cond)
                case LetClause(variable=variable, expression=value):
                    self._text("let ")
                    self._declaration(variable.name, variable)
                    self._text(" = ")
                    self._expr(value)
                case JoinClause(variable=variable, in_expression=source, on=on, equality=equality, into=into):
                    self._text("join ")
                    self._declaration(variable.name, variable)
                    self._text(" in ")
                    self._expr(source)
                    self._text(" on ")
                    self._expr(on)
                    self._text(" equals ")
                    self._expr(equality)
                    if into is not None:
                        self._text(" into ")
                        self._declaration(into.name, into)
                case OrderClause(expressions=orderings):
                    self._text("orderby ")
                    for i, ordering in enumerate(orderings):
                        if i:
                            self._text(", ")
                        self._expr(ordering.expression)
                        if ordering.direction == "descending":
                            self._text(" descending")
                case _:
                    raise UnsupportedNodeKind("query clause", clause)
        self._line_break()
        match body.operation:
            case SelectOperation(expression=selected):
                self._text("select ")
                self._expr(selected)
            case GroupOperation(item=item, key=key):
                self._text("group ")
                self._expr(item)
                self._text(" by ")
                self._expr(key)
            case _:
                raise UnsupportedNodeKind("query operation", body.operation)
        if body.continuation is not None:
            self._text(" into ")
            variable = body.continuation.variable
            self._declaration(variable.name, variable)
            self._query_body(body.continuation.body)


def _is_zero(expr: Expr) -> bool:
    return (
        isinstance(expr, LiteralExpression)
        and isinstance(expr.value, int)
        and not isinstance(expr.value, bool)
        and expr.value == 0
    )
