"""jsview code model - resolved, language-neutral program trees.

The model is produced by a decompiler front end and consumed read-only by the
renderer. Every name is already resolved: references point at the entity
they denote, literals know their width, and executable bodies are
expression/statement trees.

Architecture:
    Loader -> Decompiler -> [model] -> LanguageWriter -> Formatter sink

Tree nodes use structural equality, except VariableDeclaration, whose
identity is the variable. Back-links from members to their declaring type and
member collections are excluded from equality and repr so the model may be
cyclic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

CORE_NAMESPACE = "System"


# ============================================================
# TYPES
# ============================================================


@dataclass
class Type:
    """Base for all type nodes. Abstract."""


@dataclass
class TypeReference(Type):
    """A named type.

    | Field         | Meaning                                                |
    |---------------|--------------------------------------------------------|
    | namespace     | dotted namespace, empty for nested or global types     |
    | owner         | enclosing type for nested types                        |
    | generic_type  | generic definition this reference instantiates         |
    | assembly      | defining assembly, for tooltips                        |

    Invariants:
    - following owner links terminates
    - generic_arguments are carried but never rendered
    """

    namespace: str
    name: str
    owner: TypeReference | None = field(default=None, compare=False, repr=False)
    generic_type: TypeReference | None = field(default=None, compare=False, repr=False)
    generic_arguments: list[Type] = field(default_factory=list)
    assembly: AssemblyReference | None = field(default=None, compare=False, repr=False)
    value_type: bool = False


@dataclass
class ArrayDimension:
    """Bounds of one array dimension. -1 on either side means unbounded."""

    lower_bound: int = 0
    upper_bound: int = -1


@dataclass
class ArrayType(Type):
    element_type: Type
    dimensions: list[ArrayDimension] = field(default_factory=lambda: [ArrayDimension()])


@dataclass
class PointerType(Type):
    element_type: Type


@dataclass
class ReferenceType(Type):
    """Managed by-reference type. Renders as its element type."""

    element_type: Type


@dataclass
class RequiredModifier(Type):
    element_type: Type
    modifier: TypeReference


@dataclass
class OptionalModifier(Type):
    element_type: Type
    modifier: TypeReference


@dataclass
class FunctionPointer(Type):
    return_type: Type
    parameter_types: list[Type] = field(default_factory=list)


@dataclass
class GenericParameter(Type):
    name: str
    position: int = 0


@dataclass
class GenericArgument(Type):
    """A positional generic argument, resolved to its bound type."""

    position: int
    target: Type | None = None


def is_type(typ: Type | None, namespace: str, name: str) -> bool:
    """True when typ is the named reference, ignoring custom modifiers."""
    while isinstance(typ, (RequiredModifier, OptionalModifier)):
        typ = typ.element_type
    return isinstance(typ, TypeReference) and typ.namespace == namespace and typ.name == name


# ============================================================
# CONTAINERS
# ============================================================


@dataclass
class AssemblyReference:
    name: str
    version: str | None = None


AssemblyKind = Literal["library", "console", "application"]


@dataclass
class Assembly(AssemblyReference):
    kind: AssemblyKind | None = None
    location: str | None = None
    attributes: list[CustomAttribute] = field(default_factory=list)
    modules: list[Module] = field(default_factory=list, repr=False)


@dataclass
class ModuleReference:
    name: str


@dataclass
class Module(ModuleReference):
    version: str | None = None
    location: str | None = None
    size: int | None = None
    attributes: list[CustomAttribute] = field(default_factory=list)


ResourceVisibility = Literal["public", "private"]


@dataclass
class Resource:
    """Embedded resource when data is set, linked file resource when location is."""

    name: str
    visibility: ResourceVisibility = "public"
    data: bytes | None = None
    location: str | None = None


@dataclass
class Namespace:
    name: str
    types: list[TypeDeclaration] = field(default_factory=list)


# ============================================================
# MEMBERS
# ============================================================

MemberVisibility = Literal[
    "public",
    "private",
    "private_scope",
    "family",
    "assembly",
    "family_or_assembly",
    "family_and_assembly",
]

TypeVisibility = Literal[
    "public",
    "private",
    "nested_public",
    "nested_private",
    "nested_assembly",
    "nested_family",
    "nested_family_and_assembly",
    "nested_family_or_assembly",
]


@dataclass
class CustomAttribute:
    """Attribute application. constructor.declaring_type names the attribute class."""

    constructor: MethodReference
    arguments: list[Expr] = field(default_factory=list)


@dataclass
class ParameterDeclaration:
    """A formal parameter. A None type marks the trailing varargs sentinel."""

    name: str
    parameter_type: Type | None = None
    attributes: list[CustomAttribute] = field(default_factory=list)


@dataclass
class FieldReference:
    name: str
    field_type: Type
    declaring_type: TypeReference | None = field(default=None, compare=False, repr=False)


@dataclass
class FieldDeclaration(FieldReference):
    visibility: MemberVisibility = "public"
    static: bool = False
    literal: bool = False
    read_only: bool = False
    special_name: bool = False
    runtime_special_name: bool = False
    initializer: Expr | None = None
    attributes: list[CustomAttribute] = field(default_factory=list)


@dataclass
class MethodReference:
    """A method. A None return type means void."""

    name: str
    declaring_type: TypeReference | None = field(default=None, compare=False, repr=False)
    return_type: Type | None = None
    parameters: list[ParameterDeclaration] = field(default_factory=list)
    generic_arguments: list[Type] = field(default_factory=list)
    generic_method: MethodReference | None = field(default=None, compare=False, repr=False)
    varargs: bool = False


@dataclass
class MethodDeclaration(MethodReference):
    """A method with its modifiers and, unless abstract or external, its body."""

    visibility: MemberVisibility = "public"
    static: bool = False
    abstract: bool = False
    virtual: bool = False
    final: bool = False
    new_slot: bool = False
    special_name: bool = False
    external: bool = False
    body: BlockStatement | None = None
    attributes: list[CustomAttribute] = field(default_factory=list)
    return_attributes: list[CustomAttribute] = field(default_factory=list)


@dataclass
class PropertyReference:
    """A property. Reads and writes go through the accessor methods."""

    name: str
    property_type: Type
    declaring_type: TypeReference | None = field(default=None, compare=False, repr=False)
    parameters: list[ParameterDeclaration] = field(default_factory=list)
    get_method: MethodReference | None = field(default=None, compare=False)
    set_method: MethodReference | None = field(default=None, compare=False)


@dataclass
class PropertyDeclaration(PropertyReference):
    initializer: Expr | None = None
    attributes: list[CustomAttribute] = field(default_factory=list)


@dataclass
class EventReference:
    name: str
    event_type: Type
    declaring_type: TypeReference | None = field(default=None, compare=False, repr=False)


@dataclass
class EventDeclaration(EventReference):
    add_method: MethodReference | None = field(default=None, compare=False)
    remove_method: MethodReference | None = field(default=None, compare=False)
    invoke_method: MethodReference | None = field(default=None, compare=False)
    attributes: list[CustomAttribute] = field(default_factory=list)


@dataclass
class TypeDeclaration(TypeReference):
    """A type with its members.

    Semantics:
    - enumeration: base type is System.Enum
    - delegate: base type is System.MulticastDelegate, signature from Invoke
    - value type: base type is System.ValueType or value_type is set

    Invariants:
    - members link back through declaring_type
    - nested types link back through owner
    """

    visibility: TypeVisibility = "public"
    abstract: bool = False
    sealed: bool = False
    interface: bool = False
    base_type: TypeReference | None = None
    interfaces: list[TypeReference] = field(default_factory=list, compare=False, repr=False)
    fields: list[FieldDeclaration] = field(default_factory=list, compare=False, repr=False)
    methods: list[MethodDeclaration] = field(default_factory=list, compare=False, repr=False)
    properties: list[PropertyDeclaration] = field(default_factory=list, compare=False, repr=False)
    events: list[EventDeclaration] = field(default_factory=list, compare=False, repr=False)
    nested_types: list[TypeDeclaration] = field(default_factory=list, compare=False, repr=False)
    attributes: list[CustomAttribute] = field(default_factory=list, compare=False, repr=False)


def is_enumeration(decl: TypeDeclaration) -> bool:
    return is_type(decl.base_type, CORE_NAMESPACE, "Enum")


def is_delegate(decl: TypeDeclaration) -> bool:
    return is_type(decl.base_type, CORE_NAMESPACE, "MulticastDelegate") and not (
        decl.namespace == CORE_NAMESPACE and decl.name == "Delegate"
    )


def is_value_type(decl: TypeDeclaration) -> bool:
    return decl.value_type or is_type(decl.base_type, CORE_NAMESPACE, "ValueType")


def is_constructor(method: MethodReference) -> bool:
    return method.name in (".ctor", ".cctor")


def find_method(decl: TypeDeclaration, name: str) -> MethodDeclaration | None:
    for method in decl.methods:
        if method.name == name:
            return method
    return None


# ============================================================
# VARIABLES
# ============================================================


@dataclass(eq=False)
class VariableDeclaration:
    """A local variable. Compared by identity: two declarations with the same
    name are distinct variables."""

    name: str
    variable_type: Type | None = None


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Node:
    """Base for expression, statement and clause nodes."""


@dataclass
class Expr(Node):
    """Base for all expressions. Abstract."""


LiteralKind = Literal[
    "null",
    "string",
    "char",
    "boolean",
    "sbyte",
    "byte",
    "int16",
    "uint16",
    "int32",
    "uint32",
    "int64",
    "uint64",
    "single",
    "double",
    "decimal",
]


@dataclass
class LiteralExpression(Expr):
    """A constant. kind is inferred from value when None.

    | Python value | Inferred kind                       |
    |--------------|-------------------------------------|
    | None         | null                                |
    | bool         | boolean                             |
    | str          | string                              |
    | int          | int32, int64 or uint64 by magnitude |
    | float        | double                              |
    | Decimal      | decimal                             |
    """

    value: object
    kind: LiteralKind | None = None

    @property
    def literal_kind(self) -> LiteralKind | None:
        if self.kind is not None:
            return self.kind
        value = self.value
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "boolean"
        if isinstance(value, str):
            return "string"
        if isinstance(value, int):
            if -(1 << 31) <= value < 1 << 31:
                return "int32"
            if -(1 << 63) <= value < 1 << 63:
                return "int64"
            return "uint64"
        if isinstance(value, float):
            return "double"
        if isinstance(value, Decimal):
            return "decimal"
        return None


@dataclass
class AssignExpression(Expr):
    target: Expr
    expression: Expr


@dataclass
class TypeOfExpression(Expr):
    type: Type


@dataclass
class FieldOfExpression(Expr):
    field: FieldReference
    type: Type | None = None


@dataclass
class MethodOfExpression(Expr):
    method: MethodReference
    type: Type | None = None


@dataclass
class MemberInitializerExpression(Expr):
    """`member=value` inside an object initializer."""

    member: FieldReference | PropertyReference
    value: Expr


@dataclass
class TypeReferenceExpression(Expr):
    type: TypeReference


@dataclass
class FieldReferenceExpression(Expr):
    field: FieldReference
    target: Expr | None = None


@dataclass
class EventReferenceExpression(Expr):
    event: EventReference
    target: Expr | None = None


@dataclass
class MethodReferenceExpression(Expr):
    method: MethodReference
    target: Expr | None = None


@dataclass
class PropertyReferenceExpression(Expr):
    """Property access, rendered as an accessor call."""

    property: PropertyReference
    target: Expr | None = None


@dataclass
class ArgumentListExpression(Expr):
    """The varargs argument list of the current method."""


@dataclass
class StackAllocateExpression(Expr):
    type: Type
    expression: Expr


@dataclass
class BlockExpression(Expr):
    """Brace list used by array and object initializers."""

    expressions: list[Expr] = field(default_factory=list)


@dataclass
class ArrayCreateExpression(Expr):
    type: Type
    dimensions: list[Expr] = field(default_factory=list)
    initializer: BlockExpression | None = None


@dataclass
class BaseReferenceExpression(Expr):
    pass


@dataclass
class ThisReferenceExpression(Expr):
    pass


UnaryOperator = Literal[
    "negate",
    "boolean_not",
    "bitwise_not",
    "pre_increment",
    "pre_decrement",
    "post_increment",
    "post_decrement",
]


@dataclass
class UnaryExpression(Expr):
    operator: UnaryOperator
    expression: Expr


BinaryOperator = Literal[
    "add",
    "subtract",
    "multiply",
    "divide",
    "modulus",
    "shift_left",
    "shift_right",
    "identity_equality",
    "identity_inequality",
    "value_equality",
    "value_inequality",
    "bitwise_or",
    "bitwise_and",
    "bitwise_exclusive_or",
    "boolean_or",
    "boolean_and",
    "less_than",
    "less_than_or_equal",
    "greater_than",
    "greater_than_or_equal",
]


@dataclass
class BinaryExpression(Expr):
    """Infix operation. Always rendered fully parenthesized."""

    left: Expr
    operator: BinaryOperator
    right: Expr


@dataclass
class TryCastExpression(Expr):
    expression: Expr
    target_type: Type


@dataclass
class CanCastExpression(Expr):
    expression: Expr
    target_type: Type


@dataclass
class CastExpression(Expr):
    """Type conversion. The target has no dynamic types, so only the operand renders."""

    expression: Expr
    target_type: Type


@dataclass
class ConditionExpression(Expr):
    condition: Expr
    then: Expr
    else_: Expr


@dataclass
class NullCoalescingExpression(Expr):
    condition: Expr
    expression: Expr


@dataclass
class DelegateCreateExpression(Expr):
    delegate_type: Type
    method: MethodReference
    target: Expr | None = None


@dataclass
class AnonymousMethodExpression(Expr):
    """Inline function with its own body and its own hoisted variables."""

    parameters: list[ParameterDeclaration] = field(default_factory=list)
    body: BlockStatement | None = None
    delegate_type: Type | None = None


@dataclass
class LambdaExpression(Expr):
    parameters: list[VariableDeclaration] = field(default_factory=list)
    body: Expr | None = None


@dataclass
class ArgumentReferenceExpression(Expr):
    parameter: ParameterDeclaration


@dataclass
class VariableDeclarationExpression(Expr):
    """Declaration in expression position. Hoisted, so renders as a use."""

    variable: VariableDeclaration


@dataclass
class VariableReferenceExpression(Expr):
    variable: VariableDeclaration


@dataclass
class PropertyIndexerExpression(Expr):
    target: PropertyReferenceExpression
    indices: list[Expr] = field(default_factory=list)


@dataclass
class ArrayIndexerExpression(Expr):
    target: Expr
    indices: list[Expr] = field(default_factory=list)


@dataclass
class MethodInvokeExpression(Expr):
    method: Expr
    arguments: list[Expr] = field(default_factory=list)


@dataclass
class DelegateInvokeExpression(Expr):
    target: Expr
    arguments: list[Expr] = field(default_factory=list)


@dataclass
class ObjectCreateExpression(Expr):
    type: Type
    constructor: MethodReference | None = None
    arguments: list[Expr] = field(default_factory=list)
    initializer: BlockExpression | None = None


@dataclass
class AddressOfExpression(Expr):
    expression: Expr


@dataclass
class AddressReferenceExpression(Expr):
    expression: Expr


@dataclass
class AddressOutExpression(Expr):
    expression: Expr


@dataclass
class AddressDereferenceExpression(Expr):
    expression: Expr


@dataclass
class SizeOfExpression(Expr):
    type: Type


@dataclass
class TypeOfTypedReferenceExpression(Expr):
    expression: Expr


@dataclass
class ValueOfTypedReferenceExpression(Expr):
    expression: Expr
    type: Type | None = None


@dataclass
class TypedReferenceCreateExpression(Expr):
    expression: Expr


@dataclass
class GenericDefaultExpression(Expr):
    generic_argument: Type


@dataclass
class SnippetExpression(Expr):
    """Verbatim source text."""

    text: str


# ------------------------------------------------------------
# Query expressions
# ------------------------------------------------------------


@dataclass
class QueryClause(Node):
    """Base for clauses between a query's from and its operation."""


@dataclass
class FromClause(QueryClause):
    variable: VariableDeclaration
    expression: Expr


@dataclass
class WhereClause(QueryClause):
    expression: Expr


@dataclass
class LetClause(QueryClause):
    variable: VariableDeclaration
    expression: Expr


@dataclass
class JoinClause(QueryClause):
    variable: VariableDeclaration
    in_expression: Expr
    on: Expr
    equality: Expr
    into: VariableDeclaration | None = None


OrderDirection = Literal["ascending", "descending"]


@dataclass
class OrderExpression(Node):
    expression: Expr
    direction: OrderDirection = "ascending"


@dataclass
class OrderClause(QueryClause):
    expressions: list[OrderExpression] = field(default_factory=list)


@dataclass
class QueryOperation(Node):
    """Base for the terminal select/group operation."""


@dataclass
class SelectOperation(QueryOperation):
    expression: Expr


@dataclass
class GroupOperation(QueryOperation):
    item: Expr
    key: Expr


@dataclass
class QueryContinuation(Node):
    variable: VariableDeclaration
    body: QueryBody


@dataclass
class QueryBody(Node):
    operation: QueryOperation
    clauses: list[QueryClause] = field(default_factory=list)
    continuation: QueryContinuation | None = None


@dataclass
class QueryExpression(Expr):
    from_clause: FromClause
    body: QueryBody


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt(Node):
    """Base for all statements. Abstract."""


@dataclass
class BlockStatement(Stmt):
    statements: list[Stmt] = field(default_factory=list)


@dataclass
class ExpressionStatement(Stmt):
    expression: Expr


@dataclass
class GotoStatement(Stmt):
    name: str


@dataclass
class LabeledStatement(Stmt):
    name: str
    statement: Stmt | None = None


@dataclass
class ConditionStatement(Stmt):
    condition: Expr
    then: BlockStatement = field(default_factory=BlockStatement)
    else_: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class MethodReturnStatement(Stmt):
    expression: Expr | None = None


@dataclass
class ForStatement(Stmt):
    """C-style loop. Any header part may be None."""

    initializer: Stmt | None = None
    condition: Expr | None = None
    increment: Stmt | None = None
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class ForEachStatement(Stmt):
    variable: VariableDeclaration
    expression: Expr
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class UsingStatement(Stmt):
    """Resource scope. expression is usually `resource = acquire()`."""

    expression: Expr
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class FixedStatement(Stmt):
    variable: VariableDeclaration
    expression: Expr
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class WhileStatement(Stmt):
    """A None condition loops forever."""

    condition: Expr | None = None
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class DoStatement(Stmt):
    condition: Expr | None = None
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class CatchClause(Node):
    body: BlockStatement = field(default_factory=BlockStatement)
    variable: VariableDeclaration | None = None
    condition: Expr | None = None


@dataclass
class TryCatchFinallyStatement(Stmt):
    try_: BlockStatement = field(default_factory=BlockStatement)
    catch_clauses: list[CatchClause] = field(default_factory=list)
    fault: BlockStatement = field(default_factory=BlockStatement)
    finally_: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class ThrowExceptionStatement(Stmt):
    """A None expression rethrows the current exception."""

    expression: Expr | None = None


@dataclass
class AttachEventStatement(Stmt):
    event: EventReferenceExpression
    listener: Expr


@dataclass
class RemoveEventStatement(Stmt):
    event: EventReferenceExpression
    listener: Expr


@dataclass
class SwitchCase(Node):
    body: BlockStatement | None = None


@dataclass
class ConditionCase(SwitchCase):
    condition: Expr | None = None


@dataclass
class DefaultCase(SwitchCase):
    pass


@dataclass
class SwitchStatement(Stmt):
    expression: Expr
    cases: list[SwitchCase] = field(default_factory=list)


@dataclass
class BreakStatement(Stmt):
    pass


@dataclass
class ContinueStatement(Stmt):
    pass


@dataclass
class MemoryCopyStatement(Stmt):
    source: Expr
    destination: Expr
    length: Expr


@dataclass
class MemoryInitializeStatement(Stmt):
    offset: Expr
    value: Expr
    length: Expr


@dataclass
class DebugBreakStatement(Stmt):
    pass


@dataclass
class LockStatement(Stmt):
    expression: Expr
    body: BlockStatement = field(default_factory=BlockStatement)


@dataclass
class CommentStatement(Stmt):
    """Free text. Multi-line text renders as a block comment."""

    text: str
