"""Identifier escaping and method-name tables."""

from __future__ import annotations

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        # ECMAScript keywords and literals
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "enum",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "new",
        "null",
        "return",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        # strict mode and module reserved
        "await",
        "implements",
        "interface",
        "let",
        "package",
        "private",
        "protected",
        "public",
        "static",
        "yield",
        # older future reserved words
        "abstract",
        "boolean",
        "byte",
        "char",
        "double",
        "final",
        "float",
        "goto",
        "int",
        "long",
        "native",
        "short",
        "synchronized",
        "throws",
        "transient",
        "volatile",
        # restricted global bindings
        "arguments",
        "eval",
        "undefined",
        "NaN",
        "Infinity",
    }
)

DECLARATION_ESCAPE = "@"
REFERENCE_ESCAPE = "&"

CONSTRUCTOR_NAMES: frozenset[str] = frozenset({".ctor", ".cctor"})
CONSTRUCTOR_REFERENCE_NAMES: frozenset[str] = frozenset({".ctor", "..ctor"})
CONSTRUCTOR_ALIAS = "Create"

SPECIAL_METHOD_NAMES: dict[str, str] = {
    "op_UnaryPlus": "Positive",
    "op_Addition": "Add",
    "op_Increment": "Inc",
    "op_UnaryNegation": "Negative",
    "op_Subtraction": "Subtract",
    "op_Decrement": "Dec",
    "op_Multiply": "Multiply",
    "op_Division": "Divide",
    "op_Modulus": "Modulus",
    "op_BitwiseAnd": "BitwiseAnd",
    "op_BitwiseOr": "BitwiseOr",
    "op_ExclusiveOr": "BitwiseXor",
    "op_Negation": "LogicalNot",
    "op_OnesComplement": "BitwiseNot",
    "op_LeftShift": "ShiftLeft",
    "op_RightShift": "ShiftRight",
    "op_Equality": "Equal",
    "op_Inequality": "NotEqual",
    "op_GreaterThanOrEqual": "GreaterThanOrEqual",
    "op_LessThanOrEqual": "LessThanOrEqual",
    "op_GreaterThan": "GreaterThan",
    "op_LessThan": "LessThan",
    "op_True": "True",
    "op_False": "False",
    "op_Implicit": "Implicit",
    "op_Explicit": "Explicit",
}
"""Operator overload method names mapped to their readable declaration names."""


def is_reserved(name: str) -> bool:
    return name in RESERVED_WORDS


def escape_declaration(name: str) -> str:
    """Escape a name at the point it is declared."""
    if name in CONSTRUCTOR_REFERENCE_NAMES:
        return CONSTRUCTOR_ALIAS
    if name in RESERVED_WORDS:
        return DECLARATION_ESCAPE + name
    return name


def escape_reference(name: str) -> str:
    """Escape a name at the point it is used.

    Constructor names are rewritten to the constructor alias instead of escaped.
    """
    if name in CONSTRUCTOR_REFERENCE_NAMES:
        return CONSTRUCTOR_ALIAS
    if name in RESERVED_WORDS:
        return REFERENCE_ESCAPE + name
    return name


def declared_method_name(name: str, special_name: bool = False) -> str:
    """Name under which a method declaration is written, before escaping."""
    if name in CONSTRUCTOR_NAMES:
        return CONSTRUCTOR_ALIAS
    if special_name:
        return SPECIAL_METHOD_NAMES.get(name, name)
    return name
