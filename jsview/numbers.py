"""Numeric and string literal text."""

from __future__ import annotations

import math
import struct
from decimal import Decimal
from typing import Literal

from .errors import UnsupportedLiteralType
from .options import NumberFormat

IntegerKind = Literal[
    "sbyte", "byte", "int16", "uint16", "int32", "uint32", "int64", "uint64"
]

INTEGER_WIDTHS: dict[str, tuple[int, bool]] = {
    "sbyte": (8, True),
    "byte": (8, False),
    "int16": (16, True),
    "uint16": (16, False),
    "int32": (32, True),
    "uint32": (32, False),
    "int64": (64, True),
    "uint64": (64, False),
}
"""Bit width and signedness of each integral literal kind."""

AUTO_DECIMAL_LIMIT = 16
AUTO_ROUND_LIMIT = 1000

STRING_ESCAPES: dict[str, str] = {
    "\r": "\\r",
    "\t": "\\t",
    "'": "\\'",
    "\0": "\\0",
    "\n": "\\n",
}


def format_integer(
    value: int, mode: NumberFormat = "auto", kind: IntegerKind = "int32"
) -> str:
    """Render an integral literal.

    Auto mode prefers decimal for small values and round numbers:

        format_integer(5)    -> "5"
        format_integer(200)  -> "200"
        format_integer(17)   -> "0x11"
        format_integer(4096) -> "0x1000"

    Negative values in hexadecimal are the two's complement at the kind's width.
    """
    if isinstance(value, bool) or kind not in INTEGER_WIDTHS:
        raise UnsupportedLiteralType(value, kind)
    bits, signed = INTEGER_WIDTHS[kind]
    low, high = (-(1 << (bits - 1)), (1 << (bits - 1)) - 1) if signed else (0, (1 << bits) - 1)
    if not low <= value <= high:
        raise UnsupportedLiteralType(value, kind)
    if mode == "auto":
        mode = "decimal" if _prefers_decimal(value, bits) else "hexadecimal"
    if mode == "decimal":
        return str(value)
    return "0x" + format(value & ((1 << bits) - 1), "x")


def _prefers_decimal(value: int, bits: int) -> bool:
    # unsigned 64-bit magnitudes are compared as signed
    if bits == 64 and value >= 1 << 63:
        value -= 1 << 64
    if value < AUTO_DECIMAL_LIMIT:
        return True
    return value % 10 == 0 and value < AUTO_ROUND_LIMIT


def format_double(value: float) -> str:
    """Shortest text that reads back as the same 64-bit float."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return _exponent_style(repr(value))


def format_single(value: float) -> str:
    """Shortest text that reads back as the same 32-bit float."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    packed = struct.pack("<f", value)
    for precision in range(1, 10):
        text = format(value, f".{precision}g")
        if struct.pack("<f", float(text)) == packed:
            return _exponent_style(text)
    return _exponent_style(repr(value))


def format_decimal(value: Decimal) -> str:
    return format(value, "f")


def _exponent_style(text: str) -> str:
    mantissa, sep, exponent = text.partition("e")
    if mantissa.endswith(".0"):
        mantissa = mantissa[:-2]
    if not sep:
        return mantissa
    sign = exponent[0] if exponent[0] in "+-" else "+"
    digits = exponent.lstrip("+-").rjust(2, "0")
    return f"{mantissa}E{sign}{digits}"


def quote_string(text: str) -> str:
    """Double-quote text, escaping control characters and code units above 0xFF."""
    parts = ['"']
    for ch in text:
        code = ord(ch)
        if code > 0xFFFF:
            code -= 0x10000
            parts.append(f"\\u{0xD800 + (code >> 10):04x}")
            parts.append(f"\\u{0xDC00 + (code & 0x3FF):04x}")
        elif code > 0xFF:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(STRING_ESCAPES.get(ch, ch))
    parts.append('"')
    return "".join(parts)
