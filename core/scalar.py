# =============================================================================
# core/scalar.py  —  Tolerant Scalar Decoding
# =============================================================================
#
# WHAT THIS MODULE DOES:
#   The 115 API is inconsistent about JSON types.  The same logical field can
#   arrive as a number on one endpoint and as a string on another:
#
#       "s": 1024          "s": "1024"        "s": ""
#       "m": 1             "m": "1"           "m": "0"
#       "tp": 1700000000   "tp": "1700000000"
#
#   decode() turns any of those tokens into ONE canonical Python value, chosen
#   by the field's ScalarKind.  It is applied per field by the mapper; there
#   is no global "which API version is this" switch.
#
# DECODING TABLE:
#   token                       → result
#   ---------------------------------------------------------------
#   None / absent               → zero value (0, False, 0.0)
#   int                         → the int (range-checked)
#   integral float (e.g. 3.0)   → int(token)
#   str, blank after strip      → zero value
#   str, numeric literal        → parsed value
#   anything else               → DecodeError(field, token)
#
# TOLERANT IN, STRICT OUT:
#   encode() always emits the native type, never the original string form.
# =============================================================================

import math
import re
from enum import Enum
from typing import Any, Union

from core.errors import DecodeError

Scalar = Union[int, bool, float]

_INT_LITERAL = re.compile(r"[+-]?[0-9]+")
_FLOAT_LITERAL = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1


class ScalarKind(str, Enum):
    INT = "int"
    INT64 = "int64"
    BOOL_AS_INT = "bool_as_int"
    FLOAT = "float"


_ZERO: dict[ScalarKind, Scalar] = {
    ScalarKind.INT: 0,
    ScalarKind.INT64: 0,
    ScalarKind.BOOL_AS_INT: False,
    ScalarKind.FLOAT: 0.0,
}


def zero(kind: ScalarKind) -> Scalar:
    """Return the zero value used for absent or blank tokens."""
    return _ZERO[kind]


def decode(kind: ScalarKind, token: Any, field: str = "") -> Scalar:
    """Decode one wire token into the canonical value for ``kind``.

    Raises:
        DecodeError: naming ``field`` and the raw token, if the token is not
            a well-formed number, numeric string, blank string or None.
    """
    if token is None:
        return zero(kind)

    # bool is a subclass of int; JSON true/false is not a number.
    if isinstance(token, bool):
        raise DecodeError(field, token, "boolean is not a numeric token")

    if isinstance(token, str):
        text = token.strip()
        if not text:
            return zero(kind)
        return _from_text(kind, text, field, token)

    if isinstance(token, int):
        return _from_int(kind, token, field, token)

    if isinstance(token, float):
        if not math.isfinite(token):
            raise DecodeError(field, token, "non-finite number")
        if kind is ScalarKind.FLOAT:
            return token
        if not token.is_integer():
            raise DecodeError(field, token, "fractional number for integer field")
        return _from_int(kind, int(token), field, token)

    raise DecodeError(field, token, f"unsupported JSON type {type(token).__name__}")


def _from_text(kind: ScalarKind, text: str, field: str, raw: Any) -> Scalar:
    if kind is ScalarKind.FLOAT:
        if not _FLOAT_LITERAL.fullmatch(text):
            raise DecodeError(field, raw, "not a numeric literal")
        return float(text)
    if not _INT_LITERAL.fullmatch(text):
        raise DecodeError(field, raw, "not an integer literal")
    return _from_int(kind, int(text), field, raw)


def _from_int(kind: ScalarKind, value: int, field: str, raw: Any) -> Scalar:
    if kind is ScalarKind.FLOAT:
        return float(value)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise DecodeError(field, raw, "out of 64-bit range")
    if kind is ScalarKind.BOOL_AS_INT:
        return value != 0
    return value


def encode(kind: ScalarKind, value: Scalar) -> Scalar:
    """Serialize a canonical value back to its native JSON type."""
    if kind is ScalarKind.BOOL_AS_INT:
        return bool(value)
    if kind is ScalarKind.FLOAT:
        return float(value)
    return int(value)
