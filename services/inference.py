"""Scalar type inference for reading values delivered as text.

EdgeX sends every reading value as a string. The concrete type is guessed in a
fixed order, first match wins:

1. ``true``/``false`` (case and surrounding whitespace ignored) -> boolean
2. base-10 signed 64-bit integer -> integer
3. standard base64 of exactly 4 or 8 bytes -> big-endian float32/float64
4. anything else -> the original string, untouched

Decimal text such as ``"1.5"`` is *not* parsed as a float: EdgeX encodes
float readings as base64 of their IEEE-754 bytes, so plain decimal text is
kept as a string.
"""

from __future__ import annotations

import base64
import binascii
import re
import struct

from models.values import BoolValue, FloatValue, InferredValue, IntValue, StrValue

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_FORMATS = {4: ">f", 8: ">d"}


def infer_value(raw: str) -> InferredValue:
    """Classify ``raw`` as a boolean, integer, float or string value."""
    normalized = raw.strip().lower()
    if normalized == "true":
        return BoolValue(True)
    if normalized == "false":
        return BoolValue(False)

    parsed_int = _parse_int64(normalized)
    if parsed_int is not None:
        return IntValue(parsed_int)

    parsed_float = _decode_base64_float(raw)
    if parsed_float is not None:
        return FloatValue(parsed_float)

    return StrValue(raw)


def _parse_int64(candidate: str) -> int | None:
    # int() also accepts underscores and non-ASCII digits, which are not integers on the wire.
    if not _INTEGER_PATTERN.fullmatch(candidate):
        return None
    value = int(candidate)
    if not INT64_MIN <= value <= INT64_MAX:
        return None
    return value


def _decode_base64_float(raw: str) -> float | None:
    # CR and LF are skipped; any other character outside the alphabet fails.
    try:
        data = base64.b64decode(raw.replace("\r", "").replace("\n", ""), validate=True)
    except (binascii.Error, ValueError):
        return None

    fmt = _FLOAT_FORMATS.get(len(data))
    if fmt is None:
        return None
    (value,) = struct.unpack(fmt, data)
    return value
