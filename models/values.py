"""Tagged union describing the scalar type inferred for a reading value."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class BoolValue:
    value: bool


@dataclass(frozen=True, slots=True)
class IntValue:
    value: int


@dataclass(frozen=True, slots=True)
class FloatValue:
    value: float


@dataclass(frozen=True, slots=True)
class StrValue:
    value: str


InferredValue = Union[BoolValue, IntValue, FloatValue, StrValue]
FieldValue = Union[bool, int, float, str]


def to_field_value(inferred: InferredValue) -> FieldValue:
    """Unwrap an inferred value into the scalar stored as a point field."""
    match inferred:
        case BoolValue(value=value):
            return bool(value)
        case IntValue(value=value):
            return int(value)
        case FloatValue(value=value):
            return float(value)
        case StrValue(value=value):
            return str(value)
        case _:
            raise TypeError(f"Unsupported inferred value {inferred!r}")
