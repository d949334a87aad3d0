"""Escaping rules for names that end up in an InfluxDB series key."""

from __future__ import annotations

_MEASUREMENT_ESCAPES = str.maketrans({",": r"\,", " ": r"\ ", "\n": r"\n"})
_KEY_ESCAPES = str.maketrans({",": r"\,", "=": r"\=", " ": r"\ ", "\n": r"\n"})


def escape_measurement(name: str) -> str:
    return name.translate(_MEASUREMENT_ESCAPES)


def escape_key(key: str) -> str:
    """Escape a tag key, tag value or field key."""
    return key.translate(_KEY_ESCAPES)


def series_key(measurement: str, tags: dict[str, str]) -> str:
    """Escaped measurement plus sorted tags, skipping tags with empty values."""
    key = escape_measurement(measurement)
    for tag_key in sorted(tags):
        tag_value = tags[tag_key]
        if tag_value:
            key += f",{escape_key(tag_key)}={escape_key(tag_value)}"
    return key
