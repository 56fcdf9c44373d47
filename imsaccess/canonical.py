"""
Canonical JSON serialization for policy documents.

Two documents with the same content always render to the same text, so a
rendered policy can be compared byte-for-byte with what the registry holds.
Object keys are sorted by UTF-16 code units, no whitespace is emitted and
strings use minimal escaping (RFC 8785 rules for the value types a policy
document contains).
"""

from typing import Any

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def _utf16_key(key: str) -> bytes:
    return key.encode("utf-16-be")


def _dump_string(s: str) -> str:
    out = ['"']
    for char in s:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            out.append(escaped)
        elif ord(char) < 0x20:
            out.append(f"\\u{ord(char):04x}")
        else:
            out.append(char)
    out.append('"')
    return "".join(out)


def _dump(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return _dump_string(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise TypeError(f"Object keys must be strings, got {type(key).__name__}")
        members = (
            f"{_dump_string(key)}:{_dump(value[key])}"
            for key in sorted(value, key=_utf16_key)
        )
        return "{" + ",".join(members) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_dump(item) for item in value) + "]"
    raise TypeError(f"Cannot canonicalize type: {type(value).__name__}")


def canonicalize(value: Any) -> str:
    """
    Serialize ``value`` to canonical JSON.

    Args:
        value: None, bool, int, str, or nested dicts/lists/tuples of those

    Returns:
        Canonical JSON text

    Raises:
        TypeError: For floats and any other unsupported type
    """
    return _dump(value)
