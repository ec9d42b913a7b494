"""JSON value kinds and the leaf text classifier.

Leaf text is always stored raw by the decoder. The encoder asks ``classify``
for the kind of each leaf and a ``TypeConverter`` decides whether that kind
is emitted as an unquoted JSON literal or as a quoted string.
"""

import json
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_PATTERN = re.compile(r"[+-]?(0|[1-9][0-9]*)")
_FLOAT_PATTERN = re.compile(
    r"[+-]?(([0-9]+\.[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+)"
)
_JSON_NUMBER_PATTERN = re.compile(r"-?(0|[1-9][0-9]*)(\.[0-9]+)?([eE][+-]?[0-9]+)?")


class JSType(Enum):
    """Closed set of value kinds a leaf can be classified as."""

    NULL = "null"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    STRING = "string"

    @classmethod
    def from_name(cls, name: str) -> "JSType":
        """Look up a kind by its case-insensitive name (``"int"``, ``"Bool"``...)."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(kind.value for kind in cls)
            raise ValueError(f"Unknown value kind {name!r}, expected one of: {valid}") from None


def _is_int(text: str) -> bool:
    if not _INT_PATTERN.fullmatch(text):
        return False
    return INT64_MIN <= int(text) <= INT64_MAX


def _is_float(text: str) -> bool:
    if not _FLOAT_PATTERN.fullmatch(text):
        return False
    return math.isfinite(float(text))


def classify(text: str) -> JSType:
    """Classify raw leaf text, first match wins: null, bool, int, float, string.

    Integers with leading zeros (``"007"``) stay strings since they are
    usually identifiers or phone numbers. A float needs a dot or an exponent
    (``"13.32"``, ``"1e5"``, ``"-2E-3"``).
    """
    text = text.strip()
    if text == "null":
        return JSType.NULL
    if text in ("true", "false"):
        return JSType.BOOL
    if _is_int(text):
        return JSType.INT
    if _is_float(text):
        return JSType.FLOAT
    return JSType.STRING


def quote(text: str) -> str:
    """Quote ``text`` as a JSON string, keeping non-ASCII characters literal."""
    quoted = json.dumps(text, ensure_ascii=False)
    # JSON allows these two raw, JavaScript string literals do not
    return quoted.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


@dataclass(frozen=True)
class TypeConverter:
    """Type classification policy: which kinds are written unquoted."""

    kinds: FrozenSet[JSType] = frozenset()

    @classmethod
    def of(cls, kinds: Iterable[JSType]) -> "TypeConverter":
        return cls(frozenset(kinds))

    def emits(self, kind: JSType) -> bool:
        """Check whether ``kind`` is written as an unquoted literal."""
        return kind is not JSType.STRING and kind in self.kinds

    def to_json(self, text: str) -> str:
        """Render leaf text as a JSON literal of its kind, or as a JSON string."""
        kind = classify(text)
        if not self.emits(kind):
            return quote(text)

        literal = text.strip()
        if kind is JSType.NULL or kind is JSType.BOOL:
            return literal
        if kind is JSType.INT:
            return str(int(literal))
        if _JSON_NUMBER_PATTERN.fullmatch(literal):
            return literal
        return repr(float(literal))
