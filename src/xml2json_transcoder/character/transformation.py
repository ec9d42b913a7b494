"""Character level helpers for leaf text.

``trim_non_graphic`` decides what part of an element's character data is
kept. ``XML10Validator`` tells the tokenizer which code points may appear in
a document at all.
"""

import unicodedata
from typing import List, Tuple

# XML 1.0 valid character ranges
XML_VALID_RANGES: List[Tuple[int, int]] = [
    (0x0009, 0x0009),  # Tab
    (0x000A, 0x000A),  # Line Feed
    (0x000D, 0x000D),  # Carriage Return
    (0x0020, 0xD7FF),  # Basic Multilingual Plane excluding surrogates
    (0xE000, 0xFFFD),  # Private Use and extended characters
    (0x10000, 0x10FFFF),  # Supplementary planes
]

FAST_PATH_ASCII_MAX = 0x7F

# Letters, marks, numbers, punctuation, symbols. Space separators (Zs) are
# graphic too but never anchors since they are whitespace.
_ANCHOR_CATEGORIES = frozenset("LMNPS")


def _is_anchor(char: str) -> bool:
    """Check if ``char`` is graphic and not a space."""
    if char.isspace():
        return False
    return unicodedata.category(char)[0] in _ANCHOR_CATEGORIES


def trim_non_graphic(text: str) -> str:
    """Strip leading and trailing non graphic characters and spaces.

    Everything between the first and the last graphic, non space character
    is kept verbatim, including inner newlines and tabs:

        >>> trim_non_graphic("\\n\\tfoo\\n\\tbar\\n\\t")
        'foo\\n\\tbar'

    Returns an empty string when no such character exists.
    """
    if not text:
        return text

    first = 0
    end = len(text)
    while first < end and not _is_anchor(text[first]):
        first += 1
    if first == end:
        return ""
    while not _is_anchor(text[end - 1]):
        end -= 1

    return text[first:end]


class XML10Validator:
    """XML 1.0 character validity checker."""

    @classmethod
    def is_valid_xml_char(cls, char_code: int) -> bool:
        """Check if character code is valid in XML 1.0.

        Args:
            char_code: Unicode code point

        Returns:
            True if character is valid in XML 1.0
        """
        if 0x20 <= char_code <= FAST_PATH_ASCII_MAX:
            return True
        for start, end in XML_VALID_RANGES:
            if start <= char_code <= end:
                return True
        return False

    @classmethod
    def first_invalid(cls, text: str) -> int:
        """Return the index of the first invalid character in ``text``, or -1."""
        if text.isascii() and text.isprintable():
            return -1
        for index, char in enumerate(text):
            if not cls.is_valid_xml_char(ord(char)):
                return index
        return -1
