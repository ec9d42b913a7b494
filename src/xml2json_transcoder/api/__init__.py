"""Public API for XML to JSON conversion.

Progressive API disclosure:
- Level 1: Simple functions - convert(), convert_string(), convert_file()
- Level 2: Configured converter - Converter class
"""

from .converter import (
    DECODE_STAGE,
    ENCODE_STAGE,
    Converter,
    convert,
    convert_file,
    convert_string,
)

__all__ = [
    "DECODE_STAGE",
    "ENCODE_STAGE",
    "Converter",
    "convert",
    "convert_file",
    "convert_string",
]
