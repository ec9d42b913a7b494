"""Character processing layer for XML to JSON transcoding.

This module provides charset detection, incremental recoding of the input
stream and the grapheme trimming applied to leaf text.
"""

from .encoding import (
    BOMDetector,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
    XMLDeclarationParser,
)
from .stream import CharacterStream
from .transformation import XML10Validator, trim_non_graphic

__all__ = [
    "BOMDetector",
    "DetectionMethod",
    "EncodingDetector",
    "EncodingResult",
    "XMLDeclarationParser",
    "CharacterStream",
    "XML10Validator",
    "trim_non_graphic",
]
