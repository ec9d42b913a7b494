"""XML to JSON transcoder.

Converts XML documents into structurally equivalent JSON, keeping element
order, repeated elements, attributes and mixed content, with configurable
attribute and content naming, array forcing and value typing.

Progressive API Disclosure:
- Level 1: Simple functions - convert(), convert_string(), convert_file()
- Level 2: Configured converter - Converter with a ConverterConfig
- Level 3: Separate stages - Decoder into a Node tree, Encoder to JSON
"""

__version__ = "0.1.0"
__author__ = "XML2JSON Transcoder Team"

from .api import Converter, convert, convert_file, convert_string
from .serialization import Encoder
from .shared.config import ConverterConfig, ConverterConfigBuilder
from .shared.errors import (
    CharsetError,
    ConversionError,
    EncodeError,
    TranscoderError,
    XMLSyntaxError,
)
from .shared.types import JSType, classify
from .character.transformation import trim_non_graphic
from .tree import Decoder, Node

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple conversion functions
    "convert",
    "convert_string",
    "convert_file",

    # Level 2: Configured converter
    "Converter",
    "ConverterConfig",
    "ConverterConfigBuilder",
    "JSType",

    # Level 3: Stages and tree model
    "Decoder",
    "Encoder",
    "Node",
    "classify",
    "trim_non_graphic",

    # Errors
    "CharsetError",
    "ConversionError",
    "EncodeError",
    "TranscoderError",
    "XMLSyntaxError",
]
