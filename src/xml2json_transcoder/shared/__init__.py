"""Shared utilities for XML to JSON transcoding.

This module provides the configuration object, error types, value kinds and
logging helpers used across all processing layers.
"""

from .config import (
    ConverterConfig,
    ConverterConfigBuilder,
)
from .errors import (
    CharsetError,
    ConversionError,
    EncodeError,
    TranscoderError,
    XMLSyntaxError,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)
from .types import (
    JSType,
    TypeConverter,
    classify,
)

__all__ = [
    "ConverterConfig",
    "ConverterConfigBuilder",
    "CharsetError",
    "ConversionError",
    "EncodeError",
    "TranscoderError",
    "XMLSyntaxError",
    "CorrelationLogger",
    "get_logger",
    "JSType",
    "TypeConverter",
    "classify",
]
