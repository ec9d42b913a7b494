"""JSON serialization layer for XML to JSON transcoding."""

from .encoder import Encoder, encode

__all__ = [
    "Encoder",
    "encode",
]
