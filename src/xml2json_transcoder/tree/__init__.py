"""Tree building for XML to JSON transcoding.

Key Components:
    Node: Element, attribute or document frame with grouped children
    Decoder: Builds a Node tree from the token stream of a document
"""

from .builder import Decoder, assign_labels, decode
from .node import Node

__all__ = [
    "Decoder",
    "Node",
    "assign_labels",
    "decode",
]
