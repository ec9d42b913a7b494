"""Tokenization layer for XML to JSON transcoding.

Turns the decoded character stream into start element, end element and
character data tokens for the tree builder.
"""

from .tokenizer import (
    Attribute,
    QName,
    Token,
    TokenPosition,
    TokenType,
    XMLTokenizer,
    tokenize,
)

__all__ = [
    "Attribute",
    "QName",
    "Token",
    "TokenPosition",
    "TokenType",
    "XMLTokenizer",
    "tokenize",
]
