"""Tree building from the XML token stream.

The ``Decoder`` consumes tokens in a single pass and grows a ``Node`` tree
under a caller supplied root. Attributes become leaf children, character
data becomes the trimmed text of the enclosing element, and every element
is attached to its parent when its end tag arrives.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..character.stream import CharacterStream, InputType
from ..character.transformation import trim_non_graphic
from ..shared.config import ConverterConfig
from ..shared.logging import get_logger
from ..tokenization import Attribute, TokenType, XMLTokenizer
from .node import Node

MS_PER_SECOND = 1000


@dataclass
class _Element:
    """Stack frame of an element whose end tag has not been seen yet."""

    node: Node
    name: str = ""
    parent: Optional["_Element"] = None
    raw_text: List[str] = field(default_factory=list)

    def close(self) -> None:
        """Store the trimmed text gathered between the start and end tags."""
        if self.raw_text:
            self.node.text = trim_non_graphic("".join(self.raw_text))


class Decoder:
    """Reads an XML document and decodes it into a ``Node`` tree.

    Args:
        source: Bytes, str, a readable stream or a prepared CharacterStream
        config: Converter configuration; only the attribute prefix and the
            excluded attributes are relevant here
    """

    def __init__(self, source: InputType, config: Optional[ConverterConfig] = None) -> None:
        self.config = config or ConverterConfig()
        if isinstance(source, CharacterStream):
            self.stream = source
        else:
            self.stream = CharacterStream(
                source,
                chunk_size=self.config.chunk_size,
                correlation_id=self.config.correlation_id,
            )
        self.logger = get_logger(__name__, self.config.correlation_id, "decoder")

    def decode(self, root: Optional[Node] = None) -> Node:
        """Decode the whole input into ``root`` and return it.

        Raises:
            XMLSyntaxError: If the document is not well formed
            CharsetError: If the input charset is unknown or inconsistent
            OSError: If reading the source fails
        """
        if root is None:
            root = Node()

        start_time = time.time()
        self.logger.debug("Decoding XML document", extra={"chunk_size": self.stream.chunk_size})
        tokenizer = XMLTokenizer(self.stream)
        current = _Element(node=root)

        for token in tokenizer:
            if token.type is TokenType.START_ELEMENT:
                current = _Element(node=Node(), name=token.name.local, parent=current)
                self._add_attributes(current.node, token.attributes)
            elif token.type is TokenType.CHAR_DATA:
                current.raw_text.append(token.value)
            elif token.type is TokenType.END_ELEMENT:
                if current.parent is not None:
                    current.close()
                    current.parent.node.add_child(current.name, current.node)
                    current = current.parent
        current.close()

        assign_labels(root)

        if self.logger.is_enabled_for(logging.DEBUG):
            self.logger.debug(
                "Decoded XML document",
                extra={
                    "tokens": tokenizer.token_count,
                    "nodes": root.count(),
                    "encoding": self.stream.encoding.encoding if self.stream.encoding else None,
                    "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
                }
            )
        return root

    def _add_attributes(self, node: Node, attributes: List[Attribute]) -> None:
        excluded = self.config.excluded_attributes
        for attribute in attributes:
            if attribute.name.space in excluded or attribute.name.local in excluded:
                continue
            node.add_child(
                self.config.attribute_prefix + attribute.name.local,
                Node(text=attribute.value),
            )


def assign_labels(node: Node, path: str = "") -> None:
    """Set every node's label to the dot-joined path of keys leading to it."""
    stack = [(node, path)]
    while stack:
        current, current_path = stack.pop()
        current.label = current_path
        for name, group in current.children.items():
            child_path = f"{current_path}.{name}" if current_path else name
            stack.extend((child, child_path) for child in group)


def decode(source: InputType, config: Optional[ConverterConfig] = None) -> Node:
    """Decode ``source`` into a fresh ``Node`` tree."""
    return Decoder(source, config).decode(Node())
