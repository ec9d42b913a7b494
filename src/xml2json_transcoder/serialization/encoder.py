"""JSON serialization of decoded node trees.

The ``Encoder`` walks a ``Node`` tree with an explicit stack and writes one JSON
document. Child groups become arrays so that a tag occurring once has the
same shape as a repeated one; the scalar baseline and the array forcing
options of ``ConverterConfig`` adjust that per key.
"""

import io
from typing import BinaryIO, List, Optional, Union

from ..shared.config import ConverterConfig
from ..shared.errors import EncodeError
from ..shared.logging import get_logger
from ..shared.types import TypeConverter, quote
from ..tree.node import Node

OUTPUT_ENCODING = "utf-8"


class Encoder:
    """Writes a ``Node`` tree as UTF-8 JSON to a binary writer.

    Args:
        writer: Binary stream receiving the document
        config: Converter configuration; prefixes, array forcing and typing
            are read from it
    """

    def __init__(self, writer: BinaryIO, config: Optional[ConverterConfig] = None) -> None:
        self.writer = writer
        self.config = config or ConverterConfig()
        self.type_converter: Optional[TypeConverter] = self.config.type_converter
        self.logger = get_logger(__name__, self.config.correlation_id, "encoder")

    def encode(self, node: Optional[Node]) -> None:
        """Write ``node`` as a JSON document; None writes nothing.

        The document is assembled in memory first, so a failure leaves the
        writer untouched.

        Raises:
            EncodeError: If a value cannot be represented in UTF-8 JSON
        """
        if node is None:
            return

        parts: List[str] = []
        self._format(node, parts)
        try:
            data = "".join(parts).encode(OUTPUT_ENCODING)
        except UnicodeEncodeError as e:
            raise EncodeError(
                f"Cannot encode {e.object[e.start:e.end]!r} as {OUTPUT_ENCODING}"
            ) from e

        self.writer.write(data)
        self.logger.debug("Encoded JSON document", extra={"bytes": len(data)})

    def _format(self, node: Node, parts: List[str]) -> None:
        # Pending output: literal JSON fragments and nodes still to format
        pending: List[Union[str, Node]] = [node]
        while pending:
            item = pending.pop()
            if isinstance(item, str):
                parts.append(item)
            elif not item.children:
                parts.append(self._format_value(item.text))
            else:
                pending.extend(reversed(self._object_items(item)))

    def _object_items(self, node: Node) -> List[Union[str, Node]]:
        items: List[Union[str, Node]] = ["{"]
        content_key = self.config.content_key
        if node.text and content_key:
            value = self._format_value(node.text)
            if self._as_array(content_key, 1):
                value = f"[{value}]"
            items.append(f"{quote(content_key)}:{value}")

        for name, group in node.children.items():
            if len(items) > 1:
                items.append(",")
            items.append(f"{quote(name)}:")
            self._group_items(name, group, items)
        items.append("}")
        return items

    def _group_items(self, name: str, group: List[Node], items: List[Union[str, Node]]) -> None:
        if not self._as_array(name, len(group)):
            items.append(group[0])
            return

        items.append("[")
        for index, child in enumerate(group):
            if index:
                items.append(",")
            items.append(child)
        items.append("]")

    def _as_array(self, name: str, size: int) -> bool:
        """Decide whether a child group called ``name`` is written as an array."""
        config = self.config
        if size != 1 or not config.scalar_singletons or config.force_all_arrays:
            return True
        if name in config.force_array_keys:
            return True
        prefix = config.attribute_prefix
        return bool(prefix) and name.startswith(prefix) and name[len(prefix):] in config.force_array_keys

    def _format_value(self, text: str) -> str:
        if self.type_converter is None:
            return quote(text)
        return self.type_converter.to_json(text)


def encode(node: Optional[Node], config: Optional[ConverterConfig] = None) -> bytes:
    """Serialize ``node`` to JSON bytes; None gives an empty result."""
    buffer = io.BytesIO()
    Encoder(buffer, config).encode(node)
    return buffer.getvalue()
