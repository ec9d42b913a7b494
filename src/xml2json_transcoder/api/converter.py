"""Converter facade: decode XML into a node tree, then encode it as JSON.

The converter owns nothing but its configuration. Every call builds its own
decoder, tree and encoder, so one ``Converter`` may serve several threads.
"""

import io
import time
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from ..shared.config import ConverterConfig
from ..shared.errors import ConversionError, TranscoderError
from ..shared.logging import get_logger
from ..serialization import Encoder
from ..tree import Decoder, Node

DECODE_STAGE = "decode xml"
ENCODE_STAGE = "encode json"

MS_PER_SECOND = 1000

# Type definitions for input data
SourceType = Union[bytes, str, Path, BinaryIO, TextIO]

# Failures wrapped into ConversionError; UnicodeError is a ValueError
_STAGE_ERRORS = (TranscoderError, OSError, ValueError)


class Converter:
    """Configured XML to JSON converter.

    Example:
        >>> converter = Converter(ConverterConfig.conventional())
        >>> converter.convert(b'<a id="1">x</a>')
        b'{"a":[{"#content":["x"],"-id":["1"]}]}'
    """

    def __init__(self, config: Optional[ConverterConfig] = None) -> None:
        self.config = config or ConverterConfig()
        self.logger = get_logger(__name__, self.config.correlation_id, "converter")

    def convert(self, source: SourceType) -> bytes:
        """Convert an XML document to JSON.

        Args:
            source: XML as bytes, str, a Path, or a readable binary or text stream

        Returns:
            The complete JSON document as UTF-8 bytes

        Raises:
            ConversionError: If decoding or encoding fails; ``stage`` is
                ``"decode xml"`` or ``"encode json"`` and ``cause`` holds the
                original exception
        """
        start_time = time.time()
        if isinstance(source, Path):
            root = self._decode_path(source)
        else:
            root = self._decode(source)

        buffer = io.BytesIO()
        try:
            Encoder(buffer, self.config).encode(root)
        except _STAGE_ERRORS as e:
            self._log_failure(ENCODE_STAGE, e)
            raise ConversionError(ENCODE_STAGE, e) from e

        output = buffer.getvalue()
        self.logger.debug(
            "Converted XML document",
            extra={
                "output_bytes": len(output),
                "processing_time_ms": (time.time() - start_time) * MS_PER_SECOND,
            }
        )
        return output

    def _decode(self, source: Union[bytes, str, BinaryIO, TextIO]) -> Node:
        try:
            return Decoder(source, self.config).decode(Node())
        except _STAGE_ERRORS as e:
            self._log_failure(DECODE_STAGE, e)
            raise ConversionError(DECODE_STAGE, e) from e

    def _decode_path(self, path: Path) -> Node:
        try:
            stream = path.open("rb")
        except OSError as e:
            self._log_failure(DECODE_STAGE, e)
            raise ConversionError(DECODE_STAGE, e) from e
        with stream:
            return self._decode(stream)

    def _log_failure(self, stage: str, error: BaseException) -> None:
        self.logger.debug(
            "Conversion failed",
            extra={"stage": stage, "error": str(error), "error_type": type(error).__name__}
        )


def convert(source: SourceType, config: Optional[ConverterConfig] = None) -> bytes:
    """Convert XML from bytes, str, a Path or a readable stream to JSON bytes."""
    return Converter(config).convert(source)


def convert_string(xml_string: str, config: Optional[ConverterConfig] = None) -> str:
    """Convert an XML string and return the JSON document as a string."""
    if not isinstance(xml_string, str):
        raise TypeError(f"Expected str, got {type(xml_string).__name__}")
    return Converter(config).convert(xml_string).decode("utf-8")


def convert_file(
    file_path: Union[str, Path],
    config: Optional[ConverterConfig] = None,
) -> bytes:
    """Convert the XML file at ``file_path`` to JSON bytes."""
    return Converter(config).convert(Path(file_path))
