"""Character stream over a byte or text source.

``CharacterStream`` is the recoding step in front of the tokenizer: it reads
the source in fixed size chunks, detects the charset from the first bytes
and hands out decoded text. Bytes are only held until they are decoded, so
the source is read in a single sequential pass.
"""

import codecs
import io
from pathlib import Path
from typing import BinaryIO, Optional, TextIO, Union

from ..shared.config import DEFAULT_CHUNK_SIZE
from ..shared.errors import CharsetError
from ..shared.logging import get_logger
from .encoding import (
    DETECTION_SAMPLE_SIZE,
    DetectionMethod,
    EncodingDetector,
    EncodingResult,
)

# Type definitions for input data
InputType = Union[bytes, str, BinaryIO, TextIO]


class CharacterStream:
    """Incrementally decoded view of an XML source.

    Args:
        source: Bytes, str or a readable binary or text stream
        chunk_size: Number of bytes (or characters) requested per read
        correlation_id: Optional correlation ID for log records
    """

    def __init__(
        self,
        source: InputType,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        correlation_id: Optional[str] = None,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if isinstance(source, bytes):
            source = io.BytesIO(source)
        elif isinstance(source, str):
            source = io.StringIO(source)
        elif not hasattr(source, "read"):
            raise TypeError(f"Cannot read XML from {type(source).__name__}")

        self._source = source
        self.chunk_size = chunk_size
        self.logger = get_logger(__name__, correlation_id, "character_stream")
        self.encoding: Optional[EncodingResult] = None
        self._decoder: Optional[codecs.IncrementalDecoder] = None
        self._exhausted = False
        self.bytes_read = 0

    @classmethod
    def from_path(cls, path: Union[str, Path], **kwargs) -> "CharacterStream":
        """Open ``path`` for binary reading; the caller closes ``stream.source``."""
        return cls(Path(path).open("rb"), **kwargs)

    @property
    def source(self) -> Union[BinaryIO, TextIO]:
        return self._source

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def read(self) -> str:
        """Return the next piece of decoded text, or ``""`` once the source is exhausted.

        Raises:
            CharsetError: If the charset is unknown or the bytes do not decode
            OSError: If reading the source fails
        """
        while not self._exhausted:
            chunk = self._source.read(self.chunk_size)
            if isinstance(chunk, str):
                if not chunk:
                    self._exhausted = True
                    return ""
                return chunk

            if self._decoder is None:
                chunk = self._start(chunk)
            else:
                self.bytes_read += len(chunk)

            text = self._decode(chunk, final=not chunk)
            if not chunk:
                self._exhausted = True
            if text:
                return text
        return ""

    def _start(self, chunk: bytes) -> bytes:
        """Gather enough bytes to detect the charset and set up the decoder."""
        sample = chunk
        while chunk and len(sample) < DETECTION_SAMPLE_SIZE:
            chunk = self._source.read(self.chunk_size)
            sample += chunk
        self.bytes_read += len(sample)

        self.encoding = EncodingDetector().detect(sample)
        self._decoder = codecs.getincrementaldecoder(self.encoding.encoding)("strict")
        self.logger.debug(
            "Detected input charset",
            extra={
                "encoding": self.encoding.encoding,
                "method": self.encoding.method.value,
                "declared": self.encoding.declared,
            }
        )
        if self.encoding.method is DetectionMethod.BOM:
            sample = sample[self.encoding.bom_length:]
        return sample

    def _decode(self, data: bytes, final: bool) -> str:
        try:
            return self._decoder.decode(data, final)
        except UnicodeDecodeError as e:
            raise CharsetError(
                f"Invalid {self.encoding.encoding} byte sequence near byte "
                f"{self.bytes_read - len(data) + e.start}"
            ) from e
