"""Charset detection for XML byte input.

Detection runs on the first bytes of a document in a fixed order: byte order
mark, then the ``encoding`` pseudo-attribute of the XML declaration, then the
UTF-8 default. An encoding label that Python does not know is an error.
"""

import codecs
import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Dict, Optional

from ..shared.errors import CharsetError

DEFAULT_ENCODING = "utf-8"

# Bytes needed before detection can decide
DETECTION_SAMPLE_SIZE = 1024


class DetectionMethod(Enum):
    """Enumeration of encoding detection methods."""
    BOM = "bom"
    XML_DECLARATION = "xml_declaration"
    DEFAULT = "default"


@dataclass
class EncodingResult:
    """Result of encoding detection.

    Attributes:
        encoding: Python codec name the input is decoded with
        method: Detection method used
        bom_length: Number of leading bytes that belong to a byte order mark
        declared: Label exactly as written in the XML declaration, if any
    """
    encoding: str
    method: DetectionMethod
    bom_length: int = 0
    declared: Optional[str] = None

    @property
    def is_default(self) -> bool:
        """Check if no recoding away from UTF-8 is needed."""
        return codecs.lookup(self.encoding).name == DEFAULT_ENCODING


class BOMDetector:
    """Byte Order Mark (BOM) detection for all major encodings."""

    # Longest first so UTF-32 LE is not mistaken for UTF-16 LE
    BOM_PATTERNS: ClassVar[Dict[bytes, str]] = {
        b"\xff\xfe\x00\x00": "utf-32-le",
        b"\x00\x00\xfe\xff": "utf-32-be",
        b"\xef\xbb\xbf": "utf-8",
        b"\xff\xfe": "utf-16-le",
        b"\xfe\xff": "utf-16-be",
    }

    def detect(self, data: bytes) -> Optional[EncodingResult]:
        """Detect encoding based on BOM.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if BOM detected, None otherwise
        """
        if not data:
            return None

        for bom_bytes, encoding in self.BOM_PATTERNS.items():
            if data.startswith(bom_bytes):
                return EncodingResult(
                    encoding=encoding,
                    method=DetectionMethod.BOM,
                    bom_length=len(bom_bytes),
                )

        return None


class XMLDeclarationParser:
    """Parser for XML encoding declarations."""

    XML_DECLARATION_PATTERN = re.compile(
        rb'^\s*<\?xml\s[^>]*?encoding\s*=\s*["\']([^"\']+)["\']',
        re.IGNORECASE
    )

    # Labels whose Python codec name differs
    ALIASES: ClassVar[Dict[str, str]] = {
        "utf8": "utf-8",
        "utf16": "utf-16",
        "utf32": "utf-32",
        # Strict ISO-8859-1: bytes 0x80-0x9F stay C1 controls
        "iso-8859-1": "latin-1",
        "iso8859-1": "latin-1",
        "windows-1252": "cp1252",
        "x-sjis": "shift_jis",
    }

    def parse_declaration(self, data: bytes) -> Optional[EncodingResult]:
        """Parse encoding from XML declaration.

        Args:
            data: Byte data to analyze

        Returns:
            EncodingResult if a declaration names an encoding, None otherwise

        Raises:
            CharsetError: If the declared encoding is not supported
        """
        if not data:
            return None

        match = self.XML_DECLARATION_PATTERN.match(data[:DETECTION_SAMPLE_SIZE])
        if not match:
            return None

        declared = match.group(1).decode("ascii", errors="replace")
        normalized = self.normalize(declared)
        if not self._is_valid_encoding(normalized):
            raise CharsetError(f"Unsupported charset: {declared}")

        return EncodingResult(
            encoding=normalized,
            method=DetectionMethod.XML_DECLARATION,
            declared=declared,
        )

    def normalize(self, label: str) -> str:
        """Normalize encoding label to a codec name."""
        label = label.strip().lower()
        return self.ALIASES.get(label, label)

    def _is_valid_encoding(self, encoding: str) -> bool:
        """Check if encoding is supported by Python codecs."""
        try:
            codecs.lookup(encoding)
            # Bytes-to-bytes codecs like base64 refuse str.encode
            "<".encode(encoding)
        except (LookupError, UnicodeError):
            return False
        return True


class EncodingDetector:
    """Multi-stage encoding detector: BOM, XML declaration, then UTF-8."""

    def __init__(self) -> None:
        self.bom_detector = BOMDetector()
        self.declaration_parser = XMLDeclarationParser()

    def detect(self, data: bytes) -> EncodingResult:
        """Detect the encoding of a document from its first bytes.

        A BOM wins over a declaration.
        """
        result = self.bom_detector.detect(data)
        if result is not None:
            return result

        result = self.declaration_parser.parse_declaration(data)
        if result is not None:
            return result

        return EncodingResult(encoding=DEFAULT_ENCODING, method=DetectionMethod.DEFAULT)
