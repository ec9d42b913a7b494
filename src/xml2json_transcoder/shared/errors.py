"""Exception hierarchy for XML to JSON transcoding.

Nothing is recovered internally: the first failure aborts the conversion
and reaches the caller wrapped in a ``ConversionError`` naming the stage.
"""

from typing import Optional


class TranscoderError(Exception):
    """Base class for every error raised by this package."""


class XMLSyntaxError(TranscoderError):
    """The XML input is not well formed."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.line is None:
            return f"XML syntax error: {self.message}"
        return f"XML syntax error on line {self.line}, column {self.column}: {self.message}"


class CharsetError(TranscoderError):
    """The input declares an unknown charset or holds bytes invalid for it."""


class EncodeError(TranscoderError):
    """A node tree could not be serialized to JSON."""


class ConversionError(TranscoderError):
    """A conversion failed; ``stage`` names where and ``cause`` holds why."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}")
