"""Strict streaming XML tokenizer.

This module converts the decoded character stream into XML tokens: start and
end elements, character data, comments, processing instructions and
directives. Text is pulled from the ``CharacterStream`` on demand, so only
the construct being scanned is buffered.

The tokenizer checks well-formedness (tag balance, names, quoting,
references, legal characters) and raises ``XMLSyntaxError`` on the first
violation. It tolerates several top-level elements and text around them,
which lets document fragments through.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Iterator, List, Optional, Tuple

from ..character.stream import CharacterStream, InputType
from ..character.transformation import XML10Validator
from ..shared.errors import XMLSyntaxError

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XMLNS_PREFIX = "xmlns"

PREDEFINED_ENTITIES: Dict[str, str] = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "apos": "'",
    "quot": '"',
}

SUPPORTED_XML_VERSION = "1.0"

# Consumed characters kept in the buffer before it is compacted
COMPACT_THRESHOLD = 64 * 1024

_SPACE_CHARS = " \t\r\n"
_ENTITY_PATTERN = re.compile(r"&(#[0-9]+|#x[0-9a-fA-F]+|[^\W\d][\w.\-]*);")
_VERSION_PATTERN = re.compile(r"""version\s*=\s*["']([^"']*)["']""")

NamespaceScope = Dict[str, str]


class TokenType(Enum):
    """XML token types produced by the tokenizer."""

    START_ELEMENT = auto()           # <name attr="value"> or <name/>
    END_ELEMENT = auto()             # </name>, also synthesized for <name/>
    CHAR_DATA = auto()               # Text and CDATA sections
    COMMENT = auto()                 # <!-- ... -->
    PROCESSING_INSTRUCTION = auto()  # <?target ...?>
    DIRECTIVE = auto()               # <!DOCTYPE ...> and other <!...> markup


@dataclass(frozen=True)
class QName:
    """Namespace qualified name.

    ``space`` is the namespace URI bound to the prefix, ``xmlns`` for
    namespace declarations, or the raw prefix when it is not bound.
    """

    space: str
    local: str

    def __str__(self) -> str:
        if not self.space:
            return self.local
        return f"{{{self.space}}}{self.local}"


@dataclass(frozen=True)
class Attribute:
    """Attribute of a start element with its reference-decoded value."""

    name: QName
    value: str


@dataclass(frozen=True)
class TokenPosition:
    """Position information for XML tokens."""

    line: int
    column: int
    offset: int

    def __post_init__(self) -> None:
        """Validate position values."""
        if self.line < 1:
            raise ValueError("Line number must be >= 1")
        if self.column < 1:
            raise ValueError("Column number must be >= 1")
        if self.offset < 0:
            raise ValueError("Offset must be >= 0")


@dataclass
class Token:
    """Represents a single XML token.

    ``value`` holds the text of character data, comments, processing
    instructions and directives, and the qualified name as written for
    elements.
    """

    type: TokenType
    value: str
    position: TokenPosition
    name: Optional[QName] = None
    attributes: List[Attribute] = field(default_factory=list)


def _is_name_start(char: str) -> bool:
    return char.isalpha() or char in "_:"


def _is_name_char(char: str) -> bool:
    if char.isalnum() or char in "_:.-·":
        return True
    return unicodedata.category(char) in ("Mn", "Mc")


def _normalize_newlines(text: str) -> str:
    if "\r" not in text:
        return text
    return text.replace("\r\n", "\n").replace("\r", "\n")


class XMLTokenizer:
    """Pull tokenizer over a character stream.

    Call ``next_token`` until it returns None, or iterate the tokenizer.
    A clean end of input after all elements are closed ends the token
    sequence; anything else raises ``XMLSyntaxError``.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self._stream = stream
        self._buffer = ""
        self._pos = 0
        self._line = 1
        self._column = 1
        self._offset = 0

        self._open: List[str] = []
        self._scopes: List[NamespaceScope] = [{}]
        self._pending: Optional[Token] = None
        self.token_count = 0

    @property
    def depth(self) -> int:
        """Number of currently open elements."""
        return len(self._open)

    def __iter__(self) -> Iterator[Token]:
        while True:
            token = self.next_token()
            if token is None:
                return
            yield token

    def next_token(self) -> Optional[Token]:
        """Return the next token, or None at a clean end of input."""
        token = self._read_token()
        if token is not None:
            self.token_count += 1
        return token

    def _read_token(self) -> Optional[Token]:
        if self._pending is not None:
            token, self._pending = self._pending, None
            return token

        if not self._ensure(1):
            if self._open:
                raise self._error(f"unexpected EOF: element <{self._open[-1]}> is not closed")
            return None

        position = self._position()
        if self._buffer[self._pos] != "<":
            return self._read_text(position)
        if self._startswith("</"):
            return self._read_end_tag(position)
        if self._startswith("<?"):
            return self._read_processing_instruction(position)
        if self._startswith("<!--"):
            return self._read_comment(position)
        if self._startswith("<![CDATA["):
            return self._read_cdata(position)
        if self._startswith("<!"):
            return self._read_directive(position)
        return self._read_start_tag(position)

    # Buffer management

    def _fill(self) -> bool:
        """Append the next decoded chunk to the buffer; False at end of input."""
        text = self._stream.read()
        if not text:
            return False
        if self._pos >= COMPACT_THRESHOLD:
            self._buffer = self._buffer[self._pos:]
            self._pos = 0
        self._buffer += text
        return True

    def _ensure(self, count: int) -> bool:
        """Make at least ``count`` unconsumed characters available."""
        while len(self._buffer) - self._pos < count:
            if not self._fill():
                return False
        return True

    def _startswith(self, prefix: str) -> bool:
        return self._ensure(len(prefix)) and self._buffer.startswith(prefix, self._pos)

    def _peek(self) -> str:
        if not self._ensure(1):
            return ""
        return self._buffer[self._pos]

    def _find(self, needle: str) -> int:
        """Distance from the current position to ``needle``, or -1 if input ends first."""
        searched = 0
        while True:
            index = self._buffer.find(needle, self._pos + searched)
            if index >= 0:
                return index - self._pos
            searched = max(0, len(self._buffer) - self._pos - len(needle) + 1)
            if not self._fill():
                return -1

    def _consume(self, count: int) -> str:
        segment = self._buffer[self._pos:self._pos + count]
        self._pos += len(segment)
        self._offset += len(segment)

        newlines = segment.count("\n")
        if newlines:
            self._line += newlines
            self._column = len(segment) - segment.rfind("\n")
        else:
            self._column += len(segment)
        return segment

    def _skip_space(self) -> bool:
        skipped = False
        while True:
            char = self._peek()
            if not char or char not in _SPACE_CHARS:
                return skipped
            self._consume(1)
            skipped = True

    def _position(self) -> TokenPosition:
        return TokenPosition(self._line, self._column, self._offset)

    def _error(self, message: str, position: Optional[TokenPosition] = None) -> XMLSyntaxError:
        if position is None:
            position = self._position()
        return XMLSyntaxError(message, position.line, position.column)

    # Scanners

    def _read_name(self) -> str:
        if not self._ensure(1):
            raise self._error("unexpected EOF: expected a name")
        if not _is_name_start(self._buffer[self._pos]):
            raise self._error(f"invalid XML name starting with {self._buffer[self._pos]!r}")

        length = 1
        while True:
            if self._pos + length >= len(self._buffer):
                if not self._fill():
                    break
                continue
            if not _is_name_char(self._buffer[self._pos + length]):
                break
            length += 1
        return self._consume(length)

    def _read_text(self, position: TokenPosition) -> Token:
        length = self._find("<")
        if length < 0:
            length = len(self._buffer) - self._pos
        raw = self._consume(length)
        return Token(TokenType.CHAR_DATA, self._decode_text(raw, position), position)

    def _read_cdata(self, position: TokenPosition) -> Token:
        self._consume(len("<![CDATA["))
        length = self._find("]]>")
        if length < 0:
            raise self._error("unexpected EOF in CDATA section", position)
        raw = self._consume(length)
        self._consume(len("]]>"))
        self._check_chars(raw, position)
        return Token(TokenType.CHAR_DATA, _normalize_newlines(raw), position)

    def _read_comment(self, position: TokenPosition) -> Token:
        self._consume(len("<!--"))
        length = self._find("--")
        if length < 0:
            raise self._error("unexpected EOF in comment", position)
        content = self._consume(length)
        self._consume(len("--"))
        if not self._startswith(">"):
            raise self._error('invalid sequence "--" not allowed in comments', position)
        self._consume(1)
        return Token(TokenType.COMMENT, _normalize_newlines(content), position)

    def _read_processing_instruction(self, position: TokenPosition) -> Token:
        self._consume(len("<?"))
        target = self._read_name()
        length = self._find("?>")
        if length < 0:
            raise self._error("unexpected EOF in processing instruction", position)
        content = self._consume(length)
        self._consume(len("?>"))
        if content and content[0] not in _SPACE_CHARS:
            raise self._error(f"invalid processing instruction <?{target}{content[:10]}", position)

        if target == "xml":
            match = _VERSION_PATTERN.search(content)
            if match and match.group(1) != SUPPORTED_XML_VERSION:
                raise self._error(
                    f"unsupported version {match.group(1)!r}; only version "
                    f"{SUPPORTED_XML_VERSION} is supported",
                    position
                )

        return Token(
            TokenType.PROCESSING_INSTRUCTION,
            _normalize_newlines(content.lstrip(_SPACE_CHARS)),
            position,
            name=QName("", target),
        )

    def _read_directive(self, position: TokenPosition) -> Token:
        self._consume(len("<!"))
        depth = 0
        quote: Optional[str] = None
        length = 0
        while True:
            if self._pos + length >= len(self._buffer) and not self._fill():
                raise self._error("unexpected EOF in directive", position)
            char = self._buffer[self._pos + length]
            length += 1
            if quote is not None:
                if char == quote:
                    quote = None
            elif char in "'\"":
                quote = char
            elif char == "<":
                depth += 1
            elif char == ">":
                if depth == 0:
                    break
                depth -= 1
        raw = self._consume(length)
        return Token(TokenType.DIRECTIVE, _normalize_newlines(raw[:-1]), position)

    def _read_end_tag(self, position: TokenPosition) -> Token:
        self._consume(len("</"))
        raw_name = self._read_name()
        self._skip_space()
        if not self._startswith(">"):
            raise self._error(f"invalid characters between </{raw_name} and >", position)
        self._consume(1)

        if not self._open:
            raise self._error(f"unexpected end element </{raw_name}>", position)
        if raw_name != self._open[-1]:
            raise self._error(f"element <{self._open[-1]}> closed by </{raw_name}>", position)

        name = self._resolve(raw_name, self._scopes[-1], is_attribute=False)
        self._open.pop()
        self._scopes.pop()
        return Token(TokenType.END_ELEMENT, raw_name, position, name=name)

    def _read_start_tag(self, position: TokenPosition) -> Token:
        self._consume(1)
        raw_name = self._read_name()

        raw_attributes: List[Tuple[str, str]] = []
        seen = set()
        while True:
            had_space = self._skip_space()
            char = self._peek()
            if not char:
                raise self._error(f"unexpected EOF in element <{raw_name}>", position)
            if char == "/":
                self._consume(1)
                if not self._startswith(">"):
                    raise self._error(f"expected /> in element <{raw_name}>")
                self._consume(1)
                empty = True
                break
            if char == ">":
                self._consume(1)
                empty = False
                break
            if not had_space:
                raise self._error(f"expected whitespace before attribute in element <{raw_name}>")

            attribute_name = self._read_name()
            self._skip_space()
            if not self._startswith("="):
                raise self._error(f"attribute name without = in element <{raw_name}>")
            self._consume(1)
            self._skip_space()
            value = self._read_attribute_value(raw_name)
            if attribute_name in seen:
                raise self._error(f"duplicate attribute {attribute_name} in element <{raw_name}>")
            seen.add(attribute_name)
            raw_attributes.append((attribute_name, value))

        scope = self._open_scope(raw_attributes)
        name = self._resolve(raw_name, scope, is_attribute=False)
        attributes = [
            Attribute(self._resolve(attribute_name, scope, is_attribute=True), value)
            for attribute_name, value in raw_attributes
        ]
        token = Token(TokenType.START_ELEMENT, raw_name, position, name=name, attributes=attributes)

        if empty:
            self._pending = Token(TokenType.END_ELEMENT, raw_name, position, name=name)
        else:
            self._open.append(raw_name)
            self._scopes.append(scope)
        return token

    def _read_attribute_value(self, element: str) -> str:
        position = self._position()
        quote = self._peek()
        if quote not in ("'", '"'):
            raise self._error(f"unquoted or missing attribute value in element <{element}>")
        self._consume(1)
        length = self._find(quote)
        if length < 0:
            raise self._error(f"unexpected EOF in attribute value of element <{element}>", position)
        raw = self._consume(length)
        self._consume(1)
        if "<" in raw:
            raise self._error(f"unescaped < inside attribute value of element <{element}>", position)
        return self._decode_text(raw, position)

    # Text decoding and namespaces

    def _check_chars(self, text: str, position: TokenPosition) -> None:
        index = XML10Validator.first_invalid(text)
        if index >= 0:
            raise self._error(f"illegal character code U+{ord(text[index]):04X}", position)

    def _decode_text(self, raw: str, position: TokenPosition) -> str:
        """Normalise line endings and replace character and entity references."""
        self._check_chars(raw, position)
        text = _normalize_newlines(raw)
        if "&" not in text:
            return text

        parts = []
        index = 0
        while True:
            amp = text.find("&", index)
            if amp < 0:
                parts.append(text[index:])
                break
            parts.append(text[index:amp])
            match = _ENTITY_PATTERN.match(text, amp)
            if match is None:
                raise self._error(f"invalid character entity {text[amp:amp + 12]!r}", position)
            parts.append(self._resolve_entity(match.group(1), position))
            index = match.end()
        return "".join(parts)

    def _resolve_entity(self, reference: str, position: TokenPosition) -> str:
        if reference.startswith("#"):
            if reference.startswith("#x"):
                code = int(reference[2:], 16)
            else:
                code = int(reference[1:])
            if code > 0x10FFFF or not XML10Validator.is_valid_xml_char(code):
                raise self._error(f"invalid character reference &{reference};", position)
            return chr(code)

        try:
            return PREDEFINED_ENTITIES[reference]
        except KeyError:
            raise self._error(f"invalid character entity &{reference};", position) from None

    def _open_scope(self, raw_attributes: List[Tuple[str, str]]) -> NamespaceScope:
        """Namespace bindings in effect inside an element with these attributes."""
        bindings = {}
        for attribute_name, value in raw_attributes:
            if attribute_name == XMLNS_PREFIX:
                bindings[""] = value
            elif attribute_name.startswith(XMLNS_PREFIX + ":"):
                bindings[attribute_name[len(XMLNS_PREFIX) + 1:]] = value

        parent = self._scopes[-1]
        if not bindings:
            return parent
        return {**parent, **bindings}

    @staticmethod
    def _resolve(raw_name: str, scope: NamespaceScope, is_attribute: bool) -> QName:
        prefix, _, local = raw_name.partition(":")
        if not prefix or not local:
            # Unprefixed attributes are in no namespace
            space = "" if is_attribute else scope.get("", "")
            return QName(space, raw_name)
        if prefix == XMLNS_PREFIX:
            return QName(XMLNS_PREFIX, local)
        if prefix == "xml":
            return QName(XML_NAMESPACE, local)
        return QName(scope.get(prefix, prefix), local)


def tokenize(source: InputType, chunk_size: Optional[int] = None) -> List[Token]:
    """Tokenize a whole document, mostly useful for inspection and tests."""
    if isinstance(source, CharacterStream):
        stream = source
    elif chunk_size is None:
        stream = CharacterStream(source)
    else:
        stream = CharacterStream(source, chunk_size=chunk_size)
    return list(XMLTokenizer(stream))
