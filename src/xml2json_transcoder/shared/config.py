"""Configuration for XML to JSON conversion.

A single immutable ``ConverterConfig`` describes both halves of a
conversion. The decoder reads the attribute prefix and the exclusion list,
the encoder reads the rest. Instances are frozen so one configuration can be
shared by conversions running on different threads.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, FrozenSet, Optional

from .types import JSType, TypeConverter

DEFAULT_CHUNK_SIZE = 8192


@dataclass(frozen=True)
class ConverterConfig:
    """Options shared by the decoder and the encoder.

    Attributes:
        attribute_prefix: Prepended to attribute names to form their JSON keys
        content_prefix: Mixed content text is emitted under
            ``content_prefix + "content"``; empty drops such text
        excluded_attributes: Attribute namespaces or local names dropped while decoding
        force_all_arrays: Emit every child group as an array
        force_array_keys: Keys (with or without attribute prefix) always emitted as arrays
        scalar_singletons: Collapse single element groups to bare values unless forced
        type_kinds: Kinds written as unquoted literals; None disables typing
        chunk_size: Number of bytes read from the source per read call
        correlation_id: Optional correlation ID attached to log records
    """

    attribute_prefix: str = ""
    content_prefix: str = ""
    excluded_attributes: FrozenSet[str] = field(default_factory=frozenset)
    force_all_arrays: bool = False
    force_array_keys: FrozenSet[str] = field(default_factory=frozenset)
    scalar_singletons: bool = False
    type_kinds: Optional[FrozenSet[JSType]] = None
    chunk_size: int = DEFAULT_CHUNK_SIZE
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate and normalise configuration."""
        if self.chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        if not isinstance(self.attribute_prefix, str):
            raise TypeError("attribute_prefix must be a string")
        if not isinstance(self.content_prefix, str):
            raise TypeError("content_prefix must be a string")
        # frozen: normalise collections through object.__setattr__
        object.__setattr__(self, "excluded_attributes", frozenset(self.excluded_attributes))
        object.__setattr__(self, "force_array_keys", frozenset(self.force_array_keys))
        if self.type_kinds is not None:
            object.__setattr__(self, "type_kinds", frozenset(self.type_kinds))

    @property
    def content_key(self) -> str:
        """JSON key of mixed content text, empty when such text is dropped."""
        if not self.content_prefix:
            return ""
        return self.content_prefix + "content"

    @property
    def type_converter(self) -> Optional[TypeConverter]:
        if self.type_kinds is None:
            return None
        return TypeConverter(self.type_kinds)

    @classmethod
    def default(cls) -> "ConverterConfig":
        """Create configuration with no prefixes and no typing."""
        return cls()

    @classmethod
    def conventional(cls) -> "ConverterConfig":
        """Create configuration using the common ``-`` attribute and ``#`` content prefixes."""
        return cls(attribute_prefix="-", content_prefix="#")

    @classmethod
    def builder(cls) -> "ConverterConfigBuilder":
        return ConverterConfigBuilder()

    def evolve(self, **changes: Any) -> "ConverterConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConverterConfig":
        """Create configuration from its JSON friendly form.

        Unknown keys raise ``ValueError``. ``type_kinds`` is a list of kind
        names such as ``["int", "bool"]``.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(data)
        for key in ("excluded_attributes", "force_array_keys"):
            if isinstance(values.get(key), str):
                values[key] = [values[key]]
            if key in values:
                values[key] = frozenset(values[key])
        if values.get("type_kinds") is not None:
            values["type_kinds"] = frozenset(
                JSType.from_name(name) for name in values["type_kinds"]
            )
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        """Dump configuration to a JSON friendly dictionary."""
        return {
            "attribute_prefix": self.attribute_prefix,
            "content_prefix": self.content_prefix,
            "excluded_attributes": sorted(self.excluded_attributes),
            "force_all_arrays": self.force_all_arrays,
            "force_array_keys": sorted(self.force_array_keys),
            "scalar_singletons": self.scalar_singletons,
            "type_kinds": (
                None if self.type_kinds is None
                else sorted(kind.value for kind in self.type_kinds)
            ),
            "chunk_size": self.chunk_size,
            "correlation_id": self.correlation_id,
        }


class ConverterConfigBuilder:
    """Fluent assembly of a ``ConverterConfig``.

    Example:
        >>> config = (ConverterConfig.builder()
        ...           .with_attribute_prefix("-")
        ...           .with_content_prefix("#")
        ...           .with_type_converter(JSType.INT, JSType.BOOL)
        ...           .build())
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._excluded: set = set()
        self._array_keys: set = set()

    def with_attribute_prefix(self, prefix: str) -> "ConverterConfigBuilder":
        self._values["attribute_prefix"] = prefix
        return self

    def with_content_prefix(self, prefix: str) -> "ConverterConfigBuilder":
        self._values["content_prefix"] = prefix
        return self

    def exclude_attributes(self, *names: str) -> "ConverterConfigBuilder":
        """Drop attributes whose namespace or local name is listed."""
        self._excluded.update(names)
        return self

    def force_all_arrays(self) -> "ConverterConfigBuilder":
        self._values["force_all_arrays"] = True
        return self

    def force_arrays(self, *keys: str) -> "ConverterConfigBuilder":
        """Always emit the listed keys as arrays."""
        self._array_keys.update(keys)
        return self

    def scalar_singletons(self, enabled: bool = True) -> "ConverterConfigBuilder":
        self._values["scalar_singletons"] = enabled
        return self

    def with_type_converter(self, *kinds: JSType) -> "ConverterConfigBuilder":
        """Write leaves of the listed kinds as unquoted JSON literals."""
        self._values["type_kinds"] = frozenset(kinds)
        return self

    def with_chunk_size(self, chunk_size: int) -> "ConverterConfigBuilder":
        self._values["chunk_size"] = chunk_size
        return self

    def with_correlation_id(self, correlation_id: Optional[str]) -> "ConverterConfigBuilder":
        self._values["correlation_id"] = correlation_id
        return self

    def build(self) -> ConverterConfig:
        return ConverterConfig(
            excluded_attributes=frozenset(self._excluded),
            force_array_keys=frozenset(self._array_keys),
            **self._values,
        )

