"""
Type Coercion Registry - Converts recognized strings to declared types.

The recognizer hands back every semantic value as a string. Each declared
argument carries a TypeTag, and this module owns the table that maps a tag
to its string -> value conversion.

Integer widths are represented with numpy scalar types so that handlers
can distinguish, for example, an Int32 overload from an Int64 overload by
exact type. FLOAT and DOUBLE both produce a builtin float; FLOAT values are
rounded to single precision and range checked.
"""

import re
import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


class TypeTag(Enum):
    """Abstract argument types that can be declared for a semantic key."""
    NONE = "none"
    BOOL = "bool"
    STRING = "string"
    INT32 = "int32"
    INT64 = "int64"
    UINT16 = "uint16"
    UINT32 = "uint32"
    UINT64 = "uint64"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    DATETIME = "datetime"

    @classmethod
    def parse(cls, name: str) -> "TypeTag":
        """
        Resolve a tag from its configured name (case-insensitive).

        Raises:
            ValueError: If the name is not a known tag
        """
        if isinstance(name, TypeTag):
            return name
        normalized = str(name).strip().lower()
        for tag in cls:
            if tag.value == normalized:
                return tag
        raise ValueError(
            f"Unknown type tag '{name}'. "
            f"Supported: {[t.name for t in cls]}"
        )


class CoercionError(Exception):
    """
    Raised when a recognized value cannot be converted to its declared type.

    Aborts the dispatch of the phrase event that carried the value.
    """

    def __init__(self, type_tag: TypeTag, raw: Any, key: Optional[str] = None, reason: str = ""):
        self.type_tag = type_tag
        self.raw = raw
        self.key = key
        self.reason = reason
        super().__init__(self._format())

    def _format(self) -> str:
        where = f" for key '{self.key}'" if self.key else ""
        message = f"Cannot coerce {self.raw!r} to {self.type_tag.name}{where}"
        if self.reason:
            message += f": {self.reason}"
        return message

    def with_key(self, key: str) -> "CoercionError":
        """Return a copy of this error that names the semantic key."""
        return CoercionError(self.type_tag, self.raw, key=key, reason=self.reason)


_INTEGER_RE = re.compile(r"^[+-]?\d+$")

_INTEGER_TYPES = {
    TypeTag.INT32: np.int32,
    TypeTag.INT64: np.int64,
    TypeTag.UINT16: np.uint16,
    TypeTag.UINT32: np.uint32,
    TypeTag.UINT64: np.uint64,
}


def _identity(raw: str) -> str:
    return raw


def _parse_bool(raw: str) -> bool:
    normalized = raw.strip().lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    raise ValueError("expected 'true' or 'false'")


def _integer_parser(dtype) -> Callable[[str], Any]:
    """Build a range-checked parser for a fixed-width integer type."""
    bounds = np.iinfo(dtype)

    def parse(raw: str):
        text = raw.strip()
        if not _INTEGER_RE.match(text):
            raise ValueError("not a base-10 integer")
        value = int(text)
        if value < bounds.min or value > bounds.max:
            raise ValueError(f"out of range [{bounds.min}, {bounds.max}]")
        return dtype(value)

    return parse


def _parse_float32(raw: str) -> float:
    value = float(raw.strip())
    with np.errstate(over="ignore"):
        single = np.float32(value)
    if np.isinf(single) and not np.isinf(value):
        raise ValueError("out of single precision range")
    return float(single)


def _parse_double(raw: str) -> float:
    return float(raw.strip())


def _parse_decimal(raw: str) -> Decimal:
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        raise ValueError("not a decimal literal")
    if not value.is_finite():
        raise ValueError("not a finite decimal")
    return value


def _parse_datetime(raw: str) -> datetime:
    return datetime.fromisoformat(raw.strip())


# Default conversion table: tag -> (parser, result type)
DEFAULT_CONVERSIONS: Dict[TypeTag, Tuple[Callable[[str], Any], type]] = {
    TypeTag.NONE: (_identity, str),
    TypeTag.STRING: (_identity, str),
    TypeTag.BOOL: (_parse_bool, bool),
    TypeTag.FLOAT: (_parse_float32, float),
    TypeTag.DOUBLE: (_parse_double, float),
    TypeTag.DECIMAL: (_parse_decimal, Decimal),
    TypeTag.DATETIME: (_parse_datetime, datetime),
}
for _tag, _dtype in _INTEGER_TYPES.items():
    DEFAULT_CONVERSIONS[_tag] = (_integer_parser(_dtype), _dtype)


class TypeCoercionRegistry:
    """
    Table of string -> value conversions keyed by TypeTag.

    A registry is built explicitly and handed to the binder; there is no
    process-wide instance. The table is fixed at construction.

    Example:
        registry = TypeCoercionRegistry()
        registry.coerce(TypeTag.FLOAT, "2.5")   # 2.5
        registry.coerce(TypeTag.INT32, "3")     # np.int32(3)
    """

    def __init__(
        self,
        overrides: Optional[Dict[TypeTag, Tuple[Callable[[str], Any], type]]] = None
    ):
        """
        Initialize the registry.

        Args:
            overrides: Optional replacement (parser, result type) pairs per tag
        """
        table = dict(DEFAULT_CONVERSIONS)
        if overrides:
            table.update(overrides)
        self._table = table

    def coerce(self, type_tag: TypeTag, raw: str) -> Any:
        """
        Convert a raw recognized string to the type declared by type_tag.

        Args:
            type_tag: Declared type of the value
            raw: String produced by the recognizer

        Returns:
            The converted value

        Raises:
            CoercionError: If raw cannot be parsed as type_tag
        """
        parser, _ = self._lookup(type_tag)
        if not isinstance(raw, str):
            raise CoercionError(type_tag, raw, reason="recognized values must be strings")
        try:
            return parser(raw)
        except (ValueError, TypeError, ArithmeticError) as e:
            raise CoercionError(type_tag, raw, reason=str(e)) from e

    def coerce_all(self, type_tag: TypeTag, raws) -> list:
        """Convert every raw value, preserving order."""
        return [self.coerce(type_tag, raw) for raw in raws]

    def python_type(self, type_tag: TypeTag) -> type:
        """Get the result type produced for a tag."""
        _, result_type = self._lookup(type_tag)
        return result_type

    def supports(self, type_tag: TypeTag) -> bool:
        return type_tag in self._table

    def _lookup(self, type_tag: TypeTag) -> Tuple[Callable[[str], Any], type]:
        try:
            return self._table[type_tag]
        except KeyError:
            raise CoercionError(type_tag, None, reason="no conversion registered") from None

    def __repr__(self) -> str:
        return f"TypeCoercionRegistry(tags={[t.name for t in self._table]})"


def default_registry() -> TypeCoercionRegistry:
    """Create a registry with the built-in conversions."""
    return TypeCoercionRegistry()
