"""
Logical type descriptors for gateway result columns.

Each descriptor knows how to render itself back to a type string and how to
convert a decoded JSON value into its native Python representation (the
"default conversion"). Conversions raise ``TypeError`` when the JSON value has
the wrong shape and ``ValueError`` when it has the right shape but an invalid
content; callers translate those into decode errors.
"""
from __future__ import annotations

import base64
import binascii
import dataclasses
import datetime as dt
import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from gateway_results.row import Row

MAX_LENGTH = 2147483647

_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)
_TIME_RE = re.compile(r"(\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,9}))?)?", re.ASCII)


class TypeRoot(str, Enum):
    """Root kinds of the supported logical types."""
    BOOLEAN = "BOOLEAN"
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    INTEGER = "INT"
    BIGINT = "BIGINT"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    DECIMAL = "DECIMAL"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    ARRAY = "ARRAY"
    MULTISET = "MULTISET"
    MAP = "MAP"
    ROW = "ROW"
    NULL = "NULL"


INTEGER_ROOTS = {TypeRoot.TINYINT, TypeRoot.SMALLINT, TypeRoot.INTEGER, TypeRoot.BIGINT}
FLOATING_ROOTS = {TypeRoot.FLOAT, TypeRoot.DOUBLE}
CHARACTER_ROOTS = {TypeRoot.CHAR, TypeRoot.VARCHAR}
BINARY_ROOTS = {TypeRoot.BINARY, TypeRoot.VARBINARY}
LENGTH_ROOTS = CHARACTER_ROOTS | BINARY_ROOTS


def _json_kind(value: Any) -> str:
    """Names the JSON shape of an already decoded value, for error messages."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def parse_iso_date(text: str) -> dt.date:
    """Parses an ISO-8601 calendar date such as ``2024-03-15``."""
    match = _DATE_RE.fullmatch(text)
    if not match:
        raise ValueError(f"{text!r} is not an ISO-8601 date")
    year, month, day = (int(part) for part in match.groups())
    return dt.date(year, month, day)


def parse_iso_time(text: str) -> dt.time:
    """Parses an ISO-8601 time of day such as ``10:30``, ``10:30:00`` or ``10:30:00.123456789``.

    Fractions beyond microseconds are truncated.
    """
    match = _TIME_RE.fullmatch(text)
    if not match:
        raise ValueError(f"{text!r} is not an ISO-8601 time")
    hour, minute, second, fraction = match.groups()
    micros = int(fraction[:6].ljust(6, "0")) if fraction else 0
    return dt.time(int(hour), int(minute), int(second or 0), micros)


def parse_iso_timestamp(text: str) -> dt.datetime:
    """Parses an ISO-8601 local date-time such as ``2024-03-15T10:30:00``."""
    date_part, sep, time_part = text.partition("T")
    if not sep:
        raise ValueError(f"{text!r} is not an ISO-8601 local date-time")
    return dt.datetime.combine(parse_iso_date(date_part), parse_iso_time(time_part))


@dataclasses.dataclass(frozen=True)
class LogicalType:
    """Base class of all type descriptors."""

    nullable: bool = dataclasses.field(default=True, kw_only=True)

    @property
    def root(self) -> TypeRoot:
        raise NotImplementedError

    def to_native(self, value: Any) -> Any:
        """Converts a non-null decoded JSON value to this type's native representation."""
        raise NotImplementedError

    def key_to_native(self, key: str) -> Any:
        """Converts a JSON object key (always a string) when this type is used as a map key."""
        return self.to_native(key)

    def _summary(self) -> str:
        return self.root.value

    def as_summary_string(self) -> str:
        text = self._summary()
        return text if self.nullable else f"{text} NOT NULL"

    def __str__(self) -> str:
        return self.as_summary_string()

    def _mismatch(self, value: Any) -> TypeError:
        return TypeError(f"Cannot convert JSON {_json_kind(value)} to {self.as_summary_string()}")


def _convert_nullable(logical_type: LogicalType, value: Any) -> Any:
    return None if value is None else logical_type.to_native(value)


@dataclasses.dataclass(frozen=True)
class AtomicType(LogicalType):
    """Scalar types whose conversion depends only on the root kind."""

    type_root: TypeRoot
    length: Optional[int] = None

    @property
    def root(self) -> TypeRoot:
        return self.type_root

    def _summary(self) -> str:
        if self.type_root is TypeRoot.VARCHAR and self.length == MAX_LENGTH:
            return "STRING"
        if self.type_root is TypeRoot.VARBINARY and self.length == MAX_LENGTH:
            return "BYTES"
        if self.type_root in LENGTH_ROOTS and self.length is not None:
            return f"{self.type_root.value}({self.length})"
        return self.type_root.value

    def to_native(self, value: Any) -> Any:
        root = self.type_root
        if root is TypeRoot.BOOLEAN:
            if isinstance(value, bool):
                return value
        elif root in INTEGER_ROOTS:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        elif root in FLOATING_ROOTS:
            if _is_number(value):
                try:
                    return float(value)
                except OverflowError as exc:
                    raise ValueError(f"number is out of range for {self.as_summary_string()}") from exc
        elif root in CHARACTER_ROOTS:
            if isinstance(value, str):
                return value
        elif root in BINARY_ROOTS:
            if isinstance(value, str):
                try:
                    return base64.b64decode(value, validate=True)
                except binascii.Error as exc:
                    raise ValueError(f"{value!r} is not valid base64") from exc
        elif root is TypeRoot.NULL:
            if value is None:
                return None
        raise self._mismatch(value)

    def key_to_native(self, key: str) -> Any:
        root = self.type_root
        if root is TypeRoot.BOOLEAN:
            lowered = key.lower()
            if lowered not in ("true", "false"):
                raise ValueError(f"{key!r} is not a boolean map key")
            return lowered == "true"
        if root in INTEGER_ROOTS:
            return int(key)
        if root in FLOATING_ROOTS:
            return float(key)
        return self.to_native(key)


@dataclasses.dataclass(frozen=True)
class DecimalType(LogicalType):
    precision: int = 10
    scale: int = 0

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.DECIMAL

    def _summary(self) -> str:
        return f"DECIMAL({self.precision}, {self.scale})"

    def to_native(self, value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return value
        if _is_number(value):
            return Decimal(str(value))
        if isinstance(value, str):
            try:
                return Decimal(value)
            except InvalidOperation as exc:
                raise ValueError(f"{value!r} is not a decimal number") from exc
        raise self._mismatch(value)


@dataclasses.dataclass(frozen=True)
class DateType(LogicalType):
    @property
    def root(self) -> TypeRoot:
        return TypeRoot.DATE

    def to_native(self, value: Any) -> dt.date:
        if not isinstance(value, str):
            raise self._mismatch(value)
        return parse_iso_date(value)


@dataclasses.dataclass(frozen=True)
class TimeType(LogicalType):
    precision: int = 0

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.TIME

    def _summary(self) -> str:
        return f"TIME({self.precision})"

    def to_native(self, value: Any) -> dt.time:
        if not isinstance(value, str):
            raise self._mismatch(value)
        return parse_iso_time(value)


@dataclasses.dataclass(frozen=True)
class TimestampType(LogicalType):
    precision: int = 6

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.TIMESTAMP

    def _summary(self) -> str:
        return f"TIMESTAMP({self.precision})"

    def to_native(self, value: Any) -> dt.datetime:
        if not isinstance(value, str):
            raise self._mismatch(value)
        return parse_iso_timestamp(value)


TEMPORAL_TYPES = (DateType, TimeType, TimestampType)


@dataclasses.dataclass(frozen=True)
class ArrayType(LogicalType):
    element: LogicalType

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.ARRAY

    def _summary(self) -> str:
        return f"ARRAY<{self.element.as_summary_string()}>"

    def to_native(self, value: Any) -> list:
        if not isinstance(value, list):
            raise self._mismatch(value)
        return [_convert_nullable(self.element, item) for item in value]


@dataclasses.dataclass(frozen=True)
class MultisetType(LogicalType):
    """Multisets travel as a JSON object mapping each element to its count."""

    element: LogicalType

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.MULTISET

    def _summary(self) -> str:
        return f"MULTISET<{self.element.as_summary_string()}>"

    def to_native(self, value: Any) -> Dict[Any, int]:
        if not isinstance(value, dict):
            raise self._mismatch(value)
        result = {}
        for key, count in value.items():
            if not isinstance(count, int) or isinstance(count, bool):
                raise TypeError(f"Multiset count for {key!r} is a JSON {_json_kind(count)}, not an integer")
            result[self.element.key_to_native(key)] = count
        return result


@dataclasses.dataclass(frozen=True)
class MapType(LogicalType):
    key: LogicalType
    value: LogicalType

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.MAP

    def _summary(self) -> str:
        return f"MAP<{self.key.as_summary_string()}, {self.value.as_summary_string()}>"

    def to_native(self, value: Any) -> Dict[Any, Any]:
        if not isinstance(value, dict):
            raise self._mismatch(value)
        return {
            self.key.key_to_native(k): _convert_nullable(self.value, v)
            for k, v in value.items()
        }


@dataclasses.dataclass(frozen=True)
class RowField:
    name: str
    type: LogicalType
    description: Optional[str] = None

    def as_summary_string(self) -> str:
        text = f"`{self.name.replace('`', '``')}` {self.type.as_summary_string()}"
        if self.description is not None:
            text += " '" + self.description.replace("'", "''") + "'"
        return text


@dataclasses.dataclass(frozen=True)
class RowType(LogicalType):
    """Composite type: an ordered list of named, typed fields."""

    fields: Tuple[RowField, ...] = ()

    def __post_init__(self):
        # accept any sequence but store an immutable tuple
        object.__setattr__(self, "fields", tuple(self.fields))

    @property
    def root(self) -> TypeRoot:
        return TypeRoot.ROW

    @property
    def field_count(self) -> int:
        return len(self.fields)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def _summary(self) -> str:
        return "ROW<" + ", ".join(f.as_summary_string() for f in self.fields) + ">"

    def to_native(self, value: Any) -> Row:
        """Converts a positional JSON array; used for rows nested inside collections."""
        if not isinstance(value, list):
            raise self._mismatch(value)
        if len(value) != self.field_count:
            raise ValueError(
                f"Row value has {len(value)} fields but {self.as_summary_string()} declares {self.field_count}"
            )
        return Row(
            [_convert_nullable(f.type, item) for f, item in zip(self.fields, value)],
            names=self.field_names,
        )


def row_type_of(fields: Sequence[Tuple[str, LogicalType]]) -> RowType:
    """Builds a RowType from ``(name, type)`` pairs."""
    return RowType([RowField(name, logical_type) for name, logical_type in fields])
