from .logical import (
    TEMPORAL_TYPES,
    ArrayType,
    AtomicType,
    DateType,
    DecimalType,
    LogicalType,
    MapType,
    MultisetType,
    RowField,
    RowType,
    TimestampType,
    TimeType,
    TypeRoot,
    row_type_of,
)
from .parser import TypeParseError, parse_type

__all__ = [
    "TEMPORAL_TYPES",
    "ArrayType",
    "AtomicType",
    "DateType",
    "DecimalType",
    "LogicalType",
    "MapType",
    "MultisetType",
    "RowField",
    "RowType",
    "TimestampType",
    "TimeType",
    "TypeRoot",
    "row_type_of",
    "TypeParseError",
    "parse_type",
]
