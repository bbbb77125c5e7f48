from .common.errors import (
    ArityMismatch,
    DecodeError,
    DecodeErrorDetail,
    ErrorCode,
    MalformedSchema,
    MissingField,
    StructureError,
    TemporalParseError,
    TypeMismatch,
)
from .decoder import ResultSetDecoder, build_row_type, decode_result_set, load_document
from .result import ResultSet
from .row import Row
from .schema import ColumnInfo, decode_columns

__all__ = [
    "ArityMismatch",
    "DecodeError",
    "DecodeErrorDetail",
    "ErrorCode",
    "MalformedSchema",
    "MissingField",
    "StructureError",
    "TemporalParseError",
    "TypeMismatch",
    "ResultSetDecoder",
    "build_row_type",
    "decode_result_set",
    "load_document",
    "ResultSet",
    "Row",
    "ColumnInfo",
    "decode_columns",
]
