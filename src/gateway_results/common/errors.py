from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Standardized error codes for result set decoding."""
    MISSING_FIELD = "MISSING_FIELD"
    STRUCTURE_ERROR = "STRUCTURE_ERROR"
    ARITY_MISMATCH = "ARITY_MISMATCH"
    MALFORMED_SCHEMA = "MALFORMED_SCHEMA"
    TEMPORAL_PARSE_ERROR = "TEMPORAL_PARSE_ERROR"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    INVALID_JSON = "INVALID_JSON"
    NESTING_TOO_DEEP = "NESTING_TOO_DEEP"
    CHANGE_FLAGS_MISMATCH = "CHANGE_FLAGS_MISMATCH"


class DecodeErrorDetail(BaseModel):
    """Transport-friendly envelope describing a failed decode.

    Attributes:
        error_code (ErrorCode): The standardized error code.
        message (str): Human-readable description of the mismatch.
        section (Optional[str]): Document section being decoded (columns, change_flags, data).
        row_index (Optional[int]): Index of the offending row within ``data``.
        path (Optional[str]): Dotted field path through nested rows.
        retryable (bool): Always False; a malformed payload does not fix itself.
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    error_code: ErrorCode
    message: str
    section: Optional[str] = None
    row_index: Optional[int] = None
    path: Optional[str] = None
    retryable: bool = False


class DecodeError(ValueError):
    """Base class for every failure raised while decoding a result document.

    Context is attached while the error unwinds through the decoder: the row
    decoder prepends field names to ``path`` and the result set decoder records
    the ``section`` and ``row_index``.
    """

    code: ErrorCode = ErrorCode.STRUCTURE_ERROR

    def __init__(
        self,
        message: str,
        *,
        section: Optional[str] = None,
        row_index: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.section = section
        self.row_index = row_index
        self.path: List[str] = []

    def with_context(
        self, section: Optional[str] = None, row_index: Optional[int] = None
    ) -> "DecodeError":
        """Fills in location context without overwriting anything already set."""
        if self.section is None:
            self.section = section
        if self.row_index is None:
            self.row_index = row_index
        return self

    def with_field(self, name: str) -> "DecodeError":
        self.path.insert(0, name)
        return self

    @property
    def field_path(self) -> Optional[str]:
        return ".".join(self.path) if self.path else None

    def __str__(self) -> str:
        context = []
        if self.section is not None:
            context.append(f"section={self.section}")
        if self.row_index is not None:
            context.append(f"row={self.row_index}")
        if self.path:
            context.append(f"field={self.field_path}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"

    def to_detail(self) -> DecodeErrorDetail:
        return DecodeErrorDetail(
            error_code=self.code,
            message=self.message,
            section=self.section,
            row_index=self.row_index,
            path=self.field_path,
        )


class MissingField(DecodeError):
    """A required top-level section is absent from the document."""

    code = ErrorCode.MISSING_FIELD

    def __init__(self, field: str):
        super().__init__(f"Field {field} must be provided", section=field)
        self.field = field


class StructureError(DecodeError):
    """A node expected to be a JSON array (or object) has another shape."""

    code = ErrorCode.STRUCTURE_ERROR


class InvalidJson(StructureError):
    """The raw payload is not valid JSON text."""

    code = ErrorCode.INVALID_JSON


class NestingTooDeep(StructureError):
    """Composite rows nest deeper than the configured limit."""

    code = ErrorCode.NESTING_TOO_DEEP

    def __init__(self, max_depth: int):
        super().__init__(f"Nested rows exceed the maximum depth of {max_depth}")
        self.max_depth = max_depth


class ChangeFlagsMismatch(StructureError):
    """The change flag list does not line up one-to-one with the rows."""

    code = ErrorCode.CHANGE_FLAGS_MISMATCH

    def __init__(self, flag_count: int, row_count: int):
        super().__init__(
            f"Got {flag_count} change flags for {row_count} rows",
            section="change_flags",
        )
        self.flag_count = flag_count
        self.row_count = row_count


class ArityMismatch(DecodeError):
    """A row's element count differs from its schema's field count."""

    code = ErrorCode.ARITY_MISMATCH

    def __init__(self, expected: int, actual: int):
        super().__init__(
            "Number of columns in the row is not consistent with column infos: "
            f"expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class MalformedSchema(DecodeError):
    """The ``columns`` section cannot be decoded into column infos."""

    code = ErrorCode.MALFORMED_SCHEMA


class TemporalParseError(DecodeError):
    """A DATE, TIME or TIMESTAMP value is not valid ISO-8601 for its kind."""

    code = ErrorCode.TEMPORAL_PARSE_ERROR


class TypeMismatch(DecodeError):
    """A JSON value does not fit its declared type's default conversion."""

    code = ErrorCode.TYPE_MISMATCH
