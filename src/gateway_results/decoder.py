"""
Schema-directed decoding of gateway result documents.

A result document is a JSON object with a ``columns`` section (name + type
string per column), an optional ``change_flags`` section and a ``data``
section holding one JSON array per row. The column types drive decoding of
every row: nested ROW columns recurse, DATE/TIME/TIMESTAMP columns are parsed
from ISO-8601 strings and everything else goes through the type's default
conversion.
"""
from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Union

from gateway_results.common.errors import (
    ArityMismatch,
    ChangeFlagsMismatch,
    DecodeError,
    InvalidJson,
    MissingField,
    NestingTooDeep,
    StructureError,
    TemporalParseError,
    TypeMismatch,
)
from gateway_results.common.logger import get_logger, trace_context
from gateway_results.common.settings import Settings
from gateway_results.common.settings import settings as default_settings
from gateway_results.result import ResultSet
from gateway_results.row import Row
from gateway_results.schema import ColumnInfo, decode_columns
from gateway_results.types import TEMPORAL_TYPES, LogicalType, RowType, row_type_of

logger = get_logger(__name__)

JsonSource = Union[str, bytes, bytearray]


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a valid JSON number")


def load_document(source: JsonSource) -> Any:
    """Parses JSON text, keeping non-integral numbers as ``Decimal`` to preserve precision.

    ``NaN`` and ``Infinity`` literals are rejected.

    Raises:
        InvalidJson: If the text is not valid JSON, nests too deeply to be parsed
            or holds an integer literal too long to convert.
    """
    try:
        return json.loads(source, parse_float=Decimal, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as exc:
        raise InvalidJson(f"Result document is not valid JSON: {exc}", section="document") from exc


def build_row_type(columns: Sequence[ColumnInfo]) -> RowType:
    """Derives the top-level row shape from the column schema, preserving order."""
    return row_type_of([(column.name, column.logical_type) for column in columns])


class ResultSetDecoder:
    """Decodes result documents into :class:`ResultSet` values.

    The decoder holds configuration only; a single instance can be shared
    across threads.

    Args:
        max_nesting_depth: Deepest allowed ROW nesting below a top-level row.
        change_flags_policy: ``"reject"`` fails when the flag count differs from
            the row count, ``"ignore"`` accepts it.
        settings: Source of defaults for the options above.
    """

    def __init__(
        self,
        max_nesting_depth: Optional[int] = None,
        change_flags_policy: Optional[str] = None,
        settings: Optional[Settings] = None,
    ):
        cfg = settings or default_settings
        self.max_nesting_depth = (
            max_nesting_depth if max_nesting_depth is not None else cfg.max_nesting_depth
        )
        self.change_flags_policy = change_flags_policy or cfg.change_flags_policy
        if self.max_nesting_depth < 1:
            raise ValueError("max_nesting_depth must be at least 1")
        if self.change_flags_policy not in ("reject", "ignore"):
            raise ValueError(f"Unknown change flags policy: {self.change_flags_policy!r}")

    def decode(self, document: Any) -> ResultSet:
        """Decodes a parsed result document.

        Raises:
            DecodeError: On any mismatch between the payload and its schema; no
                partial result is returned.
        """
        try:
            result = self._decode_document(document)
        except DecodeError as exc:
            logger.warning(
                "Result set decode failed: %s",
                exc,
                extra={
                    "error_code": exc.code.value,
                    "section": exc.section,
                    "row_index": exc.row_index,
                },
            )
            raise
        logger.debug(
            "Decoded result set with %d columns and %d rows",
            len(result.columns),
            result.row_count,
        )
        return result

    def _decode_document(self, document: Any) -> ResultSet:
        if not isinstance(document, dict):
            raise StructureError("document is not an object", section="document")

        if "columns" not in document:
            raise MissingField("columns")
        columns = decode_columns(document["columns"])

        change_flags = self._decode_change_flags(document.get("change_flags"))

        if "data" not in document:
            raise MissingField("data")
        rows = self.decode_rows(columns, document["data"])

        if (
            change_flags is not None
            and self.change_flags_policy == "reject"
            and len(change_flags) != len(rows)
        ):
            raise ChangeFlagsMismatch(len(change_flags), len(rows))

        return ResultSet(columns=columns, data=rows, change_flags=change_flags)

    def _decode_change_flags(self, node: Any) -> Optional[List[bool]]:
        if node is None:
            return None
        if not isinstance(node, list):
            raise TypeMismatch("change_flags is not an array", section="change_flags")
        for index, flag in enumerate(node):
            if not isinstance(flag, bool):
                raise TypeMismatch(
                    f"change flag at index {index} is not a boolean: {flag!r}",
                    section="change_flags",
                )
        return list(node)

    def decode_rows(self, columns: Sequence[ColumnInfo], data_node: Any) -> List[Row]:
        """Decodes the ``data`` section against the column schema, in document order."""
        if not isinstance(data_node, list):
            raise StructureError("data is not an array", section="data")

        row_type = build_row_type(columns)
        rows = []
        for index, row_node in enumerate(data_node):
            try:
                rows.append(self._decode_row(row_type, row_node, 0))
            except DecodeError as exc:
                exc.with_context(section="data", row_index=index)
                raise
        return rows

    def decode_row(self, shape: RowType, node: Any) -> Row:
        """Decodes one JSON array into a Row of exactly ``shape.field_count`` values."""
        return self._decode_row(shape, node, 0)

    def decode_leaf(self, logical_type: LogicalType, node: Any) -> Any:
        """Decodes one JSON value according to its type descriptor."""
        return self._decode_leaf(logical_type, node, 0)

    def _decode_row(self, shape: RowType, node: Any, depth: int) -> Row:
        if not isinstance(node, list):
            raise StructureError("row is not an array")

        field_count = shape.field_count
        values: List[Any] = [None] * field_count
        consumed = 0
        for field_node in node:
            if consumed >= field_count:
                raise ArityMismatch(field_count, len(node))
            field = shape.fields[consumed]
            try:
                values[consumed] = self._decode_leaf(field.type, field_node, depth)
            except DecodeError as exc:
                exc.with_field(field.name)
                raise
            consumed += 1

        if consumed < field_count:
            raise ArityMismatch(field_count, consumed)
        return Row(values, shape.field_names)

    def _decode_leaf(self, logical_type: LogicalType, node: Any, depth: int) -> Any:
        # composite first: a nested row is never treated as a leaf
        if isinstance(logical_type, RowType):
            if depth >= self.max_nesting_depth:
                raise NestingTooDeep(self.max_nesting_depth)
            return self._decode_row(logical_type, node, depth + 1)

        if node is None:
            return None

        if isinstance(logical_type, TEMPORAL_TYPES):
            try:
                return logical_type.to_native(node)
            except (TypeError, ValueError) as exc:
                raise TemporalParseError(
                    f"Cannot parse {node!r} as {logical_type.as_summary_string()}: {exc}"
                ) from exc

        try:
            return logical_type.to_native(node)
        except (TypeError, ValueError) as exc:
            raise TypeMismatch(str(exc)) from exc


def decode_result_set(
    source: Any,
    *,
    settings: Optional[Settings] = None,
    trace_id: Optional[str] = None,
) -> ResultSet:
    """Decodes a result document given as JSON text or as an already parsed object.

    Args:
        source: JSON text (``str``/``bytes``) or the parsed document.
        settings: Optional settings overriding the module defaults.
        trace_id: Optional id bound to log records emitted during decoding.

    Returns:
        ResultSet: The decoded columns, rows and change flags.
    """
    decoder = ResultSetDecoder(settings=settings)
    with trace_context(trace_id):
        document = load_document(source) if isinstance(source, (str, bytes, bytearray)) else source
        return decoder.decode(document)
