"""
Parser for serialized logical type strings such as ``ROW<`id` BIGINT NOT NULL, `tags` ARRAY<STRING>>``.
"""
from __future__ import annotations

import dataclasses
import re
from typing import List, Optional

from .logical import (
    MAX_LENGTH,
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
)

MAX_TYPE_NESTING = 128

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
    |(?P<ident>[A-Za-z_][A-Za-z0-9_$]*)
    |(?P<quoted>`(?:[^`]|``)*`)
    |(?P<string>'(?:[^']|'')*')
    |(?P<int>[0-9]+)
    |(?P<symbol>[<>(),])
    """,
    re.VERBOSE,
)

_SIMPLE_TYPES = {
    "BOOLEAN": TypeRoot.BOOLEAN,
    "TINYINT": TypeRoot.TINYINT,
    "SMALLINT": TypeRoot.SMALLINT,
    "INT": TypeRoot.INTEGER,
    "INTEGER": TypeRoot.INTEGER,
    "BIGINT": TypeRoot.BIGINT,
    "FLOAT": TypeRoot.FLOAT,
    "NULL": TypeRoot.NULL,
}


class TypeParseError(ValueError):
    """Raised when a type string cannot be parsed."""

    def __init__(self, message: str, text: str, position: int):
        super().__init__(f"{message} at position {position} in type string {text!r}")
        self.text = text
        self.position = position


@dataclasses.dataclass
class _Token:
    kind: str
    value: str
    position: int


def _tokenize(text: str) -> List[_Token]:
    tokens = []
    position = 0
    while position < len(text):
        match = _TOKEN_RE.match(text, position)
        if not match:
            raise TypeParseError(f"Unexpected character {text[position]!r}", text, position)
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(_Token(kind, match.group(), position))
        position = match.end()
    return tokens


class _TypeParser:
    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0
        self.depth = 0

    # -- token helpers -----------------------------------------------------

    def _peek(self) -> Optional[_Token]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _error(self, message: str) -> TypeParseError:
        token = self._peek()
        position = token.position if token else len(self.text)
        return TypeParseError(message, self.text, position)

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            raise self._error("Unexpected end of type string")
        self.index += 1
        return token

    def _at_keyword(self, *keywords: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "ident" and token.value.upper() in keywords

    def _accept_keyword(self, keyword: str) -> bool:
        if self._at_keyword(keyword):
            self.index += 1
            return True
        return False

    def _expect_keyword(self, keyword: str) -> None:
        if not self._accept_keyword(keyword):
            raise self._error(f"Expected {keyword}")

    def _at_symbol(self, symbol: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "symbol" and token.value == symbol

    def _expect_symbol(self, symbol: str) -> None:
        if not self._at_symbol(symbol):
            raise self._error(f"Expected {symbol!r}")
        self.index += 1

    def _expect_int(self) -> int:
        token = self._next()
        if token.kind != "int":
            self.index -= 1
            raise self._error("Expected an integer")
        return int(token.value)

    def _optional_args(self, maximum: int) -> List[int]:
        """Parses an optional ``(n)`` or ``(n, m)`` parameter list."""
        if not self._at_symbol("("):
            return []
        self.index += 1
        args = [self._expect_int()]
        while self._at_symbol(",") and len(args) < maximum:
            self.index += 1
            args.append(self._expect_int())
        self._expect_symbol(")")
        return args

    def _skip_without_time_zone(self) -> None:
        if self._at_keyword("WITH"):
            raise self._error("Time zone aware types are not supported")
        if self._accept_keyword("WITHOUT"):
            self._expect_keyword("TIME")
            self._expect_keyword("ZONE")

    # -- grammar -----------------------------------------------------------

    def parse(self) -> LogicalType:
        logical_type = self._parse_type()
        if self._peek() is not None:
            raise self._error(f"Unexpected token {self._peek().value!r}")
        return logical_type

    def _parse_type(self) -> LogicalType:
        self.depth += 1
        if self.depth > MAX_TYPE_NESTING:
            raise self._error(f"Type nesting exceeds {MAX_TYPE_NESTING} levels")
        try:
            logical_type = self._parse_type_body()
        finally:
            self.depth -= 1

        if self._accept_keyword("NOT"):
            self._expect_keyword("NULL")
            return dataclasses.replace(logical_type, nullable=False)
        self._accept_keyword("NULL")
        return logical_type

    def _parse_type_body(self) -> LogicalType:
        token = self._next()
        if token.kind != "ident":
            self.index -= 1
            raise self._error("Expected a type name")
        name = token.value.upper()

        if name in _SIMPLE_TYPES:
            return AtomicType(_SIMPLE_TYPES[name])
        if name == "DOUBLE":
            self._accept_keyword("PRECISION")
            return AtomicType(TypeRoot.DOUBLE)
        if name in ("DECIMAL", "DEC", "NUMERIC"):
            args = self._optional_args(2)
            precision = args[0] if args else 10
            scale = args[1] if len(args) > 1 else 0
            return DecimalType(precision=precision, scale=scale)
        if name == "STRING":
            return AtomicType(TypeRoot.VARCHAR, MAX_LENGTH)
        if name == "BYTES":
            return AtomicType(TypeRoot.VARBINARY, MAX_LENGTH)
        if name in ("CHAR", "VARCHAR", "BINARY", "VARBINARY"):
            args = self._optional_args(1)
            return AtomicType(TypeRoot(name), args[0] if args else 1)
        if name == "DATE":
            return DateType()
        if name == "TIME":
            args = self._optional_args(1)
            self._skip_without_time_zone()
            return TimeType(precision=args[0] if args else 0)
        if name == "TIMESTAMP":
            args = self._optional_args(1)
            self._skip_without_time_zone()
            return TimestampType(precision=args[0] if args else 6)
        if name in ("ARRAY", "MULTISET"):
            self._expect_symbol("<")
            element = self._parse_type()
            self._expect_symbol(">")
            return ArrayType(element) if name == "ARRAY" else MultisetType(element)
        if name == "MAP":
            self._expect_symbol("<")
            key = self._parse_type()
            self._expect_symbol(",")
            value = self._parse_type()
            self._expect_symbol(">")
            return MapType(key, value)
        if name == "ROW":
            return self._parse_row()

        self.index -= 1
        raise self._error(f"Unknown type {token.value!r}")

    def _parse_row(self) -> RowType:
        if self._at_symbol("<"):
            closing = ">"
        elif self._at_symbol("("):
            closing = ")"
        else:
            raise self._error("Expected '<' or '(' after ROW")
        self.index += 1

        fields = []
        if not self._at_symbol(closing):
            fields.append(self._parse_field())
            while self._at_symbol(","):
                self.index += 1
                fields.append(self._parse_field())
        self._expect_symbol(closing)
        return RowType(fields)

    def _parse_field(self) -> RowField:
        token = self._next()
        if token.kind == "ident":
            name = token.value
        elif token.kind == "quoted":
            name = token.value[1:-1].replace("``", "`")
        else:
            self.index -= 1
            raise self._error("Expected a field name")
        field_type = self._parse_type()

        description = None
        token = self._peek()
        if token is not None and token.kind == "string":
            self.index += 1
            description = token.value[1:-1].replace("''", "'")
        return RowField(name, field_type, description)


def parse_type(text: str) -> LogicalType:
    """Parses a serialized logical type string.

    Args:
        text (str): Type string, e.g. ``"DECIMAL(10, 2) NOT NULL"``.

    Returns:
        LogicalType: The parsed type descriptor.

    Raises:
        TypeParseError: If the string is empty, malformed or names an unknown type.
    """
    return _TypeParser(text).parse()
