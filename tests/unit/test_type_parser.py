import pytest

from gateway_results.types import (
    ArrayType,
    AtomicType,
    DateType,
    DecimalType,
    MapType,
    MultisetType,
    RowField,
    RowType,
    TimestampType,
    TimeType,
    TypeParseError,
    TypeRoot,
    parse_type,
)
from gateway_results.types.logical import MAX_LENGTH


@pytest.mark.parametrize(
    "text, expected",
    [
        ("BOOLEAN", AtomicType(TypeRoot.BOOLEAN)),
        ("int", AtomicType(TypeRoot.INTEGER)),
        ("INTEGER", AtomicType(TypeRoot.INTEGER)),
        ("BIGINT NOT NULL", AtomicType(TypeRoot.BIGINT, nullable=False)),
        ("SMALLINT NULL", AtomicType(TypeRoot.SMALLINT)),
        ("DOUBLE PRECISION", AtomicType(TypeRoot.DOUBLE)),
        ("DECIMAL", DecimalType(10, 0)),
        ("DECIMAL(10, 2)", DecimalType(10, 2)),
        ("NUMERIC(5)", DecimalType(5, 0)),
        ("CHAR", AtomicType(TypeRoot.CHAR, 1)),
        ("VARCHAR(20)", AtomicType(TypeRoot.VARCHAR, 20)),
        ("STRING", AtomicType(TypeRoot.VARCHAR, MAX_LENGTH)),
        ("BYTES", AtomicType(TypeRoot.VARBINARY, MAX_LENGTH)),
        ("DATE", DateType()),
        ("TIME", TimeType(0)),
        ("TIME(3) WITHOUT TIME ZONE", TimeType(3)),
        ("TIMESTAMP", TimestampType(6)),
        ("TIMESTAMP(3) WITHOUT TIME ZONE NOT NULL", TimestampType(3, nullable=False)),
        ("ARRAY<INT>", ArrayType(AtomicType(TypeRoot.INTEGER))),
        ("MULTISET<STRING>", MultisetType(AtomicType(TypeRoot.VARCHAR, MAX_LENGTH))),
        ("MAP<STRING, BIGINT NOT NULL>", MapType(
            AtomicType(TypeRoot.VARCHAR, MAX_LENGTH), AtomicType(TypeRoot.BIGINT, nullable=False)
        )),
    ],
)
def test_parse_type(text, expected):
    assert parse_type(text) == expected


def test_parse_row_with_quoted_names_and_descriptions():
    # Arrange
    text = "ROW<`id` BIGINT NOT NULL, `a``b` STRING 'it''s b', nested ROW(x DATE)>"

    # Act
    row_type = parse_type(text)

    # Assert
    assert isinstance(row_type, RowType)
    assert row_type.field_names == ("id", "a`b", "nested")
    assert row_type.fields[1].description == "it's b"
    assert row_type.fields[2].type == RowType([RowField("x", DateType())])


def test_parse_empty_row():
    assert parse_type("ROW<>") == RowType([])


def test_summary_string_round_trips_through_parser():
    text = "ROW<`a` INT NOT NULL, `b` STRING 'the b', `c` ARRAY<DECIMAL(10, 2)>, `d` TIMESTAMP(3)>"

    parsed = parse_type(text)

    assert parsed.as_summary_string() == text
    assert parse_type(parsed.as_summary_string()) == parsed


@pytest.mark.parametrize(
    "text",
    [
        "",
        "FOO",
        "INT INT",
        "ARRAY<INT",
        "MAP<INT>",
        "DECIMAL(a)",
        "ROW<1 INT>",
        "ROW INT",
        "TIMESTAMP(3) WITH LOCAL TIME ZONE",
        "INT NOT",
        "VARCHAR(10",
        "INT;",
        "VARCHAR(\u0661\u0660)",
    ],
)
def test_invalid_type_strings_raise(text):
    with pytest.raises(TypeParseError):
        parse_type(text)


def test_parse_error_reports_position():
    with pytest.raises(TypeParseError) as exc:
        parse_type("ARRAY<FOO>")

    assert exc.value.position == 6
    assert "ARRAY<FOO>" in str(exc.value)


def test_deeply_nested_type_string_is_rejected():
    text = "ARRAY<" * 200 + "INT" + ">" * 200

    with pytest.raises(TypeParseError, match="nesting"):
        parse_type(text)
