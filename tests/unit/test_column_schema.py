import pytest
from pydantic import ValidationError

from gateway_results import schema
from gateway_results.common.errors import ErrorCode, MalformedSchema
from gateway_results.schema import ColumnInfo, decode_columns
from gateway_results.types import DecimalType, RowType


def test_column_info_parses_logical_type():
    column = ColumnInfo(name="price", type="DECIMAL(10, 2) NOT NULL")

    assert column.logical_type == DecimalType(10, 2, nullable=False)


def test_column_info_ignores_unknown_keys_and_is_frozen():
    column = ColumnInfo.model_validate({"name": "a", "type": "INT", "comment": "extra"})

    with pytest.raises(ValidationError):
        column.name = "b"


def test_column_info_rejects_unparseable_type():
    with pytest.raises(ValidationError):
        ColumnInfo(name="a", type="ROW<")


def test_decode_columns_preserves_order_and_duplicates():
    # Validates order because column position defines row alignment.
    # Arrange
    node = [
        {"name": "b", "type": "ROW<`x` INT>"},
        {"name": "a", "type": "STRING"},
        {"name": "b", "type": "DATE"},
    ]

    # Act
    columns = decode_columns(node)

    # Assert
    assert [c.name for c in columns] == ["b", "a", "b"]
    assert isinstance(columns[0].logical_type, RowType)


@pytest.mark.parametrize(
    "node, fragment",
    [
        ({"name": "a", "type": "INT"}, "columns is not an array"),
        ([{"name": "a"}], "index 0"),
        ([{"name": "a", "type": "INT"}, "INT"], "index 1"),
        ([{"name": "a", "type": "UNKNOWN_TYPE"}], "index 0"),
        ([{"name": None, "type": "INT"}], "name"),
    ],
)
def test_decode_columns_raises_malformed_schema(node, fragment):
    with pytest.raises(MalformedSchema) as exc:
        decode_columns(node)

    assert fragment in str(exc.value)
    assert exc.value.code == ErrorCode.MALFORMED_SCHEMA
    assert exc.value.section == "columns"


def test_column_info_parses_type_once(monkeypatch):
    # Validates a single parse because the validated type and the exposed type must agree.
    # Arrange
    calls = []
    real_parse = schema.parse_type
    monkeypatch.setattr(schema, "parse_type", lambda text: calls.append(text) or real_parse(text))

    # Act
    column = ColumnInfo(name="a", type="ARRAY<INT>")

    # Assert
    assert calls == ["ARRAY<INT>"]
    assert str(column.logical_type) == "ARRAY<INT>"
