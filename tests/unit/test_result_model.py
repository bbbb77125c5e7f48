import pytest
from pydantic import ValidationError

from gateway_results.result import ResultSet
from gateway_results.row import Row
from gateway_results.schema import ColumnInfo


def _columns():
    return [ColumnInfo(name="id", type="INT"), ColumnInfo(name="name", type="STRING")]


def test_row_behaves_like_a_tuple_with_names():
    row = Row([1, "Ada"], names=["id", "name"])

    assert row == (1, "Ada")
    assert row.arity == 2
    assert row.get_field("name") == "Ada"
    assert repr(row) == "Row(id=1, name='Ada')"
    assert repr(Row([1])) == "Row(1)"


def test_row_rejects_mismatched_names():
    with pytest.raises(ValueError):
        Row([1, 2], names=["only_one"])


def test_row_lookup_errors():
    with pytest.raises(KeyError):
        Row([1], names=["a"]).get_field("b")
    with pytest.raises(KeyError):
        Row([1]).get_field("a")
    with pytest.raises(ValueError):
        Row([1]).as_dict()


def test_result_set_helpers():
    # Arrange
    result = ResultSet(
        columns=_columns(),
        data=[Row([1, "Ada"]), Row([2, None])],
        change_flags=[True, False],
    )

    # Act
    dicts = result.to_row_dicts()

    # Assert
    assert result.row_count == 2
    assert result.column_names == ["id", "name"]
    assert dicts == [{"id": 1, "name": "Ada"}, {"id": 2, "name": None}]
    assert [flag for flag, _ in result.iter_changes()] == [True, False]


def test_result_set_is_immutable():
    result = ResultSet(columns=_columns(), data=[Row([1, "Ada"])])

    with pytest.raises(ValidationError):
        result.data = ()
    assert isinstance(result.data, tuple)


def test_result_set_rejects_rows_of_the_wrong_width():
    with pytest.raises(ValidationError):
        ResultSet(columns=_columns(), data=[Row([1])])


def test_result_set_rejects_plain_tuples_as_rows():
    with pytest.raises(ValidationError):
        ResultSet(columns=_columns(), data=[(1, "Ada")])


def test_iter_changes_requires_flags():
    result = ResultSet(columns=_columns(), data=[])

    with pytest.raises(ValueError):
        result.iter_changes()
