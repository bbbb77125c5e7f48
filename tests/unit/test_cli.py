import json

import pytest
from typer.testing import CliRunner

from gateway_results.cli import app

runner = CliRunner()


@pytest.fixture
def result_file(tmp_path):
    def _write(document):
        path = tmp_path / "result.json"
        path.write_text(json.dumps(document), encoding="utf-8")
        return path
    return _write


def test_decode_prints_rows(result_file, isolated_root_logger):
    # Arrange
    path = result_file({
        "columns": [{"name": "id", "type": "INT"}, {"name": "name", "type": "STRING"}],
        "change_flags": [True, False],
        "data": [[1, "Ada"], [2, None]],
    })

    # Act
    result = runner.invoke(app, ["decode", str(path)])

    # Assert
    assert result.exit_code == 0, result.output
    assert "Ada" in result.output
    assert "NULL" in result.output
    assert "Decoded 2 rows" in result.output


def test_decode_limit_hides_rows(result_file, isolated_root_logger):
    path = result_file({
        "columns": [{"name": "name", "type": "STRING"}],
        "data": [["Ada"], ["Grace"]],
    })

    result = runner.invoke(app, ["decode", str(path), "--limit", "1"])

    assert result.exit_code == 0, result.output
    assert "Ada" in result.output
    assert "Grace" not in result.output


def test_decode_failure_exits_with_error(result_file, isolated_root_logger):
    path = result_file({
        "columns": [{"name": "a", "type": "INT"}, {"name": "b", "type": "INT"}],
        "data": [[1, 2, 3]],
    })

    result = runner.invoke(app, ["decode", str(path)])

    assert result.exit_code == 1
    assert "ArityMismatch" in result.output


def test_decode_flag_mismatch_can_be_ignored(result_file, isolated_root_logger):
    path = result_file({
        "columns": [{"name": "a", "type": "INT"}],
        "change_flags": [True],
        "data": [[1], [2]],
    })

    strict = runner.invoke(app, ["decode", str(path)])
    relaxed = runner.invoke(app, ["decode", str(path), "--ignore-flag-mismatch"])

    assert strict.exit_code == 1
    assert relaxed.exit_code == 0, relaxed.output


def test_schema_prints_column_types(result_file, isolated_root_logger):
    path = result_file({
        "columns": [{"name": "ts", "type": "timestamp(3)"}, {"name": "tags", "type": "array<string>"}],
        "data": [],
    })

    result = runner.invoke(app, ["schema", str(path)])

    assert result.exit_code == 0, result.output
    assert "TIMESTAMP(3)" in result.output
    assert "ARRAY<STRING>" in result.output


def test_schema_rejects_document_without_columns(result_file, isolated_root_logger):
    path = result_file({"data": []})

    result = runner.invoke(app, ["schema", str(path)])

    assert result.exit_code == 1
