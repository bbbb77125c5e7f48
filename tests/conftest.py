import logging

import pytest

from gateway_results.common.logger import TraceContextFilter
from gateway_results.decoder import ResultSetDecoder


@pytest.fixture
def decoder():
    """Returns a decoder with a small nesting limit and strict change flags."""
    return ResultSetDecoder(max_nesting_depth=8, change_flags_policy="reject")


@pytest.fixture
def make_document():
    """Builds a result document from (name, type) pairs and row arrays."""
    def _make(columns, data, change_flags=None):
        document = {
            "columns": [{"name": name, "type": type_string} for name, type_string in columns],
            "data": data,
        }
        if change_flags is not None:
            document["change_flags"] = change_flags
        return document
    return _make


@pytest.fixture
def isolated_root_logger():
    """Removes handlers installed by configure_logging once the test is done."""
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if any(isinstance(f, TraceContextFilter) for f in handler.filters):
            root.removeHandler(handler)
    root.setLevel(level)
