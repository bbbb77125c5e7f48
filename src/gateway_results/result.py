from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from gateway_results.row import Row
from gateway_results.schema import ColumnInfo


class ResultSet(BaseModel):
    """Decoded query result: column schema, rows and optional change flags."""

    columns: Tuple[ColumnInfo, ...] = Field(default_factory=tuple)
    data: Tuple[Row, ...] = Field(default_factory=tuple)
    change_flags: Optional[Tuple[bool, ...]] = Field(
        default=None,
        description="Per-row flags (True for insert/update-after, False for retract) in changelog results.",
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _rows_match_columns(self) -> "ResultSet":
        width = len(self.columns)
        for index, row in enumerate(self.data):
            if len(row) != width:
                raise ValueError(f"Row {index} has {len(row)} fields but there are {width} columns")
        return self

    @property
    def row_count(self) -> int:
        return len(self.data)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    def to_row_dicts(self) -> List[Dict[str, Any]]:
        """Convert rows to list-of-dict rows using column order; nested rows become dicts too."""
        names = self.column_names
        return [Row(row, names).as_dict() for row in self.data]

    def iter_changes(self) -> Iterator[Tuple[bool, Row]]:
        """Yields ``(change_flag, row)`` pairs for changelog results."""
        if self.change_flags is None:
            raise ValueError("Result set carries no change flags")
        return zip(self.change_flags, self.data)
