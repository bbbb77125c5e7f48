from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, model_validator

from gateway_results.common.errors import MalformedSchema
from gateway_results.types import LogicalType, parse_type


class ColumnInfo(BaseModel):
    """One entry of the ``columns`` section: a column name plus its serialized type."""

    name: str
    type: str = Field(..., description="Serialized logical type, e.g. 'ROW<`a` INT, `b` DATE>'.")

    model_config = ConfigDict(extra="ignore", frozen=True)

    _logical_type: LogicalType = PrivateAttr()

    @model_validator(mode="after")
    def _parse_logical_type(self) -> "ColumnInfo":
        self._logical_type = parse_type(self.type)
        return self

    @property
    def logical_type(self) -> LogicalType:
        return self._logical_type


def decode_columns(node: Any) -> List[ColumnInfo]:
    """Decodes the ``columns`` section into column infos, preserving order.

    Raises:
        MalformedSchema: If the section is not an array or any entry is invalid.
    """
    if not isinstance(node, list):
        raise MalformedSchema("columns is not an array", section="columns")

    columns = []
    for index, entry in enumerate(node):
        try:
            columns.append(ColumnInfo.model_validate(entry))
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"]) or "entry"
            raise MalformedSchema(
                f"Invalid column info at index {index}: {location}: {first['msg']}",
                section="columns",
            ) from exc
    return columns
