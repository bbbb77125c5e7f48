from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from pydantic_core import core_schema


class Row(tuple):
    """Immutable, fixed-arity record of decoded values.

    A Row compares equal to a plain tuple holding the same values; field names
    are carried alongside for readability and ``as_dict`` but take no part in
    equality.
    """

    def __new__(cls, values: Iterable[Any] = (), names: Optional[Sequence[str]] = None):
        row = super().__new__(cls, values)
        if names is not None and len(names) != len(row):
            raise ValueError(f"Row has {len(row)} values but {len(names)} field names")
        row._names = tuple(names) if names is not None else None
        return row

    @property
    def arity(self) -> int:
        return len(self)

    @property
    def field_names(self) -> Optional[Tuple[str, ...]]:
        return self._names

    def get_field(self, name: str) -> Any:
        if self._names is None:
            raise KeyError(f"Row has no field names; cannot look up {name!r}")
        try:
            index = self._names.index(name)
        except ValueError:
            raise KeyError(name) from None
        return self[index]

    def as_dict(self) -> Dict[str, Any]:
        """Converts the row (and any nested named rows) to plain dictionaries."""
        if self._names is None:
            raise ValueError("Row has no field names")
        return {
            name: value.as_dict() if isinstance(value, Row) and value.field_names else value
            for name, value in zip(self._names, self)
        }

    def __repr__(self) -> str:
        if self._names is None:
            return "Row(" + ", ".join(repr(v) for v in self) + ")"
        return "Row(" + ", ".join(f"{n}={v!r}" for n, v in zip(self._names, self)) + ")"

    @classmethod
    def __get_pydantic_core_schema__(cls, source, handler):
        return core_schema.is_instance_schema(cls)
