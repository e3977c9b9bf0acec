from __future__ import annotations

from typing import Any, Iterator, Sequence

from docbridge.models.query import SelectItem


class Row:
    """Values of one result row, aligned with the query's select items."""

    __slots__ = ("_select_items", "_values")

    def __init__(self, select_items: Sequence[SelectItem], values: Sequence[Any]) -> None:
        if len(select_items) != len(values):
            raise ValueError(
                f"Row has {len(values)} values for {len(select_items)} select items"
            )
        self._select_items = tuple(select_items)
        self._values = tuple(values)

    @property
    def select_items(self) -> tuple[SelectItem, ...]:
        return self._select_items

    @property
    def values(self) -> list[Any]:
        return list(self._values)

    def get_value(self, key: int | str | SelectItem) -> Any:
        return self._values[self._index_of(key)]

    def to_dict(self) -> dict[str, Any]:
        return {item.label: value for item, value in zip(self._select_items, self._values)}

    def _index_of(self, key: int | str | SelectItem) -> int:
        if isinstance(key, int):
            return key
        if isinstance(key, SelectItem):
            for index, item in enumerate(self._select_items):
                if item == key:
                    return index
            raise KeyError(key)
        for index, item in enumerate(self._select_items):
            if item.label == key or (item.function is None and item.column == key):
                return index
        raise KeyError(key)

    def __getitem__(self, key: int | str | SelectItem) -> Any:
        return self.get_value(key)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._select_items == other._select_items and self._values == other._values

    def __hash__(self) -> int:
        return hash(self._select_items)

    def __repr__(self) -> str:
        return f"Row(values={list(self._values)!r})"


__all__ = ["Row"]
