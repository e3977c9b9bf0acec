"""Result sets handed to callers. Callers own them and must close them."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Sequence

import pyarrow as pa

from docbridge.connectors.base import DocumentCursor
from docbridge.errors import DocBridgeError
from docbridge.executor.materializer import ResultMaterializer
from docbridge.models.plans import TranslationPlan
from docbridge.models.query import SelectItem
from docbridge.models.rows import Row


class DataSet:
    def __init__(self, select_items: Sequence[SelectItem], plan: TranslationPlan) -> None:
        self.select_items = list(select_items)
        self.plan = plan
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_post_processed(self) -> bool:
        return self.plan.is_post_processed

    def _rows(self) -> Iterator[Row]:
        raise NotImplementedError

    def __iter__(self) -> Iterator[Row]:
        if self._closed:
            raise DocBridgeError("Data set is closed")
        return self._rows()

    def __enter__(self) -> "DataSet":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self._closed = True

    def to_rows(self) -> list[Row]:
        return list(self)

    def to_object_arrays(self) -> list[list[Any]]:
        return [row.values for row in self]

    def to_dicts(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self]

    def to_arrow(self) -> pa.Table:
        rows = self.to_rows()
        names = [item.label for item in self.select_items]
        arrays = [pa.array([row[index] for row in rows]) for index in range(len(names))]
        return pa.Table.from_arrays(arrays, names=names)


class DocumentDataSet(DataSet):
    """Streams rows lazily from a native cursor."""

    def __init__(
        self,
        select_items: Sequence[SelectItem],
        plan: TranslationPlan,
        *,
        cursor: DocumentCursor,
        materializer: ResultMaterializer,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(select_items, plan)
        self._cursor = cursor
        self._materializer = materializer
        self._logger = logger or logging.getLogger(__name__)

    def _rows(self) -> Iterator[Row]:
        for document in self._cursor:
            yield self._materializer.materialize(document, self.select_items)
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        super().close()
        self._cursor.close()
        self._logger.debug("Closed native cursor on %s", self.plan.collection)


class InMemoryDataSet(DataSet):
    """Fully materialised rows from the post-processing or native count path."""

    def __init__(self, select_items: Sequence[SelectItem], plan: TranslationPlan, rows: Sequence[Row]) -> None:
        super().__init__(select_items, plan)
        self._materialized = list(rows)

    def __len__(self) -> int:
        return len(self._materialized)

    def _rows(self) -> Iterator[Row]:
        return iter(self._materialized)


__all__ = ["DataSet", "DocumentDataSet", "InMemoryDataSet"]
