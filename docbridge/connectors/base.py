from __future__ import annotations

from typing import Any, Iterator, Mapping, Protocol, Sequence, runtime_checkable


@runtime_checkable
class DocumentCursor(Protocol):
    """Native cursor handed out by a store; must be closed by its owner."""

    def __iter__(self) -> Iterator[Mapping[str, Any]]: ...

    def __next__(self) -> Mapping[str, Any]: ...

    def close(self) -> None: ...


class DocumentStore:
    """Driver contract consumed by the adapter. Failures propagate unchanged."""

    name: str

    def collection_names(self) -> list[str]:
        raise NotImplementedError

    def sample(self, collection: str, limit: int) -> list[Mapping[str, Any]]:
        raise NotImplementedError

    def find(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        projection: Mapping[str, int] | None = None,
        sort: Sequence[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> DocumentCursor:
        raise NotImplementedError

    def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int:
        raise NotImplementedError

    def insert(self, collection: str, document: Mapping[str, Any]) -> Any:
        raise NotImplementedError

    def update(self, collection: str, filter: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def delete(self, collection: str, filter: Mapping[str, Any]) -> int:
        raise NotImplementedError

    def drop_collection(self, collection: str) -> None:
        raise NotImplementedError
