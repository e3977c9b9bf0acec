from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ExecutionPath(str, Enum):
    NATIVE = "native"
    NATIVE_COUNT = "native_count"
    POST_PROCESSED = "post_processed"


class PushdownLevel(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


class TranslationPlan(BaseModel):
    """Per-query record of which clauses run inside the store."""

    collection: str
    filter_pushdown: bool = True
    projection_pushdown: bool = True
    sort_pushdown: bool = True
    paging_pushdown: bool = True
    native_count: bool = False
    # Full native filter when filter_pushdown, otherwise a superset pre-filter.
    native_filter: dict[str, Any] = Field(default_factory=dict)
    native_projection: dict[str, int] | None = None
    native_sort: list[tuple[str, int]] = Field(default_factory=list)
    native_skip: int = 0
    native_limit: int | None = None
    reasons: list[str] = Field(default_factory=list)

    @property
    def execution_path(self) -> ExecutionPath:
        if self.native_count:
            return ExecutionPath.NATIVE_COUNT
        if self.filter_pushdown and self.sort_pushdown and self.paging_pushdown:
            return ExecutionPath.NATIVE
        return ExecutionPath.POST_PROCESSED

    @property
    def is_post_processed(self) -> bool:
        return self.execution_path == ExecutionPath.POST_PROCESSED

    @property
    def pushdown_level(self) -> PushdownLevel:
        if not self.is_post_processed:
            return PushdownLevel.FULL
        if self.native_filter:
            return PushdownLevel.PARTIAL
        return PushdownLevel.NONE
