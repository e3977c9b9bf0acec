"""High-level facade for querying a document store as relational tables."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from docbridge.config import DocBridgeSettings, get_settings
from docbridge.connectors.base import DocumentStore
from docbridge.connectors.mongodb import MongoDBConnectorConfig, MongoDocumentStore
from docbridge.errors import QueryError
from docbridge.executor.dataset import DataSet, DocumentDataSet, InMemoryDataSet
from docbridge.executor.evaluator import apply_paging
from docbridge.executor.fallback import PostProcessingExecutor
from docbridge.executor.materializer import ResultMaterializer
from docbridge.executor.mutations import MutationContext, MutationResult, MutationScript
from docbridge.models.plans import ExecutionPath, TranslationPlan
from docbridge.models.query import Query
from docbridge.models.schema import Schema, Table
from docbridge.planner.classifier import QueryClassifier, resolve_query
from docbridge.planner.parser import QueryParser
from docbridge.schema.inference import SchemaInferrer


class DocumentDataContext:
    """Entry point: schema access, queries and mutation scripts over one database.

    ``table_definitions`` maps collection names to explicit column paths
    (``"name.first"``, ``"addresses[0].city"``) used instead of sampling.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        table_definitions: Mapping[str, Sequence[str]] | None = None,
        settings: DocBridgeSettings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._logger = logger or logging.getLogger(__name__)
        self._inferrer = SchemaInferrer(
            store,
            sample_size=self._settings.SCHEMA_SAMPLE_SIZE,
            logger=self._logger,
        )
        self._classifier = QueryClassifier(
            pushdown_enabled=self._settings.PUSHDOWN_ENABLED,
            logger=self._logger,
        )
        self._post_processor = PostProcessingExecutor(store, logger=self._logger)
        self._parser = QueryParser()
        self._schema = self._inferrer.build_schema(store.name, table_definitions)

    @classmethod
    def from_config(
        cls,
        config: MongoDBConnectorConfig,
        **kwargs,
    ) -> "DocumentDataContext":
        return cls(MongoDocumentStore.from_config(config), **kwargs)

    @property
    def default_schema(self) -> Schema:
        return self._schema

    def get_table(self, name: str) -> Table | None:
        return self._schema.get_table(name)

    def refresh_schemas(self) -> Schema:
        return self._inferrer.refresh(self._schema)

    def explain(self, query: Query) -> TranslationPlan:
        table = self._require_table(query.table)
        return self._classifier.classify(resolve_query(query, table), table)

    def execute(self, query: Query) -> DataSet:
        table = self._require_table(query.table)
        query = resolve_query(query, table)
        plan = self._classifier.classify(query, table)
        materializer = ResultMaterializer(table)

        if plan.execution_path == ExecutionPath.NATIVE_COUNT:
            count = self._store.count(table.name, plan.native_filter)
            row = materializer.materialize_aggregates(
                {item.label: count for item in query.select_items},
                query.select_items,
            )
            rows = apply_paging([row], query.skip, query.max_rows)
            return InMemoryDataSet(query.select_items, plan, rows)

        if plan.execution_path == ExecutionPath.NATIVE:
            cursor = self._store.find(
                table.name,
                filter=plan.native_filter,
                projection=plan.native_projection,
                sort=plan.native_sort,
                skip=plan.native_skip,
                limit=plan.native_limit,
            )
            return DocumentDataSet(
                query.select_items,
                plan,
                cursor=cursor,
                materializer=materializer,
                logger=self._logger,
            )

        return self._post_processor.execute(query, table, plan)

    def execute_sql(self, sql: str) -> DataSet:
        return self.execute(self._parser.parse(sql))

    def execute_update(self, script: MutationScript) -> MutationResult:
        context = MutationContext(self._store, self._schema, logger=self._logger)
        script(context)
        return context.result

    def _require_table(self, name: str) -> Table:
        table = self._schema.get_table(name)
        if table is None:
            raise QueryError(f"Table {name!r} not found in schema {self._schema.name!r}")
        return table


__all__ = ["DocumentDataContext"]
