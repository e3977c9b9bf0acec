"""docbridge: relational access to schemaless document stores.

Queries are classified per clause: what the store can evaluate natively is
pushed down, the rest is finished in memory with identical semantics.

Example
-------
>>> import mongomock
>>> from docbridge import DocumentDataContext, MongoDocumentStore, Predicate, Operator, Query, SelectItem
>>> database = mongomock.MongoClient().db
>>> database.people.insert_one({"name": "Alice", "age": 31})
>>> context = DocumentDataContext(MongoDocumentStore(database))
>>> context.execute(
...     Query(table="people", select_items=(SelectItem("name"),), where=Predicate("age", Operator.GREATER_THAN, 30))
... ).to_object_arrays()
[['Alice']]
"""

from docbridge.config import DocBridgeSettings, get_settings
from docbridge.connectors import DocumentStore, MongoDBConnectorConfig, MongoDocumentStore
from docbridge.context import DocumentDataContext
from docbridge.errors import (
    DocBridgeError,
    MutationError,
    NativeOperationError,
    PathSyntaxError,
    QueryError,
    QueryParsingError,
    SchemaInferenceError,
    TranslationError,
    UnsupportedFilterError,
)
from docbridge.executor import DataSet, DocumentDataSet, InMemoryDataSet, MutationContext, MutationResult
from docbridge.models import (
    Column,
    ColumnType,
    CompoundFilter,
    ExecutionPath,
    FunctionType,
    Operator,
    OrderByItem,
    Predicate,
    PushdownLevel,
    Query,
    Row,
    Schema,
    SelectItem,
    Table,
    TranslationPlan,
    and_,
    or_,
)

__all__ = [
    "Column",
    "ColumnType",
    "CompoundFilter",
    "DataSet",
    "DocBridgeError",
    "DocBridgeSettings",
    "DocumentDataContext",
    "DocumentDataSet",
    "DocumentStore",
    "ExecutionPath",
    "FunctionType",
    "InMemoryDataSet",
    "MongoDBConnectorConfig",
    "MongoDocumentStore",
    "MutationContext",
    "MutationError",
    "MutationResult",
    "NativeOperationError",
    "Operator",
    "OrderByItem",
    "PathSyntaxError",
    "Predicate",
    "PushdownLevel",
    "Query",
    "QueryError",
    "QueryParsingError",
    "Row",
    "Schema",
    "SchemaInferenceError",
    "SelectItem",
    "Table",
    "TranslationError",
    "TranslationPlan",
    "UnsupportedFilterError",
    "and_",
    "get_settings",
    "or_",
]
