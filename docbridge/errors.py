"""Exception hierarchy for the docbridge document adapter."""

from pymongo.errors import PyMongoError as NativeOperationError


class DocBridgeError(RuntimeError):
    """Base exception for adapter errors."""


class PathSyntaxError(DocBridgeError, ValueError):
    """Raised when a column path such as ``a[0].b`` cannot be parsed."""


class QueryError(DocBridgeError, ValueError):
    """Raised when a query is invalid for the target table."""


class QueryParsingError(QueryError):
    """Raised when SQL text cannot be mapped onto the query model."""


class TranslationError(DocBridgeError):
    """Raised when a filter or path has no native representation."""


class UnsupportedFilterError(DocBridgeError):
    """Raised when a mutation filter cannot be executed natively."""


class MutationError(DocBridgeError):
    """Raised when a mutation statement is invalid."""


class SchemaInferenceError(DocBridgeError):
    """Raised when a table definition cannot be derived."""


__all__ = [
    "DocBridgeError",
    "MutationError",
    "NativeOperationError",
    "PathSyntaxError",
    "QueryError",
    "QueryParsingError",
    "SchemaInferenceError",
    "TranslationError",
    "UnsupportedFilterError",
]
