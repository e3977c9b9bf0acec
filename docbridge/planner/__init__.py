from docbridge.planner.classifier import QueryClassifier, require_columns, required_columns, resolve_query
from docbridge.planner.parser import QueryParser
from docbridge.planner.translator import NativeQueryTranslator, like_to_regex

__all__ = [
    "NativeQueryTranslator",
    "QueryClassifier",
    "QueryParser",
    "like_to_regex",
    "require_columns",
    "required_columns",
    "resolve_query",
]
