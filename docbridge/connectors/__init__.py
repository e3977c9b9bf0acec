from docbridge.connectors.base import DocumentCursor, DocumentStore
from docbridge.connectors.mongodb import MongoDBConnectorConfig, MongoDocumentStore

__all__ = [
    "DocumentCursor",
    "DocumentStore",
    "MongoDBConnectorConfig",
    "MongoDocumentStore",
]
