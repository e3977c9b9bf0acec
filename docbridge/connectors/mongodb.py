from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence
from urllib.parse import urlparse

from pydantic import BaseModel, field_validator
from pymongo import MongoClient
from pymongo.cursor import Cursor
from pymongo.database import Database

from docbridge.config import DocBridgeSettings
from docbridge.connectors.base import DocumentStore


class MongoDBConnectorConfig(BaseModel):
    connection_uri: str
    database: str
    username: str | None = None
    password: str | None = None
    auth_source: str | None = None

    @field_validator("connection_uri")
    @classmethod
    def _validate_uri(cls, value: str) -> str:
        if not value:
            raise ValueError("Connection URI is required.")
        if urlparse(value).scheme not in {"mongodb", "mongodb+srv"}:
            raise ValueError("Connection URI must start with mongodb:// or mongodb+srv://.")
        return value

    @field_validator("database")
    @classmethod
    def _validate_database(cls, value: str) -> str:
        if not value:
            raise ValueError("Database is required.")
        return value

    @classmethod
    def from_settings(cls, settings: DocBridgeSettings) -> "MongoDBConnectorConfig":
        return cls(connection_uri=settings.MONGODB_URI, database=settings.MONGODB_DATABASE)


class MongoDocumentStore(DocumentStore):
    """Document store backed by a pymongo (or pymongo-compatible) database handle."""

    def __init__(self, database: Database, *, logger: logging.Logger | None = None) -> None:
        self._database = database
        self.name = database.name
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config(
        cls,
        config: MongoDBConnectorConfig,
        *,
        logger: logging.Logger | None = None,
    ) -> "MongoDocumentStore":
        options: dict[str, Any] = {}
        if config.username is not None:
            options["username"] = config.username
        if config.password is not None:
            options["password"] = config.password
        if config.auth_source is not None:
            options["authSource"] = config.auth_source
        client: MongoClient = MongoClient(config.connection_uri, **options)
        return cls(client[config.database], logger=logger)

    def collection_names(self) -> list[str]:
        return sorted(self._database.list_collection_names())

    def sample(self, collection: str, limit: int) -> list[Mapping[str, Any]]:
        cursor = self._database[collection].find({}, limit=limit)
        try:
            return list(cursor)
        finally:
            cursor.close()

    def find(
        self,
        collection: str,
        *,
        filter: Mapping[str, Any] | None = None,
        projection: Mapping[str, int] | None = None,
        sort: Sequence[tuple[str, int]] | None = None,
        skip: int = 0,
        limit: int | None = None,
    ) -> Cursor:
        self._logger.debug(
            "find collection=%s filter=%s projection=%s sort=%s skip=%s limit=%s",
            collection,
            filter,
            projection,
            sort,
            skip,
            limit,
        )
        return self._database[collection].find(
            dict(filter or {}),
            dict(projection) if projection else None,
            skip=skip,
            limit=limit or 0,
            sort=list(sort) if sort else None,
        )

    def count(self, collection: str, filter: Mapping[str, Any] | None = None) -> int:
        return int(self._database[collection].count_documents(dict(filter or {})))

    def insert(self, collection: str, document: Mapping[str, Any]) -> Any:
        return self._database[collection].insert_one(dict(document)).inserted_id

    def update(self, collection: str, filter: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        result = self._database[collection].update_many(dict(filter), {"$set": dict(values)})
        return int(result.matched_count)

    def delete(self, collection: str, filter: Mapping[str, Any]) -> int:
        return int(self._database[collection].delete_many(dict(filter)).deleted_count)

    def drop_collection(self, collection: str) -> None:
        self._database.drop_collection(collection)
