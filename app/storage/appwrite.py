"""Appwrite implementation of the storage interface.

Talks to the Appwrite REST document API directly with httpx. Queries are
sent as JSON encoded ``queries[]`` parameters.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import structlog
from fastapi.encoders import jsonable_encoder

from app.core.config import Settings
from app.core.exceptions import ConflictException, StorageException
from app.storage.base import EntityStore, Filter, Record, Storage, StoreQuery
from app.storage.documents import (
    DivisionCodec,
    DocumentCodec,
    EnergyCodec,
    ProjectCodec,
    SiteCodec,
    StationCodec,
    ZoneCodec,
)

logger = structlog.get_logger()

PAGE_SIZE = 100

_QUERY_METHODS = {
    "eq": "equal",
    "ne": "notEqual",
    "gt": "greaterThan",
    "gte": "greaterThanEqual",
    "lt": "lessThan",
    "lte": "lessThanEqual",
}


class AppwriteClient:
    """Thin async client for one Appwrite database."""

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        database_id: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"X-Appwrite-Project": project_id, "Content-Type": "application/json"}
        if api_key:
            headers["X-Appwrite-Key"] = api_key
        self.database_id = database_id
        self._client = httpx.AsyncClient(
            base_url=endpoint.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "AppwriteClient":
        return cls(
            endpoint=settings.APPWRITE_ENDPOINT,
            project_id=settings.APPWRITE_PROJECT_ID,
            database_id=settings.APPWRITE_DATABASE_ID,
            api_key=settings.APPWRITE_API_KEY,
            timeout=settings.APPWRITE_TIMEOUT,
            **kwargs,
        )

    async def __aenter__(self) -> "AppwriteClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _documents_path(self, collection_id: str, document_id: Optional[str] = None) -> str:
        path = f"/databases/{self.database_id}/collections/{collection_id}/documents"
        return f"{path}/{document_id}" if document_id else path

    async def _request(self, method: str, path: str, **kwargs) -> Optional[Dict[str, Any]]:
        """Send a request; None on 404, exceptions on any other failure."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("Appwrite request failed", method=method, path=path, error=str(e))
            raise StorageException(f"Appwrite request failed: {e}")

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            logger.error(
                "Appwrite returned an error",
                method=method,
                path=path,
                status_code=response.status_code,
                message=message,
            )
            if response.status_code == 409:
                raise ConflictException(message)
            raise StorageException(f"Appwrite error {response.status_code}: {message}")

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    async def list_documents(self, collection_id: str, queries: List[Dict[str, Any]]) -> Dict[str, Any]:
        params = [("queries[]", json.dumps(query)) for query in queries]
        result = await self._request("GET", self._documents_path(collection_id), params=params)
        if result is None:
            raise StorageException(f"Appwrite collection '{collection_id}' not found")
        return result

    async def get_document(self, collection_id: str, document_id: str) -> Optional[Dict[str, Any]]:
        return await self._request("GET", self._documents_path(collection_id, document_id))

    async def create_document(
        self, collection_id: str, document_id: str, data: Dict[str, Any]
    ) -> Dict[str, Any]:
        result = await self._request(
            "POST",
            self._documents_path(collection_id),
            json={"documentId": document_id, "data": data},
        )
        if result is None:
            raise StorageException(f"Appwrite collection '{collection_id}' not found")
        return result

    async def update_document(
        self, collection_id: str, document_id: str, data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        return await self._request(
            "PATCH", self._documents_path(collection_id, document_id), json={"data": data}
        )

    async def delete_document(self, collection_id: str, document_id: str) -> bool:
        result = await self._request("DELETE", self._documents_path(collection_id, document_id))
        return result is not None


class AppwriteEntityStore(EntityStore):
    """Entity store over one Appwrite collection."""

    def __init__(self, client: AppwriteClient, codec: DocumentCodec):
        self.client = client
        self.codec = codec
        self.key_field = codec.key_field

    def _queryable(self, field: str) -> str:
        attribute = self.codec.attribute(field)
        if attribute is None:
            raise StorageException(
                f"Field '{field}' cannot be queried in collection '{self.codec.collection_id}'"
            )
        return attribute

    def _filter_queries(self, filters: List[Filter]) -> List[Dict[str, Any]]:
        queries = []
        for f in filters:
            queries.append(
                {
                    "method": _QUERY_METHODS[f.op],
                    "attribute": self._queryable(f.field),
                    "values": [jsonable_encoder(f.value)],
                }
            )
        return queries

    def _search_query(self, query: StoreQuery) -> Optional[Dict[str, Any]]:
        attributes = [self.codec.attribute(name) for name in query.search_fields]
        searches = [
            {"method": "search", "attribute": attribute, "values": [query.search]}
            for attribute in attributes
            if attribute and not attribute.startswith("$")
        ]
        if not searches:
            return None
        if len(searches) == 1:
            return searches[0]
        return {"method": "or", "values": searches}

    async def create(self, data: Record) -> Record:
        key = data[self.key_field]
        document = await self.client.create_document(
            self.codec.collection_id, key, self.codec.encode(data)
        )
        return self.codec.decode(document)

    async def get(self, key: str) -> Optional[Record]:
        document = await self.client.get_document(self.codec.collection_id, key)
        return self.codec.decode(document) if document else None

    async def update(self, key: str, changes: Record) -> Optional[Record]:
        # Packed attributes need the whole record, so merge before encoding
        current = await self.get(key)
        if current is None:
            return None
        current.update({name: value for name, value in changes.items() if name != self.key_field})
        document = await self.client.update_document(
            self.codec.collection_id, key, self.codec.encode(current)
        )
        return self.codec.decode(document) if document else None

    async def delete(self, key: str) -> bool:
        return await self.client.delete_document(self.codec.collection_id, key)

    async def list(self, query: Optional[StoreQuery] = None) -> Tuple[List[Record], int]:
        query = query or StoreQuery()
        base_queries = self._filter_queries(query.filters)
        if query.search and query.search_fields:
            search = self._search_query(query)
            if search:
                base_queries.append(search)
        if query.order_by:
            base_queries.append(
                {
                    "method": "orderDesc" if query.descending else "orderAsc",
                    "attribute": self._queryable(query.order_by),
                }
            )

        documents: List[Dict[str, Any]] = []
        offset = query.skip
        remaining = query.limit
        total = 0
        while True:
            page_size = PAGE_SIZE if remaining is None else min(PAGE_SIZE, remaining)
            result = await self.client.list_documents(
                self.codec.collection_id,
                base_queries
                + [
                    {"method": "limit", "values": [page_size]},
                    {"method": "offset", "values": [offset]},
                ],
            )
            page = result.get("documents", [])
            total = result.get("total", 0)
            documents.extend(page)
            offset += len(page)
            if remaining is not None:
                remaining -= len(page)
            if not page or offset >= total or remaining == 0:
                break

        return [self.codec.decode(document) for document in documents], total

    async def delete_where(self, filters: List[Filter]) -> int:
        records = await self.list_all(StoreQuery(filters=filters))
        deleted = 0
        for record in records:
            if await self.delete(record[self.key_field]):
                deleted += 1
        logger.info("Deleted documents", collection=self.codec.collection_id, count=deleted)
        return deleted


def create_appwrite_storage(client: AppwriteClient) -> Storage:
    return Storage(
        projects=AppwriteEntityStore(client, ProjectCodec()),
        sites=AppwriteEntityStore(client, SiteCodec()),
        energy=AppwriteEntityStore(client, EnergyCodec()),
        zones=AppwriteEntityStore(client, ZoneCodec()),
        divisions=AppwriteEntityStore(client, DivisionCodec()),
        stations=AppwriteEntityStore(client, StationCodec()),
    )
