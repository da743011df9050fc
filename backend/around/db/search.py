"""
Record store adapter over OpenSearch.

Wraps the synchronous ``opensearchpy.OpenSearch`` client behind the six
operations the rest of the service needs: ``exists``,
``create_collection``, ``put``, ``get``, ``search`` and ``count``. A
collection is an index; documents are keyed by id.

Every client failure is re-raised as ``RecordStoreError`` so callers
never see library exceptions.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from opensearchpy import OpenSearch
from opensearchpy.exceptions import (
    ConflictError as OpenSearchConflictError,
    ConnectionTimeout,
    NotFoundError,
    OpenSearchException,
)

from around.core.config import settings
from around.core.errors import ConflictError, RecordStoreError

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
Hit = Tuple[str, Document]


class RecordStore:
    """
    Document store keyed by collection name and document id.

    ``put`` is an upsert unless ``create_only`` is set. ``search`` returns
    ``(id, document)`` pairs in the store's order. There is no
    transactional guarantee across puts.

    ``timeout`` is sent as the per-request timeout on every call, so a
    slow request fails inside the client instead of being abandoned
    while it runs.

    Example:
        >>> store = RecordStore(build_client())
        >>> store.put("post", "42", {"user": "alice", ...})
        >>> store.get("post", "42")["user"]
        'alice'
    """

    def __init__(
        self,
        client: OpenSearch,
        refresh: str = "wait_for",
        timeout: Optional[float] = None,
    ):
        self._client = client
        self._refresh = refresh
        self._timeout = timeout

    def _call(self, **params: Any) -> Document:
        if self._timeout is not None:
            params["request_timeout"] = self._timeout
        return params

    def exists(self, collection: str) -> bool:
        try:
            return bool(self._client.indices.exists(**self._call(index=collection)))
        except OpenSearchException as e:
            raise RecordStoreError(f"Failed to check index {collection}: {e}") from e

    def create_collection(self, collection: str, mapping: Document) -> None:
        try:
            self._client.indices.create(**self._call(index=collection, body=mapping))
            logger.info(f"Created index {collection}")
        except OpenSearchException as e:
            raise RecordStoreError(f"Failed to create index {collection}: {e}") from e

    def put(
        self,
        collection: str,
        doc_id: str,
        document: Document,
        create_only: bool = False,
    ) -> None:
        """
        Write ``document`` under ``doc_id``.

        Raises:
            ConflictError: ``create_only`` was set and the id already exists
            RecordStoreError: Any other store failure
        """
        params = self._call(
            index=collection,
            id=doc_id,
            body=document,
            refresh=self._refresh,
        )
        if create_only:
            params["op_type"] = "create"

        try:
            self._client.index(**params)
        except OpenSearchConflictError as e:
            raise ConflictError(f"Document {doc_id} already exists in {collection}") from e
        except ConnectionTimeout as e:
            raise RecordStoreError(
                f"Timed out writing {doc_id} to {collection}: {e}", timed_out=True
            ) from e
        except OpenSearchException as e:
            raise RecordStoreError(f"Failed to write {doc_id} to {collection}: {e}") from e

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Exact id lookup; None when the document does not exist."""
        try:
            response = self._client.get(**self._call(index=collection, id=doc_id))
        except NotFoundError:
            return None
        except OpenSearchException as e:
            raise RecordStoreError(f"Failed to read {doc_id} from {collection}: {e}") from e

        return response.get("_source")

    def search(
        self,
        collection: str,
        query: Document,
        size: Optional[int] = None,
    ) -> List[Hit]:
        """
        Run ``query`` (OpenSearch query DSL) and return every hit.

        Args:
            collection: Index name
            query: The ``query`` clause, e.g. ``{"range": {"face": {"gte": 0.9}}}``
            size: Hit cap; None leaves the store default in place
        """
        body: Document = {"query": query}
        if size is not None:
            body["size"] = size

        try:
            response = self._client.search(**self._call(index=collection, body=body))
        except OpenSearchException as e:
            raise RecordStoreError(f"Failed to search {collection}: {e}") from e

        hits = response.get("hits", {}).get("hits", [])
        return [(hit.get("_id", ""), hit.get("_source") or {}) for hit in hits]

    def count(self, collection: str, query: Document) -> int:
        try:
            response = self._client.count(**self._call(index=collection, body={"query": query}))
        except OpenSearchException as e:
            raise RecordStoreError(f"Failed to count {collection}: {e}") from e

        return int(response.get("count", 0))

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except OpenSearchException as e:
            logger.error(f"OpenSearch ping failed: {e}")
            return False

    def close(self) -> None:
        self._client.close()


# ================================
# Client lifecycle
# ================================

_record_store: Optional[RecordStore] = None


def build_client() -> OpenSearch:
    """Create an OpenSearch client from settings."""
    auth = None
    if settings.OPENSEARCH_USERNAME and settings.OPENSEARCH_PASSWORD:
        auth = (settings.OPENSEARCH_USERNAME, settings.OPENSEARCH_PASSWORD)

    return OpenSearch(
        hosts=[settings.OPENSEARCH_URL],
        http_auth=auth,
        use_ssl=settings.OPENSEARCH_URL.startswith("https://"),
        verify_certs=settings.OPENSEARCH_VERIFY_SSL,
        ssl_show_warn=False,
        timeout=settings.RECORD_STORE_TIMEOUT_SECONDS,
    )


def init_record_store() -> RecordStore:
    """
    Initialize the shared record store.

    Called during application startup.
    """
    global _record_store

    if _record_store is None:
        logger.info(f"Initializing OpenSearch client: {settings.OPENSEARCH_URL}")
        _record_store = RecordStore(
            build_client(),
            refresh=settings.RECORD_STORE_REFRESH,
            timeout=settings.RECORD_STORE_TIMEOUT_SECONDS,
        )

    return _record_store


def get_record_store() -> RecordStore:
    """
    Get the shared record store.

    Use this as a dependency in FastAPI endpoints.
    """
    if _record_store is None:
        return init_record_store()
    return _record_store


def close_record_store() -> None:
    """
    Close the OpenSearch client.

    Called during application shutdown.
    """
    global _record_store

    if _record_store is not None:
        logger.info("Closing OpenSearch client")
        _record_store.close()
        _record_store = None
