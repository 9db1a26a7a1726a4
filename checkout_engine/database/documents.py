"""
Keyed document collections with get/set/subscribe.

Stands in for the hosted document database. Subscribers receive the
current snapshot right after subscribing and again after every write,
always on a later event loop iteration, never inline with the writer.
"""

import asyncio
import copy
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

Document = dict[str, Any]
SnapshotListener = Callable[[Optional[Document]], None]
ErrorListener = Callable[[Exception], None]


class DocumentNotFoundError(KeyError):
    """Update targeted a document that does not exist"""
    pass


class DocumentStore:
    """In-memory document storage"""

    def __init__(self):
        self.collections: dict[str, dict[str, Document]] = {}
        self._listeners: dict[tuple[str, str], list[tuple[SnapshotListener, Optional[ErrorListener]]]] = {}

    def _collection(self, name: str) -> dict[str, Document]:
        return self.collections.setdefault(name, {})

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """Get a copy of a document"""
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def set(self, collection: str, doc_id: str, data: Document) -> None:
        """Create or overwrite a document"""
        self._collection(collection)[doc_id] = copy.deepcopy(data)
        self._notify(collection, doc_id)

    async def update(self, collection: str, doc_id: str, updates: Document) -> Document:
        """Merge top-level fields into an existing document"""
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(f"{collection}/{doc_id}")
        docs[doc_id].update(copy.deepcopy(updates))
        self._notify(collection, doc_id)
        return copy.deepcopy(docs[doc_id])

    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document"""
        docs = self._collection(collection)
        if doc_id in docs:
            del docs[doc_id]
            self._notify(collection, doc_id)
            return True
        return False

    async def list_documents(self, collection: str) -> list[Document]:
        """All documents in a collection"""
        return [copy.deepcopy(doc) for doc in self._collection(collection).values()]

    def subscribe(
        self,
        collection: str,
        doc_id: str,
        on_update: SnapshotListener,
        on_error: Optional[ErrorListener] = None,
    ) -> Callable[[], None]:
        """
        Listen for snapshots of one document.

        Must be called from within a running event loop.

        Returns:
            Function that removes the listener
        """
        key = (collection, doc_id)
        entry = (on_update, on_error)
        self._listeners.setdefault(key, []).append(entry)

        loop = asyncio.get_running_loop()
        loop.call_soon(self._deliver, key, entry)

        def unsubscribe() -> None:
            listeners = self._listeners.get(key, [])
            if entry in listeners:
                listeners.remove(entry)

        return unsubscribe

    def _notify(self, collection: str, doc_id: str) -> None:
        key = (collection, doc_id)
        listeners = list(self._listeners.get(key, []))
        if not listeners:
            return
        loop = asyncio.get_running_loop()
        for entry in listeners:
            loop.call_soon(self._deliver, key, entry)

    def _deliver(self, key: tuple[str, str], entry: tuple[SnapshotListener, Optional[ErrorListener]]) -> None:
        # Listener may have unsubscribed between scheduling and delivery
        if entry not in self._listeners.get(key, []):
            return
        on_update, on_error = entry
        collection, doc_id = key
        doc = self._collection(collection).get(doc_id)
        try:
            on_update(copy.deepcopy(doc) if doc is not None else None)
        except Exception as e:
            logger.exception(f"Snapshot listener for {collection}/{doc_id} failed")
            if on_error:
                on_error(e)


# Singleton instance
document_store = DocumentStore()
