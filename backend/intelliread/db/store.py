"""Key-indexed document store contract and in-memory implementation"""
import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DOCUMENTS = "documents"
SECTIONS = "sections"
CHUNKS = "chunks"
TABLES = "tables"
CHATS = "chats"
SETTINGS = "settings"

COLLECTIONS = (DOCUMENTS, SECTIONS, CHUNKS, TABLES, CHATS, SETTINGS)
DEPENDENT_COLLECTIONS = (SECTIONS, CHUNKS, TABLES, CHATS)


class DocumentStore(ABC):
    """
    Records are plain dicts keyed by ``id``. Records that belong to a
    document carry a ``document_id`` field, which is the only secondary index.
    """

    @abstractmethod
    async def put(self, collection: str, record: Dict[str, Any]) -> None:
        """Insert or replace a record by its id"""

    @abstractmethod
    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        """Fetch a record by id"""

    @abstractmethod
    async def get_all(self, collection: str) -> List[Dict[str, Any]]:
        """Fetch every record in a collection"""

    @abstractmethod
    async def get_all_by_index(self, collection: str, document_id: str) -> List[Dict[str, Any]]:
        """Fetch every record belonging to a document"""

    @abstractmethod
    async def delete(self, collection: str, key: str) -> None:
        """Delete a record by id; missing ids are ignored"""

    @abstractmethod
    async def delete_document(self, document_id: str, keep_document: bool = False) -> None:
        """
        Delete a document together with its sections, chunks, tables and chats

        Args:
            document_id: Document to remove
            keep_document: Remove only the dependents, leaving the document record
        """

    async def close(self) -> None:
        """Release any held connection"""


class MemoryStore(DocumentStore):
    """Process-local store; a single lock serialises every operation"""

    def __init__(self):
        self._data: Dict[str, Dict[str, Dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self._lock = asyncio.Lock()

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        if collection not in self._data:
            raise KeyError(f"Unknown collection: {collection}")
        return self._data[collection]

    async def put(self, collection: str, record: Dict[str, Any]) -> None:
        async with self._lock:
            self._collection(collection)[record["id"]] = copy.deepcopy(record)

    async def get(self, collection: str, key: str) -> Optional[Dict[str, Any]]:
        async with self._lock:
            record = self._collection(collection).get(key)
            return copy.deepcopy(record) if record is not None else None

    async def get_all(self, collection: str) -> List[Dict[str, Any]]:
        async with self._lock:
            return [copy.deepcopy(r) for r in self._collection(collection).values()]

    async def get_all_by_index(self, collection: str, document_id: str) -> List[Dict[str, Any]]:
        async with self._lock:
            return [
                copy.deepcopy(r)
                for r in self._collection(collection).values()
                if r.get("document_id") == document_id
            ]

    async def delete(self, collection: str, key: str) -> None:
        async with self._lock:
            self._collection(collection).pop(key, None)

    async def delete_document(self, document_id: str, keep_document: bool = False) -> None:
        async with self._lock:
            for name in DEPENDENT_COLLECTIONS:
                records = self._data[name]
                for key in [k for k, r in records.items() if r.get("document_id") == document_id]:
                    del records[key]
            if not keep_document:
                self._data[DOCUMENTS].pop(document_id, None)
        logger.debug(f"Deleted records for document {document_id}")
