"""Typed access to the document store"""
import logging
from typing import List, Optional
from ..exceptions import DocumentNotFoundError
from ..models.chunk import Chunk
from ..models.document import Document, ExtractedTable, Section
from ..models.response import AIProvider, APIKeys, ChatHistory
from ..utils.helpers import chat_history_id
from .store import CHATS, CHUNKS, DOCUMENTS, SECTIONS, SETTINGS, TABLES, DocumentStore

logger = logging.getLogger(__name__)

API_KEYS_ID = "api_keys"


class DocumentRepository:
    """Convert between pydantic models and store records"""

    def __init__(self, store: DocumentStore):
        self.store = store

    # Documents

    async def save_document(self, document: Document) -> None:
        await self.store.put(DOCUMENTS, document.model_dump(mode="json"))

    async def find_document(self, document_id: str) -> Optional[Document]:
        record = await self.store.get(DOCUMENTS, document_id)
        return Document.model_validate(record) if record else None

    async def get_document(self, document_id: str) -> Document:
        """
        Load a document

        Raises:
            DocumentNotFoundError: If the id is unknown
        """
        document = await self.find_document(document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)
        return document

    async def list_documents(self) -> List[Document]:
        records = await self.store.get_all(DOCUMENTS)
        documents = [Document.model_validate(r) for r in records]
        return sorted(documents, key=lambda d: d.upload_date, reverse=True)

    async def delete_document(self, document_id: str) -> None:
        await self.get_document(document_id)
        await self.store.delete_document(document_id)
        logger.info(f"Deleted document {document_id}")

    async def clear_dependents(self, document_id: str) -> None:
        await self.store.delete_document(document_id, keep_document=True)

    # Derived records

    async def save_sections(self, sections: List[Section]) -> None:
        for section in sections:
            await self.store.put(SECTIONS, section.model_dump(mode="json"))

    async def get_sections(self, document_id: str) -> List[Section]:
        records = await self.store.get_all_by_index(SECTIONS, document_id)
        return sorted((Section.model_validate(r) for r in records), key=lambda s: s.order)

    async def save_chunks(self, chunks: List[Chunk]) -> None:
        for chunk in chunks:
            await self.store.put(CHUNKS, chunk.model_dump(mode="json"))

    async def get_chunks(self, document_id: str) -> List[Chunk]:
        records = await self.store.get_all_by_index(CHUNKS, document_id)
        return sorted((Chunk.model_validate(r) for r in records), key=lambda c: c.global_index)

    async def save_tables(self, tables: List[ExtractedTable]) -> None:
        for table in tables:
            await self.store.put(TABLES, table.model_dump(mode="json"))

    async def get_tables(self, document_id: str) -> List[ExtractedTable]:
        records = await self.store.get_all_by_index(TABLES, document_id)
        return sorted(
            (ExtractedTable.model_validate(r) for r in records),
            key=lambda t: t.table_index
        )

    # Chat history

    async def get_chat_history(self, document_id: str, provider: AIProvider) -> ChatHistory:
        """Stored history, or a fresh empty one"""
        history_id = chat_history_id(document_id, provider.value)
        record = await self.store.get(CHATS, history_id)
        if record:
            return ChatHistory.model_validate(record)
        return ChatHistory(id=history_id, document_id=document_id, provider=provider)

    async def save_chat_history(self, history: ChatHistory) -> None:
        await self.store.put(CHATS, history.model_dump(mode="json"))

    async def delete_chat_history(self, document_id: str, provider: AIProvider) -> None:
        await self.store.delete(CHATS, chat_history_id(document_id, provider.value))

    # Settings

    async def get_api_keys(self) -> APIKeys:
        record = await self.store.get(SETTINGS, API_KEYS_ID)
        if not record:
            return APIKeys()
        record.pop("id", None)
        return APIKeys.model_validate(record)

    async def save_api_keys(self, keys: APIKeys) -> None:
        await self.store.put(SETTINGS, {"id": API_KEYS_ID, **keys.model_dump()})
