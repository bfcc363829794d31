"""RAG pipeline orchestration"""
from datetime import datetime
from typing import List, Optional
import logging
from ..db.repository import DocumentRepository
from ..models.response import (
    AIProvider, ChatHistory, ChatMessage, ChatResponse, Citation, SearchResult
)
from ..utils.helpers import extract_text_snippets
from .llm_service import LLMService
from .vector_store import VectorStore

logger = logging.getLogger(__name__)

CITATION_SNIPPET_LENGTH = 100


class RAGPipeline:
    """Retrieve document chunks and answer questions over them"""

    def __init__(
        self,
        repository: DocumentRepository,
        vector_store: VectorStore,
        llm_service: LLMService,
        top_k: int = 5
    ):
        """
        Initialize RAG pipeline

        Args:
            repository: Typed store access
            vector_store: Chunk ranking
            llm_service: Question-answering provider client
            top_k: Default number of chunks retrieved per query
        """
        self.repository = repository
        self.vector_store = vector_store
        self.llm_service = llm_service
        self.top_k = top_k

        logger.info("RAGPipeline initialized")

    async def search(
        self,
        document_id: str,
        query: str,
        top_k: Optional[int] = None
    ) -> List[SearchResult]:
        """
        Rank a document's chunks against a query

        Raises:
            DocumentNotFoundError: If the document does not exist
        """
        await self.repository.get_document(document_id)
        chunks = await self.repository.get_chunks(document_id)
        return self.vector_store.search(
            query, chunks, top_k=top_k or self.top_k, document_id=document_id
        )

    async def _api_key(self, provider: AIProvider, api_key: Optional[str]) -> Optional[str]:
        if api_key:
            return api_key
        stored = await self.repository.get_api_keys()
        return getattr(stored, f"{provider.value}_api_key")

    async def chat(
        self,
        document_id: str,
        query: str,
        provider: AIProvider = AIProvider.GROQ,
        api_key: Optional[str] = None,
        top_k: Optional[int] = None
    ) -> ChatResponse:
        """
        Answer a question about a document and extend its chat history

        The user message and the answer are persisted together, and only once
        the provider has answered; a failed call leaves the history untouched.

        Args:
            document_id: Document to ask about
            query: User question
            provider: Chat provider
            api_key: Credential for this call
            top_k: Number of chunks used as context

        Returns:
            ChatResponse with the answer, its citations and the full history

        Raises:
            DocumentNotFoundError: If the document does not exist
            LLMServiceError: If the provider call fails
        """
        query = query.strip()
        logger.info(f"Chat query on {document_id} via {provider.value}: {query[:50]}...")

        results = await self.search(document_id, query, top_k)
        context = self.vector_store.assemble_context(results)

        history = await self.repository.get_chat_history(document_id, provider)
        user_message = ChatMessage(role="user", content=query)
        pending = history.messages + [user_message]

        answer = await self.llm_service.call(
            provider, pending, context, api_key=await self._api_key(provider, api_key)
        )

        citations = [
            Citation(
                chunk_id=result.chunk_id,
                page=result.page,
                text=extract_text_snippets(result.text, CITATION_SNIPPET_LENGTH)
            )
            for result in results
        ]
        assistant_message = ChatMessage(role="assistant", content=answer, citations=citations)

        updated = history.model_copy(update={
            "messages": pending + [assistant_message],
            "timestamp": datetime.utcnow(),
        })
        await self.repository.save_chat_history(updated)

        logger.info(f"Answered with {len(citations)} citations")
        return ChatResponse(
            answer=answer,
            query=query,
            provider=provider,
            citations=citations,
            messages=updated.messages
        )

    async def get_history(self, document_id: str, provider: AIProvider) -> ChatHistory:
        await self.repository.get_document(document_id)
        return await self.repository.get_chat_history(document_id, provider)

    async def delete_history(self, document_id: str, provider: AIProvider) -> None:
        await self.repository.get_document(document_id)
        await self.repository.delete_chat_history(document_id, provider)
        logger.info(f"Cleared {provider.value} chat history for {document_id}")
