"""Similarity search over a document's chunks"""
from typing import List, Optional
import logging
from ..models.chunk import Chunk
from ..models.response import SearchResult
from .embedding_service import Embedder, EmbeddingService, cosine_similarity

logger = logging.getLogger(__name__)

KEYWORD_BOOST = 0.1


class VectorStore:
    """Rank chunks against a query by embedding similarity plus keyword hits"""

    def __init__(self, embedder: Optional[Embedder] = None):
        """
        Initialize vector store

        Args:
            embedder: Text embedder, the pseudo-embedding service by default
        """
        self.embedder = embedder or EmbeddingService()

    def score(self, query: str, query_embedding: List[float], chunk: Chunk) -> float:
        """Cosine similarity plus KEYWORD_BOOST per query word found in the chunk"""
        score = cosine_similarity(query_embedding, chunk.embedding)
        text_lower = chunk.text.lower()
        for word in query.lower().split():
            if word in text_lower:
                score += KEYWORD_BOOST
        return score

    def search(
        self,
        query: str,
        chunks: List[Chunk],
        top_k: int = 5,
        document_id: Optional[str] = None
    ) -> List[SearchResult]:
        """
        Return the top-k chunks for a query

        Ties keep the order of ``chunks``.

        Args:
            query: User query
            chunks: Candidate chunks with precomputed embeddings
            top_k: Number of results to return
            document_id: Restrict results to this document

        Returns:
            SearchResults sorted by descending score
        """
        if document_id is not None:
            chunks = [chunk for chunk in chunks if chunk.document_id == document_id]

        query_embedding = self.embedder.embed(query)
        scored = [(self.score(query, query_embedding, chunk), chunk) for chunk in chunks]
        scored.sort(key=lambda pair: pair[0], reverse=True)

        results = [
            SearchResult(
                chunk_id=chunk.id,
                document_id=chunk.document_id,
                section_title=chunk.section_title,
                text=chunk.text,
                score=score,
                page=chunk.start_page,
                chunk_index=chunk.global_index
            )
            for score, chunk in scored[:max(top_k, 0)]
        ]

        logger.debug(f"Found {len(results)} results for query: {query[:50]}")
        return results

    @staticmethod
    def assemble_context(results: List[SearchResult]) -> str:
        """Join ranked chunks with source prefixes for the answering model"""
        return "\n\n".join(
            f'[Source: "{result.section_title}", Page {result.page}]\n{result.text}'
            for result in results
        )
