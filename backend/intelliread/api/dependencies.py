"""Dependency injection for API routes"""
from ..config import settings
from ..db import DocumentRepository, DocumentStore, MemoryStore, MongoStore
from ..models.response import AIProvider
from ..services import (
    EmbeddingService,
    ImageProcessor,
    IngestionPipeline,
    LLMService,
    RAGPipeline,
    VectorStore,
)
from ..utils import SentenceChunker


# Singleton instances
_store = None
_repository = None
_image_processor = None
_embedding_service = None
_vector_store = None
_llm_service = None
_ingestion_pipeline = None
_rag_pipeline = None


def get_store() -> DocumentStore:
    """Get DocumentStore singleton for the configured backend"""
    global _store
    if _store is None:
        if settings.storage_backend == "mongodb":
            _store = MongoStore(settings.mongodb_url, settings.mongodb_db_name)
        else:
            _store = MemoryStore()
    return _store


def get_repository() -> DocumentRepository:
    """Get DocumentRepository singleton"""
    global _repository
    if _repository is None:
        _repository = DocumentRepository(get_store())
    return _repository


def get_image_processor() -> ImageProcessor:
    """Get ImageProcessor singleton"""
    global _image_processor
    if _image_processor is None:
        _image_processor = ImageProcessor(
            gemini_vlm_model=settings.gemini_vlm_model,
            google_api_key=settings.gemini_api_key
        )
    return _image_processor


def get_embedding_service() -> EmbeddingService:
    """Get EmbeddingService singleton"""
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = EmbeddingService(dimension=settings.embedding_dimension)
    return _embedding_service


def get_vector_store() -> VectorStore:
    """Get VectorStore singleton"""
    global _vector_store
    if _vector_store is None:
        _vector_store = VectorStore(embedder=get_embedding_service())
    return _vector_store


def get_llm_service() -> LLMService:
    """Get LLMService singleton"""
    global _llm_service
    if _llm_service is None:
        _llm_service = LLMService(
            api_keys={
                AIProvider.GROQ: settings.groq_api_key,
                AIProvider.PERPLEXITY: settings.perplexity_api_key,
                AIProvider.ANTHROPIC: settings.anthropic_api_key,
            },
            models={
                AIProvider.GROQ: settings.groq_model,
                AIProvider.PERPLEXITY: settings.perplexity_model,
                AIProvider.ANTHROPIC: settings.anthropic_model,
            },
            max_tokens=settings.llm_max_tokens,
            timeout=settings.llm_timeout
        )
    return _llm_service


def get_ingestion_pipeline() -> IngestionPipeline:
    """Get IngestionPipeline singleton"""
    global _ingestion_pipeline
    if _ingestion_pipeline is None:
        _ingestion_pipeline = IngestionPipeline(
            repository=get_repository(),
            image_processor=get_image_processor(),
            chunker=SentenceChunker(
                target_size=settings.chunk_target_size,
                max_size=settings.chunk_max_size
            ),
            embedding_service=get_embedding_service(),
            gemini_api_key=settings.gemini_api_key,
            render_scale=settings.render_scale,
            max_concurrent_image_calls=settings.max_concurrent_image_calls,
            image_description_timeout=settings.image_description_timeout,
            detect_image_types=settings.detect_image_types
        )
    return _ingestion_pipeline


def get_rag_pipeline() -> RAGPipeline:
    """Get RAGPipeline singleton"""
    global _rag_pipeline
    if _rag_pipeline is None:
        _rag_pipeline = RAGPipeline(
            repository=get_repository(),
            vector_store=get_vector_store(),
            llm_service=get_llm_service(),
            top_k=settings.top_k_results
        )
    return _rag_pipeline
