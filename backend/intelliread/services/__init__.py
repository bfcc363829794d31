"""Service layer for business logic"""
from .page_classifier import classify_page
from .pdf_source import PDFSource, PyMuPDFSource
from .image_processor import ImageProcessor, ImagePageResolver
from .table_extractor import TableExtractor
from .section_builder import SectionBuilder
from .document_processor import DocumentProcessor
from .embedding_service import EmbeddingService
from .vector_store import VectorStore
from .llm_service import LLMService
from .ingestion_pipeline import IngestionPipeline, IngestionResult
from .rag_pipeline import RAGPipeline

__all__ = [
    "classify_page",
    "PDFSource",
    "PyMuPDFSource",
    "ImageProcessor",
    "ImagePageResolver",
    "TableExtractor",
    "SectionBuilder",
    "DocumentProcessor",
    "EmbeddingService",
    "VectorStore",
    "LLMService",
    "IngestionPipeline",
    "IngestionResult",
    "RAGPipeline",
]
