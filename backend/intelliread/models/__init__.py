"""Data models for the application"""
from .document import (
    Document,
    DocumentStatus,
    ExtractedTable,
    Page,
    PageClassification,
    Section,
    TextItem,
)
from .chunk import Chunk
from .response import (
    AIProvider,
    APIKeys,
    ChatHistory,
    ChatMessage,
    ChatRequest,
    ChatResponse,
    Citation,
    IngestionStage,
    ProgressEvent,
    SearchRequest,
    SearchResult,
    UploadResponse,
)

__all__ = [
    "Document",
    "DocumentStatus",
    "ExtractedTable",
    "Page",
    "PageClassification",
    "Section",
    "TextItem",
    "Chunk",
    "AIProvider",
    "APIKeys",
    "ChatHistory",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "Citation",
    "IngestionStage",
    "ProgressEvent",
    "SearchRequest",
    "SearchResult",
    "UploadResponse",
]
