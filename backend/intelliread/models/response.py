"""API, chat and progress models"""
from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class AIProvider(str, Enum):
    """Question-answering providers"""
    GROQ = "groq"
    PERPLEXITY = "perplexity"
    ANTHROPIC = "anthropic"


class IngestionStage(str, Enum):
    """Stages reported while a document is being ingested"""
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    EXTRACTING = "extracting"
    AI_PROCESSING = "ai_processing"
    NORMALIZING = "normalizing"
    CHUNKING = "chunking"
    INDEXING = "indexing"
    INDEXED = "indexed"
    ERROR = "error"


class ProgressEvent(BaseModel):
    """Single progress notification emitted during ingestion"""
    stage: IngestionStage
    document_id: Optional[str] = None
    current_page: int = 0
    total_pages: int = 0
    message: str = ""


class UploadResponse(BaseModel):
    """Response for document upload"""
    document_id: str
    filename: str
    title: str
    total_pages: int
    word_count: int
    status: str
    section_count: int = 0
    chunk_count: int = 0
    table_count: int = 0
    is_image_based: bool = False
    message: str = "Document uploaded and processed successfully"


class Citation(BaseModel):
    """Chunk cited in an assistant answer"""
    chunk_id: str
    page: int
    text: str


class ChatMessage(BaseModel):
    """Single message in conversation history"""
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    citations: List[Citation] = Field(default_factory=list)


class ChatHistory(BaseModel):
    """Conversation for one (document, provider) pair"""
    id: str
    document_id: str
    provider: AIProvider
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    messages: List[ChatMessage] = Field(default_factory=list)


class ChatRequest(BaseModel):
    """Request for chat query"""
    query: str
    document_id: str
    provider: AIProvider = AIProvider.GROQ
    api_key: Optional[str] = None
    top_k: Optional[int] = None


class ChatResponse(BaseModel):
    """Response for chat query"""
    answer: str
    query: str
    provider: AIProvider
    citations: List[Citation] = Field(default_factory=list)
    messages: List[ChatMessage] = Field(default_factory=list)


class SearchRequest(BaseModel):
    """Request for a retrieval-only query"""
    query: str
    top_k: Optional[int] = None


class SearchResult(BaseModel):
    """Ranked chunk returned by retrieval"""
    chunk_id: str
    document_id: str
    section_title: str
    text: str
    score: float
    page: int
    chunk_index: int


class APIKeys(BaseModel):
    """Stored provider credentials"""
    gemini_api_key: Optional[str] = None
    groq_api_key: Optional[str] = None
    perplexity_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
