"""Document data models"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime


class PageClassification(str, Enum):
    """Content type of a single PDF page"""
    TEXT = "text"
    IMAGE_ONLY = "image_only"
    MIXED = "mixed"
    EMPTY = "empty"


class DocumentStatus(str, Enum):
    """Lifecycle status of an ingested document"""
    PROCESSING = "processing"
    INDEXED = "indexed"
    ERROR = "error"


class TextItem(BaseModel):
    """Positioned run of text on a page (bottom-left origin, baseline y)"""
    model_config = ConfigDict(frozen=True)

    text: str
    x: float
    y: float
    height: float = 0.0


class Page(BaseModel):
    """Data for a single PDF page, created once during extraction"""
    model_config = ConfigDict(frozen=True)

    page_number: int  # 1-based
    text: str
    items: List[TextItem] = Field(default_factory=list)
    image_count: int = 0
    classification: PageClassification = PageClassification.EMPTY
    image_description: Optional[str] = None
    image_type: Optional[str] = None  # "image" or "chart"
    ai_analyzed: bool = False

    @property
    def is_image_only(self) -> bool:
        return self.classification == PageClassification.IMAGE_ONLY

    @property
    def needs_image_resolution(self) -> bool:
        return self.classification in (PageClassification.IMAGE_ONLY, PageClassification.MIXED)


class Section(BaseModel):
    """Titled, page-ranged grouping of document content"""
    id: str
    document_id: str = ""
    title: str
    content: str
    start_page: int
    end_page: int
    order: int = 0
    is_image_derived: bool = False
    bullet_points: List[str] = Field(default_factory=list)


class ExtractedTable(BaseModel):
    """Table reconstructed from positioned text on one page"""
    id: str
    document_id: str = ""
    table_index: int
    page: int
    headers: List[str]
    data: List[List[str]]
    rows: int
    columns: int


class Document(BaseModel):
    """Ingested PDF document"""
    id: str
    filename: str
    title: str
    page_count: int = 0
    word_count: int = 0
    upload_date: datetime = Field(default_factory=datetime.utcnow)
    status: DocumentStatus = DocumentStatus.PROCESSING
    error: Optional[str] = None
    sections: List[Section] = Field(default_factory=list)
    has_images: bool = False
    is_image_based: bool = False
    image_only_page_count: int = 0
    ai_analyzed: bool = False
    themes: List[str] = Field(default_factory=list)
    summary: str = ""
    file_hash: Optional[str] = None
