"""Chunk data models"""
from pydantic import BaseModel, Field
from typing import List


class Chunk(BaseModel):
    """Sentence-terminated span of section text prepared for retrieval"""
    id: str
    document_id: str
    section_id: str
    section_title: str
    text: str
    start_offset: int  # within the section content
    end_offset: int
    chunk_index: int  # section-local
    global_index: int
    start_page: int
    end_page: int
    is_image_derived: bool = False
    embedding: List[float] = Field(default_factory=list)
