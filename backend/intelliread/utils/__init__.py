"""Utility functions and helpers"""
from .sentence_chunker import SentenceChunker, split_sentences, validate_chunks
from .helpers import (
    generate_document_id,
    generate_chunk_id,
    extract_text_snippets,
    clean_ai_response,
)

__all__ = [
    "SentenceChunker",
    "split_sentences",
    "validate_chunks",
    "generate_document_id",
    "generate_chunk_id",
    "extract_text_snippets",
    "clean_ai_response",
]
