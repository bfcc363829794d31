"""Sentence-boundary chunking that never cuts mid-sentence"""
import re
import logging
from typing import List, Optional, Sequence
from pydantic import BaseModel
from ..models.chunk import Chunk
from ..models.document import Section
from ..utils.helpers import generate_chunk_id

logger = logging.getLogger(__name__)

# A run of terminators followed by whitespace or end of text ends a sentence
SENTENCE_BOUNDARY = re.compile(r'[.!?]+(?=\s|$)')

VALID_ENDINGS = ('.', '!', '?', ':', ';')
MIN_VALID_LENGTH = 50
MAX_VALID_LENGTH = 1500


class Sentence(BaseModel):
    """Trimmed sentence with its offsets in the source text"""
    text: str
    start: int
    end: int


class TextChunk(BaseModel):
    """Chunk of a single text block"""
    text: str
    start_offset: int
    end_offset: int
    chunk_index: int


def split_sentences(text: str) -> List[Sentence]:
    """
    Split text at sentence terminators

    A trailing fragment without a terminator is kept as the last sentence,
    so text without any terminator comes back as a single sentence.
    """
    spans = []
    start = 0
    for match in SENTENCE_BOUNDARY.finditer(text):
        spans.append((start, match.end()))
        start = match.end()
    if start < len(text):
        spans.append((start, len(text)))

    sentences = []
    for span_start, span_end in spans:
        segment = text[span_start:span_end]
        stripped = segment.strip()
        if not stripped:
            continue
        begin = span_start + len(segment) - len(segment.lstrip())
        sentences.append(Sentence(text=stripped, start=begin, end=begin + len(stripped)))
    return sentences


def validate_chunks(chunks: Sequence) -> List[str]:
    """
    Report chunk quality problems without failing

    Args:
        chunks: Objects with a ``text`` attribute

    Returns:
        Warning messages, empty when every chunk is well-formed
    """
    warnings = []
    for idx, chunk in enumerate(chunks):
        text = chunk.text.strip()
        if len(text) < MIN_VALID_LENGTH:
            warnings.append(f"Chunk {idx} too short ({len(text)} chars)")
        if len(text) > MAX_VALID_LENGTH:
            warnings.append(f"Chunk {idx} too long ({len(text)} chars)")
        if not text.endswith(VALID_ENDINGS):
            warnings.append(f"Chunk {idx} doesn't end with punctuation")
        if re.search(r'\w-$', text):
            warnings.append(f"Chunk {idx} ends with hyphen (likely cut word)")
    return warnings


class SentenceChunker:
    """
    Accumulate whole sentences into chunks of bounded size

    A chunk is closed before a sentence that would push it past max_size
    (once it holds more than 100 chars) or past target_size (once it holds
    more than 300 chars). Short buffers keep growing instead of being
    emitted, and a trailing buffer of 50 chars or less is dropped.
    """

    MAX_SPLIT_FLOOR = 100
    TARGET_SPLIT_FLOOR = 300
    FINAL_CHUNK_FLOOR = 50

    def __init__(self, target_size: int = 800, max_size: int = 1200):
        self.target_size = target_size
        self.max_size = max_size

    def chunk_text(self, text: str) -> List[TextChunk]:
        """
        Chunk a block of text at sentence boundaries

        Args:
            text: Text to chunk, typically one section's content

        Returns:
            TextChunks with offsets into ``text``
        """
        chunks: List[TextChunk] = []
        buffer = ""
        buffer_start: Optional[int] = None
        buffer_end = 0

        def emit():
            chunks.append(TextChunk(
                text=buffer.strip(),
                start_offset=buffer_start,
                end_offset=buffer_end,
                chunk_index=len(chunks)
            ))

        for sentence in split_sentences(text):
            candidate = buffer + (" " if buffer else "") + sentence.text

            if len(candidate) > self.max_size and len(buffer) > self.MAX_SPLIT_FLOOR:
                emit()
                buffer, buffer_start = sentence.text, sentence.start
            elif len(candidate) >= self.target_size and len(buffer) > self.TARGET_SPLIT_FLOOR:
                emit()
                buffer, buffer_start = sentence.text, sentence.start
            else:
                if buffer_start is None:
                    buffer_start = sentence.start
                buffer = candidate
            buffer_end = sentence.end

        if len(buffer.strip()) > self.FINAL_CHUNK_FLOOR:
            emit()

        return chunks

    def chunk_sections(self, sections: List[Section], document_id: str) -> List[Chunk]:
        """
        Chunk every section and attach section metadata

        Args:
            sections: Ordered document sections
            document_id: Owning document

        Returns:
            Chunks with section-local and document-global indexes
        """
        all_chunks: List[Chunk] = []

        for section in sections:
            for text_chunk in self.chunk_text(section.content):
                all_chunks.append(Chunk(
                    id=generate_chunk_id(document_id, section.order, text_chunk.chunk_index),
                    document_id=document_id,
                    section_id=section.id,
                    section_title=section.title,
                    text=text_chunk.text,
                    start_offset=text_chunk.start_offset,
                    end_offset=text_chunk.end_offset,
                    chunk_index=text_chunk.chunk_index,
                    global_index=len(all_chunks),
                    start_page=section.start_page,
                    end_page=section.end_page,
                    is_image_derived=section.is_image_derived
                ))

        logger.info(f"Created {len(all_chunks)} chunks from {len(sections)} sections")
        return all_chunks
