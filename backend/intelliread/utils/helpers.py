"""Helper utility functions"""
import uuid
import re
import hashlib


def generate_file_hash(data: bytes) -> str:
    """
    Generate SHA-256 hash of an uploaded file for deduplication

    Args:
        data: Raw file bytes

    Returns:
        Hexadecimal hash string
    """
    sha256_hash = hashlib.sha256()
    # Hash in blocks to keep memory flat on large uploads
    for offset in range(0, len(data), 4096):
        sha256_hash.update(data[offset:offset + 4096])
    return sha256_hash.hexdigest()


def generate_document_id() -> str:
    """Generate unique document ID"""
    return f"doc_{uuid.uuid4().hex[:16]}"


def generate_section_id(document_id: str, order: int) -> str:
    """Generate section ID"""
    return f"{document_id}_s{order}"


def generate_chunk_id(document_id: str, section_order: int, position: int) -> str:
    """Generate unique chunk ID"""
    return f"{document_id}_s{section_order}_c{position}"


def generate_table_id(document_id: str, table_index: int) -> str:
    """Generate table ID"""
    return f"{document_id}_t{table_index}"


def chat_history_id(document_id: str, provider: str) -> str:
    """Chat histories are keyed by (document, provider)"""
    return f"{document_id}_{provider}"


def count_words(text: str) -> int:
    """Count whitespace-separated words"""
    return len(text.split())


def extract_text_snippets(text: str, max_length: int = 200) -> str:
    """Extract snippet from text"""
    if len(text) <= max_length:
        return text
    return text[:max_length].strip() + "..."


def clean_ai_response(text: str) -> str:
    """Strip markdown emphasis and list markers from a model answer"""
    text = re.sub(r'\*\*(.+?)\*\*', r'\1', text)
    text = re.sub(r'\*(.+?)\*', r'\1', text)
    text = re.sub(r'^\* ', '• ', text, flags=re.MULTILINE)
    text = re.sub(r'^- ', '• ', text, flags=re.MULTILINE)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return text.strip()
