"""Deterministic hash-bucket pseudo-embeddings"""
import math
import logging
from typing import List, Protocol, Sequence
from ..models.chunk import Chunk

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 128
POSITION_WEIGHT = 0.5


class Embedder(Protocol):
    """Anything that maps text to a fixed-length vector"""

    def embed(self, text: str) -> List[float]: ...


def string_hash(word: str) -> int:
    """
    32-bit rolling string hash (``hash * 31 + code unit``, wrapped signed)

    Iterates UTF-16 code units so that results match the browser-side hash
    for characters outside the Basic Multilingual Plane.
    """
    encoded = word.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity; 0 for mismatched lengths or zero vectors"""
    if len(vec_a) != len(vec_b):
        return 0.0

    dot_product = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for a, b in zip(vec_a, vec_b):
        dot_product += a * b
        norm_a += a * a
        norm_b += b * b

    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    return 0.0 if denominator == 0 else dot_product / denominator


class EmbeddingService:
    """
    Bag-of-hashed-words pseudo-embedding.

    This is NOT a learned semantic embedding: each lower-cased word adds 1 to
    the bucket ``abs(hash) % dimension`` and 0.5 to the bucket shifted by the
    word's position, then the vector is L2-normalised. Similar vectors mean
    shared vocabulary, nothing more. Callers depend only on the ``Embedder``
    protocol so a real model can replace it.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        """
        Initialize embedding service

        Args:
            dimension: Length of produced vectors
        """
        self.dimension = dimension
        logger.info(f"EmbeddingService initialized with pseudo-embeddings (dimension={dimension})")

    def embed(self, text: str) -> List[float]:
        """Embed a text into a normalised vector (zero vector for empty text)"""
        vector = [0.0] * self.dimension

        for position, word in enumerate(text.lower().split()):
            index = abs(string_hash(word)) % self.dimension
            vector[index] += 1.0
            vector[(index + position) % self.dimension] += POSITION_WEIGHT

        magnitude = math.sqrt(sum(value * value for value in vector))
        if magnitude > 0:
            vector = [value / magnitude for value in vector]
        return vector

    def embed_query(self, query: str) -> List[float]:
        """Generate embedding for user query"""
        return self.embed(query)

    def embed_chunks(self, chunks: List[Chunk]) -> List[Chunk]:
        """
        Attach embeddings to chunks

        Args:
            chunks: Chunks without embeddings

        Returns:
            Copies of the chunks carrying their embedding
        """
        embedded = [
            chunk.model_copy(update={"embedding": self.embed(chunk.text)})
            for chunk in chunks
        ]
        logger.debug(f"Generated {len(embedded)} embeddings")
        return embedded
