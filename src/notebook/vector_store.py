"""
Vector Store Module
===================

Purpose: Store embedded chunks and retrieve similar ones

Key Concepts:
  • Storage: an ordered, in-memory list of embedded chunks, one session only
  • Removal: every chunk of a source document is dropped together
  • Retrieval: exact linear scan with cosine similarity, stable ranking
"""

from typing import List, Sequence
from dataclasses import dataclass, field
import logging
import threading

from .chunker import Chunk
from .embeddings import cosine_similarity

logger = logging.getLogger(__name__)


@dataclass
class EmbeddedChunk(Chunk):
    """A chunk with its document embedding."""
    embedding: List[float] = field(default_factory=list)


@dataclass
class ScoredChunk(EmbeddedChunk):
    """A retrieved chunk with its similarity to the query."""
    similarity: float = 0.0


class InMemoryVectorStore:
    """
    Vector store kept in process memory.

    • Insertion order is kept and breaks similarity ties
    • Duplicate sources are accepted; rejecting them is the caller's job
    • Embedding dimensionality is not checked; mismatched vectors score 0
    • One lock covers every read and write
    """

    def __init__(self):
        self._chunks: List[EmbeddedChunk] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return self.size()

    def add(self, chunks: Sequence[EmbeddedChunk]) -> None:
        """
        Append embedded chunks to the store.

        Args:
            chunks: Chunks with their embeddings

        Example:
            >>> store.add([EmbeddedChunk("doc.txt", "Machine learning is AI", [0.1, 0.2])])
        """
        with self._lock:
            self._chunks.extend(chunks)
        logger.debug(f"Added {len(chunks)} chunks")

    def remove_by_source(self, source_name: str) -> int:
        """
        Remove every chunk of a source document.

        Args:
            source_name: Name of the document to remove

        Returns:
            Number of chunks removed (0 if the source was not present)
        """
        with self._lock:
            before = len(self._chunks)
            self._chunks = [c for c in self._chunks if c.source != source_name]
            removed = before - len(self._chunks)
        logger.debug(f"Removed {removed} chunks of {source_name}")
        return removed

    def search(
        self,
        query_embedding: Sequence[float],
        top_k: int = 5
    ) -> List[ScoredChunk]:
        """
        Find most similar chunks to query.

        Args:
            query_embedding: Query vector
            top_k: Number of results to return

        Returns:
            Up to top_k ScoredChunk objects, highest similarity first;
            equal scores keep insertion order

        Example:
            >>> results = store.search(query_embedding, top_k=3)
            >>> for r in results:
            ...     print(f"{r.similarity:.3f} | {r.content[:60]}")
        """
        if top_k <= 0:
            return []

        with self._lock:
            scored = [
                ScoredChunk(
                    source=chunk.source,
                    content=chunk.content,
                    embedding=chunk.embedding,
                    similarity=cosine_similarity(query_embedding, chunk.embedding),
                )
                for chunk in self._chunks
            ]

        if not scored:
            logger.warning("Vector store is empty")
            return []

        # sorted() is stable, also with reverse=True
        scored = sorted(scored, key=lambda c: c.similarity, reverse=True)
        results = scored[:top_k]
        logger.debug(f"Retrieved {len(results)} chunks")
        return results

    def get_sources(self) -> List[str]:
        """Unique source names, in the order they were first added."""
        with self._lock:
            return list(dict.fromkeys(chunk.source for chunk in self._chunks))

    def has_source(self, source_name: str) -> bool:
        """Check if a document source already exists in the store."""
        with self._lock:
            return any(chunk.source == source_name for chunk in self._chunks)

    def size(self) -> int:
        """Return number of chunks in store."""
        with self._lock:
            return len(self._chunks)

    def clear(self) -> None:
        """Clear all chunks from store."""
        with self._lock:
            self._chunks = []
        logger.info("Cleared vector store")
