"""
Retrieval Orchestrator
----------------------
Purpose: Embed, search, prompt and complete; and embed chunks for indexing.
"""

from typing import List, Optional, Sequence
import logging

from .chunker import Chunk
from .config import EMBED_BATCH_SIZE, TOP_K
from .embeddings import EmbeddingIntent
from .exceptions import EmbeddingMismatchError
from .prompt import build_prompt
from .vector_store import EmbeddedChunk, InMemoryVectorStore

NO_DOCUMENTS_MESSAGE = "Please upload at least one document before asking a question."
NO_RELEVANT_MESSAGE = (
    "I couldn't find any relevant information in your documents to answer that question."
)


class RetrievalOrchestrator:
    """
    Coordinates the embedding provider, the vector store and the completion provider.

    embeddings must offer embed(text, intent) and embed_batch(texts, intent);
    llm must offer complete(prompt). Provider errors propagate unchanged.
    """
    def __init__(
        self,
        embeddings,
        llm,
        top_k: int = TOP_K,
        batch_size: int = EMBED_BATCH_SIZE,
        logger: Optional[logging.Logger] = None
    ):
        self.embeddings = embeddings
        self.llm = llm
        self.top_k = top_k
        self.batch_size = batch_size
        self.logger = logger or logging.getLogger(__name__)

    def embed_chunks(self, chunks: Sequence[Chunk]) -> List[EmbeddedChunk]:
        """
        Get document embeddings for chunks, in order.

        Batches of at most batch_size are sent one after another.

        Args:
            chunks: Chunks to embed

        Returns:
            One EmbeddedChunk per input chunk, same position

        Raises:
            EmbeddingMismatchError: Provider returned a different number of vectors
        """
        if not chunks:
            return []

        contents = [chunk.content for chunk in chunks]
        embeddings: List[List[float]] = []

        for start in range(0, len(contents), self.batch_size):
            batch = contents[start:start + self.batch_size]
            batch_vectors = self.embeddings.embed_batch(batch, EmbeddingIntent.DOCUMENT)
            if len(batch_vectors) != len(batch):
                self.logger.error(
                    f"Embedding count mismatch in batch starting at {start}: "
                    f"{len(batch)} chunks, {len(batch_vectors)} embeddings"
                )
                raise EmbeddingMismatchError(len(batch), len(batch_vectors))
            embeddings.extend(batch_vectors)
            self.logger.debug(f"  → Embedded batch {start // self.batch_size + 1} ({len(batch)} chunks)")

        if len(embeddings) != len(chunks):
            self.logger.error(
                f"Embedding count mismatch: {len(chunks)} chunks, {len(embeddings)} embeddings"
            )
            raise EmbeddingMismatchError(len(chunks), len(embeddings))

        return [
            EmbeddedChunk(source=chunk.source, content=chunk.content, embedding=list(embedding))
            for chunk, embedding in zip(chunks, embeddings)
        ]

    def answer(self, question: str, store: InMemoryVectorStore) -> str:
        """
        Answer a question from the documents in the store.

        Args:
            question: User's question
            store: Vector store to search

        Returns:
            The model's answer verbatim, or a fixed message when there are
            no documents or nothing relevant
        """
        if not store.get_sources():
            self.logger.info("No documents uploaded, skipping retrieval")
            return NO_DOCUMENTS_MESSAGE

        # Step 1: Embed the question
        question_embedding = self.embeddings.embed(question, EmbeddingIntent.QUERY)
        self.logger.debug("  → Query embedded")

        # Step 2: Retrieve relevant chunks
        results = store.search(question_embedding, self.top_k)
        self.logger.debug(f"  → Retrieved {len(results)} chunks")
        if not results:
            return NO_RELEVANT_MESSAGE

        # Step 3: Build prompt
        prompt = build_prompt(question, results)
        self.logger.debug(f"  → Built prompt ({len(prompt)} chars)")

        # Step 4: Complete
        answer = self.llm.complete(prompt)
        self.logger.debug(f"  → LLM responded ({len(answer)} chars)")
        return answer
