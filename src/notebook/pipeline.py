"""
Notebook Pipeline
-----------------
Purpose: One session's documents and questions, behind a small API:
upload, delete, ask, list.
"""

from typing import Any, Dict, List, Optional, Set
import logging
import threading

from .chunker import chunk_text
from .config import NotebookConfig, PROVIDER_GATEWAY
from .exceptions import DuplicateSourceError, ExtractionError
from .file_processor import extract_text
from .orchestrator import RetrievalOrchestrator
from .vector_store import InMemoryVectorStore

logger = logging.getLogger(__name__)


def get_embeddings_client(config: NotebookConfig):
    """
    Get the embeddings client for the configured provider.

    gateway: GatewayEmbeddingClient
    direct: Ollama or Sentence-Transformers, by config.embedding_backend
    """
    if config.provider == PROVIDER_GATEWAY:
        from .gateway import GatewayClient, GatewayEmbeddingClient
        logger.info("Using AI Gateway embeddings")
        client = GatewayClient(config.gateway_url, config.gateway_api_key, config.request_timeout)
        return GatewayEmbeddingClient(client, model=config.gateway_embedding_model)

    if config.embedding_backend == "ollama":
        from .embeddings import OllamaEmbeddingClient
        logger.info("Using Ollama embeddings")
        return OllamaEmbeddingClient(
            base_url=config.ollama_base_url,
            model=config.embedding_model or "nomic-embed-text",
            timeout=config.request_timeout
        )

    # sentence-transformers (default, free, works everywhere)
    from .embeddings import SentenceTransformerEmbeddingClient
    logger.info("Using Sentence-Transformers embeddings (local)")
    return SentenceTransformerEmbeddingClient(config.embedding_model or "all-mpnet-base-v2")


def get_llm_client(config: NotebookConfig):
    """Get the completion client for the configured provider."""
    if config.provider == PROVIDER_GATEWAY:
        from .gateway import GatewayClient, GatewayLLMClient
        logger.info("Using AI Gateway chat completions")
        client = GatewayClient(config.gateway_url, config.gateway_api_key, config.request_timeout)
        return GatewayLLMClient(client, model=config.gateway_chat_model)

    from .llm import GroqLLMClient
    logger.info("Using Groq chat completions")
    return GroqLLMClient(
        api_key=config.groq_api_key,
        model_name=config.chat_model,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
        timeout=config.request_timeout
    )


class NotebookPipeline:
    """
    End-to-end document Q&A for one session.

    Workflow:
        1. Upload: extract, chunk, embed, index
        2. Ask: retrieve and answer
        3. Delete: drop a document's chunks
    """
    def __init__(
        self,
        config: NotebookConfig = None,
        embeddings=None,
        llm=None,
        vector_store: InMemoryVectorStore = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the pipeline with all components.

        Args:
            config: NotebookConfig with provider settings and policy
            embeddings: Optional embeddings client (for dependency injection)
            llm: Optional LLM client (for dependency injection)
            vector_store: Optional store, a fresh one otherwise
            logger: Optional logger for pipeline and orchestrator messages

        Raises:
            ConfigurationError: If a client has to be built and config is incomplete
        """
        self.config = config or NotebookConfig()
        self.logger = logger or logging.getLogger(__name__)
        self.logger.info("Initializing notebook pipeline...")

        if embeddings is None or llm is None:
            self.config.validate()

        self.embeddings = embeddings if embeddings is not None else get_embeddings_client(self.config)
        self.llm = llm if llm is not None else get_llm_client(self.config)
        self.vector_store = vector_store if vector_store is not None else InMemoryVectorStore()
        self._uploads_lock = threading.Lock()
        self._uploading: Set[str] = set()
        self.orchestrator = RetrievalOrchestrator(
            self.embeddings,
            self.llm,
            top_k=self.config.top_k,
            batch_size=self.config.embed_batch_size,
            logger=self.logger
        )

        self.logger.info("✓ Notebook pipeline initialized")

    def upload_document(self, name: str, raw_bytes: bytes) -> Dict[str, Any]:
        """
        Extract, chunk, embed and index a document.

        Nothing is added to the store unless every step succeeds.

        Args:
            name: File name, also the source name shown in answers
            raw_bytes: File content

        Returns:
            {"source": name, "chunks_indexed": n}

        Raises:
            DuplicateSourceError: A document with this name is already indexed
            ExtractionError: Unsupported, unreadable or empty file
            EmbeddingMismatchError, ProviderError: Embedding failed
        """
        self._reserve(name)
        try:
            return self._ingest(name, raw_bytes)
        finally:
            with self._uploads_lock:
                self._uploading.discard(name)

    def _reserve(self, name: str) -> None:
        # Name is taken if indexed or being uploaded by another thread
        with self._uploads_lock:
            if name in self._uploading or self.vector_store.has_source(name):
                raise DuplicateSourceError(name)
            self._uploading.add(name)

    def _ingest(self, name: str, raw_bytes: bytes) -> Dict[str, Any]:
        self.logger.info(f"Ingesting document: {name}")

        # Step 1: extract
        text = extract_text(name, raw_bytes)

        # Step 2: chunk
        chunks = chunk_text(
            name,
            text,
            chunk_size=self.config.chunk_size,
            overlap_sentences=self.config.overlap_sentences
        )
        if not chunks:
            raise ExtractionError(f'No text could be extracted from "{name}".')
        self.logger.info(f"✓ Chunks created: {len(chunks)}")

        # Step 3: embed
        embedded = self.orchestrator.embed_chunks(chunks)

        # Step 4: index
        self.vector_store.add(embedded)
        self.logger.info(f"✓ Indexed {len(embedded)} chunks of {name}")

        return {"source": name, "chunks_indexed": len(embedded)}

    def delete_document(self, name: str) -> None:
        """Remove a document and all its chunks. Unknown names are ignored."""
        removed = self.vector_store.remove_by_source(name)
        self.logger.info(f"Deleted {name} ({removed} chunks)")

    def ask(self, question: str) -> str:
        """Answer a question from the uploaded documents."""
        self.logger.info(f"Querying: {question}")
        return self.orchestrator.answer(question, self.vector_store)

    def list_sources(self) -> List[str]:
        """Names of the uploaded documents."""
        return self.vector_store.get_sources()

    def reset(self) -> None:
        """Drop every document."""
        self.vector_store.clear()

    def get_stats(self) -> Dict[str, Any]:
        """Get pipeline statistics."""
        return {
            "sources": self.list_sources(),
            "total_chunks": self.vector_store.size(),
            "config": {
                "provider": self.config.provider,
                "chunk_size": self.config.chunk_size,
                "overlap_sentences": self.config.overlap_sentences,
                "top_k": self.config.top_k,
                "embed_batch_size": self.config.embed_batch_size
            }
        }
