"""
Notebook Package
================

Document question answering: upload files, index them in memory, and answer
questions only from what was uploaded.
"""

from .chunker import chunk_text, chunk_documents, split_sentences, Chunk
from .config import NotebookConfig
from .embeddings import (
    EmbeddingIntent,
    OllamaEmbeddingClient,
    SentenceTransformerEmbeddingClient,
    cosine_similarity,
)
from .exceptions import (
    NotebookError,
    ConfigurationError,
    ExtractionError,
    UnsupportedFileTypeError,
    DuplicateSourceError,
    EmbeddingMismatchError,
    ProviderError,
)
from .vector_store import InMemoryVectorStore, EmbeddedChunk, ScoredChunk
from .prompt import build_prompt, split_prompt
from .file_processor import extract_text, SUPPORTED_EXTENSIONS
from .orchestrator import RetrievalOrchestrator
from .pipeline import NotebookPipeline, get_embeddings_client, get_llm_client
from .messages import Message, Conversation

__all__ = [
    # Chunking
    "chunk_text",
    "chunk_documents",
    "split_sentences",
    "Chunk",
    # Config
    "NotebookConfig",
    # Embeddings
    "EmbeddingIntent",
    "OllamaEmbeddingClient",
    "SentenceTransformerEmbeddingClient",
    "cosine_similarity",
    # Errors
    "NotebookError",
    "ConfigurationError",
    "ExtractionError",
    "UnsupportedFileTypeError",
    "DuplicateSourceError",
    "EmbeddingMismatchError",
    "ProviderError",
    # Vector Store
    "InMemoryVectorStore",
    "EmbeddedChunk",
    "ScoredChunk",
    # Prompt
    "build_prompt",
    "split_prompt",
    # Files
    "extract_text",
    "SUPPORTED_EXTENSIONS",
    # Orchestration
    "RetrievalOrchestrator",
    "NotebookPipeline",
    "get_embeddings_client",
    "get_llm_client",
    # Conversation
    "Message",
    "Conversation",
]

__version__ = "0.1.0"
