"""
Embeddings module
----------------
Purpose: Convert text to vector embeddings using local Ollama or Sentence-Transformers
"""
from enum import Enum
from typing import Dict, List, Optional
import logging

import numpy as np
import requests

from .exceptions import ProviderError

logger = logging.getLogger(__name__)


class EmbeddingIntent(str, Enum):
    """What an embedding will be used for. Some models embed queries and documents differently."""
    QUERY = "RETRIEVAL_QUERY"
    DOCUMENT = "RETRIEVAL_DOCUMENT"


# nomic-embed-text task prefixes
NOMIC_PREFIXES = {
    EmbeddingIntent.QUERY: "search_query: ",
    EmbeddingIntent.DOCUMENT: "search_document: ",
}


def _apply_prefix(prefixes: Dict[EmbeddingIntent, str], text: str, intent: EmbeddingIntent) -> str:
    return f"{prefixes.get(intent, '')}{text}"


class OllamaEmbeddingClient:
    """
    Client for Ollama embedding service

    Requires: ollama serve running on localhost:11434
    Model: nomic-embed-text (768 dimensions)
    """
    def __init__(
        self,
        base_url: str = "http://localhost:11434",
        model: str = "nomic-embed-text",
        timeout: float = 30,
        prefixes: Optional[Dict[EmbeddingIntent, str]] = None,
        check_connection: bool = True
    ):

        """
        Initialize the Ollama embedding client
        Args:
            base_url: Ollama server URL
            model: Embedding model name
            timeout: Request timeout in seconds
            prefixes: Text prefix per intent (nomic-style task prefixes by default)
            check_connection: Ping the server before first use
        """

        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self.prefixes = NOMIC_PREFIXES if prefixes is None else prefixes

        if check_connection:
            self._test_connection()

    def _test_connection(self) -> None:
        """Test if Ollama is running."""
        try:
            response = requests.get(
                f"{self.base_url}/api/tags",
                timeout=5
            )
        except requests.exceptions.RequestException:
            raise ProviderError(
                f"Cannot connect to Ollama at {self.base_url}. "
                "Start it with: ollama serve"
            )

        if response.status_code != 200:
            raise ProviderError(
                f"Ollama returned {response.status_code}",
                status_code=response.status_code
            )

        logger.info(f"✓ Connected to Ollama at {self.base_url}")

    def _request(self, inputs) -> List[List[float]]:
        try:
            response = requests.post(
                f"{self.base_url}/api/embed",
                json={
                    "model": self.model,
                    "input": inputs
                },
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise ProviderError(
                f"Ollama request timed out after {self.timeout}s"
            )
        except requests.exceptions.RequestException as e:
            raise ProviderError(
                f"Lost connection to Ollama at {self.base_url}: {e}"
            )

        if response.status_code != 200:
            raise ProviderError(
                f"Ollama error {response.status_code}: {response.text}",
                status_code=response.status_code
            )

        try:
            return response.json()["embeddings"]
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Unexpected Ollama response format: {e}")

    def embed(self, text: str, intent: EmbeddingIntent = EmbeddingIntent.QUERY) -> List[float]:
        """
        Get embedding for a single text.
        Args:
            text: Text to embed
            intent: Query or document embedding

        Returns:
            List of floats

        Raises:
            ProviderError: If the Ollama API fails
        """
        embeddings = self._request(_apply_prefix(self.prefixes, text, intent))
        if not embeddings:
            raise ProviderError("Ollama returned no embedding")
        return embeddings[0]

    def embed_batch(
        self,
        texts: List[str],
        intent: EmbeddingIntent = EmbeddingIntent.DOCUMENT
    ) -> List[List[float]]:
        """
        Get embeddings for multiple texts in one request.

        Args:
            texts: List of texts to embed
            intent: Query or document embedding

        Returns:
            List of embeddings (one per text, same order)
        """
        if not texts:
            return []
        return self._request([_apply_prefix(self.prefixes, t, intent) for t in texts])


class SentenceTransformerEmbeddingClient:
    """
    Client for Sentence-Transformers embeddings (local, free).

    No external service required - runs locally.
    Model: all-mpnet-base-v2 (768 dimensions)

    Install with: pip install sentence-transformers
    """

    def __init__(
        self,
        model_name: str = "all-mpnet-base-v2",
        prefixes: Optional[Dict[EmbeddingIntent, str]] = None
    ):
        """
        Initialize Sentence-Transformers embedding client.

        Args:
            model_name: HuggingFace model name
            prefixes: Optional text prefix per intent, for models trained with
                query/passage instructions (e.g. e5: "query: " / "passage: ")

        Note: First initialization downloads the model
        """
        logger.info(f"Initializing Sentence-Transformers (model: {model_name})")
        self.prefixes = prefixes or {}

        try:
            from sentence_transformers import SentenceTransformer
        except ImportError:
            raise ImportError(
                "sentence-transformers not installed. "
                "Install with: pip install 'notebook-rag[local]'"
            )

        try:
            self.model = SentenceTransformer(model_name)
            logger.info(f"✓ Loaded Sentence-Transformer model: {model_name}")
        except Exception as e:
            logger.error(f"Failed to load Sentence-Transformer model: {e}")
            raise ProviderError(f"Failed to load embedding model {model_name}: {e}")

    def embed(self, text: str, intent: EmbeddingIntent = EmbeddingIntent.QUERY) -> List[float]:
        """Get embedding for a single text."""
        return self.embed_batch([text], intent)[0]

    def embed_batch(
        self,
        texts: List[str],
        intent: EmbeddingIntent = EmbeddingIntent.DOCUMENT
    ) -> List[List[float]]:
        """
        Get embeddings for multiple texts (more efficient than calling embed() for each).

        Args:
            texts: List of texts to embed
            intent: Query or document embedding

        Returns:
            List of embeddings (one per text)
        """
        if not texts:
            return []
        try:
            embeddings = self.model.encode(
                [_apply_prefix(self.prefixes, t, intent) for t in texts],
                convert_to_numpy=True
            )
        except Exception as e:
            logger.error(f"Failed to embed batch: {e}")
            raise ProviderError(f"Local embedding failed: {e}")
        return [emb.tolist() for emb in embeddings]


def cosine_similarity(vec_a: List[float], vec_b: List[float]) -> float:
    """
    Calculate cosine similarity between two vectors.

    Args:
        vec_a: First vector
        vec_b: Second vector

    Returns:
        Similarity score from -1 to 1 (1 = identical). 0.0 when the vectors
        differ in length or either one has zero norm.

    Example:
        >>> cosine_similarity([1.0, 0.0, 0.0], [1.0, 0.0, 0.0])
        1.0
        >>> cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])
        0.0
    """
    if len(vec_a) != len(vec_b):
        return 0.0

    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)

    dot_product = np.dot(a, b)
    norm_a = np.dot(a, a)
    norm_b = np.dot(b, b)

    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = float(dot_product / (np.sqrt(norm_a) * np.sqrt(norm_b)))
    # rounding can push identical vectors a hair past 1
    return max(-1.0, min(1.0, similarity))
