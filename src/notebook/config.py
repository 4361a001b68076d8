"""
Config module
-------------
Purpose: Load and validate provider settings and retrieval policy.

All settings are read once at process start and passed explicitly into the
pipeline; nothing here builds clients.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import os

from dotenv import load_dotenv

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

PROVIDER_DIRECT = "direct"
PROVIDER_GATEWAY = "gateway"
PROVIDERS = (PROVIDER_DIRECT, PROVIDER_GATEWAY)

EMBEDDING_BACKENDS = ("sentence-transformers", "ollama")

# Retrieval policy
TOP_K = 5
CHUNK_SIZE = 1500
OVERLAP_SENTENCES = 2
EMBED_BATCH_SIZE = 100


def load_env() -> Optional[str]:
    """Load environment variables from the project root .env file."""
    env_paths = [
        os.path.join(os.path.dirname(__file__), '../..', '.env'),
        os.path.join(os.path.dirname(__file__), '.env'),
    ]

    for env_path in env_paths:
        if os.path.exists(env_path):
            load_dotenv(env_path)
            logger.debug(f"Loaded .env from: {env_path}")
            return env_path

    logger.debug("No .env file found")
    return None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'") from None


@dataclass(frozen=True)
class NotebookConfig:
    """Provider selection, model identifiers, credentials and retrieval policy."""
    provider: str = PROVIDER_DIRECT

    # direct mode
    groq_api_key: Optional[str] = None
    chat_model: str = "llama-3.1-8b-instant"
    embedding_backend: str = "sentence-transformers"
    embedding_model: Optional[str] = None
    ollama_base_url: str = "http://localhost:11434"

    # gateway mode
    gateway_url: Optional[str] = None
    gateway_api_key: Optional[str] = None
    gateway_embedding_model: str = "text-embedding-004"
    gateway_chat_model: str = "gemini-2.5-flash"

    request_timeout: float = 30.0
    max_tokens: int = 1024
    temperature: float = 0.2
    log_level: str = "INFO"

    top_k: int = TOP_K
    chunk_size: int = CHUNK_SIZE
    overlap_sentences: int = OVERLAP_SENTENCES
    embed_batch_size: int = EMBED_BATCH_SIZE

    @classmethod
    def from_env(cls, load_dotenv_file: bool = True) -> "NotebookConfig":
        """
        Build a config from environment variables.

        Environment Variables:
            AI_PROVIDER: "direct" (default) or "gateway"
            GROQ_API_KEY, GROQ_CHAT_MODEL: direct chat completions
            EMBEDDING_BACKEND: "sentence-transformers" (default) or "ollama"
            EMBEDDING_MODEL, OLLAMA_BASE_URL: direct embeddings
            AI_GATEWAY_URL, AI_GATEWAY_API_KEY,
            AI_GATEWAY_EMBEDDING_MODEL, AI_GATEWAY_CHAT_MODEL: gateway mode
            REQUEST_TIMEOUT: seconds per provider request
            LOG_LEVEL: root log level
        """
        if load_dotenv_file:
            load_env()

        defaults = cls()
        return cls(
            provider=os.getenv("AI_PROVIDER", defaults.provider).strip().lower(),
            groq_api_key=os.getenv("GROQ_API_KEY") or None,
            chat_model=os.getenv("GROQ_CHAT_MODEL", defaults.chat_model),
            embedding_backend=os.getenv(
                "EMBEDDING_BACKEND", defaults.embedding_backend
            ).strip().lower(),
            embedding_model=os.getenv("EMBEDDING_MODEL") or None,
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", defaults.ollama_base_url),
            gateway_url=(os.getenv("AI_GATEWAY_URL") or "").rstrip("/") or None,
            gateway_api_key=os.getenv("AI_GATEWAY_API_KEY") or None,
            gateway_embedding_model=os.getenv(
                "AI_GATEWAY_EMBEDDING_MODEL", defaults.gateway_embedding_model
            ),
            gateway_chat_model=os.getenv(
                "AI_GATEWAY_CHAT_MODEL", defaults.gateway_chat_model
            ),
            request_timeout=_env_float("REQUEST_TIMEOUT", defaults.request_timeout),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )

    def validate(self) -> "NotebookConfig":
        """
        Check the selected provider mode has what it needs.

        Returns:
            self, so calls can be chained

        Raises:
            ConfigurationError: On an unknown mode or missing credentials
        """
        if self.provider not in PROVIDERS:
            raise ConfigurationError(
                f"Unknown AI provider '{self.provider}'. Expected one of: {', '.join(PROVIDERS)}"
            )

        if self.provider == PROVIDER_GATEWAY:
            missing = [
                name for name, value in (
                    ("AI_GATEWAY_URL", self.gateway_url),
                    ("AI_GATEWAY_API_KEY", self.gateway_api_key),
                ) if not value
            ]
            if missing:
                raise ConfigurationError(
                    "AI provider is 'gateway' but "
                    f"{' and '.join(missing)} {'is' if len(missing) == 1 else 'are'} not set."
                )
        else:
            if not self.groq_api_key:
                raise ConfigurationError(
                    "AI provider is 'direct' but GROQ_API_KEY is not set."
                )
            if self.embedding_backend not in EMBEDDING_BACKENDS:
                raise ConfigurationError(
                    f"Unknown embedding backend '{self.embedding_backend}'. "
                    f"Expected one of: {', '.join(EMBEDDING_BACKENDS)}"
                )

        if self.top_k < 1 or self.embed_batch_size < 1 or self.chunk_size < 1:
            raise ConfigurationError("top_k, chunk_size and embed_batch_size must be positive")

        return self

    def log_summary(self, log: logging.Logger = None) -> None:
        """Log the active configuration without exposing credentials."""
        log = log or logger
        log.info(f"AI provider: {self.provider}")
        if self.provider == PROVIDER_GATEWAY:
            log.info(f"  Gateway base URL: {self.gateway_url or 'Not Set'}")
            log.info(f"  Gateway chat model: {self.gateway_chat_model}")
            log.info(f"  Gateway embedding model: {self.gateway_embedding_model}")
            log.info(f"  Gateway API key set: {bool(self.gateway_api_key)}")
        else:
            log.info(f"  Chat model: {self.chat_model}")
            log.info(f"  Embedding backend: {self.embedding_backend}")
            log.info(f"  Groq API key set: {bool(self.groq_api_key)}")
