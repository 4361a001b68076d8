"""
Gateway module
--------------
Purpose: Call an OpenAI-compatible AI gateway for embeddings and chat completions.

Requests go to {base_url}/{model}/{endpoint}. Responses are validated into
typed models before anything else sees them.
"""
from typing import Any, Dict, List, Optional
import logging

import requests
from pydantic import BaseModel, ValidationError

from .embeddings import EmbeddingIntent
from .exceptions import ProviderError
from .prompt import split_prompt

logger = logging.getLogger(__name__)

EMBEDDINGS_ENDPOINT = "v1/embeddings"
CHAT_COMPLETIONS_ENDPOINT = "v1/chat/completions"


# ==================== Response Models ====================

class EmbeddingItem(BaseModel):
    embedding: List[float]
    index: Optional[int] = None


class EmbeddingResponse(BaseModel):
    data: List[EmbeddingItem]

    def vectors(self) -> List[List[float]]:
        """Embeddings in input order."""
        items = self.data
        if all(item.index is not None for item in items):
            items = sorted(items, key=lambda item: item.index)
        return [item.embedding for item in items]


class ChatMessage(BaseModel):
    role: str
    content: str


class ChatChoice(BaseModel):
    message: ChatMessage


class ChatCompletionResponse(BaseModel):
    choices: List[ChatChoice]

    def text(self) -> str:
        if not self.choices:
            raise ProviderError("AI Gateway returned no choices")
        return self.choices[0].message.content


# ==================== Transport ====================

class GatewayClient:
    """
    Thin HTTP wrapper around the gateway.

    Every failure (transport, non-2xx, bad body) is raised as ProviderError.
    """
    def __init__(self, base_url: str, api_key: str, timeout: float = 30):
        if not base_url or not api_key:
            raise ProviderError(
                "AI Gateway is the configured provider, but its URL or API Key is missing."
            )
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout

    def post(self, endpoint: str, call_name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON body and return the decoded JSON response.

        Args:
            endpoint: Path after the model segment, e.g. "v1/embeddings"
            call_name: Human-readable name used in error messages
            body: Request body, must contain "model"

        Raises:
            ProviderError: On any failure
        """
        model = body.get("model")
        if not model:
            raise ProviderError('The request body for gateway calls must contain a "model" property.')

        url = f"{self.base_url}/{model}/{endpoint}"
        try:
            response = requests.post(
                url,
                json=body,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"AI Gateway request for {call_name} timed out")
            raise ProviderError(
                f"AI Gateway request for {call_name} timed out after {self.timeout}s"
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Error during Gateway request for {call_name}: {e}")
            raise ProviderError(f"AI Gateway request for {call_name} failed: {e}")

        try:
            data = response.json()
        except ValueError:
            data = None

        if not response.ok:
            detail = _error_detail(data) or response.reason or response.text
            logger.error(f"AI Gateway {call_name} failed with status {response.status_code}")
            raise ProviderError(
                f"AI Gateway request for {call_name} failed with status "
                f"{response.status_code}: {detail}",
                status_code=response.status_code,
            )

        if not isinstance(data, dict):
            raise ProviderError(f"AI Gateway returned a non-JSON body for {call_name}")

        return data


def _error_detail(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            return error.get("message")
        if isinstance(error, str):
            return error
    return None


def _decode(model_cls, data: Dict[str, Any], call_name: str):
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        raise ProviderError(f"Unexpected AI Gateway response for {call_name}: {e}")


# ==================== Provider Adapters ====================

class GatewayEmbeddingClient:
    """Embeddings through the gateway. The OpenAI format has no intent field, so intent is not sent."""

    def __init__(self, client: GatewayClient, model: str = "text-embedding-004"):
        self.client = client
        self.model = model

    def embed(self, text: str, intent: EmbeddingIntent = EmbeddingIntent.QUERY) -> List[float]:
        data = self.client.post(
            EMBEDDINGS_ENDPOINT, "single embedding", {"input": text, "model": self.model}
        )
        vectors = _decode(EmbeddingResponse, data, "single embedding").vectors()
        if not vectors:
            raise ProviderError("AI Gateway returned no embedding")
        return vectors[0]

    def embed_batch(
        self,
        texts: List[str],
        intent: EmbeddingIntent = EmbeddingIntent.DOCUMENT
    ) -> List[List[float]]:
        if not texts:
            return []
        data = self.client.post(
            EMBEDDINGS_ENDPOINT, "batch embedding", {"input": list(texts), "model": self.model}
        )
        return _decode(EmbeddingResponse, data, "batch embedding").vectors()


class GatewayLLMClient:
    """Chat completions through the gateway, instructions sent as the system message."""

    def __init__(self, client: GatewayClient, model: str = "gemini-2.5-flash"):
        self.client = client
        self.model = model

    def complete(self, prompt: str) -> str:
        system_instruction, user_content = split_prompt(prompt)
        messages = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": user_content})

        data = self.client.post(
            CHAT_COMPLETIONS_ENDPOINT,
            "content generation",
            {"model": self.model, "messages": messages, "stream": False},
        )
        return _decode(ChatCompletionResponse, data, "content generation").text()
