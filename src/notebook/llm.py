"""
LLM Module
----------
Purpose: Send grounding prompts to a chat model and return its answer
"""
from groq import Groq
import logging

from .exceptions import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)


class GroqLLMClient:
    """
    Client for direct Groq chat completions
    Requires: Groq API key
    Model: llama-3.1-8b-instant -> check available models using client.models.list()
    """
    def __init__(
        self,
        api_key: str,
        model_name: str = "llama-3.1-8b-instant",
        max_tokens: int = 1024,
        temperature: float = 0.2,
        timeout: float = 30,
    ):
        """
        Initialize Groq LLM client
        Args:
            api_key (str): Groq API key
            model_name (str): Groq model name
            max_tokens (int): Maximum number of tokens to generate
            temperature (float): 0-1, lower keeps answers close to the references
            timeout (float): Request timeout in seconds
        """
        if not api_key:
            raise ConfigurationError("GROQ_API_KEY is required for the direct provider")

        self.client = Groq(api_key=api_key, timeout=timeout, max_retries=0)
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature

        logger.info(f"Groq LLM client initialized with model: {self.model_name}")

    def complete(self, prompt: str) -> str:
        """
        Send a prompt to Groq
        Args:
            prompt (str): Fully built grounding prompt

        Returns:
            The model's answer, unmodified

        Raises:
            ProviderError: If the Groq API fails
        """
        logger.debug(f"Querying Groq with {len(prompt)} chars prompt")
        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=[
                    {"role": "user", "content": prompt}
                ],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error(f"Groq query failed: {e}")
            raise ProviderError(
                f"LLM query failed: {e}",
                status_code=getattr(e, "status_code", None)
            ) from e

        if not response.choices or response.choices[0].message.content is None:
            raise ProviderError("LLM query failed: Groq returned an empty completion")

        answer = response.choices[0].message.content
        logger.debug(f"Groq responded ({len(answer)} chars)")
        return answer
