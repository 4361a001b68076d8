"""
Shared test fixtures: fake embedding and completion providers that record calls.
"""

from typing import Callable, List, Optional

import pytest

from src.notebook import EmbeddingIntent, NotebookConfig, NotebookPipeline


class FakeEmbeddings:
    """Embeds text with a plain function and records every call."""

    def __init__(self, embed_fn: Optional[Callable[[str], List[float]]] = None, drop: int = 0):
        self.embed_fn = embed_fn or (lambda text: [float(len(text)), 1.0])
        self.drop = drop
        self.calls = []

    def embed(self, text, intent=EmbeddingIntent.QUERY):
        self.calls.append(("embed", [text], intent))
        return self.embed_fn(text)

    def embed_batch(self, texts, intent=EmbeddingIntent.DOCUMENT):
        self.calls.append(("embed_batch", list(texts), intent))
        vectors = [self.embed_fn(t) for t in texts]
        return vectors[:len(vectors) - self.drop] if self.drop else vectors


class EchoLLM:
    """Returns the prompt it was given."""

    def __init__(self):
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        return prompt


class FailingLLM:
    def __init__(self, error):
        self.error = error
        self.prompts = []

    def complete(self, prompt):
        self.prompts.append(prompt)
        raise self.error


def make_sentences(count: int, word: str = "topic", start: int = 0) -> List[str]:
    """Distinct sentences of about fifty characters each."""
    return [
        f"Sentence number {i} talks about the {word} in detail."
        for i in range(start, start + count)
    ]


@pytest.fixture
def fake_embeddings():
    return FakeEmbeddings()


@pytest.fixture
def echo_llm():
    return EchoLLM()


@pytest.fixture
def pipeline(fake_embeddings, echo_llm):
    return NotebookPipeline(
        config=NotebookConfig(),
        embeddings=fake_embeddings,
        llm=echo_llm
    )
