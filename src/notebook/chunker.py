"""
Chunker module
--------------
Purpose: Split document text into sentence-aligned, overlapping chunks.
"""

from typing import List, Dict
from dataclasses import dataclass
import re

from .config import CHUNK_SIZE, OVERLAP_SENTENCES

# A sentence is a run of non-terminators followed by any terminators.
# Abbreviations, decimals and ellipses over-split; chunk boundaries depend on this.
_SENTENCE_PATTERN = re.compile(r"[^.!?]+[.!?]*")


@dataclass
class Chunk:
    source: str
    content: str


def split_sentences(text: str) -> List[str]:
    """
    Split text into sentences on '.', '!' and '?'.

    Terminators stay attached to their sentence. Surrounding whitespace is
    stripped and empty pieces are dropped.

    Example:
        >>> split_sentences("Hi there. How are you?  Fine!")
        ['Hi there.', 'How are you?', 'Fine!']
    """
    sentences = (match.strip() for match in _SENTENCE_PATTERN.findall(text))
    return [s for s in sentences if s]


def chunk_text(
    source_name: str,
    text: str,
    chunk_size: int = CHUNK_SIZE,
    overlap_sentences: int = OVERLAP_SENTENCES
) -> List[Chunk]:
    """
    Split text into chunks of roughly chunk_size characters.

    Args:
        source_name (str): Document the text came from.
        text (str): The text to split into chunks.
        chunk_size (int): Target chunk length in characters.
        overlap_sentences (int): Sentences carried over into the next chunk.

    Returns:
        List[Chunk]: Chunks in document order. Empty text gives [].
    """
    sentences = split_sentences(text)

    if not sentences:
        return []

    # Short documents pass through untouched
    if len(text) < chunk_size:
        return [Chunk(source=source_name, content=text)]

    windows = []
    current = []

    for sentence in sentences:
        current_length = len(' '.join(current))

        if current and current_length + len(sentence) > chunk_size:
            windows.append(' '.join(current))
            start = max(0, len(current) - overlap_sentences)
            current = current[start:]

        current.append(sentence)

    if current:
        windows.append(' '.join(current))

    return [Chunk(source=source_name, content=window) for window in windows]


def chunk_documents(
    documents: Dict[str, str],
    chunk_size: int = CHUNK_SIZE,
    overlap_sentences: int = OVERLAP_SENTENCES
) -> Dict[str, List[Chunk]]:
    """
    Chunk multiple documents.

    Args:
        documents: Dict of {source_name: text}
        chunk_size: Characters per chunk
        overlap_sentences: Sentence overlap

    Returns:
        Dict of {source_name: [chunks]}

    Example:
        >>> docs = {"a.txt": "Text 1.", "b.txt": "Text 2."}
        >>> chunked = chunk_documents(docs)
        >>> chunked["a.txt"][0].source
        'a.txt'
    """
    return {
        source_name: chunk_text(source_name, text, chunk_size, overlap_sentences)
        for source_name, text in documents.items()
    }
