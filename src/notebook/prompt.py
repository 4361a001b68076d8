"""
Prompt module
-------------
Purpose: Build the grounding prompt sent to the completion model.
"""
from typing import Dict, List, Sequence, Tuple

from .chunker import Chunk

DELIMITER = "---"

REFUSAL_MESSAGE = "Sorry, I could not find relevant information in the provided documents."

# Must not contain DELIMITER: gateway requests split the prompt on its first occurrence.
INSTRUCTIONS = (
    "You are a professional document analysis assistant. Your task is to strictly answer "
    "the user's question based on the \"Reference Material\" provided below.\n"
    "If you cannot find enough information in the reference material to answer the question, "
    f"you must respond with: \"{REFUSAL_MESSAGE}\"\n"
    "**Do not make up information or use your own pretrained knowledge.**\n"
    "Ensure your answer is clear, concise, and explicitly mentions the source document, "
    "for example: \"According to [Document Name], ...\"."
)

PROMPT_TEMPLATE = """{instructions}

{delimiter}
**Reference Material:**
{context}
{delimiter}

**User's Question:**
{question}

**Based on the reference material provided, please answer the user's question:**"""


def group_by_source(chunks: Sequence[Chunk]) -> Dict[str, str]:
    """
    Concatenate chunk contents per source, sources in first-seen order.

    Each content is followed by a blank line.
    """
    grouped: Dict[str, str] = {}
    for chunk in chunks:
        grouped[chunk.source] = grouped.get(chunk.source, "") + chunk.content + "\n\n"
    return grouped


def build_context_string(chunks: Sequence[Chunk]) -> str:
    """
    Render numbered reference blocks, one per source document.

    Args:
        chunks: Retrieved chunks, ranked

    Returns:
        Context string
    """
    context_parts: List[str] = []

    for i, (source_name, content) in enumerate(group_by_source(chunks).items(), 1):
        context_parts.append(
            f"[{i}] Document Name: {source_name}\n"
            f"Content:\n{content.strip()}\n\n"
            f"{DELIMITER}\n\n"
        )

    return "".join(context_parts)


def build_prompt(question: str, chunks: Sequence[Chunk]) -> str:
    """
    Build the final prompt for the LLM.

    Args:
        question (str): User's question
        chunks: Retrieved chunks, ranked

    Returns:
        str: Prompt restricted to the reference material
    """
    return PROMPT_TEMPLATE.format(
        instructions=INSTRUCTIONS,
        delimiter=DELIMITER,
        context=build_context_string(chunks),
        question=question,
    )


def split_prompt(prompt: str) -> Tuple[str, str]:
    """
    Split a prompt into system instructions and user content.

    Everything before the first delimiter is the system part; the rest,
    delimiter included, is the user part.
    """
    head, sep, rest = prompt.partition(DELIMITER)
    if not sep:
        return "", prompt.strip()
    return head.strip(), f"{DELIMITER}{rest}".strip()
