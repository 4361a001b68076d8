"""
Messages
--------
Purpose: Append-only conversation log kept by the front end.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List
import itertools
import threading
import time

ROLES = ("user", "ai", "system")

WELCOME_MESSAGE = (
    "Hello! Please upload a `.txt`, `.pdf`, `.xlsx`, or `.md` document to get started. "
    "I will only answer questions based on the documents you provide."
)


@dataclass(frozen=True)
class Message:
    id: str
    role: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class Conversation:
    """Messages in the order they were posted. Messages are never edited or removed."""

    def __init__(self, greeting: bool = True):
        self._messages: List[Message] = []
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        if greeting:
            self._messages.append(Message(id="initial", role="ai", content=WELCOME_MESSAGE))

    def append(self, role: str, content: str, kind: str = None) -> Message:
        """
        Add a message.

        Args:
            role: "user", "ai" or "system"
            content: Message text
            kind: Id prefix, defaults to the role (e.g. "file-upload", "error")
        """
        if role not in ROLES:
            raise ValueError(f"Unknown message role: {role}")

        with self._lock:
            message = Message(
                id=f"{kind or role}-{int(time.time() * 1000)}-{next(self._counter)}",
                role=role,
                content=content,
            )
            self._messages.append(message)
        return message

    def messages(self) -> List[Message]:
        with self._lock:
            return list(self._messages)

    def __len__(self) -> int:
        return len(self._messages)
