"""
Exceptions
----------
Purpose: Error types raised by the notebook core and its provider adapters.
"""


class NotebookError(Exception):
    """Base class for all notebook errors."""


class ConfigurationError(NotebookError, ValueError):
    """Selected provider mode is missing credentials or an endpoint."""


class ExtractionError(NotebookError):
    """A file could not be turned into text."""


class UnsupportedFileTypeError(ExtractionError, ValueError):
    """File extension has no registered extractor."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file type: .{extension}")


class DuplicateSourceError(NotebookError):
    """A document with the same name is already indexed."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(f'File "{source}" is already uploaded.')


class EmbeddingMismatchError(NotebookError, RuntimeError):
    """Embedding provider returned a different count than chunks submitted."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(
            f"Mismatch between number of chunks ({expected}) "
            f"and returned embeddings ({received})."
        )


class ProviderError(NotebookError, RuntimeError):
    """
    Embedding or completion provider call failed.

    Covers non-2xx responses, transport failures, timeouts and response
    bodies that do not match the expected shape.
    """

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)
