"""
Custom Exceptions for the School Directory
"""


class AppError(Exception):
    """Base exception for all application errors"""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# Database Exceptions
class DatabaseError(AppError):
    """Database operation failed"""

    pass


class StoreError(DatabaseError):
    """Record store could not be reached or refused the operation"""

    pass


# Embedding service Exceptions
class UpstreamServiceError(AppError):
    """Embedding service failed"""

    pass


class UpstreamUnavailableError(UpstreamServiceError):
    """Embedding service could not be reached at all (network, credentials)"""

    pass


class EmbeddingRequestError(UpstreamServiceError):
    """A single embedding request failed"""

    pass


class EmbeddingTimeoutError(EmbeddingRequestError):
    """Embedding request exceeded the configured timeout"""

    pass


# Index Exceptions
class SemanticIndexError(AppError):
    """In-memory index operation failed"""

    pass


class IndexRebuildInProgressError(SemanticIndexError):
    """A rebuild was requested while another one is running"""

    pass


class DimensionMismatchError(SemanticIndexError):
    """Vectors of different dimensionality were compared"""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        self.hint = "Rebuild the index with the current embedding model"
        super().__init__(f"Vector dimension mismatch: expected {expected}, got {actual}")


# LLM Exceptions
class LLMError(AppError):
    """Chat LLM operation failed"""

    pass


class LLMRateLimitError(LLMError):
    """LLM API rate limit exceeded"""

    pass


# Validation Exceptions
class ValidationError(AppError):
    """Input validation failed"""

    pass
