"""Exceptions raised by vector store providers."""


class VectorStoreError(Exception):
    """Base exception for vector store failures."""

    retryable: bool = False


class ConfigurationError(VectorStoreError):
    """Active backend selection or connection settings do not fit this provider."""


class VectorStoreConnectionError(VectorStoreError):
    """Authentication or handshake with the backing store failed."""


class InvalidArgumentError(VectorStoreError, ValueError):
    """A required parameter was missing or malformed."""


class DimensionMismatchError(VectorStoreError, ValueError):
    """Embedding length does not match the namespace's vector column."""

    def __init__(
        self,
        expected: int,
        actual: int,
        index: int | None = None,
        namespace: str | None = None,
    ):
        self.expected = expected
        self.actual = actual
        self.index = index
        self.namespace = namespace

        where = f" at record {index}" if index is not None else ""
        target = f" for namespace {namespace!r}" if namespace else ""
        super().__init__(
            f"Expected vector of dimension {expected}{target}, got {actual}{where}"
        )


class EmbeddingError(VectorStoreError):
    """Embedding provider returned no usable vectors."""


class NamespaceNotFoundError(VectorStoreError):
    """An explicit lookup targeted a namespace that does not exist."""

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"Namespace {namespace!r} does not exist")


class NamespaceUnavailableError(VectorStoreError):
    """The namespace table disappeared mid-operation (e.g. a concurrent drop)."""

    retryable = True

    def __init__(self, namespace: str):
        self.namespace = namespace
        super().__init__(f"Namespace {namespace!r} became unavailable during the operation")


class VectorWriteError(VectorStoreError):
    """A record failed inside a batched write; the whole batch was rolled back."""

    def __init__(self, index: int, record_id: str, reason: str):
        self.index = index
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Failed to write record {index} ({record_id}): {reason}")
