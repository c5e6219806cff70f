"""Custom exception hierarchy for ragdesk.

All application exceptions inherit from :class:`RagDeskError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "ollama", "pymupdf", "sqlite") caused the failure.

    RagDeskError  (base -- catch-all for any ragdesk error)
    +-- ExtractionError          (file -> text conversion)
    +-- EmbeddingError           (embedding call or response validation)
    +-- StreamError              (model stream failure mid-generation)
    +-- NotFoundError            (unknown conversation / document / plugin)
    +-- PluginError              (tool plugin execution failure)
    +-- ConfigurationError       (startup / missing config)
    +-- ProviderUnavailableError (external service down / unreachable)

Per-chunk embedding failures are logged and skipped by the ingestion
service; whole-document failures become ``status=failed``; stream failures
become a single ``error`` packet.
"""


class RagDeskError(Exception):
    """Base exception for all ragdesk errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[ollama] connection refused``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class ExtractionError(RagDeskError):
    """Raised when a file cannot be turned into text (corrupt, bad encoding, empty)."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(RagDeskError):
    """Raised when the embedding model fails or returns an unusable vector.

    Carries the ``model`` name so diagnostics identify which embedding
    model misbehaved.
    """

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
        model: str | None = None,
    ) -> None:
        self._model = model
        super().__init__(message=message, provider_name=provider_name)

    @property
    def model(self) -> str | None:
        return self._model


# ---------------------------------------------------------------------------
# Chat / streaming errors
# ---------------------------------------------------------------------------

class StreamError(RagDeskError):
    """Raised when the model stream breaks mid-generation."""

    def __init__(
        self,
        message: str = "Model stream failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NotFoundError(RagDeskError):
    """Raised when a conversation, document, or plugin does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PluginError(RagDeskError):
    """Raised when a tool plugin rejects its arguments or fails to run."""

    def __init__(
        self,
        message: str = "Plugin execution failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / configuration errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(RagDeskError):
    """Raised when an external service or provider is unreachable."""

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(RagDeskError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
