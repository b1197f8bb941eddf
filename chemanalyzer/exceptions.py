class AnalysisError(Exception):
    """Base class for every failure of a product analysis."""


class ConfigurationError(AnalysisError):
    """Raised when the Gemini API key is missing or rejected."""


class QuotaExceededError(AnalysisError):
    """Raised when Gemini keeps reporting RESOURCE_EXHAUSTED after all retries."""


class EmptyResponseError(AnalysisError):
    """Raised when Gemini answers without text, usually because a safety filter blocked it."""


class MalformedResponseError(AnalysisError):
    """Raised when the model output does not match the analysis schema."""


class TransportError(AnalysisError):
    """Raised when the Gemini call fails for any other reason."""
