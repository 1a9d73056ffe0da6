class PipelineError(Exception):
    """Base pipeline exception."""


class ProviderError(PipelineError):
    """Raised when one facility provider could not produce records."""

    kind = "provider_error"


class ProviderRequestError(ProviderError):
    """Raised when provider request failed after retries."""

    kind = "request_failed"


class ProviderTemporaryError(ProviderRequestError):
    """Raised when provider request can be retried."""

    kind = "temporary_failure"


class ProviderNormalizationError(ProviderError):
    """Raised when provider payload schema cannot be normalized."""

    kind = "normalization_failed"


class ProviderConfigurationError(ProviderError):
    """Raised when a provider is missing credentials or endpoints."""

    kind = "not_configured"


class ValidationError(PipelineError):
    """Raised when a user submission is rejected before mutating state."""


class GeolocationError(PipelineError):
    """Raised when the device location is denied or unavailable."""
