"""Custom exceptions for Anki Builder."""


class AnkiBuilderError(Exception):
    """Base exception for all Anki Builder errors."""
    pass


class ConfigError(AnkiBuilderError):
    """Error in configuration."""

    def __init__(self, message: str, config_key: str = None):
        self.config_key = config_key
        super().__init__(message)


class TransportError(AnkiBuilderError):
    """Network-level failure (connection refused, DNS, timeout)."""

    def __init__(self, message: str, provider: str = None):
        self.provider = provider
        super().__init__(message)


NetworkError = TransportError


class UpstreamError(AnkiBuilderError):
    """Remote service answered with a non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int = None,
        body: str = None,
        provider: str = None,
    ):
        self.status_code = status_code
        self.body = body
        self.provider = provider
        super().__init__(message)


class EmptyResponseError(AnkiBuilderError):
    """Response envelope decoded but carried no usable content."""

    def __init__(self, message: str, provider: str = None):
        self.provider = provider
        super().__init__(message)


class GenerationError(AnkiBuilderError):
    """Both the primary and the fallback model failed."""

    def __init__(
        self,
        message: str,
        primary_error: Exception = None,
        fallback_error: Exception = None,
    ):
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        super().__init__(message)


class ParseError(AnkiBuilderError):
    """Malformed or absent structured payload in model output."""
    pass


class NoStructuredPayloadError(ParseError):
    """No {...} block found in the model output."""
    pass


class PayloadDecodeError(ParseError):
    """The {...} block was found but could not be decoded."""

    def __init__(self, message: str, payload: str = None):
        self.payload = payload
        super().__init__(message)


class SubmissionError(AnkiBuilderError):
    """Note store rejected the request or could not be used."""
    pass


class StoreUnavailableError(SubmissionError):
    """Note store did not answer the availability probe."""

    def __init__(self, message: str, url: str = None):
        self.url = url
        super().__init__(message)


class CancelledError(AnkiBuilderError):
    """Operation abandoned because shutdown was requested."""
    pass


class SchemaDegradedWarning(UserWarning):
    """Field introspection failed; the generic two-field schema was used."""

    def __init__(self, message: str, note_type: str = None, cause: Exception = None):
        self.note_type = note_type
        self.cause = cause
        super().__init__(message)
