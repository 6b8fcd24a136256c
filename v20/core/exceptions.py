class V20Error(Exception):
    """Base class for every error raised by the SDK."""
    pass

class ConfigurationError(V20Error):
    """Invalid or missing settings (host, token, account)."""
    pass

class TransportError(V20Error):
    """The HTTP transport failed (connection refused, timeout, TLS)."""
    pass

class ResponseDecodeError(V20Error):
    """A response declared as JSON could not be parsed."""
    pass

class StreamDecodeError(V20Error):
    """A stream record could not be parsed and the parser runs in strict mode."""

    def __init__(self, message: str, record: str):
        super().__init__(message)
        self.record = record

class MissingCallbackError(V20Error, TypeError):
    """A required callback argument was not supplied by the caller."""
    pass
