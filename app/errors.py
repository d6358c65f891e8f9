class ProxyError(Exception):
    """Base error. `message` is what the caller of the HTTP API gets to see."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(ProxyError):
    """A required credential or provider setting is missing."""


class UpstreamError(ProxyError):
    """The news or completion provider failed. The cause is chained, never exposed."""


class MalformedResponseError(ProxyError):
    """The completion text could not be parsed as JSON."""
