"""
Custom Exception Classes for thermoctl

Hierarchical exception structure for the control client.
"""


class ThermoctlError(Exception):
    """Base exception for all thermoctl errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(ThermoctlError):
    """Configuration-related errors"""

    def __init__(self, message: str, errors: list[str] | None = None):
        self.errors = errors or []
        super().__init__(f"Config Error: {message}", recoverable=False)


class ApiError(ThermoctlError):
    """Remote thermal API call failed"""

    def __init__(self, message: str, operation: str | None = None, detail: str | None = None):
        self.operation = operation
        # Message without the kind prefix
        self.detail = message if detail is None else detail
        super().__init__(message, recoverable=True)


class TransportError(ApiError):
    """Connection, TLS or timeout failure before a response arrived"""

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(f"Transport Error: {message}", operation, detail=message)


class ProtocolError(ApiError):
    """Remote API answered with a non-success status"""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
    ):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Protocol Error: {message}", operation, detail=message)


class ParseError(ApiError):
    """Response body could not be decoded"""

    def __init__(self, message: str, operation: str | None = None, body: str | None = None):
        self.body = body
        super().__init__(f"Parse Error: {message}", operation, detail=message)
