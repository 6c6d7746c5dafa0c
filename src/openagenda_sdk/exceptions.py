"""OpenAgenda SDK exceptions."""


class OpenAgendaError(Exception):
    """Base exception for OpenAgenda SDK errors."""

    pass


class UnknownOperation(OpenAgendaError):
    """Raised when an operation name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation: {name}")


class MissingParameter(OpenAgendaError):
    """Raised when a URL template placeholder has no value."""

    def __init__(self, placeholder: str, operation: str | None = None):
        self.placeholder = placeholder
        self.operation = operation
        message = f"Missing path parameter: {placeholder}"
        if operation:
            message += f" (operation {operation})"
        super().__init__(message)


class MalformedRequest(OpenAgendaError):
    """Raised when a request cannot be built into a valid HTTP request."""

    pass


class AuthenticationFailed(OpenAgendaError):
    """Raised when no access token could be obtained."""

    pass


class TransportFailure(OpenAgendaError):
    """Raised on network errors or non-2xx responses."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class DecodingFailure(OpenAgendaError):
    """Raised when a response body is not the JSON we expected."""

    pass
