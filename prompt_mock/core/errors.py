"""Error taxonomy shared by the mutation pipeline, query engine and interceptor."""

from __future__ import annotations


class MockApiError(Exception):
    """Base class for errors that map onto an HTTP-shaped failure response."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(MockApiError):
    """Missing or malformed input, e.g. no tenant context."""

    status_code = 400


class NotFoundError(MockApiError):
    """Unknown tenant, prompt or sub-resource id."""

    status_code = 404


class ConflictError(MockApiError):
    """The request collides with an existing record."""

    status_code = 409


class InjectedFault(MockApiError):
    """A failure forced by the fault injector. Rendered as plain text."""

    status_code = 500

    def __init__(self, capability: str, message: str = "Internal Server Error") -> None:
        super().__init__(message)
        self.capability = capability
