from __future__ import annotations


class TodoAppError(Exception):
    """Base class for errors raised by the todo service."""


class StartupConnectionError(TodoAppError):
    """The initial connection to the document store failed. Logged, never fatal."""


class UnavailableError(TodoAppError):
    """The document store is required but the gateway is not connected."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class StoreOperationError(TodoAppError):
    """
    A store round trip failed.

    ``detail`` carries the driver message for server-side logging only; it is
    never rendered into a response body.
    """

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
