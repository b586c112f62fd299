"""Exceptions raised by the notification store."""


class NotificationStoreError(Exception):
    """Base class for errors raised by the store itself.

    Storage failures are not wrapped: SQLAlchemy exceptions reach the caller
    unchanged.
    """


class ValidationError(NotificationStoreError):
    """A notification could not be created because its shape is invalid."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field
