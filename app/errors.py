"""
Service-level error taxonomy.

Routers translate these into HTTP responses; anything that is not a
``ServiceError`` is a programming error and surfaces as a 500.
"""


class ServiceError(Exception):
    """Base class for every error raised by the service layer."""


class ValidationError(ServiceError):
    """Malformed or out-of-range input (empty text, short password, ...)."""


class ConflictError(ServiceError):
    """The write would violate a uniqueness rule (duplicate username)."""


class NotFoundError(ServiceError):
    """The targeted record does not exist."""


class UnauthorizedError(ServiceError):
    """The acting account is not allowed to touch the targeted record."""


class StorageFailureError(ServiceError):
    """
    The persistence provider could not complete an operation.

    The original ``RepositoryError`` is always chained as ``__cause__``;
    its text must never reach a response body.
    """
