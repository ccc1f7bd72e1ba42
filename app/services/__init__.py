# Services package.
#
# Each module holds the business rules for one record kind:
#
#   account_service  - registration, login and account lookups
#   message_service  - message CRUD, text validation and ownership checks
#
# Services are classes rather than module functions taking ``db`` so a
# repository (or a test double) is injected once per request (see
# ``app.dependencies``). They never call each other; the router layer
# composes them.  Repository failures are re-raised as
# ``StorageFailureError`` by ``storage_errors``.
import logging
from contextlib import contextmanager

from app.errors import StorageFailureError
from app.repositories import RepositoryError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(action: str):
    """Re-raise any ``RepositoryError`` inside the block as a service error."""
    try:
        yield
    except RepositoryError as exc:
        logger.error("Storage failure while %s", action, exc_info=exc)
        raise StorageFailureError(f"Storage failure while {action}") from exc
