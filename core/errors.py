"""Error taxonomy shared by controllers, stores and routes.

Every error carries a stable machine-readable ``kind`` and the HTTP status
it maps to. ``main.py`` registers a handler that renders them as
``{"error": kind, "message": message}``.
"""

from dataclasses import dataclass, field
from typing import List


class ServiceError(Exception):
    kind = "internal_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or malformed. Never retried."""

    kind = "validation_error"
    status_code = 400


class NotFoundError(ServiceError):
    kind = "not_found"
    status_code = 404


class AccessDeniedError(ServiceError):
    kind = "access_denied"
    status_code = 403


class StoreError(ServiceError):
    """A document or blob store operation failed.

    Raised by the store adapters with the failing operation in the message.
    Callers must retry; nothing in this service does.
    """

    kind = "store_error"
    status_code = 500


@dataclass
class PartialCascadeFailure:
    """Blob deletions that failed while the records were still removed.

    Reported as a warning, never raised.
    """

    session_id: str
    failed_paths: List[str] = field(default_factory=list)

    def __bool__(self):
        return bool(self.failed_paths)


def unexpected_error(action: str, e: Exception) -> ServiceError:
    """Log an unexpected failure and return a generic 500 for the caller.

    The message never carries the underlying exception text.
    """
    from utils.state import State

    State.logger.error(f"An error occurred while {action}: {str(e)}")
    return ServiceError(f"An error occurred while {action}")
