"""
Typed failures raised by the progression engine and its services.

Every error maps to one HTTP status so the API layer can render it
without knowing which module raised it.
"""


class ProgressError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(ProgressError):
    """Unknown user, course or lesson. Not retryable."""
    status_code = 404


class ValidationError(ProgressError):
    """Malformed input such as an unknown stage name or a bad answers array."""
    status_code = 400


class PersistenceError(ProgressError):
    """The store could not be read or written. Nothing was committed; safe to retry."""
    status_code = 500
