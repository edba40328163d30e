# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain error taxonomy.
Services raise these; the HTTP layer maps ``status_code`` onto the response.
"""


class ClubflowError(Exception):
    """Base class for every error a service operation may raise."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFound(ClubflowError):
    status_code = 404


class Forbidden(ClubflowError):
    status_code = 403


class Conflict(ClubflowError):
    status_code = 409


class ValidationFailure(ClubflowError):
    status_code = 400


class ConcurrencyConflict(Conflict):
    """A versioned save lost against a concurrent writer."""

    def __init__(self, collection: str, doc_id: str, expected_version: int) -> None:
        super().__init__(
            f"{collection} '{doc_id}' was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.collection = collection
        self.doc_id = doc_id
        self.expected_version = expected_version


class PartialFailure(ClubflowError):
    """A later sub-write of a multi-document operation failed after earlier ones committed."""

    def __init__(self, message: str, committed: dict | None = None) -> None:
        super().__init__(message)
        self.committed = committed or {}
