"""
Report error taxonomy.

Report computers raise these and never catch them; the HTTP boundary maps
them to a status code with classify_error(). Anything that is not a
ReportError (e.g. a SQLAlchemy failure while reading) is an upstream read
failure and becomes a 500.
"""

ACCESS_DENIED = "Access denied"


class ReportError(Exception):
    """Base class for failures a caller can be told about."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccessDenied(ReportError):
    """A manager asked for a property they are not assigned to (or that does not exist)."""
    status_code = 403

    def __init__(self, detail: str = "You are not assigned to this property"):
        super().__init__(f"{ACCESS_DENIED}: {detail}")


class InvalidReportParameter(ReportError):
    """A query parameter could not be interpreted (bad date, negative window...)."""
    status_code = 400


def classify_error(exc: Exception) -> int:
    """HTTP status for an exception raised while building a report."""
    if ACCESS_DENIED in str(exc):
        return 403
    if isinstance(exc, ReportError):
        return exc.status_code
    return 500
