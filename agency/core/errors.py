"""
Domain errors shared by services, tasks and the HTTP layer.

The API maps them to status codes in agency.main:
- NotFoundError -> 404
- ValidationError -> 422
- AggregationError -> 503
"""


class AgencyError(Exception):
    """Base class for domain errors"""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(AgencyError):
    """Malformed tier definition or request input (negative duration, non-numeric rate)"""


class NotFoundError(AgencyError):
    """A referenced record does not exist"""


class AggregationError(AgencyError):
    """Record store query failed while computing a sum"""
