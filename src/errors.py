"""
Error types raised by the dashboard reports.
"""


class DashboardError(Exception):
    """Base class for errors shown at a report view boundary."""


class NotAuthenticatedError(DashboardError):
    def __init__(self, message='User not authenticated'):
        super().__init__(message)


class FetchError(DashboardError):
    """A query against the record store failed."""

    def __init__(self, collection, cause):
        self.collection = collection
        self.cause = cause
        super().__init__(f"Failed to fetch '{collection}': {cause}")


class MissingFieldError(DashboardError):
    """A record lacks a field the report cannot do without."""

    def __init__(self, collection, doc_id, field):
        self.collection = collection
        self.doc_id = doc_id
        self.field = field
        super().__init__(f"{collection}/{doc_id} is missing required field '{field}'")


class DocumentNotFoundError(DashboardError):
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"Document {collection}/{doc_id} does not exist")


class StorageError(DashboardError):
    """An object storage request failed."""


class AccessDeniedError(DashboardError):
    def __init__(self, message='Access denied. Business account required.'):
        super().__init__(message)


class ValidationError(DashboardError):
    """Submitted values were rejected before anything was written."""
