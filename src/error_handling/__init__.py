"""Error taxonomy and classification for contact queries."""

from .error_classifier import ErrorCategory, ErrorClassification, ErrorClassifier, ErrorSeverity
from .exceptions import BatchError, QueryError, StoreError, ZoneError

__all__ = [
    "ErrorCategory",
    "ErrorClassification",
    "ErrorClassifier",
    "ErrorSeverity",
    "StoreError",
    "ZoneError",
    "BatchError",
    "QueryError",
]
