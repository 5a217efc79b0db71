"""Exceptions raised by the contacts record store and sync layer."""

from typing import List, Optional, TYPE_CHECKING

from .error_classifier import ErrorCategory

if TYPE_CHECKING:
    from ..models.sync_models import RecordFailure
    from ..models.contact_models import RemoteRecord


class StoreError(Exception):
    """Base class for remote record store failures."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNCLASSIFIED,
        is_retryable: bool = False,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.is_retryable = is_retryable
        self.cause = cause

    @property
    def is_auth_error(self) -> bool:
        return self.category in (ErrorCategory.NOT_AUTHENTICATED, ErrorCategory.PERMISSION_DENIED)

    @property
    def is_network_error(self) -> bool:
        return self.category == ErrorCategory.NETWORK

    def __str__(self) -> str:
        return self.message


class ZoneError(StoreError):
    """Zone creation or lookup failed."""


class QueryError(StoreError):
    """A query or change-feed page fetch failed."""


class BatchError(StoreError):
    """A batch save failed as a whole.

    ``failures`` holds the per-record detail; ``saved`` holds any records
    the store did persist before the batch was abandoned.
    """

    def __init__(
        self,
        message: str,
        failures: Optional[List["RecordFailure"]] = None,
        saved: Optional[List["RemoteRecord"]] = None,
        category: ErrorCategory = ErrorCategory.UNCLASSIFIED,
        is_retryable: bool = False,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, category=category, is_retryable=is_retryable, cause=cause)
        self.failures = list(failures or [])
        self.saved = list(saved or [])
