"""
Error classification and reporting for the contacts record store.

Maps DynamoDB and botocore failures onto a small cause taxonomy, decides
whether each cause is worth retrying, and logs store errors with messages
that tell an operator what to fix. Nothing here retries; callers layered
above the sync core own retry policy.
"""

import logging
from enum import Enum
from typing import Optional
from dataclasses import dataclass
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
    ReadTimeoutError,
)

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Causes a store operation can fail with."""
    NETWORK = "network"                      # Network unavailable or timed out
    NOT_AUTHENTICATED = "not_authenticated"  # No or invalid credentials
    PERMISSION_DENIED = "permission_denied"  # Authenticated but not allowed
    UNKNOWN_ITEM = "unknown_item"            # Zone, table or record missing
    PARTIAL_FAILURE = "partial_failure"      # Some records of a batch failed
    RATE_LIMIT = "rate_limit"                # Throttled by the store
    UNCLASSIFIED = "unclassified"            # Anything else


class ErrorSeverity(Enum):
    """Severity levels for logging."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorClassification:
    """Classification result for an error."""
    category: ErrorCategory
    severity: ErrorSeverity
    is_retryable: bool
    user_message: Optional[str] = None


class ErrorClassifier:
    """Classifies store errors and reports them to the log."""

    DYNAMODB_ERROR_MAPPINGS = {
        # Transient errors, safe for a caller to retry
        'ProvisionedThroughputExceededException': ErrorClassification(
            category=ErrorCategory.RATE_LIMIT,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=True,
            user_message="Table throughput exceeded"
        ),
        'ThrottlingException': ErrorClassification(
            category=ErrorCategory.RATE_LIMIT,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=True,
            user_message="Request was throttled"
        ),
        'RequestLimitExceeded': ErrorClassification(
            category=ErrorCategory.RATE_LIMIT,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=True,
            user_message="Account request limit exceeded"
        ),
        'InternalServerError': ErrorClassification(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            user_message="Store internal server error"
        ),
        'ServiceUnavailable': ErrorClassification(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            user_message="Store temporarily unavailable"
        ),
        'RequestTimeout': ErrorClassification(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=True,
            user_message="Request timed out"
        ),

        # Authentication and permission errors
        'UnrecognizedClientException': ErrorClassification(
            category=ErrorCategory.NOT_AUTHENTICATED,
            severity=ErrorSeverity.HIGH,
            is_retryable=False,
            user_message="Credentials were not recognized"
        ),
        'InvalidSignatureException': ErrorClassification(
            category=ErrorCategory.NOT_AUTHENTICATED,
            severity=ErrorSeverity.HIGH,
            is_retryable=False,
            user_message="Request signature is invalid"
        ),
        'ExpiredTokenException': ErrorClassification(
            category=ErrorCategory.NOT_AUTHENTICATED,
            severity=ErrorSeverity.HIGH,
            is_retryable=False,
            user_message="Session credentials have expired"
        ),
        'AccessDeniedException': ErrorClassification(
            category=ErrorCategory.PERMISSION_DENIED,
            severity=ErrorSeverity.HIGH,
            is_retryable=False,
            user_message="Insufficient permissions for the contacts table"
        ),

        # Missing resources
        'ResourceNotFoundException': ErrorClassification(
            category=ErrorCategory.UNKNOWN_ITEM,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=False,
            user_message="Table or item not found"
        ),

        # Invalid requests
        'ValidationException': ErrorClassification(
            category=ErrorCategory.UNCLASSIFIED,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=False,
            user_message="Invalid request parameters"
        ),
        'ItemCollectionSizeLimitExceededException': ErrorClassification(
            category=ErrorCategory.UNCLASSIFIED,
            severity=ErrorSeverity.HIGH,
            is_retryable=False,
            user_message="Zone has grown past the item collection size limit"
        ),
    }

    # Severity of errors already converted to StoreError, by cause
    CATEGORY_SEVERITY = {
        ErrorCategory.NETWORK: ErrorSeverity.MEDIUM,
        ErrorCategory.RATE_LIMIT: ErrorSeverity.MEDIUM,
        ErrorCategory.UNKNOWN_ITEM: ErrorSeverity.MEDIUM,
        ErrorCategory.UNCLASSIFIED: ErrorSeverity.MEDIUM,
        ErrorCategory.NOT_AUTHENTICATED: ErrorSeverity.HIGH,
        ErrorCategory.PERMISSION_DENIED: ErrorSeverity.HIGH,
        ErrorCategory.PARTIAL_FAILURE: ErrorSeverity.LOW,
    }

    SEVERITY_LOG_LEVELS = {
        ErrorSeverity.LOW: logging.INFO,
        ErrorSeverity.MEDIUM: logging.WARNING,
        ErrorSeverity.HIGH: logging.ERROR,
        ErrorSeverity.CRITICAL: logging.CRITICAL,
    }

    def classify_error(self, error: BaseException) -> ErrorClassification:
        """
        Classify an error.

        Args:
            error: The exception that occurred

        Returns:
            ErrorClassification for the error
        """
        from .exceptions import StoreError

        if isinstance(error, StoreError):
            return ErrorClassification(
                category=error.category,
                severity=self.CATEGORY_SEVERITY[error.category],
                is_retryable=error.is_retryable,
                user_message=error.message
            )

        if isinstance(error, ClientError):
            return self._classify_client_error(error)

        if isinstance(error, BotoCoreError):
            return self._classify_botocore_error(error)

        if isinstance(error, (ConnectionError, TimeoutError)):
            return ErrorClassification(
                category=ErrorCategory.NETWORK,
                severity=ErrorSeverity.MEDIUM,
                is_retryable=True,
                user_message="Network connectivity issue"
            )

        return self._classify_unknown_error(error)

    def _classify_client_error(self, error: ClientError) -> ErrorClassification:
        """Classify a botocore ClientError by its error code."""
        error_code = error.response.get('Error', {}).get('Code', 'Unknown')
        error_message = error.response.get('Error', {}).get('Message', str(error))

        if error_code in self.DYNAMODB_ERROR_MAPPINGS:
            classification = self.DYNAMODB_ERROR_MAPPINGS[error_code]
            logger.debug(f"Classified store error {error_code} as {classification.category.value}")
            return classification

        logger.warning(f"Unknown store error code: {error_code} - {error_message}")

        code = error_code.lower()
        if 'throttl' in code or 'limit' in code:
            return ErrorClassification(
                category=ErrorCategory.RATE_LIMIT,
                severity=ErrorSeverity.MEDIUM,
                is_retryable=True,
                user_message=f"Rate limiting error: {error_code}"
            )

        if 'denied' in code or 'unauthorized' in code or 'forbidden' in code:
            return ErrorClassification(
                category=ErrorCategory.PERMISSION_DENIED,
                severity=ErrorSeverity.HIGH,
                is_retryable=False,
                user_message=f"Permission error: {error_code}"
            )

        if 'notfound' in code:
            return ErrorClassification(
                category=ErrorCategory.UNKNOWN_ITEM,
                severity=ErrorSeverity.MEDIUM,
                is_retryable=False,
                user_message=f"Not found: {error_code}"
            )

        return ErrorClassification(
            category=ErrorCategory.UNCLASSIFIED,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=False,
            user_message=f"Unknown store error: {error_code}"
        )

    def _classify_botocore_error(self, error: BotoCoreError) -> ErrorClassification:
        """Classify a BotoCoreError (credentials or transport)."""
        error_type = type(error).__name__

        if isinstance(error, (NoCredentialsError, PartialCredentialsError)):
            return ErrorClassification(
                category=ErrorCategory.NOT_AUTHENTICATED,
                severity=ErrorSeverity.HIGH,
                is_retryable=False,
                user_message="No credentials are configured for the store"
            )

        if isinstance(error, (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)):
            return ErrorClassification(
                category=ErrorCategory.NETWORK,
                severity=ErrorSeverity.MEDIUM,
                is_retryable=True,
                user_message=f"Network unavailable: {error_type}"
            )

        # Remaining botocore errors are transport-level
        return ErrorClassification(
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=True,
            user_message=f"Network error: {error_type}"
        )

    def _classify_unknown_error(self, error: BaseException) -> ErrorClassification:
        """Classify errors that did not come from the store."""
        error_type = type(error).__name__
        logger.debug(f"Classifying unknown error: {error_type} - {error}")

        return ErrorClassification(
            category=ErrorCategory.UNCLASSIFIED,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=False,
            user_message=f"Unknown error: {error_type}"
        )

    def wrap_error(self, error: BaseException, error_type: type, operation: str):
        """Convert a raw store or transport exception into ``error_type``.

        ``error_type`` is a StoreError subclass; the classification decides
        its category and retryability.
        """
        classification = self.classify_error(error)
        message = f"{operation} failed: {classification.user_message or error}"
        return error_type(
            message,
            category=classification.category,
            is_retryable=classification.is_retryable,
            cause=error,
        )

    def report_error(self, error: BaseException) -> None:
        """
        Log an error with a message specific to its cause, at a level
        chosen by its severity.

        Partial batch failures are expanded and each record's failure is
        reported on its own line.
        """
        from .exceptions import BatchError, StoreError

        if not isinstance(error, StoreError):
            logger.error(f"Not a store error: {error}")
            return

        if isinstance(error, BatchError) and error.failures:
            for failure in error.failures:
                logger.warning(
                    f"Record {failure.record.record_id or '<unsaved>'} failed: "
                    f"{failure.error_code} - {failure.message}"
                )

        level = self.SEVERITY_LOG_LEVELS[self.classify_error(error).severity]

        if error.category == ErrorCategory.UNKNOWN_ITEM:
            logger.log(level, f"Store error: zone, table or record not found ({error})")
        elif error.category == ErrorCategory.NOT_AUTHENTICATED:
            logger.log(level, "Store error: valid AWS credentials are required to read or write contacts")
        elif error.category == ErrorCategory.PERMISSION_DENIED:
            logger.log(level, f"Store error: permission failure ({error})")
        elif error.category == ErrorCategory.NETWORK:
            logger.log(level, f"Store error: the network is unavailable ({error})")
        else:
            logger.log(level, f"Store error: {error}")
