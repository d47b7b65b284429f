"""
Error types and error classification for the AMM client core.

This module provides the exception hierarchy raised across pool discovery,
quoting and transaction flows, and an ErrorHandler that classifies
low-level failures for logging and caching decisions.
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class AmmClientError(Exception):
    """Base exception for the AMM client core."""
    pass


class ValidationError(AmmClientError):
    """Raised when input validation fails, before any network call."""
    pass


class MathDomainError(ValidationError):
    """Raised when a price/tick conversion receives an out-of-domain value."""
    pass


class ConfigError(AmmClientError):
    """Raised for configuration-related errors."""
    pass


class RpcError(AmmClientError):
    """Raised when the RPC transport fails (connection, timeout, rate limit)."""
    pass


class ContractCallError(AmmClientError):
    """Raised when a contract call reverts or returns undecodable data."""
    pass


class QuoteError(AmmClientError):
    """
    Raised when every quoting strategy failed.

    Carries the per-strategy failures so callers can show which routes
    were attempted.
    """

    def __init__(self, message: str, failures: Optional[List[Any]] = None):
        super().__init__(message)
        self.failures = failures or []


class TransactionError(AmmClientError):
    """
    Raised when a state-changing step fails.

    Attributes:
        step: Which step failed (approve, wrap, create_pool, swap, ...)
        tx_hash: Transaction hash if the transaction was submitted
    """

    def __init__(self, step: str, message: str, tx_hash: Optional[str] = None):
        super().__init__(f"{step} failed: {message}")
        self.step = step
        self.tx_hash = tx_hash


class TransactionTimeoutError(AmmClientError):
    """Raised when waiting for a transaction receipt exceeds the timeout."""

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(f"Transaction {tx_hash} not mined within {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class PoolExistsError(AmmClientError):
    """Raised when creating a pool that already exists."""
    pass


class PoolCreationError(AmmClientError):
    """Raised when pool creation did not yield a pool address."""
    pass


class ErrorHandler:
    """
    Centralized error classification for RPC-facing operations.

    Classification drives log levels and decides whether a failed read is a
    deterministic answer (safe to cache) or a transient transport problem.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def classify_error(self, error: Exception) -> str:
        """
        Classify an error into a category.

        Args:
            error: Exception to classify

        Returns:
            One of 'validation', 'contract', 'rate_limit', 'network', 'unknown'
        """
        if isinstance(error, ValidationError):
            return 'validation'
        if isinstance(error, ContractCallError):
            return 'contract'

        error_str = str(error).lower()

        if any(keyword in error_str for keyword in ['rate limit', 'too many requests', '429']):
            return 'rate_limit'

        if isinstance(error, (RpcError, TransactionTimeoutError, ConnectionError, TimeoutError)):
            return 'network'

        if any(keyword in error_str for keyword in ['connection', 'timeout', 'network', 'dns']):
            return 'network'

        if any(keyword in error_str for keyword in ['revert', 'execution reverted', 'out of gas']):
            return 'contract'

        if any(keyword in error_str for keyword in ['invalid', 'bad request', '400']):
            return 'validation'

        return 'unknown'

    def is_transient(self, error: Exception) -> bool:
        """Whether the error says nothing about on-chain state."""
        return self.classify_error(error) in ('network', 'rate_limit', 'unknown')

    def log_error(self, error: Exception, context: Dict[str, Any]):
        """
        Log error with appropriate level and context.

        Args:
            error: Exception to log
            context: Additional context for logging
        """
        error_category = self.classify_error(error)

        log_data = {
            'error_type': type(error).__name__,
            'error_category': error_category,
            'error_message': str(error),
            **context
        }

        if error_category == 'validation':
            self.logger.warning("Validation error occurred", extra=log_data)
        elif error_category == 'contract':
            self.logger.warning("Contract call reverted", extra=log_data)
        elif error_category == 'rate_limit':
            self.logger.info("Rate limit encountered", extra=log_data)
        else:
            self.logger.warning("RPC operation error", extra=log_data)
