"""
Graceful failure utilities.

Reusable context managers for non-critical operations that should not block
the main execution flow:
1. Attempt an operation
2. Log any exception with context
3. Continue execution without raising

This is distinct from `db_error_handling.py` which handles critical errors
that require rollback and HTTP error responses.

Usage:
    from satprep.core.graceful_failure import graceful_failure

    with graceful_failure("flush end-of-session record", logger):
        await client.end_session(session_id, ...)
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Optional


def _failure_message(
    operation_name: str, error: Exception, context: Optional[dict[str, Any]]
) -> str:
    if context:
        context_str = ", ".join(f"{k}={v}" for k, v in context.items())
        return f"Failed to {operation_name} ({context_str}): {error}"
    return f"Failed to {operation_name}: {error}"


@contextmanager
def graceful_failure(
    operation_name: str,
    logger: logging.Logger,
    *,
    log_level: int = logging.WARNING,
    exc_info: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> Generator[None, None, None]:
    """Context manager for non-critical operations that should not block execution.

    Unlike `handle_db_error`, this does NOT raise HTTPException, roll back
    the database session, or stop execution.

    Args:
        operation_name: Human-readable name of the operation for logging
        logger: The logger instance to use for logging errors.
        log_level: Logging level for error messages. Defaults to WARNING.
        exc_info: Whether to include exception traceback in log.
        context: Optional dictionary of additional context to include in log
            message (e.g., {"session_id": 123}).
    """
    try:
        yield
    except Exception as e:
        logger.log(
            log_level, _failure_message(operation_name, e, context), exc_info=exc_info
        )

