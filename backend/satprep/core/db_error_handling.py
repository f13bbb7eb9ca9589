"""
Database error handling utilities.

Centralizes the common pattern for write endpoints:
1. Rolling back the database session on error
2. Logging the error with context
3. Raising an appropriate HTTPException

Usage:
    from satprep.core.db_error_handling import handle_db_error

    async with handle_db_error(db, "record response"):
        db.add(response)
        await db.commit()
        await db.refresh(response)
        return response
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from satprep.core.error_responses import ErrorMessages


logger = logging.getLogger(__name__)


@asynccontextmanager
async def handle_db_error(
    db: AsyncSession,
    operation_name: str,
    *,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    log_level: int = logging.ERROR,
) -> AsyncGenerator[None, None]:
    """Async context manager for handling database errors consistently.

    HTTPExceptions raised inside the block propagate unchanged. Database
    errors roll back the session, are logged with the operation name, and
    surface as an HTTPException carrying a generic user-facing message.

    Args:
        db: The async database session to roll back on error.
        operation_name: Human-readable name of the operation for error
            messages and logging (e.g., "start practice session").
        status_code: HTTP status code to use in the raised HTTPException.
        log_level: Logging level for error messages.

    Raises:
        HTTPException: On SQLAlchemyError, with the session rolled back.
    """
    try:
        yield
    except HTTPException:
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.log(
            log_level,
            f"Database error during {operation_name}: {e}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status_code,
            detail=ErrorMessages.database_operation_failed(operation_name),
        )
