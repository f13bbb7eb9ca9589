"""
Tests for the graceful_failure context manager.
"""
import logging
from unittest.mock import MagicMock

import pytest

from satprep.core.graceful_failure import graceful_failure


@pytest.fixture
def mock_logger():
    """Create a mock logger for testing."""
    return MagicMock(spec=logging.Logger)


class TestGracefulFailure:
    """Tests for graceful_failure."""

    def test_success_case_no_exception(self, mock_logger):
        """Test that code executes normally when no exception occurs."""
        result = []

        with graceful_failure("test operation", mock_logger):
            result.append("executed")

        assert result == ["executed"]
        mock_logger.log.assert_not_called()

    def test_exception_is_swallowed_and_logged(self, mock_logger):
        """Test that exceptions are logged at WARNING and do not propagate."""
        with graceful_failure("flush record", mock_logger):
            raise ValueError("something went wrong")

        mock_logger.log.assert_called_once()
        level, message = mock_logger.log.call_args[0]
        assert level == logging.WARNING
        assert message == "Failed to flush record: something went wrong"
        assert mock_logger.log.call_args[1]["exc_info"] is False

    def test_custom_level_and_context(self, mock_logger):
        """Test custom logging level and context formatting."""
        with graceful_failure(
            "flush record",
            mock_logger,
            log_level=logging.DEBUG,
            context={"session_id": 12},
        ):
            raise RuntimeError("offline")

        level, message = mock_logger.log.call_args[0]
        assert level == logging.DEBUG
        assert message == "Failed to flush record (session_id=12): offline"

    def test_base_exceptions_propagate(self, mock_logger):
        """Test that KeyboardInterrupt is not swallowed."""
        with pytest.raises(KeyboardInterrupt):
            with graceful_failure("test operation", mock_logger):
                raise KeyboardInterrupt()

    @pytest.mark.asyncio
    async def test_works_around_awaits(self, mock_logger):
        """Test use inside a coroutine around an awaited call."""

        async def failing():
            raise ConnectionError("refused")

        with graceful_failure("ping backend", mock_logger):
            await failing()

        assert "refused" in mock_logger.log.call_args[0][1]
