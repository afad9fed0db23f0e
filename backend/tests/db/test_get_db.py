"""
Tests for the get_db() database session dependency.

Verifies proper rollback behavior when exceptions occur during database operations.
"""

import pytest
from unittest.mock import MagicMock, patch
from sqlalchemy.orm import Session


def _patched_factory(mock_session):
    return patch(
        "app.models.base.Database.session_factory",
        new=MagicMock(return_value=mock_session),
    )


class TestGetDbRollbackBehavior:
    """Tests for get_db() exception handling and rollback behavior."""

    def test_rollback_called_on_exception(self):
        mock_session = MagicMock(spec=Session)

        with _patched_factory(mock_session):
            from app.models.base import get_db

            gen = get_db()
            db = next(gen)
            assert db is mock_session

            with pytest.raises(ValueError):
                gen.throw(ValueError("Test exception"))

        mock_session.rollback.assert_called_once()
        mock_session.close.assert_called_once()

    def test_no_rollback_on_success(self):
        mock_session = MagicMock(spec=Session)

        with _patched_factory(mock_session):
            from app.models.base import get_db

            gen = get_db()
            next(gen)
            with pytest.raises(StopIteration):
                next(gen)

        mock_session.rollback.assert_not_called()
        mock_session.close.assert_called_once()
