"""
Unit tests for DiscountProvider

The repository is mocked, no database needed.

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal
from unittest.mock import MagicMock

import psycopg2
import psycopg2.errors
import pytest

from app.core.exceptions import DiscountUpdateError
from app.domain.discount import DiscountConfig, DiscountStatus
from app.repositories.discount_repository import DiscountRepository
from app.services.discount_service import DiscountProvider


@pytest.fixture
def repository():
    return MagicMock(spec=DiscountRepository)


class TestReadPercentage:
    """Test the authoritative discount read"""

    def test_starts_at_zero_before_any_read(self, repository):
        provider = DiscountProvider(repository=repository)

        assert provider.current_percentage == 0
        repository.find_active.assert_not_called()

    def test_active_row(self, repository):
        # Arrange
        repository.find_active.return_value = DiscountConfig(percentage=Decimal("10"))
        provider = DiscountProvider(repository=repository)

        # Act
        reading = provider.refresh()

        # Assert
        assert reading.status == DiscountStatus.ACTIVE
        assert reading.percentage == 10
        assert provider.current_percentage == 10
        assert reading.is_degraded is False

    def test_missing_row_means_zero(self, repository):
        repository.find_active.return_value = None
        provider = DiscountProvider(repository=repository)

        reading = provider.refresh()

        assert reading.status == DiscountStatus.MISSING
        assert provider.current_percentage == 0
        assert reading.is_degraded is False

    def test_query_error_degrades_to_zero(self, repository):
        """A failed read never raises; it is reported as ERROR with 0%"""
        repository.find_active.side_effect = psycopg2.OperationalError("connection refused")
        provider = DiscountProvider(repository=repository)

        reading = provider.refresh()

        assert reading.status == DiscountStatus.ERROR
        assert reading.percentage == 0
        assert "connection refused" in reading.error
        assert provider.current_percentage == 0
        assert provider.last_reading is reading

    def test_statement_timeout_degrades_to_zero(self, repository):
        repository.find_active.side_effect = psycopg2.errors.QueryCanceled(
            "canceling statement due to statement timeout"
        )
        provider = DiscountProvider(repository=repository)

        reading = provider.refresh()

        assert reading.status == DiscountStatus.ERROR
        assert "statement timeout" in reading.error
        assert provider.current_percentage == 0

    def test_error_after_success_resets_to_zero(self, repository):
        repository.find_active.return_value = DiscountConfig(percentage=Decimal("15"))
        provider = DiscountProvider(repository=repository)
        provider.refresh()

        repository.find_active.side_effect = RuntimeError("boom")
        provider.refresh()

        assert provider.current_percentage == 0

    def test_value_is_stable_until_refresh(self, repository):
        repository.find_active.return_value = DiscountConfig(percentage=Decimal("10"))
        provider = DiscountProvider(repository=repository)
        provider.refresh()

        repository.find_active.return_value = DiscountConfig(percentage=Decimal("25"))

        assert provider.current_percentage == 10
        provider.refresh()
        assert provider.current_percentage == 25


class TestUpdatePercentage:
    """Test admin updates"""

    def test_update_then_refresh(self, repository):
        # Arrange
        repository.update_active_percentage.return_value = 1
        repository.find_active.return_value = DiscountConfig(percentage=Decimal("20"))
        provider = DiscountProvider(repository=repository)

        # Act
        reading = provider.update_percentage(20)

        # Assert
        repository.update_active_percentage.assert_called_once_with(Decimal("20"))
        assert reading.status == DiscountStatus.ACTIVE
        assert provider.current_percentage == 20

    @pytest.mark.parametrize("percentage", [-1, 101, "abc", None])
    def test_rejects_out_of_range(self, repository, percentage):
        provider = DiscountProvider(repository=repository)

        with pytest.raises(DiscountUpdateError):
            provider.update_percentage(percentage)

        repository.update_active_percentage.assert_not_called()

    def test_no_active_row_is_an_error(self, repository):
        repository.update_active_percentage.return_value = 0
        provider = DiscountProvider(repository=repository)

        with pytest.raises(DiscountUpdateError):
            provider.update_percentage(10)

    def test_storage_error_is_reported(self, repository):
        repository.update_active_percentage.side_effect = psycopg2.OperationalError("down")
        provider = DiscountProvider(repository=repository)

        with pytest.raises(DiscountUpdateError):
            provider.update_percentage(10)

        assert provider.current_percentage == 0
