"""
Discount Service - Current global discount percentage

Read once at session start and again only on an explicit refresh
(after an admin update). Reads never raise: a missing active row and a
failed query both mean 0%, but are logged differently.

Author: TM3
Date: 2025-11-18
"""
import logging
from decimal import Decimal

from pydantic import ValidationError

from app.core.exceptions import DiscountUpdateError
from app.domain.discount import DiscountConfig, DiscountReading, DiscountStatus
from app.repositories.discount_repository import DiscountRepository

logger = logging.getLogger(__name__)


class DiscountProvider:
    """
    Holds the global discount percentage for one session

    current_percentage is 0 until a read succeeds, so prices are never shown
    with a discount that has not been confirmed.
    """

    def __init__(self, repository: DiscountRepository = None):
        self.repository = repository or DiscountRepository()
        self._current = Decimal("0")
        self.last_reading: DiscountReading = None

    @property
    def current_percentage(self) -> Decimal:
        return self._current

    def read_percentage(self) -> DiscountReading:
        """
        Single authoritative read of the active discount

        Returns:
            DiscountReading with status ACTIVE, MISSING (0%) or ERROR (0%)
        """
        try:
            config = self.repository.find_active()
        except Exception as e:
            logger.warning(f"Could not read global discount, using 0%: {e}")
            return DiscountReading(status=DiscountStatus.ERROR, error=str(e))

        if config is None:
            logger.info("No active global discount, using 0%")
            return DiscountReading(status=DiscountStatus.MISSING)

        return DiscountReading(percentage=config.percentage, status=DiscountStatus.ACTIVE)

    def refresh(self) -> DiscountReading:
        """Re-read the discount and make it the session's current value"""
        reading = self.read_percentage()
        self.last_reading = reading
        self._current = reading.percentage
        logger.debug(f"Global discount is {self._current}% ({reading.status.value})")
        return reading

    def update_percentage(self, percentage) -> DiscountReading:
        """
        Admin update of the active discount, followed by a refresh

        Args:
            percentage: New percentage, 0-100

        Raises:
            DiscountUpdateError: invalid percentage, no active row, or storage failure
        """
        try:
            config = DiscountConfig(percentage=percentage)
        except ValidationError as e:
            raise DiscountUpdateError(f"Invalid discount percentage: {percentage!r}") from e

        try:
            updated = self.repository.update_active_percentage(config.percentage)
        except Exception as e:
            logger.error(f"Error updating global discount: {e}")
            raise DiscountUpdateError("Error updating global discount") from e

        if not updated:
            raise DiscountUpdateError("There is no active global discount row to update")

        logger.info(f"Global discount updated to {config.percentage}%")
        return self.refresh()
