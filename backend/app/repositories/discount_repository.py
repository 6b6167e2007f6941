"""
Discount Repository - Data Access Layer for the global discount

All SQL for the global_discount table lives here.

Author: TM3
Date: 2025-10-17
"""
from decimal import Decimal
from typing import Optional

from app.core.config import settings
from app.core.database import get_db_connection_dict_with_retry
from app.domain.discount import DiscountConfig


class DiscountRepository:
    """
    Repository for the global_discount singleton

    At most one row is authoritative: the one with active = TRUE.
    """

    def find_active(self) -> Optional[DiscountConfig]:
        """
        Find the active discount row

        Returns:
            DiscountConfig or None if there is no active row

        Raises:
            Any psycopg2 error (callers decide how to degrade)
        """
        conn = get_db_connection_dict_with_retry(max_retries=1)
        cursor = conn.cursor()

        try:
            # A slow read is a failed read (caller degrades to 0%)
            cursor.execute("SET LOCAL statement_timeout = %s", (settings.DATABASE_STATEMENT_TIMEOUT_MS,))
            cursor.execute("""
                SELECT percentage, active
                FROM global_discount
                WHERE active = TRUE
                LIMIT 1
            """)

            row = cursor.fetchone()
            if not row:
                return None

            return DiscountConfig(
                percentage=row['percentage'] if row['percentage'] is not None else Decimal("0"),
                active=row['active'],
            )

        finally:
            cursor.close()
            conn.close()

    def update_active_percentage(self, percentage: Decimal) -> int:
        """
        Set the percentage of the active row

        Args:
            percentage: New percentage (already validated, 0-100)

        Returns:
            Number of rows updated (0 when there is no active row)
        """
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()

        try:
            cursor.execute("""
                UPDATE global_discount
                SET percentage = %s
                WHERE active = TRUE
            """, (percentage,))
            updated = cursor.rowcount
            conn.commit()
            return updated

        except Exception:
            conn.rollback()
            raise

        finally:
            cursor.close()
            conn.close()
