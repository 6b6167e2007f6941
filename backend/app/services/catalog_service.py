"""
Catalog Service - Full catalog load from the paginated feed

Pulls every page of the external feed, one page at a time, into a single
ordered product list.

Rules:
- Stop when pages_fetched * page_size >= total_count (page_size is the one
  actually sent in the requests)
- Progress after each page: min(100, round(accumulated / total * 100))
- Any page failure aborts the load: no partial catalog, no retry
- Every load gets a generation id; only the latest generation may commit

Author: TM3
Date: 2025-11-18
"""
import asyncio
import time
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from app.core.config import settings
from app.core.exceptions import CatalogSourceError
from app.connectors.catalog_connector import CatalogConnector
from app.domain.product import BaseProduct
from app.services.pricing_service import round_half_up

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class CatalogLoadStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    STALE = "stale"  # superseded by a newer load, results discarded


@dataclass
class CatalogLoadResult:
    status: CatalogLoadStatus
    generation: int
    products: List[BaseProduct] = field(default_factory=list)
    pages_fetched: int = 0
    progress_history: List[int] = field(default_factory=list)
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return self.status == CatalogLoadStatus.SUCCESS


def compute_progress(accumulated: int, total: int) -> int:
    """Percentage of the catalog received so far, capped at 100"""
    if total <= 0:
        return 100
    return min(100, round_half_up(accumulated * 100 / total))


class CatalogFetcher:
    """
    Loads the whole catalog and holds the committed result

    State (products, loading, progress, error) only ever reflects the most
    recent load. A load that is superseded while awaiting a page returns a
    STALE result and leaves the state alone.
    """

    def __init__(self, connector: CatalogConnector = None, page_size: int = None):
        self.connector = connector or CatalogConnector()
        self.page_size = page_size or settings.CATALOG_PAGE_SIZE
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")

        self._generation = 0
        self.products: List[BaseProduct] = []
        self.loading = False
        self.progress = 0
        self.error: Optional[str] = None
        self.loaded_at: Optional[float] = None

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    def status(self) -> dict:
        return {
            'loading': self.loading,
            'progress': self.progress,
            'error': self.error,
            'count': len(self.products),
            'generation': self._generation,
            'loaded_at': self.loaded_at,
        }

    async def load(self, on_progress: Optional[ProgressCallback] = None) -> CatalogLoadResult:
        """
        Fetch the entire catalog

        Args:
            on_progress: Called with the progress percentage after each page

        Returns:
            CatalogLoadResult (SUCCESS with all products, FAILED with none,
            or STALE if a newer load started meanwhile)
        """
        self._generation += 1
        generation = self._generation
        page_size = self.page_size
        start_time = time.time()

        self.loading = True
        self.progress = 0
        self.error = None

        accumulated: List[BaseProduct] = []
        progress_history: List[int] = []
        records_seen = 0
        pages_fetched = 0

        logger.info(f"Catalog load #{generation} started (page_size={page_size})")

        try:
            while True:
                page = await self.connector.get_products_page(pages_fetched + 1, page_size)

                if not self.is_current(generation):
                    logger.info(f"Catalog load #{generation} superseded by #{self._generation}, discarding")
                    return CatalogLoadResult(
                        status=CatalogLoadStatus.STALE,
                        generation=generation,
                        pages_fetched=pages_fetched,
                        progress_history=progress_history,
                        duration_seconds=time.time() - start_time,
                    )

                pages_fetched += 1
                records_seen += page.record_count
                accumulated.extend(page.products)

                progress = compute_progress(records_seen, page.total_count)
                progress_history.append(progress)
                self.progress = progress
                if on_progress:
                    on_progress(progress)

                if pages_fetched * page_size >= page.total_count:
                    break

                if page.record_count == 0:
                    raise CatalogSourceError(
                        f"Page {pages_fetched} was empty with {records_seen}/{page.total_count} records received"
                    )

        except asyncio.CancelledError:
            if self.is_current(generation):
                logger.info(f"Catalog load #{generation} cancelled")
                self.loading = False
            raise

        except Exception as e:
            if not self.is_current(generation):
                logger.info(f"Catalog load #{generation} failed after being superseded: {e}")
                return CatalogLoadResult(
                    status=CatalogLoadStatus.STALE,
                    generation=generation,
                    pages_fetched=pages_fetched,
                    progress_history=progress_history,
                    duration_seconds=time.time() - start_time,
                )

            message = f"Catalog unavailable: {e}"
            logger.error(f"Catalog load #{generation} failed on page {pages_fetched + 1}: {e}")
            self.products = []
            self.error = message
            self.loading = False
            return CatalogLoadResult(
                status=CatalogLoadStatus.FAILED,
                generation=generation,
                pages_fetched=pages_fetched,
                progress_history=progress_history,
                error=message,
                duration_seconds=time.time() - start_time,
            )

        self.products = accumulated
        self.loading = False
        self.loaded_at = time.time()
        duration = self.loaded_at - start_time

        logger.info(f"Catalog load #{generation} finished: {len(accumulated)} products "
                    f"in {pages_fetched} pages ({duration:.2f}s)")

        return CatalogLoadResult(
            status=CatalogLoadStatus.SUCCESS,
            generation=generation,
            products=list(accumulated),
            pages_fetched=pages_fetched,
            progress_history=progress_history,
            duration_seconds=duration,
        )
