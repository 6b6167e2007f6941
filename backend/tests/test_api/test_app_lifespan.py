"""
Tests for application startup/shutdown

Author: TM3
Date: 2025-10-17
"""
import asyncio
from unittest.mock import MagicMock, patch

import pytest

from app.main import app, lifespan


@pytest.mark.anyio
class TestLifespan:

    async def test_shutdown_waits_for_cancelled_initial_load(self):
        """The background catalog load is cancelled and awaited on shutdown"""
        # Arrange: a catalog load that never finishes on its own
        started = asyncio.Event()
        cancelled = []

        async def never_finishes():
            started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(True)
                raise

        storefront = MagicMock()
        storefront.reload_catalog = never_finishes

        # Act
        with patch('app.main.Storefront', return_value=storefront):
            async with lifespan(app):
                await started.wait()

        # Assert
        storefront.start.assert_called_once()
        assert cancelled == [True]
