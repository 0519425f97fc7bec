"""Tests for CaptureExtractor screenshots."""

import asyncio
from unittest.mock import AsyncMock

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from gearcheck.capture import CaptureExtractor
from gearcheck.constants import DEFAULT_PROFILE, ZOOMED_PROFILE
from gearcheck.page_fetcher import PageFetcher


def _make_session(page):
    session = AsyncMock()
    session.new_page.return_value = page
    return session


class TestCaptureExtractor:
    """Test suite for CaptureExtractor.capture()."""

    def test_returns_viewport_png(self):
        """Test that a viewport-bounded PNG is returned."""
        page = AsyncMock()
        page.screenshot.return_value = b"\x89PNG"
        extractor = CaptureExtractor(PageFetcher(settings={}))

        image = asyncio.run(
            extractor.capture(_make_session(page), "https://example.com/thrall", DEFAULT_PROFILE)
        )

        assert image == b"\x89PNG"
        page.screenshot.assert_awaited_once_with(type="png", full_page=False)
        page.close.assert_awaited_once()

    def test_zoomed_profile(self):
        """Test that the zoomed profile uses the taller viewport and zoom."""
        page = AsyncMock()
        page.screenshot.return_value = b"img"
        session = _make_session(page)
        extractor = CaptureExtractor(PageFetcher(settings={}))

        asyncio.run(extractor.capture(session, "https://example.com/thrall", ZOOMED_PROFILE))

        session.new_page.assert_awaited_once_with(viewport={"width": 1920, "height": 1200})
        page.evaluate.assert_awaited_once()

    def test_navigation_failure_returns_none(self):
        """Test that a timeout yields no image instead of an error."""
        page = AsyncMock()
        page.goto.side_effect = PlaywrightTimeoutError("Timeout 30000ms exceeded")
        extractor = CaptureExtractor(PageFetcher(settings={}))

        image = asyncio.run(extractor.capture(_make_session(page), "https://example.com/x"))

        assert image is None
        page.screenshot.assert_not_awaited()
        page.close.assert_awaited_once()

    def test_screenshot_failure_returns_none(self):
        """Test that a failing screenshot yields no image."""
        page = AsyncMock()
        page.screenshot.side_effect = RuntimeError("renderer crashed")
        extractor = CaptureExtractor(PageFetcher(settings={}))

        image = asyncio.run(extractor.capture(_make_session(page), "https://example.com/x"))

        assert image is None
        page.close.assert_awaited_once()
