"""Viewport screenshots of character profile pages."""

from __future__ import annotations

from playwright.async_api import Browser

from gearcheck.constants import CaptureProfile, DEFAULT_PROFILE
from gearcheck.page_fetcher import PageFetcher
from utils.log_utils import tprint


class CaptureExtractor:
    """Renders a URL and returns PNG bytes, or None when anything fails."""

    def __init__(self, fetcher: PageFetcher | None = None) -> None:
        self._fetcher = fetcher or PageFetcher()

    async def capture(
        self, session: Browser, url: str, profile: CaptureProfile = DEFAULT_PROFILE
    ) -> bytes | None:
        tprint(f"[CAPTURE] Taking {profile.name} screenshot of {url}")
        try:
            async with self._fetcher.open(session, url, self._fetcher.options_for(profile)) as page:
                return await page.screenshot(type="png", full_page=False)
        except Exception as exc:
            # A missing capture never fails the request.
            tprint(f"[CAPTURE][ERROR] Screenshot failed for {url}: {exc}")
            return None
