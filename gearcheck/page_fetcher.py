"""Open, navigate and always close an isolated page on the shared browser."""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from playwright.async_api import (
    Browser,
    Page,
    TimeoutError as PlaywrightTimeoutError,
    Error as PlaywrightError,
)

from gearcheck.constants import (
    CaptureProfile,
    DEFAULT_PROFILE,
    NAVIGATION_TIMEOUT_MS,
    SETTLE_DELAY_MS,
    RENDER_SETTLE_MS,
)
from gearcheck.errors import FetchError
from utils.log_utils import tprint
from utils.settings_store import get_settings, deep_log

_ZOOM_SCRIPT = "(zoom) => { document.body.style.zoom = zoom; }"


@dataclass(frozen=True)
class FetchOptions:
    """Rendering and timing knobs for a single page load."""

    viewport_width: int = 1920
    viewport_height: int = 1080
    timeout_ms: int = NAVIGATION_TIMEOUT_MS
    settle_ms: int = SETTLE_DELAY_MS
    zoom: float | None = None
    render_settle_ms: int = RENDER_SETTLE_MS


class PageFetcher:
    """Loads a URL into a fresh page with network-idle navigation."""

    def __init__(self, settings: dict | None = None) -> None:
        self._settings = settings if settings is not None else get_settings()

    def options_for(self, profile: CaptureProfile = DEFAULT_PROFILE) -> FetchOptions:
        """Build fetch options from a capture profile and the timing settings."""
        return FetchOptions(
            viewport_width=profile.viewport_width,
            viewport_height=profile.viewport_height,
            timeout_ms=int(self._settings.get("navigation_timeout_ms", NAVIGATION_TIMEOUT_MS)),
            settle_ms=int(self._settings.get("settle_delay_ms", SETTLE_DELAY_MS)),
            zoom=profile.zoom,
            render_settle_ms=int(self._settings.get("render_settle_ms", RENDER_SETTLE_MS)),
        )

    @asynccontextmanager
    async def open(
        self, session: Browser, url: str, options: FetchOptions | None = None
    ) -> AsyncIterator[Page]:
        """Yield a loaded page; the page is closed on every exit path.

        Raises:
            FetchError: navigation timed out or the page could not be loaded.
        """
        options = options or self.options_for()
        try:
            page = await session.new_page(
                viewport={"width": options.viewport_width, "height": options.viewport_height}
            )
        except PlaywrightError as exc:
            raise FetchError(f"Could not open page for {url}: {exc}", url=url) from exc

        try:
            deep_log(f"[DEEP][FETCH] goto url={url} timeout_ms={options.timeout_ms}")
            try:
                await page.goto(url, wait_until="networkidle", timeout=options.timeout_ms)
            except PlaywrightTimeoutError as exc:
                raise FetchError(
                    f"Navigation to {url} timed out after {options.timeout_ms} ms",
                    code="FETCH_TIMEOUT",
                    url=url,
                ) from exc
            except PlaywrightError as exc:
                raise FetchError(f"Navigation to {url} failed: {exc}", url=url) from exc

            try:
                # Deferred widgets render after network idle.
                await page.wait_for_timeout(options.settle_ms)

                if options.zoom is not None:
                    await page.evaluate(_ZOOM_SCRIPT, str(options.zoom))
                    await page.wait_for_timeout(options.render_settle_ms)
            except PlaywrightError as exc:
                raise FetchError(f"Rendering {url} failed: {exc}", url=url) from exc

            yield page
        finally:
            await self._close(page, url)

    async def _close(self, page: Page, url: str) -> None:
        try:
            await page.close()
        except PlaywrightError as exc:
            tprint(f"[FETCH][WARN] Failed to close page for {url}: {exc}")
