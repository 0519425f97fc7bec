"""Shared constants for target sites, rendering and scoring."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CaptureProfile:
    """Viewport and zoom used when rendering a capture."""

    name: str
    viewport_width: int = 1920
    viewport_height: int = 1080
    zoom: float | None = None


DEFAULT_PROFILE = CaptureProfile(name="default")
# Taller viewport zoomed out to fit the whole gear panel.
ZOOMED_PROFILE = CaptureProfile(name="zoomed", viewport_height=1200, zoom=0.8)


@dataclass(frozen=True)
class TargetSite:
    """A profile site queried for every character."""

    key: str
    base_url: str
    attachment_name: str
    profile: CaptureProfile

    def url_for(self, identifier: str) -> str:
        return f"{self.base_url}{identifier.lower()}"


WARCRAFTLOGS = TargetSite(
    key="warcraftlogs",
    base_url="https://fresh.warcraftlogs.com/character/us/nightslayer/",
    attachment_name="warcraftlogs.png",
    profile=DEFAULT_PROFILE,
)
ARMORY = TargetSite(
    key="armory",
    base_url="https://classic-armory.org/character/us/classic/nightslayer/",
    attachment_name="armory.png",
    profile=ZOOMED_PROFILE,
)

# Navigation and settle timings (milliseconds); overridable through settings.
NAVIGATION_TIMEOUT_MS = 30_000
SETTLE_DELAY_MS = 2_000
RENDER_SETTLE_MS = 500

SANDBOX_ARGS = ("--no-sandbox", "--disable-setuid-sandbox")

# Verdict thresholds (inclusive lower bounds)
ELITE_THRESHOLD = 90.0
QUALIFIED_THRESHOLD = 70.0

SCORE_MIN = 0.0
SCORE_MAX = 100.0
