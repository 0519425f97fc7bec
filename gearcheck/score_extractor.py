"""Recover the best performance average from rendered profile markup.

The profile page has no machine-readable data, so the score is found by
proximity: a label phrase followed, within a bounded window, by a number
shaped like ``94.9``. Rules are tried in order; the first hit wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Iterable

from playwright.async_api import Browser

from gearcheck.constants import SCORE_MAX, SCORE_MIN
from gearcheck.page_fetcher import PageFetcher
from utils.log_utils import tprint
from utils.settings_store import deep_log


@dataclass(frozen=True)
class Score:
    """Extracted score; ``value`` is None when no rule matched."""

    value: float | None = None
    rule: str | None = None

    @property
    def found(self) -> bool:
        return self.value is not None

    def gate_value(self) -> float:
        """Value used for tier thresholds (a missing score counts as 0)."""
        return self.value if self.value is not None else 0.0

    def display(self) -> str:
        if self.value is None:
            return "Not Found"
        return f"**{self.value:.1f}**"


NOT_FOUND = Score()


@dataclass(frozen=True)
class ExtractionRule:
    """Label-then-number matcher with a bounded lookahead window."""

    name: str
    label: str
    window: int
    pattern: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        compiled = re.compile(
            rf"(?:{self.label})[\s\S]{{0,{self.window}}}?(\d{{1,3}}\.\d)",
            re.IGNORECASE,
        )
        object.__setattr__(self, "pattern", compiled)

    def search(self, markup: str) -> float | None:
        match = self.pattern.search(markup)
        if not match:
            return None
        value = float(match.group(1))
        if not SCORE_MIN <= value <= SCORE_MAX:
            deep_log(f"[DEEP][SCORE] rule={self.name} ignored out-of-range value {value}")
            return None
        return value


DEFAULT_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(name="best_perf", label="Best Perf", window=100),
    ExtractionRule(name="perf", label="performance|perf", window=50),
)


def find_score(markup: str, rules: Iterable[ExtractionRule] = DEFAULT_RULES) -> Score:
    """Apply ``rules`` in order and return the first score found."""
    for rule in rules:
        value = rule.search(markup)
        if value is not None:
            return Score(value=value, rule=rule.name)
    return NOT_FOUND


class ScoreExtractor:
    """Fetches a profile page and extracts its score."""

    def __init__(
        self,
        fetcher: PageFetcher | None = None,
        rules: Iterable[ExtractionRule] = DEFAULT_RULES,
    ) -> None:
        self._fetcher = fetcher or PageFetcher()
        self._rules = tuple(rules)

    async def extract_score(self, session: Browser, url: str) -> Score:
        tprint(f"[SCORE] Fetching performance average from {url}")
        try:
            async with self._fetcher.open(session, url, self._fetcher.options_for()) as page:
                markup = await page.content()
        except Exception as exc:
            tprint(f"[SCORE][ERROR] Could not load {url}: {exc}")
            return NOT_FOUND

        score = find_score(markup, self._rules)
        if score.found:
            tprint(f"[SCORE] Found performance average: {score.value} (rule={score.rule})")
        else:
            tprint(f"[SCORE][WARN] Could not find performance average on {url}")
        return score
