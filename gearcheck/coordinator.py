"""Single-flight gear check pipeline: validate, admit, fan out, classify."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass, field
import re
import time
from typing import Awaitable, Callable, Hashable, Iterator

from gearcheck.browser_session import BrowserSessionManager
from gearcheck.capture import CaptureExtractor
from gearcheck.constants import ARMORY, WARCRAFTLOGS, TargetSite
from gearcheck.errors import AlreadyInProgressError, GearCheckError, ValidationError
from gearcheck.score_extractor import NOT_FOUND, Score, ScoreExtractor
from gearcheck.verdict import Verdict, classify
from utils.log_utils import tprint
from utils.settings_store import deep_log

IDENTIFIER_PATTERN = re.compile(r"^[a-zA-Z]+$")

FAILURE_REASON = "verification failed"


@dataclass
class RequestOutcome:
    """Terminal result of one pipeline run."""

    status: str  # "completed" | "failed"
    identifier: str
    requester_key: Hashable
    score: Score = NOT_FOUND
    verdict: Verdict | None = None
    captures: dict[str, bytes | None] = field(default_factory=dict)
    elapsed_ms: int = 0
    error_code: str | None = None
    error_message: str | None = None

    @property
    def completed(self) -> bool:
        return self.status == "completed"

    def attachments(self, sites: tuple[TargetSite, ...]) -> list[tuple[str, bytes]]:
        """Captured images in site order as (filename, png bytes)."""
        return [
            (site.attachment_name, self.captures[site.key])
            for site in sites
            if self.captures.get(site.key)
        ]


def validate_identifier(identifier: str) -> str:
    """Return the trimmed identifier or raise ValidationError."""
    name = (identifier or "").strip()
    if not IDENTIFIER_PATTERN.match(name):
        raise ValidationError("Character name must contain letters only")
    return name


class RequestCoordinator:
    """Runs at most one gear check per requester at a time.

    The score is read from the first site; both sites are captured.
    """

    def __init__(
        self,
        sessions: BrowserSessionManager,
        *,
        captures: CaptureExtractor | None = None,
        scores: ScoreExtractor | None = None,
        score_site: TargetSite = WARCRAFTLOGS,
        capture_sites: tuple[TargetSite, ...] = (WARCRAFTLOGS, ARMORY),
    ) -> None:
        self._sessions = sessions
        self._captures = captures or CaptureExtractor()
        self._scores = scores or ScoreExtractor()
        self.score_site = score_site
        self.capture_sites = capture_sites
        self._in_flight: set[Hashable] = set()

    def is_in_flight(self, requester_key: Hashable) -> bool:
        return requester_key in self._in_flight

    @contextmanager
    def _admit(self, requester_key: Hashable) -> Iterator[None]:
        # Check and insert must not straddle an await.
        if requester_key in self._in_flight:
            raise AlreadyInProgressError("Still processing your previous request")
        self._in_flight.add(requester_key)
        try:
            yield
        finally:
            self._in_flight.discard(requester_key)

    async def run(
        self,
        requester_key: Hashable,
        identifier: str,
        on_admitted: Callable[[], Awaitable[None]] | None = None,
    ) -> RequestOutcome:
        """Run the pipeline for ``identifier`` on behalf of ``requester_key``.

        Raises:
            ValidationError: identifier is not letters only.
            AlreadyInProgressError: requester already has a run in flight.
        """
        name = validate_identifier(identifier)
        with self._admit(requester_key):
            start = time.monotonic()
            tprint(f"[COORDINATOR] Checking character: {name}")
            try:
                if on_admitted is not None:
                    await on_admitted()
                outcome = await self._process(requester_key, name)
            except Exception as exc:
                code = exc.code if isinstance(exc, GearCheckError) else "UNEXPECTED"
                tprint(f"[COORDINATOR][ERROR] Gear check for {name} failed ({code}): {exc}")
                outcome = RequestOutcome(
                    status="failed",
                    identifier=name,
                    requester_key=requester_key,
                    error_code=code,
                    error_message=FAILURE_REASON,
                )
            outcome.elapsed_ms = int((time.monotonic() - start) * 1000)
            deep_log(
                f"[DEEP][COORDINATOR] {name} status={outcome.status} "
                f"elapsed_ms={outcome.elapsed_ms}"
            )
            return outcome

    async def _process(self, requester_key: Hashable, name: str) -> RequestOutcome:
        session = await self._sessions.acquire()

        capture_tasks = [
            self._captures.capture(session, site.url_for(name), site.profile)
            for site in self.capture_sites
        ]
        results = await asyncio.gather(
            *capture_tasks,
            self._scores.extract_score(session, self.score_site.url_for(name)),
            return_exceptions=True,
        )
        *capture_results, score_result = results

        captures: dict[str, bytes | None] = {}
        for site, result in zip(self.capture_sites, capture_results):
            if isinstance(result, BaseException):
                tprint(f"[COORDINATOR][WARN] {site.key} capture raised: {result}")
                result = None
            captures[site.key] = result

        if isinstance(score_result, BaseException):
            tprint(f"[COORDINATOR][WARN] Score extraction raised: {score_result}")
            score_result = NOT_FOUND

        verdict = classify(score_result)
        tprint(
            f"[COORDINATOR] {name}: score={score_result.display()} tier={verdict.tier.value} "
            f"captures={sum(1 for image in captures.values() if image)}/{len(captures)}"
        )
        return RequestOutcome(
            status="completed",
            identifier=name,
            requester_key=requester_key,
            score=score_result,
            verdict=verdict,
            captures=captures,
        )
