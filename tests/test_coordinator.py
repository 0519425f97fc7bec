"""Tests for RequestCoordinator admission, fan-out and outcomes."""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from gearcheck.constants import ARMORY, WARCRAFTLOGS
from gearcheck.coordinator import RequestCoordinator, validate_identifier
from gearcheck.errors import AlreadyInProgressError, SessionLaunchError, ValidationError
from gearcheck.score_extractor import NOT_FOUND, Score
from gearcheck.verdict import VerdictTier


class FakeCaptures:
    """Capture extractor returning canned images keyed by profile name."""

    def __init__(self, results=None):
        self.results = results or {}
        self.calls: list[str] = []

    async def capture(self, session, url, profile):
        self.calls.append(url)
        result = self.results.get(profile.name, f"png:{profile.name}".encode())
        if isinstance(result, Exception):
            raise result
        return result


class FakeScores:
    """Score extractor returning a fixed score, optionally after a gate."""

    def __init__(self, score=Score(value=95.0, rule="best_perf"), gate=None, error=None):
        self.score = score
        self.gate = gate
        self.error = error
        self.calls: list[str] = []

    async def extract_score(self, session, url):
        self.calls.append(url)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.score


def _make_sessions(side_effect=None):
    sessions = Mock()
    sessions.acquire = AsyncMock(return_value="browser", side_effect=side_effect)
    return sessions


def _make_coordinator(sessions=None, captures=None, scores=None):
    return RequestCoordinator(
        sessions or _make_sessions(),
        captures=captures or FakeCaptures(),
        scores=scores or FakeScores(),
    )


class TestValidateIdentifier:
    """Test suite for identifier validation."""

    def test_trims_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        assert validate_identifier("  Thrall \n") == "Thrall"

    @pytest.mark.parametrize("identifier", ["Thrall123", "Thr all", "", "Thrall!", "Þrall", "   "])
    def test_rejects_non_letters(self, identifier):
        """Test that anything but ASCII letters is rejected."""
        with pytest.raises(ValidationError):
            validate_identifier(identifier)


class TestRequestCoordinator:
    """Test suite for RequestCoordinator.run()."""

    def test_thrall_end_to_end(self):
        """Test the elite path with both captures present."""
        captures = FakeCaptures()
        scores = FakeScores(score=Score(value=95.0, rule="best_perf"))
        coordinator = _make_coordinator(captures=captures, scores=scores)

        outcome = asyncio.run(coordinator.run("user-1", "Thrall"))

        assert outcome.completed
        assert outcome.verdict.tier is VerdictTier.ELITE
        assert outcome.verdict.role_key == "tier_a"
        assert outcome.score.value == 95.0
        attachments = outcome.attachments(coordinator.capture_sites)
        assert [name for name, _ in attachments] == ["warcraftlogs.png", "armory.png"]
        assert captures.calls == [WARCRAFTLOGS.url_for("thrall"), ARMORY.url_for("thrall")]
        assert scores.calls == ["https://fresh.warcraftlogs.com/character/us/nightslayer/thrall"]
        assert coordinator.is_in_flight("user-1") is False

    def test_invalid_identifier_does_no_work(self):
        """Test that validation fails before admission or any fetch."""
        sessions = _make_sessions()
        captures = FakeCaptures()
        scores = FakeScores()
        on_admitted = AsyncMock()
        coordinator = _make_coordinator(sessions, captures, scores)

        with pytest.raises(ValidationError):
            asyncio.run(coordinator.run("user-1", "Thrall123", on_admitted=on_admitted))

        sessions.acquire.assert_not_awaited()
        on_admitted.assert_not_awaited()
        assert captures.calls == []
        assert scores.calls == []
        assert coordinator.is_in_flight("user-1") is False

    def test_both_captures_missing_still_completes(self):
        """Test that captures and score are independent."""
        captures = FakeCaptures(results={"default": None, "zoomed": None})
        scores = FakeScores(score=Score(value=75.0, rule="perf"))
        coordinator = _make_coordinator(captures=captures, scores=scores)

        outcome = asyncio.run(coordinator.run("user-1", "Jaina"))

        assert outcome.completed
        assert outcome.attachments(coordinator.capture_sites) == []
        assert outcome.verdict.tier is VerdictTier.QUALIFIED

    def test_raising_capture_does_not_cancel_siblings(self):
        """Test that an exception in one operation becomes a neutral value."""
        captures = FakeCaptures(results={"default": RuntimeError("boom")})
        scores = FakeScores(score=Score(value=91.0))
        coordinator = _make_coordinator(captures=captures, scores=scores)

        outcome = asyncio.run(coordinator.run("user-1", "Jaina"))

        assert outcome.completed
        assert outcome.captures[WARCRAFTLOGS.key] is None
        assert outcome.captures[ARMORY.key] == b"png:zoomed"
        assert outcome.verdict.tier is VerdictTier.ELITE

    def test_score_failure_becomes_not_found(self):
        """Test that a score timeout leaves a completed, unqualified outcome."""
        scores = FakeScores(score=NOT_FOUND)
        coordinator = _make_coordinator(scores=scores)

        outcome = asyncio.run(coordinator.run("user-1", "Jaina"))

        assert outcome.completed
        assert outcome.score is NOT_FOUND
        assert outcome.verdict.tier is VerdictTier.UNQUALIFIED
        assert len(outcome.attachments(coordinator.capture_sites)) == 2

    def test_raising_score_extractor_becomes_not_found(self):
        """Test that an escaped score error is contained."""
        scores = FakeScores(error=RuntimeError("unexpected"))
        coordinator = _make_coordinator(scores=scores)

        outcome = asyncio.run(coordinator.run("user-1", "Jaina"))

        assert outcome.completed
        assert outcome.score is NOT_FOUND

    def test_session_failure_fails_request_and_releases_slot(self):
        """Test that a launch failure yields a failed outcome, not a crash."""
        sessions = _make_sessions(side_effect=SessionLaunchError("no chromium"))
        coordinator = _make_coordinator(sessions=sessions)

        outcome = asyncio.run(coordinator.run("user-1", "Thrall"))

        assert outcome.status == "failed"
        assert outcome.error_code == "SESSION_LAUNCH_FAILED"
        assert outcome.error_message == "verification failed"
        assert outcome.verdict is None
        assert coordinator.is_in_flight("user-1") is False

        sessions.acquire.side_effect = None
        assert asyncio.run(coordinator.run("user-1", "Thrall")).completed

    def test_second_request_rejected_while_in_flight(self):
        """Test single-flight admission per requester key."""

        async def scenario():
            gate = asyncio.Event()
            coordinator = _make_coordinator(scores=FakeScores(gate=gate))

            first = asyncio.create_task(coordinator.run("user-1", "Thrall"))
            while not coordinator.is_in_flight("user-1"):
                await asyncio.sleep(0)

            with pytest.raises(AlreadyInProgressError):
                await coordinator.run("user-1", "Jaina")

            other = asyncio.create_task(coordinator.run("user-2", "Jaina"))
            await asyncio.sleep(0)
            assert coordinator.is_in_flight("user-2")

            gate.set()
            first_outcome = await first
            await other
            assert coordinator.is_in_flight("user-1") is False

            again = await coordinator.run("user-1", "Jaina")
            return first_outcome, again

        first_outcome, again = asyncio.run(scenario())

        assert first_outcome.identifier == "Thrall"
        assert again.completed

    def test_on_admitted_called_before_fetch(self):
        """Test the admission callback runs once the slot is taken."""
        order = []
        sessions = _make_sessions()
        sessions.acquire.side_effect = lambda: order.append("acquire") or "browser"

        async def on_admitted():
            order.append("admitted")

        coordinator = _make_coordinator(sessions=sessions)
        asyncio.run(coordinator.run("user-1", "Thrall", on_admitted=on_admitted))

        assert order == ["admitted", "acquire"]

    def test_failing_on_admitted_fails_request(self):
        """Test that an error in the admission callback is a pipeline failure."""
        coordinator = _make_coordinator()
        on_admitted = AsyncMock(side_effect=RuntimeError("reaction refused"))

        outcome = asyncio.run(coordinator.run("user-1", "Thrall", on_admitted=on_admitted))

        assert outcome.status == "failed"
        assert outcome.error_code == "UNEXPECTED"
        assert coordinator.is_in_flight("user-1") is False
