"""Gear check pipeline: browser captures, score extraction and verdicts."""

from gearcheck.browser_session import BrowserSessionManager
from gearcheck.coordinator import RequestCoordinator, RequestOutcome, validate_identifier
from gearcheck.score_extractor import NOT_FOUND, Score, find_score
from gearcheck.verdict import Verdict, VerdictTier, classify
