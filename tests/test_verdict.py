"""Tests for the verdict tiers and their boundaries."""

import pytest

from gearcheck.score_extractor import NOT_FOUND, Score
from gearcheck.verdict import VerdictTier, classify


class TestClassify:
    """Test suite for classify()."""

    @pytest.mark.parametrize(
        "score,tier",
        [
            (100.0, VerdictTier.ELITE),
            (90.0, VerdictTier.ELITE),
            (89.9, VerdictTier.QUALIFIED),
            (70.0, VerdictTier.QUALIFIED),
            (69.9, VerdictTier.UNQUALIFIED),
            (0, VerdictTier.UNQUALIFIED),
        ],
    )
    def test_boundaries(self, score, tier):
        """Test that lower bounds are inclusive for each tier."""
        assert classify(score).tier is tier

    def test_accepts_score_objects(self):
        """Test that a found Score is classified by its value."""
        assert classify(Score(value=94.9, rule="best_perf")).tier is VerdictTier.ELITE

    def test_not_found_is_unqualified(self):
        """Test that a missing score fails the gate like a zero."""
        verdict = classify(NOT_FOUND)
        assert verdict.tier is VerdictTier.UNQUALIFIED
        assert verdict.needs_review is True
        assert verdict.role_key is None

    def test_role_targets(self):
        """Test that each passing tier grants a distinct role."""
        assert classify(95.0).role_key == "tier_a"
        assert classify(75.0).role_key == "tier_b"

    def test_reaction_and_color(self):
        """Test display markers attached to each tier."""
        assert classify(95.0).color == 0x9B59B6
        assert classify(75.0).color == 0xFFD700
        assert classify(10.0).color == 0xFF0000
        assert classify(70.0).reaction == "✅"
        assert classify(69.9).reaction == "❌"

    def test_status_text(self):
        """Test the status line shown in the report."""
        assert classify(90.0).status_text == "Qualified for Peerless Scarred"
        assert classify(70.0).status_text == "Qualified for Stained"
        assert "Manual Review Required" in classify(0).status_text
