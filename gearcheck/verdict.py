"""Map a performance score to a qualification tier."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gearcheck.constants import ELITE_THRESHOLD, QUALIFIED_THRESHOLD
from gearcheck.score_extractor import Score


class VerdictTier(str, Enum):
    ELITE = "elite"
    QUALIFIED = "qualified"
    UNQUALIFIED = "unqualified"


@dataclass(frozen=True)
class Verdict:
    tier: VerdictTier
    label: str
    status_text: str
    color: int
    role_key: str | None  # "tier_a" | "tier_b" | None

    @property
    def passed(self) -> bool:
        return self.tier is not VerdictTier.UNQUALIFIED

    @property
    def needs_review(self) -> bool:
        return self.tier is VerdictTier.UNQUALIFIED

    @property
    def reaction(self) -> str:
        return "✅" if self.passed else "❌"


ELITE = Verdict(
    tier=VerdictTier.ELITE,
    label="Peerless Scarred",
    status_text="Qualified for Peerless Scarred",
    color=0x9B59B6,
    role_key="tier_a",
)
QUALIFIED = Verdict(
    tier=VerdictTier.QUALIFIED,
    label="Stained",
    status_text="Qualified for Stained",
    color=0xFFD700,
    role_key="tier_b",
)
UNQUALIFIED = Verdict(
    tier=VerdictTier.UNQUALIFIED,
    label="Manual Review",
    status_text="Below 70 threshold - Manual Review Required",
    color=0xFF0000,
    role_key=None,
)


def classify(score: Score | float) -> Verdict:
    """Return the tier for ``score``; a missing score is unqualified."""
    value = score.gate_value() if isinstance(score, Score) else float(score)
    if value >= ELITE_THRESHOLD:
        return ELITE
    if value >= QUALIFIED_THRESHOLD:
        return QUALIFIED
    return UNQUALIFIED
