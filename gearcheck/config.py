"""Channel, role and credential configuration read from the environment."""

from __future__ import annotations

from dataclasses import dataclass
import os


def _env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    value = raw.strip()
    return value or None


@dataclass(frozen=True)
class GearCheckConfig:
    channel_id: str | None = None
    tier_a_role_id: str | None = None
    tier_b_role_id: str | None = None
    reviewer_role_ids: tuple[str | None, str | None] = (None, None)
    bot_token: str | None = None

    @classmethod
    def from_env(cls) -> "GearCheckConfig":
        return cls(
            channel_id=_env("GEARCHECK_CHANNEL_ID"),
            tier_a_role_id=_env("PEERLESS_SCARRED_ROLE_ID"),
            tier_b_role_id=_env("STAINED_ROLE_ID"),
            reviewer_role_ids=(_env("REAPER_ROLE_ID"), _env("GOBLIN_ROLE_ID")),
            bot_token=_env("BOT_TOKEN"),
        )

    def role_for(self, role_key: str | None) -> str | None:
        """Resolve a verdict role key ("tier_a"/"tier_b") to a role id."""
        if role_key == "tier_a":
            return self.tier_a_role_id
        if role_key == "tier_b":
            return self.tier_b_role_id
        return None

    def missing_required(self) -> list[str]:
        missing = []
        if not self.bot_token:
            missing.append("BOT_TOKEN")
        if not self.channel_id:
            missing.append("GEARCHECK_CHANNEL_ID")
        return missing
