"""Turns chat messages into gear checks and outcomes into channel replies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from gearcheck.config import GearCheckConfig
from gearcheck.constants import TargetSite
from gearcheck.coordinator import RequestCoordinator, RequestOutcome
from gearcheck.errors import AlreadyInProgressError, AuthorizationGrantError, ValidationError
from gearcheck.verdict import VerdictTier
from utils.log_utils import tprint

PENDING_REACTION = "⏳"
FAILED_REACTION = "❌"

INVALID_NAME_REPLY = "❌ Please enter only your character name (letters only)"
IN_PROGRESS_REPLY = "⏳ Still processing your previous request..."
FAILURE_REPLY = "❌ Failed to verify character. Character may not exist or sites may be down."


@dataclass
class InboundMessage:
    """Transport-neutral view of a chat message."""

    author_id: str
    author_mention: str
    channel_id: str
    content: str
    author_is_bot: bool = False
    is_member: bool = True
    raw: Any = None  # transport handle passed back on every call


@dataclass
class ReportField:
    name: str
    value: str
    inline: bool = True


@dataclass
class VerdictReport:
    title: str
    description: str
    color: int
    fields: list[ReportField] = field(default_factory=list)
    attachments: list[tuple[str, bytes]] = field(default_factory=list)


class MessagingTransport(Protocol):
    async def reply(self, message: InboundMessage, text: str) -> None: ...

    async def add_reaction(self, message: InboundMessage, emoji: str) -> None: ...

    async def clear_reactions(self, message: InboundMessage) -> None: ...

    async def send_report(self, message: InboundMessage, report: VerdictReport) -> None: ...

    async def send_text(self, message: InboundMessage, text: str) -> None: ...


class AuthorizationSink(Protocol):
    async def grant_role(self, message: InboundMessage, role_id: str) -> None:
        """Grant ``role_id`` to the author; raises AuthorizationGrantError."""
        ...


def build_report(
    outcome: RequestOutcome, author_mention: str, sites: tuple[TargetSite, ...]
) -> VerdictReport:
    verdict = outcome.verdict
    return VerdictReport(
        title=f"Gear Check: {outcome.identifier}",
        description=f"Verification requested by {author_mention}",
        color=verdict.color,
        fields=[
            ReportField(name="📊 Best Performance Average", value=outcome.score.display()),
            ReportField(name="✅ Status", value=verdict.status_text),
        ],
        attachments=outcome.attachments(sites),
    )


class GearCheckHandler:
    """Glue between the chat transport and the request coordinator."""

    def __init__(
        self,
        coordinator: RequestCoordinator,
        transport: MessagingTransport,
        authorizer: AuthorizationSink,
        config: GearCheckConfig,
    ) -> None:
        self.coordinator = coordinator
        self.transport = transport
        self.authorizer = authorizer
        self.config = config

    def should_handle(self, message: InboundMessage) -> bool:
        if message.author_is_bot:
            return False
        return bool(self.config.channel_id) and message.channel_id == self.config.channel_id

    async def handle(self, message: InboundMessage) -> RequestOutcome | None:
        """Process one inbound message; returns the outcome when a run happened."""
        if not self.should_handle(message):
            return None

        async def mark_pending() -> None:
            await self.transport.add_reaction(message, PENDING_REACTION)

        try:
            outcome = await self.coordinator.run(
                message.author_id, message.content, on_admitted=mark_pending
            )
        except ValidationError:
            await self.transport.reply(message, INVALID_NAME_REPLY)
            return None
        except AlreadyInProgressError:
            await self.transport.reply(message, IN_PROGRESS_REPLY)
            return None

        if not outcome.completed:
            await self._report_failure(message)
            return outcome

        try:
            await self._report_verdict(message, outcome)
            await self._apply_roles(message, outcome)
        except Exception as exc:
            tprint(f"[HANDLER][ERROR] Reporting verdict for {outcome.identifier} failed: {exc}")
            await self._report_failure(message)
        return outcome

    async def _report_verdict(self, message: InboundMessage, outcome: RequestOutcome) -> None:
        await self.transport.clear_reactions(message)
        await self.transport.add_reaction(message, outcome.verdict.reaction)
        report = build_report(outcome, message.author_mention, self.coordinator.capture_sites)
        await self.transport.send_report(message, report)

    async def _report_failure(self, message: InboundMessage) -> None:
        try:
            await self.transport.clear_reactions(message)
            await self.transport.add_reaction(message, FAILED_REACTION)
            await self.transport.reply(message, FAILURE_REPLY)
        except Exception as exc:
            tprint(f"[HANDLER][ERROR] Could not deliver failure reply: {exc}")

    async def _apply_roles(self, message: InboundMessage, outcome: RequestOutcome) -> None:
        if not message.is_member:
            return
        verdict = outcome.verdict

        if verdict.needs_review:
            await self.transport.send_text(message, self._review_ping(message))
            return

        role_id = self.config.role_for(verdict.role_key)
        if not role_id:
            tprint(f"[HANDLER][WARN] No role configured for {verdict.label}; skipping grant")
            return

        if verdict.tier is VerdictTier.ELITE:
            announcement = (
                f"🏆 {message.author_mention} has been granted the **{verdict.label}** "
                "role for exceptional performance!"
            )
        else:
            announcement = f"✅ {message.author_mention} has been granted the **{verdict.label}** role!"

        try:
            await self.authorizer.grant_role(message, role_id)
            await self.transport.send_text(message, announcement)
        except AuthorizationGrantError as exc:
            tprint(f"[HANDLER][ERROR] Failed to assign {verdict.label} role: {exc}")
        except Exception as exc:
            tprint(f"[HANDLER][ERROR] Failed to announce {verdict.label} role: {exc}")

    def _review_ping(self, message: InboundMessage) -> str:
        text = "⚠️ **Manual Review Required**\n\n"
        text += f"{message.author_mention} has a performance average below 70.\n"
        reaper, goblin = self.config.reviewer_role_ids
        if reaper and goblin:
            text += f"<@&{reaper}> <@&{goblin}> - Please review this application."
        else:
            text += "Leadership - Please review this application."
        return text
