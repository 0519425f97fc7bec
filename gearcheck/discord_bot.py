"""discord.py adapter for the gear check handler."""

from __future__ import annotations

import io

import discord

from gearcheck.browser_session import BrowserSessionManager
from gearcheck.errors import AuthorizationGrantError
from gearcheck.handler import GearCheckHandler, InboundMessage, VerdictReport
from utils.log_utils import tprint


def to_inbound(message: discord.Message) -> InboundMessage:
    return InboundMessage(
        author_id=str(message.author.id),
        author_mention=message.author.mention,
        channel_id=str(message.channel.id),
        content=message.content,
        author_is_bot=message.author.bot,
        is_member=isinstance(message.author, discord.Member),
        raw=message,
    )


class DiscordTransport:
    """MessagingTransport backed by the originating discord.Message."""

    async def reply(self, message: InboundMessage, text: str) -> None:
        await message.raw.reply(text)

    async def add_reaction(self, message: InboundMessage, emoji: str) -> None:
        await message.raw.add_reaction(emoji)

    async def clear_reactions(self, message: InboundMessage) -> None:
        await message.raw.clear_reactions()

    async def send_report(self, message: InboundMessage, report: VerdictReport) -> None:
        embed = discord.Embed(
            title=report.title,
            description=report.description,
            color=report.color,
            timestamp=discord.utils.utcnow(),
        )
        for item in report.fields:
            embed.add_field(name=item.name, value=item.value, inline=item.inline)
        files = [
            discord.File(io.BytesIO(data), filename=filename)
            for filename, data in report.attachments
        ]
        await message.raw.channel.send(embed=embed, files=files)

    async def send_text(self, message: InboundMessage, text: str) -> None:
        await message.raw.channel.send(text)


class DiscordRoleGranter:
    """AuthorizationSink that adds guild roles to the message author."""

    async def grant_role(self, message: InboundMessage, role_id: str) -> None:
        member = message.raw.author
        if not isinstance(member, discord.Member):
            raise AuthorizationGrantError(f"{message.author_id} is not a guild member")
        try:
            await member.add_roles(discord.Object(id=int(role_id)), reason="Gear check")
        except (discord.HTTPException, ValueError) as exc:
            raise AuthorizationGrantError(f"Could not grant role {role_id}: {exc}") from exc


def default_intents() -> discord.Intents:
    intents = discord.Intents.default()
    intents.guilds = True
    intents.guild_messages = True
    intents.message_content = True
    intents.guild_reactions = True
    intents.members = True
    return intents


class GearCheckBot(discord.Client):
    """Routes channel messages to the handler and owns browser teardown."""

    def __init__(
        self,
        handler: GearCheckHandler,
        sessions: BrowserSessionManager,
        *,
        intents: discord.Intents | None = None,
    ) -> None:
        super().__init__(intents=intents or default_intents())
        self.handler = handler
        self.sessions = sessions

    async def on_ready(self) -> None:
        tprint(f"[BOT] Online as {self.user}")
        tprint(f"[BOT] Monitoring channel: {self.handler.config.channel_id}")

    async def on_message(self, message: discord.Message) -> None:
        await self.handler.handle(to_inbound(message))

    async def close(self) -> None:
        tprint("[BOT] Shutting down...")
        await self.sessions.shutdown()
        await super().close()
