"""Entry point for the gear check bot."""

import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from gearcheck.browser_session import BrowserSessionManager
from gearcheck.capture import CaptureExtractor
from gearcheck.config import GearCheckConfig
from gearcheck.coordinator import RequestCoordinator
from gearcheck.discord_bot import DiscordRoleGranter, DiscordTransport, GearCheckBot
from gearcheck.handler import GearCheckHandler
from gearcheck.page_fetcher import PageFetcher
from gearcheck.score_extractor import ScoreExtractor
from utils.log_utils import tprint
from utils.settings_store import refresh_settings


def _is_enabled(name: str, default: bool = True) -> bool:
    """Read a boolean-like environment variable (1/0/true/false)."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _load_env_files() -> None:
    """Load .env files from common locations (repo, module root, home)."""
    candidates: list[Path] = []
    cwd = Path.cwd()
    candidates.extend([cwd / "env/.env", cwd / ".env"])

    module_root = Path(__file__).resolve().parent
    candidates.extend([module_root / "env/.env", module_root / ".env"])

    home = Path.home()
    candidates.extend([home / ".gearcheck.env", home / ".env.gearcheck"])

    for path in candidates:
        if path.exists():
            load_dotenv(dotenv_path=str(path), override=False)


def build_bot(config: GearCheckConfig) -> GearCheckBot:
    """Wire the session manager, coordinator and handler into a client."""
    settings = refresh_settings(os.getenv("GEARCHECK_SETTINGS"))
    if _is_enabled("GEARCHECK_HEADFUL", False):
        settings["playwright_headless"] = False
    sessions = BrowserSessionManager(settings=settings)
    fetcher = PageFetcher(settings=settings)
    coordinator = RequestCoordinator(
        sessions,
        captures=CaptureExtractor(fetcher),
        scores=ScoreExtractor(fetcher),
    )
    handler = GearCheckHandler(
        coordinator,
        transport=DiscordTransport(),
        authorizer=DiscordRoleGranter(),
        config=config,
    )
    return GearCheckBot(handler, sessions)


def bootstrap() -> None:
    """Load configuration and run the bot until interrupted."""
    _load_env_files()
    config = GearCheckConfig.from_env()
    missing = config.missing_required()
    if missing:
        tprint(f"[MAIN][ERROR] Missing required environment variables: {', '.join(missing)}")
        sys.exit(1)

    bot = build_bot(config)
    # discord.Client.run handles Ctrl-C by awaiting close(), which stops the browser.
    bot.run(config.bot_token)


if __name__ == "__main__":
    bootstrap()
