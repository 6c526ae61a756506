"""Process configuration and logging setup."""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    """Environment-derived settings, read once at startup."""

    public_key: str
    app_id: Optional[str] = None
    bot_token: Optional[str] = None
    guild_id: Optional[str] = None  # Optional for faster dev updates
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables (and a `.env` file if present).

        DISCORD_PUBLIC_KEY is required; the service cannot verify anything without it.
        """
        load_dotenv()

        public_key = os.environ.get("DISCORD_PUBLIC_KEY")
        if not public_key:
            raise RuntimeError("Set DISCORD_PUBLIC_KEY env var")

        port = os.environ.get("PORT", "3000")
        try:
            port_number = int(port)
        except ValueError as e:
            raise RuntimeError(f"PORT must be an integer, got {port!r}") from e

        return cls(
            public_key=public_key,
            app_id=os.environ.get("DISCORD_APP_ID") or None,
            bot_token=os.environ.get("DISCORD_BOT_TOKEN") or None,
            guild_id=os.environ.get("DISCORD_GUILD_ID") or None,
            host=os.environ.get("HOST", "0.0.0.0"),
            port=port_number,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def can_register_commands(self) -> bool:
        return bool(self.app_id and self.bot_token)


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the service."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
