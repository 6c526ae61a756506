"""Slash command definitions and their registration with Discord."""
import logging
from typing import Any, Dict, List, Optional

import httpx

from hookbot.config import Settings

logger = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api/v10"
DISCORD_USER_AGENT = "DiscordBot (https://github.com/hookbot/hookbot, 1.0.0)"

COMMANDS: List[Dict[str, Any]] = [
    {
        "name": "test",
        "description": "Basic command to test the application functionality",
        "type": 1,  # CHAT_INPUT
        "integration_types": [0, 1],  # GUILD_INSTALL, USER_INSTALL
        "contexts": [0, 1, 2],  # GUILD, BOT_DM, PRIVATE_CHANNEL
    },
    {
        "name": "echo",
        "description": "Repeat some text back",
        "type": 1,
        "integration_types": [0, 1],
        "contexts": [0, 1, 2],
        "options": [
            {
                "name": "text",
                "description": "Text to repeat",
                "type": 3,  # STRING
                "required": True,
            },
        ],
    },
]


def commands_url(settings: Settings) -> str:
    """
    URL the command list is PUT to.

    A configured guild id scopes the commands to that one server, where changes
    show up immediately; without it they are registered for every install.
    """
    if settings.guild_id:
        return f"{DISCORD_API_BASE}/applications/{settings.app_id}/guilds/{settings.guild_id}/commands"
    return f"{DISCORD_API_BASE}/applications/{settings.app_id}/commands"


async def register_commands(
    settings: Settings,
    commands: Optional[List[Dict[str, Any]]] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> int:
    """
    Overwrite the application's slash commands with `commands`.

    Returns the number of commands registered. Raises RuntimeError if Discord
    rejects the request.
    """
    if not settings.can_register_commands:
        raise RuntimeError("Set DISCORD_APP_ID and DISCORD_BOT_TOKEN to register commands")

    if commands is None:
        commands = COMMANDS

    headers = {
        "Authorization": f"Bot {settings.bot_token}",
        "Content-Type": "application/json; charset=UTF-8",
        "User-Agent": DISCORD_USER_AGENT,
    }
    url = commands_url(settings)

    if client is None:
        async with httpx.AsyncClient(timeout=20.0) as own_client:
            r = await own_client.put(url, headers=headers, json=commands)
    else:
        r = await client.put(url, headers=headers, json=commands)

    if r.status_code >= 400:
        raise RuntimeError(f"Command registration failed: {r.status_code} {r.text}")

    scope = "guild" if settings.guild_id else "global"
    logger.info("registered %d commands (%s)", len(commands), scope)
    return len(commands)
