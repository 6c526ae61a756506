"""Map decoded interactions to interaction response payloads."""
from enum import IntEnum
from typing import Any, Dict

from typing_extensions import assert_never

from hookbot.interactions import ApplicationCommand, Interaction, Ping


class InteractionResponseType(IntEnum):
    """Interaction callback types used on responses."""

    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4


def create_command_reply(command: ApplicationCommand) -> str:
    """Create the reply text for an application command."""
    invocation = "/" + " ".join(command.command_path())
    values = command.option_values()
    if values:
        args = " ".join(f"{name}:{value}" for name, value in values.items())
        invocation = f"{invocation} {args}"
    return f"Hi there from the bot! You used `{invocation}`."


def respond(interaction: Interaction) -> Dict[str, Any]:
    """Build the response payload for an interaction."""
    if isinstance(interaction, Ping):
        return {"type": InteractionResponseType.PONG.value}

    if isinstance(interaction, ApplicationCommand):
        return {
            "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE.value,
            "data": {"content": create_command_reply(interaction)},
        }

    assert_never(interaction)
