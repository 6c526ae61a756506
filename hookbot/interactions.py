"""Typed models for Discord interactions and the decoder for verified request bodies.

See: https://discord.com/developers/docs/interactions/receiving-and-responding
"""
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError


class InteractionType(IntEnum):
    """Interaction types this service accepts on requests."""

    PING = 1
    APPLICATION_COMMAND = 2


class ApplicationCommandType(IntEnum):
    CHAT_INPUT = 1
    USER = 2
    MESSAGE = 3
    PRIMARY_ENTRY_POINT = 4


class ApplicationCommandOptionType(IntEnum):
    SUB_COMMAND = 1
    SUB_COMMAND_GROUP = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    USER = 6
    CHANNEL = 7
    ROLE = 8
    MENTIONABLE = 9
    NUMBER = 10
    ATTACHMENT = 11


SUB_COMMAND_TYPES = (
    ApplicationCommandOptionType.SUB_COMMAND,
    ApplicationCommandOptionType.SUB_COMMAND_GROUP,
)


class InteractionDecodeError(ValueError):
    """A verified body could not be decoded into a known interaction."""


class UnknownInteractionTypeError(InteractionDecodeError):
    """The body carries an interaction type this service does not handle."""

    def __init__(self, interaction_type: int) -> None:
        super().__init__(f"unknown interaction type: {interaction_type}")
        self.interaction_type = interaction_type


class InteractionOption(BaseModel):
    """One node of a command's option tree; sub-commands carry nested options."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    option_type: ApplicationCommandOptionType = Field(alias="type")
    value: Optional[Union[bool, int, float, str]] = None
    options: Optional[List["InteractionOption"]] = None


class ApplicationCommand(BaseModel):
    """APPLICATION_COMMAND interaction (slash command, user or message command)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    command_type: ApplicationCommandType = Field(alias="type")
    options: Optional[List[InteractionOption]] = None

    def _leaf_options(self) -> Tuple[List[str], List[InteractionOption]]:
        path = [self.name]
        options = self.options or []
        # Descend through SUB_COMMAND_GROUP / SUB_COMMAND nodes
        while options and options[0].option_type in SUB_COMMAND_TYPES:
            path.append(options[0].name)
            options = options[0].options or []
        return path, options

    def command_path(self) -> List[str]:
        """Command name followed by any sub-command group and sub-command names."""
        return self._leaf_options()[0]

    def option_values(self) -> Dict[str, Any]:
        """Values of the innermost sub-command's options, keyed by option name."""
        return {opt.name: opt.value for opt in self._leaf_options()[1]}


class Ping(BaseModel):
    """PING interaction sent by Discord to validate the endpoint."""

    model_config = ConfigDict(frozen=True)


Interaction = Union[Ping, ApplicationCommand]


class _Envelope(BaseModel):
    # Discriminator first; `data` is validated per type afterwards
    type: StrictInt
    data: Any = None


def parse_interaction(raw: Union[bytes, str]) -> Interaction:
    """
    Decode a verified request body into an Interaction.

    Types other than PING and APPLICATION_COMMAND are rejected rather than
    ignored: an unknown type means the app's registration has drifted from
    what this service handles.
    """
    try:
        envelope = _Envelope.model_validate_json(raw)
    except ValidationError as e:
        raise InteractionDecodeError("body is not an interaction envelope") from e

    if envelope.type == InteractionType.PING:
        return Ping()

    if envelope.type == InteractionType.APPLICATION_COMMAND:
        data = envelope.data if envelope.data is not None else {}
        try:
            return ApplicationCommand.model_validate(data)
        except ValidationError as e:
            raise InteractionDecodeError(
                f"malformed application command: {e.error_count()} validation error(s)"
            ) from e

    raise UnknownInteractionTypeError(envelope.type)
