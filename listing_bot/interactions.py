"""Typed view of the Discord interaction payloads this function receives."""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Optional


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2
    MESSAGE_COMPONENT = 3
    APPLICATION_COMMAND_AUTOCOMPLETE = 4
    MODAL_SUBMIT = 5


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4


class ChannelType(IntEnum):
    GUILD_TEXT = 0
    DM = 1
    GUILD_VOICE = 2
    GUILD_CATEGORY = 4
    GUILD_ANNOUNCEMENT = 5


@dataclass(frozen=True)
class CommandOption:
    """One name/type/value triple from ``data.options``."""
    name: str
    type: Optional[int] = None
    value: Any = None

    @classmethod
    def from_payload(cls, payload: dict) -> 'CommandOption':
        return cls(
            name=payload.get('name', ''),
            type=payload.get('type'),
            value=payload.get('value'),
        )


@dataclass(frozen=True)
class Interaction:
    """An inbound interaction, parsed once from the verified JSON body."""
    type: Optional[int]
    id: Optional[str] = None
    guild_id: Optional[str] = None
    command_name: Optional[str] = None
    options: List[CommandOption] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict) -> 'Interaction':
        data = payload.get('data') or {}
        raw_options = data.get('options') or []
        return cls(
            type=payload.get('type'),
            id=payload.get('id'),
            guild_id=payload.get('guild_id') or None,
            command_name=data.get('name'),
            options=[CommandOption.from_payload(o) for o in raw_options if isinstance(o, dict)],
        )
