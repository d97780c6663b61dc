"""Command results and the interaction response payloads built from them."""
from dataclasses import dataclass
from typing import Union

from .interactions import InteractionResponseType


@dataclass(frozen=True)
class Ok:
    """The command did what was asked."""
    content: str


@dataclass(frozen=True)
class SoftFail:
    """The command could not complete; content explains why to the user."""
    content: str


CommandResult = Union[Ok, SoftFail]


def pong() -> dict:
    """Acknowledge Discord's endpoint handshake."""
    return {'type': InteractionResponseType.PONG.value}


def message(content: str) -> dict:
    """Plain channel message shown in reply to the command."""
    return {
        'type': InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE.value,
        'data': {'content': content}
    }


def render(result: CommandResult) -> dict:
    """Render a command result. Ok and SoftFail share the same wire shape."""
    return message(result.content)
