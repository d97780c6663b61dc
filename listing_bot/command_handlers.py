"""Handlers for the /bump and /invite slash commands."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .command_registry import registry
from .config import MAX_INVITE_EXPIRY_HOURS, MAX_INVITE_USES
from .discord_service import DiscordService, DiscordAPIError
from .interactions import ChannelType, CommandOption, Interaction
from .observability import get_logger, traced_function
from .responses import CommandResult, Ok, SoftFail
from .server_store import ServerStore, ServerStoreError

logger = get_logger('commands')

DEFAULT_EXPIRY_HOURS = 24
DEFAULT_MAX_USES = 0
INVITE_BASE_URL = 'https://discord.gg'

GUILD_ONLY_MESSAGE = 'This command can only be used inside a server.'

BUMP_SUCCESS_MESSAGE = (
    '🚀 Server bumped successfully! Your server will now be at the top of the list '
    'for more visibility.'
)
BUMP_NOT_REGISTERED_MESSAGE = (
    'This server is not listed yet. Add it on the website first, then use `/bump` again.'
)
BUMP_FAILED_MESSAGE = 'Failed to bump the server. Please try again later.'
BUMP_UNAVAILABLE_MESSAGE = 'Bumping is not available right now. Please try again later.'

INVITE_CHANNELS_ERROR_MESSAGE = (
    "I couldn't read this server's channels. Make sure the bot has the "
    "**View Channels** permission."
)
INVITE_NO_CHANNEL_MESSAGE = 'No suitable text channel found to create an invite in.'
INVITE_CREATE_ERROR_MESSAGE = (
    "I couldn't create an invite. Make sure the bot has the **Create Invite** permission."
)
INVITE_UNAVAILABLE_MESSAGE = 'Invite links are not available right now. Please try again later.'


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CommandContext:
    """Collaborators shared by every command invocation in this process."""
    store: Optional[ServerStore] = None
    discord: Optional[DiscordService] = None
    clock: Callable[[], datetime] = field(default=utc_now)


@dataclass(frozen=True)
class InviteRequest:
    expiry_hours: int = DEFAULT_EXPIRY_HOURS
    max_uses: int = DEFAULT_MAX_USES

    @property
    def max_age_seconds(self) -> int:
        return self.expiry_hours * 3600


@dataclass(frozen=True)
class InviteResult:
    code: str
    expiry_hours: int
    max_uses: int

    @property
    def url(self) -> str:
        return f"{INVITE_BASE_URL}/{self.code}"


def _int_option(options: List[CommandOption], name: str, default: int, maximum: int) -> int:
    for opt in options:
        if opt.name != name:
            continue
        # bool is an int subclass; Discord never sends one for an integer option
        if isinstance(opt.value, int) and not isinstance(opt.value, bool) and 0 <= opt.value <= maximum:
            return opt.value
        return default
    return default


def resolve_options(options: List[CommandOption]) -> InviteRequest:
    """Resolve /invite options into an InviteRequest, applying defaults.

    ``expiry`` maps to expiry_hours (default 24) and ``uses`` to max_uses
    (default 0, which Discord treats as unlimited). Missing, non-integer or
    out-of-range values fall back to the default; unknown option names are
    ignored.
    """
    return InviteRequest(
        expiry_hours=_int_option(options, 'expiry', DEFAULT_EXPIRY_HOURS, MAX_INVITE_EXPIRY_HOURS),
        max_uses=_int_option(options, 'uses', DEFAULT_MAX_USES, MAX_INVITE_USES),
    )


def format_invite_reply(result: InviteResult) -> str:
    if result.expiry_hours == 0:
        expiry = 'never'
    elif result.expiry_hours == 1:
        expiry = 'in 1 hour'
    else:
        expiry = f'in {result.expiry_hours} hours'
    uses = 'unlimited' if result.max_uses == 0 else str(result.max_uses)
    return (
        f"Here's your invite link: {result.url}\n"
        f"Expires: {expiry} | Max uses: {uses}\n"
        "Share this with friends to grow your community!"
    )


@registry.register('bump')
@traced_function('bump_command')
def handle_bump(context: CommandContext, interaction: Interaction,
                correlation_id: str = None) -> CommandResult:
    """Touch the listing's updated_at so it sorts to the top of the directory."""
    guild_id = interaction.guild_id
    if not guild_id:
        return SoftFail(GUILD_ONLY_MESSAGE)

    if context.store is None:
        logger.warning("Bump requested but the listing store is not configured",
                       correlation_id=correlation_id, guild_id=guild_id)
        return SoftFail(BUMP_UNAVAILABLE_MESSAGE)

    try:
        record = context.store.get_server(guild_id, correlation_id=correlation_id)
    except ServerStoreError as e:
        logger.error("Server lookup failed", error=e, correlation_id=correlation_id, guild_id=guild_id)
        return SoftFail(BUMP_FAILED_MESSAGE)

    if record is None:
        logger.info("Bump for unlisted server", correlation_id=correlation_id, guild_id=guild_id)
        return SoftFail(BUMP_NOT_REGISTERED_MESSAGE)

    try:
        context.store.touch_server(guild_id, context.clock(), correlation_id=correlation_id)
    except ServerStoreError as e:
        logger.error("Server bump failed", error=e, correlation_id=correlation_id, guild_id=guild_id)
        return SoftFail(BUMP_FAILED_MESSAGE)

    logger.info("Server bumped", correlation_id=correlation_id, guild_id=guild_id)
    return Ok(BUMP_SUCCESS_MESSAGE)


@registry.register('invite')
@traced_function('invite_command')
def handle_invite(context: CommandContext, interaction: Interaction,
                  correlation_id: str = None) -> CommandResult:
    """Create an invite on the guild's first text channel.

    Two sequential Discord calls (list channels, then create invite); each
    failure point maps to its own message and nothing is retried.
    """
    guild_id = interaction.guild_id
    if not guild_id:
        return SoftFail(GUILD_ONLY_MESSAGE)

    if context.discord is None or not context.discord.has_token:
        logger.warning("Invite requested but DISCORD_BOT_TOKEN is not configured",
                       correlation_id=correlation_id, guild_id=guild_id)
        return SoftFail(INVITE_UNAVAILABLE_MESSAGE)

    invite_request = resolve_options(interaction.options)

    try:
        channels = context.discord.list_guild_channels(guild_id)
    except DiscordAPIError as e:
        logger.warning("Could not list guild channels", correlation_id=correlation_id,
                       guild_id=guild_id, status_code=e.status_code, error=str(e))
        return SoftFail(INVITE_CHANNELS_ERROR_MESSAGE)

    # First text channel in API order; no "general" channel preference
    channel = next(
        (c for c in channels
         if isinstance(c, dict) and c.get('id') and c.get('type') == ChannelType.GUILD_TEXT),
        None
    )
    if channel is None:
        return SoftFail(INVITE_NO_CHANNEL_MESSAGE)

    try:
        invite = context.discord.create_channel_invite(
            channel['id'],
            max_age=invite_request.max_age_seconds,
            max_uses=invite_request.max_uses
        )
    except DiscordAPIError as e:
        logger.warning("Could not create invite", correlation_id=correlation_id, guild_id=guild_id,
                       channel_id=channel.get('id'), status_code=e.status_code, error=str(e))
        return SoftFail(INVITE_CREATE_ERROR_MESSAGE)

    result = InviteResult(
        code=invite['code'],
        expiry_hours=invite_request.expiry_hours,
        max_uses=invite_request.max_uses,
    )
    logger.info("Invite created", correlation_id=correlation_id, guild_id=guild_id,
                channel_id=channel.get('id'), max_age=invite_request.max_age_seconds,
                max_uses=invite_request.max_uses)
    return Ok(format_invite_reply(result))
