"""Publishing the slash command set to Discord."""
import json
from typing import Dict, List

from .config import COMMANDS
from .discord_service import DiscordService, DiscordAPIError
from .observability import get_logger

logger = get_logger('registrar')


def register_all_commands(discord: DiscordService, commands: List[Dict] = None,
                          correlation_id: str = None) -> bool:
    """Replace the application's global commands with ``commands``.

    Best effort: a missing token or application id is skipped with a
    warning, and API failures are logged. Never raises.

    Returns:
        True if Discord accepted the command set
    """
    commands = COMMANDS if commands is None else commands

    if not discord.has_token or not discord.application_id:
        logger.warning(
            "Skipping command registration: DISCORD_BOT_TOKEN and DISCORD_APPLICATION_ID must be configured",
            correlation_id=correlation_id
        )
        return False

    try:
        registered = discord.bulk_overwrite_commands(commands)
    except DiscordAPIError as e:
        logger.error(
            "Command registration failed",
            correlation_id=correlation_id,
            status_code=e.status_code,
            detail=str(e)
        )
        return False

    logger.info(
        "Commands registered",
        correlation_id=correlation_id,
        commands=[c['name'] for c in commands],
        registered_count=len(registered)
    )
    return True


def handle_register_request(request, discord: DiscordService, commands: List[Dict] = None):
    """HTTP handler that triggers a registration on demand.

    Args:
        request: Flask/Functions Framework request object
        discord: Discord client used for the PUT

    Returns:
        tuple: (json_body, status_code, headers)
    """
    headers = {'Content-Type': 'application/json'}
    if request.method != 'POST':
        return json.dumps({'error': 'Method not allowed'}), 405, headers

    commands = COMMANDS if commands is None else commands
    if not discord.has_token or not discord.application_id:
        return json.dumps({
            'error': 'DISCORD_BOT_TOKEN and DISCORD_APPLICATION_ID must be configured'
        }), 503, headers

    correlation_id = getattr(request, 'correlation_id', None)
    ok = register_all_commands(discord, commands, correlation_id=correlation_id)
    body = {
        'status': 'success' if ok else 'error',
        'commands': [c['name'] for c in commands],
    }
    if ok:
        body['note'] = 'Commands may take a few minutes to appear in Discord'
    return json.dumps(body), 200 if ok else 502, headers
