"""Functions Framework entry points for the server listing bot.

Deploy targets:
    discord_interactions  - Discord Interactions endpoint URL
    register_commands     - manual re-registration of the slash commands
    health_check          - liveness/configuration probe
"""
import threading

from functions_framework import http
from flask import Request

from .command_handlers import CommandContext
from .config import Config
from .correlation import with_correlation
from .discord_service import DiscordService
from .endpoint import InteractionEndpoint
from .health import handle_health
from .interaction_handler import InteractionHandler
from .observability import get_logger, init_observability
from .register_commands import register_all_commands, handle_register_request
from .server_store import ServerStore
from .signature import SignatureVerifier

logger = get_logger()


class ListingBot:
    """Everything one process needs to serve interactions, built once."""

    def __init__(self, config: Config, store: ServerStore = None, discord: DiscordService = None):
        self.config = config
        self.tracing = None
        self.store = store
        self.discord = discord or DiscordService(
            config.discord_bot_token,
            config.discord_application_id,
            base_url=config.discord_api_base_url,
            timeout=config.http_timeout
        )
        if self.store is None and config.store_configured:
            self.store = ServerStore(
                config.supabase_url,
                config.supabase_service_role_key,
                table=config.servers_table,
                timeout=config.http_timeout
            )
        elif self.store is None:
            logger.warning("SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY not configured, /bump is disabled")

        context = CommandContext(store=self.store, discord=self.discord)
        self.endpoint = InteractionEndpoint(
            SignatureVerifier(config.discord_public_key),
            InteractionHandler(context)
        )

    def register_commands(self) -> bool:
        return register_all_commands(self.discord)


_bot = None
_bot_lock = threading.Lock()
_commands_registered = False


def get_bot() -> ListingBot:
    """Return the process-wide bot, building it once.

    Never registers commands: that belongs to cold_start(), which runs
    before the process serves any request.
    """
    global _bot
    if _bot is None:
        with _bot_lock:
            if _bot is None:
                config = Config.from_env()
                _, tracing = init_observability(environment=config.environment)
                bot = ListingBot(config)
                bot.tracing = tracing
                _bot = bot
    return _bot


def cold_start() -> ListingBot:
    """Build the bot and publish the command set once per process.

    Called at import of the deployed source file, so registration never
    runs inside a request.
    """
    global _commands_registered
    bot = get_bot()
    with _bot_lock:
        if bot.config.auto_register_commands and not _commands_registered:
            _commands_registered = True
            bot.register_commands()
    return bot


@http
@with_correlation(logger)
def discord_interactions(request: Request):
    """Discord Interactions webhook."""
    return get_bot().endpoint.handle(request)


@http
@with_correlation(logger)
def register_commands(request: Request):
    """Re-publish the slash command set (POST)."""
    return handle_register_request(request, get_bot().discord)


@http
@with_correlation(logger)
def health_check(request: Request):
    """Health check (GET/OPTIONS)."""
    return handle_health(request, get_bot().config)
