"""Application configuration and slash command definitions."""
import os
from typing import Mapping, Optional

DISCORD_API_BASE_URL = "https://discord.com/api/v10"


def _as_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class Config:
    """Runtime configuration, read once at cold start."""

    def __init__(
        self,
        discord_public_key: str = None,
        discord_bot_token: str = None,
        discord_application_id: str = None,
        discord_api_base_url: str = DISCORD_API_BASE_URL,
        auto_register_commands: bool = True,
        supabase_url: str = None,
        supabase_service_role_key: str = None,
        servers_table: str = 'servers',
        http_timeout: float = 5.0,
        environment: str = 'production',
    ):
        self.discord_public_key = discord_public_key
        self.discord_bot_token = discord_bot_token
        self.discord_application_id = discord_application_id
        self.discord_api_base_url = discord_api_base_url.rstrip('/')
        self.auto_register_commands = auto_register_commands
        self.supabase_url = supabase_url.rstrip('/') if supabase_url else None
        self.supabase_service_role_key = supabase_service_role_key
        self.servers_table = servers_table
        self.http_timeout = http_timeout
        self.environment = environment

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = None) -> 'Config':
        """Build a Config from environment variables (or any mapping)."""
        env = os.environ if environ is None else environ
        try:
            http_timeout = float(env.get('HTTP_TIMEOUT_SECONDS', '5'))
        except ValueError:
            http_timeout = 5.0
        return cls(
            discord_public_key=env.get('DISCORD_PUBLIC_KEY') or None,
            discord_bot_token=env.get('DISCORD_BOT_TOKEN') or None,
            discord_application_id=env.get('DISCORD_APPLICATION_ID') or None,
            discord_api_base_url=env.get('DISCORD_API_BASE_URL') or DISCORD_API_BASE_URL,
            auto_register_commands=_as_bool(env.get('AUTO_REGISTER_COMMANDS'), True),
            supabase_url=env.get('SUPABASE_URL') or None,
            supabase_service_role_key=env.get('SUPABASE_SERVICE_ROLE_KEY') or None,
            servers_table=env.get('SERVERS_TABLE') or 'servers',
            http_timeout=http_timeout,
            environment=env.get('ENVIRONMENT') or 'production',
        )

    @property
    def discord_configured(self) -> bool:
        return bool(self.discord_bot_token and self.discord_application_id)

    @property
    def store_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)


# Discord option type codes
OPTION_TYPE_INTEGER = 4

# Discord caps invites at max_age 604800 s (7 days) and max_uses 100
MAX_INVITE_EXPIRY_HOURS = 168
MAX_INVITE_USES = 100

# Slash commands published by the registrar
COMMANDS = [
    {
        "name": "bump",
        "description": "Bump this server to the top of the listing",
        "type": 1
    },
    {
        "name": "invite",
        "description": "Create an invite link for this server",
        "type": 1,
        "options": [
            {
                "name": "expiry",
                "description": "Hours until the invite expires (default 24, 0 = never)",
                "type": OPTION_TYPE_INTEGER,
                "required": False,
                "min_value": 0,
                "max_value": MAX_INVITE_EXPIRY_HOURS
            },
            {
                "name": "uses",
                "description": "Maximum number of uses (default 0 = unlimited)",
                "type": OPTION_TYPE_INTEGER,
                "required": False,
                "min_value": 0,
                "max_value": MAX_INVITE_USES
            }
        ]
    }
]
