"""Shared fixtures: signing keys, in-memory collaborators and a wired-up bot."""
import json
from datetime import datetime, timezone

import pytest
from nacl.signing import SigningKey

from listing_bot.config import Config
from listing_bot.discord_service import DiscordAPIError
from listing_bot.main import ListingBot
from listing_bot.routes import create_app
from listing_bot.server_store import ServerStoreError

GUILD_ID = "123456789012345678"
TIMESTAMP = "1700000000"
LISTED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for ServerStore."""

    def __init__(self, rows=None):
        self.rows = {k: dict(v) for k, v in (rows or {}).items()}
        self.lookups = []
        self.writes = []
        self.fail_lookup = False
        self.fail_write = False

    def get_server(self, guild_id, correlation_id=None):
        self.lookups.append(guild_id)
        if self.fail_lookup:
            raise ServerStoreError("lookup failed: HTTP 503")
        row = self.rows.get(guild_id)
        return dict(row) if row is not None else None

    def touch_server(self, guild_id, when, correlation_id=None):
        if self.fail_write:
            raise ServerStoreError("update failed: HTTP 503")
        self.writes.append((guild_id, when))
        self.rows[guild_id]['updated_at'] = when


class FakeDiscord:
    """In-memory stand-in for DiscordService that records every call."""

    def __init__(self, channels=None, invite_code="AbCdEf", bot_token="bot-token",
                 application_id="987654321"):
        self.bot_token = bot_token
        self.application_id = application_id
        self.channels = channels if channels is not None else [
            {"id": "10", "type": 4, "name": "Text Channels"},
            {"id": "11", "type": 2, "name": "voice"},
            {"id": "12", "type": 0, "name": "welcome"},
            {"id": "13", "type": 0, "name": "general"},
        ]
        self.invite_code = invite_code
        self.channel_error = None
        self.invite_error = None
        self.register_error = None
        self.channel_calls = []
        self.invite_calls = []
        self.register_calls = []

    @property
    def has_token(self):
        return bool(self.bot_token)

    def list_guild_channels(self, guild_id):
        self.channel_calls.append(guild_id)
        if self.channel_error:
            raise self.channel_error
        return list(self.channels)

    def create_channel_invite(self, channel_id, max_age, max_uses):
        self.invite_calls.append({"channel_id": channel_id, "max_age": max_age, "max_uses": max_uses})
        if self.invite_error:
            raise self.invite_error
        return {"code": self.invite_code, "max_age": max_age, "max_uses": max_uses}

    def bulk_overwrite_commands(self, commands):
        self.register_calls.append(commands)
        if self.register_error:
            raise self.register_error
        return commands


def forbidden():
    return DiscordAPIError("HTTP 403", status_code=403)


def sign(signing_key, body: bytes, timestamp: str = TIMESTAMP) -> str:
    return signing_key.sign(timestamp.encode() + body).signature.hex()


def command_payload(name, options=None, guild_id=GUILD_ID, **extra):
    data = {"id": "1", "name": name, "type": 1}
    if options is not None:
        data["options"] = options
    payload = {"id": "interaction-1", "type": 2, "data": data, **extra}
    if guild_id is not None:
        payload["guild_id"] = guild_id
    return payload


@pytest.fixture
def signing_key():
    return SigningKey.generate()


@pytest.fixture
def public_key_hex(signing_key):
    return signing_key.verify_key.encode().hex()


@pytest.fixture
def store():
    return FakeStore({GUILD_ID: {"id": GUILD_ID, "updated_at": LISTED_AT}})


@pytest.fixture
def discord():
    return FakeDiscord()


@pytest.fixture
def config(public_key_hex):
    return Config(
        discord_public_key=public_key_hex,
        discord_bot_token="bot-token",
        discord_application_id="987654321",
        supabase_url="https://project.supabase.co",
        supabase_service_role_key="service-key",
        auto_register_commands=False,
    )


@pytest.fixture
def bot(config, store, discord):
    return ListingBot(config, store=store, discord=discord)


@pytest.fixture
def client(bot):
    app = create_app(bot)
    app.testing = True
    return app.test_client()


@pytest.fixture
def post_interaction(client, signing_key):
    """POST a correctly signed interaction; returns the Flask test response."""

    def _post(payload, headers=None):
        body = json.dumps(payload).encode()
        signed = {
            "X-Signature-Ed25519": sign(signing_key, body),
            "X-Signature-Timestamp": TIMESTAMP,
            "Content-Type": "application/json",
        }
        signed.update(headers or {})
        return client.post("/discord/interactions", data=body, headers=signed)

    return _post
