"""Tests for the /invite command and its option resolution."""
import pytest

from listing_bot.command_handlers import (
    GUILD_ONLY_MESSAGE,
    INVITE_CHANNELS_ERROR_MESSAGE,
    INVITE_CREATE_ERROR_MESSAGE,
    INVITE_NO_CHANNEL_MESSAGE,
    INVITE_UNAVAILABLE_MESSAGE,
    CommandContext,
    InviteRequest,
    InviteResult,
    format_invite_reply,
    handle_invite,
    resolve_options,
)
from listing_bot.discord_service import DiscordAPIError
from listing_bot.interactions import CommandOption, Interaction
from listing_bot.responses import Ok, SoftFail

from tests.conftest import GUILD_ID, FakeDiscord, command_payload, forbidden


def invite(discord, options=None, guild_id=GUILD_ID):
    payload = command_payload("invite", options=options, guild_id=guild_id)
    return handle_invite(CommandContext(discord=discord), Interaction.from_payload(payload))


class TestResolveOptions:

    def test_defaults(self):
        request = resolve_options([])
        assert request == InviteRequest(expiry_hours=24, max_uses=0)
        assert request.max_age_seconds == 86400

    def test_explicit_values(self):
        options = [CommandOption("uses", 4, 10), CommandOption("expiry", 4, 2)]
        assert resolve_options(options) == InviteRequest(expiry_hours=2, max_uses=10)

    def test_zero_expiry_is_kept(self):
        assert resolve_options([CommandOption("expiry", 4, 0)]).expiry_hours == 0

    @pytest.mark.parametrize("value", ["12", 1.5, True, None])
    def test_non_integer_values_fall_back(self, value):
        request = resolve_options([CommandOption("expiry", 4, value), CommandOption("uses", 4, value)])
        assert request == InviteRequest()

    def test_unknown_names_are_ignored(self):
        assert resolve_options([CommandOption("channel", 7, "123")]) == InviteRequest()

    @pytest.mark.parametrize("expiry, uses", [(-1, -5), (169, 101), (10_000, 1_000)])
    def test_out_of_range_values_fall_back(self, expiry, uses):
        options = [CommandOption("expiry", 4, expiry), CommandOption("uses", 4, uses)]
        assert resolve_options(options) == InviteRequest()

    def test_upper_bounds_are_accepted(self):
        options = [CommandOption("expiry", 4, 168), CommandOption("uses", 4, 100)]
        assert resolve_options(options) == InviteRequest(expiry_hours=168, max_uses=100)


class TestInviteReply:

    def test_reply_contains_url_and_echo(self):
        text = format_invite_reply(InviteResult(code="xyz", expiry_hours=24, max_uses=0))
        assert "https://discord.gg/xyz" in text
        assert "in 24 hours" in text
        assert "unlimited" in text

    def test_reply_for_permanent_limited_invite(self):
        text = format_invite_reply(InviteResult(code="xyz", expiry_hours=0, max_uses=5))
        assert "Expires: never" in text
        assert "Max uses: 5" in text


class TestHandleInvite:

    def test_no_options_uses_defaults(self, discord):
        result = invite(discord)

        assert isinstance(result, Ok)
        assert "https://discord.gg/AbCdEf" in result.content
        assert discord.channel_calls == [GUILD_ID]
        assert discord.invite_calls == [{"channel_id": "12", "max_age": 86400, "max_uses": 0}]

    def test_options_are_passed_through(self, discord):
        options = [
            {"name": "expiry", "type": 4, "value": 2},
            {"name": "uses", "type": 4, "value": 5},
        ]
        result = invite(discord, options=options)

        assert discord.invite_calls == [{"channel_id": "12", "max_age": 7200, "max_uses": 5}]
        assert "in 2 hours" in result.content
        assert "Max uses: 5" in result.content

    def test_first_text_channel_in_api_order(self):
        discord = FakeDiscord(channels=[
            {"id": "30", "type": 2},
            {"id": "31", "type": 0, "name": "rules"},
            {"id": "32", "type": 0, "name": "general"},
        ])
        invite(discord)
        assert discord.invite_calls[0]["channel_id"] == "31"

    def test_channel_list_failure_skips_invite_creation(self, discord):
        discord.channel_error = forbidden()
        assert invite(discord) == SoftFail(INVITE_CHANNELS_ERROR_MESSAGE)
        assert discord.invite_calls == []

    def test_transport_failure_on_channel_list(self, discord):
        discord.channel_error = DiscordAPIError("GET /guilds failed: timed out")
        assert invite(discord) == SoftFail(INVITE_CHANNELS_ERROR_MESSAGE)
        assert discord.invite_calls == []

    def test_text_channel_without_id_is_skipped(self):
        discord = FakeDiscord(channels=[
            {"type": 0, "name": "broken"},
            {"id": None, "type": 0},
            {"id": "51", "type": 0, "name": "general"},
        ])
        result = invite(discord)

        assert isinstance(result, Ok)
        assert discord.invite_calls[0]["channel_id"] == "51"

    def test_only_malformed_text_channels(self):
        discord = FakeDiscord(channels=[{"type": 0, "name": "broken"}])
        assert invite(discord) == SoftFail(INVITE_NO_CHANNEL_MESSAGE)
        assert discord.invite_calls == []

    def test_no_text_channel(self):
        discord = FakeDiscord(channels=[{"id": "40", "type": 2}, {"id": "41", "type": 4}])
        assert invite(discord) == SoftFail(INVITE_NO_CHANNEL_MESSAGE)
        assert discord.invite_calls == []

    def test_empty_guild(self):
        discord = FakeDiscord(channels=[])
        assert invite(discord) == SoftFail(INVITE_NO_CHANNEL_MESSAGE)
        assert discord.invite_calls == []

    def test_invite_creation_failure(self, discord):
        discord.invite_error = forbidden()
        assert invite(discord) == SoftFail(INVITE_CREATE_ERROR_MESSAGE)
        assert len(discord.invite_calls) == 1

    def test_outside_a_guild(self, discord):
        assert invite(discord, guild_id=None) == SoftFail(GUILD_ONLY_MESSAGE)
        assert discord.channel_calls == []

    def test_without_bot_token(self):
        discord = FakeDiscord(bot_token=None)
        assert invite(discord) == SoftFail(INVITE_UNAVAILABLE_MESSAGE)
        assert discord.channel_calls == []
