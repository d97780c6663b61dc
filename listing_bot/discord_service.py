"""Outbound calls to the Discord REST API."""
from typing import Dict, List, Optional

import requests

from .config import DISCORD_API_BASE_URL
from .observability import get_logger

logger = get_logger('discord-service')


class DiscordAPIError(Exception):
    """A Discord REST call failed (transport error or non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class DiscordService:
    """Bot-token authenticated client for the few endpoints this bot uses."""

    def __init__(self, bot_token: Optional[str], application_id: Optional[str] = None,
                 base_url: str = DISCORD_API_BASE_URL, session: requests.Session = None,
                 timeout: float = 5.0):
        self.bot_token = bot_token
        self.application_id = application_id
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        if bot_token:
            self.session.headers.update({
                'Authorization': f'Bot {bot_token}',
                'Content-Type': 'application/json',
            })

    @property
    def has_token(self) -> bool:
        return bool(self.bot_token)

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise DiscordAPIError(f"{method} {path} failed: {e}") from e

        if not response.ok:
            logger.warning(
                "Discord API call rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                response_text=response.text[:200]
            )
            raise DiscordAPIError(f"{method} {path} returned HTTP {response.status_code}",
                                  status_code=response.status_code)
        return response

    def list_guild_channels(self, guild_id: str) -> List[Dict]:
        """GET /guilds/{guild_id}/channels, in API return order."""
        response = self._request('GET', f"/guilds/{guild_id}/channels")
        try:
            channels = response.json()
        except ValueError as e:
            raise DiscordAPIError("channel list was not valid JSON") from e
        if not isinstance(channels, list):
            raise DiscordAPIError("channel list was not a JSON array")
        return channels

    def create_channel_invite(self, channel_id: str, max_age: int, max_uses: int) -> Dict:
        """POST /channels/{channel_id}/invites and return the invite object."""
        payload = {
            'max_age': max_age,
            'max_uses': max_uses,
            'temporary': False,
        }
        response = self._request('POST', f"/channels/{channel_id}/invites", json=payload)
        try:
            invite = response.json()
        except ValueError as e:
            raise DiscordAPIError("invite response was not valid JSON") from e
        if not isinstance(invite, dict) or not invite.get('code'):
            raise DiscordAPIError("invite response had no code")
        return invite

    def bulk_overwrite_commands(self, commands: List[Dict]) -> List[Dict]:
        """PUT /applications/{id}/commands, replacing the whole global command set."""
        if not self.application_id:
            raise DiscordAPIError("application id not configured")
        response = self._request('PUT', f"/applications/{self.application_id}/commands", json=commands)
        try:
            return response.json()
        except ValueError:
            return []
