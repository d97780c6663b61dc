"""Read/touch access to server listings stored in Supabase (PostgREST API)."""
from datetime import datetime
from typing import Optional, Dict

import requests

from .observability import get_logger

logger = get_logger('server-store')


class ServerStoreError(Exception):
    """Raised when the listing database cannot be read or written."""


class ServerStore:
    """Listing rows keyed by Discord guild id.

    Only two operations are exposed: an existence lookup and a touch of
    ``updated_at``. Rows are never created or deleted here.
    """

    def __init__(self, base_url: str, service_key: str, table: str = 'servers',
                 session: requests.Session = None, timeout: float = 5.0):
        self.base_url = base_url.rstrip('/')
        self.table = table
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'apikey': service_key,
            'Authorization': f'Bearer {service_key}',
            'Content-Type': 'application/json',
        })

    @property
    def table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def get_server(self, guild_id: str, correlation_id: Optional[str] = None) -> Optional[Dict]:
        """Fetch the listing whose id equals the guild id.

        Args:
            guild_id: Discord guild snowflake
            correlation_id: Correlation ID for logging

        Returns:
            Row dict with ``id`` and ``updated_at``, or None if not listed

        Raises:
            ServerStoreError: on transport failure or a non-2xx reply
        """
        params = {
            'select': 'id,updated_at',
            'id': f'eq.{guild_id}',
            'limit': '1',
        }
        try:
            response = self.session.get(self.table_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ServerStoreError(f"lookup failed: {e}") from e

        if not response.ok:
            logger.warning(
                "Server lookup rejected",
                correlation_id=correlation_id,
                guild_id=guild_id,
                status_code=response.status_code,
                response_text=response.text[:200]
            )
            raise ServerStoreError(f"lookup failed: HTTP {response.status_code}")

        try:
            rows = response.json()
        except ValueError as e:
            raise ServerStoreError("lookup returned invalid JSON") from e

        if not rows:
            return None
        return rows[0]

    def touch_server(self, guild_id: str, when: datetime, correlation_id: Optional[str] = None) -> None:
        """Set ``updated_at`` on the listing for this guild.

        Raises:
            ServerStoreError: on transport failure or a non-2xx reply
        """
        try:
            response = self.session.patch(
                self.table_url,
                params={'id': f'eq.{guild_id}'},
                json={'updated_at': when.isoformat()},
                headers={'Prefer': 'return=minimal'},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ServerStoreError(f"update failed: {e}") from e

        if not response.ok:
            logger.warning(
                "Server update rejected",
                correlation_id=correlation_id,
                guild_id=guild_id,
                status_code=response.status_code,
                response_text=response.text[:200]
            )
            raise ServerStoreError(f"update failed: HTTP {response.status_code}")
