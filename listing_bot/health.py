"""Health check endpoint."""
import json
from datetime import datetime, timezone

from .config import Config
from .observability import SERVICE_NAME


def handle_health(request, config: Config):
    """Report liveness and which settings are present (never their values).

    Args:
        request: Flask/Functions Framework request object
        config: Active configuration

    Returns:
        tuple: (json_body, status_code, headers)
    """
    headers = {'Content-Type': 'application/json', 'Access-Control-Allow-Origin': '*'}

    if request.method not in ('GET', 'OPTIONS'):
        return json.dumps({'error': 'Method not allowed'}), 405, headers

    if request.method == 'OPTIONS':
        return '', 204, headers

    response_data = {
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'service': SERVICE_NAME,
        'environment': {
            'public_key_set': bool(config.discord_public_key),
            'bot_token_set': bool(config.discord_bot_token),
            'app_id_set': bool(config.discord_application_id),
            'store_configured': config.store_configured,
        }
    }
    return json.dumps(response_data), 200, headers
