"""HTTP layer of the Discord interactions webhook."""
import json

from .interaction_handler import InteractionHandler
from .observability import get_logger, traced_function
from .responses import message
from .signature import SignatureVerifier

logger = get_logger('endpoint')

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
    'Access-Control-Allow-Headers': (
        'authorization, x-client-info, apikey, content-type, '
        'x-signature-ed25519, x-signature-timestamp'
    ),
    'Access-Control-Max-Age': '3600',
}

INTERNAL_ERROR_MESSAGE = 'An unexpected error occurred. Please try again later.'


def _json(payload: dict, status: int):
    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'application/json'
    return json.dumps(payload), status, headers


def _text(body: str, status: int):
    headers = dict(CORS_HEADERS)
    headers['Content-Type'] = 'text/plain; charset=utf-8'
    return body, status, headers


class InteractionEndpoint:
    """Verifies, parses and dispatches one webhook request.

    Every path returns a ``(body, status, headers)`` tuple; nothing raised
    below this point turns into a 5xx.
    """

    def __init__(self, verifier: SignatureVerifier, handler: InteractionHandler):
        self.verifier = verifier
        self.handler = handler

    @traced_function('discord_interaction')
    def handle(self, request):
        correlation_id = getattr(request, 'correlation_id', None)

        if request.method == 'OPTIONS':
            return '', 204, dict(CORS_HEADERS)

        if request.method != 'POST':
            return _json({'error': 'Method not allowed'}, 405)

        signature = request.headers.get('X-Signature-Ed25519')
        timestamp = request.headers.get('X-Signature-Timestamp')
        if not signature or not timestamp:
            logger.warning("Missing Discord signature headers", correlation_id=correlation_id)
            return _text('invalid request signature', 401)

        # Verify the bytes exactly as received, before any parsing
        body = request.get_data(cache=True)
        if not self.verifier.verify(signature, timestamp, body):
            logger.warning("Invalid Discord signature", correlation_id=correlation_id)
            return _text('invalid request signature', 401)

        try:
            payload = json.loads(body)
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.warning("Signed body is not a JSON object", correlation_id=correlation_id)
            return _text('Bad Request - Invalid JSON', 400)

        logger.info(
            "Processing Discord interaction",
            correlation_id=correlation_id,
            interaction_type=payload.get('type'),
            interaction_id=payload.get('id')
        )

        try:
            response, status_code = self.handler.process(payload, correlation_id=correlation_id)
        except Exception as e:
            logger.error("Critical error in discord_interactions", error=e, correlation_id=correlation_id)
            response, status_code = message(INTERNAL_ERROR_MESSAGE), 200

        return _json(response, status_code)
