"""Flask app serving the same endpoints, for local runs and tests."""
import os

from flask import Flask, request

from .correlation import with_correlation
from .health import handle_health
from .main import ListingBot, cold_start
from .observability import get_logger
from .register_commands import handle_register_request

logger = get_logger('routes')


def register_routes(app: Flask, bot: ListingBot):
    """Register all Flask routes."""

    @app.route("/health", methods=['GET', 'OPTIONS'])
    def health():
        return with_correlation(logger)(handle_health)(request, bot.config)

    @app.route("/discord/interactions", methods=['POST', 'OPTIONS'])
    def discord_interactions():
        return with_correlation(logger)(bot.endpoint.handle)(request)

    @app.route("/register-commands", methods=['POST'])
    def register_commands():
        return with_correlation(logger)(handle_register_request)(request, bot.discord)


def create_app(bot: ListingBot) -> Flask:
    """Create a Flask app around an already-built bot."""
    app = Flask(__name__)
    register_routes(app, bot)
    return app


def create_local_app() -> Flask:
    """Build the bot from the environment and serve it with Flask tracing on."""
    bot = cold_start()
    app = create_app(bot)
    if bot.tracing is not None:
        bot.tracing.instrument_flask(app)
    return app


if __name__ == '__main__':
    create_local_app().run(host='0.0.0.0', port=int(os.environ.get('PORT', '8080')))
