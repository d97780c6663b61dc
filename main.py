"""Functions Framework source file: re-exports the deployable entry points."""
from listing_bot.main import cold_start, discord_interactions, register_commands, health_check  # noqa: F401

# Build the bot and register slash commands before the first request arrives
cold_start()
