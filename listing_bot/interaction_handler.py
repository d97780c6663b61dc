"""Dispatch of verified Discord interactions."""
from typing import Tuple

from .command_handlers import CommandContext
from .command_registry import CommandRegistry, registry as default_registry
from .interactions import Interaction, InteractionType
from .observability import get_logger
from .responses import SoftFail, message, pong, render

logger = get_logger('interactions')

UNSUPPORTED_TYPE_MESSAGE = 'This interaction type is not supported.'
COMMAND_ERROR_MESSAGE = 'Something went wrong while running this command. Please try again later.'


class InteractionHandler:
    """Routes a parsed interaction to the ping reply or a command handler."""

    def __init__(self, context: CommandContext, registry: CommandRegistry = None):
        self.context = context
        self.registry = registry or default_registry

    def unknown_command_message(self) -> str:
        available = ', '.join(f'/{name}' for name in self.registry.names)
        return f'Unknown command. Available commands: {available}'

    def handle_application_command(self, interaction: Interaction, correlation_id: str = None) -> dict:
        """Handle application command (type 2)."""
        handler = self.registry.get(interaction.command_name)
        if handler is None:
            logger.info("Unknown command", correlation_id=correlation_id,
                        command_name=interaction.command_name)
            return message(self.unknown_command_message())

        try:
            result = handler(self.context, interaction, correlation_id=correlation_id)
        except Exception as e:
            logger.error("Command handler raised", error=e, correlation_id=correlation_id,
                         command_name=interaction.command_name)
            result = SoftFail(COMMAND_ERROR_MESSAGE)

        logger.info(
            "Command handled",
            correlation_id=correlation_id,
            command_name=interaction.command_name,
            guild_id=interaction.guild_id,
            outcome='ok' if not isinstance(result, SoftFail) else 'soft_fail'
        )
        return render(result)

    def process(self, payload: dict, correlation_id: str = None) -> Tuple[dict, int]:
        """Process a verified interaction payload.

        Returns:
            Tuple of (response_dict, status_code). The status is always 200:
            unknown commands and unsupported types get an in-payload reply.
        """
        interaction = Interaction.from_payload(payload)

        if interaction.type == InteractionType.PING:
            return pong(), 200

        if interaction.type == InteractionType.APPLICATION_COMMAND:
            return self.handle_application_command(interaction, correlation_id=correlation_id), 200

        logger.info("Unsupported interaction type", correlation_id=correlation_id,
                    interaction_type=interaction.type)
        return message(UNSUPPORTED_TYPE_MESSAGE), 200
