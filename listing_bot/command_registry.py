"""Registry mapping slash command names to their handlers."""
from typing import Callable, Dict, Optional


class CommandRegistry:
    """Name to handler lookup for Discord slash commands."""

    def __init__(self):
        self._handlers: Dict[str, Callable] = {}

    def register(self, command_name: str):
        """Decorator to register a command handler."""
        def decorator(func):
            self._handlers[command_name] = func
            return func
        return decorator

    def get(self, command_name: str) -> Optional[Callable]:
        """Exact-match lookup; None for unknown names."""
        if not command_name:
            return None
        return self._handlers.get(command_name)

    @property
    def names(self):
        return list(self._handlers)


# Populated by the decorators in command_handlers
registry = CommandRegistry()
