"""In-process command/query dispatch.

Handlers are plain functions marked with ``@handles(CommandType)``. At startup
the registrar hands the bus the variant's handler module; the bus collects
every marked function in it.
"""
from __future__ import annotations

import importlib
from types import ModuleType
from typing import Any, Callable, Dict, Type, Union

from sqlalchemy.orm import Session

from .exceptions import HandlerNotFoundError
from .logging_config import get_logger

LOGGER = get_logger(__name__)

Handler = Callable[[Any, Session], Any]

_HANDLER_ATTR = "__handles__"


def handles(command_type: Type) -> Callable[[Handler], Handler]:
    """Mark a function as the handler for ``command_type``."""

    def decorator(func: Handler) -> Handler:
        setattr(func, _HANDLER_ATTR, command_type)
        return func

    return decorator


class CommandBus:
    """Routes command objects to their registered handler."""

    def __init__(self) -> None:
        self._handlers: Dict[Type, Handler] = {}

    def register(self, command_type: Type, handler: Handler) -> None:
        """Register a handler, replacing any existing one for the type."""
        self._handlers[command_type] = handler
        LOGGER.debug("Registered handler %s for %s", handler.__name__, command_type.__name__)

    def register_module(self, scope: Union[str, ModuleType]) -> int:
        """
        Register every ``@handles`` function found in a module.

        Args:
            scope: Module object or dotted module path.

        Returns:
            Number of handlers registered.
        """
        module = importlib.import_module(scope) if isinstance(scope, str) else scope
        count = 0
        for value in vars(module).values():
            command_type = getattr(value, _HANDLER_ATTR, None)
            if command_type is not None and callable(value):
                self.register(command_type, value)
                count += 1
        LOGGER.info("Registered %d handlers from %s", count, module.__name__)
        return count

    def is_registered(self, command_type: Type) -> bool:
        return command_type in self._handlers

    def dispatch(self, command: Any, session: Session) -> Any:
        """
        Run the handler for ``command`` inside the caller's session.

        Raises:
            HandlerNotFoundError: No handler is registered for the command type.
        """
        handler = self._handlers.get(type(command))
        if handler is None:
            raise HandlerNotFoundError(f"No handler registered for {type(command).__name__}")
        return handler(command, session)


__all__ = ["CommandBus", "handles"]
