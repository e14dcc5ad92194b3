"""
Message bus de la prise de commandes.

handle() traite une command puis, dans une file locale à l'appel,
les événements que ses entités ont émis. Les commands remontent leurs
erreurs à l'appelant. Les handlers d'événements publient les
notifications : leurs erreurs sont journalisées puis ignorées, si bien
qu'une publication ratée n'annule jamais une commande enregistrée.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Union

from commandes.domain import commands, events
from commandes.service_layer import unit_of_work

logger = logging.getLogger(__name__)

Message = Union[commands.Command, events.Event]


class MessageBus:
    """
    Relie un Unit of Work et ses adaptateurs aux handlers.

    Sans état entre deux appels de handle() : un même bus peut traiter
    des commands successives, mais pas en parallèle (le Unit of Work
    SQLAlchemy porte sa session).
    """

    def __init__(
        self,
        uow: unit_of_work.AbstractUnitOfWork,
        event_handlers: dict[type[events.Event], list[Callable]],
        command_handlers: dict[type[commands.Command], Callable],
        dependencies: dict[str, Any] | None = None,
    ):
        self.uow = uow
        self.event_handlers = event_handlers
        self.command_handlers = command_handlers
        self.dependencies = dependencies or {}

    def handle(self, message: Message) -> list[Any]:
        """Retourne les résultats des command handlers, dans l'ordre."""
        queue: list[Message] = [message]
        results: list[Any] = []
        while queue:
            message = queue.pop(0)
            if isinstance(message, events.Event):
                self._handle_event(message, queue)
            elif isinstance(message, commands.Command):
                results.append(self._handle_command(message, queue))
            else:
                raise ValueError(f"Message de type inconnu : {type(message)}")
        return results

    def _handle_event(self, event: events.Event, queue: list[Message]) -> None:
        for handler in self.event_handlers.get(type(event), []):
            try:
                logger.debug("Traitement de l'event %s avec %s", event, handler.__name__)
                self._call_handler(handler, event)
                queue.extend(self.uow.collect_new_events())
            except Exception:
                logger.exception("Erreur lors du traitement de l'event %s", event)

    def _handle_command(self, command: commands.Command, queue: list[Message]) -> Any:
        logger.debug("Traitement de la command %s", command)
        handler = self.command_handlers.get(type(command))
        if handler is None:
            raise ValueError(f"Aucun handler pour la command {type(command)}")
        result = self._call_handler(handler, command)
        queue.extend(self.uow.collect_new_events())
        return result

    def _call_handler(self, handler: Callable, message: Message) -> Any:
        """Injecte `uow`, `notifications` ou `verrous` selon les paramètres du handler."""
        noms = list(inspect.signature(handler).parameters)[1:]
        kwargs: dict[str, Any] = {}
        for name in noms:
            if name == "uow":
                kwargs[name] = self.uow
            elif name in self.dependencies:
                kwargs[name] = self.dependencies[name]
        return handler(message, **kwargs)
