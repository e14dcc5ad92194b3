"""
Assemblage du bus : Unit of Work SQLAlchemy, publication Redis et
verrous par produit, sauf si les tests en fournissent d'autres.
"""

from __future__ import annotations

from typing import Any

from commandes.adapters import notifications, orm
from commandes.domain import commands, events
from commandes.service_layer import handlers, messagebus, unit_of_work
from commandes.service_layer.verrous import VerrousProduits

# Partagés par tous les bus du processus
VERROUS_PRODUITS = VerrousProduits()


def bootstrap(
    start_orm: bool = True,
    uow: unit_of_work.AbstractUnitOfWork | None = None,
    notifications_adapter: notifications.AbstractNotifications | None = None,
    verrous: VerrousProduits | None = None,
    **extra_dependencies: Any,
) -> messagebus.MessageBus:
    """
    Sans `verrous`, le bus partage VERROUS_PRODUITS avec les autres bus
    du processus. Sans `uow`, un SqlAlchemyUnitOfWork neuf est créé.
    """
    if start_orm:
        orm.start_mappers()

    if uow is None:
        uow = unit_of_work.SqlAlchemyUnitOfWork()

    if notifications_adapter is None:
        notifications_adapter = notifications.RedisNotifications()

    dependencies: dict[str, Any] = {
        "notifications": notifications_adapter,
        "verrous": verrous or VERROUS_PRODUITS,
        **extra_dependencies,
    }

    return messagebus.MessageBus(
        uow=uow,
        event_handlers=EVENT_HANDLERS,
        command_handlers=COMMAND_HANDLERS,
        dependencies=dependencies,
    )


# --- Routage des messages vers les handlers ---

EVENT_HANDLERS: dict[type[events.Event], list] = {
    events.CommandeCréée: [handlers.publier_commande_créée],
    events.StockModifié: [handlers.publier_stock_modifié],
    events.StatutCommandeModifié: [handlers.publier_statut_modifié],
}

COMMAND_HANDLERS: dict[type[commands.Command], Any] = {
    commands.PasserCommande: handlers.passer_commande,
    commands.ModifierStatutCommande: handlers.modifier_statut_commande,
    commands.RemplacerCommande: handlers.remplacer_commande,
    commands.SupprimerCommande: handlers.supprimer_commande,
}
