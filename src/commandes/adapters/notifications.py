"""
Adapter pour la publication des notifications.

Ce module fournit une abstraction sur la publication de messages
vers des canaux nommés, consommés par d'autres systèmes, ainsi que
le format JSON de ces messages. Les noms de champs des messages
sont ceux attendus par les consommateurs existants et ne doivent
pas changer.
"""

from __future__ import annotations

import abc
import json
import logging
from datetime import datetime
from decimal import Decimal

import redis

from commandes import config
from commandes.domain import events

logger = logging.getLogger(__name__)

CANAL_COMMANDES = "order-notifications"
CANAL_STOCK = "stock-updates"


class ÉchecPublication(Exception):
    """Levée quand un message n'a pas pu être publié après toutes les tentatives."""
    pass


class AbstractNotifications(abc.ABC):
    """Interface abstraite pour la publication de notifications."""

    @abc.abstractmethod
    def publish(self, canal: str, message: str) -> None:
        raise NotImplementedError


class RedisNotifications(AbstractNotifications):
    """
    Implémentation concrète publiant sur Redis (PUBLISH).

    La publication est best-effort : chaque échec est loggé et la
    publication retentée jusqu'à `tentatives` fois, puis
    ÉchecPublication est levée.
    """

    def __init__(self, client: redis.Redis | None = None, tentatives: int | None = None):
        self.client = client or redis.Redis(**config.get_redis_host_and_port())
        self.tentatives = tentatives or config.get_publication_tentatives()

    def publish(self, canal: str, message: str) -> None:
        for tentative in range(1, self.tentatives + 1):
            try:
                self.client.publish(canal, message)
                logger.debug("Message publié sur %s : %s", canal, message)
                return
            except redis.RedisError as e:
                logger.warning(
                    "Échec de publication sur %s (tentative %d/%d) : %s",
                    canal, tentative, self.tentatives, e,
                )
        raise ÉchecPublication(f"Publication impossible sur {canal}")


# --- Format des messages ---


def _json_default(valeur: object) -> object:
    if isinstance(valeur, datetime):
        return valeur.isoformat()
    if isinstance(valeur, Decimal):
        return float(valeur)
    raise TypeError(f"Type non sérialisable : {type(valeur)}")


def _sérialiser(champs: dict) -> str:
    return json.dumps(champs, default=_json_default)


def message_commande_créée(event: events.CommandeCréée) -> str:
    return _sérialiser({
        "OrderId": event.id_commande,
        "CustomerId": event.id_client,
        "CustomerName": event.nom_client,
        "ProductName": event.nom_produit,
        "Quantity": event.quantité,
        "TotalPrice": event.prix_total,
        "OrderDate": event.date_commande,
        "Status": event.statut,
    })


def message_stock_modifié(event: events.StockModifié) -> str:
    return _sérialiser({
        "ProductId": event.id_produit,
        "ProductName": event.nom_produit,
        "PreviousStock": event.stock_précédent,
        "NewStock": event.nouveau_stock,
        "UpdatedBy": event.modifié_par,
        "UpdateDate": event.date_modification,
    })


def message_statut_modifié(event: events.StatutCommandeModifié) -> str:
    return _sérialiser({
        "OrderId": event.id_commande,
        "CustomerId": event.id_client,
        "CustomerName": event.nom_client,
        "ProductName": event.nom_produit,
        "PreviousStatus": event.statut_précédent,
        "NewStatus": event.nouveau_statut,
        "UpdatedDate": event.date_modification,
        "UpdatedBy": event.modifié_par,
    })
