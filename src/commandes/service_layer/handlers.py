"""
Handlers pour les commands et events.

Les handlers sont les fonctions qui traitent les commands et events
transitant par le message bus.

- Command handlers : exécutent une action (peuvent échouer)
- Event handlers : réagissent à un fait passé ; ici ils publient les
  notifications, et leurs échecs n'annulent jamais la command d'origine
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from commandes.adapters import notifications as messages
from commandes.domain import commands, events, model
from commandes.service_layer.unit_of_work import ConflitDeVersion, ErreurPersistance

if TYPE_CHECKING:
    from commandes.adapters.notifications import AbstractNotifications
    from commandes.service_layer.unit_of_work import AbstractUnitOfWork
    from commandes.service_layer.verrous import VerrousProduits

logger = logging.getLogger(__name__)

TENTATIVES_STOCK = 3


# --- Exceptions ---


class Introuvable(Exception):
    """Levée quand une entité référencée n'existe pas."""
    pass


class ClientIntrouvable(Introuvable):
    pass


class ProduitIntrouvable(Introuvable):
    pass


@dataclass(frozen=True)
class Résultat:
    """Issue d'une opération de modification : succès ou motif d'échec lisible."""

    succès: bool
    message: str


# --- Command Handlers ---


def passer_commande(
    cmd: commands.PasserCommande,
    uow: AbstractUnitOfWork,
    verrous: VerrousProduits,
) -> str:
    """
    Enregistre une commande et décrémente le stock du produit dans
    une seule transaction.

    Retourne l'identifiant de la commande créée.
    Lève QuantitéInvalide, ClientIntrouvable, ProduitIntrouvable ou
    StockInsuffisant sans aucun effet de bord ; ErreurPersistance si
    la transaction échoue, et rien n'est alors enregistré.

    Le verrou du produit sérialise les commandes d'un même processus.
    Entre processus, l'écriture du produit est conditionnée à son
    numéro de version : en cas de conflit, la transaction entière est
    annulée, le produit relu et la commande retentée.
    """
    if cmd.quantité < 1:
        raise model.QuantitéInvalide(f"La quantité doit être au moins 1 (reçu : {cmd.quantité})")

    with verrous.pour(cmd.id_produit):
        with uow:
            for tentative in range(1, TENTATIVES_STOCK + 1):
                client = uow.clients.get(cmd.id_client)
                if client is None:
                    raise ClientIntrouvable(f"Client inconnu : {cmd.id_client}")
                produit = uow.produits.get(cmd.id_produit)
                if produit is None:
                    raise ProduitIntrouvable(f"Produit inconnu : {cmd.id_produit}")

                commande = model.Commande.créer(
                    client, produit, cmd.quantité,
                    date_commande=cmd.date_commande, statut=cmd.statut,
                )
                id_commande = commande.id_commande
                produit.retirer_stock(cmd.quantité)
                uow.commandes.add(commande)
                try:
                    uow.commit()
                except ConflitDeVersion:
                    commande.événements.clear()
                    produit.événements.clear()
                    logger.warning(
                        "Conflit de version sur le produit %s (tentative %d/%d)",
                        cmd.id_produit, tentative, TENTATIVES_STOCK,
                    )
                    if tentative == TENTATIVES_STOCK:
                        raise
                except ErreurPersistance:
                    commande.événements.clear()
                    produit.événements.clear()
                    raise
                else:
                    break

    logger.info("Commande %s passée", id_commande)
    return id_commande


def modifier_statut_commande(
    cmd: commands.ModifierStatutCommande,
    uow: AbstractUnitOfWork,
) -> Résultat:
    """
    Remplace le statut d'une commande, quelle que soit sa valeur.

    Aucun graphe de transitions n'est imposé : toute chaîne est acceptée,
    y compris le statut actuel.
    """
    with uow:
        commande = uow.commandes.get(cmd.id_commande)
        if commande is None:
            return Résultat(False, f"Commande introuvable : {cmd.id_commande}")
        commande.changer_statut(cmd.nouveau_statut)
        try:
            uow.commit()
        except ErreurPersistance as e:
            commande.événements.clear()
            return Résultat(False, f"Erreur lors de la mise à jour du statut : {e}")

    logger.info("Statut de la commande %s : %s", cmd.id_commande, cmd.nouveau_statut)
    return Résultat(True, f"Statut de la commande mis à jour : {cmd.nouveau_statut}")


def remplacer_commande(
    cmd: commands.RemplacerCommande,
    uow: AbstractUnitOfWork,
) -> Résultat:
    """Écrase tous les champs d'une commande existante. Le stock n'est pas revérifié."""
    with uow:
        commande = uow.commandes.get(cmd.id_commande)
        if commande is None:
            return Résultat(False, f"Commande introuvable : {cmd.id_commande}")
        commande.remplacer(
            id_client=cmd.id_client,
            nom_client=cmd.nom_client,
            id_produit=cmd.id_produit,
            nom_produit=cmd.nom_produit,
            date_commande=cmd.date_commande,
            quantité=cmd.quantité,
            prix_unitaire=cmd.prix_unitaire,
            prix_total=cmd.prix_total,
            statut=cmd.statut,
            justificatif_paiement=cmd.justificatif_paiement,
        )
        try:
            uow.commit()
        except ErreurPersistance as e:
            return Résultat(False, f"Erreur lors de la mise à jour de la commande : {e}")
    return Résultat(True, "Commande mise à jour")


def supprimer_commande(
    cmd: commands.SupprimerCommande,
    uow: AbstractUnitOfWork,
) -> Résultat:
    """Supprime une commande. Une commande inexistante est un échec récupérable."""
    with uow:
        commande = uow.commandes.get(cmd.id_commande)
        if commande is None:
            return Résultat(False, f"Commande introuvable : {cmd.id_commande}")
        uow.commandes.delete(commande)
        try:
            uow.commit()
        except ErreurPersistance as e:
            return Résultat(False, f"Erreur lors de la suppression de la commande : {e}")
    return Résultat(True, "Commande supprimée")


# --- Event Handlers ---


def publier_commande_créée(
    event: events.CommandeCréée,
    notifications: AbstractNotifications,
) -> None:
    notifications.publish(messages.CANAL_COMMANDES, messages.message_commande_créée(event))


def publier_stock_modifié(
    event: events.StockModifié,
    notifications: AbstractNotifications,
) -> None:
    notifications.publish(messages.CANAL_STOCK, messages.message_stock_modifié(event))


def publier_statut_modifié(
    event: events.StatutCommandeModifié,
    notifications: AbstractNotifications,
) -> None:
    notifications.publish(messages.CANAL_COMMANDES, messages.message_statut_modifié(event))
