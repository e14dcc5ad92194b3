"""
Events du domaine.

Les events représentent des faits qui se sont produits dans le système.
Ils sont immuables et nommés au passé (quelque chose s'est passé).
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


class Event:
    """Classe de base pour tous les events du domaine."""
    pass


@dataclass(frozen=True)
class CommandeCréée(Event):
    """Une Commande a été enregistrée."""

    id_commande: str
    id_client: str
    nom_client: str
    nom_produit: str
    quantité: int
    prix_total: Decimal
    date_commande: datetime
    statut: str


@dataclass(frozen=True)
class StockModifié(Event):
    """Le stock d'un Produit a été décrémenté par une commande."""

    id_produit: str
    nom_produit: str
    stock_précédent: int
    nouveau_stock: int
    modifié_par: str
    date_modification: datetime


@dataclass(frozen=True)
class StatutCommandeModifié(Event):
    """Le statut d'une Commande a été remplacé."""

    id_commande: str
    id_client: str
    nom_client: str
    nom_produit: str
    statut_précédent: str
    nouveau_statut: str
    date_modification: datetime
    modifié_par: str
