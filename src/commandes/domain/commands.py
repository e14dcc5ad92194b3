"""
Commands du domaine.

Les commands représentent des intentions : quelque chose que
le système doit faire. Contrairement aux events (faits passés),
les commands sont des demandes qui peuvent échouer.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


class Command:
    """Classe de base pour toutes les commands."""
    pass


@dataclass(frozen=True)
class PasserCommande(Command):
    """Demande de création d'une commande pour un client et un produit."""

    id_client: str
    id_produit: str
    quantité: int
    date_commande: Optional[datetime] = None
    statut: Optional[str] = None


@dataclass(frozen=True)
class ModifierStatutCommande(Command):
    """Demande de remplacement du statut d'une commande."""

    id_commande: str
    nouveau_statut: str


@dataclass(frozen=True)
class RemplacerCommande(Command):
    """Demande d'écrasement complet des champs d'une commande existante."""

    id_commande: str
    id_client: str
    nom_client: str
    id_produit: str
    nom_produit: str
    date_commande: datetime
    quantité: int
    prix_unitaire: Decimal
    prix_total: Decimal
    statut: str
    justificatif_paiement: Optional[str] = None


@dataclass(frozen=True)
class SupprimerCommande(Command):
    """Demande de suppression d'une commande."""

    id_commande: str
