"""
Modèle de domaine pour la prise de commandes.

Une Commande est passée par un Client sur un Produit du catalogue.
Le Produit porte le stock disponible, décrémenté à chaque commande.
La Commande conserve une copie (snapshot) des informations du client
et du produit au moment de sa création.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from commandes.domain import events

STATUT_INITIAL = "Submitted"
ACTEUR_COMMANDE = "Order System"
ACTEUR_STATUT = "System"


class StockInsuffisant(Exception):
    """Levée quand la quantité demandée dépasse le stock disponible."""

    def __init__(self, id_produit: str, disponible: int, demandé: int):
        super().__init__(
            f"Stock insuffisant pour le produit {id_produit}. Disponible : {disponible}"
        )
        self.id_produit = id_produit
        self.disponible = disponible
        self.demandé = demandé


class QuantitéInvalide(Exception):
    """Levée quand la quantité commandée n'est pas un entier strictement positif."""
    pass


def maintenant() -> datetime:
    return datetime.now(timezone.utc)


class Client:
    """
    Entité Client, en lecture seule pour la prise de commandes.

    L'égalité est basée sur l'identifiant.
    """

    def __init__(self, id_client: str, prénom: str, nom: str):
        self.id_client = id_client
        self.prénom = prénom
        self.nom = nom

    def __repr__(self) -> str:
        return f"<Client {self.id_client}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Client):
            return NotImplemented
        return self.id_client == other.id_client

    def __hash__(self) -> int:
        return hash(self.id_client)

    @property
    def nom_complet(self) -> str:
        return f"{self.prénom} {self.nom}"


class Produit:
    """
    Entité Produit du catalogue.

    Le stock disponible ne doit jamais devenir négatif. Chaque
    modification du stock incrémente `numéro_version`, utilisé par
    la couche de persistance comme jeton de concurrence optimiste :
    une écriture basée sur une version périmée est rejetée.
    """

    def __init__(
        self,
        id_produit: str,
        nom: str,
        prix: Decimal,
        stock_disponible: int,
        numéro_version: int = 0,
    ):
        self.id_produit = id_produit
        self.nom = nom
        self.prix = prix
        self.stock_disponible = stock_disponible
        self.numéro_version = numéro_version
        self.événements: list[events.Event] = []

    def __repr__(self) -> str:
        return f"<Produit {self.id_produit}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Produit):
            return NotImplemented
        return self.id_produit == other.id_produit

    def __hash__(self) -> int:
        return hash(self.id_produit)

    def peut_fournir(self, quantité: int) -> bool:
        return quantité <= self.stock_disponible

    def retirer_stock(self, quantité: int) -> int:
        """
        Décrémente le stock et émet StockModifié.

        Retourne le stock avant modification.
        Lève StockInsuffisant si le stock ne couvre pas la quantité.
        """
        if not self.peut_fournir(quantité):
            raise StockInsuffisant(self.id_produit, self.stock_disponible, quantité)
        stock_précédent = self.stock_disponible
        self.stock_disponible -= quantité
        self.numéro_version += 1
        self.événements.append(
            events.StockModifié(
                id_produit=self.id_produit,
                nom_produit=self.nom,
                stock_précédent=stock_précédent,
                nouveau_stock=self.stock_disponible,
                modifié_par=ACTEUR_COMMANDE,
                date_modification=maintenant(),
            )
        )
        return stock_précédent


class Commande:
    """
    Entité Commande.

    Les champs nom_client, nom_produit et prix_unitaire sont des copies
    prises à la création : ils ne suivent pas les modifications
    ultérieures du Client ou du Produit. prix_total est calculé une
    seule fois, à la création.

    Le statut est un libellé libre, sans graphe de transitions.
    """

    def __init__(
        self,
        id_commande: str,
        id_client: str,
        nom_client: str,
        id_produit: str,
        nom_produit: str,
        date_commande: datetime,
        quantité: int,
        prix_unitaire: Decimal,
        prix_total: Decimal,
        statut: str = STATUT_INITIAL,
        justificatif_paiement: Optional[str] = None,
    ):
        self.id_commande = id_commande
        self.id_client = id_client
        self.nom_client = nom_client
        self.id_produit = id_produit
        self.nom_produit = nom_produit
        self.date_commande = date_commande
        self.quantité = quantité
        self.prix_unitaire = prix_unitaire
        self.prix_total = prix_total
        self.statut = statut
        self.justificatif_paiement = justificatif_paiement
        self.événements: list[events.Event] = []

    def __repr__(self) -> str:
        return f"<Commande {self.id_commande}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Commande):
            return NotImplemented
        return self.id_commande == other.id_commande

    def __hash__(self) -> int:
        return hash(self.id_commande)

    @classmethod
    def créer(
        cls,
        client: Client,
        produit: Produit,
        quantité: int,
        date_commande: Optional[datetime] = None,
        statut: Optional[str] = None,
    ) -> Commande:
        """
        Construit une nouvelle commande à partir du client et du produit.

        Vérifie la quantité et le stock, mais ne touche pas au stock :
        la décrémentation est une étape distincte du workflow.
        Émet CommandeCréée.
        """
        if quantité < 1:
            raise QuantitéInvalide(f"La quantité doit être au moins 1 (reçu : {quantité})")
        if not produit.peut_fournir(quantité):
            raise StockInsuffisant(produit.id_produit, produit.stock_disponible, quantité)

        commande = cls(
            id_commande=str(uuid.uuid4()),
            id_client=client.id_client,
            nom_client=client.nom_complet,
            id_produit=produit.id_produit,
            nom_produit=produit.nom,
            date_commande=date_commande or maintenant(),
            quantité=quantité,
            prix_unitaire=produit.prix,
            prix_total=produit.prix * quantité,
            statut=statut or STATUT_INITIAL,
        )
        commande.événements.append(
            events.CommandeCréée(
                id_commande=commande.id_commande,
                id_client=commande.id_client,
                nom_client=commande.nom_client,
                nom_produit=commande.nom_produit,
                quantité=commande.quantité,
                prix_total=commande.prix_total,
                date_commande=commande.date_commande,
                statut=commande.statut,
            )
        )
        return commande

    def changer_statut(self, nouveau_statut: str) -> None:
        """Remplace le statut sans condition et émet StatutCommandeModifié."""
        statut_précédent = self.statut
        self.statut = nouveau_statut
        self.événements.append(
            events.StatutCommandeModifié(
                id_commande=self.id_commande,
                id_client=self.id_client,
                nom_client=self.nom_client,
                nom_produit=self.nom_produit,
                statut_précédent=statut_précédent,
                nouveau_statut=nouveau_statut,
                date_modification=maintenant(),
                modifié_par=ACTEUR_STATUT,
            )
        )

    def remplacer(
        self,
        id_client: str,
        nom_client: str,
        id_produit: str,
        nom_produit: str,
        date_commande: datetime,
        quantité: int,
        prix_unitaire: Decimal,
        prix_total: Decimal,
        statut: str,
        justificatif_paiement: Optional[str] = None,
    ) -> None:
        """Écrase tous les champs (édition complète). Aucun contrôle de stock."""
        self.id_client = id_client
        self.nom_client = nom_client
        self.id_produit = id_produit
        self.nom_produit = nom_produit
        self.date_commande = date_commande
        self.quantité = quantité
        self.prix_unitaire = prix_unitaire
        self.prix_total = prix_total
        self.statut = statut
        self.justificatif_paiement = justificatif_paiement
