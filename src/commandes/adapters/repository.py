"""
Pattern Repository, appliqué à un magasin d'entités clé/valeur.

Chaque repository expose une interface de type collection
(add, get, list, delete) sur un type d'entité, identifié dans le
magasin par sa partition. Les mises à jour ne passent pas par une
méthode dédiée : l'entité obtenue via get() est modifiée en place
et écrite au commit du Unit of Work.
"""

from __future__ import annotations

import abc
from typing import Any, Hashable

from sqlalchemy.orm import Session

from commandes.adapters import orm
from commandes.domain import model


class AbstractRepository(abc.ABC):
    """
    Interface abstraite du repository.

    Le pattern Template Method est utilisé : les méthodes publiques
    (add, get) gèrent le tracking via `seen`, puis délèguent
    aux méthodes abstraites préfixées _ que les sous-classes implémentent.
    """

    seen: set[Any]

    def __init__(self) -> None:
        # `seen` trace toutes les entités consultées pendant la transaction,
        # ce qui permet au Unit of Work de collecter leurs événements.
        self.seen: set[Any] = set()

    def add(self, entité: Hashable) -> None:
        """Ajoute une entité au repository et la marque comme vue."""
        self._add(entité)
        self.seen.add(entité)

    def get(self, identifiant: str) -> Any | None:
        """Récupère une entité par son identifiant et la marque comme vue."""
        entité = self._get(identifiant)
        if entité is not None:
            self.seen.add(entité)
        return entité

    def list(self) -> list[Any]:
        return self._list()

    def delete(self, entité: Hashable) -> None:
        self._delete(entité)
        self.seen.discard(entité)

    @abc.abstractmethod
    def _add(self, entité: Any) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def _get(self, identifiant: str) -> Any | None:
        raise NotImplementedError

    @abc.abstractmethod
    def _list(self) -> list[Any]:
        raise NotImplementedError

    @abc.abstractmethod
    def _delete(self, entité: Any) -> None:
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository):
    """
    Implémentation concrète du repository avec SQLAlchemy.

    Une instance est liée à une classe du domaine et à sa partition ;
    `attribut_id` est l'attribut du domaine qui porte la row_key.
    """

    def __init__(self, session: Session, classe: type, partition: str, attribut_id: str):
        super().__init__()
        self.session = session
        self.classe = classe
        self.partition = partition
        self.attribut_id = attribut_id

    def _query(self):
        return self.session.query(self.classe).filter_by(_partition=self.partition)

    def _add(self, entité: Any) -> None:
        self.session.add(entité)

    def _get(self, identifiant: str) -> Any | None:
        return self._query().filter_by(**{self.attribut_id: identifiant}).first()

    def _list(self) -> list[Any]:
        return self._query().all()

    def _delete(self, entité: Any) -> None:
        self.session.delete(entité)


def clients(session: Session) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(session, model.Client, orm.PARTITION_CLIENT, "id_client")


def produits(session: Session) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(session, model.Produit, orm.PARTITION_PRODUIT, "id_produit")


def commandes(session: Session) -> SqlAlchemyRepository:
    return SqlAlchemyRepository(session, model.Commande, orm.PARTITION_COMMANDE, "id_commande")
