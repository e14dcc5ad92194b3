"""
Pattern Unit of Work.

Le Unit of Work (UoW) gère la notion de transaction.
Il coordonne l'écriture en base de données et la collecte
des événements émis par les entités au cours de la transaction.

Le UoW agit comme un context manager :
    with uow:
        # ... opérations sur les repositories ...
        uow.commit()

Les erreurs de la couche de persistance sont traduites en
ErreurPersistance (ou ConflitDeVersion pour une écriture périmée),
après rollback.
"""

from __future__ import annotations

import abc
import itertools

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from commandes import config
from commandes.adapters import repository


class ErreurPersistance(Exception):
    """Levée quand une opération du magasin d'entités échoue."""
    pass


class ConflitDeVersion(ErreurPersistance):
    """Levée quand une entité a été modifiée entre sa lecture et son écriture."""
    pass


DEFAULT_SESSION_FACTORY = sessionmaker(
    bind=create_engine(
        config.get_db_uri(),
        isolation_level="SERIALIZABLE",
    )
)


class AbstractUnitOfWork(abc.ABC):
    """
    Interface abstraite du Unit of Work.

    Fournit les repositories `clients`, `produits` et `commandes`
    et gère commit/rollback. Le rollback est automatique si commit()
    n'est pas appelé (grâce au __exit__ du context manager).
    """

    clients: repository.AbstractRepository
    produits: repository.AbstractRepository
    commandes: repository.AbstractRepository

    def __enter__(self) -> AbstractUnitOfWork:
        return self

    def __exit__(self, *args: object) -> None:
        self.rollback()

    def commit(self) -> None:
        self._commit()

    def collect_new_events(self):
        """
        Collecte tous les événements émis par les entités vues
        pendant cette transaction.

        Parcourt les commandes puis les produits trackés par les repositories
        (via `seen`) et vide leur liste d'événements pour les passer
        au message bus.
        """
        for entité in itertools.chain(self.commandes.seen, self.produits.seen):
            while entité.événements:
                yield entité.événements.pop(0)

    @abc.abstractmethod
    def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    Implémentation concrète du UoW avec SQLAlchemy.

    Crée une session à l'entrée du context manager,
    la ferme à la sortie. Rollback automatique si pas de commit.
    Plusieurs commits successifs sont possibles dans un même bloc.
    """

    def __init__(self, session_factory: sessionmaker = DEFAULT_SESSION_FACTORY):
        self.session_factory = session_factory

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        self.session: Session = self.session_factory()
        self.clients = repository.clients(self.session)
        self.produits = repository.produits(self.session)
        self.commandes = repository.commandes(self.session)
        return super().__enter__()

    def __exit__(self, *args: object) -> None:
        super().__exit__(*args)
        self.session.close()

    def _commit(self) -> None:
        try:
            self.session.commit()
        except StaleDataError as e:
            self.session.rollback()
            raise ConflitDeVersion(str(e)) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise ErreurPersistance(str(e)) from e

    def rollback(self) -> None:
        self.session.rollback()
