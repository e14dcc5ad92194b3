"""
Configuration partagée pour les tests.

Le mapping ORM est démarré une seule fois pour toute la session de tests.
Cela permet aux tests d'intégration et e2e d'utiliser SQLAlchemy
sans interférer avec les tests unitaires.
"""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from commandes.adapters import orm
from commandes.domain import model


@pytest.fixture(scope="session", autouse=True)
def mappers():
    """Démarre le mapping ORM une fois pour toute la session."""
    orm.start_mappers()


@pytest.fixture
def sqlite_session_factory(tmp_path):
    """Base SQLite sur fichier, vide, avec les tables créées."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'commandes.db'}",
        connect_args={"check_same_thread": False},
    )
    orm.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def catalogue(sqlite_session_factory):
    """Insère le client C1 (Jane Doe) et le produit P1 (19.99, stock 10)."""
    session = sqlite_session_factory()
    session.add(model.Client("C1", "Jane", "Doe"))
    session.add(model.Produit("P1", "Lampe de bureau", Decimal("19.99"), 10))
    session.commit()
    session.close()
    return sqlite_session_factory
