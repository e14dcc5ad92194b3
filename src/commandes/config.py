"""
Configuration de l'application.

Toutes les valeurs proviennent des variables d'environnement,
avec des valeurs par défaut adaptées au développement local.
"""

from __future__ import annotations

import os


def get_db_uri() -> str:
    return os.environ.get("COMMANDES_DB_URI", "sqlite:///commandes.db")


def get_redis_host_and_port() -> dict:
    host = os.environ.get("REDIS_HOST", "localhost")
    port = int(os.environ.get("REDIS_PORT", 6379))
    return dict(host=host, port=port)


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO")


def get_publication_tentatives() -> int:
    """Nombre de tentatives de publication avant abandon."""
    return int(os.environ.get("PUBLICATION_TENTATIVES", 3))
