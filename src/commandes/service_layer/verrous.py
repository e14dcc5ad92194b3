"""
Sections critiques par produit.

Deux commandes sur le même produit ne doivent pas vérifier puis
décrémenter le stock en parallèle : la seconde doit voir le stock
déjà décrémenté par la première. Les verrous sont partagés par tous
les message bus d'un même processus ; entre processus, c'est le
numéro de version du Produit qui protège l'écriture.
"""

from __future__ import annotations

import threading
from collections import defaultdict


class VerrousProduits:
    """Registre de verrous, un par identifiant de produit, créés à la demande."""

    def __init__(self) -> None:
        self._registre_lock = threading.Lock()
        self._verrous: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)

    def pour(self, id_produit: str) -> threading.Lock:
        with self._registre_lock:
            return self._verrous[id_produit]
