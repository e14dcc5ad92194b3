"""
Views (lecture) pour le pattern CQRS.

Les views sont des fonctions de lecture pure qui interrogent
directement la base de données, sans passer par le modèle de domaine
ni par le message bus. Elles ne modifient rien.
"""

from __future__ import annotations

from sqlalchemy import text

from commandes.adapters import orm
from commandes.service_layer import unit_of_work

_COLONNES_COMMANDE = (
    'row_key AS "orderId", customer_id AS "customerId", username AS "customerName",'
    ' product_id AS "productId", product_name AS "productName", order_date AS "orderDate",'
    ' quantity, unit_price AS "unitPrice", total_price AS "totalPrice", status,'
    ' payment_proof_file_name AS "paymentProofFileName"'
)


def cotation_produit(id_produit: str, uow: unit_of_work.AbstractUnitOfWork) -> dict | None:
    """
    Retourne le prix, le stock et le nom courants d'un produit,
    ou None si le produit n'existe pas.

    Sert à la pré-validation côté client avant de passer commande.
    """
    with uow:
        row = uow.session.execute(
            text(
                "SELECT price, stock_available, product_name FROM products"
                " WHERE partition_key = :partition AND row_key = :id_produit"
            ),
            dict(partition=orm.PARTITION_PRODUIT, id_produit=id_produit),
        ).first()
    if row is None:
        return None
    return {"price": float(row.price), "stock": row.stock_available, "productName": row.product_name}


def commandes(uow: unit_of_work.AbstractUnitOfWork) -> list[dict]:
    """Retourne toutes les commandes, les plus récentes d'abord."""
    with uow:
        results = uow.session.execute(
            text(
                f"SELECT {_COLONNES_COMMANDE} FROM orders"
                " WHERE partition_key = :partition ORDER BY order_date DESC"
            ),
            dict(partition=orm.PARTITION_COMMANDE),
        )
        return [_en_dict(r) for r in results]


def commande(id_commande: str, uow: unit_of_work.AbstractUnitOfWork) -> dict | None:
    """Retourne le détail d'une commande, ou None si elle n'existe pas."""
    with uow:
        row = uow.session.execute(
            text(
                f"SELECT {_COLONNES_COMMANDE} FROM orders"
                " WHERE partition_key = :partition AND row_key = :id_commande"
            ),
            dict(partition=orm.PARTITION_COMMANDE, id_commande=id_commande),
        ).first()
        return _en_dict(row) if row is not None else None


def _en_dict(row) -> dict:
    données = dict(row._mapping)
    for champ in ("unitPrice", "totalPrice"):
        données[champ] = float(données[champ])
    if données["orderDate"] is not None and not isinstance(données["orderDate"], str):
        données["orderDate"] = données["orderDate"].isoformat()
    return données
