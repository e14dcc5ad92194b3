"""
Point d'entrée Flask.

L'API Flask est un thin adapter : elle convertit les requêtes HTTP
en commands, les envoie au message bus, et convertit les résultats
en réponses HTTP. Un corps de requête mal formé est refusé (400)
avant d'atteindre le bus.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal

from flask import Flask, g, jsonify, request

from commandes import config
from commandes.domain import commands, model
from commandes.service_layer import bootstrap, handlers, messagebus, unit_of_work
from commandes.views import views

logging.basicConfig(level=config.get_log_level())

app = Flask(__name__)

ERREURS_DE_REQUÊTE = (KeyError, TypeError, ValueError)


def créer_bus() -> messagebus.MessageBus:
    return bootstrap.bootstrap()


def get_bus() -> messagebus.MessageBus:
    """Un bus par requête : le Unit of Work SQLAlchemy n'est pas partageable entre threads."""
    if "bus" not in g:
        g.bus = créer_bus()
    return g.bus


def _entier(data: dict, champ: str) -> int:
    valeur = data[champ]
    # bool est une sous-classe d'int
    if isinstance(valeur, bool) or not isinstance(valeur, int):
        raise ValueError(f"{champ} doit être un entier (reçu : {valeur!r})")
    return valeur


def _prix(data: dict, champ: str) -> Decimal:
    valeur = data[champ]
    if isinstance(valeur, bool) or not isinstance(valeur, (int, float)):
        raise ValueError(f"{champ} doit être un nombre (reçu : {valeur!r})")
    return Decimal(str(valeur))


def _texte(data: dict, champ: str) -> str:
    valeur = data[champ]
    if not isinstance(valeur, str):
        raise ValueError(f"{champ} doit être une chaîne (reçu : {valeur!r})")
    return valeur


def _corps() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("corps JSON attendu")
    return data


def _date(valeur: str | None) -> datetime | None:
    if valeur is None:
        return None
    return datetime.fromisoformat(valeur)


def _motif(e: Exception) -> str:
    if isinstance(e, KeyError):
        return f"champ manquant : {e.args[0]}"
    return str(e)


def _réponse(résultat: handlers.Résultat):
    return jsonify({"success": résultat.succès, "message": résultat.message})


@app.route("/orders", methods=["POST"])
def place_order_endpoint():
    """
    POST /orders
    Body JSON : { customerId, productId, quantity, orderDate?, status? }

    Passe une commande. Retourne l'identifiant de la commande.
    """
    try:
        data = _corps()
        cmd = commands.PasserCommande(
            id_client=_texte(data, "customerId"),
            id_produit=_texte(data, "productId"),
            quantité=_entier(data, "quantity"),
            date_commande=_date(data.get("orderDate")),
            statut=data.get("status"),
        )
    except ERREURS_DE_REQUÊTE as e:
        return jsonify({"message": f"Requête invalide, {_motif(e)}"}), 400

    try:
        results = get_bus().handle(cmd)
        id_commande = results.pop(0)
    except (model.QuantitéInvalide, model.StockInsuffisant) as e:
        return jsonify({"message": str(e)}), 400
    except handlers.Introuvable as e:
        return jsonify({"message": str(e)}), 404
    except unit_of_work.ConflitDeVersion as e:
        return jsonify({"message": f"Stock modifié en parallèle, commande non enregistrée : {e}"}), 409
    except unit_of_work.ErreurPersistance as e:
        return jsonify({"message": f"Erreur lors de la création de la commande : {e}"}), 500

    return jsonify({"orderId": id_commande}), 201


@app.route("/orders", methods=["GET"])
def orders_view_endpoint():
    return jsonify(views.commandes(get_bus().uow)), 200


@app.route("/orders/<order_id>", methods=["GET"])
def order_view_endpoint(order_id: str):
    result = views.commande(order_id, get_bus().uow)
    if result is None:
        return "not found", 404
    return jsonify(result), 200


@app.route("/orders/<order_id>", methods=["PUT"])
def replace_order_endpoint(order_id: str):
    """
    PUT /orders/<order_id>

    Remplace tous les champs de la commande.
    """
    try:
        data = _corps()
        cmd = commands.RemplacerCommande(
            id_commande=order_id,
            id_client=_texte(data, "customerId"),
            nom_client=_texte(data, "customerName"),
            id_produit=_texte(data, "productId"),
            nom_produit=_texte(data, "productName"),
            date_commande=_date(data["orderDate"]),
            quantité=_entier(data, "quantity"),
            prix_unitaire=_prix(data, "unitPrice"),
            prix_total=_prix(data, "totalPrice"),
            statut=_texte(data, "status"),
            justificatif_paiement=data.get("paymentProofFileName"),
        )
    except ERREURS_DE_REQUÊTE as e:
        return jsonify({"success": False, "message": f"Requête invalide, {_motif(e)}"}), 400
    return _réponse(get_bus().handle(cmd).pop(0))


@app.route("/orders/<order_id>/status", methods=["POST"])
def update_order_status_endpoint(order_id: str):
    """
    POST /orders/<order_id>/status
    Body JSON : { status }
    """
    try:
        cmd = commands.ModifierStatutCommande(
            id_commande=order_id,
            nouveau_statut=_texte(_corps(), "status"),
        )
    except ERREURS_DE_REQUÊTE as e:
        return jsonify({"success": False, "message": f"Requête invalide, {_motif(e)}"}), 400
    return _réponse(get_bus().handle(cmd).pop(0))


@app.route("/orders/<order_id>", methods=["DELETE"])
def delete_order_endpoint(order_id: str):
    cmd = commands.SupprimerCommande(id_commande=order_id)
    return _réponse(get_bus().handle(cmd).pop(0))


@app.route("/products/<product_id>/price", methods=["GET"])
def product_price_endpoint(product_id: str):
    """
    GET /products/<product_id>/price

    Prix, stock et nom courants du produit (lecture CQRS).
    """
    result = views.cotation_produit(product_id, get_bus().uow)
    if result is None:
        return jsonify({"success": False, "message": "Produit introuvable"})
    return jsonify({"success": True, **result})
