"""
Tests end-to-end de l'API Flask.

Ces tests vérifient le flux complet :
HTTP request → Flask → Message Bus → Handlers → Repository → SQLite

On utilise le test client Flask avec une base SQLite sur fichier
temporaire ; seule la publication Redis est remplacée par un fake.
"""

import json

import pytest

from commandes.adapters import notifications
from commandes.entrypoints import flask_app
from commandes.service_layer import bootstrap, unit_of_work
from commandes.service_layer.verrous import VerrousProduits


class FakeNotifications(notifications.AbstractNotifications):
    def __init__(self):
        self.publiés = []

    def publish(self, canal: str, message: str) -> None:
        self.publiés.append({"canal": canal, "message": json.loads(message)})


@pytest.fixture
def fake_notifications():
    return FakeNotifications()


@pytest.fixture
def client(catalogue, fake_notifications, monkeypatch):
    """Client de test Flask ; chaque requête reçoit un bus sur la base SQLite de test."""
    verrous = VerrousProduits()

    def créer_bus():
        return bootstrap.bootstrap(
            start_orm=False,
            uow=unit_of_work.SqlAlchemyUnitOfWork(session_factory=catalogue),
            notifications_adapter=fake_notifications,
            verrous=verrous,
        )

    monkeypatch.setattr(flask_app, "créer_bus", créer_bus)
    flask_app.app.config["TESTING"] = True

    with flask_app.app.test_client() as client:
        yield client


def passer_commande(client, quantité=3, **extra):
    return client.post("/orders", json={
        "customerId": "C1",
        "productId": "P1",
        "quantity": quantité,
        **extra,
    })


class TestPlaceOrder:
    def test_passer_une_commande(self, client, fake_notifications):
        response = passer_commande(client, quantité=3)

        assert response.status_code == 201
        id_commande = response.get_json()["orderId"]

        détail = client.get(f"/orders/{id_commande}").get_json()
        assert détail["customerName"] == "Jane Doe"
        assert détail["productName"] == "Lampe de bureau"
        assert détail["unitPrice"] == 19.99
        assert détail["totalPrice"] == 59.97
        assert détail["status"] == "Submitted"

        prix = client.get("/products/P1/price").get_json()
        assert prix["stock"] == 7

        canaux = [p["canal"] for p in fake_notifications.publiés]
        assert canaux == ["order-notifications", "stock-updates"]
        assert fake_notifications.publiés[0]["message"]["OrderId"] == id_commande
        assert fake_notifications.publiés[1]["message"]["NewStock"] == 7

    def test_date_et_statut_fournis(self, client):
        response = passer_commande(
            client, quantité=1, orderDate="2024-05-02T10:30:00", status="Processing"
        )

        détail = client.get(f"/orders/{response.get_json()['orderId']}").get_json()
        assert détail["status"] == "Processing"
        assert détail["orderDate"].startswith("2024-05-02")

    def test_stock_insuffisant_retourne_400(self, client, fake_notifications):
        response = passer_commande(client, quantité=11)

        assert response.status_code == 400
        assert "Disponible : 10" in response.get_json()["message"]
        assert client.get("/orders").get_json() == []
        assert fake_notifications.publiés == []

    def test_quantité_nulle_retourne_400(self, client):
        response = passer_commande(client, quantité=0)
        assert response.status_code == 400

    def test_produit_inconnu_retourne_404(self, client):
        response = client.post("/orders", json={
            "customerId": "C1", "productId": "INEXISTANT", "quantity": 1,
        })

        assert response.status_code == 404
        assert "Produit inconnu" in response.get_json()["message"]

    def test_client_inconnu_retourne_404(self, client):
        response = client.post("/orders", json={
            "customerId": "INEXISTANT", "productId": "P1", "quantity": 1,
        })

        assert response.status_code == 404

    @pytest.mark.parametrize("quantité", [2.7, "abc", "3", True, None])
    def test_quantité_non_entière_retourne_400(self, client, fake_notifications, quantité):
        response = passer_commande(client, quantité=quantité)

        assert response.status_code == 400
        assert "quantity" in response.get_json()["message"]
        assert client.get("/orders").get_json() == []
        assert client.get("/products/P1/price").get_json()["stock"] == 10
        assert fake_notifications.publiés == []

    def test_quantité_manquante_retourne_400(self, client):
        response = client.post("/orders", json={"customerId": "C1", "productId": "P1"})

        assert response.status_code == 400
        assert "champ manquant : quantity" in response.get_json()["message"]
        assert client.get("/orders").get_json() == []

    def test_date_mal_formée_retourne_400(self, client):
        response = passer_commande(client, quantité=1, orderDate="hier")
        assert response.status_code == 400

    def test_corps_absent_retourne_400(self, client):
        response = client.post("/orders", data="pas du json", content_type="text/plain")

        assert response.status_code == 400
        assert "corps JSON attendu" in response.get_json()["message"]


class TestOrderViews:
    def test_lister_les_commandes(self, client):
        passer_commande(client, quantité=1)
        passer_commande(client, quantité=2)

        commandes = client.get("/orders").get_json()

        assert sorted(c["quantity"] for c in commandes) == [1, 2]

    def test_commande_inexistante_retourne_404(self, client):
        assert client.get("/orders/inexistante").status_code == 404


class TestUpdateStatus:
    def test_modifier_le_statut(self, client, fake_notifications):
        id_commande = passer_commande(client).get_json()["orderId"]
        fake_notifications.publiés.clear()

        response = client.post(f"/orders/{id_commande}/status", json={"status": "Shipped"})

        assert response.get_json()["success"] is True
        assert client.get(f"/orders/{id_commande}").get_json()["status"] == "Shipped"
        [publié] = fake_notifications.publiés
        assert publié["canal"] == "order-notifications"
        assert publié["message"]["PreviousStatus"] == "Submitted"
        assert publié["message"]["NewStatus"] == "Shipped"

    def test_commande_inconnue(self, client, fake_notifications):
        response = client.post("/orders/inconnue/status", json={"status": "Shipped"})

        assert response.get_json()["success"] is False
        assert fake_notifications.publiés == []


class TestReplaceAndDelete:
    def test_remplacer_une_commande(self, client):
        id_commande = passer_commande(client).get_json()["orderId"]

        response = client.put(f"/orders/{id_commande}", json={
            "customerId": "C1",
            "customerName": "Jane Doe",
            "productId": "P1",
            "productName": "Lampe de bureau",
            "orderDate": "2024-01-01T00:00:00",
            "quantity": 4,
            "unitPrice": 19.99,
            "totalPrice": 79.96,
            "status": "Completed",
            "paymentProofFileName": "preuve.pdf",
        })

        assert response.get_json()["success"] is True
        détail = client.get(f"/orders/{id_commande}").get_json()
        assert détail["quantity"] == 4
        assert détail["totalPrice"] == 79.96
        assert détail["paymentProofFileName"] == "preuve.pdf"

    def test_supprimer_une_commande(self, client):
        id_commande = passer_commande(client).get_json()["orderId"]

        response = client.delete(f"/orders/{id_commande}")

        assert response.get_json()["success"] is True
        assert client.get(f"/orders/{id_commande}").status_code == 404

    def test_supprimer_une_commande_inexistante(self, client):
        response = client.delete("/orders/inexistante")

        assert response.status_code == 200
        assert response.get_json()["success"] is False


class TestProductPrice:
    def test_cotation(self, client):
        response = client.get("/products/P1/price")

        assert response.get_json() == {
            "success": True,
            "price": 19.99,
            "stock": 10,
            "productName": "Lampe de bureau",
        }

    def test_produit_inconnu(self, client):
        data = client.get("/products/INEXISTANT/price").get_json()
        assert data["success"] is False


class TestRequêtesInvalides:
    def test_remplacement_avec_quantité_fractionnaire(self, client):
        id_commande = passer_commande(client).get_json()["orderId"]

        response = client.put(f"/orders/{id_commande}", json={
            "customerId": "C1",
            "customerName": "Jane Doe",
            "productId": "P1",
            "productName": "Lampe de bureau",
            "orderDate": "2024-01-01T00:00:00",
            "quantity": 2.5,
            "unitPrice": 19.99,
            "totalPrice": 49.98,
            "status": "Completed",
        })

        assert response.status_code == 400
        assert response.get_json()["success"] is False
        assert client.get(f"/orders/{id_commande}").get_json()["quantity"] == 3

    def test_remplacement_avec_champ_manquant(self, client):
        id_commande = passer_commande(client).get_json()["orderId"]

        response = client.put(f"/orders/{id_commande}", json={"customerId": "C1"})

        assert response.status_code == 400
        assert "champ manquant" in response.get_json()["message"]

    def test_remplacement_avec_prix_non_numérique(self, client):
        id_commande = passer_commande(client).get_json()["orderId"]

        response = client.put(f"/orders/{id_commande}", json={
            "customerId": "C1",
            "customerName": "Jane Doe",
            "productId": "P1",
            "productName": "Lampe de bureau",
            "orderDate": "2024-01-01T00:00:00",
            "quantity": 2,
            "unitPrice": "cher",
            "totalPrice": 39.98,
            "status": "Completed",
        })

        assert response.status_code == 400
        assert "unitPrice" in response.get_json()["message"]

    def test_statut_manquant(self, client):
        id_commande = passer_commande(client).get_json()["orderId"]

        response = client.post(f"/orders/{id_commande}/status", json={})

        assert response.status_code == 400
        assert client.get(f"/orders/{id_commande}").get_json()["status"] == "Submitted"
