"""
Mapping ORM avec SQLAlchemy (classical mapping).

On définit les tables séparément, puis on mappe les classes
du domaine sur ces tables. Cela permet au modèle de domaine
de rester ignorant de la persistance (persistence ignorance).

Chaque table est un magasin d'entités clé/valeur : la clé est le
couple (partition_key, row_key), la partition identifiant le type
d'entité. Les noms de colonnes SQL restent en ASCII, le mapping
traduit vers les attributs français du domaine.
"""

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    event,
    inspect,
)
from sqlalchemy.orm import registry

from commandes.domain import model

PARTITION_CLIENT = "Customer"
PARTITION_PRODUIT = "Product"
PARTITION_COMMANDE = "Order"

metadata = MetaData()
mapper_registry = registry(metadata=metadata)

# --- Définition des tables ---

customers = Table(
    "customers",
    metadata,
    Column("partition_key", String(64), primary_key=True, default=PARTITION_CLIENT),
    Column("row_key", String(255), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("surname", String(255), nullable=False),
)

products = Table(
    "products",
    metadata,
    Column("partition_key", String(64), primary_key=True, default=PARTITION_PRODUIT),
    Column("row_key", String(255), primary_key=True),
    Column("product_name", String(255), nullable=False),
    Column("price", Numeric(12, 2), nullable=False),
    Column("stock_available", Integer, nullable=False),
    Column("numero_version", Integer, nullable=False, server_default="0"),
)

orders = Table(
    "orders",
    metadata,
    Column("partition_key", String(64), primary_key=True, default=PARTITION_COMMANDE),
    Column("row_key", String(255), primary_key=True),
    Column("customer_id", String(255), nullable=False),
    Column("username", String(255), nullable=False),
    Column("product_id", String(255), nullable=False),
    Column("product_name", String(255), nullable=False),
    Column("order_date", DateTime(timezone=True), nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("unit_price", Numeric(12, 2), nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("status", String(64), nullable=False),
    Column("payment_proof_file_name", String(255), nullable=True),
)


def start_mappers() -> None:
    """
    Configure le mapping entre les classes du domaine et les tables SQL.

    La colonne partition_key est mappée sur l'attribut privé `_partition`,
    que le domaine ne renseigne jamais : la valeur par défaut de la
    colonne s'applique à l'insertion, et les repositories filtrent dessus.

    Pour Produit, numero_version sert de version_id_col : chaque UPDATE
    porte une clause WHERE numero_version = <version lue>, ce qui
    transforme la décrémentation du stock en compare-and-swap.
    Le domaine incrémente lui-même la version (version_id_generator=False).

    Sans effet si le mapping est déjà configuré.
    """
    if inspect(model.Commande, raiseerr=False) is not None:
        return
    mapper_registry.map_imperatively(
        model.Client,
        customers,
        properties={
            "_partition": customers.c.partition_key,
            "id_client": customers.c.row_key,
            "prénom": customers.c.name,
            "nom": customers.c.surname,
        },
    )
    mapper_registry.map_imperatively(
        model.Produit,
        products,
        version_id_col=products.c.numero_version,
        version_id_generator=False,
        properties={
            "_partition": products.c.partition_key,
            "id_produit": products.c.row_key,
            "nom": products.c.product_name,
            "prix": products.c.price,
            "stock_disponible": products.c.stock_available,
            "numéro_version": products.c.numero_version,
        },
    )
    mapper_registry.map_imperatively(
        model.Commande,
        orders,
        properties={
            "_partition": orders.c.partition_key,
            "id_commande": orders.c.row_key,
            "id_client": orders.c.customer_id,
            "nom_client": orders.c.username,
            "id_produit": orders.c.product_id,
            "nom_produit": orders.c.product_name,
            "date_commande": orders.c.order_date,
            "quantité": orders.c.quantity,
            "prix_unitaire": orders.c.unit_price,
            "prix_total": orders.c.total_price,
            "statut": orders.c.status,
            "justificatif_paiement": orders.c.payment_proof_file_name,
        },
    )


@event.listens_for(model.Produit, "load")
def receive_load_produit(produit: model.Produit, _: object) -> None:
    """Initialise la liste d'événements quand un Produit est chargé depuis la BDD."""
    produit.événements = []


@event.listens_for(model.Commande, "load")
def receive_load_commande(commande: model.Commande, _: object) -> None:
    """Initialise la liste d'événements quand une Commande est chargée depuis la BDD."""
    commande.événements = []
