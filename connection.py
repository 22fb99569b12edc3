"""
Gestión de conexiones MongoDB y enumeración de colecciones.

Cada Connection es propiedad exclusiva del scope de un job: se abre con
open_connection(), se verifica con un ping y se libera con close() en
todas las salidas (éxito, fallo aislado o excepción). No hay pool ni
reutilización entre jobs.

Uso:
    endpoint = resolve('mongodb://localhost:27017/ventas')
    with open_connection(endpoint) as conn:
        names = list_collections(conn)
"""

from pymongo import MongoClient
from pymongo.errors import (
    ConfigurationError,
    InvalidURI,
    PyMongoError,
    ServerSelectionTimeoutError,
)

import config
from endpoint import Endpoint, resolve
from errors import DatabaseConnectionError


class Connection:
    """
    Conexión viva a una base de datos.

    Attributes:
        endpoint (Endpoint): Endpoint resuelto que originó la conexión
        client: Cliente de pymongo
        db: Base de datos de pymongo (client[endpoint.logical_name])
    """

    def __init__(self, endpoint: Endpoint, client, db):
        self.endpoint = endpoint
        self.client = client
        self.db = db
        self.closed = False

    @property
    def name(self) -> str:
        return self.endpoint.logical_name

    def close(self):
        """Cierra el cliente. Idempotente: llamadas repetidas no hacen nada."""
        if self.closed:
            return
        self.closed = True
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        state = "closed" if self.closed else "open"
        return f"<Connection {self.name} ({state})>"


def open_connection(endpoint, client_factory=MongoClient, timeouts=None) -> Connection:
    """
    Abre una conexión y verifica que el servidor responde.

    Args:
        endpoint: Endpoint resuelto o cadena de conexión
        client_factory: Constructor del cliente (MongoClient en producción)
        timeouts: kwargs de timeout para el cliente (default: config.MONGO_TIMEOUTS)

    Returns:
        Connection: Conexión verificada con ping

    Raises:
        ValidationError: Si se pasa una cadena inválida
        DatabaseConnectionError: Si falla el transporte o el ping
    """
    if not isinstance(endpoint, Endpoint):
        endpoint = resolve(endpoint)

    if timeouts is None:
        timeouts = config.MONGO_TIMEOUTS

    client = None
    try:
        client = client_factory(endpoint.raw_descriptor, **timeouts)
        db = client[endpoint.logical_name]

        # El cliente conecta de forma perezosa: el ping fuerza la selección
        # de servidor y confirma que la base responde
        db.command("ping")

        return Connection(endpoint, client, db)

    except ServerSelectionTimeoutError as e:
        _close_quietly(client)
        raise DatabaseConnectionError(
            "Could not connect to MongoDB server. Please check if the server is "
            f"running and the connection string is correct. Details: {e}"
        ) from e
    except (InvalidURI, ConfigurationError) as e:
        _close_quietly(client)
        raise DatabaseConnectionError(
            f"Invalid MongoDB connection string format. Details: {e}"
        ) from e
    except PyMongoError as e:
        _close_quietly(client)
        raise DatabaseConnectionError(f"Failed to connect to database: {e}") from e


def _close_quietly(client):
    if client is None:
        return
    try:
        client.close()
    except PyMongoError:
        pass


def list_collections(conn: Connection) -> list:
    """
    Lista los nombres de colección de la base conectada.

    El orden es el que devuelve el catálogo; el orquestador lo usa tal cual
    como orden de migración.

    Raises:
        DatabaseConnectionError: Si el servidor rechaza el listado
    """
    try:
        return list(conn.db.list_collection_names())
    except PyMongoError as e:
        raise DatabaseConnectionError(f"Failed to get collections: {e}") from e


def collection_exists(db, collection_name: str) -> bool:
    """Verifica si existe una colección (sin crearla)."""
    return collection_name in db.list_collection_names(filter={"name": collection_name})
