"""
Funciones helper compartidas para todos los tests.

Proporciona dobles en memoria del driver de MongoDB (cliente, base,
colección) con el subconjunto de la API de pymongo que usa el motor,
más inyección de fallos por operación y un sink que acumula eventos.

Uso típico:
    source = FakeDatabase("origen", {"users": [{"_id": 1}, {"_id": 2}]})
    target = FakeDatabase("destino")
    factory = FakeClientFactory([source, target])

    result = migrate_database(
        "mongodb://localhost/origen", "mongodb://localhost/destino",
        "complete", client_factory=factory,
    )
"""

import copy
import os
import sys
from types import SimpleNamespace

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bson import ObjectId
from pymongo.errors import BulkWriteError, DuplicateKeyError, ServerSelectionTimeoutError

from connection import Connection
from endpoint import resolve
from progress import CollectionProgressEvent, ProgressSink


class FakeCollection:
    """Colección en memoria. Los documentos viven en FakeDatabase.data."""

    def __init__(self, db, name):
        self.db = db
        self.name = name

    @property
    def _docs(self):
        return self.db.data.get(self.name, [])

    def _fail(self, operation):
        self.db.fail(operation, self.name)

    def _matches(self, doc, query):
        return all(doc.get(key) == value for key, value in (query or {}).items())

    def count_documents(self, query):
        self._fail("count_documents")
        count = sum(1 for doc in self._docs if self._matches(doc, query))
        return count + self.db.count_skew.get(self.name, 0)

    def find(self, query=None, projection=None):
        self._fail("find")
        docs = [copy.deepcopy(doc) for doc in self._docs if self._matches(doc, query)]
        if projection:
            fields = [key for key, include in projection.items() if include]
            docs = [{key: doc[key] for key in fields if key in doc} for doc in docs]
        return iter(docs)

    def find_one(self, query=None):
        self._fail("find_one")
        return next(self.find(query), None)

    def insert_one(self, document):
        self._fail("insert_one")
        document.setdefault("_id", ObjectId())
        if any(doc["_id"] == document["_id"] for doc in self._docs):
            raise DuplicateKeyError(f"E11000 duplicate key error: {document['_id']}")
        self.db.data.setdefault(self.name, []).append(copy.deepcopy(document))
        return SimpleNamespace(acknowledged=self.db.acknowledged, inserted_id=document["_id"])

    def insert_many(self, documents, ordered=True):
        self._fail("insert_many")
        stored = self.db.data.setdefault(self.name, [])
        inserted = []
        for document in documents:
            document.setdefault("_id", ObjectId())
            if any(doc["_id"] == document["_id"] for doc in stored):
                raise BulkWriteError(
                    {
                        "writeErrors": [{"index": len(inserted), "code": 11000}],
                        "nInserted": len(inserted),
                    }
                )
            stored.append(copy.deepcopy(document))
            inserted.append(document["_id"])
        return SimpleNamespace(acknowledged=True, inserted_ids=inserted)

    def update_one(self, query, update):
        self._fail("update_one")
        for doc in self._docs:
            if self._matches(doc, query):
                doc.update(update.get("$set", {}))
                return SimpleNamespace(matched_count=1, modified_count=1)
        return SimpleNamespace(matched_count=0, modified_count=0)

    def delete_one(self, query):
        self._fail("delete_one")
        for i, doc in enumerate(self._docs):
            if self._matches(doc, query):
                del self._docs[i]
                return SimpleNamespace(deleted_count=1)
        return SimpleNamespace(deleted_count=0)

    def drop(self):
        self._fail("drop")
        self.db.dropped.append(self.name)
        self.db.data.pop(self.name, None)


class FakeDatabase:
    """
    Base de datos en memoria.

    Args:
        name: Nombre lógico de la base
        collections: Dict {nombre_colección: [documentos]}
        failures: Dict {operación: excepción} o {(operación, colección): excepción}
    """

    def __init__(self, name, collections=None, failures=None):
        self.name = name
        self.data = {
            coll: [copy.deepcopy(doc) for doc in docs]
            for coll, docs in (collections or {}).items()
        }
        self.failures = dict(failures or {})
        self.count_skew = {}
        self.dropped = []
        self.acknowledged = True

    def fail(self, operation, collection_name=None):
        error = self.failures.get((operation, collection_name)) or self.failures.get(operation)
        if error is not None:
            raise error

    def __getitem__(self, collection_name):
        return FakeCollection(self, collection_name)

    def command(self, command):
        self.fail(command)
        return {"ok": 1.0}

    def list_collection_names(self, filter=None):
        self.fail("list_collection_names")
        names = list(self.data.keys())
        if filter and "name" in filter:
            names = [name for name in names if name == filter["name"]]
        return names

    def documents(self, collection_name):
        return self.data.get(collection_name, [])


class FakeClient:
    """Cliente en memoria: registra cierres y entrega bases por nombre."""

    def __init__(self, uri, databases, close_error=None, **kwargs):
        self.uri = uri
        self.kwargs = kwargs
        self.databases = databases
        self.close_error = close_error
        self.close_calls = 0

    def __getitem__(self, name):
        return self.databases.setdefault(name, FakeDatabase(name))

    def close(self):
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeClientFactory:
    """
    Reemplazo de MongoClient para open_connection(client_factory=...).

    Args:
        databases: FakeDatabase a exponer, accesibles por su nombre
        unreachable: Nombres de base cuyo servidor "no responde"
        close_error: Excepción que lanza close() en todos los clientes
    """

    def __init__(self, databases=(), unreachable=(), close_error=None):
        self.databases = {db.name: db for db in databases}
        self.unreachable = set(unreachable)
        self.close_error = close_error
        self.clients = []

    def __call__(self, uri, **kwargs):
        client = FakeClient(uri, self.databases, close_error=self.close_error, **kwargs)
        self.clients.append(client)
        db_name = resolve(uri).logical_name
        if db_name in self.unreachable:
            db = client[db_name]
            db.failures["ping"] = ServerSelectionTimeoutError(
                "localhost:27017: [Errno 111] Connection refused"
            )
        return client

    @property
    def all_closed(self):
        return all(client.close_calls >= 1 for client in self.clients)


class RecordingSink(ProgressSink):
    """Sink que acumula los eventos emitidos."""

    def __init__(self):
        self.events = []

    def emit(self, event):
        self.events.append(event)

    def of_type(self, event_type):
        return [event for event in self.events if event.event_type == event_type]

    def for_collection(self, collection_name):
        return [
            event
            for event in self.events
            if isinstance(event, CollectionProgressEvent)
            and event.collection == collection_name
        ]


def make_connection(db, uri=None):
    """Crea una Connection directamente sobre una FakeDatabase."""
    uri = uri or f"mongodb://localhost:27017/{db.name}"
    client = FakeClient(uri, {db.name: db})
    return Connection(resolve(uri), client, db)


def uri_for(db):
    return f"mongodb://localhost:27017/{db.name}?authSource=admin"
