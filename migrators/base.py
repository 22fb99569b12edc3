"""
Módulo base para migradores de colecciones MongoDB → MongoDB.

Define la interfaz común (contrato) que todos los modos de migración
deben implementar. Esto permite que orchestrator.py funcione con cualquier
modo sin conocer sus detalles internos.

Patrón de diseño: Strategy Pattern
- orchestrator.py = Contexto (orquestador)
- BaseMigrator = Estrategia abstracta
- CompleteMigrator, IncrementalMigrator = Estrategias concretas

Flujo de uso:
1. orchestrator.py carga dinámicamente el migrador del modo elegido
2. Llama a migrate() una vez por colección, en orden
3. migrate() delega en transfer() y convierte cualquier fallo del driver
   en un CollectionResult con success=False (el job continúa)

Ejemplo de implementación:
    class MiMigrador(BaseMigrator):
        mode = MigrationMode.COMPLETE

        def transfer(self, source_db, target_db, collection_name, progress):
            documents = self.read_documents(source_db[collection_name])
            ...
            return CollectionResult(...)
"""

from abc import ABC, abstractmethod

from bson.errors import BSONError
from pymongo.errors import PyMongoError

from connection import collection_exists
from errors import CollectionMigrationError
from models import CollectionResult, MigrationMode, ReplacementPolicy
from progress import CollectionProgressEvent, NullProgressSink


class CollectionProgress:
    """
    Emisor de eventos collectionProgress para una colección.

    Garantiza que el avance nunca retrocede dentro de la misma colección.
    """

    def __init__(self, sink, collection_name, current=1, total=1):
        self.sink = sink
        self.collection_name = collection_name
        self.current = current
        self.total = total
        self.last_progress = 0
        self.dropped_existing = False

    def update(self, status, message, progress):
        progress = max(self.last_progress, min(progress, 100))
        self.last_progress = progress
        self.sink.emit(
            CollectionProgressEvent(
                message=message,
                progress=progress,
                collection=self.collection_name,
                status=status,
                current=self.current,
                total=self.total,
            )
        )

    def fail(self, message):
        self.update("failed", f"Failed: {message}", 100)


class BaseMigrator(ABC):
    """
    Clase abstracta que define la interfaz para migradores de colecciones.

    Attributes:
        mode (MigrationMode): Modo que implementa la subclase
        sink: Destino de los eventos de progreso
    """

    mode: MigrationMode = None

    def __init__(self, sink=None):
        """
        Args:
            sink: Objeto con emit(event). Si es None se descartan los eventos
        """
        self.sink = sink or NullProgressSink()

    @property
    def replacement_policy(self) -> ReplacementPolicy:
        return self.mode.replacement_policy

    def migrate(self, source_conn, target_conn, collection_name, current=1, total=1):
        """
        Migra una colección y retorna su CollectionResult.

        Los errores del driver y de BSON y las verificaciones fallidas quedan
        aislados en el resultado. Cualquier otra excepción se propaga y
        el orquestador la trata como fatal para el job.
        """
        progress = CollectionProgress(self.sink, collection_name, current, total)
        try:
            return self.transfer(source_conn.db, target_conn.db, collection_name, progress)
        except CollectionMigrationError as e:
            progress.fail(str(e))
            return CollectionResult(
                collection_name=collection_name,
                mode=self.mode,
                source_count=e.source_count,
                migrated_count=e.migrated_count,
                success=False,
                error_message=str(e),
                dropped_existing=progress.dropped_existing,
            )
        except (PyMongoError, BSONError) as e:
            message = str(e) or type(e).__name__
            progress.fail(message)
            return CollectionResult(
                collection_name=collection_name,
                mode=self.mode,
                success=False,
                error_message=message,
                dropped_existing=progress.dropped_existing,
            )

    @abstractmethod
    def transfer(self, source_db, target_db, collection_name, progress) -> CollectionResult:
        """
        Transfiere los documentos de una colección según el modo.

        Args:
            source_db: Base de datos origen (pymongo)
            target_db: Base de datos destino (pymongo)
            collection_name: Nombre de la colección (igual en origen y destino)
            progress: CollectionProgress para emitir avances

        Returns:
            CollectionResult: Resultado de la colección
        """
        pass

    # =========================================================================
    # PRIMITIVAS COMPARTIDAS
    # =========================================================================

    def read_documents(self, collection) -> list:
        """Lee el conjunto completo de documentos de una colección."""
        return list(collection.find({}))

    def insert_documents(self, collection, documents):
        """Inserta documentos como un batch ordenado."""
        return collection.insert_many(documents, ordered=True)

    def prepare_target(self, target_db, collection_name, progress) -> bool:
        """
        Paso previo a la escritura según la política de reemplazo.

        Con DROP_EXISTING elimina la colección destino si tiene documentos.
        Una colección existente pero vacía no se elimina.

        Returns:
            bool: True si se eliminó una colección existente
        """
        if self.replacement_policy is not ReplacementPolicy.DROP_EXISTING:
            return False

        if not collection_exists(target_db, collection_name):
            return False

        target = target_db[collection_name]
        target_count = target.count_documents({})
        if target_count == 0:
            return False

        target.drop()
        progress.dropped_existing = True
        progress.update(
            "preparing",
            f"Dropped existing collection: {collection_name} with {target_count} documents",
            25,
        )
        return True

    def existing_identities(self, target_db, collection_name) -> set:
        """
        Retorna el conjunto de _id (en forma str) ya presentes en destino.

        Si la colección no existe se trata como vacía.
        """
        if not collection_exists(target_db, collection_name):
            return set()
        cursor = target_db[collection_name].find({}, {"_id": 1})
        return {identity(doc) for doc in cursor}


def identity(doc) -> str:
    """Identidad canónica de un documento: su _id en forma de string."""
    return str(doc["_id"])
