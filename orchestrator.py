"""
Orquestador de la migración completa de una base de datos.

Estados del job:
    IDLE → CONNECTING_SOURCE → CONNECTING_TARGET → ENUMERATING
         → MIGRATING_COLLECTIONS → COMPLETED

FAILED es alcanzable desde la validación, la conexión y la enumeración.
Durante MIGRATING_COLLECTIONS el fallo de una colección queda aislado en
su CollectionResult; solo una excepción inesperada que escape del migrador
lleva el job a FAILED.

Las colecciones se migran estrictamente en secuencia, en el orden que
devuelve el catálogo del origen. Dos jobs concurrentes sobre el mismo
destino no se coordinan entre sí.

Uso:
    result = migrate_database(source_uri, target_uri, 'complete', sink=ConsoleProgressSink())
    print(result.migrated_documents)
"""

import importlib
import sys
from enum import Enum

from pymongo import MongoClient

import config
from connection import list_collections, open_connection
from endpoint import resolve
from errors import DatabaseConnectionError, ValidationError, best_effort
from migrators.base import BaseMigrator
from models import JobResult, MigrationMode
from progress import CompletedEvent, ErrorEvent, NullProgressSink, StatusEvent


class JobState(str, Enum):
    IDLE = "idle"
    CONNECTING_SOURCE = "connecting_source"
    CONNECTING_TARGET = "connecting_target"
    ENUMERATING = "enumerating"
    MIGRATING_COLLECTIONS = "migrating_collections"
    COMPLETED = "completed"
    FAILED = "failed"


def load_migrator(mode, sink=None) -> BaseMigrator:
    """
    Carga dinámicamente el migrador correspondiente a un modo.

    Convención de nombres:
        complete → migrators.complete → CompleteMigrator
        incremental → migrators.incremental → IncrementalMigrator

    Raises:
        ValidationError: Si el modo no es válido
        ImportError / TypeError: Si el migrador no existe o no hereda de BaseMigrator
    """
    mode = MigrationMode.parse(mode)
    module_name = config.get_mode_config(mode.value)["migrator_module"]
    class_name = (
        "".join(word.capitalize() for word in module_name.split("_")) + "Migrator"
    )

    module = importlib.import_module(f"migrators.{module_name}")
    migrator_class = getattr(module, class_name)

    # Verificar que hereda de BaseMigrator (type safety en runtime)
    if not issubclass(migrator_class, BaseMigrator):
        raise TypeError(f"{class_name} no hereda de BaseMigrator")

    return migrator_class(sink=sink)


def migrate_collection(source_conn, target_conn, collection_name, mode, sink=None,
                       current=1, total=1):
    """Migra una sola colección con el modo indicado y retorna su CollectionResult."""
    migrator = load_migrator(mode, sink)
    return migrator.migrate(source_conn, target_conn, collection_name, current, total)


class MigrationJob:
    """
    Un job de migración: origen, destino y modo.

    run() puede llamarse una sola vez y produce exactamente un JobResult.
    Los eventos de progreso se escriben en el sink inyectado.

    Attributes:
        state (JobState): Estado actual
        history (list): Estados recorridos, en orden
    """

    def __init__(self, source_uri, target_uri, mode, sink=None, client_factory=MongoClient):
        self.source_uri = source_uri
        self.target_uri = target_uri
        self.raw_mode = mode
        self.sink = sink or NullProgressSink()
        self.client_factory = client_factory

        self.mode = None
        self.state = JobState.IDLE
        self.history = [JobState.IDLE]
        self.result = None

    def _transition(self, state):
        self.state = state
        self.history.append(state)

    def _status(self, message, progress):
        self.sink.emit(StatusEvent(message, progress))

    def run(self) -> JobResult:
        if self.result is not None:
            raise RuntimeError("MigrationJob.run() can only be called once")

        # Validación antes de cualquier intento de conexión
        try:
            self.mode = MigrationMode.parse(self.raw_mode)
            source = resolve(self.source_uri, "source")
            target = resolve(self.target_uri, "target")
        except ValidationError as e:
            self._transition(JobState.FAILED)
            self.sink.emit(ErrorEvent(str(e), 100, field_name=e.field))
            self.result = JobResult(mode=self.mode, success=False, error=str(e))
            return self.result

        source_conn = None
        target_conn = None
        results = []

        try:
            self._transition(JobState.CONNECTING_SOURCE)
            self._status("Connecting to source database...", 5)
            source_conn = self._open(source)

            self._transition(JobState.CONNECTING_TARGET)
            self._status("Connecting to target database...", 10)
            target_conn = self._open(target)

            self._status(
                f"Connected to source database: {source_conn.name} "
                f"and target database: {target_conn.name}",
                15,
            )
            self._status(f"Migration mode: {self.mode.description}", 18)

            self._transition(JobState.ENUMERATING)
            self._status("Getting collections from source database...", 20)
            collections = list_collections(source_conn)

            if not collections:
                self._status("No collections found in source database", 100)
                return self._complete(results, source_conn, target_conn,
                                      "No collections to migrate")

            total = len(collections)
            self._status(f"Found {total} collections to migrate", 25)

            self._transition(JobState.MIGRATING_COLLECTIONS)
            migrator = load_migrator(self.mode, self.sink)

            for i, collection_name in enumerate(collections, 1):
                result = migrator.migrate(
                    source_conn, target_conn, collection_name, current=i, total=total
                )
                results.append(result)

                overall = 25 + (i * 75) // total
                self._status(f"Migrated {i}/{total} collections", overall)

            return self._complete(results, source_conn, target_conn, "Migration completed")

        except Exception as e:
            # Conexión, enumeración o fallo inesperado del migrador: fatal
            self._transition(JobState.FAILED)
            message = str(e) or type(e).__name__
            if not isinstance(e, (DatabaseConnectionError, ValidationError)):
                print(f"\n❌ Error inesperado durante la migración: {message}", file=sys.stderr)
            self._status(f"Migration failed: {message}", 100)
            self.result = JobResult(
                mode=self.mode,
                success=False,
                results=results,
                error=message,
                source_name=source.logical_name,
                target_name=target.logical_name,
            )
            self.sink.emit(
                CompletedEvent(
                    message=f"Migration failed: {message}",
                    progress=100,
                    success=False,
                    summary={"error": message, "migrationMode": self.mode.value},
                )
            )
            return self.result

        finally:
            self._release(source_conn, "origen")
            self._release(target_conn, "destino")

    def _open(self, endpoint):
        return open_connection(endpoint, client_factory=self.client_factory)

    def _complete(self, results, source_conn, target_conn, message):
        self._transition(JobState.COMPLETED)
        self.result = JobResult(
            mode=self.mode,
            success=True,
            results=results,
            source_name=source_conn.name,
            target_name=target_conn.name,
        )
        summary = self.result.to_dict()
        summary.pop("results")
        summary.pop("success")
        self.sink.emit(
            CompletedEvent(message=message, progress=100, success=True, summary=summary)
        )
        return self.result

    def _release(self, conn, label):
        if conn is None:
            return
        outcome = best_effort(conn.close)
        if not outcome:
            print(
                f"⚠️  No se pudo cerrar la conexión de {label}: {outcome.error}",
                file=sys.stderr,
            )


def migrate_database(source_uri, target_uri, mode="complete", sink=None,
                     client_factory=MongoClient) -> JobResult:
    """Ejecuta un job de migración completo y retorna su JobResult."""
    job = MigrationJob(source_uri, target_uri, mode, sink=sink, client_factory=client_factory)
    return job.run()
