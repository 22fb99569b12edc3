"""
Prueba de conexiones y permisos antes de migrar.

- test_source(): conecta, lista colecciones y cierra (solo lectura)
- test_target(): sobre una colección desechable (config.PROBE_COLLECTION)
  inserta, lee, actualiza y elimina un documento sintético; luego elimina
  la colección sin propagar errores
- test_connections(): combina ambas pruebas emitiendo eventos de estado

Cada permiso arranca en False y solo se marca True con una confirmación
explícita del resultado de la operación correspondiente.
"""

import sys
from datetime import datetime, timezone

from pymongo.errors import PyMongoError

import config
from connection import list_collections, open_connection
from endpoint import parse_endpoint
from errors import DatabaseConnectionError, best_effort
from models import ConnectionTestReport, SourceTestResult, TargetTestResult
from progress import NullProgressSink, StatusEvent


def test_source(endpoint, client_factory=None) -> SourceTestResult:
    """
    Prueba la conexión de origen (lectura).

    Args:
        endpoint: Endpoint resuelto o cadena de conexión
        client_factory: Constructor alternativo del cliente (tests)

    Raises:
        ValidationError: Si la cadena es inválida
        DatabaseConnectionError: Si no se puede conectar o listar
    """
    with open_connection(endpoint, **_factory_kwargs(client_factory)) as conn:
        collections = list_collections(conn)
        return SourceTestResult(
            logical_name=conn.name,
            collection_count=len(collections),
            read_permission=True,
        )


def test_target(endpoint, client_factory=None) -> TargetTestResult:
    """
    Prueba la conexión de destino y sus permisos de lectura/escritura.

    Si una operación falla, las pruebas siguientes no se intentan y el
    resultado conserva los permisos confirmados hasta ese punto junto con
    el mensaje de error.

    Raises:
        ValidationError: Si la cadena es inválida
        DatabaseConnectionError: Si no se puede conectar
    """
    with open_connection(endpoint, **_factory_kwargs(client_factory)) as conn:
        result = TargetTestResult(logical_name=conn.name)
        permissions = result.permissions
        probe = conn.db[config.PROBE_COLLECTION]

        try:
            write_result = probe.insert_one(
                {"test": True, "timestamp": datetime.now(timezone.utc)}
            )
            permissions.write = bool(
                write_result.acknowledged and write_result.inserted_id is not None
            )
            if not permissions.write:
                return result

            probe_filter = {"_id": write_result.inserted_id}

            permissions.read = probe.find_one(probe_filter) is not None

            update_result = probe.update_one(probe_filter, {"$set": {"updated": True}})
            permissions.update = update_result.modified_count == 1

            delete_result = probe.delete_one(probe_filter)
            permissions.delete = delete_result.deleted_count == 1

        except PyMongoError as e:
            result.error = str(e) or type(e).__name__

        finally:
            # La ausencia de la colección de prueba no es un error
            cleanup = best_effort(probe.drop)
            if not cleanup:
                print(
                    f"⚠️  No se pudo eliminar '{config.PROBE_COLLECTION}': {cleanup.error}",
                    file=sys.stderr,
                )

        return result


def test_connections(source_uri, target_uri, sink=None, client_factory=None):
    """
    Prueba origen y destino de forma independiente.

    El destino se prueba aunque falle el origen. Emite eventos 'status'
    con avance 10 → 40 → 60 → 100.

    Returns:
        ConnectionTestReport: Resultado combinado (success si ambos pasan)
    """
    sink = sink or NullProgressSink()
    report = ConnectionTestReport()

    source = parse_endpoint(source_uri, "source")
    target = parse_endpoint(target_uri, "target")

    if not source.is_valid:
        report.errors["source"] = "Invalid source connection string format"
    if not target.is_valid:
        report.errors["target"] = "Invalid target connection string format"

    if source.is_valid:
        sink.emit(StatusEvent("Testing source connection...", 10))
        try:
            report.source_details = test_source(source, client_factory)
            report.source = True
            sink.emit(StatusEvent("Source connection successful", 40))
        except DatabaseConnectionError as e:
            report.errors["source"] = f"Source connection failed: {e}"
            sink.emit(StatusEvent(f"Source connection failed: {e}", 40))

    if target.is_valid:
        sink.emit(StatusEvent("Testing target connection...", 60))
        try:
            report.target_details = test_target(target, client_factory)
            if report.target_details.error:
                report.errors["target"] = (
                    f"Target permission check failed: {report.target_details.error}"
                )
                sink.emit(StatusEvent(report.errors["target"], 100))
            else:
                report.target = True
                sink.emit(StatusEvent("Target connection successful", 100))
        except DatabaseConnectionError as e:
            report.errors["target"] = f"Target connection failed: {e}"
            sink.emit(StatusEvent(f"Target connection failed: {e}", 100))

    return report


def _factory_kwargs(client_factory):
    return {"client_factory": client_factory} if client_factory else {}
