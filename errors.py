"""
Excepciones del motor de migración.

Jerarquía:
    MigrationError
    ├── ValidationError          → entrada inválida, se rechaza antes de conectar
    ├── DatabaseConnectionError  → fallo de transporte/ping/listado, fatal para el job
    └── CollectionMigrationError → fallo de una colección, aislado en su resultado

Los errores del driver (pymongo.errors.PyMongoError) se traducen a estas
clases en los bordes: connection.py los convierte en DatabaseConnectionError
y los migradores los convierten en un CollectionResult fallido.
"""


class MigrationError(Exception):
    """Error base de la herramienta de migración."""


class ValidationError(MigrationError):
    """
    Entrada rechazada antes de cualquier intento de conexión.

    Attributes:
        field (str|None): Entrada que falló (ej: 'source', 'target', 'mode')
    """

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class DatabaseConnectionError(MigrationError):
    """No se pudo abrir, verificar o leer una conexión a MongoDB."""


class CollectionMigrationError(MigrationError):
    """
    Fallo durante la migración de una colección (lectura, drop, insert o verificación).

    Attributes:
        collection_name (str): Colección afectada
        source_count (int): Documentos leídos del origen antes del fallo
        migrated_count (int): Documentos confirmados en destino antes del fallo
    """

    def __init__(self, collection_name, message, source_count=0, migrated_count=0):
        super().__init__(message)
        self.collection_name = collection_name
        self.source_count = source_count
        self.migrated_count = migrated_count


class BestEffortResult:
    """
    Resultado de una operación de limpieza que no debe propagar errores.

    Attributes:
        ok (bool): True si la operación terminó sin excepción
        error (Exception|None): Excepción registrada si falló
    """

    def __init__(self, ok, error=None):
        self.ok = ok
        self.error = error

    def __bool__(self):
        return self.ok

    def __repr__(self):
        return f"<BestEffortResult ok={self.ok} error={self.error!r}>"


def best_effort(operation, *args, **kwargs) -> BestEffortResult:
    """
    Ejecuta una operación de limpieza registrando, sin propagar, su fallo.

    Ejemplo:
        outcome = best_effort(collection.drop)
        if not outcome:
            print(f"⚠️  No se pudo limpiar: {outcome.error}")
    """
    try:
        operation(*args, **kwargs)
        return BestEffortResult(True)
    except Exception as e:
        return BestEffortResult(False, e)
