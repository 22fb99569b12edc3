"""
Migrador para el modo 'complete'.

RESPONSABILIDAD:
Reemplazo destructivo de cada colección:
- Si el destino tiene la colección con documentos, la elimina (sin merge)
- Lee todos los documentos del origen
- Inserta todos los documentos en un batch ordenado
- Verifica recontando el destino: cualquier diferencia es un fallo

DECISIONES DE DISEÑO:
- Colección origen vacía: éxito con 0 migrados, pero el destino con
  documentos ya fue eliminado (el drop precede a la lectura)
- Colección destino existente pero vacía: no se elimina (chequeo por conteo)
- La secuencia drop → insert no está aislada de otros escritores
  concurrentes sobre la misma colección destino

Uso (desde orchestrator.py):
    migrator = CompleteMigrator(sink=sink)
    result = migrator.migrate(source_conn, target_conn, 'users', current=1, total=3)
"""

from .base import BaseMigrator
from errors import CollectionMigrationError
from models import CollectionResult, MigrationMode


class CompleteMigrator(BaseMigrator):
    """Migrador que reemplaza por completo la colección destino."""

    mode = MigrationMode.COMPLETE

    def transfer(self, source_db, target_db, collection_name, progress):
        source = source_db[collection_name]
        target = target_db[collection_name]

        count = source.count_documents({})
        progress.update(
            "starting",
            f"Migrating collection: {collection_name} ({count} documents)",
            0,
        )

        dropped = self.prepare_target(target_db, collection_name, progress)
        documents = self.read_documents(source)

        if not documents:
            progress.update("completed", "No documents to migrate", 100)
            return CollectionResult(
                collection_name=collection_name,
                mode=self.mode,
                source_count=0,
                migrated_count=0,
                dropped_existing=dropped,
                message="No documents to migrate",
            )

        progress.update("copying", f"Copying {len(documents)} documents...", 50)
        self.insert_documents(target, documents)

        # Verificación: el destino debe tener exactamente lo escrito
        new_count = target.count_documents({})
        source_count = len(documents)

        if new_count != source_count:
            raise CollectionMigrationError(
                collection_name,
                f"Verification failed: {new_count}/{source_count} documents "
                "found in target after insert",
                source_count=source_count,
                migrated_count=min(new_count, source_count),
            )

        progress.update(
            "completed",
            f"Completed: {new_count}/{source_count} documents migrated",
            100,
        )
        return CollectionResult(
            collection_name=collection_name,
            mode=self.mode,
            source_count=source_count,
            migrated_count=new_count,
            dropped_existing=dropped,
        )
