"""
Migrador para el modo 'incremental'.

RESPONSABILIDAD:
Migración aditiva deduplicada por identidad:
- Lee los _id existentes en destino (vacío si la colección no existe)
- Lee todos los documentos del origen
- Inserta solo los documentos cuyo _id no está en destino

DECISIONES DE DISEÑO:
- La comparación es por identidad (_id en forma str), no por contenido:
  un documento con el mismo _id y campos distintos NO se actualiza
- Sin documentos nuevos: no-op exitoso
- migrated_count == new_count siempre que el resultado sea exitoso
"""

from .base import BaseMigrator, identity
from models import CollectionResult, MigrationMode


class IncrementalMigrator(BaseMigrator):
    """Migrador que solo agrega documentos ausentes en destino."""

    mode = MigrationMode.INCREMENTAL

    def transfer(self, source_db, target_db, collection_name, progress):
        source = source_db[collection_name]
        target = target_db[collection_name]

        count = source.count_documents({})
        progress.update(
            "starting",
            f"Migrating collection: {collection_name} ({count} documents)",
            0,
        )
        progress.update(
            "preparing", f"Checking for new documents in {collection_name}...", 20
        )

        existing_ids = self.existing_identities(target_db, collection_name)
        documents = self.read_documents(source)
        new_documents = [doc for doc in documents if identity(doc) not in existing_ids]

        progress.update(
            "preparing",
            f"Found {len(new_documents)} new documents out of {len(documents)} total",
            40,
        )

        if not new_documents:
            progress.update("completed", "No new documents to migrate", 100)
            return CollectionResult(
                collection_name=collection_name,
                mode=self.mode,
                source_count=len(documents),
                migrated_count=0,
                new_count=0,
                message="No new documents to migrate",
            )

        progress.update(
            "copying", f"Copying {len(new_documents)} new documents...", 60
        )
        self.insert_documents(target, new_documents)

        progress.update(
            "completed",
            f"Completed: {len(new_documents)} new documents migrated",
            100,
        )
        return CollectionResult(
            collection_name=collection_name,
            mode=self.mode,
            source_count=len(documents),
            migrated_count=len(new_documents),
            new_count=len(new_documents),
        )
