"""
Migradores de colecciones MongoDB → MongoDB, uno por modo de migración.

Cada migrador implementa la interfaz BaseMigrator y se carga dinámicamente
en runtime según el modo seleccionado.

Estructura:
    base.py: Clase abstracta BaseMigrator y primitivas compartidas
    complete.py: CompleteMigrator (drop + insert + verificación)
    incremental.py: IncrementalMigrator (solo documentos con _id nuevo)

Los migradores son instanciados por load_migrator() en orchestrator.py
usando importlib.import_module() para carga dinámica.

Interfaz requerida (ver BaseMigrator):
    - mode (atributo de clase)
    - transfer(source_db, target_db, collection_name, progress)
"""
