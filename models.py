"""
Modelos de datos del motor de migración.

- MigrationMode / ReplacementPolicy: enums validados en el borde de entrada
- CollectionResult: resultado inmutable de migrar una colección
- JobResult: agregado de un job completo (resultados + totales)
- Permissions / SourceTestResult / TargetTestResult / ConnectionTestReport:
  resultados de la prueba de conexiones (tester.py)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import config
from errors import ValidationError


class ReplacementPolicy(str, Enum):
    """Qué hacer con una colección destino que ya tiene documentos."""

    DROP_EXISTING = "drop_existing"
    KEEP_EXISTING = "keep_existing"


class MigrationMode(str, Enum):
    """Modo de migración. No hay valor por defecto implícito."""

    COMPLETE = "complete"
    INCREMENTAL = "incremental"

    @classmethod
    def parse(cls, value) -> "MigrationMode":
        """
        Convierte la entrada del usuario en un MigrationMode.

        Acepta el enum, el nombre canónico o un alias configurado en
        config.MIGRATION_MODES (ej: 'newOnly').

        Raises:
            ValidationError: Si el valor no corresponde a ningún modo
        """
        if isinstance(value, cls):
            return value

        for mode_name in config.get_mode_names():
            mode_config = config.get_mode_config(mode_name)
            if value == mode_name or value in mode_config["aliases"]:
                return cls(mode_name)

        raise ValidationError(f"Invalid migration mode: {value}", field="mode")

    @property
    def replacement_policy(self) -> ReplacementPolicy:
        return ReplacementPolicy(config.get_mode_config(self.value)["replacement_policy"])

    @property
    def description(self) -> str:
        return config.get_mode_config(self.value)["description"]


@dataclass(frozen=True)
class CollectionResult:
    """Resultado de migrar una colección. Una instancia por colección por job."""

    collection_name: str
    mode: MigrationMode
    source_count: int = 0
    migrated_count: int = 0
    new_count: Optional[int] = None  # Solo modo incremental
    success: bool = True
    error_message: Optional[str] = None
    dropped_existing: bool = False
    message: Optional[str] = None

    def __post_init__(self):
        if not self.success and not self.error_message:
            raise ValueError("A failed CollectionResult requires an error_message")

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "collection": self.collection_name,
            "mode": self.mode.value,
            "totalDocuments": self.source_count,
            "migratedCount": self.migrated_count,
            "success": self.success,
        }
        if self.new_count is not None:
            data["newDocuments"] = self.new_count
        if self.error_message:
            data["error"] = self.error_message
        if self.message:
            data["message"] = self.message
        return data


@dataclass
class JobResult:
    """
    Resultado de un job de migración completo.

    success indica que el job llegó al estado Completed; los fallos
    aislados de colecciones se cuentan en failed_collections.
    """

    mode: Optional[MigrationMode]
    success: bool
    results: List[CollectionResult] = field(default_factory=list)
    error: Optional[str] = None
    source_name: Optional[str] = None
    target_name: Optional[str] = None

    @property
    def total_collections(self) -> int:
        return len(self.results)

    @property
    def successful_collections(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_collections(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def total_documents(self) -> int:
        return sum(r.source_count for r in self.results if r.success)

    @property
    def migrated_documents(self) -> int:
        return sum(r.migrated_count for r in self.results if r.success)

    @property
    def new_documents(self) -> int:
        return sum(r.new_count or 0 for r in self.results if r.success)

    @property
    def all_collections_succeeded(self) -> bool:
        return self.success and self.failed_collections == 0

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "success": self.success,
            "migrationMode": self.mode.value if self.mode else None,
            "totalCollections": self.total_collections,
            "successfulCollections": self.successful_collections,
            "failedCollections": self.failed_collections,
            "totalDocuments": self.total_documents,
            "migratedDocuments": self.migrated_documents,
            "results": [r.to_dict() for r in self.results],
        }
        if self.mode == MigrationMode.INCREMENTAL:
            data["newDocuments"] = self.new_documents
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class Permissions:
    """Permisos confirmados en el destino. Todos arrancan en False."""

    read: bool = False
    write: bool = False
    update: bool = False
    delete: bool = False

    @property
    def all_granted(self) -> bool:
        return self.read and self.write and self.update and self.delete

    def to_dict(self) -> Dict[str, bool]:
        return {
            "read": self.read,
            "write": self.write,
            "update": self.update,
            "delete": self.delete,
        }


@dataclass(frozen=True)
class SourceTestResult:
    logical_name: str
    collection_count: int
    read_permission: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dbName": self.logical_name,
            "collections": self.collection_count,
            "readPermission": self.read_permission,
        }


@dataclass
class TargetTestResult:
    logical_name: str
    permissions: Permissions = field(default_factory=Permissions)
    error: Optional[str] = None

    @property
    def all_permissions_granted(self) -> bool:
        return self.permissions.all_granted

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "dbName": self.logical_name,
            "permissions": self.permissions.to_dict(),
            "allPermissionsGranted": self.all_permissions_granted,
        }
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class ConnectionTestReport:
    """Resultado combinado de probar origen y destino."""

    source: bool = False
    target: bool = False
    source_details: Optional[SourceTestResult] = None
    target_details: Optional[TargetTestResult] = None
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.source and self.target

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "source": self.source,
            "target": self.target,
            "sourceDetails": self.source_details.to_dict() if self.source_details else {},
            "targetDetails": self.target_details.to_dict() if self.target_details else {},
            "errors": dict(self.errors),
        }
