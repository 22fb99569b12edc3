"""
Eventos de progreso y sinks que los consumen.

El motor no sabe a dónde va el progreso: recibe un sink (cualquier objeto
con emit(event)) y le escribe eventos. El sink puede imprimir en consola,
acumular en memoria o reenviar por un socket.

Tipos de evento (campo `type` en to_dict()):
    status              → hitos del job (conectando, enumerando, colección N/M)
    collectionProgress  → avance de una colección (starting|preparing|copying|completed|failed)
    completed           → cierre del job con totales
    error               → validación fallida que impide arrancar el job
"""

import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ProgressEvent:
    """Evento base: mensaje legible y avance 0-100."""

    message: str
    progress: int

    event_type = "status"

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.event_type, "message": self.message, "progress": self.progress}


@dataclass(frozen=True)
class StatusEvent(ProgressEvent):
    event_type = "status"


@dataclass(frozen=True)
class CollectionProgressEvent(ProgressEvent):
    collection: str = ""
    status: str = "starting"
    current: int = 1
    total: int = 1

    event_type = "collectionProgress"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "collection": self.collection,
                "status": self.status,
                "current": self.current,
                "total": self.total,
            }
        )
        return data


@dataclass(frozen=True)
class CompletedEvent(ProgressEvent):
    success: bool = True
    summary: Dict[str, Any] = field(default_factory=dict)

    event_type = "completed"

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["success"] = self.success
        data.update(self.summary)
        return data


@dataclass(frozen=True)
class ErrorEvent(ProgressEvent):
    field_name: Optional[str] = None

    event_type = "error"


class ProgressSink:
    """Interfaz de sink. Las subclases implementan emit()."""

    def emit(self, event: ProgressEvent) -> None:
        raise NotImplementedError


class NullProgressSink(ProgressSink):
    """Descarta todos los eventos."""

    def emit(self, event):
        pass


class ConsoleProgressSink(ProgressSink):
    """
    Renderiza eventos en consola.

    El progreso por colección se reescribe en la misma línea; los hitos
    del job y los cierres de colección ocupan una línea propia. Los eventos
    de error van a err_stream (stderr por defecto).
    """

    STATUS_ICONS = {
        "starting": "🚚",
        "preparing": "🔍",
        "copying": "⏳",
        "completed": "✅",
        "failed": "❌",
    }

    def __init__(self, stream=None, err_stream=None):
        self.stream = stream or sys.stdout
        self.err_stream = err_stream or sys.stderr
        self._inline = False

    def emit(self, event):
        if isinstance(event, CollectionProgressEvent):
            icon = self.STATUS_ICONS.get(event.status, "•")
            line = (
                f"   {icon} [{event.current}/{event.total}] {event.collection}: "
                f"{event.message} ({event.progress}%)"
            )
            if event.status in ("completed", "failed"):
                # \033[K limpia la línea para evitar basura visual
                print(f"\r\033[K{line}", file=self.stream, flush=True)
                self._inline = False
            else:
                print(f"\r\033[K{line}", end="", file=self.stream, flush=True)
                self._inline = True
            return

        self._break_line()
        if isinstance(event, ErrorEvent):
            print(f"❌ {event.message}", file=self.err_stream)
        elif isinstance(event, CompletedEvent):
            icon = "✅" if event.success else "❌"
            print(f"{icon} {event.message}", file=self.stream)
        else:
            print(f"📍 [{event.progress:3d}%] {event.message}", file=self.stream)

    def _break_line(self):
        if self._inline:
            print(file=self.stream)
            self._inline = False
