"""
Configuración centralizada para la herramienta de migración MongoDB → MongoDB.

ARQUITECTURA:
Motor de migración de colecciones entre dos bases MongoDB con dos modos:
- complete: Reemplazo destructivo (drop + insert de cada colección)
- incremental: Aditivo, solo inserta documentos cuyo _id no existe en destino

FLUJO DE MIGRACIÓN:
1. Validar cadenas de conexión (endpoint.py)
2. Conectar origen y destino con timeouts acotados (connection.py)
3. Enumerar colecciones del origen y migrarlas en orden (orchestrator.py)

USO DE LAS FUNCIONES HELPER:
    # Obtener configuración de un modo
    mode_config = get_mode_config('incremental')
    policy = mode_config['replacement_policy']  # 'keep_existing'

    # Listar modos disponibles para menús
    for name in get_mode_names():
        print(name)
"""

import os
from dotenv import load_dotenv

# Carga las variables del archivo .env en las variables de entorno del sistema
load_dotenv(override=True)

# --- Cadenas de conexión por defecto (se ofrecen en los prompts del CLI) ---
SOURCE_URI = os.getenv("SOURCE_URI") or ""
TARGET_URI = os.getenv("TARGET_URI") or ""

# --- Formato de cadena de conexión ---
SUPPORTED_SCHEMES = ("mongodb://", "mongodb+srv://")

# --- Timeouts de MongoDB (milisegundos) ---
MONGO_SERVER_SELECTION_TIMEOUT_MS = int(
    os.getenv("MONGO_SERVER_SELECTION_TIMEOUT_MS") or 5000
)
MONGO_CONNECT_TIMEOUT_MS = int(os.getenv("MONGO_CONNECT_TIMEOUT_MS") or 10000)
MONGO_SOCKET_TIMEOUT_MS = int(os.getenv("MONGO_SOCKET_TIMEOUT_MS") or 45000)

# Keyword arguments que recibe pymongo.MongoClient
MONGO_TIMEOUTS = {
    "serverSelectionTimeoutMS": MONGO_SERVER_SELECTION_TIMEOUT_MS,
    "connectTimeoutMS": MONGO_CONNECT_TIMEOUT_MS,
    "socketTimeoutMS": MONGO_SOCKET_TIMEOUT_MS,
}

# --- Prueba de permisos ---
# Colección desechable usada por tester.py, se elimina al terminar
PROBE_COLLECTION = os.getenv("PROBE_COLLECTION") or "migration_test_collection"

# --- Configuración de modos de migración ---
# Cada modo define:
# - aliases: Valores alternativos aceptados en la entrada (ej: valor legado del front)
# - replacement_policy: 'drop_existing' o 'keep_existing'
# - migrator_module: Módulo en migrators/ que implementa el modo
# - description: Descripción para menús y mensajes de estado

MIGRATION_MODES = {
    "complete": {
        "aliases": [],
        "replacement_policy": "drop_existing",
        "migrator_module": "complete",
        "description": "Complete (drop existing collections)",
    },
    "incremental": {
        "aliases": ["newOnly", "new_only"],
        "replacement_policy": "keep_existing",
        "migrator_module": "incremental",
        "description": "New documents only (preserve existing documents)",
    },
}


# --- Funciones Helper ---


def get_mode_config(mode_name: str) -> dict:
    """
    Obtiene la configuración de un modo de migración por nombre.

    Args:
        mode_name: Nombre canónico del modo ('complete' o 'incremental')

    Returns:
        dict: Configuración del modo con keys:
              - aliases: Lista de nombres alternativos
              - replacement_policy: 'drop_existing' o 'keep_existing'
              - migrator_module: Nombre del módulo en migrators/
              - description: Descripción legible

    Raises:
        KeyError: Si el modo no está configurado

    Ejemplo:
        >>> get_mode_config('complete')['replacement_policy']
        'drop_existing'
    """
    if mode_name not in MIGRATION_MODES:
        available = ", ".join(MIGRATION_MODES.keys())
        raise KeyError(
            f"Modo '{mode_name}' no está configurado.\n"
            f"Modos disponibles: {available}"
        )
    return MIGRATION_MODES[mode_name]


def get_mode_names() -> list:
    """Retorna los nombres canónicos de los modos, en orden de menú."""
    return list(MIGRATION_MODES.keys())
