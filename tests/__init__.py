"""
Suite de tests para la herramienta de migración MongoDB → MongoDB.

Los tests NO se conectan a un servidor real: usan los dobles en memoria
de tests/helpers.py inyectados vía client_factory. Validan:
- Sintaxis de código Python
- Configuración y resolución de cadenas de conexión
- Conexiones, migradores, prueba de permisos y orquestador
"""
