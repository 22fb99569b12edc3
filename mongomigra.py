"""
Script principal de migración de bases MongoDB → MongoDB.

Arquitectura:
- mongomigra.py: Interfaz interactiva (prompts, menús, resumen)
- orchestrator.py: Job de migración (conexiones, enumeración, agregación)
- migrators/*.py: Lógica específica por modo (implementan BaseMigrator)
- tester.py: Prueba de conexiones y permisos
- config.py: Configuración centralizada (.env)

Flujo de ejecución:
1. Usuario elige acción del menú (migrar / probar conexiones)
2. Ingresa cadenas de conexión de origen y destino (con validación)
3. Selecciona modo de migración (complete / incremental)
4. Confirma explícitamente
5. El orquestador migra cada colección y reporta progreso en consola
6. Se muestra el resultado por colección y el resumen final

Uso:
    python mongomigra.py

    # Valores por defecto de los prompts desde .env:
    # SOURCE_URI=mongodb://localhost:27017/origen
    # TARGET_URI=mongodb://localhost:27017/destino
"""

import sys

import config
from endpoint import validate_descriptor
from models import MigrationMode
from orchestrator import migrate_database
from progress import ConsoleProgressSink
import tester


_LABELS = {"source": "origen", "target": "destino"}


def prompt_connection_string(label, default=""):
    """
    Pide una cadena de conexión hasta que sea válida.

    Args:
        label: 'source' o 'target'
        default: Valor sugerido (de .env), se usa si el usuario no escribe nada

    Returns:
        str: Cadena de conexión válida
    """
    hint = f" [{default}]" if default else ""
    while True:
        value = input(
            f"Ingrese la cadena de conexión de {_LABELS[label]} (incluyendo base){hint}: "
        ).strip()
        value = value or default

        check = validate_descriptor(value, label)
        if check is True:
            return value
        print(f"❌ {check}")


def select_mode():
    """
    Muestra menú interactivo para seleccionar el modo de migración.

    Returns:
        MigrationMode: Modo seleccionado
    """
    modes = config.get_mode_names()

    print("\n" + "=" * 70)
    print("🔀 MODOS DE MIGRACIÓN")
    print("=" * 70)

    for i, mode_name in enumerate(modes, 1):
        mode_config = config.get_mode_config(mode_name)
        print(f"\n{i}. {mode_name}")
        print(f"   └─ {mode_config['description']}")

    print("\n" + "=" * 70)

    while True:
        choice = input("Seleccione el número de modo: ").strip()
        try:
            idx = int(choice) - 1
        except ValueError:
            print("❌ Entrada inválida. Ingrese un número.")
            continue

        if 0 <= idx < len(modes):
            return MigrationMode.parse(modes[idx])
        print("❌ Número fuera de rango. Intente nuevamente.")


def confirm(question):
    response = input(f"\n{question} (s/n): ").strip().lower()
    return response == "s"


def print_results(job_result):
    """Imprime el resultado por colección y el resumen del job."""
    print("\n" + "=" * 70)
    print("📊 RESULTADOS DE LA MIGRACIÓN")
    print("=" * 70)
    print(f"📍 Origen: {job_result.source_name} → Destino: {job_result.target_name}")

    for result in job_result.results:
        if result.success:
            if result.new_count is not None:
                print(
                    f"   ✅ {result.collection_name}: {result.new_count} nuevos "
                    f"de {result.source_count} documentos"
                )
            else:
                print(
                    f"   ✅ {result.collection_name}: {result.migrated_count}/"
                    f"{result.source_count} documentos migrados"
                )
        else:
            print(f"   ❌ {result.collection_name}: Falló - {result.error_message}")

    print("\n" + "-" * 70)
    print(f"   Total colecciones: {job_result.total_collections}")
    print(f"   Exitosas: {job_result.successful_collections}")
    print(f"   Fallidas: {job_result.failed_collections}")
    if job_result.mode == MigrationMode.INCREMENTAL:
        print(f"   Documentos nuevos: {job_result.new_documents:,}")
    print(
        f"   Documentos migrados: {job_result.migrated_documents:,}/"
        f"{job_result.total_documents:,}"
    )


def print_connection_report(report):
    """Imprime el resultado de probar origen y destino."""
    print("\n" + "=" * 70)
    print("🔌 PRUEBA DE CONEXIONES")
    print("=" * 70)

    if report.source_details:
        details = report.source_details
        print(
            f"   ✅ Origen: {details.logical_name} "
            f"({details.collection_count} colecciones)"
        )
    else:
        print(f"   ❌ Origen: {report.errors.get('source')}")

    if report.target_details:
        details = report.target_details
        icon = "✅" if details.all_permissions_granted else "⚠️ "
        print(f"   {icon} Destino: {details.logical_name}")
        for permission, granted in details.permissions.to_dict().items():
            print(f"      {'✅' if granted else '❌'} {permission}")
        if details.error:
            print(f"      Detalle: {details.error}")
    else:
        print(f"   ❌ Destino: {report.errors.get('target')}")


def run_connection_test():
    source_uri = prompt_connection_string("source", config.SOURCE_URI)
    target_uri = prompt_connection_string("target", config.TARGET_URI)

    report = tester.test_connections(source_uri, target_uri, sink=ConsoleProgressSink())
    print_connection_report(report)
    return report.success


def run_migration():
    source_uri = prompt_connection_string("source", config.SOURCE_URI)
    target_uri = prompt_connection_string("target", config.TARGET_URI)
    mode = select_mode()

    if mode == MigrationMode.COMPLETE:
        print("\n⚠️  ADVERTENCIA: Las colecciones existentes en destino serán reemplazadas.")

    if not confirm("¿Está seguro de que desea continuar con la migración?"):
        print("\n👋 Migración cancelada por usuario")
        return True

    print(f"\n🚚 Iniciando migración ({mode.value})...")
    job_result = migrate_database(source_uri, target_uri, mode, sink=ConsoleProgressSink())

    if not job_result.success:
        print(f"\n❌ Migración fallida: {job_result.error}", file=sys.stderr)
        return False

    print_results(job_result)
    return True


def main():
    """
    Función principal que coordina el flujo interactivo.

    Exit Codes:
        0: Éxito o cancelación
        1: Error de conexión o migración
    """
    print("=" * 70)
    print("🚀 SISTEMA DE MIGRACIÓN MONGODB → MONGODB")
    print("=" * 70)

    actions = {"1": run_migration, "2": run_connection_test}

    try:
        while True:
            print("\n1. Migrar base de datos")
            print("2. Probar conexiones")
            choice = input("Seleccione una opción (0 para salir): ").strip()

            if choice == "0":
                print("\n👋 Hasta luego")
                sys.exit(0)

            action = actions.get(choice)
            if action is None:
                print("❌ Opción inválida. Intente nuevamente.")
                continue

            success = action()
            print("\n" + "=" * 70)
            if success:
                print("✅ PROCESO COMPLETADO")
            else:
                print("❌ PROCESO FINALIZADO CON ERRORES")
            print("=" * 70)
            sys.exit(0 if success else 1)

    except (KeyboardInterrupt, EOFError):
        print("\n\n👋 Operación cancelada por usuario")
        sys.exit(0)


if __name__ == "__main__":
    main()
