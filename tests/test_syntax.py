"""
Test de sintaxis para todos los módulos del proyecto.

Valida que no hay errores de sintaxis Python antes de ejecutar migraciones.
Útil para detectar errores introducidos durante refactoring.
"""

import py_compile
import os
import sys

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import config


def check_syntax():
    """
    Compila todos los .py del proyecto sin ejecutarlos.

    Retorna:
        tuple: (success: bool, errors: list)
    """
    project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    errors = []

    # Archivos core (siempre validar)
    core_files = [
        "mongomigra.py",
        "config.py",
        "errors.py",
        "endpoint.py",
        "connection.py",
        "models.py",
        "progress.py",
        "tester.py",
        "orchestrator.py",
        "migrators/base.py",
    ]

    # Archivos de migradores (dinámico basado en config.MIGRATION_MODES)
    migrator_files = [
        f"migrators/{config.get_mode_config(mode)['migrator_module']}.py"
        for mode in config.get_mode_names()
    ]

    files_to_check = core_files + migrator_files

    print("🔍 Validando sintaxis de archivos Python...")
    print(f"   Total archivos: {len(files_to_check)}")

    for filepath in files_to_check:
        full_path = os.path.join(project_root, filepath)

        if not os.path.exists(full_path):
            errors.append(f"Archivo no encontrado: {filepath}")
            print(f"   ❌ {filepath} (no existe)")
            continue

        try:
            py_compile.compile(full_path, doraise=True)
            print(f"   ✅ {filepath}")
        except py_compile.PyCompileError as e:
            errors.append(f"{filepath}: {e}")
            print(f"   ❌ {filepath}: {e}")

    return len(errors) == 0, errors


def test_syntax():
    success, errors = check_syntax()
    assert success, f"Errores de sintaxis: {errors}"


if __name__ == "__main__":
    success, errors = check_syntax()

    print("\n" + "=" * 70)

    if success:
        print("✅ Todos los archivos tienen sintaxis correcta")
        print("=" * 70)
        sys.exit(0)
    else:
        print(f"❌ Errores encontrados: {len(errors)}")
        print("=" * 70)
        for error in errors:
            print(f"   - {error}")
        sys.exit(1)
