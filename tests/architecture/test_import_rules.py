from __future__ import annotations

import ast
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_ROOT = REPO_ROOT / "autopilot_installer"

# pathlib is allowed in the domain: Path is used as a value type there.
_IO_MODULE_PREFIXES = {
    "os",
    "subprocess",
    "shutil",
    "tempfile",
    "tarfile",
    "httpx",
    "yaml",
}


def _iter_python_files(root: Path):
    if not root.exists():
        return []
    return [p for p in root.rglob("*.py") if "__pycache__" not in p.parts]


def _imports(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    imported: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                imported.add(alias.name)
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                imported.add(node.module)
    return imported


def _forbidden_calls(path: Path) -> list[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    violations: list[str] = []

    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        lineno = getattr(node, "lineno", 0)
        if isinstance(func, ast.Attribute) and isinstance(func.value, ast.Name):
            if func.value.id == "subprocess":
                violations.append(f"L{lineno}:subprocess.{func.attr}")
            if func.value.id == "shutil":
                violations.append(f"L{lineno}:shutil.{func.attr}")
            if func.value.id == "datetime" and func.attr in {"now", "utcnow"}:
                violations.append(f"L{lineno}:datetime.{func.attr}")

    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute):
            if isinstance(node.value, ast.Name) and node.value.id == "os" and node.attr == "environ":
                violations.append(f"L{getattr(node, 'lineno', 0)}:os.environ")

    return sorted(set(violations))


@pytest.mark.installer
def test_domain_layer_has_no_direct_io_imports():
    for file in _iter_python_files(PACKAGE_ROOT / "domain"):
        imports = _imports(file)
        bad = sorted(
            imp
            for imp in imports
            if any(imp == prefix or imp.startswith(prefix + ".") for prefix in _IO_MODULE_PREFIXES)
        )
        assert not bad, f"domain module imports io/os deps: {file}: {bad}"


@pytest.mark.installer
def test_application_layer_does_not_import_infrastructure():
    forbidden = ("autopilot_installer.infrastructure", "autopilot_installer.presentation", "httpx", "yaml")
    for file in _iter_python_files(PACKAGE_ROOT / "application"):
        imports = _imports(file)
        bad = sorted(i for i in imports if any(i == p or i.startswith(p + ".") for p in forbidden))
        assert not bad, f"application imports adapters directly: {file}: {bad}"


@pytest.mark.installer
def test_application_layer_makes_no_process_or_clock_calls():
    # The clock is injected and npm runs behind DependencyInstaller. The transaction
    # touches the target only through Filesystem; post-install steps read and chmod
    # the installed tree directly.
    for file in _iter_python_files(PACKAGE_ROOT / "application"):
        bad = _forbidden_calls(file)
        assert not bad, f"application performs direct side effects: {file}: {bad}"


@pytest.mark.installer
def test_presentation_layer_does_not_import_infrastructure():
    for file in _iter_python_files(PACKAGE_ROOT / "presentation"):
        imports = _imports(file)
        bad = sorted(i for i in imports if i.startswith("autopilot_installer.infrastructure"))
        assert not bad, f"presentation imports infrastructure directly: {file}: {bad}"


@pytest.mark.installer
def test_only_the_cli_imports_the_composition_root():
    for file in _iter_python_files(PACKAGE_ROOT):
        if file.name in {"cli.py", "wiring.py"}:
            continue
        assert "autopilot_installer.infrastructure.wiring" not in _imports(file), file
