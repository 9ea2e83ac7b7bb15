from __future__ import annotations

import ast
from pathlib import Path


def _package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _source_files() -> list[Path]:
    root = _package_root()
    files: list[Path] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def _tree(path: Path) -> ast.AST:
    return ast.parse(path.read_text(encoding="utf-8"), filename=str(path))


def _imported_modules(tree: ast.AST) -> list[tuple[str, int]]:
    found: list[tuple[str, int]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            found.extend((alias.name, node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and not node.level:
            found.append((node.module, node.lineno))
    return found


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        if not isinstance(func, ast.Attribute) or func.attr not in {"run", "check_output", "Popen"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def test_subprocess_only_in_platform_process() -> None:
    root = _package_root()
    offenders: list[str] = []
    for path in _source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "platform/process.py":
            continue
        for line in _direct_subprocess_calls(_tree(path)):
            offenders.append(f"{rel}:{line}: direct subprocess call")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)


def test_rich_only_in_output_console() -> None:
    root = _package_root()
    offenders: list[str] = []
    for path in _source_files():
        rel = path.relative_to(root).as_posix()
        if rel == "output/console.py":
            continue
        for module, line in _imported_modules(_tree(path)):
            if module == "rich" or module.startswith("rich."):
                offenders.append(f"{rel}:{line}: direct rich import '{module}'")

    assert not offenders, "Direct rich usage policy violations:\n" + "\n".join(offenders)


def test_core_does_not_import_upper_layers() -> None:
    root = _package_root()
    upper = ("pubgate.services", "pubgate.cli", "pubgate.npm", "pubgate.git", "pubgate.output")
    offenders: list[str] = []
    for path in sorted((root / "core").rglob("*.py")):
        for module, line in _imported_modules(_tree(path)):
            if module.startswith(upper):
                offenders.append(f"core/{path.name}:{line}: imports {module}")

    assert not offenders, "Layering violations:\n" + "\n".join(offenders)
