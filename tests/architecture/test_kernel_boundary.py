"""
Kernel Boundary & Invariants Contract.

Tests that enforce the kernel's architectural boundaries:

1. oversight_kernel/** may NOT import oversight_services or oversight_config.
   The kernel never depends upward.

2. oversight_kernel/domain/** stays pure: no ORM, no driver, no engine.
   The only db import allowed is the column/rounding vocabulary in
   oversight_kernel.db.types.

3. Selectors are read-only: they may not import services.

4. The kernel invariants declaration is complete and non-empty.

These tests read source code via AST; they cannot break anything.
"""

import ast
from pathlib import Path

from oversight_kernel.invariants import (
    ALL_KERNEL_INVARIANTS,
    FORBIDDEN_KERNEL_IMPORTS,
    KernelInvariant,
)

ROOT = Path(__file__).resolve().parents[2]

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _python_files(package: str) -> list[Path]:
    """Return all .py files under a package directory of the repo."""
    return sorted((ROOT / package).rglob("*.py"))


def _extract_imports(filepath: Path) -> list[tuple[int, str]]:
    """Extract (line_number, module_string) for all imports in a file."""
    tree = ast.parse(filepath.read_text(), filename=str(filepath))

    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    found: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            for prefix in forbidden:
                if module == prefix or module.startswith(f"{prefix}."):
                    found.append(f"  {filepath.relative_to(ROOT)}:{lineno} imports '{module}'")
    return found


# ---------------------------------------------------------------------------
# Test: Kernel has no upward dependencies
# ---------------------------------------------------------------------------


class TestKernelNoUpwardDependencies:
    """oversight_kernel/** must not import the outer packages."""

    def test_kernel_files_found(self):
        assert _python_files("oversight_kernel")

    def test_kernel_does_not_import_forbidden_packages(self):
        violations = _violations("oversight_kernel", FORBIDDEN_KERNEL_IMPORTS)
        assert not violations, (
            "Kernel boundary violation: oversight_kernel/** must not import "
            "upward packages:\n" + "\n".join(violations)
        )

    def test_config_does_not_import_services(self):
        violations = _violations("oversight_config", ("oversight_services",))
        assert not violations, "\n".join(violations)


# ---------------------------------------------------------------------------
# Test: Kernel domain purity
# ---------------------------------------------------------------------------


class TestKernelDomainPurity:
    """oversight_kernel/domain/** must not import ORM or DB packages."""

    FORBIDDEN_MODULES = (
        "sqlalchemy",
        "psycopg2",
        "sqlite3",
        "oversight_kernel.db.base",
        "oversight_kernel.db.engine",
        "oversight_kernel.models",
        "oversight_kernel.services",
        "oversight_kernel.selectors",
    )

    def test_domain_no_orm_imports(self):
        violations = _violations("oversight_kernel/domain", self.FORBIDDEN_MODULES)
        assert not violations, (
            "Domain purity violation: oversight_kernel/domain/** must not "
            "import ORM, engine or shell modules:\n" + "\n".join(violations)
        )


# ---------------------------------------------------------------------------
# Test: Selectors are read-only
# ---------------------------------------------------------------------------


class TestSelectorsReadOnly:
    def test_selectors_do_not_import_services(self):
        violations = _violations(
            "oversight_kernel/selectors", ("oversight_kernel.services",)
        )
        assert not violations, (
            "Selectors must not depend on services:\n" + "\n".join(violations)
        )

    def test_selectors_never_commit_or_flush(self):
        offenders: list[str] = []
        for filepath in _python_files("oversight_kernel/selectors"):
            tree = ast.parse(filepath.read_text())
            for node in ast.walk(tree):
                if (
                    isinstance(node, ast.Attribute)
                    and node.attr in {"commit", "flush", "add", "delete"}
                    and isinstance(node.value, ast.Attribute)
                    and node.value.attr == "session"
                ):
                    offenders.append(f"  {filepath.relative_to(ROOT)}:{node.lineno} session.{node.attr}")
        assert not offenders, "\n".join(offenders)


# ---------------------------------------------------------------------------
# Test: Kernel services never own the transaction
# ---------------------------------------------------------------------------


class TestServicesFlushOnly:
    def test_kernel_services_do_not_commit(self):
        offenders: list[str] = []
        for filepath in _python_files("oversight_kernel/services"):
            tree = ast.parse(filepath.read_text())
            for node in ast.walk(tree):
                if (
                    isinstance(node, ast.Call)
                    and isinstance(node.func, ast.Attribute)
                    and node.func.attr == "commit"
                    and isinstance(node.func.value, ast.Attribute)
                    and node.func.value.attr in {"session", "_session"}
                ):
                    offenders.append(f"  {filepath.relative_to(ROOT)}:{node.lineno}")
        assert not offenders, (
            "Kernel services must flush only; the facade commits:\n" + "\n".join(offenders)
        )


# ---------------------------------------------------------------------------
# Test: Invariants declaration
# ---------------------------------------------------------------------------


class TestInvariantsDeclaration:
    def test_invariants_non_empty(self):
        assert len(ALL_KERNEL_INVARIANTS) == len(KernelInvariant)
        assert len(ALL_KERNEL_INVARIANTS) >= 6

    def test_every_invariant_documented(self):
        source = (ROOT / "oversight_kernel" / "invariants.py").read_text()
        tree = ast.parse(source)
        enum_class = next(
            n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == "KernelInvariant"
        )
        body = enum_class.body
        for i, stmt in enumerate(body):
            if isinstance(stmt, ast.Assign):
                following = body[i + 1] if i + 1 < len(body) else None
                assert isinstance(following, ast.Expr) and isinstance(
                    following.value, ast.Constant
                ), f"{stmt.targets[0].id} has no docstring"
