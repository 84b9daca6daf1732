"""Per-file import accumulation and rendering.

An ``ImportRegistry`` collects import requests from every fragment-producing
call that contributes to one file, merges them, and renders a single
deterministic import block:

* external (package) modules first, then relative modules, each group sorted
  by module specifier, with one blank line between the two groups;
* within a module, the value import precedes a separate ``import type`` line;
* a symbol requested both as a value and as a type collapses to the value
  import;
* one local name bound to two different imports is an error, whether they
  come from one module or from two.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from .errors import ImportConflictError


_ALIAS_RE = re.compile(r"^\s*(?P<name>[A-Za-z_$][\w$]*)(?:\s+as\s+(?P<alias>[A-Za-z_$][\w$]*))?\s*$")


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImportRequest:
    """One call's worth of imported symbols from a single module."""

    module_specifier: str
    symbols: frozenset[str]
    type_only: bool = False


@dataclass
class ConsolidatedImport:
    """Merged view of every request made against one module."""

    module_specifier: str
    value_symbols: set[str] = field(default_factory=set)
    type_symbols: set[str] = field(default_factory=set)

    @property
    def is_relative(self) -> bool:
        return is_relative_specifier(self.module_specifier)

    def effective_type_symbols(self) -> set[str]:
        """Type-only symbols that are not already imported as values."""
        return self.type_symbols - self.value_symbols

    def render_lines(self) -> list[str]:
        lines: list[str] = []
        if self.value_symbols:
            lines.append(_import_line(self.value_symbols, self.module_specifier))
        type_symbols = self.effective_type_symbols()
        if type_symbols:
            lines.append(
                _import_line(type_symbols, self.module_specifier, type_only=True)
            )
        return lines


def is_relative_specifier(module_specifier: str) -> bool:
    return module_specifier.startswith(("./", "../")) or module_specifier in {".", ".."}


def local_binding(symbol: str) -> str:
    """Return the name *symbol* binds in the importing file (its alias, if any)."""
    match = _ALIAS_RE.match(symbol)
    if match is None:
        raise ValueError(f"Malformed import symbol: {symbol!r}")
    return match.group("alias") or match.group("name")


def imported_name(symbol: str) -> str:
    """Return the name *symbol* refers to in the exporting module."""
    match = _ALIAS_RE.match(symbol)
    if match is None:
        raise ValueError(f"Malformed import symbol: {symbol!r}")
    return match.group("name")


def _normalize_symbol(symbol: str) -> str:
    match = _ALIAS_RE.match(symbol)
    if match is None:
        raise ValueError(f"Malformed import symbol: {symbol!r}")
    if match.group("alias") and match.group("alias") != match.group("name"):
        return f"{match.group('name')} as {match.group('alias')}"
    return match.group("name")


def _import_line(symbols: Iterable[str], module_specifier: str, type_only: bool = False) -> str:
    keyword = "import type" if type_only else "import"
    names = ", ".join(sorted(symbols, key=local_binding))
    return f"{keyword} {{ {names} }} from '{module_specifier}'"


# ---------------------------------------------------------------------------
# ImportRegistry
# ---------------------------------------------------------------------------


class ImportRegistry:
    """Accumulates import requests for one generated file."""

    def __init__(self) -> None:
        self._modules: dict[str, ConsolidatedImport] = {}
        self._requests: list[ImportRequest] = []

    def __len__(self) -> int:
        return len(self._modules)

    @property
    def is_empty(self) -> bool:
        return not self._modules

    @property
    def requests(self) -> tuple[ImportRequest, ...]:
        return tuple(self._requests)

    def request(
        self,
        module_specifier: str,
        symbols: str | Iterable[str],
        type_only: bool = False,
    ) -> ImportRequest:
        """Record that *symbols* are imported from *module_specifier*.

        Symbols may be plain names or ``"Name as Alias"``.  Repeated requests
        are merged; validation of binding collisions is deferred to
        :meth:`render` so the registry can be filled in any order.
        """
        if not module_specifier:
            raise ValueError("module_specifier must be non-empty")
        if isinstance(symbols, str):
            symbols = [symbols]
        normalized = frozenset(_normalize_symbol(s) for s in symbols)
        if not normalized:
            raise ValueError(f"No symbols requested from {module_specifier!r}")

        entry = self._modules.setdefault(
            module_specifier, ConsolidatedImport(module_specifier)
        )
        if type_only:
            entry.type_symbols.update(normalized)
        else:
            entry.value_symbols.update(normalized)

        request = ImportRequest(module_specifier, normalized, type_only)
        self._requests.append(request)
        return request

    def modules(self) -> list[str]:
        """Module specifiers in render order."""
        return [entry.module_specifier for entry in self._ordered()]

    def consolidated(self) -> list[ConsolidatedImport]:
        return self._ordered()

    def bindings(self) -> dict[str, set[tuple[str, str]]]:
        """Map every local binding to the ``(module, imported name)`` pairs providing it."""
        providers: dict[str, set[tuple[str, str]]] = {}
        for entry in self._modules.values():
            for symbol in entry.value_symbols | entry.type_symbols:
                providers.setdefault(local_binding(symbol), set()).add(
                    (entry.module_specifier, imported_name(symbol))
                )
        return providers

    def check_conflicts(self) -> None:
        for binding, sources in sorted(self.bindings().items()):
            if len(sources) > 1:
                raise ImportConflictError(binding, sources)

    def render(self) -> str:
        """Render the consolidated import block (no trailing newline).

        Raises:
            ImportConflictError: If one local name is bound to two different
                imports, whether from one module or from two.
        """
        self.check_conflicts()
        external = [e for e in self._ordered() if not e.is_relative]
        relative = [e for e in self._ordered() if e.is_relative]

        groups: list[list[str]] = []
        for group in (external, relative):
            lines = [line for entry in group for line in entry.render_lines()]
            if lines:
                groups.append(lines)
        return "\n\n".join("\n".join(lines) for lines in groups)

    def _ordered(self) -> list[ConsolidatedImport]:
        return sorted(
            self._modules.values(),
            key=lambda e: (e.is_relative, e.module_specifier),
        )
