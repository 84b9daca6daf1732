"""Scanning generated TypeScript for exported and imported names.

Only the forms the template catalog emits are recognised: named
declarations, named (re-)export lists, named import lists and namespace
re-exports.  Relative specifiers resolve to files of the same library;
workspace package specifiers resolve to the barrel of a sibling library.  This is a consistency check over generated text, not a parser.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Mapping
from dataclasses import dataclass


_DECLARATION_RE = re.compile(
    r"^export\s+(?:declare\s+)?(?:abstract\s+)?"
    r"(?:class|const|let|var|function|interface|type|enum)\s+([A-Za-z_$][\w$]*)",
    re.MULTILINE,
)
_EXPORT_LIST_RE = re.compile(
    r"^export\s+(?:type\s+)?\{([^}]*)\}(?:\s*from\s*['\"]([^'\"]+)['\"])?",
    re.MULTILINE,
)
_EXPORT_NAMESPACE_RE = re.compile(
    r"^export\s+\*\s+as\s+([A-Za-z_$][\w$]*)\s+from\s*['\"]([^'\"]+)['\"]",
    re.MULTILINE,
)
_IMPORT_LIST_RE = re.compile(
    r"^import\s+(?:type\s+)?\{([^}]*)\}\s*from\s*['\"]([^'\"]+)['\"]",
    re.MULTILINE,
)


@dataclass(frozen=True)
class Reference:
    """Names one file takes from another through an import or re-export."""

    specifier: str
    names: frozenset[str]


def _split_names(body: str) -> list[tuple[str, str]]:
    """Return ``(source_name, local_name)`` pairs from a ``{ ... }`` list."""
    pairs = []
    for item in body.split(","):
        item = item.strip()
        if not item:
            continue
        if item.startswith("type "):
            item = item[len("type "):].strip()
        source, _, alias = item.partition(" as ")
        pairs.append((source.strip(), (alias or source).strip()))
    return pairs


def collect_exports(content: str) -> frozenset[str]:
    """Every name *content* exports."""
    names = set(_DECLARATION_RE.findall(content))
    for body, _ in _EXPORT_LIST_RE.findall(content):
        names.update(local for _, local in _split_names(body))
    names.update(name for name, _ in _EXPORT_NAMESPACE_RE.findall(content))
    return frozenset(names)


def collect_references(content: str) -> list[Reference]:
    """Every named import and re-export in *content*, relative or not."""
    references = []
    for body, specifier in _IMPORT_LIST_RE.findall(content):
        references.append(Reference(specifier, frozenset(src for src, _ in _split_names(body))))
    for body, specifier in _EXPORT_LIST_RE.findall(content):
        if specifier:
            references.append(
                Reference(specifier, frozenset(src for src, _ in _split_names(body)))
            )
    for _, specifier in _EXPORT_NAMESPACE_RE.findall(content):
        references.append(Reference(specifier, frozenset()))
    return references


def resolve_specifier(source_path: str, specifier: str, known: set[str] | frozenset[str]) -> str | None:
    """Map a relative *specifier* in *source_path* to a known file path.

    Tries ``<target>.ts`` then ``<target>/index.ts``.  Returns ``None`` for
    package imports and for targets outside *known*.
    """
    if not specifier.startswith(("./", "../")):
        return None
    target = posixpath.normpath(posixpath.join(posixpath.dirname(source_path), specifier))
    for candidate in (f"{target}.ts", f"{target}/index.ts"):
        if candidate in known:
            return candidate
    return None


def resolve_package(specifier: str, packages: Mapping[str, str]) -> str | None:
    """Map a workspace package *specifier* to the barrel it names.

    *packages* maps package names to their ``src`` directories.  A bare
    package name targets ``src/index.ts``; a subpath export such as
    ``@acme/contract-order/cart`` targets ``src/cart/index.ts``.  Returns
    ``None`` for packages outside *packages*.
    """
    for name, source_root in packages.items():
        if specifier == name:
            return f"{source_root}/index.ts"
        if specifier.startswith(f"{name}/"):
            return f"{source_root}/{specifier[len(name) + 1:]}/index.ts"
    return None
