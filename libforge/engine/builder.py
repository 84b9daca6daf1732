"""Ordered source-text accumulation.

``SourceBuilder`` collects fragments for one generated TypeScript file and
renders them deterministically: header doc comment first, then the
consolidated import block, then every other fragment in insertion order.  A
builder belongs to exactly one file-generation call.

Rendering reads nothing but the fragments themselves.  Values such as a
generation date or version must be supplied as fragment payloads (for example
``add_header(..., since="1.0.0")``).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .imports import ImportRegistry


SECTION_RULE = "// " + "=" * 76


class FragmentKind(str, Enum):
    """Kinds of accumulated output units."""

    HEADER = "header"
    IMPORT_BLOCK = "import_block"
    SECTION_COMMENT = "section_comment"
    RAW_BLOCK = "raw_block"
    BLANK_LINE = "blank_line"


@dataclass(frozen=True)
class FileHeader:
    """Metadata rendered as the leading JSDoc block of a file."""

    title: str
    description: str = ""
    module: str | None = None
    since: str | None = None
    see: tuple[str, ...] = ()


@dataclass(frozen=True)
class Fragment:
    kind: FragmentKind
    payload: Any = None


# ---------------------------------------------------------------------------
# SourceBuilder
# ---------------------------------------------------------------------------


class SourceBuilder:
    """Append-only fragment accumulator with a pure ``render()``.

    Every ``add_*`` method returns the builder so calls can be chained.
    Imports go to the builder's own ``ImportRegistry`` regardless of when they
    are requested; they are always emitted directly after the header.
    """

    def __init__(self, imports: ImportRegistry | None = None) -> None:
        self.imports = imports if imports is not None else ImportRegistry()
        self._fragments: list[Fragment] = []
        self._header: FileHeader | None = None

    # -- Accumulation ------------------------------------------------------

    def add_header(
        self,
        title: str,
        description: str = "",
        module: str | None = None,
        since: str | None = None,
        see: Iterable[str] = (),
    ) -> SourceBuilder:
        if self._header is not None:
            raise ValueError("File header already set")
        self._header = FileHeader(title, description, module, since, tuple(see))
        self._fragments.append(Fragment(FragmentKind.HEADER, self._header))
        return self

    def add_import(
        self,
        module_specifier: str,
        symbols: str | Iterable[str],
        type_only: bool = False,
    ) -> SourceBuilder:
        self.imports.request(module_specifier, symbols, type_only)
        return self

    def add_imports(self, specs: Iterable[dict[str, Any]]) -> SourceBuilder:
        """Request several imports at once.

        Each spec is a mapping with ``from``, ``imports`` and an optional
        ``type_only`` key.
        """
        for spec in specs:
            self.add_import(spec["from"], spec["imports"], spec.get("type_only", False))
        return self

    def add_section_comment(self, text: str) -> SourceBuilder:
        self._fragments.append(Fragment(FragmentKind.SECTION_COMMENT, text))
        return self

    def add_comment(self, text: str) -> SourceBuilder:
        """Add a ``//`` line comment (one per line of *text*)."""
        lines = "\n".join(f"// {line}".rstrip() for line in text.splitlines() or [""])
        return self.add_raw(lines)

    def add_jsdoc(self, text: str) -> SourceBuilder:
        return self.add_raw(_jsdoc(text.splitlines()))

    def add_raw(self, code: str) -> SourceBuilder:
        self._fragments.append(Fragment(FragmentKind.RAW_BLOCK, code))
        return self

    def add_blank_line(self) -> SourceBuilder:
        self._fragments.append(Fragment(FragmentKind.BLANK_LINE))
        return self

    @property
    def fragments(self) -> tuple[Fragment, ...]:
        """Snapshot of the fragments in render order."""
        ordered: list[Fragment] = []
        if self._header is not None:
            ordered.append(Fragment(FragmentKind.HEADER, self._header))
        if not self.imports.is_empty:
            ordered.append(Fragment(FragmentKind.IMPORT_BLOCK, self.imports.requests))
        ordered.extend(f for f in self._fragments if f.kind is not FragmentKind.HEADER)
        return tuple(ordered)

    # -- Rendering ---------------------------------------------------------

    def render(self) -> str:
        """Render the accumulated fragments to source text.

        Consecutive blank-line fragments collapse to one and blank lines at
        either end of the body are dropped.  Raw blocks are emitted verbatim
        apart from their leading and trailing newlines.  The text always ends
        with exactly one newline.

        Raises:
            ImportConflictError: If the import registry holds a collision.
        """
        sections: list[str] = []
        if self._header is not None:
            sections.append(_render_header(self._header))
        if not self.imports.is_empty:
            sections.append(self.imports.render().strip("\n"))
        body = self._render_body()
        if body:
            sections.append(body)
        if not sections:
            return ""
        return "\n\n".join(sections) + "\n"

    def _render_body(self) -> str:
        # None marks a blank line between blocks.
        blocks: list[str | None] = []
        for fragment in self._fragments:
            if fragment.kind is FragmentKind.HEADER:
                continue
            if fragment.kind is FragmentKind.BLANK_LINE:
                if blocks and blocks[-1] is not None:
                    blocks.append(None)
                continue
            if fragment.kind is FragmentKind.SECTION_COMMENT:
                text = "\n".join([SECTION_RULE, f"// {fragment.payload}", SECTION_RULE])
            else:
                text = str(fragment.payload).strip("\n")
            if text:
                blocks.append(text)
        while blocks and blocks[-1] is None:
            blocks.pop()
        return "\n".join("" if block is None else block for block in blocks)

    def __str__(self) -> str:
        return self.render()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _jsdoc(lines: list[str]) -> str:
    body = [f" * {line}".rstrip() for line in lines]
    return "\n".join(["/**", *body, " */"])


def _render_header(header: FileHeader) -> str:
    lines: list[str] = [header.title]
    if header.description:
        lines.append("")
        lines.extend(header.description.strip("\n").splitlines())
    tags: list[str] = []
    if header.module:
        tags.append(f"@module {header.module}")
    if header.since:
        tags.append(f"@since {header.since}")
    tags.extend(f"@see {ref}" for ref in header.see)
    if tags:
        lines.append("")
        lines.extend(tags)
    return _jsdoc(lines)
