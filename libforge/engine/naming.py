"""Identifier spelling derivation.

``resolve`` turns one raw name (``"order-management"``, ``"OrderManagement"``,
``"ORDER_MANAGEMENT"``...) into every case spelling the templates need.  The
result is a pure function of its input: nothing is memoised between calls, so
two unrelated runs can never observe each other's values.

Examples::

    resolve("order-management").class_name     -> "OrderManagement"
    resolve("order-management").property_name  -> "orderManagement"
    resolve("order-management").constant_name  -> "ORDER_MANAGEMENT"
    resolve("category").plural_file_name       -> "categories"
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import NameValidationError


# ---------------------------------------------------------------------------
# Reserved words of the generated language
# ---------------------------------------------------------------------------

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "any", "as", "async", "await", "boolean", "break", "case", "catch",
        "class", "const", "constructor", "continue", "debugger", "declare",
        "default", "delete", "do", "else", "enum", "export", "extends",
        "false", "finally", "for", "from", "function", "if", "implements",
        "import", "in", "instanceof", "interface", "let", "module", "never",
        "new", "null", "number", "object", "of", "package", "private",
        "protected", "public", "readonly", "require", "return", "static",
        "string", "super", "switch", "symbol", "this", "throw", "true", "try",
        "type", "typeof", "undefined", "unknown", "var", "void", "while",
        "with", "yield",
    }
)

_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")
_ACRONYM_BOUNDARY_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")
_VOWELS = frozenset("aeiou")


# ---------------------------------------------------------------------------
# NamingVariant
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NamingVariant:
    """Every case spelling derived from one input name."""

    raw: str
    tokens: tuple[str, ...]
    class_name: str
    property_name: str
    file_name: str
    constant_name: str
    plural_file_name: str
    plural_class_name: str

    def symbol(self, suffix: str = "", prefix: str = "") -> str:
        """Spell a role-suffixed identifier, e.g. ``symbol("NotFoundError")``.

        Templates build every cross-file symbol through this method, so two
        files that reference the same logical symbol always agree on its name.
        """
        return f"{prefix}{self.class_name}{suffix}"

    @property
    def plural_property_name(self) -> str:
        return self.plural_class_name[0].lower() + self.plural_class_name[1:]

    @property
    def title(self) -> str:
        """Space-separated display form (``"Order Management"``)."""
        return " ".join(token.capitalize() for token in self.tokens)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def tokenize(name: str) -> list[str]:
    """Split *name* on separators and camelCase boundaries, lowercased."""
    spaced = _ACRONYM_BOUNDARY_RE.sub(r"\1 \2", name)
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", spaced)
    return [token.lower() for token in _SEPARATOR_RE.split(spaced) if token]


def pluralize(word: str) -> str:
    """Best-effort English plural of a single lowercase token.

    Only suffix rules are applied; irregular plurals need an explicit override.
    """
    if len(word) > 1 and word.endswith("y") and word[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    return word + "s"


def resolve(name: str, plural: str | None = None) -> NamingVariant:
    """Derive a ``NamingVariant`` from *name*.

    Args:
        name: Raw input name in any casing convention.
        plural: Optional explicit plural (e.g. ``"people"`` for ``"person"``),
            tokenised the same way as *name*.

    Raises:
        NameValidationError: If *name* is empty, contains a non-ASCII letter,
            has no alphabetic token, starts with a digit, or spells a
            reserved word.
    """
    tokens = _validated_tokens(name)
    class_name = "".join(token.capitalize() for token in tokens)
    property_name = tokens[0] + "".join(token.capitalize() for token in tokens[1:])
    if property_name in RESERVED_WORDS:
        raise NameValidationError(name, f"{property_name!r} is a reserved word")

    if plural is not None:
        plural_tokens = _validated_tokens(plural)
    else:
        plural_tokens = [*tokens[:-1], pluralize(tokens[-1])]

    return NamingVariant(
        raw=name,
        tokens=tuple(tokens),
        class_name=class_name,
        property_name=property_name,
        file_name="-".join(tokens),
        constant_name="_".join(token.upper() for token in tokens),
        plural_file_name="-".join(plural_tokens),
        plural_class_name="".join(token.capitalize() for token in plural_tokens),
    )


def _validated_tokens(name: str) -> list[str]:
    if not isinstance(name, str):
        raise NameValidationError(name, "name must be a string")
    if not name.strip():
        raise NameValidationError(name, "name is empty")
    # Letters outside ASCII would otherwise split the name like separators.
    foreign = sorted({char for char in name if char.isalpha() and not char.isascii()})
    if foreign:
        raise NameValidationError(name, f"non-ASCII letters are not allowed: {''.join(foreign)}")
    tokens = tokenize(name)
    if not any(char.isalpha() for token in tokens for char in token):
        raise NameValidationError(name, "name contains no alphabetic characters")
    if tokens[0][0].isdigit():
        raise NameValidationError(name, "name must not start with a digit")
    return tokens
