"""Error taxonomy for the generation engine.

Every error raised while planning or executing a generation run derives from
``GenerationError``.  Errors carry the offending identifier(s) as attributes so
the outermost caller (usually the CLI) can surface them without parsing the
message.  None of these are recovered inside the engine.
"""

from __future__ import annotations

from collections.abc import Iterable


class GenerationError(Exception):
    """Base class for every failure that aborts a generation run."""


class NameValidationError(GenerationError):
    """Raised when an input name cannot produce valid identifiers."""

    def __init__(self, name: object, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid name {name!r}: {reason}")


class OptionConflictError(GenerationError):
    """Raised when an option has no generation rule for the target kind."""

    def __init__(self, option: str, target: str, reason: str = "") -> None:
        self.option = option
        self.target = target
        message = f"Option {option!r} is not supported for {target!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ImportConflictError(GenerationError):
    """Raised when one local name would be bound to two different imports in one file."""

    def __init__(self, symbol: str, sources: Iterable[tuple[str, str]]) -> None:
        self.symbol = symbol
        self.sources = tuple(sorted(set(sources)))
        self.modules = tuple(sorted({module for module, _ in self.sources}))
        joined = " and ".join(f"{name!r} from {module!r}" for module, name in self.sources)
        super().__init__(f"Local name {symbol!r} is bound to {joined}")


class PlanDependencyError(GenerationError):
    """Raised when the planned file graph is not a valid DAG."""

    def __init__(self, message: str, paths: Iterable[str] = ()) -> None:
        self.paths = tuple(paths)
        super().__init__(message)


class CrossReferenceError(GenerationError):
    """Raised when a generated file references a symbol its target never exports."""

    def __init__(self, source: str, target: str, symbols: Iterable[str]) -> None:
        self.source = source
        self.target = target
        self.symbols = tuple(sorted(symbols))
        super().__init__(
            f"{source} references {', '.join(self.symbols)} from {target}, "
            "which does not export them"
        )
