"""libforge configuration.

Typed configuration for the generator.  ``WorkspaceContext`` is the value the
engine receives explicitly (package scope, workspace root, libraries
directory); ``GeneratorSettings`` holds the outer settings the CLI and file
writer use.  Both are Pydantic v2 models so they validate at construction time
and serialise to/from JSON without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_SCOPE = "@myorg"
DEFAULT_LIBS_DIR = "libs"


class WorkspaceContext(BaseModel):
    """Workspace facts the engine needs, passed in by the caller.

    The engine never detects these itself; see ``libforge.workspace`` for the
    optional detector used by the CLI.
    """

    model_config = ConfigDict(frozen=True)

    scope: str = Field(default=DEFAULT_SCOPE, description="npm package scope, e.g. '@myorg'")
    root: Path = Field(default=Path("."), description="Workspace root directory")
    libs_dir: str = Field(default=DEFAULT_LIBS_DIR, description="Libraries directory under root")

    @field_validator("scope")
    @classmethod
    def _normalize_scope(cls, value: str) -> str:
        value = value.strip()
        if not value or value == "@":
            raise ValueError("scope must be non-empty")
        return value if value.startswith("@") else f"@{value}"

    @field_validator("libs_dir")
    @classmethod
    def _relative_libs_dir(cls, value: str) -> str:
        value = value.strip().strip("/")
        if not value or ".." in Path(value).parts:
            raise ValueError("libs_dir must be a relative directory inside the workspace")
        return value

    def package_name(self, library_type: str, file_name: str) -> str:
        """npm package name, e.g. ``@myorg/contract-product``."""
        return f"{self.scope}/{library_type}-{file_name}"

    def project_root(self, library_type: str, file_name: str) -> str:
        """Workspace-relative library directory, e.g. ``libs/contract/product``."""
        return f"{self.libs_dir}/{library_type}/{file_name}"


class GeneratorSettings(BaseModel):
    """Settings for a generation session driven from the CLI."""

    output_dir: Path = Field(default=Path("."), description="Workspace root to write into")
    scope: str | None = Field(
        default=None, description="Package scope; detected from package.json when unset"
    )
    libs_dir: str = Field(default=DEFAULT_LIBS_DIR)
    since: str | None = Field(
        default=None, description="Version stamped into file headers as @since"
    )
    dry_run: bool = Field(default=False, description="Plan and render without writing files")
    overwrite: bool = Field(default=False, description="Replace files that already exist")

    def workspace(self, detected_scope: str | None = None) -> WorkspaceContext:
        """Build the ``WorkspaceContext`` handed to the engine."""
        return WorkspaceContext(
            scope=self.scope or detected_scope or DEFAULT_SCOPE,
            root=self.output_dir,
            libs_dir=self.libs_dir,
        )

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the settings to a JSON file and return its path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorSettings":
        """Load previously-saved settings from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            LIBFORGE_OUTPUT_DIR, LIBFORGE_SCOPE, LIBFORGE_LIBS_DIR,
            LIBFORGE_SINCE, LIBFORGE_DRY_RUN, LIBFORGE_OVERWRITE.
        """
        return cls(
            output_dir=Path(os.environ.get("LIBFORGE_OUTPUT_DIR", ".")),
            scope=os.environ.get("LIBFORGE_SCOPE") or None,
            libs_dir=os.environ.get("LIBFORGE_LIBS_DIR", DEFAULT_LIBS_DIR),
            since=os.environ.get("LIBFORGE_SINCE") or None,
            dry_run=_env_flag("LIBFORGE_DRY_RUN"),
            overwrite=_env_flag("LIBFORGE_OVERWRITE"),
        )


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in {"1", "true", "yes", "on"}
