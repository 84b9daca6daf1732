"""Options passed to every template routine, and the per-layer file record."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from ..engine.naming import NamingVariant


@dataclass(frozen=True)
class SourceFile:
    """One ``src/`` file a library layer emits.

    ``path`` is relative to ``src/``.  ``depends`` holds the keys of the files
    this one imports from inside the same library.
    """

    key: str
    path: str
    purpose: str
    depends: tuple[str, ...] = ()


class TemplateOptions(BaseModel):
    """Everything a template needs besides the task's own ``NamingVariant``.

    The planner fills one of these per task; ``render_file`` accepts the same
    fields as a plain dict for rendering a single template in isolation.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    scope: str = Field(default="@myorg", description="npm package scope")
    library_type: str = Field(default="contract")
    package_name: str = Field(default="", description="Derived from scope when empty")
    project_root: str = Field(default="", description="Workspace-relative library directory")
    platform: str = Field(default="node")
    include_cqrs: bool = Field(default=False)
    include_rpc: bool = Field(default=False, description="Whether this file set emits RPC files")
    description: str = Field(default="")
    tags: tuple[str, ...] = Field(default=())
    version: str = Field(default="0.1.0")
    since: str | None = Field(default=None, description="Stamped into headers as @since")
    parent: NamingVariant | None = Field(
        default=None, description="Parent domain variant for submodule files"
    )
    kind: str | None = Field(default=None, description="Submodule kind tag")
    submodules: tuple[str, ...] = Field(
        default=(), description="File-case names of the parent's submodules"
    )
    rpc_submodules: tuple[str, ...] = Field(
        default=(), description="Submodules that emit their own RPC definitions"
    )
    submodule_kinds: dict[str, str] = Field(
        default_factory=dict, description="Submodule name -> kind tag"
    )

    def package_for(self, variant: NamingVariant) -> str:
        """Package name of the library that owns *variant*."""
        if self.package_name:
            return self.package_name
        return self.sibling_package(self.library_type, variant)

    def sibling_package(self, library_type: str, variant: NamingVariant) -> str:
        """Package of another layer of the same domain, e.g. ``@myorg/contract-product``."""
        return f"{self.scope}/{library_type}-{variant.file_name}"

    def module_path(self, variant: NamingVariant, *parts: str) -> str:
        """JSDoc ``@module`` path, e.g. ``@myorg/contract-product/errors``."""
        owner = self.parent if self.parent is not None else variant
        return "/".join([self.package_for(owner), *parts])
