"""Generation planning.

``GenerationPlanner.plan`` validates a ``DomainSpec`` completely and turns it
into a ``GenerationPlan``: every file the run will produce, each bound to its
``NamingVariant`` and template, ordered so that every task comes after the
tasks it depends on.

Phases and edges:

* project-file tasks (manifest, compiler config, docs) precede every
  domain task;
* inside the domain phase, files depend on the files they import from (as
  listed by the layer catalog in ``libforge.templates.layout``), and
  ``src/index.ts`` depends on every other domain file;
* every submodule task depends on the parent's ``src/index.ts`` (and so on the
  whole parent file set), plus the submodule's own intra-set edges.

Nothing is executed here; planning either succeeds completely or raises.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import WorkspaceContext
from ..templates.layout import layer_for, source_files
from ..templates.options import TemplateOptions
from ..templates.resources import check_class_name
from ..templates.submodules import DEFAULT_SUBMODULES, SubModuleRegistry, submodule_files
from .errors import NameValidationError, OptionConflictError, PlanDependencyError
from .naming import NamingVariant, resolve

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class Phase(str, Enum):
    """Stage of generation; earlier phases never depend on later ones."""

    INFRASTRUCTURE = "infrastructure"
    DOMAIN = "domain"
    SUBMODULE = "submodule"


class Platform(str, Enum):
    NODE = "node"
    BROWSER = "browser"
    EDGE = "edge"


class LibraryType(str, Enum):
    """Layers of the library architecture.

    Contracts declare the domain; data-access and feature libraries import
    from the contract of the same domain, and infra libraries stand alone.
    """

    CONTRACT = "contract"
    DATA_ACCESS = "data-access"
    FEATURE = "feature"
    INFRA = "infra"


# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class SubModuleSpec(BaseModel):
    """A submodule of the parent domain (``"cart"`` under ``"order"``)."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Submodule name in any casing")
    kind: str | None = Field(
        default=None, description="Registered submodule kind; looked up by name when unset"
    )
    include_rpc: bool | None = Field(default=None, alias="includeRPC")
    include_cqrs: bool | None = Field(default=None, alias="includeCQRS")


class DomainSpec(BaseModel):
    """What to generate: one domain name plus generation options."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., description="Domain name, e.g. 'product' or 'order-management'")
    include_cqrs: bool = Field(default=False, alias="includeCQRS")
    include_rpc: bool = Field(default=False, alias="includeRPC")
    platform: Platform = Field(default=Platform.NODE)
    submodules: list[SubModuleSpec] = Field(default_factory=list)
    library_type: LibraryType = Field(default=LibraryType.CONTRACT, alias="libraryType")
    plural: str | None = Field(default=None, description="Explicit plural of the domain name")
    description: str = Field(default="")
    tags: list[str] = Field(default_factory=list)
    version: str = Field(default="0.1.0")
    since: str | None = Field(default=None, description="Stamped into file headers as @since")

    @field_validator("submodules", mode="before")
    @classmethod
    def _coerce_submodules(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, bytes)):
            raise ValueError("submodules must be a list")
        return [{"name": item} if isinstance(item, str) else item for item in value]


# ---------------------------------------------------------------------------
# Plan records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FileTask:
    """One file to generate.

    ``depends_on`` holds the relative paths of prerequisite tasks; paths are
    unique within a plan and serve as task identity.
    """

    relative_path: str
    template_id: str
    phase: Phase
    variant: NamingVariant
    options: TemplateOptions = field(compare=False)
    depends_on: frozenset[str] = frozenset()

    @property
    def is_source(self) -> bool:
        return self.relative_path.endswith(".ts")


@dataclass(frozen=True)
class GenerationPlan:
    """Dependency-ordered tasks for one domain and its submodules."""

    spec: DomainSpec
    workspace: WorkspaceContext
    variant: NamingVariant
    package_name: str
    project_root: str
    tasks: tuple[FileTask, ...]

    def __iter__(self):
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    @property
    def project_name(self) -> str:
        """Workspace project name, e.g. ``contract-product``."""
        return f"{self.spec.library_type.value}-{self.variant.file_name}"

    @property
    def source_root(self) -> str:
        return f"{self.project_root}/src"

    def paths(self) -> list[str]:
        return [task.relative_path for task in self.tasks]

    def task(self, relative_path: str) -> FileTask:
        for task in self.tasks:
            if task.relative_path == relative_path:
                return task
        raise KeyError(relative_path)

    def by_phase(self, phase: Phase) -> list[FileTask]:
        return [task for task in self.tasks if task.phase is phase]


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------

INFRASTRUCTURE_FILES: tuple[tuple[str, str], ...] = (
    ("package.json", "project/package-json"),
    ("tsconfig.json", "project/tsconfig"),
    ("project.json", "project/project-json"),
    ("README.md", "project/readme"),
    ("CLAUDE.md", "project/claude-md"),
)

SUBMODULE_EDGES: dict[str, tuple[str, ...]] = {
    "errors": (),
    "entities": (),
    "events": ("entities",),
    "rpc-errors": (),
    "rpc-definitions": ("entities", "rpc-errors"),
}

RESERVED_SUBMODULE_NAMES = frozenset({"lib"})


@dataclass(frozen=True)
class _ResolvedSubModule:
    variant: NamingVariant
    kind: str
    include_rpc: bool


class GenerationPlanner:
    """Validates a ``DomainSpec`` and produces a ``GenerationPlan``."""

    def __init__(self, submodules: SubModuleRegistry = DEFAULT_SUBMODULES) -> None:
        self.submodules = submodules

    def plan(
        self,
        spec: DomainSpec | Mapping[str, Any],
        workspace: WorkspaceContext,
    ) -> GenerationPlan:
        """Plan every file for *spec* inside *workspace*.

        Raises:
            NameValidationError: Invalid domain or submodule name, a class name
                that collides with an imported or shared symbol, or a
                duplicate submodule.
            OptionConflictError: An option with no generation rule, or one the
                requested layer does not support.
            PlanDependencyError: The task graph is not a DAG.
        """
        if not isinstance(spec, DomainSpec):
            spec = DomainSpec.model_validate(dict(spec))

        layer = layer_for(spec.library_type.value)
        self._check_layer_options(spec)
        variant = resolve(spec.name, plural=spec.plural)
        check_class_name(variant)
        subs = self._resolve_submodules(spec, variant)

        library_type = spec.library_type.value
        project_root = workspace.project_root(library_type, variant.file_name)
        package_name = workspace.package_name(library_type, variant.file_name)
        emits_parent_rpc = spec.include_rpc or any(sub.include_rpc for sub in subs)

        base = TemplateOptions(
            scope=workspace.scope,
            library_type=library_type,
            package_name=package_name,
            project_root=project_root,
            platform=spec.platform.value,
            include_cqrs=spec.include_cqrs,
            include_rpc=emits_parent_rpc,
            description=spec.description,
            tags=tuple(spec.tags),
            version=spec.version,
            since=spec.since,
            submodules=tuple(sub.variant.file_name for sub in subs),
            rpc_submodules=tuple(sub.variant.file_name for sub in subs if sub.include_rpc),
            submodule_kinds={sub.variant.file_name: sub.kind for sub in subs},
        )

        tasks: list[FileTask] = []
        infra_paths = frozenset(f"{project_root}/{name}" for name, _ in INFRASTRUCTURE_FILES)
        for name, template_id in INFRASTRUCTURE_FILES:
            tasks.append(
                FileTask(f"{project_root}/{name}", template_id, Phase.INFRASTRUCTURE, variant, base)
            )

        src = f"{project_root}/src"
        files = source_files(base)
        paths = {file.key: f"{src}/{file.path}" for file in files}
        for file in files:
            depends = infra_paths | {paths[dep] for dep in file.depends}
            tasks.append(
                FileTask(paths[file.key], f"{library_type}/{file.key}", Phase.DOMAIN, variant, base, depends)
            )
        parent_index = f"{src}/index.ts"
        tasks.append(
            FileTask(
                parent_index,
                f"{layer.library_type}/index",
                Phase.DOMAIN,
                variant,
                base,
                infra_paths | frozenset(paths.values()),
            )
        )

        for sub in subs:
            tasks.extend(self._submodule_tasks(sub, variant, base, project_root, parent_index))

        ordered = topological_order(tasks)
        logger.debug(
            "Planned %d files for %s (%d submodules)", len(ordered), package_name, len(subs)
        )
        return GenerationPlan(
            spec=spec,
            workspace=workspace,
            variant=variant,
            package_name=package_name,
            project_root=project_root,
            tasks=tuple(ordered),
        )

    # -- Validation --------------------------------------------------------

    @staticmethod
    def _check_layer_options(spec: DomainSpec) -> None:
        library_type = spec.library_type
        if spec.submodules and library_type is not LibraryType.CONTRACT:
            raise OptionConflictError(
                "submodules", library_type.value, "only contract libraries have submodules"
            )
        if spec.include_rpc and library_type in (LibraryType.DATA_ACCESS, LibraryType.INFRA):
            raise OptionConflictError(
                "include_rpc", library_type.value, "RPC belongs to the contract and feature layers"
            )
        if spec.include_cqrs and library_type is LibraryType.INFRA:
            raise OptionConflictError(
                "include_cqrs", library_type.value, "infra libraries have no domain model"
            )

    def _resolve_submodules(
        self, spec: DomainSpec, parent: NamingVariant
    ) -> list[_ResolvedSubModule]:
        resolved: list[_ResolvedSubModule] = []
        seen: set[str] = set()
        for sub in spec.submodules:
            variant = resolve(sub.name)
            check_class_name(variant)
            if variant.file_name in seen:
                raise NameValidationError(sub.name, "duplicate submodule")
            seen.add(variant.file_name)
            if variant.file_name in RESERVED_SUBMODULE_NAMES:
                raise PlanDependencyError(
                    f"Submodule {sub.name!r} would overwrite the parent's src/lib directory",
                    [variant.file_name],
                )
            if variant.file_name == parent.file_name:
                raise PlanDependencyError(
                    f"Submodule {sub.name!r} cannot depend on its own parent domain",
                    [variant.file_name],
                )

            if sub.kind is not None:
                if sub.kind not in self.submodules:
                    raise OptionConflictError("kind", sub.kind, "unknown submodule kind")
                template = self.submodules.get(sub.kind)
            else:
                template = self.submodules.lookup(sub.name)

            if sub.include_cqrs and not template.supports_cqrs:
                raise OptionConflictError(
                    "include_cqrs", sub.name, f"submodule kind {template.kind!r} has no CQRS files"
                )
            if sub.include_rpc and not template.supports_rpc:
                raise OptionConflictError(
                    "include_rpc", sub.name, f"submodule kind {template.kind!r} defines no RPC operations"
                )
            include_rpc = template.supports_rpc if sub.include_rpc is None else sub.include_rpc
            resolved.append(_ResolvedSubModule(variant, template.kind, include_rpc))
        return resolved

    # -- Task construction -------------------------------------------------

    def _submodule_tasks(
        self,
        sub: _ResolvedSubModule,
        parent: NamingVariant,
        base: TemplateOptions,
        project_root: str,
        parent_index: str,
    ) -> list[FileTask]:
        options = base.model_copy(
            update={"parent": parent, "kind": sub.kind, "include_rpc": sub.include_rpc}
        )
        sub_dir = f"{project_root}/src/{sub.variant.file_name}"
        keys = submodule_files(options)
        tasks = []
        for key in keys:
            depends = {parent_index} | {f"{sub_dir}/{dep}.ts" for dep in SUBMODULE_EDGES[key]}
            tasks.append(
                FileTask(
                    f"{sub_dir}/{key}.ts",
                    f"submodule/{key}",
                    Phase.SUBMODULE,
                    sub.variant,
                    options,
                    frozenset(depends),
                )
            )
        tasks.append(
            FileTask(
                f"{sub_dir}/index.ts",
                "submodule/index",
                Phase.SUBMODULE,
                sub.variant,
                options,
                frozenset({parent_index} | {f"{sub_dir}/{key}.ts" for key in keys}),
            )
        )
        return tasks


def stack_specs(spec: DomainSpec) -> list[DomainSpec]:
    """Contract, data-access and feature specs for one domain, in build order.

    Submodules stay on the contract; data-access gets neither submodules nor
    RPC.
    """
    contract = spec.model_copy(update={"library_type": LibraryType.CONTRACT})
    data_access = spec.model_copy(
        update={"library_type": LibraryType.DATA_ACCESS, "include_rpc": False, "submodules": []}
    )
    feature = spec.model_copy(update={"library_type": LibraryType.FEATURE, "submodules": []})
    return [contract, data_access, feature]


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def topological_order(tasks: Iterable[FileTask]) -> list[FileTask]:
    """Order *tasks* so every task follows its dependencies.

    Ties are broken by insertion order, so equal inputs always yield the same
    plan.

    Raises:
        PlanDependencyError: On duplicate paths, a dependency on an unplanned
            path, or a cycle.
    """
    pending: dict[str, FileTask] = {}
    for task in tasks:
        if task.relative_path in pending:
            raise PlanDependencyError(
                f"Two tasks write {task.relative_path}", [task.relative_path]
            )
        pending[task.relative_path] = task

    for task in pending.values():
        missing = sorted(dep for dep in task.depends_on if dep not in pending)
        if missing:
            raise PlanDependencyError(
                f"{task.relative_path} depends on unplanned files: {', '.join(missing)}",
                [task.relative_path, *missing],
            )

    done: set[str] = set()
    ordered: list[FileTask] = []
    while pending:
        ready = next(
            (task for task in pending.values() if task.depends_on <= done),
            None,
        )
        if ready is None:
            stuck = sorted(pending)
            raise PlanDependencyError(
                f"Dependency cycle between: {', '.join(stuck)}", stuck
            )
        ordered.append(ready)
        done.add(ready.relative_path)
        del pending[ready.relative_path]
    return ordered
