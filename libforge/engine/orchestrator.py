"""Plan execution.

``GeneratorOrchestrator.execute`` walks a ``GenerationPlan`` in order, gives
every task a fresh ``SourceBuilder``, runs the task's template routine and
collects the rendered text.  After each TypeScript file is rendered, its
relative imports and re-exports are checked against the exports of the files
they target; because every task follows its dependencies, those targets have
already been rendered.

A run either returns every file or raises: callers never see a partial list.
``GenerationRun`` tracks one invocation through its states.

Imports between libraries (a feature importing from its contract) are checked
once every library of a stack is rendered, by ``check_package_references``.
"""

from __future__ import annotations

import json
import logging
import posixpath
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..config import WorkspaceContext
from ..templates.registry import DEFAULT_TEMPLATES, TemplateRegistry
from .errors import CrossReferenceError, PlanDependencyError
from .planner import DomainSpec, FileTask, GenerationPlan, GenerationPlanner, stack_specs
from .references import collect_exports, collect_references, resolve_package, resolve_specifier

logger = logging.getLogger(__name__)


class GeneratedFile(BaseModel):
    """One rendered file, relative to the workspace root."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    relative_path: str = Field(..., alias="path")
    content: str


class RunState(str, Enum):
    NOT_STARTED = "not_started"
    PLANNING = "planning"
    PLANNING_FAILED = "planning_failed"
    PLANNED = "planned"
    EXECUTING = "executing"
    EXECUTION_FAILED = "execution_failed"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self in {RunState.PLANNING_FAILED, RunState.EXECUTION_FAILED, RunState.COMPLETED}


# ---------------------------------------------------------------------------
# GeneratorOrchestrator
# ---------------------------------------------------------------------------


class GeneratorOrchestrator:
    """Executes generation plans against a template registry."""

    def __init__(self, templates: TemplateRegistry | None = None) -> None:
        self.templates = templates or DEFAULT_TEMPLATES

    def execute(self, plan: GenerationPlan) -> list[GeneratedFile]:
        """Render every task of *plan* in order.

        Raises:
            GenerationError: Any failure of any task; nothing is returned.
        """
        planned = frozenset(plan.paths())
        exports: dict[str, frozenset[str]] = {}
        results: list[GeneratedFile] = []

        for task in plan.tasks:
            content = self.render_task(task)
            if task.is_source:
                self._check_references(task, content, planned, exports)
                exports[task.relative_path] = collect_exports(content)
            results.append(GeneratedFile(relative_path=task.relative_path, content=content))
            logger.debug("Rendered %s (%d bytes)", task.relative_path, len(content))

        return results

    def render_task(self, task: FileTask) -> str:
        return self.templates.render(task.template_id, task.variant, task.options)

    @staticmethod
    def _check_references(
        task: FileTask,
        content: str,
        planned: frozenset[str],
        exports: Mapping[str, frozenset[str]],
    ) -> None:
        for reference in collect_references(content):
            target = resolve_specifier(task.relative_path, reference.specifier, planned)
            if target is None:
                continue
            if target not in exports:
                raise PlanDependencyError(
                    f"{task.relative_path} references {target} before it is generated",
                    [task.relative_path, target],
                )
            missing = reference.names - exports[target]
            if missing:
                raise CrossReferenceError(task.relative_path, target, missing)


# ---------------------------------------------------------------------------
# GenerationRun
# ---------------------------------------------------------------------------


class GenerationRun:
    """One invocation: NOT_STARTED -> PLANNING -> PLANNED -> EXECUTING -> COMPLETED.

    Failures land in ``PLANNING_FAILED`` or ``EXECUTION_FAILED``.  A run is
    used once; retrying means creating a new run with corrected input.
    """

    def __init__(
        self,
        spec: DomainSpec | Mapping[str, Any],
        workspace: WorkspaceContext,
        planner: GenerationPlanner | None = None,
        orchestrator: GeneratorOrchestrator | None = None,
    ) -> None:
        self.spec = spec
        self.workspace = workspace
        self.planner = planner or GenerationPlanner()
        self.orchestrator = orchestrator or GeneratorOrchestrator()
        self.state = RunState.NOT_STARTED
        self.plan: GenerationPlan | None = None
        self.files: list[GeneratedFile] | None = None
        self.error: Exception | None = None

    def run(self) -> list[GeneratedFile]:
        if self.state is not RunState.NOT_STARTED:
            raise RuntimeError(f"Generation run already {self.state.value}")

        self.state = RunState.PLANNING
        try:
            plan = self.planner.plan(self.spec, self.workspace)
        except Exception as exc:
            self.state = RunState.PLANNING_FAILED
            self.error = exc
            raise
        self.plan = plan
        self.state = RunState.PLANNED

        self.state = RunState.EXECUTING
        try:
            files = self.orchestrator.execute(plan)
        except Exception as exc:
            self.state = RunState.EXECUTION_FAILED
            self.error = exc
            raise
        self.files = files
        self.state = RunState.COMPLETED
        logger.info("Generated %d files for %s", len(files), plan.package_name)
        return files


def generate(
    spec: DomainSpec | Mapping[str, Any],
    workspace: WorkspaceContext | None = None,
    templates: TemplateRegistry | None = None,
) -> list[GeneratedFile]:
    """Plan and execute one domain in a single call.

    Args:
        spec: A ``DomainSpec`` or a mapping of its fields (camelCase option
            names such as ``includeCQRS`` are accepted).
        workspace: Explicit workspace facts; defaults to ``WorkspaceContext()``.
        templates: Template catalog; its submodule registry also drives planning.
    """
    registry = templates or DEFAULT_TEMPLATES
    run = GenerationRun(
        spec,
        workspace or WorkspaceContext(),
        planner=GenerationPlanner(registry.submodules),
        orchestrator=GeneratorOrchestrator(registry),
    )
    return run.run()


# ---------------------------------------------------------------------------
# Library stacks
# ---------------------------------------------------------------------------


def check_package_references(files: Iterable[GeneratedFile]) -> None:
    """Check imports between generated libraries.

    Every ``package.json`` among *files* registers its package name; an
    import of that package (or of one of its subpaths) must name symbols
    the targeted barrel exports.  Imports of packages outside *files* are
    not checked.

    Raises:
        PlanDependencyError: A subpath import whose barrel was not generated.
        CrossReferenceError: A name the targeted barrel does not export.
    """
    contents = {file.relative_path: file.content for file in files}
    packages = {
        json.loads(content)["name"]: f"{posixpath.dirname(path)}/src"
        for path, content in contents.items()
        if posixpath.basename(path) == "package.json"
    }
    exports = {path: collect_exports(content) for path, content in contents.items() if path.endswith(".ts")}

    for path, content in contents.items():
        if not path.endswith(".ts"):
            continue
        for reference in collect_references(content):
            target = resolve_package(reference.specifier, packages)
            if target is None:
                continue
            if target not in exports:
                raise PlanDependencyError(
                    f"{path} imports {reference.specifier!r}, which was not generated",
                    [path, target],
                )
            missing = reference.names - exports[target]
            if missing:
                raise CrossReferenceError(path, target, missing)


def generate_stack(
    spec: DomainSpec | Mapping[str, Any],
    workspace: WorkspaceContext | None = None,
    templates: TemplateRegistry | None = None,
) -> list[GeneratedFile]:
    """Generate the contract, data-access and feature libraries of one domain.

    Each library is its own run; the combined output is then checked with
    :func:`check_package_references`.  ``library_type`` in *spec* is ignored.
    """
    if not isinstance(spec, DomainSpec):
        spec = DomainSpec.model_validate(dict(spec))
    workspace = workspace or WorkspaceContext()
    layers = stack_specs(spec)
    files: list[GeneratedFile] = []
    for layer_spec in layers:
        files.extend(generate(layer_spec, workspace, templates))
    check_package_references(files)
    logger.info("Generated %d files across %d libraries", len(files), len(layers))
    return files
