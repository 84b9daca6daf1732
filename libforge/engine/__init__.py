"""libforge engine -- deterministic source synthesis and generation planning.

Quick usage::

    from libforge.engine import generate
    from libforge.config import WorkspaceContext

    files = generate({"name": "order", "submodules": ["cart"]}, WorkspaceContext(scope="@acme"))
    for f in files:
        print(f.relative_path)
"""

from libforge.engine.builder import Fragment, FragmentKind, SourceBuilder
from libforge.engine.errors import (
    CrossReferenceError,
    GenerationError,
    ImportConflictError,
    NameValidationError,
    OptionConflictError,
    PlanDependencyError,
)
from libforge.engine.imports import ConsolidatedImport, ImportRegistry, ImportRequest
from libforge.engine.naming import NamingVariant, pluralize, resolve
from libforge.engine.orchestrator import (
    GeneratedFile,
    GenerationRun,
    GeneratorOrchestrator,
    RunState,
    check_package_references,
    generate,
    generate_stack,
)
from libforge.engine.planner import (
    DomainSpec,
    FileTask,
    GenerationPlan,
    GenerationPlanner,
    LibraryType,
    Phase,
    Platform,
    SubModuleSpec,
    stack_specs,
)

__all__ = [
    "ConsolidatedImport",
    "CrossReferenceError",
    "DomainSpec",
    "FileTask",
    "Fragment",
    "FragmentKind",
    "GeneratedFile",
    "GenerationError",
    "GenerationPlan",
    "GenerationPlanner",
    "GenerationRun",
    "GeneratorOrchestrator",
    "ImportConflictError",
    "ImportRegistry",
    "ImportRequest",
    "LibraryType",
    "NameValidationError",
    "NamingVariant",
    "OptionConflictError",
    "Phase",
    "Platform",
    "PlanDependencyError",
    "RunState",
    "SourceBuilder",
    "SubModuleSpec",
    "check_package_references",
    "generate",
    "generate_stack",
    "pluralize",
    "resolve",
    "stack_specs",
]
