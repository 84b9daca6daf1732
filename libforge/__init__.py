"""libforge -- deterministic scaffolding of layered TypeScript libraries.

Derives every identifier spelling from one domain name, assembles each file
from ordered fragments with a consolidated import block, and plans the parent
domain and its submodules as one dependency-ordered run.

Quick usage::

    from libforge import WorkspaceContext, generate, generate_stack

    files = generate(
        {"name": "product", "includeCQRS": True},
        WorkspaceContext(scope="@acme"),
    )

    # contract, data-access and feature libraries of one domain
    stack = generate_stack({"name": "product", "includeRPC": True})
"""

# The engine package loads the template catalog; import it first.
from libforge.engine import (
    CrossReferenceError,
    DomainSpec,
    GeneratedFile,
    GenerationError,
    GenerationPlanner,
    GenerationRun,
    GeneratorOrchestrator,
    ImportConflictError,
    NameValidationError,
    OptionConflictError,
    PlanDependencyError,
    SourceBuilder,
    SubModuleSpec,
    check_package_references,
    generate,
    generate_stack,
    resolve,
)
from libforge.config import GeneratorSettings, WorkspaceContext
from libforge.templates import render_file

__version__ = "0.1.0"

__all__ = [
    "CrossReferenceError",
    "DomainSpec",
    "GeneratedFile",
    "GenerationError",
    "GenerationPlanner",
    "GenerationRun",
    "GeneratorOrchestrator",
    "GeneratorSettings",
    "ImportConflictError",
    "NameValidationError",
    "OptionConflictError",
    "PlanDependencyError",
    "SourceBuilder",
    "SubModuleSpec",
    "WorkspaceContext",
    "check_package_references",
    "generate",
    "generate_stack",
    "render_file",
    "resolve",
]
