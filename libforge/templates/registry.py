"""Template catalog and the standalone ``render_file`` entry point."""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from ..engine.builder import SourceBuilder
from ..engine.errors import OptionConflictError
from ..engine.naming import NamingVariant, resolve
from . import contract, data_access, feature, infra, infrastructure, submodules
from .options import TemplateOptions
from .submodules import DEFAULT_SUBMODULES, SubModuleRegistry


TemplateRoutine = Callable[[SourceBuilder, NamingVariant, TemplateOptions], None]


@dataclass(frozen=True)
class Template:
    template_id: str
    routine: TemplateRoutine
    description: str = ""


class TemplateRegistry:
    """Maps template ids (``"contract/errors"``...) to content routines."""

    def __init__(self, submodules: SubModuleRegistry = DEFAULT_SUBMODULES) -> None:
        self.submodules = submodules
        self._templates: dict[str, Template] = {}

    def register(self, template_id: str, routine: TemplateRoutine, description: str = "") -> None:
        if template_id in self._templates:
            raise ValueError(f"Template {template_id!r} is already registered")
        self._templates[template_id] = Template(template_id, routine, description)

    def get(self, template_id: str) -> Template:
        try:
            return self._templates[template_id]
        except KeyError:
            raise OptionConflictError(
                "template_id", template_id, "no template is registered under this id"
            ) from None

    def __contains__(self, template_id: str) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates.values())

    def ids(self) -> list[str]:
        return sorted(self._templates)

    def render(self, template_id: str, variant: NamingVariant, options: TemplateOptions) -> str:
        """Run one template against a fresh ``SourceBuilder`` and render it."""
        builder = SourceBuilder()
        self.get(template_id).routine(builder, variant, options)
        return builder.render()


def build_registry(submodule_registry: SubModuleRegistry = DEFAULT_SUBMODULES) -> TemplateRegistry:
    """Build the catalog of every layer, bound to *submodule_registry*."""
    registry = TemplateRegistry(submodule_registry)

    def bound(routine: Callable[..., None]) -> TemplateRoutine:
        return functools.partial(routine, registry=submodule_registry)

    registry.register("project/package-json", bound(infrastructure.build_package_json), "package.json")
    registry.register("project/tsconfig", bound(infrastructure.build_tsconfig), "tsconfig.json")
    registry.register("project/project-json", bound(infrastructure.build_project_json), "project.json")
    registry.register("project/readme", bound(infrastructure.build_readme), "README.md")
    registry.register("project/claude-md", bound(infrastructure.build_claude_md), "CLAUDE.md")

    registry.register("contract/errors", contract.build_errors, "Domain and repository errors")
    registry.register("contract/entities", contract.build_entities, "Domain entities")
    registry.register("contract/ports", contract.build_ports, "Repository and service ports")
    registry.register("contract/events", contract.build_events, "Domain events")
    registry.register("contract/commands", contract.build_commands, "CQRS commands")
    registry.register("contract/queries", contract.build_queries, "CQRS queries")
    registry.register("contract/projections", contract.build_projections, "CQRS projections")
    registry.register("contract/rpc-errors", contract.build_rpc_errors, "RPC errors")
    registry.register("contract/rpc-definitions", contract.build_rpc_definitions, "RPC definitions")
    registry.register("contract/rpc-group", contract.build_rpc_group, "RPC group")
    registry.register("contract/index", contract.build_index, "Package barrel")

    registry.register("submodule/errors", bound(submodules.build_errors), "Submodule errors")
    registry.register("submodule/entities", bound(submodules.build_entities), "Submodule entities")
    registry.register("submodule/events", bound(submodules.build_events), "Submodule events")
    registry.register("submodule/rpc-errors", bound(submodules.build_rpc_errors), "Submodule RPC errors")
    registry.register(
        "submodule/rpc-definitions", bound(submodules.build_rpc_definitions), "Submodule RPC definitions"
    )
    registry.register("submodule/index", bound(submodules.build_index), "Submodule barrel")

    registry.register("data-access/queries", data_access.build_queries, "Filtering, sorting and pagination")
    registry.register("data-access/repository", data_access.build_repository, "In-memory repository")
    registry.register(
        "data-access/projection-repository", data_access.build_projection_repository, "Projection repository"
    )
    registry.register("data-access/layers", data_access.build_layers, "Data-access layers")
    registry.register("data-access/index", data_access.build_index, "Data-access barrel")

    registry.register("feature/service", feature.build_service, "Service implementation")
    registry.register("feature/cqrs", feature.build_cqrs, "Command and query handlers")
    registry.register("feature/layers", feature.build_layers, "Feature layers")
    registry.register("feature/rpc-errors", feature.build_rpc_errors, "RPC error mapping")
    registry.register("feature/rpc-handlers", feature.build_rpc_handlers, "RPC handlers")
    registry.register("feature/index", feature.build_index, "Feature barrel")

    registry.register("infra/errors", infra.build_errors, "Service errors")
    registry.register("infra/config", infra.build_config, "Service configuration")
    registry.register("infra/interface", infra.build_interface, "Service port")
    registry.register("infra/memory-provider", infra.build_memory_provider, "In-memory provider")
    registry.register("infra/server-layers", infra.build_server_layers, "Service layers")
    registry.register("infra/index", infra.build_index, "Infrastructure barrel")
    return registry


DEFAULT_TEMPLATES = build_registry()


def list_templates(registry: TemplateRegistry | None = None) -> list[str]:
    return (registry or DEFAULT_TEMPLATES).ids()


def render_file(
    template_id: str,
    variant: NamingVariant | str,
    options: TemplateOptions | Mapping[str, Any] | None = None,
    registry: TemplateRegistry | None = None,
) -> str:
    """Render one template in isolation, without planning a whole library.

    Args:
        template_id: A registered id such as ``"contract/errors"``.
        variant: The ``NamingVariant`` to render for, or a raw name to resolve.
        options: ``TemplateOptions`` or a mapping of its fields.
        registry: Template catalog to use; defaults to the built-in one.

    Raises:
        NameValidationError: If *variant* is a raw name that does not resolve.
        OptionConflictError: If *template_id* is not registered.
    """
    if isinstance(variant, str):
        variant = resolve(variant)
    if options is None:
        options = TemplateOptions()
    elif not isinstance(options, TemplateOptions):
        options = TemplateOptions.model_validate(dict(options))
    return (registry or DEFAULT_TEMPLATES).render(template_id, variant, options)
