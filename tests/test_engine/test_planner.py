"""Tests for generation planning.

Covers:
- File sets for plain, CQRS and RPC domains
- Phase ordering and dependency ordering
- Submodule resolution (kinds, aliases, fallback, RPC defaults)
- Data-access, feature and infra layers, and the stack split
- Validation failures mapped to the error taxonomy
- topological_order edge cases
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from libforge.config import WorkspaceContext
from libforge.engine.errors import NameValidationError, OptionConflictError, PlanDependencyError
from libforge.engine.naming import resolve
from libforge.engine.planner import (
    DomainSpec,
    FileTask,
    GenerationPlan,
    GenerationPlanner,
    LibraryType,
    Phase,
    stack_specs,
    topological_order,
)
from libforge.templates.options import TemplateOptions
from libforge.templates.submodules import GENERIC, SubModuleRegistry, SubModuleTemplate


pytestmark = pytest.mark.unit

ROOT = "libs/contract/product"


def _index(plan: GenerationPlan, path: str) -> int:
    return plan.paths().index(path)


# ---------------------------------------------------------------------------
# File sets
# ---------------------------------------------------------------------------


class TestFileSets:
    def test_plain_domain(self, product_plan: GenerationPlan):
        assert product_plan.paths() == [
            f"{ROOT}/package.json",
            f"{ROOT}/tsconfig.json",
            f"{ROOT}/project.json",
            f"{ROOT}/README.md",
            f"{ROOT}/CLAUDE.md",
            f"{ROOT}/src/lib/errors.ts",
            f"{ROOT}/src/lib/entities.ts",
            f"{ROOT}/src/lib/ports.ts",
            f"{ROOT}/src/lib/events.ts",
            f"{ROOT}/src/index.ts",
        ]
        assert product_plan.package_name == "@myorg/contract-product"
        assert product_plan.source_root == f"{ROOT}/src"
        assert product_plan.project_name == "contract-product"

    def test_cqrs_adds_three_files(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "product", "includeCQRS": True}, workspace)
        for key in ("commands", "queries", "projections"):
            assert f"{ROOT}/src/lib/{key}.ts" in plan.paths()
        assert _index(plan, f"{ROOT}/src/lib/projections.ts") < _index(plan, f"{ROOT}/src/lib/ports.ts")

    def test_rpc_adds_three_files(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan(DomainSpec(name="product", include_rpc=True), workspace)
        for key in ("rpc-errors", "rpc-definitions", "rpc-group"):
            assert f"{ROOT}/src/lib/{key}.ts" in plan.paths()

    def test_workspace_scope_and_libs_dir(self, planner: GenerationPlanner):
        plan = planner.plan({"name": "product"}, WorkspaceContext(scope="acme", libs_dir="packages"))
        assert plan.package_name == "@acme/contract-product"
        assert plan.project_root == "packages/contract/product"

    def test_phases(self, product_plan: GenerationPlan):
        assert len(product_plan.by_phase(Phase.INFRASTRUCTURE)) == 5
        assert len(product_plan.by_phase(Phase.DOMAIN)) == 5
        assert product_plan.by_phase(Phase.SUBMODULE) == []

    def test_every_task_follows_its_dependencies(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan(
            {"name": "order", "includeCQRS": True, "submodules": ["cart", "checkout"]}, workspace
        )
        seen: set[str] = set()
        for task in plan:
            assert task.depends_on <= seen, task.relative_path
            seen.add(task.relative_path)
        assert len(seen) == len(plan)

    def test_plan_is_deterministic(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        spec = {"name": "order", "includeRPC": True, "submodules": ["cart", "management"]}
        assert planner.plan(spec, workspace).paths() == planner.plan(spec, workspace).paths()

    def test_task_lookup(self, product_plan: GenerationPlan):
        task = product_plan.task(f"{ROOT}/src/index.ts")
        assert task.template_id == "contract/index"
        assert task.variant.class_name == "Product"
        with pytest.raises(KeyError):
            product_plan.task("missing.ts")


# ---------------------------------------------------------------------------
# Submodules
# ---------------------------------------------------------------------------


class TestSubmodules:
    def test_cart_tasks_follow_parent_index(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "order", "submodules": ["cart"]}, workspace)
        parent_index = _index(plan, "libs/contract/order/src/index.ts")
        cart = plan.by_phase(Phase.SUBMODULE)
        assert [t.relative_path.rsplit("/", 1)[1] for t in cart] == [
            "errors.ts",
            "entities.ts",
            "events.ts",
            "rpc-errors.ts",
            "rpc-definitions.ts",
            "index.ts",
        ]
        assert all(_index(plan, t.relative_path) > parent_index for t in cart)
        assert all(t.variant.class_name == "Cart" for t in cart)
        assert all(t.options.parent.class_name == "Order" for t in cart)

    def test_submodule_rpc_pulls_in_parent_rpc(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "order", "submodules": ["cart"]}, workspace)
        assert "libs/contract/order/src/lib/rpc-definitions.ts" in plan.paths()

    def test_submodule_rpc_can_be_disabled(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "order", "submodules": [{"name": "cart", "includeRPC": False}]}, workspace)
        assert not any("rpc" in path for path in plan.paths())

    def test_alias_and_fallback_kinds(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan(
            {"name": "shop", "submodules": ["order-management", "reviews"]}, workspace
        )
        index = plan.task("libs/contract/shop/src/index.ts")
        assert index.options.submodule_kinds == {"order-management": "management", "reviews": "generic"}
        assert index.options.submodules == ("order-management", "reviews")

    def test_explicit_kind(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "shop", "submodules": [{"name": "basket", "kind": "cart"}]}, workspace)
        task = plan.task("libs/contract/shop/src/basket/entities.ts")
        assert task.options.kind == "cart"


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


class TestLayers:
    def test_data_access_files(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "product", "libraryType": "data-access"}, workspace)
        root = "libs/data-access/product"
        assert [t.relative_path for t in plan.by_phase(Phase.DOMAIN)] == [
            f"{root}/src/lib/shared/queries.ts",
            f"{root}/src/lib/repository.ts",
            f"{root}/src/lib/server/layers.ts",
            f"{root}/src/index.ts",
        ]
        assert plan.package_name == "@myorg/data-access-product"
        assert plan.task(f"{root}/src/lib/repository.ts").template_id == "data-access/repository"
        assert plan.task(f"{root}/src/index.ts").template_id == "data-access/index"

    def test_data_access_cqrs_adds_projection_repository(
        self, planner: GenerationPlanner, workspace: WorkspaceContext
    ):
        plan = planner.plan({"name": "product", "libraryType": "data-access", "includeCQRS": True}, workspace)
        projection = "libs/data-access/product/src/lib/projection-repository.ts"
        layers = plan.task("libs/data-access/product/src/lib/server/layers.ts")
        assert projection in layers.depends_on
        assert _index(plan, projection) < _index(plan, layers.relative_path)

    def test_feature_files(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan(
            {"name": "product", "libraryType": "feature", "includeCQRS": True, "includeRPC": True}, workspace
        )
        src = "libs/feature/product/src"
        assert [t.relative_path for t in plan.by_phase(Phase.DOMAIN)] == [
            f"{src}/lib/server/service.ts",
            f"{src}/lib/server/cqrs.ts",
            f"{src}/lib/server/layers.ts",
            f"{src}/lib/rpc/errors.ts",
            f"{src}/lib/rpc/handlers.ts",
            f"{src}/index.ts",
        ]
        assert f"{src}/lib/rpc/errors.ts" in plan.task(f"{src}/lib/rpc/handlers.ts").depends_on

    def test_feature_without_rpc(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "product", "libraryType": "feature"}, workspace)
        assert not any("/rpc/" in path for path in plan.paths())

    def test_infra_files(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "cache", "libraryType": "infra"}, workspace)
        src = "libs/infra/cache/src"
        assert plan.paths()[5:] == [
            f"{src}/lib/service/errors.ts",
            f"{src}/lib/service/config.ts",
            f"{src}/lib/service/interface.ts",
            f"{src}/lib/providers/memory.ts",
            f"{src}/lib/layers/server-layers.ts",
            f"{src}/index.ts",
        ]
        assert plan.project_name == "infra-cache"

    def test_project_files_use_shared_templates(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        plan = planner.plan({"name": "cache", "libraryType": "infra"}, workspace)
        ids = [task.template_id for task in plan.by_phase(Phase.INFRASTRUCTURE)]
        assert ids == [
            "project/package-json",
            "project/tsconfig",
            "project/project-json",
            "project/readme",
            "project/claude-md",
        ]

    def test_stack_specs(self):
        spec = DomainSpec(name="order", include_rpc=True, include_cqrs=True, submodules=["cart"])
        contract, data_access, feature = stack_specs(spec)
        assert [s.library_type for s in (contract, data_access, feature)] == [
            LibraryType.CONTRACT,
            LibraryType.DATA_ACCESS,
            LibraryType.FEATURE,
        ]
        assert [s.name for s in contract.submodules] == ["cart"]
        assert data_access.submodules == [] and not data_access.include_rpc
        assert feature.submodules == [] and feature.include_rpc
        assert all(s.include_cqrs for s in (contract, data_access, feature))

    def test_stack_specs_plan_cleanly(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        spec = DomainSpec(name="order", include_rpc=True, submodules=["cart"], library_type=LibraryType.INFRA)
        roots = [planner.plan(s, workspace).project_root for s in stack_specs(spec)]
        assert roots == ["libs/contract/order", "libs/data-access/order", "libs/feature/order"]


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidation:
    def test_empty_name(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(NameValidationError):
            planner.plan({"name": ""}, workspace)

    def test_duplicate_submodule(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(NameValidationError, match="duplicate"):
            planner.plan({"name": "order", "submodules": ["cart", "Cart"]}, workspace)

    def test_submodule_named_lib(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(PlanDependencyError):
            planner.plan({"name": "order", "submodules": ["lib"]}, workspace)

    def test_submodule_named_like_parent(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(PlanDependencyError):
            planner.plan({"name": "order", "submodules": ["order"]}, workspace)

    def test_unknown_kind(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(OptionConflictError) as exc_info:
            planner.plan({"name": "order", "submodules": [{"name": "x", "kind": "nope"}]}, workspace)
        assert exc_info.value.option == "kind"

    def test_cqrs_on_submodule(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(OptionConflictError) as exc_info:
            planner.plan({"name": "order", "submodules": [{"name": "cart", "includeCQRS": True}]}, workspace)
        assert exc_info.value.target == "cart"

    def test_rpc_on_kind_without_operations(self, workspace: WorkspaceContext):
        planner = GenerationPlanner(SubModuleRegistry([SubModuleTemplate("notes", "Notes")], fallback=GENERIC))
        with pytest.raises(OptionConflictError) as exc_info:
            planner.plan({"name": "order", "submodules": [{"name": "notes", "includeRPC": True}]}, workspace)
        assert exc_info.value.option == "include_rpc"
        assert exc_info.value.target == "notes"

    @pytest.mark.parametrize("name", ["schema", "context", "effect", "option", "rpc-group", "layer"])
    def test_domain_named_like_an_effect_import(
        self, planner: GenerationPlanner, workspace: WorkspaceContext, name: str
    ):
        with pytest.raises(NameValidationError, match="collides with an Effect import") as exc_info:
            planner.plan({"name": name}, workspace)
        assert exc_info.value.name == name

    @pytest.mark.parametrize("name", ["route-tag", "sort-options", "event-metadata"])
    def test_domain_named_like_a_shared_declaration(
        self, planner: GenerationPlanner, workspace: WorkspaceContext, name: str
    ):
        with pytest.raises(NameValidationError, match="collides with a shared declaration"):
            planner.plan({"name": name}, workspace)

    def test_submodule_named_like_an_effect_import(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(NameValidationError, match="collides") as exc_info:
            planner.plan({"name": "order", "submodules": ["data"]}, workspace)
        assert exc_info.value.name == "data"

    def test_name_containing_a_framework_symbol_is_fine(
        self, planner: GenerationPlanner, workspace: WorkspaceContext
    ):
        plan = planner.plan({"name": "schema-registry", "submodules": ["effect-log"]}, workspace)
        assert plan.variant.class_name == "SchemaRegistry"

    def test_submodules_only_on_contracts(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(OptionConflictError) as exc_info:
            planner.plan({"name": "order", "libraryType": "feature", "submodules": ["cart"]}, workspace)
        assert exc_info.value.option == "submodules"
        assert exc_info.value.target == "feature"

    @pytest.mark.parametrize("library_type", ["data-access", "infra"])
    def test_rpc_rejected_on_layer(
        self, planner: GenerationPlanner, workspace: WorkspaceContext, library_type: str
    ):
        with pytest.raises(OptionConflictError) as exc_info:
            planner.plan({"name": "product", "libraryType": library_type, "includeRPC": True}, workspace)
        assert exc_info.value.option == "include_rpc"

    def test_cqrs_rejected_on_infra(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(OptionConflictError) as exc_info:
            planner.plan({"name": "cache", "libraryType": "infra", "includeCQRS": True}, workspace)
        assert exc_info.value.option == "include_cqrs"

    def test_unknown_library_type(self, planner: GenerationPlanner, workspace: WorkspaceContext):
        with pytest.raises(ValidationError):
            planner.plan({"name": "product", "libraryType": "util"}, workspace)


# ---------------------------------------------------------------------------
# topological_order
# ---------------------------------------------------------------------------


def _task(path: str, *depends: str) -> FileTask:
    return FileTask(path, "contract/errors", Phase.DOMAIN, resolve("x"), TemplateOptions(), frozenset(depends))


class TestTopologicalOrder:
    def test_reorders_by_dependency(self):
        ordered = topological_order([_task("a", "b"), _task("b"), _task("c")])
        assert [t.relative_path for t in ordered] == ["b", "a", "c"]

    def test_cycle(self):
        with pytest.raises(PlanDependencyError) as exc_info:
            topological_order([_task("a", "b"), _task("b", "a")])
        assert exc_info.value.paths == ("a", "b")

    def test_unplanned_dependency(self):
        with pytest.raises(PlanDependencyError, match="unplanned"):
            topological_order([_task("a", "ghost")])

    def test_duplicate_paths(self):
        with pytest.raises(PlanDependencyError):
            topological_order([_task("a"), _task("a")])
