"""Tests for the standalone render_file entry point and infrastructure files."""

from __future__ import annotations

import json

import jinja2
import pytest

from libforge.config import WorkspaceContext
from libforge.engine.errors import NameValidationError, OptionConflictError
from libforge.engine.naming import resolve
from libforge.engine.orchestrator import generate
from libforge.templates import TemplateOptions, list_templates, render_file
from libforge.templates.renderer import TemplateRenderer


pytestmark = pytest.mark.unit

ROOT = "libs/contract/product"


class TestRenderFile:
    @pytest.mark.parametrize("key", ["errors", "entities", "ports", "events"])
    def test_matches_planned_output(self, product_files: dict[str, str], key: str):
        assert render_file(f"contract/{key}", "product") == product_files[f"{ROOT}/src/lib/{key}.ts"]

    def test_accepts_variant_and_options_model(self):
        text = render_file("contract/entities", resolve("product"), TemplateOptions(scope="@acme"))
        assert "@module @acme/contract-product/entities" in text

    def test_accepts_mapping(self):
        text = render_file("contract/errors", "product", {"since": "2.1.0"})
        assert " * @since 2.1.0\n" in text

    def test_is_pure(self):
        assert render_file("contract/events", "product") == render_file("contract/events", "product")

    def test_submodule_template_needs_parent(self):
        with pytest.raises(ValueError):
            render_file("submodule/entities", "cart")

    def test_submodule_template_with_parent(self, order_files: dict[str, str]):
        text = render_file(
            "submodule/rpc-definitions",
            "cart",
            {"parent": resolve("order"), "kind": "cart", "include_rpc": True},
        )
        assert text == order_files["libs/contract/order/src/cart/rpc-definitions.ts"]

    def test_unknown_template(self):
        with pytest.raises(OptionConflictError):
            render_file("contract/nope", "product")

    def test_invalid_name(self):
        with pytest.raises(NameValidationError):
            render_file("contract/errors", "")

    def test_list_templates(self):
        ids = list_templates()
        assert "contract/index" in ids
        assert "submodule/rpc-definitions" in ids
        assert "project/package-json" in ids
        assert {"data-access/index", "feature/rpc-handlers", "infra/server-layers"} <= set(ids)
        assert ids == sorted(ids)


class TestInfrastructure:
    def test_package_json_is_valid_json(self, product_files: dict[str, str]):
        manifest = json.loads(product_files[f"{ROOT}/package.json"])
        assert manifest["name"] == "@myorg/contract-product"
        assert manifest["exports"]["."]["types"] == "./src/index.ts"
        assert "@effect/rpc" not in manifest["peerDependencies"]
        assert manifest["engines"]["node"] == ">=20"

    def test_package_json_with_submodule(self, order_files: dict[str, str]):
        manifest = json.loads(order_files["libs/contract/order/package.json"])
        assert manifest["exports"]["./cart"]["import"] == "./src/cart/index.ts"
        assert "@effect/rpc" in manifest["peerDependencies"]

    @pytest.mark.parametrize(
        ("platform", "expected_lib"),
        [("node", ["ES2022"]), ("browser", ["ES2022", "DOM", "DOM.Iterable"]), ("edge", ["ES2022", "WebWorker"])],
    )
    def test_tsconfig_per_platform(self, workspace: WorkspaceContext, platform: str, expected_lib: list[str]):
        files = {f.relative_path: f.content for f in generate({"name": "product", "platform": platform}, workspace)}
        tsconfig = json.loads(files[f"{ROOT}/tsconfig.json"])
        assert tsconfig["compilerOptions"]["lib"] == expected_lib
        assert tsconfig["extends"] == "../../../tsconfig.base.json"

    def test_project_json(self, product_files: dict[str, str]):
        project = json.loads(product_files[f"{ROOT}/project.json"])
        assert project["name"] == "contract-product"
        assert project["sourceRoot"] == f"{ROOT}/src"
        assert "type:contract" in project["tags"]

    def test_readme_lists_files(self, product_cqrs_files: dict[str, str]):
        readme = product_cqrs_files[f"{ROOT}/README.md"]
        assert readme.startswith("# @myorg/contract-product\n")
        assert "`src/lib/commands.ts`" in readme

    def test_claude_md_exists(self, product_files: dict[str, str]):
        assert f"{ROOT}/CLAUDE.md" in product_files

    def test_contract_has_no_workspace_dependencies(self, product_files: dict[str, str]):
        assert "dependencies" not in json.loads(product_files[f"{ROOT}/package.json"])

    def test_feature_depends_on_its_contract_and_data_access(self, product_stack_files: dict[str, str]):
        manifest = json.loads(product_stack_files["libs/feature/product/package.json"])
        assert manifest["name"] == "@myorg/feature-product"
        assert manifest["dependencies"] == {
            "@myorg/contract-product": "workspace:*",
            "@myorg/data-access-product": "workspace:*",
        }

    def test_layer_readme_lists_its_files(self, product_stack_files: dict[str, str]):
        readme = product_stack_files["libs/data-access/product/README.md"]
        assert readme.startswith("# @myorg/data-access-product\n")
        assert "`src/lib/repository.ts`" in readme
        assert "`src/lib/errors.ts`" not in readme


class TestTemplateRenderer:
    def test_missing_context_key_fails(self):
        with pytest.raises(jinja2.UndefinedError):
            TemplateRenderer().render("package.json.j2", {})

    def test_unknown_template(self):
        with pytest.raises(jinja2.TemplateNotFound):
            TemplateRenderer().render("nope.j2", {})
