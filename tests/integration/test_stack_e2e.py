"""End-to-end generation of a contract, data-access and feature stack.

The libraries of one domain are generated by separate runs; these tests check
that the names one library imports from another are spelled the way the
other library exports them.
"""

from __future__ import annotations

import json
import re

import pytest

from libforge import CrossReferenceError, WorkspaceContext, generate_stack
from libforge.engine.orchestrator import GeneratedFile, check_package_references
from libforge.engine.references import collect_exports, collect_references, resolve_specifier


pytestmark = pytest.mark.integration

SPEC = {"name": "product", "includeCQRS": True, "includeRPC": True, "since": "1.0.0"}

CONTRACT_INDEX = "libs/contract/product/src/index.ts"


@pytest.fixture(scope="module")
def generated() -> list[GeneratedFile]:
    return generate_stack(SPEC, WorkspaceContext(scope="@shop"))


@pytest.fixture(scope="module")
def files(generated: list[GeneratedFile]) -> dict[str, str]:
    return {f.relative_path: f.content for f in generated}


def _imports_from(content: str, specifier: str) -> frozenset[str]:
    names: set[str] = set()
    for reference in collect_references(content):
        if reference.specifier == specifier:
            names |= reference.names
    return frozenset(names)


def test_feature_takes_errors_and_rpcs_from_the_contract(files: dict[str, str]):
    contract_exports = collect_exports(files[CONTRACT_INDEX])
    service = _imports_from(files["libs/feature/product/src/lib/server/service.ts"], "@shop/contract-product")
    handlers = _imports_from(files["libs/feature/product/src/lib/rpc/handlers.ts"], "@shop/contract-product")
    assert "ProductNotFoundError" in service
    assert "ProductRpcs" in handlers
    assert service | handlers <= contract_exports


def test_data_access_implements_the_contract_repository(files: dict[str, str]):
    repository = files["libs/data-access/product/src/lib/repository.ts"]
    names = _imports_from(repository, "@shop/contract-product")
    assert {"ProductRepository", "ProductNotFoundRepositoryError"} <= names
    assert names <= collect_exports(files[CONTRACT_INDEX])


def test_feature_layers_use_data_access_layers(files: dict[str, str]):
    layers = files["libs/feature/product/src/lib/server/layers.ts"]
    names = _imports_from(layers, "@shop/data-access-product")
    assert names == {"ProductDataAccessLive", "ProductDataAccessTest"}
    assert names <= collect_exports(files["libs/data-access/product/src/index.ts"])


def test_every_relative_import_resolves(files: dict[str, str]):
    known = frozenset(files)
    for path, content in files.items():
        if not path.endswith(".ts"):
            continue
        for reference in collect_references(content):
            if not reference.specifier.startswith("."):
                continue
            target = resolve_specifier(path, reference.specifier, known)
            assert target is not None, f"{path} -> {reference.specifier}"
            assert reference.names <= collect_exports(files[target]), f"{path} -> {target}"


def test_manifests_declare_sibling_dependencies(files: dict[str, str]):
    names = {
        json.loads(content)["name"]
        for path, content in files.items()
        if path.endswith("package.json")
    }
    for layer in ("data-access", "feature"):
        manifest = json.loads(files[f"libs/{layer}/product/package.json"])
        assert set(manifest["dependencies"]) <= names


def test_renamed_contract_export_is_caught(generated: list[GeneratedFile]):
    tampered = [
        GeneratedFile(
            path=f.relative_path,
            content=re.sub(r"^  ProductNotFoundError,\n", "", f.content, flags=re.MULTILINE),
        )
        if f.relative_path == CONTRACT_INDEX
        else f
        for f in generated
    ]
    with pytest.raises(CrossReferenceError) as exc_info:
        check_package_references(tampered)
    assert exc_info.value.target == CONTRACT_INDEX
    assert "ProductNotFoundError" in exc_info.value.symbols
    assert exc_info.value.source.startswith("libs/feature/product/")


def test_stack_is_deterministic(files: dict[str, str]):
    again = generate_stack(SPEC, WorkspaceContext(scope="@shop"))
    assert {f.relative_path: f.content for f in again} == files
