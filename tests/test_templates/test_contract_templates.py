"""Tests for the parent-domain contract files.

Covers:
- Exact source file sets with and without CQRS / RPC
- Barrel re-exports tracking the emitted files
- Symbol naming and Effect constructs in each file
- Import blocks (external first, type-only lines)
"""

from __future__ import annotations

import pytest

from libforge.config import WorkspaceContext
from libforge.engine.orchestrator import generate


pytestmark = pytest.mark.unit

ROOT = "libs/contract/product"
LIB = f"{ROOT}/src/lib"


def _source_files(files: dict[str, str]) -> set[str]:
    return {path for path in files if path.endswith(".ts")}


class TestFileSet:
    def test_plain_product(self, product_files: dict[str, str]):
        assert _source_files(product_files) == {
            f"{LIB}/entities.ts",
            f"{LIB}/errors.ts",
            f"{LIB}/events.ts",
            f"{LIB}/ports.ts",
            f"{ROOT}/src/index.ts",
        }

    def test_index_tracks_plain_files(self, product_files: dict[str, str]):
        index = product_files[f"{ROOT}/src/index.ts"]
        assert "from './lib/entities'" in index
        assert "from './lib/errors'" in index
        assert "from './lib/commands'" not in index
        assert "from './lib/rpc-definitions'" not in index

    def test_cqrs_product(self, product_cqrs_files: dict[str, str]):
        for key in ("commands", "queries", "projections"):
            assert f"{LIB}/{key}.ts" in product_cqrs_files
        index = product_cqrs_files[f"{ROOT}/src/index.ts"]
        assert "from './lib/commands'" in index
        assert "from './lib/queries'" in index
        assert "from './lib/projections'" in index

    def test_rpc_product(self, workspace: WorkspaceContext):
        files = {f.relative_path: f.content for f in generate({"name": "product", "includeRPC": True}, workspace)}
        for key in ("rpc-errors", "rpc-definitions", "rpc-group"):
            assert f"{LIB}/{key}.ts" in files
        assert "from './lib/rpc-group'" in files[f"{ROOT}/src/index.ts"]

    def test_generation_is_deterministic(self, workspace: WorkspaceContext):
        spec = {"name": "product", "includeCQRS": True, "includeRPC": True}
        assert generate(spec, workspace) == generate(spec, workspace)


class TestErrors:
    def test_domain_and_repository_errors(self, product_files: dict[str, str]):
        errors = product_files[f"{LIB}/errors.ts"]
        assert 'export class ProductNotFoundError extends Data.TaggedError("ProductNotFoundError")' in errors
        assert "export type ProductDomainError =" in errors
        assert "export type ProductRepositoryError =" in errors
        assert "export type ProductError = ProductDomainError | ProductRepositoryError" in errors
        assert "import { Data } from 'effect'" in errors

    def test_header(self, product_files: dict[str, str]):
        errors = product_files[f"{LIB}/errors.ts"]
        assert errors.startswith("/**\n * Product Domain Errors\n")
        assert " * @module @myorg/contract-product/errors\n" in errors


class TestEntitiesAndPorts:
    def test_entities(self, product_files: dict[str, str]):
        entities = product_files[f"{LIB}/entities.ts"]
        assert 'export const ProductId = Schema.UUID.pipe(Schema.brand("ProductId"))' in entities
        assert 'export class Product extends Schema.Class<Product>("Product")' in entities
        assert "export const parseProduct = Schema.decodeUnknown(Product)" in entities

    def test_ports_use_context_tags(self, product_files: dict[str, str]):
        ports = product_files[f"{LIB}/ports.ts"]
        assert 'Context.Tag("@myorg/contract-product/ProductRepository")' in ports
        assert 'Context.Tag("@myorg/contract-product/ProductService")' in ports
        assert "import type { Product, ProductId } from './entities'" in ports
        assert "ProjectionRepository" not in ports

    def test_ports_with_cqrs(self, product_cqrs_files: dict[str, str]):
        ports = product_cqrs_files[f"{LIB}/ports.ts"]
        assert "ProductProjectionRepository" in ports
        assert "from './projections'" in ports

    def test_import_block_order(self, product_files: dict[str, str]):
        ports = product_files[f"{LIB}/ports.ts"]
        external = ports.index("from 'effect'")
        relative = ports.index("from './entities'")
        assert external < relative


class TestNaming:
    def test_multi_word_domain(self, workspace: WorkspaceContext):
        files = {f.relative_path: f.content for f in generate({"name": "OrderItem"}, workspace)}
        root = "libs/contract/order-item"
        assert f"{root}/src/lib/entities.ts" in files
        assert "export const OrderItemId" in files[f"{root}/src/lib/entities.ts"]
        assert "@myorg/contract-order-item" in files[f"{root}/package.json"]

    def test_scope_flows_into_packages(self, acme_workspace: WorkspaceContext):
        files = {f.relative_path: f.content for f in generate({"name": "product"}, acme_workspace)}
        assert '"name": "@acme/contract-product"' in files[f"{ROOT}/package.json"]
