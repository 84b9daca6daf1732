"""Tests for the export/import scanner used by cross-file checks."""

from __future__ import annotations

import pytest

from libforge.engine.references import collect_exports, collect_references, resolve_package, resolve_specifier


pytestmark = pytest.mark.unit


SAMPLE = """\
import { Schema } from 'effect'
import type { RouteType } from './rpc-definitions'

export const ProductId = Schema.UUID
export class Product extends Schema.Class<Product>("Product")({}) {}
export type ProductError =
  | ProductNotFoundError
export interface Port {}

export {
  ProductCreatedEvent,
  type ProductDomainEvent
} from './lib/events'
export * as Cart from './cart'
"""


class TestCollect:
    def test_exports(self):
        assert collect_exports(SAMPLE) == frozenset(
            {"ProductId", "Product", "ProductError", "Port", "ProductCreatedEvent", "ProductDomainEvent", "Cart"}
        )

    def test_references(self):
        refs = {ref.specifier: ref.names for ref in collect_references(SAMPLE)}
        assert refs["effect"] == frozenset({"Schema"})
        assert refs["./rpc-definitions"] == frozenset({"RouteType"})
        assert refs["./lib/events"] == frozenset({"ProductCreatedEvent", "ProductDomainEvent"})
        assert refs["./cart"] == frozenset()

    def test_aliases_use_source_name(self):
        refs = collect_references("import { Foo as Bar } from './foo'\n")
        assert refs[0].names == frozenset({"Foo"})


class TestResolveSpecifier:
    KNOWN = frozenset({"src/lib/entities.ts", "src/cart/index.ts"})

    def test_file(self):
        assert resolve_specifier("src/index.ts", "./lib/entities", self.KNOWN) == "src/lib/entities.ts"

    def test_parent_directory(self):
        assert resolve_specifier("src/cart/entities.ts", "../lib/entities", self.KNOWN) == "src/lib/entities.ts"

    def test_directory_index(self):
        assert resolve_specifier("src/index.ts", "./cart", self.KNOWN) == "src/cart/index.ts"

    def test_package_import(self):
        assert resolve_specifier("src/index.ts", "effect", self.KNOWN) is None

    def test_unknown_target(self):
        assert resolve_specifier("src/index.ts", "./nope", self.KNOWN) is None


class TestResolvePackage:
    PACKAGES = {"@acme/contract-order": "libs/contract/order/src"}

    def test_package_barrel(self):
        assert resolve_package("@acme/contract-order", self.PACKAGES) == "libs/contract/order/src/index.ts"

    def test_subpath_export(self):
        target = resolve_package("@acme/contract-order/cart", self.PACKAGES)
        assert target == "libs/contract/order/src/cart/index.ts"

    def test_unrelated_packages(self):
        assert resolve_package("effect", self.PACKAGES) is None
        assert resolve_package("@acme/contract-order-archive", self.PACKAGES) is None
        assert resolve_package("./lib/entities", self.PACKAGES) is None
