"""Tests for identifier spelling derivation.

Covers:
- Case variants for hyphenated, camel, pascal and constant-case input
- Acronym splitting
- Pluralisation rules and explicit plural overrides
- Rejection of empty, numeric, digit-leading and reserved names
"""

from __future__ import annotations

import pytest

from libforge.engine.errors import NameValidationError
from libforge.engine.naming import NamingVariant, pluralize, resolve, tokenize


pytestmark = pytest.mark.unit


class TestResolve:
    def test_hyphenated_name(self):
        variant = resolve("order-management")
        assert variant.class_name == "OrderManagement"
        assert variant.property_name == "orderManagement"
        assert variant.file_name == "order-management"
        assert variant.constant_name == "ORDER_MANAGEMENT"
        assert variant.tokens == ("order", "management")

    @pytest.mark.parametrize(
        "raw",
        ["order-management", "OrderManagement", "orderManagement", "ORDER_MANAGEMENT", "order management"],
    )
    def test_casings_converge_on_one_file_name(self, raw: str):
        assert resolve(raw).file_name == "order-management"
        assert resolve(raw).class_name == "OrderManagement"

    def test_single_word(self):
        variant = resolve("product")
        assert variant.class_name == "Product"
        assert variant.property_name == "product"
        assert variant.plural_file_name == "products"
        assert variant.plural_class_name == "Products"
        assert variant.plural_property_name == "products"

    def test_acronym_is_split_from_following_word(self):
        variant = resolve("HTTPServer")
        assert variant.tokens == ("http", "server")
        assert variant.class_name == "HttpServer"

    def test_raw_name_is_kept(self):
        assert resolve("Order_Item").raw == "Order_Item"

    def test_symbol_prefix_and_suffix(self):
        variant = resolve("product")
        assert variant.symbol("NotFoundError") == "ProductNotFoundError"
        assert variant.symbol("Command", prefix="Create") == "CreateProductCommand"
        assert variant.symbol() == "Product"

    def test_title(self):
        assert resolve("order-item").title == "Order Item"

    def test_plural_only_changes_last_token(self):
        variant = resolve("product-category")
        assert variant.plural_file_name == "product-categories"
        assert variant.plural_class_name == "ProductCategories"

    def test_explicit_plural(self):
        variant = resolve("person", plural="people")
        assert variant.plural_file_name == "people"
        assert variant.plural_class_name == "People"

    def test_resolution_is_stable(self):
        assert resolve("order-management") == resolve("order-management")

    @pytest.mark.parametrize("raw", ["product", "OrderManagement", "HTTPServer", "order_item-v2"])
    def test_file_name_round_trips(self, raw: str):
        variant = resolve(raw)
        assert resolve(variant.file_name).class_name == variant.class_name
        assert variant.file_name == variant.file_name.lower()

    def test_variant_is_immutable(self):
        variant = resolve("product")
        with pytest.raises(AttributeError):
            variant.class_name = "Other"  # type: ignore[misc]

    def test_returns_naming_variant(self):
        assert isinstance(resolve("product"), NamingVariant)


class TestInvalidNames:
    @pytest.mark.parametrize("raw", ["", "   ", "--", "123", "1st-item"])
    def test_rejected(self, raw: str):
        with pytest.raises(NameValidationError) as exc_info:
            resolve(raw)
        assert exc_info.value.name == raw

    def test_reserved_word(self):
        with pytest.raises(NameValidationError, match="reserved word"):
            resolve("class")

    def test_reserved_word_only_as_whole_name(self):
        assert resolve("class-room").property_name == "classRoom"

    def test_non_string(self):
        with pytest.raises(NameValidationError, match="string"):
            resolve(None)  # type: ignore[arg-type]

    def test_invalid_plural_override(self):
        with pytest.raises(NameValidationError):
            resolve("person", plural="")

    @pytest.mark.parametrize("raw", ["naïve", "café-order", "Straße"])
    def test_non_ascii_letters(self, raw: str):
        with pytest.raises(NameValidationError, match="non-ASCII") as exc_info:
            resolve(raw)
        assert exc_info.value.name == raw

    def test_non_ascii_plural_override(self):
        with pytest.raises(NameValidationError, match="non-ASCII"):
            resolve("cactus", plural="cactüses")


class TestHelpers:
    @pytest.mark.parametrize(
        ("word", "plural"),
        [
            ("product", "products"),
            ("category", "categories"),
            ("day", "days"),
            ("box", "boxes"),
            ("address", "addresses"),
            ("batch", "batches"),
            ("wish", "wishes"),
        ],
    )
    def test_pluralize(self, word: str, plural: str):
        assert pluralize(word) == plural

    def test_tokenize_mixed_separators(self):
        assert tokenize("my_Order-item v2") == ["my", "order", "item", "v2"]
