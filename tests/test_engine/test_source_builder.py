"""Tests for SourceBuilder fragment accumulation and rendering.

Covers:
- Header, import block and body ordering regardless of call order
- Section comments, JSDoc and line comments
- Blank-line normalisation and the trailing newline
- Determinism of repeated renders
"""

from __future__ import annotations

import pytest

from libforge.engine.builder import SECTION_RULE, FragmentKind, SourceBuilder
from libforge.engine.errors import ImportConflictError


pytestmark = pytest.mark.unit


class TestRenderOrder:
    def test_imports_follow_header_even_when_added_last(self):
        builder = SourceBuilder()
        builder.add_raw("export const X = Schema.String")
        builder.add_import("effect", "Schema")
        builder.add_header("Product Entities", "Entity schemas.", module="@acme/contract-product/entities", since="1.0.0")

        assert builder.render() == (
            "/**\n"
            " * Product Entities\n"
            " *\n"
            " * Entity schemas.\n"
            " *\n"
            " * @module @acme/contract-product/entities\n"
            " * @since 1.0.0\n"
            " */\n"
            "\n"
            "import { Schema } from 'effect'\n"
            "\n"
            "export const X = Schema.String\n"
        )

    def test_fragments_snapshot_is_in_render_order(self):
        builder = SourceBuilder()
        builder.add_raw("const a = 1")
        builder.add_import("effect", "Data")
        builder.add_header("Title")
        kinds = [fragment.kind for fragment in builder.fragments]
        assert kinds == [FragmentKind.HEADER, FragmentKind.IMPORT_BLOCK, FragmentKind.RAW_BLOCK]

    def test_header_without_tags(self):
        assert SourceBuilder().add_header("Just a title").render() == "/**\n * Just a title\n */\n"

    def test_see_references(self):
        text = SourceBuilder().add_header("T", see=["https://effect.website"]).render()
        assert " * @see https://effect.website\n" in text

    def test_second_header_rejected(self):
        builder = SourceBuilder().add_header("One")
        with pytest.raises(ValueError):
            builder.add_header("Two")


class TestBody:
    def test_section_comment(self):
        text = SourceBuilder().add_section_comment("Errors").render()
        assert text == f"{SECTION_RULE}\n// Errors\n{SECTION_RULE}\n"

    def test_jsdoc_and_comment(self):
        text = SourceBuilder().add_jsdoc("Line one\nLine two").add_comment("note").render()
        assert text == "/**\n * Line one\n * Line two\n */\n// note\n"

    def test_blank_lines_collapse(self):
        builder = SourceBuilder()
        builder.add_raw("a").add_blank_line().add_blank_line().add_raw("\n\nb\n").add_blank_line()
        assert builder.render() == "a\n\nb\n"

    def test_raw_block_blank_lines_kept(self):
        code = "const s = `a\n\n\nb`"
        assert SourceBuilder().add_raw(code).render() == code + "\n"

    def test_raw_block_kept_between_blank_fragments(self):
        builder = SourceBuilder().add_raw("x\n\n\ny").add_blank_line().add_blank_line().add_raw("z")
        assert builder.render() == "x\n\n\ny\n\nz\n"

    def test_raw_block_edge_newlines_stripped(self):
        assert SourceBuilder().add_raw("\n\nx = 1   \n\n").render() == "x = 1   \n"

    def test_empty_builder_renders_empty_string(self):
        assert SourceBuilder().render() == ""

    def test_add_imports_specs(self):
        builder = SourceBuilder().add_imports(
            [
                {"from": "effect", "imports": ["Schema"]},
                {"from": "./rpc-definitions", "imports": ["RouteType"], "type_only": True},
            ]
        )
        assert builder.render() == (
            "import { Schema } from 'effect'\n"
            "\n"
            "import type { RouteType } from './rpc-definitions'\n"
        )


class TestDeterminism:
    def test_render_twice_is_identical(self):
        builder = SourceBuilder().add_header("T").add_import("effect", "Data").add_raw("body")
        assert builder.render() == builder.render()
        assert str(builder) == builder.render()

    def test_equal_inputs_equal_output(self):
        def build() -> str:
            return (
                SourceBuilder()
                .add_header("T", since="2.0.0")
                .add_import("effect", ["Schema", "Data"])
                .add_section_comment("S")
                .add_raw("export const a = 1")
                .render()
            )

        assert build() == build()

    def test_import_conflict_raised_on_render(self):
        builder = SourceBuilder().add_import("./a", "X").add_import("./b", "X")
        with pytest.raises(ImportConflictError):
            builder.render()
