"""Unit tests for libforge configuration (libforge.config).

Tests cover:
- WorkspaceContext scope normalisation and libs_dir validation
- Package name and project root derivation
- GeneratorSettings defaults, env loading and JSON round-trip
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from libforge.config import GeneratorSettings, WorkspaceContext


class TestWorkspaceContext:
    @pytest.mark.unit
    def test_defaults(self):
        ctx = WorkspaceContext()
        assert ctx.scope == "@myorg"
        assert ctx.libs_dir == "libs"
        assert ctx.root == Path(".")

    @pytest.mark.unit
    @pytest.mark.parametrize(("raw", "expected"), [("acme", "@acme"), ("@acme", "@acme"), (" @acme ", "@acme")])
    def test_scope_normalised(self, raw: str, expected: str):
        assert WorkspaceContext(scope=raw).scope == expected

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["", "@", "   "])
    def test_empty_scope_rejected(self, raw: str):
        with pytest.raises(ValidationError):
            WorkspaceContext(scope=raw)

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["", "../libs", "libs/../../x"])
    def test_libs_dir_must_stay_inside(self, raw: str):
        with pytest.raises(ValidationError):
            WorkspaceContext(libs_dir=raw)

    @pytest.mark.unit
    def test_libs_dir_trailing_slash(self):
        assert WorkspaceContext(libs_dir="packages/").libs_dir == "packages"

    @pytest.mark.unit
    def test_derived_names(self):
        ctx = WorkspaceContext(scope="@acme")
        assert ctx.package_name("contract", "order-item") == "@acme/contract-order-item"
        assert ctx.project_root("contract", "order-item") == "libs/contract/order-item"

    @pytest.mark.unit
    def test_frozen(self):
        with pytest.raises(ValidationError):
            WorkspaceContext().scope = "@other"  # type: ignore[misc]


class TestGeneratorSettings:
    @pytest.mark.unit
    def test_defaults(self):
        settings = GeneratorSettings()
        assert settings.output_dir == Path(".")
        assert settings.scope is None
        assert settings.dry_run is False
        assert settings.overwrite is False

    @pytest.mark.unit
    def test_workspace_prefers_explicit_scope(self, tmp_path: Path):
        settings = GeneratorSettings(output_dir=tmp_path, scope="@explicit")
        ctx = settings.workspace(detected_scope="@detected")
        assert ctx.scope == "@explicit"
        assert ctx.root == tmp_path

    @pytest.mark.unit
    def test_workspace_uses_detected_scope(self):
        assert GeneratorSettings().workspace("@detected").scope == "@detected"
        assert GeneratorSettings().workspace().scope == "@myorg"

    @pytest.mark.unit
    def test_save_and_load(self, tmp_path: Path):
        settings = GeneratorSettings(scope="@acme", since="1.2.0", overwrite=True)
        path = settings.save(tmp_path / "nested" / "libforge.json")
        assert path.exists()
        assert GeneratorSettings.load(path) == settings

    @pytest.mark.unit
    def test_from_env(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
        monkeypatch.setenv("LIBFORGE_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("LIBFORGE_SCOPE", "@env")
        monkeypatch.setenv("LIBFORGE_LIBS_DIR", "packages")
        monkeypatch.setenv("LIBFORGE_SINCE", "3.0.0")
        monkeypatch.setenv("LIBFORGE_DRY_RUN", "true")
        monkeypatch.setenv("LIBFORGE_OVERWRITE", "0")
        settings = GeneratorSettings.from_env()
        assert settings.output_dir == tmp_path
        assert settings.scope == "@env"
        assert settings.libs_dir == "packages"
        assert settings.since == "3.0.0"
        assert settings.dry_run is True
        assert settings.overwrite is False

    @pytest.mark.unit
    def test_from_env_defaults(self, monkeypatch: pytest.MonkeyPatch):
        for name in ("LIBFORGE_OUTPUT_DIR", "LIBFORGE_SCOPE", "LIBFORGE_LIBS_DIR",
                     "LIBFORGE_SINCE", "LIBFORGE_DRY_RUN", "LIBFORGE_OVERWRITE"):
            monkeypatch.delenv(name, raising=False)
        assert GeneratorSettings.from_env() == GeneratorSettings()
