"""Shared pytest fixtures for the libforge test suite.

Provides reusable fixtures for:
- Workspace contexts
- Generated file sets for common domains (plain, CQRS, with submodules)
- A generated contract, data-access and feature stack
- Planners and plans
"""

from __future__ import annotations

from pathlib import Path

import pytest

from libforge.config import WorkspaceContext
from libforge.engine.orchestrator import generate, generate_stack
from libforge.engine.planner import GenerationPlan, GenerationPlanner


# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


@pytest.fixture
def workspace() -> WorkspaceContext:
    """Default workspace: ``@myorg`` scope, ``libs`` directory."""
    return WorkspaceContext()


@pytest.fixture
def acme_workspace(tmp_path: Path) -> WorkspaceContext:
    return WorkspaceContext(scope="@acme", root=tmp_path)


# ---------------------------------------------------------------------------
# Plans & generated files
# ---------------------------------------------------------------------------


@pytest.fixture
def planner() -> GenerationPlanner:
    return GenerationPlanner()


@pytest.fixture
def product_plan(planner: GenerationPlanner, workspace: WorkspaceContext) -> GenerationPlan:
    return planner.plan({"name": "product"}, workspace)


def _by_path(files) -> dict[str, str]:
    return {f.relative_path: f.content for f in files}


@pytest.fixture
def product_files(workspace: WorkspaceContext) -> dict[str, str]:
    """Files for ``product`` with every option off, keyed by relative path."""
    return _by_path(generate({"name": "product"}, workspace))


@pytest.fixture
def product_cqrs_files(workspace: WorkspaceContext) -> dict[str, str]:
    return _by_path(generate({"name": "product", "includeCQRS": True}, workspace))


@pytest.fixture
def order_files(workspace: WorkspaceContext) -> dict[str, str]:
    """Files for ``order`` with a ``cart`` submodule."""
    return _by_path(generate({"name": "order", "submodules": ["cart"]}, workspace))


@pytest.fixture
def product_stack_files(workspace: WorkspaceContext) -> dict[str, str]:
    """Contract, data-access and feature files for ``product`` with CQRS and RPC."""
    return _by_path(generate_stack({"name": "product", "includeCQRS": True, "includeRPC": True}, workspace))
