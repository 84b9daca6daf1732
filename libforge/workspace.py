"""Workspace scope detection for the CLI.

The engine never looks at the file system; callers that want the scope of an
existing monorepo use ``detect_scope`` and pass the result into
``WorkspaceContext`` themselves.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class WorkspaceDetectionError(Exception):
    """Raised when a workspace manifest exists but cannot be read."""


def find_workspace_root(start: Path) -> Path | None:
    """Return the nearest directory at or above *start* holding a ``package.json``."""
    current = Path(start).resolve()
    for directory in (current, *current.parents):
        if (directory / "package.json").is_file():
            return directory
    return None


def detect_scope(start: Path) -> str | None:
    """Read the npm scope (``"@acme"``) from the workspace ``package.json``.

    Returns ``None`` when no manifest is found or its name is unscoped.

    Raises:
        WorkspaceDetectionError: If the manifest is not valid JSON.
    """
    root = find_workspace_root(start)
    if root is None:
        return None
    manifest = root / "package.json"
    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WorkspaceDetectionError(f"Invalid JSON in {manifest}: {exc}") from exc

    name = data.get("name") if isinstance(data, dict) else None
    if not isinstance(name, str) or not name.startswith("@") or "/" not in name:
        logger.debug("No scoped package name in %s", manifest)
        return None
    return name.split("/", 1)[0]
