"""Library layers and the files each one emits.

Every layer of the architecture (contract, data-access, feature, infra) has
one catalog module exposing ``source_files(options)``; ``LAYERS`` maps the
layer's ``library_type`` to that function plus the text the project files
(README, CLAUDE.md, package.json) need.  Template ids follow the pattern
``"<library_type>/<file key>"``, with ``"<library_type>/index"`` for the
barrel every layer ends with.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..engine.errors import OptionConflictError
from . import contract, data_access, feature, infra
from .options import SourceFile, TemplateOptions


@dataclass(frozen=True)
class LibraryLayer:
    """What differs between layers outside their TypeScript templates.

    ``summary`` and ``usage`` are ``%``-format strings expanded with
    ``title`` and ``lower`` (see :func:`libforge.templates.resources.expansions`).
    """

    library_type: str
    files: Callable[[TemplateOptions], list[SourceFile]]
    description: str
    summary: str
    usage: tuple[str, ...]
    depends_on: tuple[str, ...] = ()


LAYERS: dict[str, LibraryLayer] = {
    layer.library_type: layer
    for layer in (
        LibraryLayer(
            "contract",
            contract.source_files,
            "Contract definitions for the %(lower)s domain",
            "Contract library for the **%(lower)s** domain: entities, errors, events and\n"
            "ports that data-access and feature libraries implement.",
            ("%(title)sRepository", "%(title)sNotFoundError"),
        ),
        LibraryLayer(
            "data-access",
            data_access.source_files,
            "Data access for the %(lower)s domain",
            "Data-access library for the **%(lower)s** domain: an in-memory implementation\n"
            "of the contract's repository port, provided as Effect layers.",
            ("%(title)sDataAccessLive",),
            ("contract",),
        ),
        LibraryLayer(
            "feature",
            feature.source_files,
            "Services and handlers for the %(lower)s domain",
            "Feature library for the **%(lower)s** domain: the service implementation and\n"
            "its handlers, wired to the data-access layers.",
            ("%(title)sFeatureLive",),
            ("contract", "data-access"),
        ),
        LibraryLayer(
            "infra",
            infra.source_files,
            "%(title)s infrastructure service",
            "Infrastructure library providing the **%(lower)s** service behind a\n"
            "Context.Tag, with an in-memory provider and Effect layers.",
            ("%(title)sService", "%(title)sServiceLive"),
        ),
    )
}


def layer_for(library_type: str) -> LibraryLayer:
    try:
        return LAYERS[library_type]
    except KeyError:
        raise OptionConflictError(
            "library_type", library_type, "no template catalog for this layer"
        ) from None


def source_files(options: TemplateOptions) -> list[SourceFile]:
    """Files under ``src/`` besides the barrel for the layer in *options*."""
    return layer_for(options.library_type).files(options)
