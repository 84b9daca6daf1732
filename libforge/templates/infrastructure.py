"""Project files of a generated library.

These are the files the source phase assumes exist (package manifest,
compiler configuration, workspace project file, documentation).  Each routine
renders a Jinja2 template and hands the text to the task's ``SourceBuilder``
as a single raw block.  What differs between layers comes from
:data:`libforge.templates.layout.LAYERS`.
"""

from __future__ import annotations

import posixpath
from typing import Any

from ..engine.builder import SourceBuilder
from ..engine.naming import NamingVariant, resolve
from .layout import layer_for
from .options import TemplateOptions
from .renderer import TemplateRenderer
from .resources import expansions
from .submodules import DEFAULT_SUBMODULES, SubModuleRegistry


_renderer = TemplateRenderer()


def library_context(
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> dict[str, Any]:
    """Build the Jinja2 context shared by every project-file template."""
    layer = layer_for(options.library_type)
    values = expansions(variant)
    project_root = options.project_root or f"libs/{options.library_type}/{variant.file_name}"
    depth = len([part for part in project_root.split("/") if part])
    to_root = posixpath.join(*([".."] * depth)) if depth else "."
    lower = " ".join(variant.tokens)

    submodules = []
    for name in options.submodules:
        sub = resolve(name)
        submodules.append(
            {
                "file_name": sub.file_name,
                "class_name": sub.class_name,
                "kind": options.submodule_kinds.get(name) or registry.lookup(name).kind,
                "rpc": name in options.rpc_submodules,
            }
        )

    return {
        "library_type": options.library_type,
        "package_name": options.package_for(variant),
        "project_name": f"{options.library_type}-{variant.file_name}",
        "project_root": project_root,
        "version": options.version,
        "description": options.description or layer.description % values,
        "summary": layer.summary % values,
        "usage": [symbol % values for symbol in layer.usage],
        "dependencies": [options.sibling_package(dep, variant) for dep in layer.depends_on],
        "class_name": variant.class_name,
        "file_name": variant.file_name,
        "lower": lower,
        "scope": options.scope,
        "platform": options.platform,
        "include_cqrs": options.include_cqrs,
        "include_rpc": options.include_rpc,
        "keywords": [options.library_type, variant.file_name, *options.tags],
        "nx_tags": [f"type:{options.library_type}", f"scope:{variant.file_name}",
                    f"platform:{options.platform}"],
        "tsconfig_base": f"{to_root}/tsconfig.base.json",
        "schema_path": f"{to_root}/node_modules/nx/schemas/project-schema.json",
        "out_dir": f"{to_root}/dist/{project_root}",
        "lib_files": [{"path": file.path, "purpose": file.purpose} for file in layer.files(options)],
        "submodules": submodules,
    }


def _render(template_path: str):
    def build(
        builder: SourceBuilder,
        variant: NamingVariant,
        options: TemplateOptions,
        registry: SubModuleRegistry = DEFAULT_SUBMODULES,
    ) -> None:
        builder.add_raw(_renderer.render(template_path, library_context(variant, options, registry)))

    build.__name__ = f"build_{template_path.split('.')[0].lower()}"
    build.__doc__ = f"Render ``{template_path}`` into the builder."
    return build


build_package_json = _render("package.json.j2")
build_tsconfig = _render("tsconfig.json.j2")
build_project_json = _render("project.json.j2")
build_readme = _render("README.md.j2")
build_claude_md = _render("CLAUDE.md.j2")
