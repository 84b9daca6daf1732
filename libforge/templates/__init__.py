"""libforge template catalog -- content routines for every library layer.

Every generated file is produced by a routine registered under a template id
(``"contract/errors"``, ``"feature/rpc-handlers"``, ``"project/readme"``...).
Routines fill a ``SourceBuilder``; project-file routines render Jinja2
templates first.  ``layout`` lists the files each layer emits.

Quick usage::

    from libforge.templates import render_file

    text = render_file("contract/errors", "product", {"scope": "@acme"})
"""

from libforge.templates.options import TemplateOptions
from libforge.templates.registry import (
    DEFAULT_TEMPLATES,
    Template,
    TemplateRegistry,
    build_registry,
    list_templates,
    render_file,
)
from libforge.templates.submodules import (
    DEFAULT_SUBMODULES,
    SubModuleRegistry,
    SubModuleTemplate,
)

__all__ = [
    "DEFAULT_SUBMODULES",
    "DEFAULT_TEMPLATES",
    "SubModuleRegistry",
    "SubModuleTemplate",
    "Template",
    "TemplateOptions",
    "TemplateRegistry",
    "build_registry",
    "list_templates",
    "render_file",
]
