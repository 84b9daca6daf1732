"""Infrastructure library templates.

An infra library wraps one technical capability (cache, queue, storage...)
behind a ``Context.Tag`` service, with an in-memory provider and the layers
that install it.  It has no domain model, so CQRS and RPC options do not apply.
"""

from __future__ import annotations

from ..engine.builder import SourceBuilder
from ..engine.naming import NamingVariant
from .contract import EFFECT_ERRORS_DOC, context_tag, reexport
from .options import SourceFile, TemplateOptions
from .resources import (
    CAUSE_FIELD,
    OPERATION_FIELD,
    REASON_FIELD,
    ErrorBase,
    ErrorSpec,
    FieldSpec,
    ResourceSpec,
    add_error_set,
)


EFFECT_LAYERS_DOC = "https://effect.website/docs/requirements-management/layers"

INFRA_ERRORS = ResourceSpec(
    section="Service Errors (Data.TaggedError)",
    base=ErrorBase.DATA,
    union_suffix="ServiceError",
    union_summary="Union of all %(lower)s service errors",
    errors=(
        ErrorSpec(
            "InternalError",
            "Unexpected failure inside the %(lower)s service",
            "`%(title)s operation '${params.operation}' failed`",
            (OPERATION_FIELD, CAUSE_FIELD),
        ),
        ErrorSpec(
            "ConfigError",
            "Invalid %(lower)s service configuration",
            "`Invalid %(lower)s configuration '${params.key}': ${params.reason ?? 'unknown'}`",
            (FieldSpec("key"), REASON_FIELD),
        ),
        ErrorSpec(
            "ConnectionError",
            "The %(lower)s backend could not be reached",
            "`%(title)s connection failed: ${params.reason ?? 'unknown'}`",
            (REASON_FIELD, CAUSE_FIELD),
        ),
    ),
)

INFRA_FILES: tuple[SourceFile, ...] = (
    SourceFile("errors", "lib/service/errors.ts", "Service errors (Data.TaggedError)"),
    SourceFile("config", "lib/service/config.ts", "Configuration schema and defaults"),
    SourceFile("interface", "lib/service/interface.ts", "Service port (Context.Tag)", ("errors",)),
    SourceFile(
        "memory-provider",
        "lib/providers/memory.ts",
        "In-memory provider",
        ("config", "errors", "interface"),
    ),
    SourceFile(
        "server-layers",
        "lib/layers/server-layers.ts",
        "Live and test layers",
        ("config", "interface", "memory-provider"),
    ),
)


def source_files(options: TemplateOptions) -> list[SourceFile]:
    return list(INFRA_FILES)


def file_exports(
    file_key: str, variant: NamingVariant, options: TemplateOptions
) -> tuple[list[str], list[str]]:
    c = variant.class_name
    if file_key == "errors":
        return INFRA_ERRORS.class_names(variant), [INFRA_ERRORS.union_name(variant)]
    if file_key == "config":
        return [f"{c}Config", f"default{c}Config"], []
    if file_key == "interface":
        return [f"{c}Service"], []
    if file_key == "memory-provider":
        return [f"make{c}MemoryProvider"], []
    if file_key == "server-layers":
        return [f"make{c}ServiceLayer", f"{c}ServiceLive", f"{c}ServiceTest"], []
    raise KeyError(file_key)


def _header(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    module: str,
    title: str,
    description: str,
    see: tuple[str, ...] = (),
) -> None:
    builder.add_header(
        title=f"{variant.class_name} {title}",
        description=description,
        module=options.module_path(variant, module),
        since=options.since,
        see=see,
    )


# ---------------------------------------------------------------------------
# lib/service/*
# ---------------------------------------------------------------------------


def build_errors(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "service/errors",
        "Service Errors",
        f"Errors raised by the {' '.join(variant.tokens)} service and its providers.",
        see=(EFFECT_ERRORS_DOC,),
    )
    add_error_set(builder, variant, INFRA_ERRORS)


def build_config(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "service/config",
        "Service Configuration",
        "Validated configuration for every provider of the service.",
    )
    builder.add_import("effect", "Schema")
    builder.add_raw(
        f"export const {c}Config = Schema.Struct({{\n"
        "  enabled: Schema.Boolean,\n"
        "  maxEntries: Schema.Number.pipe(Schema.int(), Schema.positive()),\n"
        "  timeoutMs: Schema.Number.pipe(Schema.int(), Schema.positive())\n"
        "})\n\n"
        f"export type {c}Config = Schema.Schema.Type<typeof {c}Config>"
    )
    builder.add_blank_line()
    builder.add_raw(
        f"export const default{c}Config: {c}Config = {{\n"
        "  enabled: true,\n"
        "  maxEntries: 10_000,\n"
        "  timeoutMs: 5_000\n"
        "}"
    )


def build_interface(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    error = INFRA_ERRORS.union_name(variant)
    _header(
        builder,
        variant,
        options,
        "service/interface",
        "Service",
        f"Service port of the {' '.join(variant.tokens)} infrastructure. Providers\n"
        "implement it; consumers depend on the tag only.",
    )
    builder.add_import("effect", "Context")
    builder.add_import("effect", ["Effect", "Option"], type_only=True)
    builder.add_import("./errors", error, type_only=True)
    builder.add_raw(
        context_tag(
            f"{c}Service",
            options.package_for(variant),
            [
                f"readonly get: (key: string) => Effect.Effect<Option.Option<unknown>, {error}>",
                f"readonly set: (key: string, value: unknown) => Effect.Effect<void, {error}>",
                f"readonly delete: (key: string) => Effect.Effect<boolean, {error}>",
                f"readonly keys: Effect.Effect<ReadonlyArray<string>, {error}>",
                "readonly healthCheck: Effect.Effect<boolean>",
            ],
        )
    )


# ---------------------------------------------------------------------------
# lib/providers/memory.ts
# ---------------------------------------------------------------------------


def build_memory_provider(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "providers/memory",
        "Memory Provider",
        "Map-backed provider for tests and local development.",
    )
    builder.add_import("effect", ["Effect", "Option", "Ref"])
    builder.add_import("../service/config", f"{c}Config", type_only=True)
    builder.add_import("../service/errors", [f"{c}ConfigError", f"{c}InternalError"])
    builder.add_import("../service/interface", f"{c}Service")
    builder.add_raw(
        f"export const make{c}MemoryProvider = (config: {c}Config) =>\n"
        "  Effect.gen(function* () {\n"
        "    if (!config.enabled) {\n"
        f'      return yield* Effect.fail({c}ConfigError.create({{ key: "enabled", reason: "service is disabled" }}))\n'
        "    }\n"
        "    const store = yield* Ref.make(new Map<string, unknown>())\n"
        f"    return {c}Service.of({{\n"
        "      get: (key) => Ref.get(store).pipe(Effect.map((entries) => Option.fromNullable(entries.get(key)))),\n"
        "      set: (key, value) =>\n"
        "        Ref.get(store).pipe(\n"
        "          Effect.flatMap((entries) =>\n"
        "            entries.size >= config.maxEntries && !entries.has(key)\n"
        f'              ? Effect.fail({c}InternalError.create({{ operation: "set", cause: "capacity reached" }}))\n'
        "              : Ref.set(store, new Map(entries).set(key, value))\n"
        "          )\n"
        "        ),\n"
        "      delete: (key) =>\n"
        "        Ref.modify(store, (entries) => {\n"
        "          const next = new Map(entries)\n"
        "          return [next.delete(key), next] as const\n"
        "        }),\n"
        "      keys: Ref.get(store).pipe(Effect.map((entries) => [...entries.keys()])),\n"
        "      healthCheck: Effect.succeed(true)\n"
        "    })\n"
        "  })"
    )


# ---------------------------------------------------------------------------
# lib/layers/server-layers.ts
# ---------------------------------------------------------------------------


def build_server_layers(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "layers",
        "Server Layers",
        f"Layers installing {c}Service.\n\n"
        "- Live: memory provider with the default configuration\n"
        "- Test: a fresh provider every time the layer is provided",
        see=(EFFECT_LAYERS_DOC,),
    )
    builder.add_import("effect", "Layer")
    builder.add_import("../providers/memory", f"make{c}MemoryProvider")
    builder.add_import("../service/config", f"default{c}Config")
    builder.add_import("../service/config", f"{c}Config", type_only=True)
    builder.add_import("../service/interface", f"{c}Service")

    builder.add_jsdoc(f"Build a {c}Service layer for an explicit configuration")
    builder.add_raw(
        f"export const make{c}ServiceLayer = (config: {c}Config) =>\n"
        f"  Layer.effect({c}Service, make{c}MemoryProvider(config))"
    )
    builder.add_blank_line()
    builder.add_raw(f"export const {c}ServiceLive = make{c}ServiceLayer(default{c}Config)")
    builder.add_blank_line()
    builder.add_raw(f"export const {c}ServiceTest = Layer.fresh({c}ServiceLive)")


# ---------------------------------------------------------------------------
# index.ts
# ---------------------------------------------------------------------------


SECTION_TITLES: dict[str, str] = {
    "errors": "Errors",
    "config": "Configuration",
    "interface": "Service",
    "memory-provider": "Providers",
    "server-layers": "Layers",
}


def build_index(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "index",
        "Infrastructure",
        f"Public API of the {' '.join(variant.tokens)} infrastructure library.",
    )
    for file in source_files(options):
        values, types = file_exports(file.key, variant, options)
        builder.add_section_comment(SECTION_TITLES[file.key])
        builder.add_blank_line()
        builder.add_raw(reexport(values, types, "./" + file.path.removesuffix(".ts")))
        builder.add_blank_line()
