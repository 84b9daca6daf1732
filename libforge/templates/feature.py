"""Feature library templates.

A feature library implements the service port of its contract on top of the
repository port, wires it to the data-access layers, and (optionally) serves
the contract's RPC group.  Every symbol it consumes from the contract or the
data-access library is imported by package name, so the stack check in
:func:`libforge.engine.orchestrator.check_package_references` can verify it
against the barrels those packages actually export.
"""

from __future__ import annotations

from ..engine.builder import SourceBuilder
from ..engine.naming import NamingVariant
from .contract import PARENT_RPC_OPERATIONS, reexport
from .options import SourceFile, TemplateOptions
from .resources import DOMAIN_ERRORS, REPOSITORY_ERRORS, RPC_ERRORS, expansions, rpc_tag


EFFECT_RPC_DOC = "https://effect.website/docs/rpc"

SERVICE = SourceFile("service", "lib/server/service.ts", "Service port implementation over the repository port")
CQRS = SourceFile("cqrs", "lib/server/cqrs.ts", "Command and query handlers (CQRS)")
LAYERS = SourceFile("layers", "lib/server/layers.ts", "Live and test layers wired to data access", ("service",))
RPC_ERROR_MAPPING = SourceFile("rpc-errors", "lib/rpc/errors.ts", "Domain error to RPC error mapping")
RPC_HANDLERS = SourceFile(
    "rpc-handlers", "lib/rpc/handlers.ts", "Handlers for the contract's RPC group", ("rpc-errors",)
)

# domain or repository error suffix -> RPC error suffix it surfaces as
RPC_ERROR_FOR: tuple[tuple[str, str], ...] = (
    ("NotFoundError", "NotFoundRpcError"),
    ("NotFoundRepositoryError", "NotFoundRpcError"),
    ("PermissionError", "PermissionRpcError"),
    ("ValidationError", "ValidationRpcError"),
    ("ValidationRepositoryError", "ValidationRpcError"),
)

RPC_ERROR_ARGUMENTS: dict[str, str] = {
    "NotFoundRpcError": "{ message: error.message, %(id)s: error.%(id)s }",
    "PermissionRpcError": "{ message: error.message, operation: error.operation }",
    "ValidationRpcError": "{ message: error.message, ...(error.field !== undefined && { field: error.field }) }",
}


def source_files(options: TemplateOptions) -> list[SourceFile]:
    files = [SERVICE]
    if options.include_cqrs:
        files.append(CQRS)
    files.append(LAYERS)
    if options.include_rpc:
        files += [RPC_ERROR_MAPPING, RPC_HANDLERS]
    return files


def file_exports(
    file_key: str, variant: NamingVariant, options: TemplateOptions
) -> tuple[list[str], list[str]]:
    c = variant.class_name
    if file_key == "service":
        return [f"make{c}Service", f"{c}ServiceLive"], []
    if file_key == "cqrs":
        return [f"handle{c}Command", f"handle{c}Query"], []
    if file_key == "layers":
        return [f"{c}FeatureLive", f"{c}FeatureTest"], []
    if file_key == "rpc-errors":
        return [f"to{c}RpcError"], []
    if file_key == "rpc-handlers":
        return [f"{c}HandlersLive"], []
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
# lib/server/service.ts
# ---------------------------------------------------------------------------


def build_service(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "server/service",
        "Service",
        f"Implements {c}Service on top of {c}Repository. Missing records\n"
        f"surface as {c}NotFoundError; repository errors pass through unchanged.",
    )
    builder.add_import("effect", ["Effect", "Layer", "Option"])
    builder.add_import(contract, [f"{c}NotFoundError", f"{c}Repository", f"{c}Service"])
    builder.add_import(contract, f"{c}Id", type_only=True)

    builder.add_raw(
        f"export const make{c}Service = Effect.gen(function* () {{\n"
        f"  const repository = yield* {c}Repository\n"
        "\n"
        f"  const get = (id: {c}Id) =>\n"
        "    repository.findById(id).pipe(\n"
        "      Effect.flatMap(\n"
        "        Option.match({\n"
        f"          onNone: () => Effect.fail({c}NotFoundError.create({{ {variant.property_name}Id: id }})),\n"
        "          onSome: Effect.succeed\n"
        "        })\n"
        "      )\n"
        "    )\n"
        "\n"
        f"  return {c}Service.of({{\n"
        "    get,\n"
        "    list: (filters, pagination) => repository.findAll(filters, pagination),\n"
        "    create: (input) => repository.create(input),\n"
        "    update: (id, input) => get(id).pipe(Effect.zipRight(repository.update(id, input))),\n"
        "    delete: (id) => get(id).pipe(Effect.zipRight(repository.delete(id)))\n"
        "  })\n"
        "})"
    )
    builder.add_blank_line()
    builder.add_raw(f"export const {c}ServiceLive = Layer.effect({c}Service, make{c}Service)")


# ---------------------------------------------------------------------------
# lib/server/cqrs.ts
# ---------------------------------------------------------------------------


def build_cqrs(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    p = variant.plural_class_name
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "server/cqrs",
        "Command and Query Handlers",
        f"Dispatches {c}Command and {c}Query values to {c}Service.",
    )
    builder.add_import("effect", "Effect")
    builder.add_import(contract, f"{c}Service")
    builder.add_import(contract, [f"{c}Command", f"{c}Query"], type_only=True)

    builder.add_section_comment("Commands")
    builder.add_blank_line()
    builder.add_raw(
        f"export const handle{c}Command = (command: {c}Command) =>\n"
        "  Effect.gen(function* () {\n"
        f"    const service = yield* {c}Service\n"
        "    switch (command._tag) {\n"
        f'      case "Create{c}Command":\n'
        "        return yield* service.create({})\n"
        f'      case "Update{c}Command":\n'
        "        return yield* service.update(command.id, {})\n"
        f'      case "Delete{c}Command":\n'
        "        return yield* service.delete(command.id)\n"
        "    }\n"
        "  })"
    )
    builder.add_blank_line()
    builder.add_section_comment("Queries")
    builder.add_blank_line()
    builder.add_raw(
        f"export const handle{c}Query = (query: {c}Query) =>\n"
        "  Effect.gen(function* () {\n"
        f"    const service = yield* {c}Service\n"
        "    switch (query._tag) {\n"
        f'      case "Get{c}Query":\n'
        "        return yield* service.get(query.id)\n"
        f'      case "List{p}Query":\n'
        f'      case "Search{p}Query":\n'
        "        return yield* service.list(undefined, {\n"
        "          limit: query.pageSize,\n"
        "          offset: (query.page - 1) * query.pageSize\n"
        "        })\n"
        "    }\n"
        "  })"
    )


# ---------------------------------------------------------------------------
# lib/server/layers.ts
# ---------------------------------------------------------------------------


def build_layers(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    data_access = options.sibling_package("data-access", variant)
    _header(
        builder,
        variant,
        options,
        "server",
        "Feature Layers",
        f"{c}ServiceLive provided with the data-access layers.",
    )
    builder.add_import("effect", "Layer")
    builder.add_import(data_access, [f"{c}DataAccessLive", f"{c}DataAccessTest"])
    builder.add_import("./service", f"{c}ServiceLive")

    builder.add_raw(f"export const {c}FeatureLive = {c}ServiceLive.pipe(Layer.provide({c}DataAccessLive))")
    builder.add_blank_line()
    builder.add_raw(f"export const {c}FeatureTest = {c}ServiceLive.pipe(Layer.provide({c}DataAccessTest))")


# ---------------------------------------------------------------------------
# lib/rpc/errors.ts, lib/rpc/handlers.ts
# ---------------------------------------------------------------------------


def build_rpc_errors(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    values = expansions(variant)
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "rpc/errors",
        "RPC Error Mapping",
        "Domain and repository errors (Data.TaggedError) never cross the RPC\n"
        "boundary; handlers map them to the contract's Schema.TaggedError errors.",
        see=(EFFECT_RPC_DOC,),
    )
    domain = {error.suffix for error in (*DOMAIN_ERRORS.errors, *REPOSITORY_ERRORS.errors)}
    rpc = {error.suffix for error in RPC_ERRORS.errors}
    mapping = [(source, target) for source, target in RPC_ERROR_FOR if source in domain and target in rpc]
    builder.add_import(contract, sorted({variant.symbol(source) for source, _ in mapping}))
    builder.add_import(contract, sorted({variant.symbol(target) for _, target in mapping}))
    builder.add_import(contract, [variant.symbol("Error"), RPC_ERRORS.union_name(variant)], type_only=True)

    branches = []
    for source, target in mapping:
        arguments = RPC_ERROR_ARGUMENTS[target] % values
        branches.append(
            f"  if (error instanceof {variant.symbol(source)}) {{\n"
            f"    return new {variant.symbol(target)}({arguments})\n"
            "  }"
        )
    builder.add_jsdoc(
        f"Map any {c}Error to the error sent to RPC clients\n\n"
        "Errors without a client-facing counterpart surface as validation\n"
        "failures carrying only their message."
    )
    builder.add_raw(
        f"export const to{c}RpcError = (error: {variant.symbol('Error')}): {RPC_ERRORS.union_name(variant)} => {{\n"
        + "\n".join(branches)
        + f"\n  return new {c}ValidationRpcError({{ message: error.message }})\n"
        "}"
    )


def build_rpc_handlers(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "rpc/handlers",
        "RPC Handlers",
        f"Implements every RPC of {c}Rpcs through {c}Service.",
        see=(EFFECT_RPC_DOC,),
    )
    builder.add_import("effect", ["DateTime", "Effect"])
    builder.add_import(contract, [f"{c}Rpcs", f"{c}Service"])
    builder.add_import("./errors", f"to{c}RpcError")

    get, list_, create, update, delete = (rpc_tag(variant, op, False) for op in PARENT_RPC_OPERATIONS)
    builder.add_raw(
        f"export const {c}HandlersLive = {c}Rpcs.toLayer(\n"
        "  Effect.gen(function* () {\n"
        f"    const service = yield* {c}Service\n"
        "    return {\n"
        f"      {get}: ({{ id }}) => service.get(id).pipe(Effect.mapError(to{c}RpcError)),\n"
        f"      {list_}: ({{ page = 1, pageSize = 20 }}) =>\n"
        "        service.list(undefined, { limit: pageSize, offset: (page - 1) * pageSize }).pipe(\n"
        "          Effect.map((result) => ({ items: result.items, total: result.total, page, pageSize })),\n"
        f"          Effect.mapError(to{c}RpcError)\n"
        "        ),\n"
        f"      {create}: ({{ input }}) => service.create(input).pipe(Effect.mapError(to{c}RpcError)),\n"
        f"      {update}: ({{ id, input }}) => service.update(id, input).pipe(Effect.mapError(to{c}RpcError)),\n"
        f"      {delete}: ({{ id }}) =>\n"
        "        service.delete(id).pipe(\n"
        "          Effect.zipRight(DateTime.now),\n"
        "          Effect.map((deletedAt) => ({ success: true as const, deletedAt })),\n"
        f"          Effect.mapError(to{c}RpcError)\n"
        "        )\n"
        "    }\n"
        "  })\n"
        ")"
    )


# ---------------------------------------------------------------------------
# index.ts
# ---------------------------------------------------------------------------


SECTION_TITLES: dict[str, str] = {
    "service": "Service",
    "cqrs": "Command and Query Handlers (CQRS)",
    "layers": "Layers",
    "rpc-errors": "RPC Error Mapping",
    "rpc-handlers": "RPC Handlers",
}


def build_index(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "index",
        "Feature",
        f"Public API of the feature library. Provide {variant.class_name}FeatureLive to\n"
        "run the service against the data-access layers.",
    )
    for file in source_files(options):
        values, types = file_exports(file.key, variant, options)
        builder.add_section_comment(SECTION_TITLES[file.key])
        builder.add_blank_line()
        builder.add_raw(reexport(values, types, "./" + file.path.removesuffix(".ts")))
        builder.add_blank_line()
