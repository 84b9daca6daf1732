"""Contract-library templates for the parent domain.

One routine per generated file under ``src/lib/`` plus the package barrel
``src/index.ts``.  Every routine fills the ``SourceBuilder`` it is handed and
spells cross-file symbols only through ``NamingVariant.symbol`` (or the
resource tables in :mod:`libforge.templates.resources`), so the barrel and the
files it re-exports always agree on names.
"""

from __future__ import annotations

from dataclasses import replace

from ..engine.builder import SourceBuilder
from ..engine.naming import NamingVariant
from .options import SourceFile, TemplateOptions
from .resources import (
    DOMAIN_ERRORS,
    REPOSITORY_ERRORS,
    RPC_ERRORS,
    RpcOperation,
    add_error_set,
    add_rpc_group,
    add_rpc_operations,
    expansions,
    rpc_class_name,
)


EFFECT_ERRORS_DOC = "https://effect.website/docs/error-management/expected-errors"
EFFECT_SCHEMA_DOC = "https://effect.website/docs/schema/introduction"
EFFECT_RPC_DOC = "https://effect.website/docs/rpc"

ENTITY_BASE_FIELDS = '"id" | "createdAt" | "updatedAt"'

PARENT_RPC_OPERATIONS: tuple[RpcOperation, ...] = (
    RpcOperation(
        "Get%(title)s",
        "Get %(lower)s by ID",
        "public",
        (("id", "%(title)sId"),),
        "%(title)s",
    ),
    RpcOperation(
        "List%(plural)s",
        "List %(lower)s records with pagination",
        "public",
        (
            ("page", "Schema.optional(Schema.Number.pipe(Schema.int(), Schema.positive()))"),
            ("pageSize", "Schema.optional(Schema.Number.pipe(Schema.int(), Schema.positive()))"),
        ),
        "PaginatedResponse(%(title)s)",
    ),
    RpcOperation(
        "Create%(title)s",
        "Create a new %(lower)s",
        "protected",
        (("input", "Create%(title)sInput"),),
        "%(title)s",
    ),
    RpcOperation(
        "Update%(title)s",
        "Update an existing %(lower)s",
        "protected",
        (("id", "%(title)sId"), ("input", "Update%(title)sInput")),
        "%(title)s",
    ),
    RpcOperation(
        "Delete%(title)s",
        "Delete a %(lower)s",
        "protected",
        (("id", "%(title)sId"),),
        "Schema.Struct({ success: Schema.Literal(true), deletedAt: Schema.DateTimeUtc })",
    ),
)


# ---------------------------------------------------------------------------
# Export tables
# ---------------------------------------------------------------------------


def file_exports(
    file_key: str, variant: NamingVariant, options: TemplateOptions
) -> tuple[list[str], list[str]]:
    """Return ``(value_names, type_names)`` a ``src/lib`` file exports."""
    c = variant.class_name
    p = variant.plural_class_name
    if file_key == "errors":
        values = DOMAIN_ERRORS.class_names(variant) + REPOSITORY_ERRORS.class_names(variant)
        types = [
            DOMAIN_ERRORS.union_name(variant),
            REPOSITORY_ERRORS.union_name(variant),
            variant.symbol("Error"),
        ]
        return values, types
    if file_key == "entities":
        return [f"{c}Id", c, f"parse{c}", f"encode{c}"], []
    if file_key == "ports":
        values = [f"{c}Repository", f"{c}Service"]
        if options.include_cqrs:
            values.append(f"{c}ProjectionRepository")
        return values, [f"{c}Filters", "OffsetPaginationParams", "SortOptions", "PaginatedResult"]
    if file_key == "events":
        values = [
            "EventMetadata",
            "AggregateMetadata",
            f"{c}CreatedEvent",
            f"{c}UpdatedEvent",
            f"{c}DeletedEvent",
            f"{c}EventSchema",
        ]
        return values, [f"{c}DomainEvent"]
    if file_key == "commands":
        values = [f"Create{c}Command", f"Update{c}Command", f"Delete{c}Command", f"{c}CommandSchema"]
        return values, [f"{c}Command"]
    if file_key == "queries":
        values = [f"Get{c}Query", f"List{p}Query", f"Search{p}Query", f"{c}QuerySchema"]
        return values, [f"{c}Query"]
    if file_key == "projections":
        return [f"{c}ListProjection", f"{c}DetailProjection"], []
    if file_key == "rpc-errors":
        return RPC_ERRORS.class_names(variant), [RPC_ERRORS.union_name(variant)]
    if file_key == "rpc-definitions":
        operations = [rpc_class_name(variant, op, False) for op in PARENT_RPC_OPERATIONS]
        values = ["RouteTag", "PaginationParams", "PaginatedResponse", f"Create{c}Input", f"Update{c}Input"]
        return values + operations, ["RouteType"]
    if file_key == "rpc-group":
        return [f"{c}Rpcs", f"{c}RpcsByRoute"], []
    raise KeyError(file_key)


def lib_files(options: TemplateOptions) -> list[str]:
    """``src/lib`` file keys emitted for *options*, in barrel order."""
    files = ["errors", "entities", "ports", "events"]
    if options.include_cqrs:
        files += ["commands", "queries", "projections"]
    if options.include_rpc:
        files += ["rpc-errors", "rpc-definitions", "rpc-group"]
    return files


CONTRACT_FILES: dict[str, SourceFile] = {
    file.key: file
    for file in (
        SourceFile("errors", "lib/errors.ts", "Domain and repository errors (Data.TaggedError)"),
        SourceFile("entities", "lib/entities.ts", "Domain entities and identifiers (Schema.Class)"),
        SourceFile("ports", "lib/ports.ts", "Repository and service ports (Context.Tag)", ("entities", "errors")),
        SourceFile("events", "lib/events.ts", "Domain events", ("entities",)),
        SourceFile("commands", "lib/commands.ts", "CQRS command schemas", ("entities",)),
        SourceFile("queries", "lib/queries.ts", "CQRS query schemas", ("entities",)),
        SourceFile("projections", "lib/projections.ts", "CQRS read-model projections", ("entities",)),
        SourceFile("rpc-errors", "lib/rpc-errors.ts", "Serializable RPC errors (Schema.TaggedError)"),
        SourceFile(
            "rpc-definitions",
            "lib/rpc-definitions.ts",
            "RPC operation definitions and route types",
            ("entities", "rpc-errors"),
        ),
        SourceFile("rpc-group", "lib/rpc-group.ts", "RPC group for router registration", ("rpc-definitions",)),
    )
}


def source_files(options: TemplateOptions) -> list[SourceFile]:
    """Files under ``src/`` besides the barrel, in barrel order."""
    files = [CONTRACT_FILES[key] for key in lib_files(options)]
    if options.include_cqrs:
        # ports.ts also declares the projection repository
        files = [
            replace(file, depends=(*file.depends, "projections")) if file.key == "ports" else file
            for file in files
        ]
    return files


def _header(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    file_key: str,
    title: str,
    description: str,
    see: tuple[str, ...] = (),
) -> None:
    builder.add_header(
        title=f"{variant.class_name} {title}",
        description=description,
        module=options.module_path(variant, file_key),
        since=options.since,
        see=see,
    )


# ---------------------------------------------------------------------------
# errors.ts
# ---------------------------------------------------------------------------


def build_errors(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "errors",
        "Domain Errors",
        f"Domain and repository errors for the {' '.join(variant.tokens)} domain.\n\n"
        "Data.TaggedError errors stay inside the service boundary. Errors that\n"
        "must cross an RPC boundary live in rpc-errors.ts.",
        see=(EFFECT_ERRORS_DOC,),
    )
    add_error_set(builder, variant, DOMAIN_ERRORS)
    add_error_set(builder, variant, REPOSITORY_ERRORS)

    builder.add_section_comment("Combined Error Type")
    builder.add_blank_line()
    builder.add_jsdoc(f"Any error produced by the {' '.join(variant.tokens)} domain")
    builder.add_raw(
        f"export type {variant.symbol('Error')} = "
        f"{DOMAIN_ERRORS.union_name(variant)} | {REPOSITORY_ERRORS.union_name(variant)}"
    )


# ---------------------------------------------------------------------------
# entities.ts
# ---------------------------------------------------------------------------


def build_entities(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "entities",
        "Domain Entities",
        "Domain entities defined with Schema.Class for runtime validation.",
        see=(EFFECT_SCHEMA_DOC,),
    )
    builder.add_import("effect", "Schema")

    builder.add_section_comment("Identifiers")
    builder.add_blank_line()
    builder.add_jsdoc(f"{c} identifier (UUID string)")
    builder.add_raw(
        f'export const {c}Id = Schema.UUID.pipe(Schema.brand("{c}Id"))\n\n'
        f"export type {c}Id = Schema.Schema.Type<typeof {c}Id>"
    )
    builder.add_blank_line()

    builder.add_section_comment("Domain Entity")
    builder.add_blank_line()
    builder.add_jsdoc(
        f"{c} domain entity\n\n"
        "Separate from database row types so domain-specific validation can be added."
    )
    builder.add_raw(
        f'export class {c} extends Schema.Class<{c}>("{c}")({{\n'
        f"  /** Unique identifier */\n"
        f"  id: {c}Id,\n\n"
        f"  /** Created timestamp */\n"
        f"  createdAt: Schema.DateTimeUtc,\n\n"
        f"  /** Updated timestamp */\n"
        f"  updatedAt: Schema.DateTimeUtc\n"
        f"}}) {{}}"
    )
    builder.add_blank_line()

    builder.add_section_comment("Helper Functions")
    builder.add_blank_line()
    builder.add_jsdoc(f"Parse {c} from unknown data")
    builder.add_raw(f"export const parse{c} = Schema.decodeUnknown({c})")
    builder.add_blank_line()
    builder.add_jsdoc(f"Encode {c} to a plain object")
    builder.add_raw(f"export const encode{c} = Schema.encode({c})")


# ---------------------------------------------------------------------------
# ports.ts
# ---------------------------------------------------------------------------


def build_ports(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    lower = " ".join(variant.tokens)
    package = options.package_for(variant)
    _header(
        builder,
        variant,
        options,
        "ports",
        "Ports",
        f"Repository and service interfaces for the {lower} domain.\n\n"
        "Ports are Context.Tag classes; data-access and feature libraries\n"
        "provide their implementations as layers.",
    )
    builder.add_import("effect", "Context")
    builder.add_import("effect", ["Effect", "Option"], type_only=True)
    builder.add_import("./entities", [c, f"{c}Id"], type_only=True)
    builder.add_import("./errors", [f"{c}Error", f"{c}RepositoryError"], type_only=True)

    builder.add_section_comment("Supporting Types")
    builder.add_blank_line()
    builder.add_jsdoc(f"Filter options for querying {variant.plural_file_name.replace('-', ' ')}")
    builder.add_raw(
        f"export interface {c}Filters {{\n"
        "  readonly createdAfter?: Date\n"
        "  readonly createdBefore?: Date\n"
        "  readonly updatedAfter?: Date\n"
        "  readonly updatedBefore?: Date\n"
        "}"
    )
    builder.add_blank_line()
    builder.add_jsdoc("Offset-based pagination parameters")
    builder.add_raw(
        "export interface OffsetPaginationParams {\n"
        "  readonly limit: number\n"
        "  readonly offset: number\n"
        "}"
    )
    builder.add_blank_line()
    builder.add_jsdoc("Sort options")
    builder.add_raw(
        "export interface SortOptions {\n"
        "  readonly field: string\n"
        '  readonly direction: "asc" | "desc"\n'
        "}"
    )
    builder.add_blank_line()
    builder.add_jsdoc("Paginated result set")
    builder.add_raw(
        "export interface PaginatedResult<T> {\n"
        "  readonly items: ReadonlyArray<T>\n"
        "  readonly total: number\n"
        "  readonly limit: number\n"
        "  readonly offset: number\n"
        "  readonly hasMore: boolean\n"
        "}"
    )
    builder.add_blank_line()

    builder.add_section_comment("Repository Port")
    builder.add_blank_line()
    builder.add_jsdoc(f"{c} repository port\n\nPersistence operations for {lower} entities.")
    builder.add_raw(
        context_tag(
            f"{c}Repository",
            package,
            [
                f"readonly findById: (id: {c}Id) => Effect.Effect<Option.Option<{c}>, {c}RepositoryError>",
                f"readonly findAll: (\n      filters?: {c}Filters,\n"
                f"      pagination?: OffsetPaginationParams,\n      sort?: SortOptions\n"
                f"    ) => Effect.Effect<PaginatedResult<{c}>, {c}RepositoryError>",
                f"readonly count: (filters?: {c}Filters) => Effect.Effect<number, {c}RepositoryError>",
                f"readonly create: (\n      input: Omit<{c}, {ENTITY_BASE_FIELDS}>\n"
                f"    ) => Effect.Effect<{c}, {c}RepositoryError>",
                f"readonly update: (\n      id: {c}Id,\n"
                f"      input: Partial<Omit<{c}, {ENTITY_BASE_FIELDS}>>\n"
                f"    ) => Effect.Effect<{c}, {c}RepositoryError>",
                f"readonly delete: (id: {c}Id) => Effect.Effect<void, {c}RepositoryError>",
            ],
        )
    )
    builder.add_blank_line()

    builder.add_section_comment("Service Port")
    builder.add_blank_line()
    builder.add_jsdoc(f"{c} service port\n\nBusiness operations exposed to features and RPC handlers.")
    builder.add_raw(
        context_tag(
            f"{c}Service",
            package,
            [
                f"readonly get: (id: {c}Id) => Effect.Effect<{c}, {c}Error>",
                f"readonly list: (\n      filters?: {c}Filters,\n"
                f"      pagination?: OffsetPaginationParams\n"
                f"    ) => Effect.Effect<PaginatedResult<{c}>, {c}Error>",
                f"readonly create: (input: Omit<{c}, {ENTITY_BASE_FIELDS}>) => Effect.Effect<{c}, {c}Error>",
                f"readonly update: (\n      id: {c}Id,\n"
                f"      input: Partial<Omit<{c}, {ENTITY_BASE_FIELDS}>>\n"
                f"    ) => Effect.Effect<{c}, {c}Error>",
                f"readonly delete: (id: {c}Id) => Effect.Effect<void, {c}Error>",
            ],
        )
    )

    if options.include_cqrs:
        builder.add_blank_line()
        builder.add_import(
            "./projections", [f"{c}DetailProjection", f"{c}ListProjection"], type_only=True
        )
        builder.add_section_comment("Projection Repository Port (CQRS)")
        builder.add_blank_line()
        builder.add_jsdoc(f"Read-model access for {lower} projections")
        builder.add_raw(
            context_tag(
                f"{c}ProjectionRepository",
                package,
                [
                    f"readonly findListProjection: (\n      filters?: {c}Filters,\n"
                    f"      pagination?: OffsetPaginationParams\n"
                    f"    ) => Effect.Effect<PaginatedResult<{c}ListProjection>, {c}RepositoryError>",
                    f"readonly findDetailProjection: (\n      id: {c}Id\n"
                    f"    ) => Effect.Effect<Option.Option<{c}DetailProjection>, {c}RepositoryError>",
                ],
            )
        )


def context_tag(name: str, package: str, members: list[str]) -> str:
    """``Context.Tag`` class declaration keyed ``"<package>/<name>"``."""
    body = "\n".join(f"    {member}" for member in members)
    return (
        f'export class {name} extends Context.Tag("{package}/{name}")<\n'
        f"  {name},\n"
        f"  {{\n{body}\n  }}\n"
        f">() {{}}"
    )


# ---------------------------------------------------------------------------
# events.ts
# ---------------------------------------------------------------------------


def build_events(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    prop = variant.property_name
    _header(
        builder,
        variant,
        options,
        "events",
        "Domain Events",
        f"Events published when {variant.plural_file_name.replace('-', ' ')} change.\n\n"
        "Each event carries event metadata, aggregate metadata and its payload.",
        see=(EFFECT_SCHEMA_DOC,),
    )
    builder.add_import("effect", "Schema")
    builder.add_import("./entities", f"{c}Id")

    builder.add_section_comment("Event Metadata")
    builder.add_blank_line()
    builder.add_jsdoc("Metadata shared by every domain event")
    builder.add_raw(
        "export const EventMetadata = Schema.Struct({\n"
        "  eventId: Schema.UUID,\n"
        "  occurredAt: Schema.DateTimeUtc,\n"
        "  correlationId: Schema.optional(Schema.UUID),\n"
        "  causationId: Schema.optional(Schema.UUID),\n"
        "  userId: Schema.optional(Schema.UUID)\n"
        "})"
    )
    builder.add_blank_line()
    builder.add_jsdoc("Identity and version of the aggregate an event belongs to")
    builder.add_raw(
        "export const AggregateMetadata = Schema.Struct({\n"
        "  aggregateId: Schema.UUID,\n"
        "  aggregateType: Schema.String,\n"
        "  aggregateVersion: Schema.Number.pipe(Schema.int(), Schema.nonNegative())\n"
        "})"
    )
    builder.add_blank_line()

    builder.add_section_comment("Lifecycle Events")
    builder.add_blank_line()
    payloads = {
        "Created": f"  {prop}Id: {c}Id",
        "Updated": f"  {prop}Id: {c}Id,\n  changedFields: Schema.Array(Schema.String)",
        "Deleted": f"  {prop}Id: {c}Id,\n  softDelete: Schema.Boolean",
    }
    events = []
    for verb, payload in payloads.items():
        name = f"{c}{verb}Event"
        events.append(name)
        builder.add_jsdoc(f"Published when a {' '.join(variant.tokens)} is {verb.lower()}")
        builder.add_raw(
            f'export class {name} extends Schema.TaggedClass<{name}>()("{name}", {{\n'
            f"  metadata: EventMetadata,\n"
            f"  aggregate: AggregateMetadata,\n"
            f"{payload}\n"
            f"}}) {{}}"
        )
        builder.add_blank_line()

    builder.add_section_comment("Event Union")
    builder.add_blank_line()
    builder.add_raw(f"export const {c}EventSchema = Schema.Union({', '.join(events)})")
    builder.add_blank_line()
    builder.add_raw(f"export type {c}DomainEvent = Schema.Schema.Type<typeof {c}EventSchema>")


# ---------------------------------------------------------------------------
# CQRS: commands.ts, queries.ts, projections.ts
# ---------------------------------------------------------------------------


def build_commands(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "commands",
        "Commands",
        "CQRS write-side commands. Each command is a tagged schema class\n"
        "dispatched to its handler in the feature layer.",
    )
    builder.add_import("effect", "Schema")
    builder.add_import("./entities", f"{c}Id")

    builder.add_section_comment("Commands")
    builder.add_blank_line()
    commands = {
        f"Create{c}Command": "  // Domain-specific creation fields\n  requestedBy: Schema.optional(Schema.UUID)",
        f"Update{c}Command": f"  id: {c}Id,\n  requestedBy: Schema.optional(Schema.UUID)",
        f"Delete{c}Command": f"  id: {c}Id,\n  softDelete: Schema.optionalWith(Schema.Boolean, {{ default: () => true }})",
    }
    for name, fields in commands.items():
        builder.add_raw(
            f'export class {name} extends Schema.TaggedClass<{name}>()("{name}", {{\n{fields}\n}}) {{}}'
        )
        builder.add_blank_line()

    builder.add_section_comment("Command Union")
    builder.add_blank_line()
    builder.add_raw(f"export const {c}CommandSchema = Schema.Union({', '.join(commands)})")
    builder.add_blank_line()
    builder.add_raw(f"export type {c}Command = Schema.Schema.Type<typeof {c}CommandSchema>")


def build_queries(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    p = variant.plural_class_name
    _header(
        builder,
        variant,
        options,
        "queries",
        "Queries",
        "CQRS read-side queries answered from projections.",
    )
    builder.add_import("effect", "Schema")
    builder.add_import("./entities", f"{c}Id")

    builder.add_section_comment("Queries")
    builder.add_blank_line()
    pagination = (
        "  page: Schema.optionalWith(Schema.Number.pipe(Schema.int(), Schema.positive()), { default: () => 1 }),\n"
        "  pageSize: Schema.optionalWith(Schema.Number.pipe(Schema.int(), Schema.positive()), { default: () => 20 })"
    )
    queries = {
        f"Get{c}Query": f"  id: {c}Id",
        f"List{p}Query": pagination,
        f"Search{p}Query": f"  term: Schema.String.pipe(Schema.minLength(1)),\n{pagination}",
    }
    for name, fields in queries.items():
        builder.add_raw(
            f'export class {name} extends Schema.TaggedClass<{name}>()("{name}", {{\n{fields}\n}}) {{}}'
        )
        builder.add_blank_line()

    builder.add_section_comment("Query Union")
    builder.add_blank_line()
    builder.add_raw(f"export const {c}QuerySchema = Schema.Union({', '.join(queries)})")
    builder.add_blank_line()
    builder.add_raw(f"export type {c}Query = Schema.Schema.Type<typeof {c}QuerySchema>")


def build_projections(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "projections",
        "Projections",
        "Read models optimised for list and detail views.",
    )
    builder.add_import("effect", "Schema")
    builder.add_import("./entities", f"{c}Id")

    builder.add_section_comment("List Projection")
    builder.add_blank_line()
    builder.add_raw(
        f'export class {c}ListProjection extends Schema.Class<{c}ListProjection>("{c}ListProjection")({{\n'
        f"  id: {c}Id,\n"
        f"  updatedAt: Schema.DateTimeUtc\n"
        f"}}) {{}}"
    )
    builder.add_blank_line()
    builder.add_section_comment("Detail Projection")
    builder.add_blank_line()
    builder.add_raw(
        f'export class {c}DetailProjection extends Schema.Class<{c}DetailProjection>("{c}DetailProjection")({{\n'
        f"  id: {c}Id,\n"
        f"  createdAt: Schema.DateTimeUtc,\n"
        f"  updatedAt: Schema.DateTimeUtc,\n"
        f"  version: Schema.Number.pipe(Schema.int(), Schema.nonNegative())\n"
        f"}}) {{}}"
    )


# ---------------------------------------------------------------------------
# RPC: rpc-errors.ts, rpc-definitions.ts, rpc-group.ts
# ---------------------------------------------------------------------------


def build_rpc_errors(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "rpc-errors",
        "RPC Errors",
        "Serializable errors returned across the RPC boundary.",
        see=(EFFECT_RPC_DOC,),
    )
    add_error_set(builder, variant, RPC_ERRORS)


def build_rpc_definitions(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    values = expansions(variant)
    _header(
        builder,
        variant,
        options,
        "rpc-definitions",
        "RPC Definitions",
        "Contract-first RPC definitions. Handlers in the feature layer\n"
        "implement these through the RPC group in rpc-group.ts.",
        see=(EFFECT_RPC_DOC,),
    )
    builder.add_import("@effect/rpc", "Rpc")
    builder.add_import("effect", "Schema")
    builder.add_import("./entities", [c, f"{c}Id"])
    builder.add_import("./rpc-errors", RPC_ERRORS.union_name(variant))

    builder.add_section_comment("Route Types")
    builder.add_blank_line()
    builder.add_jsdoc("Authentication requirement of an RPC operation")
    builder.add_raw('export type RouteType = "public" | "protected" | "service"')
    builder.add_blank_line()
    builder.add_jsdoc("Static key RPC classes use to declare their route type")
    builder.add_raw('export const RouteTag: unique symbol = Symbol.for("@contract/RouteTag")')
    builder.add_blank_line()

    builder.add_section_comment("Request/Response Schemas")
    builder.add_blank_line()
    builder.add_raw(
        "export const PaginationParams = Schema.Struct({\n"
        "  page: Schema.Number.pipe(Schema.int(), Schema.positive()),\n"
        "  pageSize: Schema.Number.pipe(Schema.int(), Schema.positive())\n"
        "})"
    )
    builder.add_blank_line()
    builder.add_raw(
        "export const PaginatedResponse = <T extends Schema.Schema.Any>(itemSchema: T) =>\n"
        "  Schema.Struct({\n"
        "    items: Schema.Array(itemSchema),\n"
        "    total: Schema.Number.pipe(Schema.int(), Schema.nonNegative()),\n"
        "    page: Schema.Number.pipe(Schema.int(), Schema.positive()),\n"
        "    pageSize: Schema.Number.pipe(Schema.int(), Schema.positive())\n"
        "  })"
    )
    builder.add_blank_line()
    builder.add_raw(
        f"export const Create{c}Input = Schema.Struct({{\n"
        f"  name: Schema.String.pipe(Schema.minLength(1), Schema.maxLength(255))\n"
        f"}})\n\n"
        f"export type Create{c}Input = Schema.Schema.Type<typeof Create{c}Input>"
    )
    builder.add_blank_line()
    builder.add_raw(
        f"export const Update{c}Input = Schema.Struct({{\n"
        f"  name: Schema.optional(Schema.String.pipe(Schema.minLength(1), Schema.maxLength(255)))\n"
        f"}})\n\n"
        f"export type Update{c}Input = Schema.Schema.Type<typeof Update{c}Input>"
    )
    builder.add_blank_line()

    builder.add_section_comment("RPC Definitions")
    builder.add_blank_line()
    add_rpc_operations(
        builder,
        variant,
        PARENT_RPC_OPERATIONS,
        RPC_ERRORS.union_name(variant),
        values,
        namespaced=False,
    )


def build_rpc_group(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "rpc-group",
        "RPC Group",
        "Groups every RPC definition for router registration.",
        see=(EFFECT_RPC_DOC,),
    )
    builder.add_import("@effect/rpc", "RpcGroup")
    builder.add_import(
        "./rpc-definitions",
        [rpc_class_name(variant, op, False) for op in PARENT_RPC_OPERATIONS],
    )
    builder.add_section_comment("RPC Group")
    builder.add_blank_line()
    add_rpc_group(builder, f"{c}Rpcs", variant, PARENT_RPC_OPERATIONS, namespaced=False)


# ---------------------------------------------------------------------------
# index.ts
# ---------------------------------------------------------------------------


SECTION_TITLES: dict[str, str] = {
    "errors": "Errors",
    "entities": "Entities",
    "ports": "Ports",
    "events": "Events",
    "commands": "Commands (CQRS)",
    "queries": "Queries (CQRS)",
    "projections": "Projections (CQRS)",
    "rpc-errors": "RPC Errors",
    "rpc-definitions": "RPC Definitions",
    "rpc-group": "RPC Group",
}


def reexport(values: list[str], types: list[str], specifier: str) -> str:
    """Named re-export block; type-only names carry the ``type`` modifier."""
    names = [*values, *(f"type {name}" for name in types)]
    body = ",\n".join(f"  {name}" for name in names)
    return f"export {{\n{body}\n}} from '{specifier}'"


def build_index(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "index",
        "Contract",
        "Public API of the contract library. Uses named re-exports so\n"
        "bundlers can tree-shake unused symbols.",
    )
    for file_key in lib_files(options):
        values, types = file_exports(file_key, variant, options)
        builder.add_section_comment(SECTION_TITLES[file_key])
        builder.add_blank_line()
        builder.add_raw(reexport(values, types, f"./lib/{file_key}"))
        builder.add_blank_line()
    if options.submodules:
        subpaths = ", ".join(f'"{options.package_for(variant)}/{sub}"' for sub in options.submodules)
        builder.add_comment(f"Submodules are published as subpath exports: {subpaths}")
