"""Data-access library templates.

A data-access library implements the repository port of its contract
(``@scope/contract-<name>``) and publishes it as Effect layers.  The catalog
emits an in-memory implementation backed by a ``Ref``; replacing
``lib/repository.ts`` with a database-backed one leaves the layers and every
consumer untouched.
"""

from __future__ import annotations

from ..engine.builder import SourceBuilder
from ..engine.naming import NamingVariant
from .contract import reexport
from .options import SourceFile, TemplateOptions


EFFECT_LAYERS_DOC = "https://effect.website/docs/requirements-management/layers"

QUERIES = SourceFile("queries", "lib/shared/queries.ts", "Filtering, sorting and pagination helpers")
REPOSITORY = SourceFile(
    "repository", "lib/repository.ts", "In-memory implementation of the repository port", ("queries",)
)
PROJECTION_REPOSITORY = SourceFile(
    "projection-repository",
    "lib/projection-repository.ts",
    "Projection repository derived from the repository port (CQRS)",
)


def source_files(options: TemplateOptions) -> list[SourceFile]:
    files = [QUERIES, REPOSITORY]
    layer_deps = ["repository"]
    if options.include_cqrs:
        files.append(PROJECTION_REPOSITORY)
        layer_deps.append("projection-repository")
    files.append(
        SourceFile("layers", "lib/server/layers.ts", "Live and test layers", tuple(layer_deps))
    )
    return files


def file_exports(
    file_key: str, variant: NamingVariant, options: TemplateOptions
) -> tuple[list[str], list[str]]:
    c = variant.class_name
    if file_key == "queries":
        return [f"apply{c}Filters", f"sort{variant.plural_class_name}", f"paginate{variant.plural_class_name}"], []
    if file_key == "repository":
        return [f"make{c}Repository", f"{c}RepositoryLive"], []
    if file_key == "projection-repository":
        return [f"{c}ProjectionRepositoryLive"], []
    if file_key == "layers":
        return [f"{c}DataAccessLive", f"{c}DataAccessTest"], []
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
# lib/shared/queries.ts
# ---------------------------------------------------------------------------


def build_queries(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    p = variant.plural_class_name
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "shared/queries",
        "Query Helpers",
        f"Pure helpers applying {c}Filters, SortOptions and offset pagination\n"
        "to an in-memory collection.",
    )
    builder.add_import("effect", "DateTime")
    builder.add_import(
        contract,
        [c, f"{c}Filters", "OffsetPaginationParams", "PaginatedResult", "SortOptions"],
        type_only=True,
    )

    builder.add_section_comment("Filtering")
    builder.add_blank_line()
    builder.add_jsdoc(f"Keep the {variant.plural_file_name.replace('-', ' ')} matching every set filter")
    builder.add_raw(
        f"export const apply{c}Filters = (\n"
        f"  items: ReadonlyArray<{c}>,\n"
        f"  filters: {c}Filters = {{}}\n"
        f"): ReadonlyArray<{c}> =>\n"
        "  items.filter((item) => {\n"
        "    const created = DateTime.toEpochMillis(item.createdAt)\n"
        "    const updated = DateTime.toEpochMillis(item.updatedAt)\n"
        "    if (filters.createdAfter && created <= filters.createdAfter.getTime()) return false\n"
        "    if (filters.createdBefore && created >= filters.createdBefore.getTime()) return false\n"
        "    if (filters.updatedAfter && updated <= filters.updatedAfter.getTime()) return false\n"
        "    if (filters.updatedBefore && updated >= filters.updatedBefore.getTime()) return false\n"
        "    return true\n"
        "  })"
    )
    builder.add_blank_line()

    builder.add_section_comment("Sorting")
    builder.add_blank_line()
    builder.add_jsdoc("Sort by `createdAt` (default) or `updatedAt`")
    builder.add_raw(
        f"export const sort{p} = (\n"
        f"  items: ReadonlyArray<{c}>,\n"
        "  sort?: SortOptions\n"
        f"): ReadonlyArray<{c}> => {{\n"
        "  if (!sort) return items\n"
        '  const direction = sort.direction === "asc" ? 1 : -1\n'
        f"  const timestamp = (item: {c}) =>\n"
        '    DateTime.toEpochMillis(sort.field === "updatedAt" ? item.updatedAt : item.createdAt)\n'
        "  return [...items].sort((a, b) => (timestamp(a) - timestamp(b)) * direction)\n"
        "}"
    )
    builder.add_blank_line()

    builder.add_section_comment("Pagination")
    builder.add_blank_line()
    builder.add_raw(
        f"export const paginate{p} = (\n"
        f"  items: ReadonlyArray<{c}>,\n"
        "  pagination: OffsetPaginationParams = { limit: 50, offset: 0 }\n"
        f"): PaginatedResult<{c}> => ({{\n"
        "  items: items.slice(pagination.offset, pagination.offset + pagination.limit),\n"
        "  total: items.length,\n"
        "  limit: pagination.limit,\n"
        "  offset: pagination.offset,\n"
        "  hasMore: pagination.offset + pagination.limit < items.length\n"
        "})"
    )


# ---------------------------------------------------------------------------
# lib/repository.ts
# ---------------------------------------------------------------------------


def build_repository(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    p = variant.plural_class_name
    id_field = f"{variant.property_name}Id"
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "repository",
        "Repository",
        f"In-memory implementation of {c}Repository.\n\n"
        "State lives in a Ref created when the layer is built, so every\n"
        "layer build starts from an empty store.",
        see=(EFFECT_LAYERS_DOC,),
    )
    builder.add_import("effect", ["DateTime", "Effect", "Layer", "Option", "Ref"])
    builder.add_import(contract, [c, f"{c}Id", f"{c}NotFoundRepositoryError", f"{c}Repository"])
    builder.add_import("./shared/queries", [f"apply{c}Filters", f"paginate{p}", f"sort{p}"])

    builder.add_section_comment("Implementation")
    builder.add_blank_line()
    builder.add_jsdoc(f"Build a {c}Repository over a fresh in-memory store")
    builder.add_raw(
        f"export const make{c}Repository = Effect.gen(function* () {{\n"
        f"  const store = yield* Ref.make(new Map<{c}Id, {c}>())\n"
        "\n"
        f"  const findById = (id: {c}Id) =>\n"
        "    Ref.get(store).pipe(Effect.map((items) => Option.fromNullable(items.get(id))))\n"
        "\n"
        f"  const getOrFail = (id: {c}Id) =>\n"
        "    findById(id).pipe(\n"
        "      Effect.flatMap(\n"
        "        Option.match({\n"
        f"          onNone: () => Effect.fail({c}NotFoundRepositoryError.create({{ {id_field}: id }})),\n"
        "          onSome: Effect.succeed\n"
        "        })\n"
        "      )\n"
        "    )\n"
        "\n"
        f"  return {c}Repository.of({{\n"
        "    findById,\n"
        "    findAll: (filters, pagination, sort) =>\n"
        "      Ref.get(store).pipe(\n"
        "        Effect.map((items) =>\n"
        f"          paginate{p}(sort{p}(apply{c}Filters([...items.values()], filters), sort), pagination)\n"
        "        )\n"
        "      ),\n"
        "    count: (filters) =>\n"
        f"      Ref.get(store).pipe(Effect.map((items) => apply{c}Filters([...items.values()], filters).length)),\n"
        "    create: (input) =>\n"
        "      Effect.gen(function* () {\n"
        "        const now = yield* DateTime.now\n"
        f"        const entity = new {c}({{ ...input, id: {c}Id.make(crypto.randomUUID()), createdAt: now, updatedAt: now }})\n"
        "        yield* Ref.update(store, (items) => new Map(items).set(entity.id, entity))\n"
        "        return entity\n"
        "      }),\n"
        "    update: (id, input) =>\n"
        "      Effect.gen(function* () {\n"
        "        const existing = yield* getOrFail(id)\n"
        "        const now = yield* DateTime.now\n"
        f"        const entity = new {c}({{ ...existing, ...input, id, updatedAt: now }})\n"
        "        yield* Ref.update(store, (items) => new Map(items).set(id, entity))\n"
        "        return entity\n"
        "      }),\n"
        "    delete: (id) =>\n"
        "      getOrFail(id).pipe(\n"
        "        Effect.zipRight(\n"
        "          Ref.update(store, (items) => {\n"
        "            const next = new Map(items)\n"
        "            next.delete(id)\n"
        "            return next\n"
        "          })\n"
        "        )\n"
        "      )\n"
        "  })\n"
        "})"
    )
    builder.add_blank_line()
    builder.add_section_comment("Layer")
    builder.add_blank_line()
    builder.add_raw(f"export const {c}RepositoryLive = Layer.effect({c}Repository, make{c}Repository)")


# ---------------------------------------------------------------------------
# lib/projection-repository.ts (CQRS)
# ---------------------------------------------------------------------------


def build_projection_repository(
    builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions
) -> None:
    c = variant.class_name
    contract = options.sibling_package("contract", variant)
    _header(
        builder,
        variant,
        options,
        "projection-repository",
        "Projection Repository",
        f"Read models computed from {c}Repository on demand. A dedicated\n"
        "read store can replace this layer without touching its consumers.",
    )
    builder.add_import("effect", ["Effect", "Layer", "Option"])
    builder.add_import(
        contract,
        [f"{c}DetailProjection", f"{c}ListProjection", f"{c}ProjectionRepository", f"{c}Repository"],
    )
    builder.add_raw(
        f"export const {c}ProjectionRepositoryLive = Layer.effect(\n"
        f"  {c}ProjectionRepository,\n"
        "  Effect.gen(function* () {\n"
        f"    const repository = yield* {c}Repository\n"
        f"    return {c}ProjectionRepository.of({{\n"
        "      findListProjection: (filters, pagination) =>\n"
        "        repository.findAll(filters, pagination).pipe(\n"
        "          Effect.map((page) => ({\n"
        "            ...page,\n"
        f"            items: page.items.map((item) => new {c}ListProjection({{ id: item.id, updatedAt: item.updatedAt }}))\n"
        "          }))\n"
        "        ),\n"
        "      findDetailProjection: (id) =>\n"
        "        repository.findById(id).pipe(\n"
        "          Effect.map(\n"
        "            Option.map(\n"
        "              (item) =>\n"
        f"                new {c}DetailProjection({{\n"
        "                  id: item.id,\n"
        "                  createdAt: item.createdAt,\n"
        "                  updatedAt: item.updatedAt,\n"
        "                  version: 0\n"
        "                })\n"
        "            )\n"
        "          )\n"
        "        )\n"
        "    })\n"
        "  })\n"
        ")"
    )


# ---------------------------------------------------------------------------
# lib/server/layers.ts
# ---------------------------------------------------------------------------


def build_layers(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    c = variant.class_name
    _header(
        builder,
        variant,
        options,
        "server",
        "Data Access Layers",
        "Layer compositions for the data-access library.\n\n"
        "- Live: shared store for the lifetime of the runtime\n"
        "- Test: a fresh store every time the layer is provided",
        see=(EFFECT_LAYERS_DOC,),
    )
    builder.add_import("effect", "Layer")
    builder.add_import("../repository", f"{c}RepositoryLive")
    live = f"{c}RepositoryLive"
    if options.include_cqrs:
        builder.add_import("../projection-repository", f"{c}ProjectionRepositoryLive")
        live = f"Layer.provideMerge({c}ProjectionRepositoryLive, {c}RepositoryLive)"

    builder.add_jsdoc(f"Production layer providing every {' '.join(variant.tokens)} repository port")
    builder.add_raw(f"export const {c}DataAccessLive = {live}")
    builder.add_blank_line()
    builder.add_jsdoc("Test layer; each use builds an empty store")
    builder.add_raw(f"export const {c}DataAccessTest = Layer.fresh({c}DataAccessLive)")


# ---------------------------------------------------------------------------
# index.ts
# ---------------------------------------------------------------------------


SECTION_TITLES: dict[str, str] = {
    "queries": "Query Helpers",
    "repository": "Repository",
    "projection-repository": "Projection Repository (CQRS)",
    "layers": "Layers",
}


def build_index(builder: SourceBuilder, variant: NamingVariant, options: TemplateOptions) -> None:
    _header(
        builder,
        variant,
        options,
        "index",
        "Data Access",
        f"Public API of the data-access library. Provide {variant.class_name}DataAccessLive\n"
        "to satisfy the repository ports of the contract.",
    )
    for file in source_files(options):
        values, types = file_exports(file.key, variant, options)
        builder.add_section_comment(SECTION_TITLES[file.key])
        builder.add_blank_line()
        builder.add_raw(reexport(values, types, "./" + file.path.removesuffix(".ts")))
        builder.add_blank_line()
