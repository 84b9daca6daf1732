"""Declarative error resources and the one routine that renders them.

Every error file the catalog produces (parent domain errors, repository
errors, RPC errors and submodule errors) is described as a ``ResourceSpec``
table and rendered by :func:`add_error_set`.  Field names and messages are
``%``-format strings expanded against the owning ``NamingVariant``:

* ``%(title)s``  class-case name (``OrderItem``)
* ``%(lower)s``  space-separated lowercase name (``order item``)
* ``%(id)s``     identifier field name (``orderItemId``)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..engine.builder import SourceBuilder
from ..engine.errors import NameValidationError
from ..engine.naming import NamingVariant


class ErrorBase(str, Enum):
    """Which Effect error constructor a resource extends."""

    DATA = "data"
    SCHEMA = "schema"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    ts_type: str = "string"
    schema: str = "Schema.String"
    optional: bool = False


@dataclass(frozen=True)
class ErrorSpec:
    suffix: str
    summary: str
    message: str
    fields: tuple[FieldSpec, ...] = ()


@dataclass(frozen=True)
class StructSpec:
    """A named ``Schema`` struct: request inputs, entity fields or events."""

    suffix: str
    summary: str
    fields: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class RpcOperation:
    """One RPC endpoint: name, route type, payload fields and success schema."""

    name: str
    summary: str
    route: str
    payload: tuple[tuple[str, str], ...]
    success: str


ROUTE_TYPES: tuple[str, ...] = ("public", "protected", "service")

ROUTE_DESCRIPTIONS: dict[str, str] = {
    "public": "No authentication required",
    "protected": "Requires user authentication",
    "service": "Service-to-service authentication",
}


@dataclass(frozen=True)
class ResourceSpec:
    """A group of related errors plus the union type that names them."""

    section: str
    base: ErrorBase
    errors: tuple[ErrorSpec, ...]
    union_suffix: str
    union_summary: str = ""

    def class_names(self, variant: NamingVariant) -> list[str]:
        return [variant.symbol(error.suffix) for error in self.errors]

    def union_name(self, variant: NamingVariant) -> str:
        return variant.symbol(self.union_suffix)

    def exported_names(self, variant: NamingVariant) -> list[str]:
        return [*self.class_names(variant), self.union_name(variant)]


# ---------------------------------------------------------------------------
# Reserved class names
# ---------------------------------------------------------------------------

# Imported from effect or @effect/rpc by some catalog file.
FRAMEWORK_SYMBOLS: frozenset[str] = frozenset(
    {"Context", "Data", "DateTime", "Effect", "Layer", "Option", "Ref", "Rpc", "RpcGroup", "Schema"}
)

# Declared without a domain prefix by some catalog file.
SHARED_SYMBOLS: frozenset[str] = frozenset(
    {
        "AggregateMetadata", "EventMetadata", "OffsetPaginationParams", "PaginatedResponse",
        "PaginatedResult", "PaginationParams", "RouteTag", "RouteType", "SortOptions",
    }
)


def check_class_name(variant: NamingVariant) -> None:
    """Reject a domain whose class-case spelling is already taken in generated files.

    A domain called ``"schema"`` would declare ``class Schema`` next to the
    ``Schema`` import from ``effect``; ``"effect"`` or ``"context"`` would
    bind one local name twice.

    Raises:
        NameValidationError: If the class name is a framework or shared symbol.
    """
    if variant.class_name in FRAMEWORK_SYMBOLS:
        raise NameValidationError(
            variant.raw, f"class name {variant.class_name!r} collides with an Effect import"
        )
    if variant.class_name in SHARED_SYMBOLS:
        raise NameValidationError(
            variant.raw, f"class name {variant.class_name!r} collides with a shared declaration"
        )


# ---------------------------------------------------------------------------
# Field presets
# ---------------------------------------------------------------------------

ID_FIELD = FieldSpec("%(id)s")
FIELD_FIELD = FieldSpec("field", optional=True)
CONSTRAINT_FIELD = FieldSpec("constraint", optional=True)
VALUE_FIELD = FieldSpec("value", ts_type="unknown", schema="Schema.Unknown", optional=True)
IDENTIFIER_FIELD = FieldSpec("identifier", optional=True)
OPERATION_FIELD = FieldSpec("operation")
REASON_FIELD = FieldSpec("reason", optional=True)
CAUSE_FIELD = FieldSpec("cause", ts_type="unknown", schema="Schema.Unknown", optional=True)


# ---------------------------------------------------------------------------
# Resource tables
# ---------------------------------------------------------------------------

DOMAIN_ERRORS = ResourceSpec(
    section="Domain Errors (Data.TaggedError)",
    base=ErrorBase.DATA,
    union_suffix="DomainError",
    union_summary="Union of all %(lower)s domain errors",
    errors=(
        ErrorSpec(
            "NotFoundError",
            "Error thrown when %(lower)s is not found",
            "`%(title)s not found: ${params.%(id)s}`",
            (ID_FIELD,),
        ),
        ErrorSpec(
            "ValidationError",
            "Error thrown when %(lower)s validation fails",
            "params.message ?? `%(title)s validation failed`",
            (FieldSpec("message", optional=True), FIELD_FIELD, CONSTRAINT_FIELD, VALUE_FIELD),
        ),
        ErrorSpec(
            "AlreadyExistsError",
            "Error thrown when %(lower)s already exists",
            "params.identifier ? `%(title)s already exists: ${params.identifier}` : `%(title)s already exists`",
            (IDENTIFIER_FIELD,),
        ),
        ErrorSpec(
            "PermissionError",
            "Error thrown when a %(lower)s operation is not permitted",
            "`Operation '${params.operation}' not permitted on %(lower)s ${params.%(id)s}`",
            (OPERATION_FIELD, ID_FIELD, FieldSpec("userId", optional=True)),
        ),
    ),
)

REPOSITORY_ERRORS = ResourceSpec(
    section="Repository Errors (Data.TaggedError)",
    base=ErrorBase.DATA,
    union_suffix="RepositoryError",
    union_summary="Union of all %(lower)s repository errors",
    errors=(
        ErrorSpec(
            "NotFoundRepositoryError",
            "Repository error when %(lower)s is missing from storage",
            "`%(title)s not found in repository: ${params.%(id)s}`",
            (ID_FIELD,),
        ),
        ErrorSpec(
            "ValidationRepositoryError",
            "Repository error when stored %(lower)s data is invalid",
            "`%(title)s repository validation failed: ${params.reason ?? 'unknown'}`",
            (REASON_FIELD, FIELD_FIELD),
        ),
        ErrorSpec(
            "ConflictRepositoryError",
            "Repository error when a %(lower)s write conflicts with existing data",
            "`%(title)s conflict: ${params.identifier ?? 'unknown'}`",
            (IDENTIFIER_FIELD,),
        ),
        ErrorSpec(
            "DatabaseRepositoryError",
            "Repository error when the underlying database fails",
            "`%(title)s database operation '${params.operation}' failed`",
            (OPERATION_FIELD, CAUSE_FIELD),
        ),
    ),
)

RPC_ERRORS = ResourceSpec(
    section="RPC Errors (Schema.TaggedError)",
    base=ErrorBase.SCHEMA,
    union_suffix="RpcError",
    union_summary="Union of all %(lower)s errors that cross the RPC boundary",
    errors=(
        ErrorSpec(
            "NotFoundRpcError",
            "RPC error when %(lower)s is not found",
            "",
            (FieldSpec("message"), ID_FIELD),
        ),
        ErrorSpec(
            "ValidationRpcError",
            "RPC error when %(lower)s input fails validation",
            "",
            (FieldSpec("message"), FIELD_FIELD),
        ),
        ErrorSpec(
            "PermissionRpcError",
            "RPC error when the caller may not perform a %(lower)s operation",
            "",
            (FieldSpec("message"), OPERATION_FIELD),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def expansions(variant: NamingVariant, parent: NamingVariant | None = None) -> dict[str, str]:
    values = {
        "title": variant.class_name,
        "plural": variant.plural_class_name,
        "lower": " ".join(variant.tokens),
        "id": f"{variant.property_name}Id",
    }
    if parent is not None:
        values["parent"] = parent.class_name
        values["parent_id"] = f"{parent.property_name}Id"
    return values


def struct_body(fields: tuple[tuple[str, str], ...], values: dict[str, str], indent: str = "  ") -> str:
    return ",\n".join(f"{indent}{name % values}: {schema % values}" for name, schema in fields)


def add_struct(
    builder: SourceBuilder,
    variant: NamingVariant,
    struct: StructSpec,
    values: dict[str, str],
) -> str:
    """Render ``export const X = Schema.Struct(...)`` plus its type alias."""
    name = variant.symbol(struct.suffix)
    builder.add_jsdoc(struct.summary % values)
    builder.add_raw(
        f"export const {name} = Schema.Struct({{\n"
        f"{struct_body(struct.fields, values)}\n"
        f"}})\n\n"
        f"export type {name} = Schema.Schema.Type<typeof {name}>"
    )
    builder.add_blank_line()
    return name


def rpc_class_name(variant: NamingVariant, operation: RpcOperation, namespaced: bool) -> str:
    if namespaced:
        return variant.symbol(operation.name)
    return operation.name % expansions(variant)


def rpc_tag(variant: NamingVariant, operation: RpcOperation, namespaced: bool) -> str:
    """Wire name of an RPC: ``"Cart.AddItem"`` when namespaced."""
    if namespaced:
        return f"{variant.class_name}.{operation.name}"
    return rpc_class_name(variant, operation, namespaced)


def add_rpc_operations(
    builder: SourceBuilder,
    variant: NamingVariant,
    operations: tuple[RpcOperation, ...],
    error_type: str,
    values: dict[str, str],
    namespaced: bool,
) -> list[str]:
    """Render one ``Rpc.make`` class per operation; return the class names."""
    names: list[str] = []
    for operation in operations:
        class_name = rpc_class_name(variant, operation, namespaced)
        payload = struct_body(operation.payload, values, indent="    ")
        builder.add_jsdoc(
            f"{operation.summary % values}\n\n"
            f"@route {operation.route} - {ROUTE_DESCRIPTIONS[operation.route]}"
        )
        builder.add_raw(
            f'export class {class_name} extends Rpc.make("{rpc_tag(variant, operation, namespaced)}", {{\n'
            f"  payload: Schema.Struct({{\n{payload}\n  }}),\n"
            f"  success: {operation.success % values},\n"
            f"  error: {error_type}\n"
            f"}}) {{\n"
            f'  static readonly [RouteTag]: RouteType = "{operation.route}"\n'
            f"}}"
        )
        builder.add_blank_line()
        names.append(class_name)
    return names


def add_rpc_group(
    builder: SourceBuilder,
    group_name: str,
    variant: NamingVariant,
    operations: tuple[RpcOperation, ...],
    namespaced: bool,
) -> list[str]:
    """Render the ``RpcGroup`` and its by-route index; return the exported names."""
    names = [rpc_class_name(variant, op, namespaced) for op in operations]
    members = ",\n".join(f"  {name}" for name in names)
    builder.add_raw(
        f"export const {group_name} = RpcGroup.make(\n{members}\n)\n\n"
        f"export type {group_name} = typeof {group_name}"
    )
    builder.add_blank_line()

    routes = []
    for route in ROUTE_TYPES:
        routed = [
            rpc_class_name(variant, op, namespaced) for op in operations if op.route == route
        ]
        routes.append(f"  {route}: [{', '.join(routed)}] as const")
    by_route = f"{group_name}ByRoute"
    builder.add_jsdoc("RPCs organized by route type")
    builder.add_raw(f"export const {by_route} = {{\n" + ",\n".join(routes) + "\n}")
    builder.add_blank_line()
    return [group_name, by_route]


def add_error_set(
    builder: SourceBuilder,
    variant: NamingVariant,
    resource: ResourceSpec,
    parent: NamingVariant | None = None,
) -> list[str]:
    """Render every error of *resource* plus its union type.

    Requests the ``effect`` import the chosen base needs and returns the
    exported names in declaration order.
    """
    values = expansions(variant, parent)
    if resource.base is ErrorBase.DATA:
        builder.add_import("effect", "Data")
    else:
        builder.add_import("effect", "Schema")

    builder.add_section_comment(resource.section)
    builder.add_blank_line()
    for error in resource.errors:
        class_name = variant.symbol(error.suffix)
        builder.add_jsdoc(error.summary % values)
        if resource.base is ErrorBase.DATA:
            builder.add_raw(_data_error(class_name, error, values))
        else:
            builder.add_raw(_schema_error(class_name, error, values))
        builder.add_blank_line()

    union = resource.union_name(variant)
    members = "\n".join(f"  | {name}" for name in resource.class_names(variant))
    if resource.union_summary:
        builder.add_jsdoc(resource.union_summary % values)
    builder.add_raw(f"export type {union} =\n{members}")
    builder.add_blank_line()
    return resource.exported_names(variant)


def _field_names(error: ErrorSpec, values: dict[str, str]) -> list[tuple[str, FieldSpec]]:
    return [(spec.name % values, spec) for spec in error.fields]


def _data_error(class_name: str, error: ErrorSpec, values: dict[str, str]) -> str:
    fields = _field_names(error, values)
    props = ["    readonly message: string"]
    props.extend(
        f"    readonly {name}{'?' if spec.optional else ''}: {spec.ts_type}"
        for name, spec in fields
        if name != "message"
    )
    params = "; ".join(
        f"readonly {name}{'?' if spec.optional else ''}: {spec.ts_type}"
        for name, spec in fields
    )
    spread = "" if not fields else ",\n      ...params"
    if all(spec.optional for _, spec in fields):
        signature = f"params: {{ {params} }} = {{}}"
    else:
        signature = f"params: {{ {params} }}"
    body = "\n".join(
        [
            f'export class {class_name} extends Data.TaggedError("{class_name}")<{{',
            *props,
            "  }> {",
            f"  static create({signature}): {class_name} {{",
            f"    return new {class_name}({{",
            f"      message: {error.message % values}{spread}",
            "    })",
            "  }",
            "}",
        ]
    )
    return body


def _schema_error(class_name: str, error: ErrorSpec, values: dict[str, str]) -> str:
    fields = []
    for name, spec in _field_names(error, values):
        schema = f"Schema.optional({spec.schema})" if spec.optional else spec.schema
        fields.append(f"    {name}: {schema}")
    return "\n".join(
        [
            f"export class {class_name} extends Schema.TaggedError<{class_name}>()(",
            f'  "{class_name}",',
            "  {",
            ",\n".join(fields),
            "  }",
            ") {}",
        ]
    )
