"""Submodule templates.

A submodule is a nested file set under ``src/<submodule>/`` of a parent
contract (``src/cart/``, ``src/checkout/``...).  What differs between kinds
(entity fields, extra errors, events, RPC operations) is described by a
``SubModuleTemplate`` record; a ``SubModuleRegistry`` maps kind tags and
aliases to records and falls back to the generic CRUD record for unknown
names.  Adding a kind means registering a record, not editing dispatch code.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ..engine.builder import SourceBuilder
from ..engine.naming import NamingVariant, tokenize
from .contract import reexport
from .options import TemplateOptions
from .resources import (
    FIELD_FIELD,
    ID_FIELD,
    ErrorBase,
    ErrorSpec,
    FieldSpec,
    ResourceSpec,
    RpcOperation,
    StructSpec,
    add_error_set,
    add_rpc_group,
    add_rpc_operations,
    add_struct,
    expansions,
    rpc_class_name,
    struct_body,
)


# ---------------------------------------------------------------------------
# SubModuleTemplate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SubModuleTemplate:
    """Everything that varies between submodule kinds."""

    kind: str
    description: str
    aliases: tuple[str, ...] = ()
    entity_fields: tuple[tuple[str, str], ...] = ()
    errors: tuple[ErrorSpec, ...] = ()
    events: tuple[StructSpec, ...] = ()
    inputs: tuple[StructSpec, ...] = ()
    operations: tuple[RpcOperation, ...] = ()
    supports_cqrs: bool = False

    @property
    def supports_rpc(self) -> bool:
        return bool(self.operations)

    def error_resource(self) -> ResourceSpec:
        return ResourceSpec(
            section="Domain Errors (Data.TaggedError)",
            base=ErrorBase.DATA,
            union_suffix="Error",
            union_summary="Union of all %(lower)s errors in the %(parent)s domain",
            errors=(*SUBMODULE_BASE_ERRORS, *self.errors),
        )


class SubModuleRegistry:
    """Maps submodule kinds (and their aliases) to templates.

    Lookups normalise names to file-case, so ``"OrderManagement"`` and
    ``"order-management"`` hit the same entry.
    """

    def __init__(
        self,
        templates: Iterable[SubModuleTemplate] = (),
        fallback: SubModuleTemplate | None = None,
    ) -> None:
        self._templates: dict[str, SubModuleTemplate] = {}
        self._aliases: dict[str, str] = {}
        self.fallback = fallback
        for template in templates:
            self.register(template)

    def register(self, template: SubModuleTemplate) -> SubModuleRegistry:
        kind = _normalize(template.kind)
        if kind in self._templates:
            raise ValueError(f"Submodule kind {template.kind!r} is already registered")
        self._templates[kind] = template
        for alias in (template.kind, *template.aliases):
            self._aliases[_normalize(alias)] = kind
        return self

    def get(self, kind: str) -> SubModuleTemplate:
        """Strict lookup by kind or alias; ``KeyError`` if unknown."""
        key = _normalize(kind)
        if self.fallback is not None and key == _normalize(self.fallback.kind):
            return self.fallback
        return self._templates[self._aliases[key]]

    def lookup(self, name: str) -> SubModuleTemplate:
        """Lookup by submodule name, falling back to the generic template."""
        try:
            return self.get(name)
        except KeyError:
            if self.fallback is None:
                raise
            return self.fallback

    def __contains__(self, kind: str) -> bool:
        try:
            self.get(kind)
        except KeyError:
            return False
        return True

    def kinds(self) -> list[str]:
        kinds = [template.kind for template in self._templates.values()]
        if self.fallback is not None:
            kinds.append(self.fallback.kind)
        return kinds


def _normalize(name: str) -> str:
    return "-".join(tokenize(name))


# ---------------------------------------------------------------------------
# Built-in kinds
# ---------------------------------------------------------------------------

SUBMODULE_BASE_ERRORS: tuple[ErrorSpec, ...] = (
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
        (FieldSpec("message", optional=True), FIELD_FIELD),
    ),
)

SUBMODULE_RPC_ERRORS = ResourceSpec(
    section="RPC Errors (Schema.TaggedError)",
    base=ErrorBase.SCHEMA,
    union_suffix="RpcError",
    union_summary="Union of all %(lower)s RPC errors",
    errors=(
        ErrorSpec("NotFoundRpcError", "RPC error when %(lower)s is not found", "",
                  (FieldSpec("message"), ID_FIELD)),
        ErrorSpec("ValidationRpcError", "RPC error when %(lower)s input is invalid", "",
                  (FieldSpec("message"), FIELD_FIELD)),
        ErrorSpec("PermissionRpcError", "RPC error when a %(lower)s operation is not permitted", "",
                  (FieldSpec("message"), FieldSpec("operation"))),
    ),
)

POSITIVE_INT = "Schema.Number.pipe(Schema.int(), Schema.positive())"
NON_NEGATIVE = "Schema.Number.pipe(Schema.nonNegative())"

CART = SubModuleTemplate(
    kind="cart",
    description="Shopping cart state for a customer session",
    entity_fields=(
        ("userId", "Schema.optional(Schema.UUID)"),
        ("sessionId", "Schema.optional(Schema.String)"),
        ("items", "Schema.Array(%(title)sItem)"),
        ("subtotal", NON_NEGATIVE),
    ),
    errors=(
        ErrorSpec(
            "ItemLimitError",
            "Error thrown when the %(lower)s item limit is exceeded",
            "`%(title)s item limit exceeded: ${params.limit}`",
            (FieldSpec("limit", ts_type="number"),),
        ),
        ErrorSpec(
            "EmptyError",
            "Error thrown when an operation requires a non-empty %(lower)s",
            "`%(title)s is empty: ${params.%(id)s}`",
            (ID_FIELD,),
        ),
    ),
    events=(
        StructSpec("ItemAdded", "Item added to %(lower)s",
                   (("%(id)s", "%(title)sId"), ("productId", "Schema.UUID"), ("quantity", POSITIVE_INT))),
        StructSpec("ItemRemoved", "Item removed from %(lower)s",
                   (("%(id)s", "%(title)sId"), ("itemId", "Schema.UUID"))),
        StructSpec("Cleared", "%(title)s cleared", (("%(id)s", "%(title)sId"),)),
    ),
    inputs=(
        StructSpec("ItemInput", "%(title)s item input for add and update operations",
                   (("productId", "Schema.UUID"), ("quantity", POSITIVE_INT))),
    ),
    operations=(
        RpcOperation("Get", "Get %(lower)s contents", "protected",
                     (("%(id)s", "%(title)sId"),), "%(title)s"),
        RpcOperation("AddItem", "Add item to %(lower)s", "protected",
                     (("%(id)s", "%(title)sId"), ("item", "%(title)sItemInput")), "%(title)s"),
        RpcOperation("RemoveItem", "Remove item from %(lower)s", "protected",
                     (("%(id)s", "%(title)sId"), ("itemId", "Schema.UUID")), "%(title)s"),
        RpcOperation("UpdateQuantity", "Update %(lower)s item quantity", "protected",
                     (("%(id)s", "%(title)sId"), ("itemId", "Schema.UUID"), ("quantity", POSITIVE_INT)),
                     "%(title)s"),
        RpcOperation("Clear", "Clear all items from %(lower)s", "protected",
                     (("%(id)s", "%(title)sId"),),
                     "Schema.Struct({ success: Schema.Literal(true), clearedAt: Schema.DateTimeUtc })"),
    ),
)

CHECKOUT = SubModuleTemplate(
    kind="checkout",
    description="Checkout flow from cart to confirmed payment",
    entity_fields=(
        ("status", 'Schema.Literal("pending", "processing", "completed", "failed", "cancelled")'),
        ("total", NON_NEGATIVE),
        ("expiresAt", "Schema.DateTimeUtc"),
    ),
    errors=(
        ErrorSpec(
            "ExpiredError",
            "Error thrown when a %(lower)s session has expired",
            "`%(title)s expired: ${params.%(id)s}`",
            (ID_FIELD,),
        ),
        ErrorSpec(
            "PaymentError",
            "Error thrown when %(lower)s payment fails",
            "`%(title)s payment failed: ${params.reason}`",
            (ID_FIELD, FieldSpec("reason")),
        ),
    ),
    events=(
        StructSpec("Initiated", "%(title)s initiated", (("%(id)s", "%(title)sId"), ("total", NON_NEGATIVE))),
        StructSpec("PaymentProcessed", "%(title)s payment processed",
                   (("%(id)s", "%(title)sId"), ("paymentId", "Schema.String"))),
        StructSpec("Completed", "%(title)s completed", (("%(id)s", "%(title)sId"),)),
    ),
    inputs=(
        StructSpec("PaymentInput", "Payment details submitted during %(lower)s",
                   (("method", 'Schema.Literal("card", "wallet", "invoice")'), ("token", "Schema.String"))),
    ),
    operations=(
        RpcOperation("Initiate", "Start %(lower)s from the current cart", "protected",
                     (("cartId", "Schema.UUID"),), "%(title)s"),
        RpcOperation("ProcessPayment", "Process %(lower)s payment", "protected",
                     (("%(id)s", "%(title)sId"), ("payment", "%(title)sPaymentInput")), "%(title)s"),
        RpcOperation("Confirm", "Confirm a paid %(lower)s", "protected",
                     (("%(id)s", "%(title)sId"),), "%(title)s"),
        RpcOperation("Cancel", "Cancel %(lower)s", "protected",
                     (("%(id)s", "%(title)sId"),), "%(title)s"),
    ),
)

MANAGEMENT = SubModuleTemplate(
    kind="management",
    aliases=("order-management",),
    description="Back-office management of placed records",
    entity_fields=(
        ("status", 'Schema.Literal("placed", "fulfilled", "shipped", "cancelled")'),
        ("notes", "Schema.optional(Schema.String)"),
    ),
    errors=(
        ErrorSpec(
            "InvalidStateError",
            "Error thrown when a %(lower)s status transition is not allowed",
            "`Cannot move from ${params.from} to ${params.to}`",
            (FieldSpec("from"), FieldSpec("to")),
        ),
        ErrorSpec(
            "CancellationError",
            "Error thrown when a record cannot be cancelled",
            "`Cancellation rejected: ${params.reason}`",
            (ID_FIELD, FieldSpec("reason")),
        ),
    ),
    events=(
        StructSpec("OrderCreated", "Record placed under %(lower)s", (("%(id)s", "%(title)sId"),)),
        StructSpec("StatusChanged", "%(title)s status changed",
                   (("%(id)s", "%(title)sId"), ("from", "Schema.String"), ("to", "Schema.String"))),
        StructSpec("OrderCancelled", "Record cancelled",
                   (("%(id)s", "%(title)sId"), ("reason", "Schema.optional(Schema.String)"))),
    ),
    operations=(
        RpcOperation("GetOrder", "Get a managed record", "protected",
                     (("%(id)s", "%(title)sId"),), "%(title)s"),
        RpcOperation("ListOrders", "List managed records", "protected",
                     (("page", "Schema.optional(%s)" % POSITIVE_INT),), "Schema.Array(%(title)s)"),
        RpcOperation("UpdateStatus", "Update record status", "service",
                     (("%(id)s", "%(title)sId"), ("status", "Schema.String")), "%(title)s"),
        RpcOperation("CancelOrder", "Cancel a managed record", "protected",
                     (("%(id)s", "%(title)sId"), ("reason", "Schema.optional(Schema.String)")), "%(title)s"),
    ),
)

GENERIC = SubModuleTemplate(
    kind="generic",
    description="Generic CRUD resource",
    entity_fields=(("name", "Schema.String.pipe(Schema.minLength(1), Schema.maxLength(255))"),),
    events=(
        StructSpec("Created", "%(title)s created", (("%(id)s", "%(title)sId"),)),
        StructSpec("Updated", "%(title)s updated", (("%(id)s", "%(title)sId"),)),
        StructSpec("Deleted", "%(title)s deleted", (("%(id)s", "%(title)sId"),)),
    ),
    inputs=(
        StructSpec("CreateInput", "Input for creating a %(lower)s",
                   (("name", "Schema.String.pipe(Schema.minLength(1), Schema.maxLength(255))"),)),
        StructSpec("UpdateInput", "Input for updating a %(lower)s",
                   (("name", "Schema.optional(Schema.String.pipe(Schema.minLength(1)))"),)),
    ),
    operations=(
        RpcOperation("Get", "Get %(lower)s by ID", "public", (("id", "%(title)sId"),), "%(title)s"),
        RpcOperation("List", "List %(lower)s records", "public",
                     (("page", "Schema.optional(%s)" % POSITIVE_INT),), "Schema.Array(%(title)s)"),
        RpcOperation("Create", "Create %(lower)s", "protected",
                     (("input", "%(title)sCreateInput"),), "%(title)s"),
        RpcOperation("Update", "Update %(lower)s", "protected",
                     (("id", "%(title)sId"), ("input", "%(title)sUpdateInput")), "%(title)s"),
        RpcOperation("Delete", "Delete %(lower)s", "protected",
                     (("id", "%(title)sId"),), "Schema.Struct({ success: Schema.Literal(true) })"),
    ),
)

DEFAULT_SUBMODULES = SubModuleRegistry([CART, CHECKOUT, MANAGEMENT], fallback=GENERIC)


# ---------------------------------------------------------------------------
# Export tables
# ---------------------------------------------------------------------------


def submodule_exports(
    file_key: str, variant: NamingVariant, template: SubModuleTemplate
) -> tuple[list[str], list[str]]:
    s = variant.class_name
    if file_key == "entities":
        return [f"{s}Id", f"{s}Item", s, f"parse{s}", f"encode{s}"], []
    if file_key == "errors":
        resource = template.error_resource()
        return resource.class_names(variant), [resource.union_name(variant)]
    if file_key == "events":
        return [variant.symbol(e.suffix) for e in template.events] + [f"{s}Events"], [f"{s}Event"]
    if file_key == "rpc-errors":
        return SUBMODULE_RPC_ERRORS.class_names(variant), [SUBMODULE_RPC_ERRORS.union_name(variant)]
    if file_key == "rpc-definitions":
        inputs = [variant.symbol(i.suffix) for i in template.inputs]
        operations = [rpc_class_name(variant, op, True) for op in template.operations]
        return inputs + operations + [f"{s}Rpcs", f"{s}RpcsByRoute"], []
    raise KeyError(file_key)


def submodule_files(options: TemplateOptions) -> list[str]:
    files = ["errors", "entities", "events"]
    if options.include_rpc:
        files += ["rpc-errors", "rpc-definitions"]
    return files


def _template_for(options: TemplateOptions, registry: SubModuleRegistry) -> SubModuleTemplate:
    return registry.lookup(options.kind or "generic")


def _parent(options: TemplateOptions) -> NamingVariant:
    if options.parent is None:
        raise ValueError("Submodule templates require options.parent")
    return options.parent


def _header(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    file_key: str,
    title: str,
    description: str,
) -> None:
    parent = _parent(options)
    builder.add_header(
        title=f"{parent.class_name} {variant.class_name} {title}",
        description=description,
        module=options.module_path(variant, variant.file_name, file_key),
        since=options.since,
    )


# ---------------------------------------------------------------------------
# Routines
# ---------------------------------------------------------------------------


def build_entities(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> None:
    parent = _parent(options)
    template = _template_for(options, registry)
    values = expansions(variant, parent)
    s = variant.class_name
    _header(
        builder,
        variant,
        options,
        "entities",
        "Entities",
        f"{template.description}.\n\n"
        f"These entities are scoped to {' '.join(variant.tokens)} operations within the\n"
        f"{' '.join(parent.tokens)} domain and reference the parent entity by ID.",
    )
    builder.add_import("effect", "Schema")
    builder.add_import("../lib/entities", f"{parent.class_name}Id")

    builder.add_section_comment("Identifiers")
    builder.add_blank_line()
    builder.add_raw(
        f'export const {s}Id = Schema.UUID.pipe(Schema.brand("{s}Id"))\n\n'
        f"export type {s}Id = Schema.Schema.Type<typeof {s}Id>"
    )
    builder.add_blank_line()

    builder.add_section_comment(f"{s} Item")
    builder.add_blank_line()
    builder.add_jsdoc(f"Lightweight {' '.join(variant.tokens)} item for collections")
    builder.add_raw(
        f'export class {s}Item extends Schema.Class<{s}Item>("{s}Item")({{\n'
        f"  id: Schema.UUID,\n"
        f"  name: Schema.String.pipe(Schema.minLength(1)),\n"
        f"  quantity: Schema.optional({POSITIVE_INT})\n"
        f"}}) {{}}"
    )
    builder.add_blank_line()

    builder.add_section_comment(f"{s} Entity")
    builder.add_blank_line()
    fields = (
        ("id", "%(title)sId"),
        ("%(parent_id)s", "Schema.optional(%(parent)sId)"),
        ("createdAt", "Schema.DateTimeUtc"),
        ("updatedAt", "Schema.DateTimeUtc"),
        *template.entity_fields,
    )
    builder.add_jsdoc(f"{s} entity within the {' '.join(parent.tokens)} domain")
    builder.add_raw(
        f'export class {s} extends Schema.Class<{s}>("{s}")({{\n'
        f"{struct_body(fields, values)}\n"
        f"}}) {{}}"
    )
    builder.add_blank_line()

    builder.add_section_comment("Helper Functions")
    builder.add_blank_line()
    builder.add_raw(f"export const parse{s} = Schema.decodeUnknown({s})")
    builder.add_blank_line()
    builder.add_raw(f"export const encode{s} = Schema.encode({s})")


def build_errors(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> None:
    parent = _parent(options)
    template = _template_for(options, registry)
    _header(
        builder,
        variant,
        options,
        "errors",
        "Errors",
        f"Domain errors specific to {' '.join(variant.tokens)} operations.",
    )
    add_error_set(builder, variant, template.error_resource(), parent)


def build_events(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> None:
    parent = _parent(options)
    template = _template_for(options, registry)
    values = expansions(variant, parent)
    s = variant.class_name
    _header(
        builder,
        variant,
        options,
        "events",
        "Domain Events",
        f'Events are tagged "{s}.<Event>" for routing on the\n'
        f"{' '.join(parent.tokens)} domain event bus.",
    )
    builder.add_import("effect", "Schema")
    builder.add_import("./entities", f"{s}Id")

    builder.add_section_comment("Events")
    builder.add_blank_line()
    names = []
    for event in template.events:
        name = variant.symbol(event.suffix)
        names.append((event.suffix, name))
        builder.add_jsdoc(event.summary % values)
        builder.add_raw(
            f'export const {name} = Schema.TaggedStruct("{s}.{event.suffix}", {{\n'
            f"{struct_body(event.fields, values)}\n"
            f"}})"
        )
        builder.add_blank_line()

    builder.add_section_comment("Event Union")
    builder.add_blank_line()
    members = "\n".join(f"  | Schema.Schema.Type<typeof {name}>" for _, name in names)
    builder.add_raw(f"export type {s}Event =\n{members}")
    builder.add_blank_line()
    registry_body = ",\n".join(f"  {suffix}: {name}" for suffix, name in names)
    builder.add_raw(f"export const {s}Events = {{\n{registry_body}\n}} as const")


def build_rpc_errors(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> None:
    _header(
        builder,
        variant,
        options,
        "rpc-errors",
        "RPC Errors",
        "Serializable errors returned by this submodule's RPC operations.",
    )
    add_error_set(builder, variant, SUBMODULE_RPC_ERRORS, _parent(options))


def build_rpc_definitions(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> None:
    parent = _parent(options)
    template = _template_for(options, registry)
    values = expansions(variant, parent)
    s = variant.class_name
    _header(
        builder,
        variant,
        options,
        "rpc-definitions",
        "RPC Definitions",
        f'Contract-first RPC definitions for the {" ".join(variant.tokens)} submodule.\n'
        f'All operations are prefixed with "{s}." for unified router routing.',
    )
    builder.add_import("@effect/rpc", ["Rpc", "RpcGroup"])
    builder.add_import("effect", "Schema")
    builder.add_import("../lib/rpc-definitions", "RouteTag")
    builder.add_import("../lib/rpc-definitions", "RouteType", type_only=True)
    builder.add_import("./entities", [s, f"{s}Id"])
    builder.add_import("./rpc-errors", SUBMODULE_RPC_ERRORS.union_name(variant))

    if template.inputs:
        builder.add_section_comment("Request/Response Schemas")
        builder.add_blank_line()
        for struct in template.inputs:
            add_struct(builder, variant, struct, values)

    builder.add_section_comment("RPC Definitions")
    builder.add_blank_line()
    add_rpc_operations(
        builder,
        variant,
        template.operations,
        SUBMODULE_RPC_ERRORS.union_name(variant),
        values,
        namespaced=True,
    )

    builder.add_section_comment("RPC Group")
    builder.add_blank_line()
    add_rpc_group(builder, f"{s}Rpcs", variant, template.operations, namespaced=True)


def build_index(
    builder: SourceBuilder,
    variant: NamingVariant,
    options: TemplateOptions,
    registry: SubModuleRegistry = DEFAULT_SUBMODULES,
) -> None:
    template = _template_for(options, registry)
    _header(
        builder,
        variant,
        options,
        "index",
        "Submodule",
        f"Public API of the {' '.join(variant.tokens)} submodule, published as\n"
        f'the "{options.module_path(variant, variant.file_name)}" subpath export.',
    )
    for file_key in submodule_files(options):
        values, types = submodule_exports(file_key, variant, template)
        builder.add_raw(reexport(values, types, f"./{file_key}"))
        builder.add_blank_line()
