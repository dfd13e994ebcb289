"""
Definitions for infrastructure libraries.

An infra library exposes one service as a ``Context.Tag`` with static
layers, plus the error family its methods fail with.
"""

def _effect(result):
    return f"Effect.Effect<{result}, {{className}}ServiceError, never>"


SERVICE_METHODS = [
    {
        "name": "get",
        "params": [{"name": "id", "type": "string"}],
        "returnType": _effect("Option.Option<unknown>"),
        "jsdoc": "Get item by ID\n\n@param id - Identifier for the item to retrieve",
    },
    {
        "name": "findByCriteria",
        "params": [
            {"name": "criteria", "type": "Record<string, unknown>"},
            {"name": "skip", "type": "number", "optional": True},
            {"name": "limit", "type": "number", "optional": True},
        ],
        "returnType": _effect("readonly unknown[]"),
        "jsdoc": "Find items by criteria with pagination support",
    },
    {
        "name": "create",
        "params": [{"name": "input", "type": "Record<string, unknown>"}],
        "returnType": _effect("unknown"),
        "jsdoc": "Create new item",
    },
    {
        "name": "update",
        "params": [
            {"name": "id", "type": "string"},
            {"name": "input", "type": "Record<string, unknown>"},
        ],
        "returnType": _effect("unknown"),
        "jsdoc": "Update existing item",
    },
    {
        "name": "delete",
        "params": [{"name": "id", "type": "string"}],
        "returnType": _effect("void"),
        "jsdoc": "Delete item by ID",
    },
    {
        "name": "healthCheck",
        "returnType": "Effect.Effect<boolean, never>",
        "jsdoc": "Health check for monitoring and readiness checks",
    },
]

IN_MEMORY_SERVICE = """\
Effect.sync(() => {
  const store = new Map<string, unknown>()
  return {
    get: (id) => Effect.sync(() => Option.fromNullable(store.get(id))),
    findByCriteria: (_criteria, skip = 0, limit = 10) =>
      Effect.sync(() => Array.from(store.values()).slice(skip, skip + limit)),
    create: (input) =>
      Effect.sync(() => {
        const id = randomUUID()
        const item = { id, ...input }
        store.set(id, item)
        return item
      }),
    update: (id, input) =>
      Effect.gen(function*() {
        const existing = store.get(id)
        if (!existing) {
          return yield* Effect.fail({className}NotFoundError.create(id, "{className}"))
        }
        const updated = { ...(existing as object), ...input }
        store.set(id, updated)
        return updated
      }),
    delete: (id) =>
      Effect.gen(function*() {
        if (!store.delete(id)) {
          return yield* Effect.fail({className}NotFoundError.create(id, "{className}"))
        }
      }),
    healthCheck: () => Effect.succeed(true)
  }
})"""


def _layer(constructor):
    body = IN_MEMORY_SERVICE.replace("\n", "\n  ")
    return f"Layer.{constructor}(\n  this,\n  {body}\n)"


INFRA_SERVICE = {
    "id": "infra/service",
    "meta": {
        "title": "{className} Service",
        "description": (
            "Infrastructure service using the Context.Tag pattern.\n"
            "\n"
            "Provides CRUD operations with dependency injection and resource management."
        ),
        "module": "{scope}/infra-{fileName}/service",
    },
    "imports": [
        {"from": "node:crypto", "items": ["randomUUID"]},
        {"from": "effect", "items": ["Effect", "Layer", "Option", "Context"]},
        {"from": "./errors", "items": ["{className}NotFoundError"]},
        {"from": "./errors", "items": ["{className}ServiceError"], "isTypeOnly": True},
    ],
    "sections": [
        {
            "title": "Service Context.Tag Definition",
            "content": {
                "type": "contextTag",
                "config": {
                    "serviceName": "{className}Service",
                    "tagIdentifier": "{scope}/infra-{fileName}/{className}Service",
                    "jsdoc": (
                        "{className} Service\n"
                        "\n"
                        "Infrastructure service with static layers (Live, Test, Dev)."
                    ),
                    "methods": SERVICE_METHODS,
                    # Declared out of canonical order; emitted as Live, Test, Dev
                    "staticLayers": [
                        {
                            "name": "Dev",
                            "implementation": _layer("effect") + (
                                ".pipe(\n"
                                "  Layer.tap(() => Effect.logDebug(\"[{className}Service] dev layer ready\"))\n"
                                ")"
                            ),
                            "jsdoc": "Dev Layer - In-memory implementation with debug logging",
                        },
                        {
                            "name": "Live",
                            "implementation": _layer("scoped"),
                            "jsdoc": "Live Layer - Production implementation",
                            "dependencies": ["{className}Config"],
                        },
                        {
                            "name": "Test",
                            "implementation": _layer("effect"),
                            "jsdoc": "Test Layer - Isolated in-memory state per test",
                        },
                    ],
                },
            },
        },
    ],
    "conditionals": {
        "includeAutoLayer": {
            "sections": [
                {
                    "title": "Environment-Selected Layer",
                    "content": {
                        "type": "fragment",
                        "ref": "effect/layer",
                        "params": {
                            "name": "{className}ServiceAuto",
                            "layerType": "suspend",
                            "serviceTag": "{className}Service",
                            "implementation": (
                                "process.env.NODE_ENV === \"production\"\n"
                                "  ? {className}Service.Live\n"
                                "  : {className}Service.Dev"
                            ),
                            "jsdoc": "Selects Live or Dev from NODE_ENV",
                        },
                    },
                },
            ],
        },
    },
}


def error_class(suffix, doc, fields, factory_params, factory_body):
    return {
        "type": "taggedError",
        "config": {
            "className": "{className}" + suffix,
            "jsdoc": doc,
            "fields": fields,
            "staticMethods": [
                {"name": "create", "params": factory_params, "body": factory_body},
            ],
        },
    }


MESSAGE_FIELD = {"name": "message", "jsdoc": "Human-readable error message"}
CAUSE_FIELD = {"name": "cause", "type": "unknown", "optional": True}

INFRA_ERRORS = {
    "id": "infra/errors",
    "meta": {
        "title": "{className} Infrastructure Errors",
        "description": "Error types raised by the {className} infrastructure service.",
        "module": "{scope}/infra-{fileName}/errors",
    },
    "imports": [{"from": "effect", "items": ["Data"]}],
    "sections": [
        {
            "title": "Base Error",
            "content": {
                "type": "taggedError",
                "config": {
                    "className": "{className}BaseError",
                    "jsdoc": "Base error for {className} infrastructure operations",
                    "fields": [MESSAGE_FIELD, CAUSE_FIELD],
                },
            },
        },
        {
            "title": "Specific Errors",
            "content": [
                error_class(
                    "NotFoundError",
                    "Error thrown when resource is not found",
                    [MESSAGE_FIELD, {"name": "resourceId"}, {"name": "resourceType"}],
                    [{"name": "resourceId", "type": "string"}, {"name": "resourceType", "type": "string"}],
                    "return new {className}NotFoundError({\n"
                    "  message: `${resourceType} not found: ${resourceId}`,\n"
                    "  resourceId,\n"
                    "  resourceType\n"
                    "})",
                ),
                error_class(
                    "ValidationError",
                    "Error thrown when validation fails",
                    [MESSAGE_FIELD, {"name": "field", "optional": True}, {"name": "constraint", "optional": True}],
                    [{"name": "message", "type": "string"}, {"name": "field", "type": "string", "optional": True}],
                    "return new {className}ValidationError({\n"
                    "  message,\n"
                    "  ...(field !== undefined && { field })\n"
                    "})",
                ),
                error_class(
                    "ConflictError",
                    "Error thrown when resource conflicts (already exists)",
                    [MESSAGE_FIELD, {"name": "conflictingId", "optional": True}],
                    [{"name": "message", "type": "string"}, {"name": "conflictingId", "type": "string", "optional": True}],
                    "return new {className}ConflictError({\n"
                    "  message,\n"
                    "  ...(conflictingId !== undefined && { conflictingId })\n"
                    "})",
                ),
                error_class(
                    "ConfigError",
                    "Error thrown when configuration is invalid",
                    [MESSAGE_FIELD, {"name": "property"}],
                    [{"name": "property", "type": "string"}, {"name": "reason", "type": "string"}],
                    "return new {className}ConfigError({\n"
                    "  message: `Invalid configuration for ${property}: ${reason}`,\n"
                    "  property\n"
                    "})",
                ),
                error_class(
                    "ConnectionError",
                    "Error thrown when a connection to a backing system fails",
                    [MESSAGE_FIELD, {"name": "target"}, CAUSE_FIELD],
                    [{"name": "target", "type": "string"}, {"name": "cause", "type": "unknown", "optional": True}],
                    "return new {className}ConnectionError({\n"
                    "  message: `Failed to connect to ${target}`,\n"
                    "  target,\n"
                    "  ...(cause !== undefined && { cause })\n"
                    "})",
                ),
                error_class(
                    "TimeoutError",
                    "Error thrown when an operation times out",
                    [MESSAGE_FIELD, {"name": "operation"}, {"name": "timeoutMs", "type": "number"}],
                    [{"name": "operation", "type": "string"}, {"name": "timeoutMs", "type": "number"}],
                    "return new {className}TimeoutError({\n"
                    "  message: `Operation ${operation} timed out after ${timeoutMs}ms`,\n"
                    "  operation,\n"
                    "  timeoutMs\n"
                    "})",
                ),
                error_class(
                    "InternalError",
                    "Error thrown for internal service failures",
                    [MESSAGE_FIELD, CAUSE_FIELD],
                    [{"name": "message", "type": "string"}, {"name": "cause", "type": "unknown", "optional": True}],
                    "return new {className}InternalError({\n"
                    "  message,\n"
                    "  ...(cause !== undefined && { cause })\n"
                    "})",
                ),
            ],
        },
        {
            "title": "Error Type Union",
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * Union of all {className} service errors\n"
                    " *\n"
                    " * Use this type for service method signatures.\n"
                    " */\n"
                    "export type {className}ServiceError =\n"
                    "  | {className}BaseError\n"
                    "  | {className}NotFoundError\n"
                    "  | {className}ValidationError\n"
                    "  | {className}ConflictError\n"
                    "  | {className}ConfigError\n"
                    "  | {className}ConnectionError\n"
                    "  | {className}TimeoutError\n"
                    "  | {className}InternalError"
                ),
            },
        },
    ],
}
