"""
Definitions for provider libraries.

A provider library adapts one external service: an error family for its
failure modes and a service tag whose Live layer talks to the service
while the Test layer answers from memory.
"""

from .infra import CAUSE_FIELD, MESSAGE_FIELD, error_class

PROVIDER_ERRORS = {
    "id": "provider/errors",
    "meta": {
        "title": "{className} Provider Errors",
        "description": (
            "Errors of the {className} provider, using Data.TaggedError.\n"
            "\n"
            "They are not serializable; use Schema.TaggedError at RPC boundaries."
        ),
        "module": "{scope}/provider-{fileName}/errors",
    },
    "imports": [{"from": "effect", "items": ["Data"]}],
    "sections": [
        {
            "title": "Provider Errors",
            "content": [
                error_class(
                    "Error",
                    "Base error for {className} provider",
                    [MESSAGE_FIELD, CAUSE_FIELD],
                    [{"name": "message", "type": "string"}, {"name": "cause", "type": "unknown", "optional": True}],
                    "return new {className}Error({\n"
                    "  message,\n"
                    "  ...(cause !== undefined && { cause })\n"
                    "})",
                ),
                error_class(
                    "NotFoundError",
                    "Error thrown when resource is not found in external service",
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
                    "Error thrown when request validation fails",
                    [MESSAGE_FIELD, {"name": "field", "optional": True}, {"name": "constraint", "optional": True}],
                    [{"name": "message", "type": "string"}, {"name": "field", "type": "string", "optional": True}],
                    "return new {className}ValidationError({\n"
                    "  message,\n"
                    "  ...(field !== undefined && { field })\n"
                    "})",
                ),
                error_class(
                    "RateLimitError",
                    "Error thrown when rate limit is exceeded",
                    [
                        MESSAGE_FIELD,
                        {"name": "retryAfterMs", "type": "number", "optional": True},
                        {"name": "limit", "type": "number", "optional": True},
                    ],
                    [{"name": "retryAfterMs", "type": "number", "optional": True}],
                    "return new {className}RateLimitError({\n"
                    "  message: retryAfterMs\n"
                    "    ? `Rate limit exceeded, retry after ${retryAfterMs}ms`\n"
                    "    : \"Rate limit exceeded\",\n"
                    "  ...(retryAfterMs !== undefined && { retryAfterMs })\n"
                    "})",
                ),
                error_class(
                    "AuthenticationError",
                    "Error thrown when the external service rejects the credentials",
                    [MESSAGE_FIELD],
                    [{"name": "message", "type": "string"}],
                    "return new {className}AuthenticationError({ message })",
                ),
                error_class(
                    "NetworkError",
                    "Error thrown when the external service cannot be reached",
                    [MESSAGE_FIELD, CAUSE_FIELD],
                    [{"name": "cause", "type": "unknown", "optional": True}],
                    "return new {className}NetworkError({\n"
                    "  message: \"Network request to {className} failed\",\n"
                    "  ...(cause !== undefined && { cause })\n"
                    "})",
                ),
                error_class(
                    "TimeoutError",
                    "Error thrown when a request to the external service times out",
                    [MESSAGE_FIELD, {"name": "timeoutMs", "type": "number"}],
                    [{"name": "timeoutMs", "type": "number"}],
                    "return new {className}TimeoutError({\n"
                    "  message: `Request timed out after ${timeoutMs}ms`,\n"
                    "  timeoutMs\n"
                    "})",
                ),
            ],
        },
        {
            "title": "Error Union Type",
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * Union of all {className} provider errors\n"
                    " */\n"
                    "export type {className}ServiceError =\n"
                    "  | {className}Error\n"
                    "  | {className}NotFoundError\n"
                    "  | {className}ValidationError\n"
                    "  | {className}RateLimitError\n"
                    "  | {className}AuthenticationError\n"
                    "  | {className}NetworkError\n"
                    "  | {className}TimeoutError"
                ),
            },
        },
    ],
}


def _effect(result):
    return f"Effect.Effect<{result}, {{className}}ServiceError>"


_RESOURCE_INPUT = 'Omit<Resource, "id" | "createdAt" | "updatedAt">'

TEST_IMPLEMENTATION = """\
Layer.sync(this, () => {
  const store = new Map<string, Resource>()
  return {
    healthCheck: () => Effect.succeed({ status: "healthy" as const }),
    list: () => Effect.succeed({ items: Array.from(store.values()), total: store.size, hasMore: false }),
    get: (id) =>
      Effect.suspend(() => {
        const resource = store.get(id)
        return resource
          ? Effect.succeed(resource)
          : Effect.fail({className}NotFoundError.create(id, "Resource"))
      }),
    create: (data) =>
      Effect.sync(() => {
        const now = new Date()
        const resource = { ...data, id: crypto.randomUUID(), createdAt: now, updatedAt: now }
        store.set(resource.id, resource)
        return resource
      }),
    update: (id, data) =>
      Effect.suspend(() => {
        const existing = store.get(id)
        if (!existing) {
          return Effect.fail({className}NotFoundError.create(id, "Resource"))
        }
        const updated = { ...existing, ...data, updatedAt: new Date() }
        store.set(id, updated)
        return Effect.succeed(updated)
      }),
    delete: (id) => Effect.sync(() => void store.delete(id))
  }
})"""

PROVIDER_SERVICE = {
    "id": "provider/service",
    "meta": {
        "title": "{className} Service Interface",
        "description": (
            "Context.Tag definition for the {className} provider service.\n"
            "\n"
            "Live reads its credentials from the environment; Test keeps resources in memory."
        ),
        "module": "{scope}/provider-{fileName}/service",
    },
    "imports": [
        {"from": "effect", "items": ["Context", "Effect", "Layer", "Redacted"]},
        {
            "from": "./types",
            "items": ["HealthCheckResult", "ListParams", "PaginatedResult", "Resource"],
            "isTypeOnly": True,
        },
        {"from": "./errors", "items": ["{className}ServiceError"], "isTypeOnly": True},
        {"from": "./errors", "items": ["{className}NotFoundError"]},
        {"from": "./client", "items": ["make{className}Client"]},
        {"from": "{scope}/env", "items": ["env"]},
    ],
    "sections": [
        {
            "title": "Service Context.Tag Definition",
            "content": {
                "type": "contextTag",
                "config": {
                    "serviceName": "{className}Service",
                    "tagIdentifier": "{scope}/provider-{fileName}/{className}Service",
                    "jsdoc": "{className} Service\n\nExternal service adapter with Live and Test layers.",
                    "methods": [
                        {"name": "healthCheck", "returnType": _effect("HealthCheckResult"),
                         "jsdoc": "Verify connectivity to the external service"},
                        {"name": "list", "params": [{"name": "params", "type": "ListParams", "optional": True}],
                         "returnType": _effect("PaginatedResult<Resource>"),
                         "jsdoc": "List resources with pagination support"},
                        {"name": "get", "params": [{"name": "id", "type": "string"}],
                         "returnType": _effect("Resource"), "jsdoc": "Get resource by ID"},
                        {"name": "create", "params": [{"name": "data", "type": _RESOURCE_INPUT}],
                         "returnType": _effect("Resource"), "jsdoc": "Create new resource"},
                        {
                            "name": "update",
                            "params": [
                                {"name": "id", "type": "string"},
                                {"name": "data", "type": f"Partial<{_RESOURCE_INPUT}>"},
                            ],
                            "returnType": _effect("Resource"),
                            "jsdoc": "Update existing resource",
                        },
                        {"name": "delete", "params": [{"name": "id", "type": "string"}],
                         "returnType": _effect("void"), "jsdoc": "Delete resource by ID"},
                    ],
                    "staticLayers": [
                        {
                            "name": "Test",
                            "implementation": TEST_IMPLEMENTATION,
                            "jsdoc": "Test Layer - In-memory resources, no network access",
                        },
                        {
                            "name": "Live",
                            "implementation": (
                                "Layer.sync(this, () =>\n"
                                "  make{className}Client({\n"
                                "    apiKey: Redacted.make(env.{constantName}_API_KEY),\n"
                                "    baseUrl: env.{constantName}_BASE_URL\n"
                                "  })\n"
                                ")"
                            ),
                            "jsdoc": "Live Layer - Client configured from the environment",
                        },
                    ],
                },
            },
        },
    ],
}
