"""
Definitions for feature libraries.

A feature library orchestrates the repository of a domain behind a
service tag. Domain errors come from the contract library; the feature
adds the errors of its own orchestration.
"""

from .data_access import (
    INFRASTRUCTURE_SERVICES,
    composed_layers,
    environment_layer,
    infrastructure_layers,
)


def _service_error(name, code, doc, fields, params, assignments):
    return {
        "type": "taggedError",
        "config": {
            "className": "{className}" + name,
            "jsdoc": doc,
            "fields": [{"name": "message"}, {"name": "code", "type": f"typeof {{className}}ServiceErrorCode.{code}"}]
            + fields,
            "staticMethods": [
                {
                    "name": "make",
                    "params": params,
                    "body": (
                        "return new {className}" + name + "({\n"
                        "  message,\n"
                        f"  code: {{className}}ServiceErrorCode.{code},\n"
                        + "".join(f"  {a},\n" for a in assignments)
                        + "  cause\n"
                        "})"
                    ),
                },
            ],
        },
    }


_CAUSE_FIELD = {"name": "cause", "type": "unknown", "optional": True}
_MESSAGE_PARAM = {"name": "message", "type": "string"}
_CAUSE_PARAM = {"name": "cause", "type": "unknown", "optional": True}

FEATURE_ERRORS = {
    "id": "feature/errors",
    "meta": {
        "title": "{className} Feature Errors",
        "description": (
            "Service-level errors for the {propertyName} feature.\n"
            "\n"
            "Domain errors ({className}NotFoundError, ...) are imported from the contract library;\n"
            "this file defines the errors of orchestration failures."
        ),
        "module": "{scope}/feature-{fileName}/shared/errors",
    },
    "imports": [
        {"from": "effect", "items": ["Data"]},
        {
            "from": "{scope}/contract-{fileName}",
            "items": [
                "{className}NotFoundError",
                "{className}ValidationError",
                "{className}AlreadyExistsError",
                "{className}PermissionError",
            ],
        },
    ],
    "sections": [
        {
            "title": "Domain Error Re-exports",
            "content": {
                "type": "raw",
                "value": (
                    "export {\n"
                    "  {className}NotFoundError,\n"
                    "  {className}ValidationError,\n"
                    "  {className}AlreadyExistsError,\n"
                    "  {className}PermissionError\n"
                    "}"
                ),
            },
        },
        {
            "title": "Service Error Codes",
            "content": {
                "type": "constant",
                "config": {
                    "name": "{className}ServiceErrorCode",
                    "jsdoc": "Codes of the {className} service-level errors",
                    "value": (
                        "{\n"
                        "  DEPENDENCY: \"{className}DependencyError\" as const,\n"
                        "  ORCHESTRATION: \"{className}OrchestrationError\" as const,\n"
                        "  INTERNAL: \"{className}InternalError\" as const\n"
                        "}"
                    ),
                },
            },
        },
        {
            "title": "Service Errors",
            "content": [
                _service_error(
                    "DependencyError", "DEPENDENCY",
                    "Thrown when a downstream service or external dependency fails",
                    [{"name": "dependency"}, _CAUSE_FIELD],
                    [{"name": "dependency", "type": "string"}, _MESSAGE_PARAM, _CAUSE_PARAM],
                    ["dependency"],
                ),
                _service_error(
                    "OrchestrationError", "ORCHESTRATION",
                    "Thrown when a multi-step operation fails partway through",
                    [{"name": "step"}, {"name": "completedSteps", "type": "readonly string[]"}, _CAUSE_FIELD],
                    [
                        {"name": "step", "type": "string"},
                        {"name": "completedSteps", "type": "readonly string[]"},
                        _MESSAGE_PARAM,
                        _CAUSE_PARAM,
                    ],
                    ["step", "completedSteps"],
                ),
                _service_error(
                    "InternalError", "INTERNAL",
                    "Thrown for unexpected errors that fit no other category",
                    [_CAUSE_FIELD],
                    [_MESSAGE_PARAM, _CAUSE_PARAM],
                    [],
                ),
            ],
        },
        {
            "title": "Combined Error Types",
            "content": {
                "type": "raw",
                "value": (
                    "export type {className}DomainError =\n"
                    "  | {className}NotFoundError\n"
                    "  | {className}ValidationError\n"
                    "  | {className}AlreadyExistsError\n"
                    "  | {className}PermissionError\n"
                    "\n"
                    "export type {className}ServiceError =\n"
                    "  | {className}DependencyError\n"
                    "  | {className}OrchestrationError\n"
                    "  | {className}InternalError\n"
                    "\n"
                    "/**\n"
                    " * Every error a {className} feature operation can fail with\n"
                    " */\n"
                    "export type {className}FeatureError = {className}DomainError | {className}ServiceError"
                ),
            },
        },
    ],
}

SERVICE_IMPLEMENTATION = """\
/**
 * Create service implementation
 *
 * Repository errors bubble up with their full type; the RPC handlers map
 * them to RPC errors.
 */
const createServiceImpl = (
  repo: Context.Tag.Service<typeof {className}Repository>,
  logger: Context.Tag.Service<typeof LoggingService>
) => ({
  get: (id: string) =>
    Effect.gen(function*() {
      yield* logger.debug("{className}Service.get", { id })
      const result = yield* repo.findById(id)
      if (Option.isNone(result)) {
        return yield* Effect.fail({className}NotFoundError.create(id))
      }
      return result.value
    }).pipe(Effect.withSpan("{className}Service.get", { attributes: { id } })),

  findByCriteria: (criteria: {className}Filter, offset: number, limit: number) =>
    repo.findAll(criteria, { skip: offset, limit }).pipe(
      Effect.map((page) => page.items),
      Effect.withSpan("{className}Service.findByCriteria")
    ),

  count: (criteria: {className}Filter) =>
    repo.count(criteria).pipe(Effect.withSpan("{className}Service.count")),

  create: (input: {className}CreateInput) =>
    Effect.gen(function*() {
      const result = yield* repo.create(input)
      yield* logger.info("{className} created", { id: result.id })
      return result
    }).pipe(Effect.withSpan("{className}Service.create")),

  update: (id: string, input: {className}UpdateInput) =>
    Effect.gen(function*() {
      const existing = yield* repo.findById(id)
      if (Option.isNone(existing)) {
        return yield* Effect.fail({className}NotFoundError.create(id))
      }
      return yield* repo.update(id, input)
    }).pipe(Effect.withSpan("{className}Service.update", { attributes: { id } })),

  delete: (id: string) =>
    repo.delete(id).pipe(Effect.withSpan("{className}Service.delete", { attributes: { id } }))
})"""


def _effect(result):
    return f"Effect.Effect<{result}, {{className}}FeatureError>"


FEATURE_SERVICE = {
    "id": "feature/service",
    "meta": {
        "title": "{className} Service Interface",
        "description": (
            "Context.Tag definition for {className}Service.\n"
            "\n"
            "Operations log through LoggingService and are traced with Effect.withSpan."
        ),
        "module": "{scope}/feature-{fileName}/server/services",
    },
    "imports": [
        {"from": "effect", "items": ["Context", "Effect", "Layer", "Option"]},
        {"from": "{scope}/contract-{fileName}", "items": ["{className}NotFoundError"]},
        {"from": "{scope}/data-access-{fileName}", "items": ["{className}Repository"]},
        {"from": "{scope}/infra-observability", "items": ["LoggingService"]},
        {
            "from": "{scope}/data-access-{fileName}",
            "items": ["{className}", "{className}CreateInput", "{className}UpdateInput", "{className}Filter"],
            "isTypeOnly": True,
        },
        {"from": "../../shared/errors", "items": ["{className}FeatureError"], "isTypeOnly": True},
    ],
    "sections": [
        {
            "title": "Service Implementation",
            "content": {"type": "raw", "value": SERVICE_IMPLEMENTATION},
        },
        {
            "title": "Context.Tag Definition",
            "content": {
                "type": "contextTag",
                "config": {
                    "serviceName": "{className}Service",
                    "tagIdentifier": "{scope}/feature-{fileName}/{className}Service",
                    "jsdoc": "{className} Service\n\nOrchestrates {className}Repository for the feature.",
                    "methods": [
                        {"name": "get", "params": [{"name": "id", "type": "string"}],
                         "returnType": _effect("{className}")},
                        {
                            "name": "findByCriteria",
                            "params": [
                                {"name": "criteria", "type": "{className}Filter"},
                                {"name": "offset", "type": "number"},
                                {"name": "limit", "type": "number"},
                            ],
                            "returnType": _effect("ReadonlyArray<{className}>"),
                        },
                        {"name": "count", "params": [{"name": "criteria", "type": "{className}Filter"}],
                         "returnType": _effect("number")},
                        {"name": "create", "params": [{"name": "input", "type": "{className}CreateInput"}],
                         "returnType": _effect("{className}")},
                        {
                            "name": "update",
                            "params": [
                                {"name": "id", "type": "string"},
                                {"name": "input", "type": "{className}UpdateInput"},
                            ],
                            "returnType": _effect("{className}"),
                        },
                        {"name": "delete", "params": [{"name": "id", "type": "string"}],
                         "returnType": _effect("void")},
                    ],
                    "staticLayers": [
                        {
                            "name": "Live",
                            "implementation": (
                                "Layer.effect(\n"
                                "  this,\n"
                                "  Effect.gen(function*() {\n"
                                "    const repo = yield* {className}Repository\n"
                                "    const logger = yield* LoggingService\n"
                                "    return createServiceImpl(repo, logger)\n"
                                "  })\n"
                                ")"
                            ),
                            "jsdoc": "Live Layer - Repository backed implementation",
                            "dependencies": ["{className}Repository", "LoggingService"],
                        },
                    ],
                },
            },
        },
    ],
}

FEATURE_LAYERS = {
    "id": "feature/layers",
    "meta": {
        "title": "{className} Layers",
        "description": (
            "Layer composition for the {propertyName} feature.\n"
            "\n"
            "Live, Dev and Test provide the service and repository with the matching\n"
            "infrastructure; Auto picks one of them from NODE_ENV."
        ),
        "module": "{scope}/feature-{fileName}/server",
    },
    "imports": [
        {"from": "effect", "items": ["Layer"]},
        {"from": "{scope}/env", "items": ["env"]},
        {"from": "./services/service", "items": ["{className}Service"]},
        {"from": "{scope}/data-access-{fileName}", "items": ["{className}Repository"]},
        {"from": "{scope}/infra-database", "items": ["DatabaseService"]},
        {"from": "{scope}/infra-observability", "items": ["LoggingService", "MetricsService"]},
        {"from": "{scope}/infra-cache", "items": ["CacheService"]},
        {"from": "{scope}/infra-pubsub", "items": ["PubsubService"]},
    ],
    "sections": [
        {
            "title": "Composed Infrastructure Layers",
            "content": infrastructure_layers(INFRASTRUCTURE_SERVICES + ["PubsubService"]),
        },
        {
            "title": "Full Feature Layers",
            "content": composed_layers(
                "{className}Feature", ["{className}Service.Live", "{className}Repository.Live"]
            ),
        },
        {
            "title": "Environment-Aware Layer",
            "content": environment_layer("{className}Feature"),
        },
    ],
}
