"""
Definitions for data-access libraries.

A data-access library implements the repository port of a contract. Its
errors cover infrastructure failures only; domain errors are imported
from the contract library.
"""

from .infra import CAUSE_FIELD, MESSAGE_FIELD, error_class

INFRASTRUCTURE_SERVICES = ["DatabaseService", "LoggingService", "MetricsService", "CacheService"]


def infrastructure_layers(services):
    """Live, Dev and Test ``Infrastructure*`` layers over the given services."""
    return [
        {
            "type": "fragment",
            "ref": "effect/infrastructure-layer",
            "params": {"services": services, "variant": variant},
        }
        for variant in ("Live", "Dev", "Test")
    ]


def composed_layers(prefix, layers):
    """``<prefix>Live/Dev/Test`` layers provided with the matching infrastructure."""
    return [
        {
            "type": "fragment",
            "ref": "effect/composed-layer",
            "params": {
                "name": prefix + variant,
                "layers": layers,
                "provide": f"Infrastructure{variant}",
                "jsdoc": f"{variant} layer of {prefix}",
            },
        }
        for variant in ("Live", "Dev", "Test")
    ]


def environment_layer(prefix):
    """``<prefix>Auto``, picking Test, Dev or Live from NODE_ENV."""
    return {
        "type": "raw",
        "value": (
            "/**\n"
            " * Auto-selecting layer based on NODE_ENV\n"
            " *\n"
            " * \"test\" selects Test, \"development\" selects Dev, anything else Live.\n"
            " */\n"
            f"export const {prefix}Auto = Layer.suspend(() => {{\n"
            "  switch (env.NODE_ENV) {\n"
            "    case \"test\":\n"
            f"      return {prefix}Test\n"
            "    case \"development\":\n"
            f"      return {prefix}Dev\n"
            "    default:\n"
            f"      return {prefix}Live\n"
            "  }\n"
            "})"
        ),
    }


DATA_ACCESS_ERRORS = {
    "id": "data-access/errors",
    "meta": {
        "title": "{className} Data Access Infrastructure Errors",
        "description": (
            "Infrastructure-specific errors for data-access layer operations.\n"
            "\n"
            "Domain errors are defined in {scope}/contract-{fileName}; import them from there."
        ),
        "module": "{scope}/data-access-{fileName}/errors",
    },
    "imports": [
        {"from": "{scope}/contract-{fileName}", "items": ["{className}RepositoryError"], "isTypeOnly": True},
        {"from": "effect", "items": ["Data"]},
    ],
    "sections": [
        {
            "title": "Infrastructure Errors (Data-Access Specific)",
            "content": [
                error_class(
                    "ConnectionError",
                    "Error thrown when database connection fails",
                    [MESSAGE_FIELD, {"name": "cause", "optional": True, "jsdoc": "Underlying connection error"}],
                    [{"name": "cause", "type": "string", "optional": True}],
                    "return new {className}ConnectionError({\n"
                    "  message: cause\n"
                    "    ? `Database connection failed: ${cause}`\n"
                    "    : \"Database connection failed\",\n"
                    "  ...(cause !== undefined && { cause })\n"
                    "})",
                ),
                error_class(
                    "TimeoutError",
                    "Error thrown when database operation times out",
                    [
                        MESSAGE_FIELD,
                        {"name": "operation", "jsdoc": "Operation that timed out"},
                        {"name": "timeoutMs", "type": "number", "optional": True},
                    ],
                    [
                        {"name": "operation", "type": "string"},
                        {"name": "timeoutMs", "type": "number", "optional": True},
                    ],
                    "return new {className}TimeoutError({\n"
                    "  message: timeoutMs\n"
                    "    ? `Operation '${operation}' timed out after ${timeoutMs}ms`\n"
                    "    : `Operation '${operation}' timed out`,\n"
                    "  operation,\n"
                    "  ...(timeoutMs !== undefined && { timeoutMs })\n"
                    "})",
                ),
                error_class(
                    "TransactionError",
                    "Error thrown when database transaction fails",
                    [
                        MESSAGE_FIELD,
                        {"name": "operation", "jsdoc": "Transaction operation that failed"},
                        CAUSE_FIELD,
                    ],
                    [
                        {"name": "operation", "type": "string"},
                        {"name": "cause", "type": "unknown", "optional": True},
                    ],
                    "return new {className}TransactionError({\n"
                    "  message: `Transaction failed during '${operation}'`,\n"
                    "  operation,\n"
                    "  ...(cause !== undefined && { cause })\n"
                    "})",
                ),
            ],
        },
        {
            "title": "Infrastructure Error Union Type",
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * Union of infrastructure-specific errors\n"
                    " *\n"
                    " * Map these to repository errors at the data-access boundary.\n"
                    " */\n"
                    "export type {className}InfrastructureError =\n"
                    "  | {className}ConnectionError\n"
                    "  | {className}TimeoutError\n"
                    "  | {className}TransactionError"
                ),
            },
        },
        {
            "title": "Combined Data Access Error Type",
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * All possible data-access layer errors\n"
                    " */\n"
                    "export type {className}DataAccessError = "
                    "{className}RepositoryError | {className}InfrastructureError"
                ),
            },
        },
    ],
}

DATA_ACCESS_LAYERS = {
    "id": "data-access/layers",
    "meta": {
        "title": "{className} Data Access Layers",
        "description": (
            "Effect layer compositions for {propertyName} data access.\n"
            "\n"
            "Live, Dev and Test differ only in the infrastructure they provide;\n"
            "Auto picks one of them from NODE_ENV."
        ),
        "module": "{scope}/data-access-{fileName}/server",
    },
    "imports": [
        {"from": "effect", "items": ["Layer"]},
        {"from": "{scope}/env", "items": ["env"]},
        {"from": "{scope}/infra-database", "items": ["DatabaseService"]},
        {"from": "{scope}/infra-observability", "items": ["LoggingService", "MetricsService"]},
        {"from": "{scope}/infra-cache", "items": ["CacheService"]},
        {"from": "./{fileName}-repository", "items": ["{className}Repository"]},
    ],
    "sections": [
        {
            "title": "Infrastructure Layers",
            "content": infrastructure_layers(INFRASTRUCTURE_SERVICES),
        },
        {
            "title": "Domain Layers",
            "content": composed_layers("{className}DataAccess", ["{className}Repository.Live"]),
        },
        {
            "title": "Environment-Aware Layer",
            "content": environment_layer("{className}DataAccess"),
        },
    ],
}
