"""
Definitions for contract libraries.

Contract libraries hold the domain errors and the RPC contract of one
entity; the server and client libraries depend on them.
"""

CONTRACT_ERRORS = {
    "id": "contract/errors",
    "meta": {
        "title": "{className} Domain Errors",
        "description": "Defines all error types for {propertyName} domain operations.",
        "module": "{scope}/contract-{fileName}/errors",
    },
    "imports": [{"from": "effect", "items": ["Data"]}],
    "sections": [
        {
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * All {propertyName} errors are Data.TaggedError classes.\n"
                    " *\n"
                    " * They stay inside the service boundary; RPC-facing errors\n"
                    " * live in rpc-errors.\n"
                    " */"
                ),
            },
        },
        {
            "title": "Domain Errors (Data.TaggedError)",
            "content": [
                {"type": "fragment", "ref": "effect/domain-errors"},
                {
                    "type": "raw",
                    "value": (
                        "/**\n"
                        " * Union of all {propertyName} domain errors\n"
                        " */\n"
                        "export type {className}DomainError =\n"
                        "  | {className}NotFoundError\n"
                        "  | {className}ValidationError\n"
                        "  | {className}AlreadyExistsError\n"
                        "  | {className}PermissionError"
                    ),
                },
            ],
        },
        {
            "title": "Repository Errors (Data.TaggedError)",
            "content": [
                {
                    "type": "taggedError",
                    "config": {
                        "className": "{className}ConnectionError",
                        "jsdoc": "Error thrown when the {propertyName} store is unreachable",
                        "fields": [
                            {"name": "message", "jsdoc": "Human-readable error message"},
                            {"name": "target", "jsdoc": "Connection target"},
                            {"name": "cause", "type": "unknown", "optional": True},
                        ],
                    },
                },
                {
                    "type": "taggedError",
                    "config": {
                        "className": "{className}TransactionError",
                        "jsdoc": "Error thrown when a {propertyName} transaction fails",
                        "fields": [
                            {"name": "message", "jsdoc": "Human-readable error message"},
                            {"name": "operation", "jsdoc": "Operation running in the transaction"},
                            {"name": "phase", "type": '"begin" | "commit" | "rollback"'},
                            {"name": "cause", "type": "unknown", "optional": True},
                        ],
                    },
                },
                {
                    "type": "raw",
                    "value": (
                        "/**\n"
                        " * Union of all {propertyName} repository errors\n"
                        " */\n"
                        "export type {className}RepositoryError =\n"
                        "  | {className}ConnectionError\n"
                        "  | {className}TransactionError"
                    ),
                },
            ],
        },
        {
            "title": "Error Union Types",
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * All possible {propertyName} errors\n"
                    " */\n"
                    "export type {className}Error = {className}DomainError | {className}RepositoryError"
                ),
            },
        },
    ],
    "conditionals": {
        "includeCQRS": {
            "sections": [
                {
                    "title": "Command Errors",
                    "content": [
                        {
                            "type": "taggedError",
                            "config": {
                                "className": "{className}CommandError",
                                "jsdoc": "Error thrown when a {propertyName} command is rejected",
                                "fields": [
                                    {"name": "message", "jsdoc": "Human-readable error message"},
                                    {"name": "command", "jsdoc": "Name of the rejected command"},
                                    {"name": "reason", "optional": True},
                                ],
                            },
                        },
                        {
                            "type": "taggedError",
                            "config": {
                                "className": "{className}ProjectionError",
                                "jsdoc": "Error thrown when a {propertyName} projection cannot be built",
                                "fields": [
                                    {"name": "message", "jsdoc": "Human-readable error message"},
                                    {"name": "projection", "jsdoc": "Projection name"},
                                    {"name": "cause", "type": "unknown", "optional": True},
                                ],
                            },
                        },
                    ],
                },
            ],
        },
    },
}

CONTRACT_RPC_DEFINITIONS = {
    "id": "contract/rpc-definitions",
    "meta": {
        "title": "{className} RPC Definitions",
        "description": (
            "Contract-first RPC definitions for the {className} domain.\n"
            "\n"
            "Every RPC carries a RouteTag so the server picks the matching middleware."
        ),
        "module": "{scope}/contract-{fileName}/rpc",
    },
    "imports": [
        {"from": "@effect/rpc", "items": ["Rpc"]},
        {"from": "effect", "items": ["Schema"]},
        {"from": "./rpc-errors", "items": ["{className}RpcError"]},
    ],
    "sections": [
        {
            "title": "Branded ID Type",
            "content": {"type": "fragment", "ref": "effect/branded-id"},
        },
        {
            "title": "Route Tag System",
            "content": {
                "type": "raw",
                "value": (
                    "/**\n"
                    " * Route types for middleware selection\n"
                    " *\n"
                    " * - \"public\": No authentication required\n"
                    " * - \"protected\": Requires user authentication\n"
                    " * - \"admin\": Requires admin privileges\n"
                    " */\n"
                    "export type RouteType = \"public\" | \"protected\" | \"admin\"\n"
                    "\n"
                    "/**\n"
                    " * Symbol for accessing route type on RPC definitions\n"
                    " */\n"
                    "export const RouteTag = Symbol.for(\"@contract/RouteTag\")"
                ),
            },
        },
        {
            "title": "Entity Schema",
            "content": {
                "type": "schema",
                "config": {
                    "name": "{className}Schema",
                    "jsdoc": "{className} Entity Schema",
                    "fields": [
                        {"name": "id", "schema": "{className}Id"},
                        {"name": "name", "kind": "string"},
                        {"name": "description", "kind": "string", "optional": True},
                        {"name": "createdAt", "schema": "Schema.DateFromSelf"},
                        {"name": "updatedAt", "schema": "Schema.DateFromSelf"},
                    ],
                    "annotations": {
                        "identifier": "{className}",
                        "title": "{className} Entity",
                        "description": "A {className} entity",
                    },
                    "typeAlias": "{className}Entity",
                },
            },
        },
        {
            "title": "Request/Response Schemas",
            "content": [
                {
                    "type": "schema",
                    "config": {
                        "name": "PaginationParams",
                        "jsdoc": "Pagination parameters for list operations",
                        "fields": [
                            {"name": "page", "kind": "number", "optional": True},
                            {"name": "pageSize", "kind": "number", "optional": True},
                        ],
                    },
                },
                {
                    "type": "schema",
                    "config": {
                        "name": "Create{className}Input",
                        "jsdoc": "Create {className} input schema",
                        "fields": [
                            {"name": "name", "schema": "Schema.String.pipe(Schema.minLength(1), Schema.maxLength(255))"},
                            {"name": "description", "kind": "string", "optional": True},
                        ],
                        "annotations": {
                            "identifier": "Create{className}Input",
                            "title": "Create {className} Input",
                        },
                        "typeAlias": "Create{className}Input",
                    },
                },
                {
                    "type": "schema",
                    "config": {
                        "name": "Update{className}Input",
                        "jsdoc": "Update {className} input schema",
                        "fields": [
                            {"name": "name", "kind": "string", "optional": True},
                            {"name": "description", "kind": "string", "optional": True},
                        ],
                        "annotations": {
                            "identifier": "Update{className}Input",
                            "title": "Update {className} Input",
                        },
                        "typeAlias": "Update{className}Input",
                    },
                },
                {
                    "type": "schema",
                    "config": {
                        "name": "{className}ListResponse",
                        "jsdoc": "Paginated list of {className} entities",
                        "fields": [
                            {"name": "items", "kind": "array", "items": {"schema": "{className}Schema"}},
                            {"name": "total", "kind": "number"},
                            {"name": "page", "kind": "number"},
                            {"name": "pageSize", "kind": "number"},
                            {"name": "hasMore", "kind": "boolean"},
                        ],
                    },
                },
            ],
        },
        {
            "title": "RPC Definitions (Contract-First)",
            "content": [
                {
                    "type": "rpcDefinition",
                    "config": {
                        "name": "Get{className}",
                        "jsdoc": "Get {className} by ID",
                        "routeType": "public",
                        "payload": {"type": "struct", "fields": [{"name": "id", "schema": "{className}Id"}]},
                        "success": "{className}Schema",
                        "error": "{className}RpcError",
                    },
                },
                {
                    "type": "rpcDefinition",
                    "config": {
                        "name": "List{className}s",
                        "jsdoc": "List {className}s with pagination",
                        "routeType": "public",
                        "payload": {"type": "schema", "name": "PaginationParams"},
                        "success": "{className}ListResponse",
                        "error": "{className}RpcError",
                    },
                },
                {
                    "type": "rpcDefinition",
                    "config": {
                        "name": "Create{className}",
                        "jsdoc": "Create a new {className}",
                        "routeType": "protected",
                        "payload": {"type": "schema", "name": "Create{className}Input"},
                        "success": "{className}Schema",
                        "error": "{className}RpcError",
                    },
                },
                {
                    "type": "rpcDefinition",
                    "config": {
                        "name": "Update{className}",
                        "jsdoc": "Update an existing {className}",
                        "routeType": "protected",
                        "payload": {
                            "type": "struct",
                            "fields": [
                                {"name": "id", "schema": "{className}Id"},
                                {"name": "data", "schema": "Update{className}Input"},
                            ],
                        },
                        "success": "{className}Schema",
                        "error": "{className}RpcError",
                    },
                },
                {
                    "type": "rpcDefinition",
                    "config": {
                        "name": "Delete{className}",
                        "jsdoc": "Delete a {className}",
                        "routeType": "admin",
                        "payload": {"type": "struct", "fields": [{"name": "id", "schema": "{className}Id"}]},
                        "success": "Schema.Void",
                        "error": "{className}RpcError",
                    },
                },
            ],
        },
    ],
    "conditionals": {
        "includeServiceRpcs": {
            "sections": [
                {
                    "title": "Service-to-Service RPC Definitions",
                    "content": [
                        {
                            "type": "rpcDefinition",
                            "config": {
                                "name": "BulkGet{className}s",
                                "jsdoc": "Fetch multiple {className}s by ID",
                                "routeType": "protected",
                                "payload": {
                                    "type": "struct",
                                    "fields": [
                                        {"name": "ids", "kind": "array", "items": {"schema": "{className}Id"}},
                                    ],
                                },
                                "success": "Schema.Array({className}Schema)",
                                "error": "{className}RpcError",
                            },
                        },
                        {
                            "type": "rpcDefinition",
                            "config": {
                                "name": "{className}HealthCheck",
                                "jsdoc": "Report {className} service health",
                                "routeType": "public",
                                "success": "Schema.Struct({ healthy: Schema.Boolean })",
                                "error": "{className}RpcError",
                            },
                        },
                    ],
                },
            ],
        },
    },
}
