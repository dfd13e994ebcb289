"""RPC definition emitter (``Rpc.make`` classes tagged with a route type)."""

from ..core.types import ContentKind, RouteType, RpcDefinitionContent, RpcPayloadKind
from .base import ContentEmitter, Emission, EmitEnvironment
from .schema import SchemaExpressionBuilder

ROUTE_DESCRIPTIONS = {
    RouteType.PUBLIC: "No authentication required",
    RouteType.PROTECTED: "Requires user authentication",
    RouteType.ADMIN: "Requires admin privileges",
}


class RpcDefinitionEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.RPC_DEFINITION

    def render(self, node: RpcDefinitionContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        name = emission.identifier(config.name, "config.name")
        payload = config.payload

        if payload.kind == RpcPayloadKind.STRUCT:
            builder = SchemaExpressionBuilder(emission, env)
            payload_expr = f"Schema.Struct({builder.struct_body(payload.fields, 'config.payload.fields')})"
        elif payload.kind == RpcPayloadKind.SCHEMA:
            payload_expr = emission.text(payload.name, "config.payload.name")
        else:
            payload_expr = None

        route = config.route_type
        route_line = f"@route {route.value} - {ROUTE_DESCRIPTIONS[route]}"
        doc = emission.optional(config.jsdoc, "config.jsdoc")

        return self.render_template(env, "rpc_definition", {
            "name": name,
            "quoted_name": env.quote(name),
            "payload": payload_expr,
            "success": emission.text(config.success, "config.success"),
            "error": emission.text(config.error, "config.error"),
            "route": env.quote(route.value),
            "jsdoc": f"{doc}\n\n{route_line}" if doc else route_line,
        })
