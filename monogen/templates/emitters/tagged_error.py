"""
Tagged error emitter.

Emits ``Data.TaggedError`` classes. Every field is emitted ``readonly``
whatever its declaration says; optional fields get a ``?`` marker.
"""

from ..core.types import ContentKind, TaggedErrorContent
from .base import ContentEmitter, Emission, EmitEnvironment


class TaggedErrorEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.TAGGED_ERROR

    def render(self, node: TaggedErrorContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        name = emission.identifier(config.class_name, "config.className")
        tag = emission.text(config.tag_name, "config.tagName") if config.tag_name else name

        fields = []
        for index, field in enumerate(config.fields):
            where = f"config.fields[{index}]"
            doc = emission.optional(field.jsdoc, f"{where}.jsdoc")
            if field.default is not None:
                default = emission.text(field.default, f"{where}.default")
                doc = f"{doc} (default: {default})" if doc else f"Default: {default}"
            fields.append({
                "name": emission.identifier(field.name, f"{where}.name", allow_reserved=True),
                "type": emission.text(field.type, f"{where}.type"),
                "optional": field.optional,
                "jsdoc": doc,
                "location": f"{where}.name",
            })
        emission.unique([(f["name"], f["location"]) for f in fields], "field")

        methods = []
        for index, method in enumerate(config.static_methods):
            where = f"config.staticMethods[{index}]"
            methods.append({
                "name": emission.identifier(method.name, f"{where}.name", allow_reserved=True),
                "params": emission.params(method.params, f"{where}.params"),
                "return_type": emission.optional(method.return_type, f"{where}.returnType"),
                "body": emission.text(method.body, f"{where}.body").strip("\n"),
                "location": f"{where}.name",
            })
        emission.unique([(m["name"], m["location"]) for m in methods], "static method")

        return self.render_template(env, "tagged_error", {
            "export": env.export(config.exported),
            "name": name,
            "tag": env.quote(tag),
            "fields": fields,
            "methods": methods,
            "tail": " {" if methods else " {}",
            "jsdoc": emission.optional(config.jsdoc, "config.jsdoc"),
        })
