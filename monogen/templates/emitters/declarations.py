"""
Emitters for plain TypeScript declarations: interfaces, classes and constants.

Properties are ``readonly`` unless declared mutable.
"""

from ..core.types import (
    ClassContent,
    ConstantContent,
    ContentKind,
    InterfaceContent,
    PropertyDefinition,
)
from .base import ContentEmitter, Emission, EmitEnvironment


def _property(prop: PropertyDefinition, emission: Emission, where: str) -> dict:
    name = emission.identifier(prop.name, f"{where}.name", allow_reserved=True)
    modifier = "readonly " if prop.readonly else ""
    marker = "?" if prop.optional else ""
    return {
        "name": name,
        "text": f"{modifier}{name}{marker}: {emission.text(prop.type, f'{where}.type')}",
        "jsdoc": emission.optional(prop.jsdoc, f"{where}.jsdoc"),
        "location": f"{where}.name",
    }


class InterfaceEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.INTERFACE

    def render(self, node: InterfaceContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        name = emission.identifier(config.name, "config.name")

        members = [
            _property(prop, emission, f"config.properties[{index}]")
            for index, prop in enumerate(config.properties)
        ]
        for index, method in enumerate(config.methods):
            where = f"config.methods[{index}]"
            method_name = emission.identifier(method.name, f"{where}.name", allow_reserved=True)
            params = emission.params(method.params, f"{where}.params")
            return_type = emission.text(method.return_type, f"{where}.returnType")
            members.append({
                "name": method_name,
                "text": f"{method_name}({params}): {return_type}",
                "jsdoc": emission.optional(method.jsdoc, f"{where}.jsdoc"),
                "location": f"{where}.name",
            })
        emission.unique([(m["name"], m["location"]) for m in members], "member")

        return self.render_template(env, "interface", {
            "export": env.export(config.exported),
            "name": name,
            "extends": [
                emission.text(base, f"config.extends[{index}]")
                for index, base in enumerate(config.extends)
            ],
            "members": members,
            "jsdoc": emission.optional(config.jsdoc, "config.jsdoc"),
        })


class ClassEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.CLASS

    def render(self, node: ClassContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        name = emission.identifier(config.name, "config.name")
        names = []

        statics = []
        for index, member in enumerate(config.statics):
            where = f"config.statics[{index}]"
            member_name = emission.identifier(member.name, f"{where}.name", allow_reserved=True)
            names.append((f"static {member_name}", f"{where}.name"))
            modifier = "static readonly " if member.readonly else "static "
            annotation = f": {emission.text(member.type, f'{where}.type')}" if member.type else ""
            value = emission.text(member.value, f"{where}.value")
            statics.append(f"{modifier}{member_name}{annotation} = {value}")

        properties = [
            _property(prop, emission, f"config.properties[{index}]")
            for index, prop in enumerate(config.properties)
        ]
        names.extend((p["name"], p["location"]) for p in properties)

        methods = []
        for index, method in enumerate(config.methods):
            where = f"config.methods[{index}]"
            method_name = emission.identifier(method.name, f"{where}.name", allow_reserved=True)
            names.append((f"static {method_name}" if method.is_static else method_name, f"{where}.name"))
            prefix = ("static " if method.is_static else "") + ("async " if method.is_async else "")
            params = emission.params(method.params, f"{where}.params")
            return_type = emission.optional(method.return_type, f"{where}.returnType")
            signature = f"{prefix}{method_name}({params})"
            if return_type:
                signature = f"{signature}: {return_type}"
            methods.append({
                "signature": signature,
                "body": emission.text(method.body, f"{where}.body").strip("\n"),
                "jsdoc": emission.optional(method.jsdoc, f"{where}.jsdoc"),
            })
        emission.unique(names, "member")

        return self.render_template(env, "class", {
            "export": env.export(config.exported),
            "name": name,
            "extends": emission.optional(config.extends, "config.extends"),
            "implements": [
                emission.text(base, f"config.implements[{index}]")
                for index, base in enumerate(config.implements)
            ],
            "statics": statics,
            "properties": properties,
            "methods": methods,
            "jsdoc": emission.optional(config.jsdoc, "config.jsdoc"),
        })


class ConstantEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.CONSTANT

    def render(self, node: ConstantContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        return self.render_template(env, "constant", {
            "export": env.export(config.exported),
            "name": emission.identifier(config.name, "config.name"),
            "type": emission.optional(config.type, "config.type"),
            "value": emission.text(config.value, "config.value"),
            "jsdoc": emission.optional(config.jsdoc, "config.jsdoc"),
        })
