"""
Service tag emitter.

Emits an Effect ``Context.Tag`` class: the service interface as the second
type argument and the environment layers as static members.
"""

from typing import List, Sequence, Tuple, TypeVar

from ..core.types import ContentKind, ContextTagContent, LayerConfig
from .base import ContentEmitter, Emission, EmitEnvironment

# Static layers are always emitted in this order; unknown names follow in
# declaration order.
CANONICAL_LAYER_ORDER: Tuple[str, ...] = ("Live", "Test", "Dev", "Auto")

L = TypeVar("L")


def order_layers(layers: Sequence[Tuple[str, L]]) -> List[Tuple[str, L]]:
    """
    Sort (name, layer) pairs into canonical order.

    Args:
        layers: Pairs in declaration order

    Returns:
        Pairs ordered Live, Test, Dev, Auto, then any others (stable)
    """
    rank = {name: index for index, name in enumerate(CANONICAL_LAYER_ORDER)}
    return sorted(layers, key=lambda pair: rank.get(pair[0], len(rank)))


class ContextTagEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.CONTEXT_TAG

    def render(self, node: ContextTagContent, emission: Emission, env: EmitEnvironment) -> str:
        config = node.config
        name = emission.identifier(config.service_name, "config.serviceName")
        tag_id = emission.text(config.tag_identifier, "config.tagIdentifier") if config.tag_identifier else name

        methods = []
        for index, method in enumerate(config.methods):
            where = f"config.methods[{index}]"
            methods.append({
                "name": emission.identifier(method.name, f"{where}.name", allow_reserved=True),
                "params": emission.params(method.params, f"{where}.params"),
                "return_type": emission.text(method.return_type, f"{where}.returnType"),
                "jsdoc": emission.optional(method.jsdoc, f"{where}.jsdoc"),
                "location": f"{where}.name",
            })
        emission.unique([(m["name"], m["location"]) for m in methods], "method")

        named_layers = []
        for index, layer in enumerate(config.static_layers):
            where = f"config.staticLayers[{index}]"
            layer_name = emission.identifier(layer.name, f"{where}.name", allow_reserved=True)
            named_layers.append((layer_name, (index, layer)))
        emission.unique(
            [(layer_name, f"config.staticLayers[{index}].name")
             for layer_name, (index, _) in named_layers],
            "static layer",
        )

        layers = []
        for layer_name, (index, layer) in order_layers(named_layers):
            layers.append({
                "name": layer_name,
                "implementation": emission.text(
                    layer.implementation, f"config.staticLayers[{index}].implementation"
                ),
                "jsdoc": self._layer_doc(layer, emission, f"config.staticLayers[{index}]"),
            })

        return self.render_template(env, "context_tag", {
            "export": env.export(config.exported),
            "name": name,
            "tag_id": env.quote(tag_id),
            "methods": methods,
            "layers": layers,
            "jsdoc": emission.optional(config.jsdoc, "config.jsdoc"),
        })

    def _layer_doc(self, layer: LayerConfig, emission: Emission, where: str):
        doc = emission.optional(layer.jsdoc, f"{where}.jsdoc")
        if layer.dependencies:
            requires = ", ".join(
                emission.text(dep, f"{where}.dependencies[{i}]")
                for i, dep in enumerate(layer.dependencies)
            )
            doc = f"{doc}\n\nRequires: {requires}" if doc else f"Requires: {requires}"
        return doc
