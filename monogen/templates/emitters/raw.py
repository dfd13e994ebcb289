"""Raw content: the literal string, interpolated."""

from ..core.types import ContentKind, RawContent
from .base import ContentEmitter, Emission, EmitEnvironment


class RawEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.RAW

    def render(self, node: RawContent, emission: Emission, env: EmitEnvironment) -> str:
        return emission.text(node.value, "value")
