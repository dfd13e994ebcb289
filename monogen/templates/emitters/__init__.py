"""
Content emitters, one per content kind.

``EMITTERS`` is the dispatch table; ``emit_node`` is the single entry point
used by the compiler and by fragment expansion.
"""

from typing import Dict

from ...logging_config import get_logger
from ..core.errors import CompilationError, Diagnostic, DiagnosticCode, Result
from ..core.types import ContentDefinition, ContentKind, TemplateContext
from .base import ContentEmitter, Emission, EmitEnvironment, finish
from .context_tag import CANONICAL_LAYER_ORDER, ContextTagEmitter, order_layers
from .declarations import ClassEmitter, ConstantEmitter, InterfaceEmitter
from .fragment import FragmentEmitter
from .raw import RawEmitter
from .rpc import RpcDefinitionEmitter
from .schema import SchemaEmitter
from .tagged_error import TaggedErrorEmitter

logger = get_logger(__name__)

EMITTERS: Dict[ContentKind, ContentEmitter] = {
    emitter.kind: emitter
    for emitter in (
        RawEmitter(),
        ContextTagEmitter(),
        TaggedErrorEmitter(),
        SchemaEmitter(),
        RpcDefinitionEmitter(),
        FragmentEmitter(),
        InterfaceEmitter(),
        ClassEmitter(),
        ConstantEmitter(),
    )
}

_missing = set(ContentKind) - set(EMITTERS)
if _missing:
    raise ImportError(
        f"No emitter for content kinds: {', '.join(sorted(k.value for k in _missing))}"
    )


def emit_node(node: ContentDefinition, context: TemplateContext,
              env: EmitEnvironment) -> Result[str, CompilationError]:
    """
    Dispatch a content node to its emitter.

    Unexpected exceptions inside an emitter become an internal-error
    diagnostic; they never propagate to the caller.
    """
    emitter = EMITTERS.get(getattr(node, "kind", None))
    if emitter is None:
        diagnostic = Diagnostic(
            message=f"Unsupported content node: {type(node).__name__}",
            code=DiagnosticCode.INVALID_CONFIG,
        )
        return Result.fail(CompilationError(env.template_id, (diagnostic,)))
    try:
        return emitter.emit(node, context, env)
    except Exception as e:
        logger.debug("Emitter %s raised", emitter.kind.value, exc_info=True)
        diagnostic = Diagnostic(
            message=f"{emitter.kind.value} emitter failed: {e}",
            code=DiagnosticCode.INTERNAL_ERROR,
        )
        return Result.fail(CompilationError(env.template_id, (diagnostic,)))


__all__ = [
    "CANONICAL_LAYER_ORDER",
    "EMITTERS",
    "ContentEmitter",
    "Emission",
    "EmitEnvironment",
    "emit_node",
    "finish",
    "order_layers",
]
