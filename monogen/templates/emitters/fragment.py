"""
Fragment reference emitter.

Resolves the reference through the fragment registry and feeds the resulting
nodes back through emitter dispatch, one level deeper in the fragment chain.
"""

from dataclasses import replace

from ..core.errors import DiagnosticCode
from ..core.resolver import Interpolator, is_flag_set
from ..core.types import ContentKind, FragmentReference, ImportDefinition
from .base import ContentEmitter, Emission, EmitEnvironment


class FragmentEmitter(ContentEmitter):

    @property
    def kind(self) -> ContentKind:
        return ContentKind.FRAGMENT

    def render(self, node: FragmentReference, emission: Emission, env: EmitEnvironment) -> str:
        from . import emit_node

        if env.fragments is None:
            emission.report(
                f"No fragment registry available to resolve '{node.ref}'",
                DiagnosticCode.FRAGMENT_NOT_FOUND,
                "ref",
            )
            return ""

        params = emission.interpolator.deep(dict(node.params), "params")
        resolved = env.fragments.resolve(
            node.ref, params, emission.interpolator.context, env.fragment_stack
        )
        if not resolved.success:
            emission.diagnostics.append(resolved.error.to_diagnostic("ref"))
            return ""

        expansion = resolved.value
        emission.diagnostics.extend(expansion.diagnostics)
        for name in expansion.missing_params:
            emission.report(
                f"Fragment '{node.ref}' requires parameter '{name}'",
                DiagnosticCode.INVALID_CONFIG,
                f"params.{name}",
            )
        if emission.interpolator.failed:
            return ""

        self._collect_imports(expansion, emission, env)

        nested_env = replace(env, fragment_stack=env.fragment_stack + (node.ref,))
        parts = []
        for index, child in enumerate(expansion.nodes):
            anchor = f"fragment[{node.ref}][{index}]"
            result = emit_node(child, expansion.context, nested_env)
            if result.success:
                parts.append(result.value)
                emission.diagnostics.extend(w.at(anchor) for w in result.warnings)
            else:
                emission.diagnostics.extend(d.at(anchor) for d in result.error.diagnostics)
        return "\n\n".join(part for part in parts if part)

    def _collect_imports(self, expansion, emission: Emission, env: EmitEnvironment):
        interpolator = Interpolator(expansion.context)
        for index, imp in enumerate(expansion.imports):
            if not is_flag_set(expansion.context, imp.condition):
                continue
            where = f"fragment[{expansion.fragment_id}].imports[{index}]"
            env.imports.append(ImportDefinition(
                source=interpolator.text(imp.source, f"{where}.from"),
                items=tuple(interpolator.text(item, f"{where}.items") for item in imp.items),
                type_only=imp.type_only,
            ))
        emission.diagnostics.extend(interpolator.diagnostics)
