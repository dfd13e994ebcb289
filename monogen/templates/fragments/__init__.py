"""Reusable, parameterizable sub-templates."""

from .registry import (
    FragmentDefinition,
    FragmentExpansion,
    FragmentRegistry,
    RegistryError,
    create_fragment_registry,
    get_fragment_registry,
)

__all__ = [
    "FragmentDefinition",
    "FragmentExpansion",
    "FragmentRegistry",
    "RegistryError",
    "create_fragment_registry",
    "get_fragment_registry",
]
