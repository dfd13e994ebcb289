"""Monogen: declarative TypeScript source generation for Effect-based monorepos."""

__version__ = "0.1.0"
