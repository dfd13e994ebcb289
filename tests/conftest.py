"""Shared fixtures for the monogen test suite."""

import pytest

from monogen.templates.core.compiler import TemplateCompiler
from monogen.templates.core.config import load_config
from monogen.templates.core.resolver import create_context_from_name
from monogen.templates.emitters import EmitEnvironment
from monogen.templates.fragments import create_fragment_registry


@pytest.fixture
def context():
    """Naming context for the domain name ``user-profile`` under ``@acme``."""
    return create_context_from_name("user-profile", scope="@acme")


@pytest.fixture
def fragments():
    """Fresh registry with the built-in fragments, safe to extend."""
    return create_fragment_registry()


@pytest.fixture
def compact_config():
    """No file header and no section banners."""
    return load_config("compact")


@pytest.fixture
def compiler(fragments):
    return TemplateCompiler(fragments=fragments)


@pytest.fixture
def compact_compiler(fragments, compact_config):
    return TemplateCompiler(fragments=fragments, config=compact_config)


@pytest.fixture
def env(fragments):
    """Emit environment for calling emitters directly."""
    return EmitEnvironment(template_id="test/emitters", fragments=fragments)


@pytest.fixture
def raw_definition():
    """Factory for definition dicts with one raw section per value."""

    def make(*values, template_id="test/raw", **extra):
        definition = {
            "id": template_id,
            "meta": {"title": "Test"},
            "sections": [{"content": {"type": "raw", "value": value}} for value in values],
        }
        definition.update(extra)
        return definition

    return make
