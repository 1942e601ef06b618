"""Shared pytest fixtures for diresolve tests."""

import pytest

from diresolve import ArgumentResolver, DefinitionRegistry, ReflectionInspector, Resolver


@pytest.fixture()
def registry() -> DefinitionRegistry:
    """Empty definition registry."""
    return DefinitionRegistry()


@pytest.fixture()
def inspector() -> ReflectionInspector:
    """Runtime reflection inspector."""
    return ReflectionInspector()


@pytest.fixture()
def resolver(registry: DefinitionRegistry) -> Resolver:
    """Resolver over the shared registry with the default ambiguity policy."""
    return Resolver(registry)


@pytest.fixture()
def argument_resolver(registry: DefinitionRegistry) -> ArgumentResolver:
    """Argument resolver over the shared registry."""
    return ArgumentResolver(registry)
