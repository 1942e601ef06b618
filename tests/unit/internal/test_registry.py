from __future__ import annotations

import re
from typing import Protocol

import pytest

from diresolve import DefinitionRegistry, FactoryDefinition, ServiceCandidate, ServiceDefinition
from diresolve.exceptions import (
    DIResolveInvalidDefinitionError,
    DIResolveInvalidInterfaceError,
    DIResolveMissingServiceError,
)


class Cache:
    pass


class RedisCache(Cache):
    pass


class Clock:
    pass


class Report:
    pass


class ReportFactory(Protocol):
    def create(self) -> Report: ...


def test_add_service_registers_definition_under_its_name(registry: DefinitionRegistry) -> None:
    definition = registry.add_service("cache", Cache)

    assert isinstance(definition, ServiceDefinition)
    assert definition.name == "cache"
    assert definition.type is Cache
    assert registry.get_definition("cache") is definition
    assert "cache" in registry
    assert len(registry) == 1


def test_add_factory_declares_interface(registry: DefinitionRegistry) -> None:
    definition = registry.add_factory("reports", ReportFactory)

    assert isinstance(definition, FactoryDefinition)
    assert definition.implement is ReportFactory
    assert definition.type is ReportFactory


def test_rejected_factory_interface_leaves_registry_unchanged(
    registry: DefinitionRegistry,
) -> None:
    with pytest.raises(DIResolveInvalidInterfaceError):
        registry.add_factory("reports", Report)

    assert not registry.has_definition("reports")
    assert len(registry) == 0

    definition = registry.add_factory("reports", ReportFactory)

    assert registry.get_definition("reports") is definition


def test_duplicate_service_name_is_rejected(registry: DefinitionRegistry) -> None:
    registry.add_service("cache", Cache)

    with pytest.raises(
        DIResolveInvalidDefinitionError,
        match=re.escape("Service 'cache' has already been added."),
    ):
        registry.add_service("cache", RedisCache)


def test_empty_service_name_is_rejected(registry: DefinitionRegistry) -> None:
    with pytest.raises(DIResolveInvalidDefinitionError):
        registry.add_service("", Cache)


def test_unknown_service_name_is_reported(registry: DefinitionRegistry) -> None:
    with pytest.raises(DIResolveMissingServiceError, match=re.escape("Service 'cache' not found.")):
        registry.get_definition("cache")

    with pytest.raises(DIResolveMissingServiceError):
        registry.remove_definition("cache")


def test_remove_definition_forgets_service(registry: DefinitionRegistry) -> None:
    registry.add_service("cache", Cache)

    registry.remove_definition("cache")

    assert not registry.has_definition("cache")
    assert registry.names() == []


def test_find_by_type_returns_assignable_services_in_registration_order(
    registry: DefinitionRegistry,
) -> None:
    registry.add_service("redis", RedisCache)
    registry.add_service("clock", Clock)
    registry.add_service("memory", Cache)
    registry.add_service("hidden", Cache).autowired = False
    registry.add_service("untyped")

    assert registry.find_by_type(Cache) == [
        ServiceCandidate(name="redis", type=RedisCache),
        ServiceCandidate(name="memory", type=Cache),
    ]
    assert registry.find_by_type(RedisCache) == [ServiceCandidate(name="redis", type=RedisCache)]


def test_definitions_returns_a_copy(registry: DefinitionRegistry) -> None:
    registry.add_service("cache", Cache)

    definitions = registry.definitions()
    definitions.clear()

    assert registry.names() == ["cache"]
