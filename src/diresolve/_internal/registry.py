from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from diresolve._internal.definitions import Definition, FactoryDefinition, ServiceDefinition
from diresolve._internal.type_checks import is_runtime_class, is_subclass_safe
from diresolve.exceptions import DIResolveInvalidDefinitionError, DIResolveMissingServiceError

DefinitionT = TypeVar("DefinitionT", bound=Definition)


@dataclass(frozen=True, slots=True)
class ServiceCandidate:
    """Identify a registered service matching a type-directed lookup."""

    name: str
    type: Any


class ServiceRegistry(Protocol):
    """Read-only lookup of service definitions by name and by type."""

    def find_by_type(self, dependency_type: Any) -> list[ServiceCandidate]:
        """Return autowired services assignable to a type, in registration order.

        Args:
            dependency_type: Class or interface the services must satisfy.

        """
        ...

    def get_definition(self, name: str) -> Definition:
        """Return the definition registered under a name.

        Args:
            name: Service name to look up.

        """
        ...

    def has_definition(self, name: str) -> bool:
        """Return true when a service with the name is registered.

        Args:
            name: Service name to look up.

        """
        ...

    def names(self) -> list[str]:
        """Return all registered service names in registration order."""
        ...


class DefinitionRegistry:
    """Store service definitions by name in registration order.

    Type lookups consider only autowired definitions whose type is already
    known, so the resolver resolves every definition type before completing
    any of them.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, Definition] = {}

    def add_definition(self, name: str, definition: DefinitionT) -> DefinitionT:
        """Register a definition under a unique name.

        Args:
            name: Service name; must not be registered yet.
            definition: Definition to register; its ``name`` is set to ``name``.

        """
        if not name:
            msg = "Service name must be a non-empty string."
            raise DIResolveInvalidDefinitionError(msg)
        if name in self._definitions:
            msg = f"Service '{name}' has already been added."
            raise DIResolveInvalidDefinitionError(msg)

        definition.name = name
        self._definitions[name] = definition
        return definition

    def add_service(self, name: str, service_type: Any = None) -> ServiceDefinition:
        """Register a new service definition.

        Args:
            name: Service name; must not be registered yet.
            service_type: Optional type of the service.

        """
        return self.add_definition(name, ServiceDefinition(type=service_type))

    def add_factory(self, name: str, interface: Any = None) -> FactoryDefinition:
        """Register a new factory definition.

        Args:
            name: Service name; must not be registered yet.
            interface: Optional factory interface implemented by the service.

        """
        definition = FactoryDefinition(name=name)
        if interface is not None:
            definition.set_implement(interface)
        return self.add_definition(name, definition)

    def remove_definition(self, name: str) -> None:
        """Remove the definition registered under a name.

        Args:
            name: Service name to remove.

        """
        if name not in self._definitions:
            msg = f"Service '{name}' not found."
            raise DIResolveMissingServiceError(msg)
        del self._definitions[name]

    def get_definition(self, name: str) -> Definition:
        """Return the definition registered under a name.

        Args:
            name: Service name to look up.

        """
        try:
            return self._definitions[name]
        except KeyError:
            msg = f"Service '{name}' not found."
            raise DIResolveMissingServiceError(msg) from None

    def has_definition(self, name: str) -> bool:
        """Return true when a service with the name is registered.

        Args:
            name: Service name to look up.

        """
        return name in self._definitions

    def names(self) -> list[str]:
        """Return all registered service names in registration order."""
        return list(self._definitions)

    def definitions(self) -> dict[str, Definition]:
        """Return a copy of the name to definition mapping."""
        return dict(self._definitions)

    def find_by_type(self, dependency_type: Any) -> list[ServiceCandidate]:
        """Return autowired services assignable to a type, in registration order.

        Args:
            dependency_type: Class or interface the services must satisfy.

        """
        return [
            ServiceCandidate(name=name, type=definition.type)
            for name, definition in self._definitions.items()
            if definition.autowired
            and is_runtime_class(definition.type)
            and (
                definition.type is dependency_type
                or is_subclass_safe(definition.type, dependency_type)
            )
        ]

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions


__all__ = ["DefinitionRegistry", "ServiceCandidate", "ServiceRegistry"]
