from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

from diresolve._internal.autowiring import ArgumentList, ArgumentResolver
from diresolve._internal.definitions import (
    THIS_CONTAINER,
    THIS_SERVICE,
    Definition,
    Reference,
    Statement,
    container_method_name,
)
from diresolve._internal.policies import AmbiguityPolicy
from diresolve._internal.registry import ServiceRegistry
from diresolve._internal.signatures import (
    ParameterSpec,
    ReflectionInspector,
    SignatureInspector,
    TypeUniverse,
    format_type,
    format_types,
)
from diresolve.exceptions import (
    DIResolveCircularReferenceError,
    DIResolveServiceCreationError,
    DIResolveServiceNotFoundError,
    DIResolveUnusedArgumentsError,
)

logger = logging.getLogger(__name__)

_CONTEXT_PREFIX_RE = re.compile(r"Service '[^']*'( \(type of [^)]*\))?: ")


class Resolver:
    """Drive the two build phases over the definitions of a registry.

    ``resolve_all`` determines the type of every definition, so type-directed
    lookups see every service. ``complete_all`` then autowires the arguments of
    every factory statement and setup call. Errors raised for a named
    definition are prefixed with the service name and type.

    Examples:
        .. code-block:: python

            registry = DefinitionRegistry()
            registry.add_service("mailer", Mailer)
            registry.add_service("newsletter", Newsletter)

            Resolver(registry).build()

    """

    def __init__(
        self,
        registry: ServiceRegistry,
        *,
        inspector: SignatureInspector | None = None,
        types: TypeUniverse | None = None,
        ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.ERROR,
    ) -> None:
        reflection = ReflectionInspector()
        self.registry = registry
        self.inspector: SignatureInspector = inspector or reflection
        self.types: TypeUniverse = types or reflection
        self._arguments = ArgumentResolver(
            registry,
            types=self.types,
            ambiguity_policy=ambiguity_policy,
        )
        self._resolving: list[Definition] = []
        self._current: Definition | None = None

    def resolve_all(self) -> None:
        """Resolve the type of every registered definition."""
        names = self.registry.names()
        for name in names:
            self.resolve_definition(self.registry.get_definition(name))
        logger.info("Resolved types of %d service definitions", len(names))

    def complete_all(self) -> None:
        """Complete every registered definition."""
        names = self.registry.names()
        for name in names:
            self.complete_definition(self.registry.get_definition(name))
        logger.info("Completed %d service definitions", len(names))

    def build(self) -> None:
        """Run type resolution and then completion over the whole registry."""
        self.resolve_all()
        self.complete_all()

    def resolve_definition(self, definition: Definition) -> None:
        """Resolve the type of a definition.

        Args:
            definition: Definition whose type is resolved.

        """
        if any(item is definition for item in self._resolving):
            names = [item.name for item in self._resolving if item.name is not None]
            msg = f"Circular reference detected for services: {', '.join(names)}."
            raise DIResolveCircularReferenceError(msg)

        self._resolving.append(definition)
        try:
            definition.resolve_type(self)
            if definition.type is None:
                msg = "Type of service is unknown."
                raise DIResolveServiceCreationError(msg)
        except DIResolveCircularReferenceError:
            raise
        except DIResolveServiceCreationError as error:
            contextual = _with_context(error, definition)
            if contextual is error:
                raise
            raise contextual from error
        finally:
            self._resolving.pop()

    def try_resolve_definition(
        self,
        definition: Definition,
    ) -> DIResolveServiceCreationError | None:
        """Resolve the type of a definition, returning the failure instead of raising it.

        Args:
            definition: Definition whose type is resolved.

        """
        try:
            self.resolve_definition(definition)
        except DIResolveServiceCreationError as error:
            return error
        return None

    def complete_definition(self, definition: Definition) -> None:
        """Complete a definition, resolving its type first when it is unknown.

        Args:
            definition: Definition to complete.

        """
        if definition.type is None:
            self.resolve_definition(definition)

        previous = self._current
        if definition.name is not None or previous is None:
            self._current = definition
        try:
            definition.complete(self)
        except DIResolveServiceCreationError as error:
            contextual = _with_context(error, definition)
            if contextual is error:
                raise
            raise contextual from error
        finally:
            self._current = previous

    def resolve_entity_type(self, statement: Statement) -> Any:
        """Return the type a statement produces, or ``None`` when it is undeclared.

        Args:
            statement: Statement whose entity is inspected.

        """
        entity = statement.entity
        if isinstance(entity, Reference):
            return self._reference_type(entity)

        if isinstance(entity, tuple):
            service, method_name = entity
            if isinstance(service, Reference) and service.value == THIS_CONTAINER:
                service_name = self._service_for_method(method_name)
                if service_name is None:
                    return None
                return self._reference_type(Reference(service_name))

            owner = self._method_owner(service, target=None)
            method = None if owner is None else self.inspector.find_method(owner, method_name)
            if method is None:
                raise _missing_method(owner, method_name)
            return self._declared_type(method.return_types, method.label)

        if isinstance(entity, str):
            msg = f"Class '{entity}' not found."
            raise DIResolveServiceNotFoundError(msg)

        if inspect.isclass(entity):
            if not self.types.is_instantiable(entity):
                msg = f"Class {format_type(entity)} is abstract."
                raise DIResolveServiceCreationError(msg)
            return entity

        if callable(entity):
            return self._declared_type(
                self.inspector.return_types(entity),
                self.inspector.describe(entity),
            )

        msg = f"Entity {entity!r} is not callable."
        raise DIResolveServiceCreationError(msg)

    def complete_statement(
        self,
        statement: Statement,
        *,
        target: Definition | None = None,
    ) -> Statement:
        """Return a statement whose arguments are fully autowired.

        Args:
            statement: Statement to complete.
            target: Definition whose service receives setup calls on ``Reference("self")``.

        """
        entity = statement.entity
        arguments = statement.arguments

        if isinstance(entity, Reference):
            if arguments:
                msg = (
                    f"Parameters were passed to reference '{entity.value}', although "
                    "references cannot have any parameters."
                )
                raise DIResolveServiceCreationError(msg)
            self._reference_type(entity)
            return Statement((Reference.container(), container_method_name(entity.value)))

        if isinstance(entity, tuple):
            service, method_name = entity
            if isinstance(service, Reference) and service.value == THIS_CONTAINER:
                if arguments and self._service_for_method(method_name) is not None:
                    msg = f"Unable to pass specified arguments to {method_name}()."
                    raise DIResolveUnusedArgumentsError(msg)
                completed = dict(arguments)
            else:
                owner = self._method_owner(service, target=target)
                method = None if owner is None else self.inspector.find_method(owner, method_name)
                if method is None:
                    raise _missing_method(owner, method_name)
                completed = self.autowire_arguments(
                    method.parameters,
                    arguments,
                    label=method.label,
                ).as_mapping()

        elif inspect.isclass(entity):
            self.resolve_entity_type(statement)
            completed = self.autowire_arguments(
                self.inspector.constructor_parameters(entity),
                arguments,
                label=self.inspector.describe(entity),
            ).as_mapping()

        elif callable(entity):
            completed = self.autowire_arguments(
                self.inspector.callable_parameters(entity),
                arguments,
                label=self.inspector.describe(entity),
            ).as_mapping()

        else:
            self.resolve_entity_type(statement)
            msg = f"Entity {entity!r} is not callable."
            raise DIResolveServiceCreationError(msg)

        self._check_references(completed.values())
        return Statement(entity, completed)

    def autowire_arguments(
        self,
        parameters: Sequence[ParameterSpec],
        arguments: Mapping[int | str, Any] | Sequence[Any],
        *,
        label: str,
    ) -> ArgumentList:
        """Autowire the arguments of a callable, never binding the service being completed.

        Args:
            parameters: Declared parameters of the callable.
            arguments: Explicit arguments keyed by position or name.
            label: Description of the callable used in error messages.

        """
        excluded = self._current.name if self._current is not None else None
        return self._arguments.resolve(parameters, arguments, label=label, excluded=excluded)

    def _reference_type(self, reference: Reference) -> Any:
        if reference.value == THIS_SERVICE:
            return self._current.type if self._current is not None else None
        if reference.value == THIS_CONTAINER:
            return None
        if not self.registry.has_definition(reference.value):
            msg = f"Reference to missing service '{reference.value}'."
            raise DIResolveServiceNotFoundError(msg)

        definition = self.registry.get_definition(reference.value)
        if definition.type is None:
            self.resolve_definition(definition)
        return definition.type

    def _method_owner(self, service: Any, *, target: Definition | None) -> Any:
        if isinstance(service, Reference):
            if service.value == THIS_SERVICE and target is not None:
                return target.type
            return self._reference_type(service)
        if inspect.isclass(service):
            return service
        return None

    def _service_for_method(self, method_name: str) -> str | None:
        return next(
            (
                name
                for name in self.registry.names()
                if container_method_name(name) == method_name
            ),
            None,
        )

    def _declared_type(self, return_types: tuple[Any, ...], label: str) -> Any:
        if not return_types:
            return None
        if len(return_types) != 1 or not self.types.is_loadable(return_types[0]):
            msg = (
                f"Class or interface '{format_types(return_types)}' not found. "
                f"Check the return type of {label}."
            )
            raise DIResolveServiceNotFoundError(msg)
        return return_types[0]

    def _check_references(self, values: Any) -> None:
        for value in values:
            if isinstance(value, tuple):
                self._check_references(value)
            elif (
                isinstance(value, Reference)
                and not value.is_special
                and not self.registry.has_definition(value.value)
            ):
                msg = f"Reference to missing service '{value.value}'."
                raise DIResolveServiceNotFoundError(msg)


def _missing_method(owner: Any, method_name: str) -> DIResolveServiceCreationError:
    if owner is None:
        msg = f"Method {method_name}() does not exist."
    else:
        msg = f"Method {format_type(owner)}.{method_name}() does not exist."
    return DIResolveServiceCreationError(msg)


def _with_context(
    error: DIResolveServiceCreationError,
    definition: Definition,
) -> DIResolveServiceCreationError:
    message = str(error)
    if definition.name is None or _CONTEXT_PREFIX_RE.match(message):
        return error

    context = f"Service '{definition.name}'"
    if definition.type is not None:
        context += f" (type of {format_type(definition.type)})"
    return type(error)(f"{context}: {message}")


__all__ = ["Resolver"]
