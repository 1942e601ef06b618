from __future__ import annotations

import copy
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, cast

from diresolve._internal.signatures import (
    MethodSpec,
    ParameterKind,
    ParameterSpec,
    ReflectionInspector,
    SignatureInspector,
    TypeUniverse,
    format_type,
    format_types,
)
from diresolve._internal.suggestions import get_suggestion
from diresolve.exceptions import (
    DIResolveInvalidInterfaceError,
    DIResolveMissingReturnTypeError,
    DIResolveMissingTypeError,
    DIResolveServiceCreationError,
    DIResolveTypeMismatchError,
    DIResolveUnresolvableReturnTypeError,
    DIResolveUnusedParameterError,
)

if TYPE_CHECKING:
    from typing_extensions import Self

    from diresolve._internal.resolver import Resolver

logger = logging.getLogger(__name__)

THIS_CONTAINER = "container"
THIS_SERVICE = "self"


@dataclass(frozen=True, slots=True)
class Reference:
    """Point at another service definition by name.

    The special names ``"container"`` and ``"self"`` denote the owning
    container and the service under construction.
    """

    value: str

    @classmethod
    def container(cls) -> Reference:
        """Return the reference to the owning container."""
        return cls(THIS_CONTAINER)

    @classmethod
    def this(cls) -> Reference:
        """Return the reference to the service under construction."""
        return cls(THIS_SERVICE)

    @property
    def is_special(self) -> bool:
        return self.value in {THIS_CONTAINER, THIS_SERVICE}


@dataclass(frozen=True, slots=True)
class ParameterReference:
    """Point at a parameter of the generated factory method."""

    name: str


@dataclass(slots=True)
class Statement:
    """Describe a call that produces a value.

    ``entity`` is a class, a callable, a ``Reference`` to another service, or
    a ``(Reference, method_name)`` pair calling a method on a service or on
    the container. ``arguments`` maps positions and parameter names to values.
    """

    entity: Any
    arguments: dict[int | str, Any] = field(default_factory=dict)


def container_method_name(service_name: str) -> str:
    """Return the container method that creates a service.

    Args:
        service_name: Name of the service definition.

    """
    return "create_service__" + service_name.replace(".", "__")


@dataclass(kw_only=True)
class Definition(ABC):
    """Describe a service the container can provide.

    ``type`` is the type other services autowire against. Subclasses resolve
    it in ``resolve_type`` and finish their construction plan in ``complete``.
    """

    name: str | None = None
    type: Any = None
    autowired: bool = True

    @abstractmethod
    def resolve_type(self, resolver: Resolver) -> None:
        """Determine the service type.

        Args:
            resolver: Resolver driving the current build.

        """

    @abstractmethod
    def complete(self, resolver: Resolver) -> None:
        """Finish the construction plan, autowiring every missing argument.

        Args:
            resolver: Resolver driving the current build.

        """

    def clone(self) -> Self:
        """Return an independent copy of the definition."""
        return copy.copy(self)


@dataclass(kw_only=True)
class ServiceDefinition(Definition):
    """Describe a service built by a factory statement followed by setup calls."""

    factory: Statement | None = None
    setup: list[Statement] = field(default_factory=list)

    def set_factory(self, entity: Any, arguments: dict[int | str, Any] | None = None) -> Self:
        """Set the statement that creates the service.

        Args:
            entity: Class, callable, or reference creating the service.
            arguments: Explicit arguments keyed by position or parameter name.

        """
        self.factory = Statement(entity, dict(arguments or {}))
        return self

    def add_setup(self, entity: Any, arguments: dict[int | str, Any] | None = None) -> Self:
        """Append a call made on the created service.

        Args:
            entity: Method name on the service, or a statement entity.
            arguments: Explicit arguments keyed by position or parameter name.

        """
        if isinstance(entity, str):
            entity = (Reference.this(), entity)
        self.setup.append(Statement(entity, dict(arguments or {})))
        return self

    def resolve_type(self, resolver: Resolver) -> None:
        """Determine the service type from its factory or its factory from the type.

        Args:
            resolver: Resolver driving the current build.

        """
        if self.factory is None:
            if self.type is None:
                msg = "Factory and type are missing in definition of service."
                raise DIResolveServiceCreationError(msg)
            self.factory = Statement(self.type)
        elif self.type is None:
            entity_type = resolver.resolve_entity_type(self.factory)
            if entity_type is None:
                msg = "Unknown service type, specify it or declare return type of factory."
                raise DIResolveServiceCreationError(msg)
            self.type = entity_type

    def complete(self, resolver: Resolver) -> None:
        """Autowire the factory statement and every setup call.

        Args:
            resolver: Resolver driving the current build.

        """
        if self.factory is None:
            self.resolve_type(resolver)
        self.factory = resolver.complete_statement(cast("Statement", self.factory))
        self.setup = [resolver.complete_statement(call, target=self) for call in self.setup]

    def __copy__(self) -> Self:
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.factory = copy.deepcopy(self.factory)
        clone.setup = copy.deepcopy(self.setup)
        return clone


@dataclass(frozen=True, slots=True)
class FactoryParameter:
    """Describe one parameter of a generated factory method."""

    name: str
    types: tuple[Any, ...] = ()
    allows_null: bool = False
    has_default: bool = False
    default: Any = None
    kind: ParameterKind = ParameterKind.POSITIONAL_OR_KEYWORD

    @classmethod
    def from_parameter(cls, parameter: ParameterSpec) -> FactoryParameter:
        """Build a factory parameter mirroring an interface method parameter.

        Args:
            parameter: Parameter declared on the interface method.

        """
        return cls(
            name=parameter.name,
            types=parameter.types,
            allows_null=parameter.allows_null,
            has_default=parameter.has_default,
            default=parameter.default,
            kind=parameter.kind,
        )

    @property
    def is_optional(self) -> bool:
        return self.has_default

    @property
    def signature(self) -> str:
        rendered = self.name
        if self.types:
            rendered += ": " + format_types(self.types, allows_null=self.allows_null)
        if self.has_default:
            rendered += f" = {self.default!r}"
        return rendered


@dataclass(kw_only=True)
class FactoryDefinition(Definition):
    """Describe a service implementing a factory interface.

    The interface declares a single ``create`` method. The generated
    implementation builds ``result_definition`` each time ``create`` is
    called; ``create`` parameters are forwarded to the same-named constructor
    parameters of the produced class.

    Examples:
        .. code-block:: python

            class ArticleFactory(Protocol):
                def create(self, title: str) -> Article: ...


            definition = FactoryDefinition().set_implement(ArticleFactory)

    """

    CREATE_METHOD: ClassVar[str] = "create"

    type: Any = field(default=None, init=False)
    parameters: list[FactoryParameter] = field(default_factory=list)
    result_definition: ServiceDefinition = field(default_factory=ServiceDefinition)

    def set_implement(
        self,
        interface: Any,
        *,
        inspector: SignatureInspector | None = None,
        types: TypeUniverse | None = None,
    ) -> Self:
        """Declare the factory interface to implement.

        Args:
            interface: Abstract class or protocol with a single ``create`` method.
            inspector: Reflection capability, runtime reflection by default.
            types: Type queries, runtime reflection by default.

        """
        reflection = ReflectionInspector()
        inspector = inspector or reflection
        types = types or reflection

        if not types.is_interface(interface):
            msg = f"Service '{self.name}': Interface '{format_type(interface)}' not found."
            raise DIResolveInvalidInterfaceError(msg)

        methods = inspector.interface_methods(interface)
        if (
            len(methods) != 1
            or methods[0].is_static
            or methods[0].name != self.CREATE_METHOD
        ):
            msg = (
                f"Service '{self.name}': Interface {format_type(interface)} must have "
                f"just one non-static method {self.CREATE_METHOD}()."
            )
            raise DIResolveInvalidInterfaceError(msg)

        self.type = interface
        return self

    @property
    def implement(self) -> Any:
        return self.type

    @property
    def result_type(self) -> Any:
        return self.result_definition.type

    def set_result_definition(self, definition: ServiceDefinition) -> Self:
        """Replace the definition of the produced service.

        Args:
            definition: Definition of the object ``create`` returns.

        """
        self.result_definition = definition
        return self

    def set_parameters(self, parameters: list[FactoryParameter]) -> Self:
        """Set the parameters of the generated ``create`` method explicitly.

        Args:
            parameters: Parameters to use instead of reconciling them from the interface.

        """
        self.parameters = list(parameters)
        return self

    def resolve_type(self, resolver: Resolver) -> None:
        """Resolve the produced type, inferring it from ``create`` when it is not declared.

        Args:
            resolver: Resolver driving the current build.

        """
        result = self.result_definition
        if resolver.try_resolve_definition(result) is None:
            return

        if result.type is None:
            interface = self.type
            if interface is None:
                msg = "Type is missing in definition of service."
                raise DIResolveMissingTypeError(msg)

            method = self._create_method(resolver.inspector)
            if not method.return_types:
                msg = f"Method {method.label} has no return type hint."
                raise DIResolveMissingReturnTypeError(msg)

            return_type = method.return_types[0]
            if len(method.return_types) != 1 or not resolver.types.is_loadable(return_type):
                msg = (
                    f"Return type '{format_types(method.return_types)}' of {method.label} "
                    "cannot be found."
                )
                raise DIResolveUnresolvableReturnTypeError(msg)

            logger.debug(
                "Inferred result type %s from %s",
                format_type(return_type),
                method.label,
            )
            result.type = return_type

        resolver.resolve_definition(result)

    def complete(self, resolver: Resolver) -> None:
        """Reconcile ``create`` parameters with the constructor and complete the result.

        Args:
            resolver: Resolver driving the current build.

        """
        result = self.result_definition
        if result.factory is None:
            self.resolve_type(resolver)

        if not self.parameters:
            self._complete_parameters(resolver)

        factory = cast("Statement", result.factory)
        entity = factory.entity
        if isinstance(entity, Reference) and not factory.arguments:
            result.factory = Statement(
                (Reference.container(), container_method_name(entity.value)),
            )

        resolver.complete_definition(result)

    def _complete_parameters(self, resolver: Resolver) -> None:
        method = self._create_method(resolver.inspector)
        result = self.result_definition
        factory = cast("Statement", result.factory)

        target, target_parameters = self._creation_parameters(factory, resolver)
        constructor_parameters = {parameter.name: parameter for parameter in target_parameters}

        arguments = dict(factory.arguments)
        parameters: list[FactoryParameter] = []
        for parameter in method.parameters:
            constructor_parameter = constructor_parameters.get(parameter.name)
            if constructor_parameter is not None:
                if not _types_compatible(parameter, constructor_parameter, resolver.types):
                    msg = (
                        f"Type hint for parameter '{parameter.name}' in {method.label} "
                        f"doesn't match type hint in {target}."
                    )
                    raise DIResolveTypeMismatchError(msg)
                slot: int | str = (
                    constructor_parameter.position
                    if constructor_parameter.kind.is_positional
                    else constructor_parameter.name
                )
                arguments[slot] = ParameterReference(constructor_parameter.name)

            elif not result.setup:
                hint = get_suggestion(constructor_parameters, parameter.name)
                msg = f"Unused parameter '{parameter.name}' when implementing method {method.label}"
                msg += f", did you mean '{hint}'?" if hint else "."
                raise DIResolveUnusedParameterError(msg)

            parameters.append(FactoryParameter.from_parameter(parameter))

        result.factory = Statement(factory.entity, arguments)
        self.parameters = parameters

    def _creation_parameters(
        self,
        factory: Statement,
        resolver: Resolver,
    ) -> tuple[str, tuple[ParameterSpec, ...]]:
        entity = factory.entity
        if callable(entity) and not inspect.isclass(entity):
            return resolver.inspector.describe(entity), resolver.inspector.callable_parameters(
                entity,
            )

        product = resolver.resolve_entity_type(factory)
        if product is None:
            return "the factory", ()
        return (
            f"{format_type(product)} constructor",
            resolver.inspector.constructor_parameters(product),
        )

    def _create_method(self, inspector: SignatureInspector) -> MethodSpec:
        method = inspector.find_method(self.type, self.CREATE_METHOD)
        if method is None:
            msg = (
                f"Service '{self.name}': Interface {format_type(self.type)} must have "
                f"just one non-static method {self.CREATE_METHOD}()."
            )
            raise DIResolveInvalidInterfaceError(msg)
        return method

    def __copy__(self) -> Self:
        clone = self.__class__.__new__(self.__class__)
        clone.__dict__.update(self.__dict__)
        clone.parameters = list(self.parameters)
        clone.result_definition = copy.deepcopy(self.result_definition)
        return clone


def _types_compatible(
    method_parameter: ParameterSpec,
    constructor_parameter: ParameterSpec,
    types: TypeUniverse,
) -> bool:
    if method_parameter.types == constructor_parameter.types:
        return True
    if not method_parameter.types or not constructor_parameter.types:
        return False
    method_type = method_parameter.types[0]
    constructor_type = constructor_parameter.types[0]
    return types.is_assignable(method_type, constructor_type) or types.is_assignable(
        constructor_type,
        method_type,
    )


__all__ = [
    "THIS_CONTAINER",
    "THIS_SERVICE",
    "Definition",
    "FactoryDefinition",
    "FactoryParameter",
    "ParameterReference",
    "Reference",
    "ServiceDefinition",
    "Statement",
    "container_method_name",
]
