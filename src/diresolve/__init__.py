from diresolve._internal.autowiring import ArgumentList, ArgumentResolver
from diresolve._internal.definitions import (
    Definition,
    FactoryDefinition,
    FactoryParameter,
    ParameterReference,
    Reference,
    ServiceDefinition,
    Statement,
    container_method_name,
)
from diresolve._internal.markers import All, Named
from diresolve._internal.policies import AmbiguityPolicy
from diresolve._internal.registry import DefinitionRegistry, ServiceCandidate, ServiceRegistry
from diresolve._internal.resolver import Resolver
from diresolve._internal.signatures import (
    MethodSpec,
    ParameterKind,
    ParameterSpec,
    ReflectionInspector,
    SignatureInspector,
    TypeUniverse,
)
from diresolve._internal.suggestions import get_suggestion
from diresolve.exceptions import (
    DIResolveAmbiguousServiceError,
    DIResolveCircularReferenceError,
    DIResolveClassNotFoundError,
    DIResolveDuplicateArgumentError,
    DIResolveError,
    DIResolveInvalidDefinitionError,
    DIResolveInvalidInterfaceError,
    DIResolveMissingReturnTypeError,
    DIResolveMissingServiceError,
    DIResolveMissingTypeError,
    DIResolveMissingValueError,
    DIResolveServiceCreationError,
    DIResolveServiceNotFoundError,
    DIResolveTypeMismatchError,
    DIResolveUnresolvableReturnTypeError,
    DIResolveUnusedArgumentsError,
    DIResolveUnusedParameterError,
)

__all__ = [
    "All",
    "AmbiguityPolicy",
    "ArgumentList",
    "ArgumentResolver",
    "DIResolveAmbiguousServiceError",
    "DIResolveCircularReferenceError",
    "DIResolveClassNotFoundError",
    "DIResolveDuplicateArgumentError",
    "DIResolveError",
    "DIResolveInvalidDefinitionError",
    "DIResolveInvalidInterfaceError",
    "DIResolveMissingReturnTypeError",
    "DIResolveMissingServiceError",
    "DIResolveMissingTypeError",
    "DIResolveMissingValueError",
    "DIResolveServiceCreationError",
    "DIResolveServiceNotFoundError",
    "DIResolveTypeMismatchError",
    "DIResolveUnresolvableReturnTypeError",
    "DIResolveUnusedArgumentsError",
    "DIResolveUnusedParameterError",
    "Definition",
    "DefinitionRegistry",
    "FactoryDefinition",
    "FactoryParameter",
    "MethodSpec",
    "Named",
    "ParameterKind",
    "ParameterReference",
    "ParameterSpec",
    "Reference",
    "ReflectionInspector",
    "Resolver",
    "ServiceCandidate",
    "ServiceDefinition",
    "ServiceRegistry",
    "SignatureInspector",
    "Statement",
    "TypeUniverse",
    "container_method_name",
    "get_suggestion",
]
