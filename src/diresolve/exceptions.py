class DIResolveError(Exception):
    """Represent a base class for all diresolve-specific failures.

    Catch this type when you want to handle any diresolve error path without
    matching each concrete exception class individually.
    """


class DIResolveInvalidDefinitionError(DIResolveError):
    """Signal invalid use of the definition registry.

    Raised by ``DefinitionRegistry.add_definition`` when a service name is
    already taken or empty.

    Typical fix is choosing a unique service name or removing the previous
    definition first.
    """


class DIResolveMissingServiceError(DIResolveError):
    """Signal lookup of a service name that has no definition.

    Raised by ``DefinitionRegistry.get_definition`` and
    ``DefinitionRegistry.remove_definition``.
    """


class DIResolveServiceCreationError(DIResolveError):
    """Signal that the construction plan of a service cannot be determined.

    Every build-time failure of type resolution, autowiring, or factory
    reconciliation derives from this class. Messages name the offending
    parameter, the callable it belongs to, and the involved types. When the
    failure happens while resolving a named service the message is prefixed
    with ``Service '<name>' (type of <type>):``.
    """


class DIResolveMissingValueError(DIResolveServiceCreationError):
    """Signal a parameter that cannot be autowired and has no value.

    Raised when a required parameter has no annotation, a built-in annotation
    such as ``int`` or ``str``, or a union of several types, and neither an
    explicit argument nor a default value is available.

    Typical fixes include passing the value explicitly in the service
    arguments or adding a default value.
    """


class DIResolveServiceNotFoundError(DIResolveServiceCreationError):
    """Signal that no registered service matches a parameter type.

    The annotated class exists, but the registry holds no autowired service
    of that type.

    Typical fix is adding a service of the required type to the configuration.
    """


class DIResolveClassNotFoundError(DIResolveServiceNotFoundError):
    """Signal a parameter annotated with a type that cannot be resolved.

    Raised when the annotation is a forward reference to a name that does not
    exist in the callable's module.

    Typical fixes include correcting the type hint or importing the class.
    """


class DIResolveAmbiguousServiceError(DIResolveServiceCreationError):
    """Signal that several registered services match a parameter type.

    Typical fixes include passing the service explicitly, qualifying the
    parameter with ``Named(...)``, disabling autowiring of all but one
    candidate, or enabling ``AmbiguityPolicy.PREFER_PARAMETER_NAME``.
    """


class DIResolveMissingTypeError(DIResolveServiceCreationError):
    """Signal a factory definition without interface or result type."""


class DIResolveMissingReturnTypeError(DIResolveServiceCreationError):
    """Signal a factory interface whose ``create`` method has no return annotation.

    Typical fix is annotating the return type of ``create`` or setting the
    result definition type explicitly.
    """


class DIResolveUnresolvableReturnTypeError(DIResolveServiceCreationError):
    """Signal a ``create`` return annotation that does not name a class."""


class DIResolveTypeMismatchError(DIResolveServiceCreationError):
    """Signal incompatible annotations between ``create`` and the constructor.

    Raised when a parameter of the factory interface method and the
    same-named constructor parameter of the produced class have annotations
    where neither is assignable to the other.
    """


class DIResolveUnusedParameterError(DIResolveServiceCreationError):
    """Signal a ``create`` parameter that nothing consumes.

    Raised when the produced class constructor has no parameter of the same
    name and the result definition has no setup calls. The message suggests
    the closest constructor parameter name when one is similar enough.
    """


class DIResolveInvalidInterfaceError(DIResolveServiceCreationError):
    """Signal an invalid factory interface.

    Raised by ``FactoryDefinition.set_implement`` when the interface is not an
    abstract class or protocol, or does not declare exactly one non-static
    method named ``create``.
    """


class DIResolveUnusedArgumentsError(DIResolveServiceCreationError):
    """Signal explicit arguments that do not fit any parameter of the callable."""


class DIResolveDuplicateArgumentError(DIResolveServiceCreationError):
    """Signal a parameter given both a positional and a named explicit argument."""


class DIResolveCircularReferenceError(DIResolveServiceCreationError):
    """Signal service definitions whose types depend on each other in a cycle."""
