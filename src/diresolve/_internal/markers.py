from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, get_args, get_origin

T = TypeVar("T")


class Named(NamedTuple):
    """Select a registered service by name when autowiring a parameter.

    Attach ``Named`` metadata to ``typing.Annotated`` to bind the parameter to
    the service with that name instead of the only service of the type.

    Examples:
        .. code-block:: python

            from typing import Annotated, TypeAlias


            class Database: ...


            ReplicaDb: TypeAlias = Annotated[Database, Named("db.replica")]

    """

    value: str


class AllMarker(NamedTuple):
    """Marker for collecting every service registered for a base type."""

    dependency_key: Any


if TYPE_CHECKING:
    All = tuple[T, ...]
    """Autowire all services registered for a base type.

    ``All[T]`` type-checks as ``tuple[T, ...]`` and binds a tuple of service
    references, empty when no services match.
    """

else:

    class All:
        """Autowire all services registered for a base type.

        At runtime ``All[T]`` resolves to ``Annotated[T, AllMarker(dependency_key=T)]``
        and binds a tuple of references to every autowired service assignable
        to ``T``, in registration order.
        """

        def __class_getitem__(cls, item: Any) -> Any:
            base_key = item
            if get_origin(item) is Annotated:
                base_key = get_args(item)[0]
            return Annotated[base_key, AllMarker(dependency_key=base_key)]


def find_all_marker(qualifiers: tuple[Any, ...]) -> AllMarker | None:
    """Return the ``All[...]`` marker among parameter qualifiers, if any.

    Args:
        qualifiers: ``Annotated`` metadata collected for a parameter.

    """
    return next((item for item in qualifiers if isinstance(item, AllMarker)), None)


def find_named(qualifiers: tuple[Any, ...]) -> Named | None:
    """Return the ``Named(...)`` qualifier among parameter qualifiers, if any.

    Args:
        qualifiers: ``Annotated`` metadata collected for a parameter.

    """
    return next((item for item in qualifiers if isinstance(item, Named)), None)
