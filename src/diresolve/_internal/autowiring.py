from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from diresolve._internal.definitions import Reference
from diresolve._internal.markers import find_all_marker, find_named
from diresolve._internal.policies import AmbiguityPolicy
from diresolve._internal.registry import ServiceCandidate, ServiceRegistry
from diresolve._internal.signatures import (
    ParameterKind,
    ParameterSpec,
    ReflectionInspector,
    TypeUniverse,
    format_type,
)
from diresolve.exceptions import (
    DIResolveAmbiguousServiceError,
    DIResolveClassNotFoundError,
    DIResolveDuplicateArgumentError,
    DIResolveMissingValueError,
    DIResolveServiceCreationError,
    DIResolveServiceNotFoundError,
    DIResolveUnusedArgumentsError,
)

logger = logging.getLogger(__name__)

_USE_DEFAULT: Final[Any] = object()


@dataclass(frozen=True, slots=True)
class ArgumentList:
    """Arguments for invoking a callable, in its declared parameter order.

    Parameters left to their own default are omitted. Once a parameter is
    omitted, later parameters are passed by name.
    """

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)

    def as_mapping(self) -> dict[int | str, Any]:
        """Return the arguments keyed by position and by name, as stored in a statement."""
        mapping: dict[int | str, Any] = dict(enumerate(self.args))
        mapping.update(self.kwargs)
        return mapping


@dataclass(slots=True)
class _ExplicitArguments:
    slots: dict[int, Any]
    extra_positional: list[Any]
    extra_named: dict[str, Any]


class ArgumentResolver:
    """Complete the arguments of a callable by autowiring services by type.

    Explicit arguments always win. Every other parameter is matched against
    the registry by its declared type; parameters that cannot be matched fall
    back to their default value or to ``None`` when nullable, and fail with a
    descriptive error otherwise.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        *,
        types: TypeUniverse | None = None,
        ambiguity_policy: AmbiguityPolicy = AmbiguityPolicy.ERROR,
    ) -> None:
        self._registry = registry
        self._types = types or ReflectionInspector()
        self._ambiguity_policy = ambiguity_policy

    def resolve(
        self,
        parameters: Sequence[ParameterSpec],
        arguments: Mapping[int | str, Any] | Sequence[Any] = (),
        *,
        label: str,
        excluded: str | None = None,
    ) -> ArgumentList:
        """Return the full argument list for a callable.

        Args:
            parameters: Declared parameters of the callable, in order.
            arguments: Explicit arguments, positional or keyed by position and name.
            label: Description of the callable used in error messages.
            excluded: Service name that must not be autowired, usually the one being built.

        """
        explicit = self._normalize(parameters, arguments, label=label)

        bound: list[tuple[ParameterSpec, Any]] = []
        for index, parameter in enumerate(parameters):
            if parameter.kind is ParameterKind.VAR_POSITIONAL:
                bound.append((parameter, tuple(explicit.extra_positional)))
            elif parameter.kind is ParameterKind.VAR_KEYWORD:
                bound.append((parameter, dict(explicit.extra_named)))
            elif index in explicit.slots:
                bound.append((parameter, explicit.slots[index]))
            else:
                bound.append(
                    (parameter, self._autowire(parameter, label=label, excluded=excluded)),
                )

        return _layout(bound)

    def _normalize(
        self,
        parameters: Sequence[ParameterSpec],
        arguments: Mapping[int | str, Any] | Sequence[Any],
        *,
        label: str,
    ) -> _ExplicitArguments:
        items = arguments.items() if isinstance(arguments, Mapping) else enumerate(arguments)

        positional_count = 0
        for parameter in parameters:
            if not parameter.kind.is_positional:
                break
            positional_count += 1
        indexes_by_name = {
            parameter.name: index
            for index, parameter in enumerate(parameters)
            if not parameter.is_variadic
        }

        slots: dict[int, Any] = {}
        extra_positional: dict[int, Any] = {}
        extra_named: dict[str, Any] = {}
        for key, value in items:
            if isinstance(key, int):
                if not 0 <= key < positional_count:
                    extra_positional[key] = value
                    continue
                index = key
            else:
                found = indexes_by_name.get(key)
                if found is None:
                    extra_named[key] = value
                    continue
                index = found

            if index in slots:
                msg = (
                    f"Parameter '{parameters[index].name}' in {label} received more than "
                    "one explicit argument."
                )
                raise DIResolveDuplicateArgumentError(msg)
            slots[index] = value

        kinds = {parameter.kind for parameter in parameters}
        if (extra_positional and ParameterKind.VAR_POSITIONAL not in kinds) or (
            extra_named and ParameterKind.VAR_KEYWORD not in kinds
        ):
            msg = f"Unable to pass specified arguments to {label}."
            raise DIResolveUnusedArgumentsError(msg)

        return _ExplicitArguments(
            slots=slots,
            extra_positional=[extra_positional[key] for key in sorted(extra_positional)],
            extra_named=extra_named,
        )

    def _autowire(self, parameter: ParameterSpec, *, label: str, excluded: str | None) -> Any:
        description = f"parameter '{parameter.name}' in {label}"

        all_marker = find_all_marker(parameter.qualifiers)
        if all_marker is not None:
            candidates = self._candidates(all_marker.dependency_key, excluded=excluded)
            logger.debug(
                "Autowired %s to all services of type %s: %s",
                description,
                format_type(all_marker.dependency_key),
                [candidate.name for candidate in candidates],
            )
            return tuple(Reference(candidate.name) for candidate in candidates)

        if len(parameter.types) > 1:
            msg = (
                f"Parameter {description} has union type and no default value, "
                "so its value must be specified."
            )
            return self._fallback(parameter, DIResolveMissingValueError(msg))

        if not parameter.types or self._types.is_builtin(parameter.types[0]):
            msg = (
                f"Parameter {description} has no class type hint or default value, "
                "so its value must be specified."
            )
            return self._fallback(parameter, DIResolveMissingValueError(msg))

        dependency_type = parameter.types[0]
        named = find_named(parameter.qualifiers)
        candidates: list[ServiceCandidate] = []
        if self._types.is_loadable(dependency_type):
            candidates = self._candidates(dependency_type, excluded=excluded)
        if named is not None:
            candidates = [candidate for candidate in candidates if candidate.name == named.value]
        if len(candidates) > 1:
            candidates = self._break_tie(parameter, candidates)

        if len(candidates) == 1:
            logger.debug("Autowired %s to service '%s'", description, candidates[0].name)
            return Reference(candidates[0].name)

        rendered_type = format_type(dependency_type)
        if candidates:
            names = ", ".join(candidate.name for candidate in candidates)
            msg = (
                f"Multiple services of type {rendered_type} found: {names} "
                f"(needed by {description})."
            )
            raise DIResolveAmbiguousServiceError(msg)

        if not self._types.is_loadable(dependency_type):
            msg = (
                f"Class {rendered_type} needed by {description} not found. "
                "Check the type hint and its import."
            )
            return self._fallback(parameter, DIResolveClassNotFoundError(msg))

        service = f"Service '{named.value}'" if named is not None else "Service"
        msg = (
            f"{service} of type {rendered_type} needed by {description} not found. "
            "Did you add it to configuration?"
        )
        return self._fallback(parameter, DIResolveServiceNotFoundError(msg))

    def _fallback(self, parameter: ParameterSpec, error: DIResolveServiceCreationError) -> Any:
        if parameter.has_default:
            return _USE_DEFAULT
        if parameter.allows_null:
            return None
        raise error

    def _candidates(self, dependency_type: Any, *, excluded: str | None) -> list[ServiceCandidate]:
        return [
            candidate
            for candidate in self._registry.find_by_type(dependency_type)
            if candidate.name != excluded
        ]

    def _break_tie(
        self,
        parameter: ParameterSpec,
        candidates: list[ServiceCandidate],
    ) -> list[ServiceCandidate]:
        if self._ambiguity_policy is AmbiguityPolicy.PREFER_PARAMETER_NAME:
            preferred = [candidate for candidate in candidates if candidate.name == parameter.name]
            if len(preferred) == 1:
                return preferred
        return candidates


def _layout(bound: list[tuple[ParameterSpec, Any]]) -> ArgumentList:
    positional = [(parameter, value) for parameter, value in bound if parameter.kind.is_positional]
    var_positional: tuple[Any, ...] = next(
        (value for parameter, value in bound if parameter.kind is ParameterKind.VAR_POSITIONAL),
        (),
    )

    # Positional-only parameters and anything before *args values cannot be
    # passed by name, so skipped defaults ahead of them are written out.
    required_positional = 0
    if var_positional:
        required_positional = len(positional)
    else:
        for index, (parameter, value) in enumerate(positional):
            if parameter.kind is ParameterKind.POSITIONAL_ONLY and value is not _USE_DEFAULT:
                required_positional = index + 1

    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    use_name = False
    for index, (parameter, value) in enumerate(positional):
        if index < required_positional:
            args.append(parameter.default if value is _USE_DEFAULT else value)
        elif value is _USE_DEFAULT:
            use_name = True
        elif use_name:
            kwargs[parameter.name] = value
        else:
            args.append(value)
    args.extend(var_positional)

    for parameter, value in bound:
        if parameter.kind is ParameterKind.KEYWORD_ONLY and value is not _USE_DEFAULT:
            kwargs[parameter.name] = value
        elif parameter.kind is ParameterKind.VAR_KEYWORD:
            kwargs.update(value)

    return ArgumentList(args=tuple(args), kwargs=kwargs)


__all__ = ["ArgumentList", "ArgumentResolver"]
