from __future__ import annotations

import inspect
import sys
import types
from collections.abc import Callable
from dataclasses import dataclass, is_dataclass
from enum import Enum
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Protocol,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

from diresolve._internal.type_checks import (
    is_builtin_class,
    is_interface_class,
    is_runtime_class,
    is_subclass_safe,
)
from diresolve.exceptions import DIResolveServiceCreationError

_NONE_TYPE = type(None)
_EMPTY = inspect.Parameter.empty
_SKIPPED_INTERFACE_MODULES = frozenset({"builtins", "typing", "typing_extensions", "abc"})


class ParameterKind(Enum):
    """Describe how an argument binds to a parameter."""

    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"

    @classmethod
    def from_inspect(cls, kind: Any) -> ParameterKind:
        """Convert an ``inspect.Parameter`` kind.

        Args:
            kind: ``inspect.Parameter.kind`` value to convert.

        """
        return cls[kind.name]

    @property
    def is_positional(self) -> bool:
        return self in {ParameterKind.POSITIONAL_ONLY, ParameterKind.POSITIONAL_OR_KEYWORD}

    @property
    def is_variadic(self) -> bool:
        return self in {ParameterKind.VAR_POSITIONAL, ParameterKind.VAR_KEYWORD}


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """Describe one declared parameter of a callable.

    ``types`` holds the declared types without ``None``; a union contributes
    several entries and a forward reference that cannot be evaluated stays a
    ``str``. ``allows_null`` is true when ``None`` is part of the annotation.
    ``qualifiers`` keeps ``typing.Annotated`` metadata such as ``Named(...)``.
    """

    name: str
    position: int
    types: tuple[Any, ...] = ()
    allows_null: bool = False
    has_default: bool = False
    default: Any = None
    kind: ParameterKind = ParameterKind.POSITIONAL_OR_KEYWORD
    qualifiers: tuple[Any, ...] = ()

    @property
    def is_variadic(self) -> bool:
        return self.kind.is_variadic


@dataclass(frozen=True, slots=True)
class MethodSpec:
    """Describe a method declared on a class or interface."""

    name: str
    label: str
    parameters: tuple[ParameterSpec, ...]
    return_types: tuple[Any, ...]
    is_static: bool = False


class SignatureInspector(Protocol):
    """Read-only access to declared parameters and return types of callables."""

    def callable_parameters(self, function: Callable[..., Any]) -> tuple[ParameterSpec, ...]:
        """Return the ordered parameters of a function.

        Args:
            function: Function or other callable to inspect.

        """
        ...

    def constructor_parameters(self, cls: type[Any]) -> tuple[ParameterSpec, ...]:
        """Return the constructor parameters of a class, empty without a constructor.

        Args:
            cls: Class whose constructor is inspected.

        """
        ...

    def find_method(self, owner: type[Any], name: str) -> MethodSpec | None:
        """Return a method declared on or inherited by a class.

        Args:
            owner: Class that declares the method.
            name: Method name to look up.

        """
        ...

    def interface_methods(self, interface: type[Any]) -> tuple[MethodSpec, ...]:
        """Return the public methods an interface declares.

        Args:
            interface: Abstract class or protocol to inspect.

        """
        ...

    def return_types(self, function: Callable[..., Any]) -> tuple[Any, ...]:
        """Return the declared return types of a callable, empty when unannotated.

        Args:
            function: Function or other callable to inspect.

        """
        ...

    def describe(self, function: Callable[..., Any]) -> str:
        """Return the label used for a callable in error messages.

        Args:
            function: Function, method, or class to describe.

        """
        ...


class TypeUniverse(Protocol):
    """Read-only queries about the types known to the running program."""

    def is_loadable(self, annotation: Any) -> bool:
        """Return true when the annotation names an existing class or interface.

        Args:
            annotation: Declared type to check.

        """
        ...

    def is_builtin(self, annotation: Any) -> bool:
        """Return true when the annotation is a primitive that is never autowired.

        Args:
            annotation: Declared type to check.

        """
        ...

    def is_interface(self, annotation: Any) -> bool:
        """Return true when the annotation is an abstract class or protocol.

        Args:
            annotation: Declared type to check.

        """
        ...

    def is_instantiable(self, annotation: Any) -> bool:
        """Return true when the annotation is a concrete class.

        Args:
            annotation: Declared type to check.

        """
        ...

    def is_assignable(self, source: Any, target: Any) -> bool:
        """Return true when values of ``source`` can be used where ``target`` is expected.

        Args:
            source: Type of the provided value.
            target: Type the value must satisfy.

        """
        ...


def format_type(annotation: Any) -> str:
    """Render a declared type for messages and generated signatures.

    Args:
        annotation: Class, forward reference name, or typing construct.

    """
    if isinstance(annotation, str):
        return annotation
    if annotation is None or annotation is _NONE_TYPE:
        return "None"
    if is_runtime_class(annotation):
        return annotation.__qualname__
    return repr(annotation).removeprefix("typing.")


def format_types(declared_types: tuple[Any, ...], *, allows_null: bool = False) -> str:
    """Render a union of declared types, appending ``None`` for nullable ones.

    Args:
        declared_types: Declared types of a parameter.
        allows_null: Whether ``None`` is part of the declaration.

    """
    rendered = [format_type(item) for item in declared_types]
    if allows_null and rendered:
        rendered.append("None")
    return " | ".join(rendered)


class ReflectionInspector:
    """Inspect callables and types of the running program.

    Implements both ``SignatureInspector`` and ``TypeUniverse`` on top of
    ``inspect`` and ``typing.get_type_hints``. Annotations that cannot be
    evaluated are kept as their source string so that callers can report the
    unresolved name. An unresolved union keeps its members apart, so
    ``Missing | None`` is still nullable.
    """

    def callable_parameters(self, function: Callable[..., Any]) -> tuple[ParameterSpec, ...]:
        """Return the ordered parameters of a function.

        Args:
            function: Function or other callable to inspect.

        """
        if inspect.isclass(function):
            return self.constructor_parameters(function)
        return self._parameters(function, hint_sources=(function,), skip_first=False)

    def constructor_parameters(self, cls: type[Any]) -> tuple[ParameterSpec, ...]:
        """Return the constructor parameters of a class, empty without a constructor.

        Class-level annotations only type constructor parameters of dataclasses,
        where each field is a parameter. An unannotated ``__init__`` parameter of
        any other class stays untyped even when an attribute shares its name.

        Args:
            cls: Class whose constructor is inspected.

        """
        if cls.__init__ is object.__init__ and cls.__new__ is object.__new__:
            return ()
        hint_sources: tuple[Any, ...] = (cls.__init__, cls.__new__)
        if is_dataclass(cls):
            hint_sources = (*hint_sources, cls)
        return self._parameters(cls, hint_sources=hint_sources, skip_first=False)

    def find_method(self, owner: type[Any], name: str) -> MethodSpec | None:
        """Return a method declared on or inherited by a class.

        Args:
            owner: Class that declares the method.
            name: Method name to look up.

        """
        try:
            static_member = inspect.getattr_static(owner, name)
        except AttributeError:
            return None

        is_static = isinstance(static_member, staticmethod | classmethod)
        member = getattr(owner, name)
        if not callable(member):
            return None

        return MethodSpec(
            name=name,
            label=f"{owner.__qualname__}.{name}()",
            parameters=self._parameters(
                member,
                hint_sources=(member,),
                skip_first=inspect.isfunction(static_member),
            ),
            return_types=self.return_types(member),
            is_static=is_static,
        )

    def interface_methods(self, interface: type[Any]) -> tuple[MethodSpec, ...]:
        """Return the public methods an interface declares.

        Args:
            interface: Abstract class or protocol to inspect.

        """
        methods: list[MethodSpec] = []
        seen: set[str] = set()
        for klass in interface.__mro__:
            if klass.__module__ in _SKIPPED_INTERFACE_MODULES:
                continue
            for name, member in vars(klass).items():
                if name.startswith("_") or name in seen:
                    continue
                is_method = inspect.isfunction(member) or isinstance(
                    member,
                    staticmethod | classmethod,
                )
                if not is_method:
                    continue
                seen.add(name)
                method = self.find_method(interface, name)
                if method is not None:
                    methods.append(method)
        return tuple(methods)

    def return_types(self, function: Callable[..., Any]) -> tuple[Any, ...]:
        """Return the declared return types of a callable, empty when unannotated.

        Args:
            function: Function or other callable to inspect.

        """
        annotation = self._resolved_hints(function).get("return", _EMPTY)
        declared_types, _allows_null, _qualifiers = _split_annotation(annotation)
        return declared_types

    def describe(self, function: Callable[..., Any]) -> str:
        """Return the label used for a callable in error messages.

        Args:
            function: Function, method, or class to describe.

        """
        if inspect.isclass(function):
            return f"{function.__qualname__}.__init__()"
        name = getattr(function, "__qualname__", None) or repr(function)
        return f"{name}()"

    def is_loadable(self, annotation: Any) -> bool:
        """Return true when the annotation names an existing class or interface.

        Args:
            annotation: Declared type to check.

        """
        return is_runtime_class(annotation)

    def is_builtin(self, annotation: Any) -> bool:
        """Return true when the annotation is a primitive that is never autowired.

        Args:
            annotation: Declared type to check.

        """
        if isinstance(annotation, str):
            return False
        # generic aliases and special forms cannot be matched against services
        return not is_runtime_class(annotation) or is_builtin_class(annotation)

    def is_interface(self, annotation: Any) -> bool:
        """Return true when the annotation is an abstract class or protocol.

        Args:
            annotation: Declared type to check.

        """
        return is_interface_class(annotation)

    def is_instantiable(self, annotation: Any) -> bool:
        """Return true when the annotation is a concrete class.

        Args:
            annotation: Declared type to check.

        """
        return is_runtime_class(annotation) and not is_interface_class(annotation)

    def is_assignable(self, source: Any, target: Any) -> bool:
        """Return true when values of ``source`` can be used where ``target`` is expected.

        Args:
            source: Type of the provided value.
            target: Type the value must satisfy.

        """
        return source == target or is_subclass_safe(source, target)

    def _parameters(
        self,
        function: Callable[..., Any],
        *,
        hint_sources: tuple[Any, ...],
        skip_first: bool,
    ) -> tuple[ParameterSpec, ...]:
        try:
            parameters = list(inspect.signature(function).parameters.values())
        except (TypeError, ValueError) as error:
            msg = f"Unable to inspect the signature of {self.describe(function)}."
            raise DIResolveServiceCreationError(msg) from error
        if skip_first and parameters:
            parameters = parameters[1:]

        hints: dict[str, Any] = {}
        for source in hint_sources:
            for name, annotation in self._resolved_hints(source).items():
                hints.setdefault(name, annotation)

        specs: list[ParameterSpec] = []
        for position, parameter in enumerate(parameters):
            annotation = hints.get(parameter.name, parameter.annotation)
            declared_types, allows_null, qualifiers = _split_annotation(annotation)
            has_default = parameter.default is not _EMPTY
            specs.append(
                ParameterSpec(
                    name=parameter.name,
                    position=position,
                    types=declared_types,
                    allows_null=allows_null,
                    has_default=has_default,
                    default=parameter.default if has_default else None,
                    kind=ParameterKind.from_inspect(parameter.kind),
                    qualifiers=qualifiers,
                ),
            )
        return tuple(specs)

    def _resolved_hints(self, source: Any) -> dict[str, Any]:
        try:
            return get_type_hints(source, include_extras=True)
        except (AttributeError, NameError, TypeError, SyntaxError):
            pass

        # Evaluate one annotation at a time so a single unknown name keeps the rest.
        globalns = _globals_of(source)
        hints: dict[str, Any] = {}
        for name, annotation in _raw_annotations(source).items():
            if isinstance(annotation, ForwardRef):
                annotation = annotation.__forward_arg__
            if isinstance(annotation, str):
                annotation = _evaluate_annotation(annotation, globalns)
            hints[name] = annotation
        return hints


def _split_annotation(annotation: Any) -> tuple[tuple[Any, ...], bool, tuple[Any, ...]]:
    if annotation is _EMPTY or annotation is Any:
        return (), False, ()

    qualifiers: tuple[Any, ...] = ()
    if get_origin(annotation) is Annotated:
        annotation_args = get_args(annotation)
        annotation = annotation_args[0]
        qualifiers = annotation_args[1:]

    if get_origin(annotation) in {Union, types.UnionType}:
        members = get_args(annotation)
    else:
        members = (annotation,)

    declared_types: list[Any] = []
    allows_null = False
    for member in members:
        if get_origin(member) is Annotated:
            member_args = get_args(member)
            member = member_args[0]
            qualifiers = (*qualifiers, *member_args[1:])
        if isinstance(member, ForwardRef):
            member = member.__forward_arg__
        if member is None or member is _NONE_TYPE:
            allows_null = True
        elif member is not Any:
            declared_types.append(member)
    return tuple(declared_types), allows_null, qualifiers


def _raw_annotations(source: Any) -> dict[str, Any]:
    try:
        if sys.version_info >= (3, 14):
            import annotationlib

            return dict(
                annotationlib.get_annotations(source, format=annotationlib.Format.FORWARDREF),
            )
        return dict(inspect.get_annotations(source))
    except TypeError:
        return {}


def _globals_of(source: Any) -> dict[str, Any]:
    if inspect.isclass(source):
        module = sys.modules.get(source.__module__)
        return vars(module) if module is not None else {}
    return getattr(inspect.unwrap(source), "__globals__", {})


def _evaluate_annotation(annotation: str, globalns: dict[str, Any]) -> Any:
    """Evaluate a single string annotation against module globals.

    Unions that cannot be evaluated as a whole are split into members, so
    ``"Missing | None"`` becomes ``Optional["Missing"]`` and keeps its
    nullability. A member that still cannot be evaluated stays a string.

    Args:
        annotation: Annotation source string.
        globalns: Globals of the module that declares the annotation.

    """
    holder = types.SimpleNamespace(__annotations__={"value": annotation})
    try:
        return get_type_hints(holder, globalns=globalns, include_extras=True)["value"]
    except (AttributeError, NameError, SyntaxError, TypeError):
        pass

    members = _union_members(annotation.strip())
    if not members:
        return annotation
    resolved = tuple(
        None if member == "None" else _evaluate_annotation(member, globalns) for member in members
    )
    try:
        return Union[resolved]
    except (SyntaxError, TypeError):
        return annotation


def _union_members(annotation: str) -> list[str] | None:
    for prefix in ("Optional[", "typing.Optional["):
        if annotation.startswith(prefix) and annotation.endswith("]"):
            return [annotation[len(prefix) : -1].strip(), "None"]
    for prefix in ("Union[", "typing.Union["):
        if annotation.startswith(prefix) and annotation.endswith("]"):
            return _split_top_level(annotation[len(prefix) : -1], ",")

    members = _split_top_level(annotation, "|")
    return members if len(members) > 1 else None


def _split_top_level(text: str, separator: str) -> list[str]:
    members: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(text):
        if char in "[(":
            depth += 1
        elif char in "])":
            depth -= 1
        elif char == separator and depth == 0:
            members.append(text[start:index].strip())
            start = index + 1
    members.append(text[start:].strip())
    return [member for member in members if member]


__all__ = [
    "MethodSpec",
    "ParameterKind",
    "ParameterSpec",
    "ReflectionInspector",
    "SignatureInspector",
    "TypeUniverse",
    "format_type",
    "format_types",
]
