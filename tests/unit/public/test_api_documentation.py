from __future__ import annotations

import importlib
import inspect
import re
from collections.abc import Callable, Iterator
from typing import Any

import pytest

import diresolve
from diresolve import exceptions

_ARGS_ENTRY_RE = re.compile(r"^ {4}\*{0,2}([A-Za-z_]\w*)\s*(\([^)]*\))?:")

_HELPER_MODULES = (
    "diresolve._internal.markers",
    "diresolve._internal.signatures",
    "diresolve._internal.suggestions",
    "diresolve._internal.type_checks",
)


def _public_methods(cls: type[Any]) -> Iterator[tuple[str, Callable[..., Any]]]:
    for name, member in vars(cls).items():
        if name.startswith("_"):
            continue
        if isinstance(member, (staticmethod, classmethod)):
            member = member.__func__
        if inspect.isfunction(member):
            yield f"{cls.__name__}.{name}", member


def _helper_functions() -> Iterator[tuple[str, Callable[..., Any]]]:
    for module_name in _HELPER_MODULES:
        module = importlib.import_module(module_name)
        for name, member in vars(module).items():
            if (
                not name.startswith("_")
                and inspect.isfunction(member)
                and member.__module__ == module_name
            ):
                yield f"{module_name}.{name}", member


def _documented_callables() -> list[tuple[str, Callable[..., Any]]]:
    found: dict[str, Callable[..., Any]] = {}
    for export_name in diresolve.__all__:
        exported = getattr(diresolve, export_name)
        if inspect.isclass(exported):
            found.update(_public_methods(exported))
        elif inspect.isfunction(exported):
            found[export_name] = exported
    found.update(_helper_functions())
    return sorted(found.items())


def _parameter_names(function: Callable[..., Any]) -> list[str]:
    names = list(inspect.signature(function).parameters)
    if names and names[0] in {"self", "cls"}:
        names = names[1:]
    return names


def _args_section(docstring: str) -> set[str]:
    documented: set[str] = set()
    in_section = False
    for line in docstring.splitlines():
        if line == "Args:":
            in_section = True
            continue
        if not in_section or not line.strip():
            continue
        if not line.startswith(" "):
            break
        match = _ARGS_ENTRY_RE.match(line)
        if match is not None:
            documented.add(match.group(1))
    return documented


@pytest.mark.parametrize("export_name", sorted(diresolve.__all__))
def test_exported_object_is_documented(export_name: str) -> None:
    assert inspect.getdoc(getattr(diresolve, export_name))


@pytest.mark.parametrize(
    ("qualified_name", "function"),
    _documented_callables(),
    ids=[name for name, _function in _documented_callables()],
)
def test_callable_documents_every_parameter(
    qualified_name: str,
    function: Callable[..., Any],
) -> None:
    docstring = inspect.getdoc(function)
    assert docstring, f"{qualified_name} has no docstring"

    parameters = _parameter_names(function)
    if not parameters:
        return

    missing = [name for name in parameters if name not in _args_section(docstring)]
    assert not missing, f"{qualified_name} does not describe {', '.join(missing)} under Args:"


def test_capability_protocols_are_checked() -> None:
    names = {name for name, _function in _documented_callables()}

    assert "SignatureInspector.constructor_parameters" in names
    assert "TypeUniverse.is_assignable" in names
    assert "ServiceRegistry.find_by_type" in names


@pytest.mark.parametrize(
    "error_class",
    [
        member
        for member in vars(exceptions).values()
        if inspect.isclass(member) and issubclass(member, exceptions.DIResolveError)
    ],
    ids=lambda error_class: error_class.__name__,
)
def test_error_docstring_states_when_it_is_raised(error_class: type[Exception]) -> None:
    docstring = vars(error_class).get("__doc__") or ""

    assert docstring.startswith(("Signal ", "Represent "))
