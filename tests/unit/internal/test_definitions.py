from __future__ import annotations

from diresolve import (
    FactoryParameter,
    ParameterKind,
    ParameterReference,
    ParameterSpec,
    Reference,
    ServiceDefinition,
    Statement,
)


class Queue:
    def push(self, item: str) -> None:
        pass


def test_special_references() -> None:
    assert Reference.container() == Reference("container")
    assert Reference.this() == Reference("self")
    assert Reference.this().is_special
    assert not Reference("queue").is_special


def test_add_setup_with_method_name_targets_the_service() -> None:
    definition = ServiceDefinition(type=Queue).add_setup("push", {0: "first"})

    assert definition.setup == [Statement((Reference.this(), "push"), {0: "first"})]


def test_set_factory_copies_arguments() -> None:
    arguments: dict[int | str, object] = {"item": "first"}
    definition = ServiceDefinition().set_factory(Queue, arguments)
    arguments["item"] = "second"

    assert definition.factory == Statement(Queue, {"item": "first"})


def test_service_definition_clone_does_not_share_statements() -> None:
    original = ServiceDefinition(name="queue", type=Queue)
    original.set_factory(Queue, {0: ParameterReference("item")}).add_setup("push")

    clone = original.clone()
    clone.factory.arguments[0] = "changed"  # type: ignore[union-attr]
    clone.setup.append(Statement((Reference.this(), "push")))

    assert original.factory == Statement(Queue, {0: ParameterReference("item")})
    assert len(original.setup) == 1
    assert clone.name == "queue"
    assert clone.type is Queue


def test_factory_parameter_mirrors_interface_parameter() -> None:
    parameter = ParameterSpec(
        name="limit",
        position=0,
        types=(int,),
        allows_null=True,
        has_default=True,
        default=None,
        kind=ParameterKind.KEYWORD_ONLY,
    )

    factory_parameter = FactoryParameter.from_parameter(parameter)

    assert factory_parameter == FactoryParameter(
        name="limit",
        types=(int,),
        allows_null=True,
        has_default=True,
        default=None,
        kind=ParameterKind.KEYWORD_ONLY,
    )
    assert factory_parameter.signature == "limit: int | None = None"


def test_untyped_factory_parameter_signature() -> None:
    assert FactoryParameter(name="payload").signature == "payload"
