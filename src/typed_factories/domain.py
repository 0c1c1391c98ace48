"""Domain models used throughout the library."""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

__all__ = [
    "Parameter",
    "FactoryMethod",
    "FactoryContract",
    "ConstructorParameter",
    "ConstructorSignature",
    "ReturnKind",
    "Binding",
    "Registration",
    "Invocation",
]


@dataclass(frozen=True)
class Parameter:
    """A parameter of a factory method.

    Attributes:
        name: The parameter name in the method signature.
        declared_type: The annotated type, or None if the parameter is unannotated.
    """

    name: str
    declared_type: Optional[Any]


@dataclass(frozen=True)
class FactoryMethod:
    """A public method of a factory contract.

    Attributes:
        name: The method name.
        parameters: The method's parameters in declaration order, excluding ``self``.
        return_type: The annotated return type, or None if unannotated.
        signature: The method signature without ``self``, used to bind call arguments.
    """

    name: str
    parameters: tuple[Parameter, ...]
    return_type: Optional[Any]
    signature: inspect.Signature


@dataclass(frozen=True)
class FactoryContract:
    """An interface-shaped class whose methods stand in for constructors.

    Attributes:
        contract_type: The Protocol or abstract class describing the factory.
        methods: The contract's public methods, base classes first.
    """

    contract_type: type
    methods: tuple[FactoryMethod, ...]

    @property
    def name(self) -> str:
        return self.contract_type.__qualname__


@dataclass(frozen=True)
class ConstructorParameter:
    """A parameter of a concrete type's constructor.

    Attributes:
        name: The parameter name in the constructor signature.
        declared_type: The annotated type with any ``Annotated`` metadata removed.
        qualifier: Registration name taken from ``Annotated[T, "name"]``, if any.
        required: False if the parameter declares a default value.
    """

    name: str
    declared_type: Optional[Any]
    qualifier: Optional[str] = None
    required: bool = True


@dataclass(frozen=True)
class ConstructorSignature:
    """The parameters of one constructor of a concrete type."""

    owner: type
    parameters: tuple[ConstructorParameter, ...]

    def parameter(self, name: str) -> Optional[ConstructorParameter]:
        return next((p for p in self.parameters if p.name == name), None)


class ReturnKind(Enum):
    """How a factory method's return type relates to the concrete type."""

    SINGLE = "single"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class Binding:
    """The result of matching one factory method against one constructor.

    Attributes:
        method: The factory method.
        constructor: The first constructor found able to satisfy the method.
        parameter_names: Constructor parameter name for each method parameter, by position.
        return_kind: Whether the method returns one instance or a sequence of them.
    """

    method: FactoryMethod
    constructor: ConstructorSignature
    parameter_names: tuple[str, ...]
    return_kind: ReturnKind


@dataclass(frozen=True)
class Registration:
    """A validated association between a factory contract and a concrete type.

    Attributes:
        contract: The captured factory contract.
        concrete_type: The type constructed in response to factory calls.
        name: Optional qualifier under which the contract is registered.
        bindings: One binding per method able to produce the concrete type.
    """

    contract: FactoryContract
    concrete_type: type
    name: Optional[str]
    bindings: tuple[Binding, ...]

    def binding_for(self, method_name: str) -> Optional[Binding]:
        return next((b for b in self.bindings if b.method.name == method_name), None)


@dataclass(frozen=True)
class Invocation:
    """A single call made against a factory adapter.

    Attributes:
        method: The invoked factory method.
        arguments: Argument values in the method's declared parameter order.
    """

    method: FactoryMethod
    arguments: tuple[Any, ...]
