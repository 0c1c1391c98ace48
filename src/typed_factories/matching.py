"""Matching of factory method parameters against constructor signatures."""

from typing import Iterable, Optional

from typed_factories.domain import (
    Binding,
    ConstructorSignature,
    FactoryMethod,
    Parameter,
    ReturnKind,
)

__all__ = ["matches", "find_binding"]


def matches(
    method_parameters: Iterable[Parameter], constructor: ConstructorSignature
) -> bool:
    """Decide whether a constructor can satisfy a call to a factory method.

    Every method parameter must have a constructor parameter of the same name and
    exactly the same type. Names are compared case-sensitively and types by
    equality, so neither subclasses nor ``bool`` for ``int`` are accepted.
    Constructor parameters not covered by the method are left to the resolver.

    Args:
        method_parameters: The factory method's parameters.
        constructor: A constructor signature of the concrete type.

    Returns:
        True if the constructor covers every method parameter.

    Example:
        >>> # create(self, number: int) against __init__(self, number: int, db: Database)
        >>> matches(create.parameters, init_signature)  # True
        >>> # create(self, number: int) against __init__(self, integer: int)
        >>> matches(create.parameters, init_signature)  # False
    """
    for parameter in method_parameters:
        candidate = constructor.parameter(parameter.name)
        if candidate is None or candidate.declared_type != parameter.declared_type:
            return False
    return True


def find_binding(
    method: FactoryMethod,
    constructors: Iterable[ConstructorSignature],
    return_kind: ReturnKind,
) -> Optional[Binding]:
    """Bind a factory method to the first constructor able to satisfy it.

    Constructors are tried in declaration order; no attempt is made to pick a best
    match among several satisfying constructors.

    Returns:
        The binding, or None if no constructor matches.
    """
    constructor = next((c for c in constructors if matches(method.parameters, c)), None)
    if constructor is None:
        return None

    return Binding(
        method,
        constructor,
        tuple(parameter.name for parameter in method.parameters),
        return_kind,
    )
