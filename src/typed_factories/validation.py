"""Registration-time validation of factory contracts against concrete types."""

from typing import Optional

from typed_factories.domain import Registration
from typed_factories.errors import (
    FactorySignatureMismatchError,
    TypeCannotBeCreatedByFactoryError,
)
from typed_factories.introspection import (
    constructor_signatures,
    describe_contract,
    return_kind,
)
from typed_factories.matching import find_binding

__all__ = ["FactoryContractValidator"]


class FactoryContractValidator:
    """Checks that a factory contract can construct a concrete type.

    Validation is pure: it inspects the contract and the concrete type and either
    returns a :class:`Registration` or raises. It runs once per registration, so a
    mismatch surfaces before any factory can be resolved.
    """

    def validate(
        self, contract_type: type, concrete_type: type, name: Optional[str] = None
    ) -> Registration:
        """Validate a contract against a concrete type.

        A method of the contract is a candidate if its return type is assignable
        from ``concrete_type`` or is a sequence of such a type. Every candidate
        must be satisfiable by at least one constructor of ``concrete_type``.

        Args:
            contract_type: The factory contract.
            concrete_type: The type the factory should construct.
            name: Optional qualifier carried into the registration.

        Returns:
            A registration binding every candidate method to a constructor.

        Raises:
            TypeCannotBeCreatedByFactoryError: If no method of the contract can
                return ``concrete_type``.
            FactorySignatureMismatchError: If some candidate method's parameters
                match no constructor of ``concrete_type``.
        """
        contract = describe_contract(contract_type)
        kinds = [
            (method, return_kind(method.return_type, concrete_type))
            for method in contract.methods
        ]
        candidates = [(method, kind) for method, kind in kinds if kind is not None]
        if not candidates:
            raise TypeCannotBeCreatedByFactoryError(
                f"The type {concrete_type.__qualname__} cannot be created by any "
                f"method of the factory {contract.name}"
            )

        constructors = constructor_signatures(concrete_type)
        bindings = []
        mismatched = []
        for method, kind in candidates:
            binding = find_binding(method, constructors, kind)
            if binding is None:
                mismatched.append(method.name)
            else:
                bindings.append(binding)

        if mismatched:
            raise FactorySignatureMismatchError(
                f"The factory {contract.name} does not match any constructor of "
                f"{concrete_type.__qualname__}: no constructor accepts the "
                f"parameters of {mismatched}"
            )

        return Registration(contract, concrete_type, name, tuple(bindings))
