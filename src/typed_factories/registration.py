"""Fluent registration of typed factories with a resolver.

Example:
    >>> container = Container()
    >>> register_factory(container, WidgetFactory).for_concrete_type(Widget)
    >>> factory = container.resolve(WidgetFactory)
    >>> factory.create(size=3)  # a new Widget(size=3)
"""

import inspect
import logging
from typing import Any, Optional

from typed_factories.container import Resolver
from typed_factories.domain import Registration
from typed_factories.errors import (
    FactoryNotSupportedError,
    InvalidFactoryContractError,
    InvalidFactoryOperationError,
)
from typed_factories.interception import FactoryInvocationHandler, make_factory_adapter
from typed_factories.introspection import (
    describe_contract,
    is_interface_shaped,
    produced_type,
)
from typed_factories.validation import FactoryContractValidator

__all__ = ["PendingRegistration", "register_factory", "register_typed_factory"]

logger = logging.getLogger(__name__)


class PendingRegistration:
    """Second step of a factory registration, choosing the type to construct.

    Nothing is registered with the resolver until the concrete type has been
    validated against the contract.
    """

    def __init__(
        self,
        resolver: Resolver,
        contract_type: type,
        name: Optional[str] = None,
        validator: Optional[FactoryContractValidator] = None,
    ):
        self._resolver = resolver
        self._contract_type = contract_type
        self._name = name
        self._validator = validator or FactoryContractValidator()

    @property
    def contract_type(self) -> type:
        return self._contract_type

    @property
    def name(self) -> Optional[str]:
        return self._name

    def for_concrete_type(self, concrete_type: type) -> Registration:
        """Register the factory as constructing ``concrete_type``.

        The concrete type is registered with the resolver as constructible, then an
        adapter implementing the contract is registered as its implementation,
        under the registration name if one was given.

        Args:
            concrete_type: The class the factory methods construct.

        Returns:
            The validated registration.

        Raises:
            InvalidFactoryContractError: If ``concrete_type`` is missing, not a
                class, or abstract.
            TypeCannotBeCreatedByFactoryError: If no contract method can return
                ``concrete_type``.
            FactorySignatureMismatchError: If a contract method's parameters match
                no constructor of ``concrete_type``.
        """
        return self.register(self.validate(concrete_type))

    def validate(self, concrete_type: type) -> Registration:
        """Validate ``concrete_type`` against the contract without registering anything."""
        if not inspect.isclass(concrete_type):
            raise InvalidFactoryContractError(
                f"Expected a concrete class to construct, got {concrete_type!r}"
            )
        if is_interface_shaped(concrete_type):
            raise InvalidFactoryContractError(
                f"{concrete_type.__qualname__} is abstract and cannot be constructed"
            )

        return self._validator.validate(self._contract_type, concrete_type, self._name)

    def register(self, registration: Registration) -> Registration:
        """Register a registration obtained from :meth:`validate` with the resolver."""
        concrete_type = registration.concrete_type
        adapter_class = make_factory_adapter(
            registration, FactoryInvocationHandler(self._resolver, concrete_type)
        )

        self._resolver.register_constructible(concrete_type)
        self._resolver.register_as(self._contract_type, adapter_class, self._name)

        logger.debug(
            "Registered factory %s for %s%s",
            registration.contract.name,
            concrete_type.__qualname__,
            f" under name '{self._name}'" if self._name is not None else "",
        )
        return registration

    def returning_concrete_type(self) -> Registration:
        """Register the factory for the concrete type its methods already return.

        Sequence return types count as their element type. All methods must agree
        on a single type.

        Returns:
            The validated registration, as returned by :meth:`for_concrete_type`.

        Raises:
            InvalidFactoryOperationError: If the contract has no methods, or the
                type its methods return is abstract.
            FactoryNotSupportedError: If the methods return more than one type.
        """
        contract = describe_contract(self._contract_type)
        if not contract.methods:
            raise InvalidFactoryOperationError(
                f"The factory {contract.name} does not declare any method"
            )

        produced = []
        for method in contract.methods:
            candidate = produced_type(method.return_type)
            if candidate not in produced:
                produced.append(candidate)

        if len(produced) > 1:
            raise FactoryNotSupportedError(
                f"The factory {contract.name} returns more than one type: {produced}"
            )

        concrete_type = produced[0]
        if not inspect.isclass(concrete_type) or is_interface_shaped(concrete_type):
            raise InvalidFactoryOperationError(
                f"The factory {contract.name} does not return a concrete type "
                f"({concrete_type}); use for_concrete_type instead"
            )

        return self.for_concrete_type(concrete_type)


def register_factory(
    resolver: Resolver, contract_type: type, name: Optional[str] = None
) -> PendingRegistration:
    """Start registering a typed factory.

    Args:
        resolver: The resolver that will construct objects and serve the factory.
        contract_type: The factory contract, a Protocol or abstract class.
        name: Optional name the factory will be resolved under.

    Returns:
        A :class:`PendingRegistration` to choose the constructed type with.

    Raises:
        InvalidFactoryContractError: If ``contract_type`` is missing, is not a
            Protocol or abstract class, or has abstract members other than
            public methods.
    """
    if contract_type is None:
        raise InvalidFactoryContractError("The factory contract must not be None")
    if not is_interface_shaped(contract_type):
        raise InvalidFactoryContractError(
            f"The factory contract {contract_type!r} does not represent an interface"
        )

    # The generated adapter only implements public methods.
    captured = {method.name for method in describe_contract(contract_type).methods}
    uncovered = sorted(getattr(contract_type, "__abstractmethods__", set()) - captured)
    if uncovered:
        raise InvalidFactoryContractError(
            f"The factory contract {contract_type.__qualname__} declares abstract "
            f"members that are not factory methods: {uncovered}"
        )

    return PendingRegistration(resolver, contract_type, name)


def register_typed_factory(
    resolver: Resolver,
    contract_type: type,
    concrete_type: type,
    name: Optional[str] = None,
) -> Any:
    """Register a typed factory for a concrete type in a single call.

    Returns:
        The resolver, to continue registering with.
    """
    register_factory(resolver, contract_type, name).for_concrete_type(concrete_type)
    return resolver
