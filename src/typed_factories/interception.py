"""Call-time handling of factory methods.

A factory contract has no hand-written implementation. At registration time
:func:`make_factory_adapter` generates a subclass of the contract whose methods
forward every call, as an :class:`Invocation`, to a :class:`FactoryInvocationHandler`.
The handler turns the call into a request to the resolver, passing the method's
arguments to the concrete type's constructor by parameter name.
"""

from typing import Any, Callable, Optional

from typed_factories.container import Resolver
from typed_factories.domain import FactoryMethod, Invocation, Registration, ReturnKind
from typed_factories.errors import FactoryNotSupportedError, IncompatibleReturnTypeError

__all__ = ["FactoryInvocationHandler", "make_factory_adapter"]


class FactoryInvocationHandler:
    """Constructs the concrete type for calls made against a factory adapter.

    The handler holds no mutable state, so one instance may serve concurrent calls
    from any number of adapters.
    """

    def __init__(self, resolver: Resolver, concrete_type: type):
        self._resolver = resolver
        self._concrete_type = concrete_type

    @property
    def concrete_type(self) -> type:
        return self._concrete_type

    def handle(self, invocation: Invocation, return_kind: Optional[ReturnKind]) -> Any:
        """Resolve the result of one factory call.

        Args:
            invocation: The invoked method and its arguments in declared order.
            return_kind: The kind bound to the method at registration time, or
                None if the method was not bound to the concrete type.

        Returns:
            A new instance of the concrete type, built by the resolver.

        Raises:
            IncompatibleReturnTypeError: If the method was not bound to the
                concrete type.
            FactoryNotSupportedError: If the method returns a sequence.
        """
        if return_kind is ReturnKind.SINGLE:
            return self._resolve_object(invocation)
        if return_kind is ReturnKind.SEQUENCE:
            return self._resolve_sequence(invocation)

        raise IncompatibleReturnTypeError(
            f"{invocation.method.name}: the concrete type "
            f"{self._concrete_type.__qualname__} does not implement the factory "
            f"method return type {invocation.method.return_type}"
        )

    def _resolve_object(self, invocation: Invocation) -> Any:
        if invocation.arguments:
            return self._resolver.resolve_new(
                self._concrete_type, _named_arguments(invocation)
            )
        return self._resolver.resolve_new(self._concrete_type)

    def _resolve_sequence(self, invocation: Invocation) -> Any:
        raise FactoryNotSupportedError(
            f"{invocation.method.name}: resolving a sequence of "
            f"{self._concrete_type.__qualname__} is not supported"
        )


def make_factory_adapter(
    registration: Registration, handler: FactoryInvocationHandler
) -> type:
    """Generate a class implementing a factory contract by forwarding to ``handler``.

    The generated class derives from the contract, so its instances pass
    ``isinstance`` checks against it. Each public method of the contract is
    replaced by one that binds its call arguments against the declared signature,
    applying defaults, and hands the resulting :class:`Invocation` to the handler
    together with the return kind fixed by ``registration``.

    Args:
        registration: The validated registration.
        handler: The handler that constructs the concrete type.

    Returns:
        The adapter class; its constructor takes no arguments.

    Example:
        >>> adapter_class = make_factory_adapter(registration, handler)
        >>> factory = adapter_class()
        >>> factory.create(number=7)  # handler.handle(Invocation(create, (7,)), SINGLE)
    """
    contract_type = registration.contract.contract_type
    namespace: dict[str, Any] = {
        "__module__": contract_type.__module__,
        "__qualname__": f"{contract_type.__qualname__}Adapter",
        "__init__": _adapter_init(handler),
        "__repr__": _adapter_repr(registration),
    }
    for method in registration.contract.methods:
        binding = registration.binding_for(method.name)
        namespace[method.name] = _forwarding_method(
            contract_type, method, binding.return_kind if binding else None
        )

    # The contract's metaclass recomputes abstract methods for the new class.
    return type(contract_type)(
        f"{contract_type.__name__}Adapter", (contract_type,), namespace
    )


def _named_arguments(invocation: Invocation) -> dict[str, Any]:
    return {
        parameter.name: value
        for parameter, value in zip(invocation.method.parameters, invocation.arguments)
    }


def _adapter_init(handler: FactoryInvocationHandler) -> Callable:
    def __init__(self):
        self._handler = handler

    return __init__


def _adapter_repr(registration: Registration) -> Callable:
    def __repr__(self):
        return (
            f"<{registration.contract.name} adapter for "
            f"{registration.concrete_type.__qualname__}>"
        )

    return __repr__


def _forwarding_method(
    contract_type: type, method: FactoryMethod, return_kind: Optional[ReturnKind]
) -> Callable:
    def forward(self, *args, **kwargs):
        bound = method.signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return self._handler.handle(
            Invocation(method, tuple(bound.arguments.values())), return_kind
        )

    forward.__name__ = method.name
    forward.__qualname__ = f"{contract_type.__qualname__}Adapter.{method.name}"
    forward.__signature__ = method.signature
    return forward
