"""
The resolver capability required by typed factories, and a minimal implementation of it.

Typed factories never construct objects themselves: they ask a resolver to build the
concrete type, passing factory arguments as named overrides, and rely on it to supply
every other constructor dependency. Any object implementing :class:`Resolver` can be
used, such as an adapter over an existing container.

:class:`Container` is a small in-process resolver. It resolves constructor parameters
from their type hints, honouring ``Annotated[T, "name"]`` qualifiers, and constructs a
new object on every request. It does not manage lifetimes or detect cycles.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Protocol

from typed_factories.errors import ResolutionError
from typed_factories.introspection import constructor_signatures

__all__ = ["Resolver", "Container"]

logger = logging.getLogger(__name__)

RegistrationKey = tuple[Any, Optional[str]]


class Resolver(Protocol):
    """Object construction and registration, as required by typed factories."""

    def resolve_new(
        self, target: type, overrides: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """Construct a new instance of ``target``.

        Constructor parameters named in ``overrides`` take the given values; the
        rest are resolved normally.
        """
        ...

    def resolve(self, contract: Any, name: Optional[str] = None) -> Any:
        """Resolve the implementation registered for ``contract``."""
        ...

    def register_constructible(self, target: type) -> None:
        """Register ``target`` as constructible. Registering twice has no further effect."""
        ...

    def register_as(
        self,
        contract: Any,
        factory: Callable[[], Any],
        name: Optional[str] = None,
    ) -> None:
        """Register ``factory`` as the implementation of ``contract``, optionally under ``name``."""
        ...


class Container:
    """A minimal :class:`Resolver` building objects from their constructor type hints.

    Example:
        >>> container = Container()
        >>> container.register_type(SqlDatabase, as_=Database)
        >>> container.register_type(UserService)
        >>> service = container.resolve(UserService)  # receives a new SqlDatabase
    """

    def __init__(self):
        self._constructible: set[type] = set()
        self._factories: dict[RegistrationKey, Callable[[], Any]] = {}

    def register_constructible(self, target: type) -> None:
        if target not in self._constructible:
            self._constructible.add(target)
            logger.debug("Registered constructible type %s", target.__qualname__)

    def register_as(
        self,
        contract: Any,
        factory: Callable[[], Any],
        name: Optional[str] = None,
    ) -> None:
        self._factories[(contract, name)] = factory
        logger.debug("Registered implementation of %s under name %r", contract, name)

    def register_type(
        self, concrete: type, as_: Any = None, name: Optional[str] = None
    ) -> None:
        """Register a class as constructible and as the implementation of ``as_``.

        Args:
            concrete: The class to construct.
            as_: The abstraction to resolve it as; defaults to the class itself.
            name: Optional registration name.
        """
        self.register_constructible(concrete)
        self.register_as(
            concrete if as_ is None else as_,
            lambda: self.resolve_new(concrete),
            name,
        )

    def register_instance(
        self, contract: Any, instance: Any, name: Optional[str] = None
    ) -> None:
        """Register an existing object, returned for every resolution of ``contract``."""
        self.register_as(contract, lambda: instance, name)

    def is_registered(self, contract: Any, name: Optional[str] = None) -> bool:
        return (contract, name) in self._factories or (
            name is None and contract in self._constructible
        )

    def resolve(self, contract: Any, name: Optional[str] = None) -> Any:
        """Resolve the implementation registered for ``contract``.

        Raises:
            ResolutionError: If nothing is registered for ``contract`` and ``name``.
        """
        factory = self._factories.get((contract, name))
        if factory is not None:
            return factory()
        if name is None and contract in self._constructible:
            return self.resolve_new(contract)

        raise ResolutionError(
            f"No registration for {contract}"
            + (f" with name '{name}'" if name is not None else "")
        )

    def resolve_new(
        self, target: type, overrides: Optional[Mapping[str, Any]] = None
    ) -> Any:
        """Construct a new instance of a constructible type.

        Each constructor parameter takes its override if one is given, is otherwise
        resolved from its declared type and qualifier, and otherwise falls back to
        its default. Overrides naming no constructor parameter are ignored.

        Raises:
            ResolutionError: If ``target`` is not registered as constructible or a
                required parameter cannot be resolved.
        """
        if target not in self._constructible:
            raise ResolutionError(f"{target} is not registered as constructible")

        overrides = overrides or {}
        signature = constructor_signatures(target)[0]
        call_kwargs = {}
        for parameter in signature.parameters:
            if parameter.name in overrides:
                call_kwargs[parameter.name] = overrides[parameter.name]
            elif parameter.declared_type is not None and self.is_registered(
                parameter.declared_type, parameter.qualifier
            ):
                call_kwargs[parameter.name] = self.resolve(
                    parameter.declared_type, parameter.qualifier
                )
            elif parameter.required:
                raise ResolutionError(
                    f"Cannot resolve parameter <{parameter.name}> of "
                    f"{target.__qualname__}: no registration for "
                    f"{parameter.declared_type}"
                    + (
                        f" with name '{parameter.qualifier}'"
                        if parameter.qualifier is not None
                        else ""
                    )
                )

        return target(**call_kwargs)
