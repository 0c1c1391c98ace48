"""Convention-based registration of typed factories.

Concrete classes declare the factory contract that should construct them with a
class decorator, which records the pair in a :class:`FactoryMarkers` table::

    @instantiate_with_factory(WidgetFactory)
    class Widget:
        def __init__(self, size: int): ...

    register_factories_for(container, [Widget, Gadget]).commit()

Registering a module registers every marked class declared in it.
"""

import inspect
import logging
from types import ModuleType
from typing import Callable, Iterable, Optional, Union

from typed_factories.container import Resolver
from typed_factories.domain import Registration
from typed_factories.errors import MissingFactoryMarkerError
from typed_factories.registration import register_factory

__all__ = [
    "FactoryMarkers",
    "ConventionRegistration",
    "default_markers",
    "instantiate_with_factory",
    "register_factories_for",
]

logger = logging.getLogger(__name__)


class FactoryMarkers:
    """Table of concrete classes and the factory contracts that construct them."""

    def __init__(self):
        self._contracts: dict[type, type] = {}

    def mark(self, concrete_type: type, contract_type: type):
        """Record that ``concrete_type`` is constructed through ``contract_type``.

        Args:
            concrete_type: The class to construct.
            contract_type: The factory contract constructing it.
        """
        self._contracts[concrete_type] = contract_type

    def instantiate_with(self, contract_type: type) -> Callable:
        """Decorator marking a class as constructed through ``contract_type``.

        Example:
            @markers.instantiate_with(WidgetFactory)
            class Widget:
                pass
        """

        def decorator(target: type) -> type:
            self.mark(target, contract_type)
            return target

        return decorator

    def contract_for(self, concrete_type: type) -> Optional[type]:
        """The contract marked on ``concrete_type``; base classes are not consulted."""
        return self._contracts.get(concrete_type)

    def marked_types(self, module: Union[ModuleType, str, None] = None) -> list[type]:
        """List marked classes in marking order.

        Args:
            module: If given, only classes declared in this module (or module name)
                are returned.
        """
        if module is None:
            return list(self._contracts)

        module_name = module if isinstance(module, str) else module.__name__
        return [t for t in self._contracts if t.__module__ == module_name]


default_markers = FactoryMarkers()


def instantiate_with_factory(contract_type: type) -> Callable:
    """Mark a class in the default table as constructed through ``contract_type``."""
    return default_markers.instantiate_with(contract_type)


class ConventionRegistration:
    """Pending registration of a set of marked classes with their factories.

    Registration is all-or-nothing: if any candidate is unmarked or fails
    validation, nothing is registered.
    """

    def __init__(
        self,
        resolver: Resolver,
        candidates: Iterable[type],
        markers: FactoryMarkers,
    ):
        self._resolver = resolver
        self._candidates = list(candidates)
        self._markers = markers
        self._exceptions: set[type] = set()

    def excluding(self, *types: type) -> "ConventionRegistration":
        """Leave the given classes out of the registration."""
        self._exceptions.update(types)
        return self

    def commit(self) -> list[Registration]:
        """Register a factory for every remaining candidate.

        Returns:
            The registrations, in candidate order.

        Raises:
            MissingFactoryMarkerError: If any remaining candidate is unmarked; the
                error lists every such candidate.
            TypeCannotBeCreatedByFactoryError: If a candidate cannot be returned
                by its marked contract.
            FactorySignatureMismatchError: If a candidate's constructor does not
                match its marked contract.
        """
        selected = [t for t in self._candidates if t not in self._exceptions]

        unmarked = [t for t in selected if self._markers.contract_for(t) is None]
        if unmarked:
            raise MissingFactoryMarkerError(unmarked)

        pending = [
            (register_factory(self._resolver, self._markers.contract_for(t)), t)
            for t in selected
        ]
        validated = [(p, p.validate(concrete_type)) for p, concrete_type in pending]

        registrations = [p.register(registration) for p, registration in validated]
        logger.debug("Registered %d factories by convention", len(registrations))
        return registrations


def register_factories_for(
    resolver: Resolver,
    types: Union[Iterable[type], ModuleType],
    markers: FactoryMarkers = default_markers,
) -> ConventionRegistration:
    """Start a convention-based registration.

    Args:
        resolver: The resolver to register factories with.
        types: Candidate classes, or a module whose marked classes are candidates.
        markers: The marker table to read contracts from.

    Returns:
        A :class:`ConventionRegistration`; call ``commit()`` to register.
    """
    if inspect.ismodule(types):
        candidates = markers.marked_types(types)
    else:
        candidates = list(types)

    return ConventionRegistration(resolver, candidates, markers)
