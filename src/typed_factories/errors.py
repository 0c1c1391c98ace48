__all__ = [
    "TypedFactoryError",
    "InvalidFactoryContractError",
    "TypeCannotBeCreatedByFactoryError",
    "FactorySignatureMismatchError",
    "IncompatibleReturnTypeError",
    "MissingFactoryMarkerError",
    "FactoryNotSupportedError",
    "InvalidFactoryOperationError",
    "ResolutionError",
]


class TypedFactoryError(Exception):
    """Base class for errors raised while registering or invoking typed factories."""

    pass


class InvalidFactoryContractError(TypedFactoryError, ValueError):
    """Raised when a supplied type is missing or cannot be used as a factory contract."""

    pass


class TypeCannotBeCreatedByFactoryError(TypedFactoryError):
    """Raised when no method of a factory contract can return the concrete type."""

    pass


class FactorySignatureMismatchError(TypedFactoryError):
    """Raised when a factory method's parameters match no constructor of the concrete type."""

    pass


class IncompatibleReturnTypeError(TypedFactoryError, TypeError):
    """Raised when an invoked factory method was never bound to the concrete type."""

    pass


class MissingFactoryMarkerError(TypedFactoryError):
    """Raised when convention-based registration meets types with no factory marker.

    Attributes:
        types: Every offending type, in the order they were supplied.
    """

    def __init__(self, types: list[type]):
        self.types = types
        super().__init__(
            "Types not marked for instantiation with a factory: "
            f"{', '.join(t.__qualname__ for t in types)}"
        )


class FactoryNotSupportedError(TypedFactoryError, NotImplementedError):
    """Raised for factory shapes this library does not support."""

    pass


class InvalidFactoryOperationError(TypedFactoryError):
    """Raised when a registration step cannot be applied to the given contract."""

    pass


class ResolutionError(Exception):
    """Raised by :class:`~typed_factories.container.Container` when a type cannot be constructed."""

    pass
