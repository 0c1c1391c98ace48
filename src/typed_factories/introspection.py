"""Introspection of factory contracts and concrete-type constructors.

Factory contracts are captured from ``typing.Protocol`` classes or abstract base
classes; constructor signatures are read from the callable that constructs a
class. Both rely on standard type hints, with ``Annotated[T, "name"]`` on a
constructor parameter naming the registration its dependency should be resolved
from.
"""

import abc
import collections.abc
import inspect
from typing import (
    Annotated,
    Any,
    Callable,
    Generic,
    Optional,
    Protocol,
    get_args,
    get_origin,
    get_type_hints,
)

from typed_factories.domain import (
    ConstructorParameter,
    ConstructorSignature,
    FactoryContract,
    FactoryMethod,
    Parameter,
    ReturnKind,
)
from typed_factories.errors import InvalidFactoryContractError

__all__ = [
    "is_interface_shaped",
    "describe_contract",
    "constructor_signatures",
    "is_assignable",
    "sequence_element_type",
    "produced_type",
    "return_kind",
]

_IGNORED_BASES = (object, Protocol, Generic, abc.ABC)

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Collection,
    collections.abc.Iterable,
)

_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def is_interface_shaped(target: Any) -> bool:
    """Check whether ``target`` can serve as a factory contract or abstraction.

    Args:
        target: Any object.

    Returns:
        True if ``target`` is a Protocol class or a class with abstract methods.

    Example:
        >>> class WidgetFactory(Protocol):
        ...     def create(self) -> Widget: ...
        >>> is_interface_shaped(WidgetFactory)  # True
        >>> is_interface_shaped(Widget)         # False
    """
    return inspect.isclass(target) and (
        _is_protocol(target) or inspect.isabstract(target)
    )


def describe_contract(contract_type: type) -> FactoryContract:
    """Capture the public methods of a factory contract.

    Methods are collected from the contract and its bases, base classes first;
    a method overridden in a subclass keeps the position of its first declaration.
    Names with a leading underscore are not part of the contract.

    Args:
        contract_type: The Protocol or abstract class to capture.

    Returns:
        An immutable :class:`FactoryContract`.

    Raises:
        InvalidFactoryContractError: If a method declares ``*args`` or ``**kwargs``.
    """
    functions: dict[str, Callable] = {}
    for klass in reversed(contract_type.__mro__):
        if klass in _IGNORED_BASES:
            continue
        for name, member in vars(klass).items():
            if not name.startswith("_") and inspect.isfunction(member):
                functions[name] = member

    return FactoryContract(
        contract_type,
        tuple(_make_factory_method(name, func) for name, func in functions.items()),
    )


def constructor_signatures(concrete_type: type) -> list[ConstructorSignature]:
    """List the constructor signatures of a concrete type.

    A Python class has a single constructor, so the result holds one signature.
    Names and types both come from the callable Python invokes to construct the
    class, which is ``__init__`` unless ``__new__`` or a metaclass ``__call__``
    takes its place. Variadic parameters are left out: they are never matched by
    name.

    Args:
        concrete_type: The class to inspect.

    Returns:
        The class's constructor signatures in declaration order.
    """
    signature = inspect.signature(concrete_type, eval_str=True)

    return [
        ConstructorSignature(
            concrete_type,
            tuple(
                _make_constructor_parameter(param)
                for param in signature.parameters.values()
                if param.kind not in _VARIADIC
            ),
        )
    ]


def is_assignable(target: Any, concrete_type: type) -> bool:
    """Check whether instances of ``concrete_type`` can be returned as ``target``.

    Protocol targets are satisfied either by explicit inheritance or by the
    concrete type providing every public method the protocol declares. Only
    methods are checked: a protocol declaring nothing but data members is
    satisfied by any class. Parameterized generics such as ``list[T]`` are never
    assignable; see :func:`return_kind` for sequences.

    Args:
        target: A declared return type.
        concrete_type: The class that would be constructed.

    Returns:
        True if ``concrete_type`` satisfies ``target``.
    """
    if target is concrete_type:
        return True
    if get_origin(target) is not None or not inspect.isclass(target):
        return False
    if _is_protocol(target):
        return target in concrete_type.__mro__ or all(
            callable(getattr(concrete_type, name, None))
            for name in _declared_method_names(target)
        )
    return issubclass(concrete_type, target)


def sequence_element_type(annotation: Any) -> Optional[Any]:
    """Extract the element type of a homogeneous sequence annotation.

    Example:
        >>> sequence_element_type(list[Widget])           # Widget
        >>> sequence_element_type(tuple[Widget, ...])     # Widget
        >>> sequence_element_type(tuple[Widget, Gadget])  # None
        >>> sequence_element_type(Widget)                 # None
    """
    origin = get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return None

    args = get_args(annotation)
    if origin is tuple:
        return args[0] if len(args) == 2 and args[1] is Ellipsis else None
    return args[0] if len(args) == 1 else None


def produced_type(return_type: Any) -> Any:
    """The type a factory method produces, looking through sequence wrappers."""
    element = sequence_element_type(return_type)
    return return_type if element is None else element


def return_kind(return_type: Any, concrete_type: type) -> Optional[ReturnKind]:
    """Classify a factory method's return type against a concrete type.

    Returns:
        ``SINGLE`` if the return type is assignable from the concrete type,
        ``SEQUENCE`` if it is a sequence of such a type, None otherwise.
    """
    if return_type is None:
        return None
    if is_assignable(return_type, concrete_type):
        return ReturnKind.SINGLE

    element = sequence_element_type(return_type)
    if element is not None and is_assignable(element, concrete_type):
        return ReturnKind.SEQUENCE
    return None


def _is_protocol(target: type) -> bool:
    return bool(getattr(target, "_is_protocol", False))


def _declared_method_names(target: type) -> set[str]:
    return {
        name
        for klass in target.__mro__
        if klass not in _IGNORED_BASES
        for name, member in vars(klass).items()
        if not name.startswith("_") and inspect.isfunction(member)
    }


def _make_factory_method(name: str, func: Callable) -> FactoryMethod:
    signature = inspect.signature(func)
    parameters = list(signature.parameters.values())[1:]

    variadic = [param.name for param in parameters if param.kind in _VARIADIC]
    if variadic:
        raise InvalidFactoryContractError(
            f"Factory method {func.__qualname__} declares variadic parameters {variadic}"
        )

    hints = get_type_hints(func)
    return FactoryMethod(
        name,
        tuple(Parameter(param.name, hints.get(param.name)) for param in parameters),
        hints.get("return"),
        signature.replace(parameters=parameters),
    )


def _make_constructor_parameter(param: inspect.Parameter) -> ConstructorParameter:
    required = param.default is inspect.Parameter.empty
    annotation = None if param.annotation is inspect.Parameter.empty else param.annotation

    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        qualifier = next((m for m in metadata if isinstance(m, str)), None)
        return ConstructorParameter(param.name, base_type, qualifier, required)
    else:
        return ConstructorParameter(param.name, annotation, None, required)
