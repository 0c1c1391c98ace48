from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

import pytest

from typed_factories.container import Container
from typed_factories.errors import (
    FactoryNotSupportedError,
    FactorySignatureMismatchError,
    InvalidFactoryContractError,
    InvalidFactoryOperationError,
    ResolutionError,
    TypeCannotBeCreatedByFactoryError,
)
from typed_factories.registration import register_factory, register_typed_factory

from sample_domain import (
    AbstractDependencyServiceFactory,
    ConcreteDependencyServiceFactory,
    DefaultDependencyService,
    DefaultParameteredServiceWithDependency,
    DependencyService,
    DependencyServiceFactory,
    EmptyFactory,
    MisalignedParameteredService,
    OtherParameteredServiceWithDependencyFactory,
    ParameteredServiceFactory,
    ParameteredServiceWithDependencyFactory,
    SimpleParameteredService,
    TwoConcreteTypesFactory,
    VariadicFactory,
)


@pytest.fixture
def container():
    return Container()


def test_no_regression_in_typical_scenario(container):
    container.register_type(DefaultDependencyService, as_=DependencyService)

    assert isinstance(container.resolve(DependencyService), DefaultDependencyService)


def test_parameterless_factory(container):
    register_factory(container, DependencyServiceFactory).for_concrete_type(
        DefaultDependencyService
    )

    factory = container.resolve(DependencyServiceFactory)
    first = factory.create()
    second = factory.create()

    assert isinstance(first, DefaultDependencyService)
    assert isinstance(second, DefaultDependencyService)
    assert first is not second


def test_parametered_factory(container):
    register_factory(container, ParameteredServiceFactory).for_concrete_type(
        SimpleParameteredService
    )

    factory = container.resolve(ParameteredServiceFactory)
    first = factory.create(1)
    second = factory.create(2)

    assert first.number == 1
    assert second.number == 2
    assert first is not second


def test_same_arguments_construct_distinct_instances(container):
    register_factory(container, ParameteredServiceFactory).for_concrete_type(
        SimpleParameteredService
    )

    factory = container.resolve(ParameteredServiceFactory)

    assert factory.create(7) is not factory.create(7)


def test_parametered_factory_for_objects_with_dependencies(container):
    container.register_type(DefaultDependencyService, as_=DependencyService)
    register_factory(container, ParameteredServiceWithDependencyFactory).for_concrete_type(
        DefaultParameteredServiceWithDependency
    )

    factory = container.resolve(ParameteredServiceWithDependencyFactory)
    first = factory.create(1)
    second = factory.create(2)

    assert first.number == 1
    assert second.number == 2
    assert isinstance(first.dependency, DefaultDependencyService)
    assert first is not second


def test_factory_arguments_override_registered_dependencies(container):
    container.register_type(DefaultDependencyService, as_=DependencyService)
    register_factory(container, ParameteredServiceWithDependencyFactory).for_concrete_type(
        DefaultParameteredServiceWithDependency
    )
    register_factory(
        container, OtherParameteredServiceWithDependencyFactory
    ).for_concrete_type(DefaultParameteredServiceWithDependency)

    created = container.resolve(ParameteredServiceWithDependencyFactory).create(1)
    specified = DefaultDependencyService()
    created_other = container.resolve(
        OtherParameteredServiceWithDependencyFactory
    ).create(2, specified)

    assert created.dependency is not specified
    assert created_other.dependency is specified


def test_unresolvable_dependency_fails_when_called(container):
    register_factory(container, ParameteredServiceWithDependencyFactory).for_concrete_type(
        DefaultParameteredServiceWithDependency
    )
    factory = container.resolve(ParameteredServiceWithDependencyFactory)

    with pytest.raises(ResolutionError, match="dependency"):
        factory.create(1)


def test_factory_returning_concrete_type(container):
    register_factory(container, ConcreteDependencyServiceFactory).returning_concrete_type()

    factory = container.resolve(ConcreteDependencyServiceFactory)
    first = factory.create()
    second = factory.create()

    assert isinstance(first, DefaultDependencyService)
    assert first is not second


def test_returning_concrete_type_is_for_concrete_type_with_inferred_type(container):
    inferred = register_factory(
        container, ConcreteDependencyServiceFactory
    ).returning_concrete_type()
    explicit = register_factory(
        Container(), ConcreteDependencyServiceFactory
    ).for_concrete_type(DefaultDependencyService)

    assert inferred == explicit


def test_returning_concrete_type_requires_a_single_type(container):
    with pytest.raises(FactoryNotSupportedError, match="more than one type"):
        register_factory(container, TwoConcreteTypesFactory).returning_concrete_type()

    assert not container.is_registered(TwoConcreteTypesFactory)


def test_returning_concrete_type_requires_methods(container):
    with pytest.raises(InvalidFactoryOperationError, match="does not declare any method"):
        register_factory(container, EmptyFactory).returning_concrete_type()


def test_returning_concrete_type_requires_a_concrete_type(container):
    with pytest.raises(InvalidFactoryOperationError, match="use for_concrete_type"):
        register_factory(container, DependencyServiceFactory).returning_concrete_type()


def test_abstract_class_contract(container):
    register_factory(container, AbstractDependencyServiceFactory).for_concrete_type(
        DefaultDependencyService
    )

    factory = container.resolve(AbstractDependencyServiceFactory)

    assert isinstance(factory, AbstractDependencyServiceFactory)
    assert isinstance(factory.create(), DefaultDependencyService)


def test_named_factory_is_resolved_by_name(container):
    register_factory(container, DependencyServiceFactory, "special").for_concrete_type(
        DefaultDependencyService
    )

    factory = container.resolve(DependencyServiceFactory, "special")

    assert isinstance(factory.create(), DefaultDependencyService)
    with pytest.raises(ResolutionError):
        container.resolve(DependencyServiceFactory)


def test_register_typed_factory_shortcut(container):
    assert (
        register_typed_factory(
            container, ParameteredServiceFactory, SimpleParameteredService
        )
        is container
    )

    assert container.resolve(ParameteredServiceFactory).create(3).number == 3


def test_detect_misaligned_factory_signatures(container):
    pending = register_factory(container, ParameteredServiceFactory)

    with pytest.raises(FactorySignatureMismatchError):
        pending.for_concrete_type(MisalignedParameteredService)

    assert not container.is_registered(ParameteredServiceFactory)
    assert not container.is_registered(MisalignedParameteredService)


def test_type_not_produced_by_factory_is_not_registered(container):
    with pytest.raises(TypeCannotBeCreatedByFactoryError):
        register_factory(container, DependencyServiceFactory).for_concrete_type(
            SimpleParameteredService
        )

    assert not container.is_registered(DependencyServiceFactory)


@pytest.mark.parametrize("contract", [None, DefaultDependencyService, 42])
def test_contract_must_be_interface_shaped(container, contract):
    with pytest.raises(InvalidFactoryContractError):
        register_factory(container, contract)


def test_invalid_contract_is_a_value_error(container):
    with pytest.raises(ValueError, match="does not represent an interface"):
        register_factory(container, DefaultDependencyService)


@pytest.mark.parametrize("concrete", [None, DependencyService, "DefaultDependencyService"])
def test_concrete_type_must_be_a_concrete_class(container, concrete):
    with pytest.raises(InvalidFactoryContractError):
        register_factory(container, DependencyServiceFactory).for_concrete_type(concrete)


def test_variadic_contract_is_rejected_at_registration(container):
    with pytest.raises(InvalidFactoryContractError):
        register_factory(container, VariadicFactory).for_concrete_type(
            SimpleParameteredService
        )


def test_concurrent_calls_are_independent(container):
    register_factory(container, ParameteredServiceFactory).for_concrete_type(
        SimpleParameteredService
    )
    factory = container.resolve(ParameteredServiceFactory)

    with ThreadPoolExecutor(max_workers=8) as executor:
        created = list(executor.map(factory.create, range(100)))

    assert [service.number for service in created] == list(range(100))
    assert len({id(service) for service in created}) == 100


def test_concrete_type_constructed_through_new(container):
    class Sized:
        def __new__(cls, size: int):
            instance = super().__new__(cls)
            instance.size = size
            return instance

    class SizedFactory(Protocol):
        def create(self, size: int) -> Sized: ...

    register_factory(container, SizedFactory).for_concrete_type(Sized)

    assert container.resolve(SizedFactory).create(3).size == 3


def test_list_returning_methods_are_sequences(container):
    class ListingFactory(Protocol):
        def create(self) -> DependencyService: ...

        def create_all(self) -> list[DependencyService]: ...

    register_factory(container, ListingFactory).for_concrete_type(
        DefaultDependencyService
    )
    factory = container.resolve(ListingFactory)

    assert isinstance(factory.create(), DefaultDependencyService)
    with pytest.raises(FactoryNotSupportedError):
        factory.create_all()


def test_contract_with_abstract_property_is_rejected(container):
    class LabelledFactory(ABC):
        @property
        @abstractmethod
        def label(self) -> str: ...

        @abstractmethod
        def create(self) -> DependencyService: ...

    with pytest.raises(InvalidFactoryContractError, match=r"\['label'\]"):
        register_factory(container, LabelledFactory)

    assert not container.is_registered(LabelledFactory)


def test_contract_with_abstract_private_method_is_rejected(container):
    class HelperFactory(ABC):
        @abstractmethod
        def _helper(self) -> None: ...

        @abstractmethod
        def create(self) -> DependencyService: ...

    with pytest.raises(InvalidFactoryContractError, match="_helper"):
        register_factory(container, HelperFactory)
