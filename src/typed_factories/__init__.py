"""Typed factories for dependency injection.

A typed factory is a Protocol or abstract class whose methods stand in for "construct
me a new X". Instead of writing the implementation by hand, the factory is registered
against a concrete class: every call to one of its methods constructs a new instance
of that class through a resolver, passing the call's arguments to the constructor by
parameter name and letting the resolver supply the remaining dependencies.

Basic Usage:
    >>> from typed_factories.container import Container
    >>> from typed_factories.registration import register_factory
    >>>
    >>> class ReportFactory(Protocol):
    ...     def create(self, title: str) -> Report: ...
    >>>
    >>> class Report:
    ...     def __init__(self, title: str, db: Database): ...
    >>>
    >>> container = Container()
    >>> container.register_type(SqlDatabase, as_=Database)
    >>> register_factory(container, ReportFactory).for_concrete_type(Report)
    >>> report = container.resolve(ReportFactory).create("Q3")

Factory signatures are checked when the factory is registered: each method able to
return the concrete class must have its parameter names and types present in the
class's constructor.

The library consists of several modules:
    - registration: Fluent registration of a factory for a concrete type
    - conventions: Bulk registration of classes marked with their factory
    - validation: Registration-time checks of factories against constructors
    - matching: Matching of method parameters to constructor parameters
    - interception: Call-time handling and generated factory implementations
    - introspection: Capture of contracts and constructor signatures
    - container: The resolver protocol and a minimal resolver
    - domain: Core domain models
    - errors: Library-specific exceptions
"""
