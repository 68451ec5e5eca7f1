from __future__ import annotations

import inspect
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, get_type_hints

from typing_extensions import get_overloads

from tinydi.exceptions import TinyDIAmbiguousConstructorError, TinyDIDependencyInferenceError
from tinydi.service_key import ServiceKey

if TYPE_CHECKING:
    from tinydi.registry import Binding

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class Dependency:
    """A single constructor parameter satisfied from the registry."""

    service_key: ServiceKey
    """The key resolved for this parameter."""
    name: str | None = None
    """Keyword used to pass the instance, ``None`` means positional."""
    has_default: bool = False
    """True if the parameter may be omitted when its key is not registered."""


@dataclass(frozen=True, slots=True)
class Constructor:
    """Construction contract: a factory plus its ordered dependencies."""

    factory: Callable[..., Any]
    dependencies: tuple[Dependency, ...] = ()

    def __call__(self, resolved: Sequence[tuple[Dependency, Any]]) -> Any:
        """Invoke the factory with resolved ``(dependency, instance)`` pairs in declared order."""
        args = [instance for dependency, instance in resolved if dependency.name is None]
        kwargs = {
            dependency.name: instance
            for dependency, instance in resolved
            if dependency.name is not None
        }
        return self.factory(*args, **kwargs)


class DependenciesExtractor:
    """Build construction contracts for bindings.

    Explicit ``dependencies`` given at registration time are used as-is. Otherwise
    the contract is inferred from the type hints of the implementation's single
    eligible ``__init__`` (or of the factory callable). Results are memoized per
    binding.
    """

    def __init__(self) -> None:
        self._constructors: dict[int, tuple[Binding, Constructor]] = {}

    def get_constructor(self, service_key: ServiceKey, binding: Binding) -> Constructor:
        """Return the construction contract for ``binding``.

        Raises:
            TinyDIAmbiguousConstructorError: If the implementation has more than one
                dependency-bearing ``__init__`` overload.
            TinyDIDependencyInferenceError: If a parameter annotation is missing or
                cannot be evaluated.

        """
        # Keyed by identity: factories may be unhashable callables
        cached = self._constructors.get(id(binding))
        if cached is not None and cached[0] is binding:
            return cached[1]

        if binding.dependencies is not None:
            factory = binding.factory
            if factory is None:  # pragma: no cover - rejected at registration
                factory = binding.implementation.value
            constructor = Constructor(
                factory=factory,
                dependencies=tuple(Dependency(service_key=key) for key in binding.dependencies),
            )
        elif binding.factory is not None and not isinstance(binding.factory, type):
            func, skip_first_parameter = binding.factory, False
            if not inspect.isroutine(func):
                # Callable instance: its ``__call__`` carries the hints
                func, skip_first_parameter = type(func).__call__, True
            constructor = Constructor(
                factory=binding.factory,
                dependencies=self._extract(
                    func,
                    skip_first_parameter=skip_first_parameter,
                    owner=binding.factory,
                ),
            )
        else:
            # A class given as ``factory`` is constructed like an implementation
            implementation = binding.factory
            if implementation is None:
                implementation = binding.implementation.value
            init = self._select_init(service_key, implementation)
            dependencies: tuple[Dependency, ...] = ()
            if init is not None:
                dependencies = self._extract(init, skip_first_parameter=True, owner=implementation)
            constructor = Constructor(factory=implementation, dependencies=dependencies)

        # Concurrent first resolutions may compute this twice; both results are equal.
        self._constructors[id(binding)] = (binding, constructor)
        return constructor

    def _select_init(self, service_key: ServiceKey, implementation: type) -> Callable[..., Any] | None:
        init = getattr(implementation, "__init__", object.__init__)
        if not inspect.isfunction(init):
            # object.__init__ or a C-level slot wrapper
            return None

        candidates = [
            overload for overload in get_overloads(init) if self._takes_dependencies(overload)
        ]
        if len(candidates) > 1:
            raise TinyDIAmbiguousConstructorError(service_key, implementation, candidates)
        if candidates:
            return candidates[0]
        return init

    def _takes_dependencies(self, init: Callable[..., Any]) -> bool:
        parameters = self._parameters(init, skip_first_parameter=True)
        return any(parameter.kind not in _SKIPPED_KINDS for parameter in parameters)

    def _parameters(
        self,
        func: Callable[..., Any],
        *,
        skip_first_parameter: bool,
    ) -> list[inspect.Parameter]:
        try:
            parameters = list(inspect.signature(func).parameters.values())
        except (TypeError, ValueError):
            return []
        if skip_first_parameter and parameters and parameters[0].kind not in _SKIPPED_KINDS:
            parameters = parameters[1:]
        return parameters

    def _extract(
        self,
        func: Callable[..., Any],
        *,
        skip_first_parameter: bool,
        owner: Any = None,
    ) -> tuple[Dependency, ...]:
        owner = func if owner is None else owner
        try:
            hints = get_type_hints(func)
        except (NameError, TypeError) as e:
            raise TinyDIDependencyInferenceError(owner, cause=e) from e

        dependencies: list[Dependency] = []
        for parameter in self._parameters(func, skip_first_parameter=skip_first_parameter):
            if parameter.kind in _SKIPPED_KINDS:
                continue

            positional_only = parameter.kind is inspect.Parameter.POSITIONAL_ONLY
            has_default = parameter.default is not inspect.Parameter.empty and not positional_only
            annotation = hints.get(parameter.name)
            if annotation is None:
                if has_default:
                    continue
                raise TinyDIDependencyInferenceError(owner, parameter=parameter.name)

            dependencies.append(
                Dependency(
                    service_key=ServiceKey.from_value(annotation),
                    name=None if positional_only else parameter.name,
                    has_default=has_default,
                ),
            )
        return tuple(dependencies)
