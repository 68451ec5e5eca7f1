from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tinydi.scope import Scope
    from tinydi.service_key import ServiceKey


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


class TinyDIError(Exception):
    """Represent a base class for all tinydi-specific failures.

    Catch this type when you want to handle any tinydi error path without
    matching each concrete exception class individually.
    """


class TinyDIInvalidRegistrationError(TinyDIError):
    """Signal invalid arguments passed to a registration API.

    Raised by ``Registry.register`` and its ``add_*`` shortcuts, for example when
    both ``implementation`` and ``factory`` are given, when ``dependencies`` are
    given without a ``factory``, or when ``lifetime`` is not a ``Lifetime``.
    """


class TinyDIUnregisteredServiceError(TinyDIError):
    """Signal that a requested service key has no binding.

    Raised by ``resolve`` for the top-level key as well as for any dependency key
    reached while building the graph. Typical fix is registering the key before
    the first resolution.
    """

    def __init__(self, service_key: ServiceKey) -> None:
        self.service_key = service_key
        super().__init__(f"Service {service_key} is not registered")


class TinyDIAmbiguousConstructorError(TinyDIError):
    """Signal that an implementation exposes several dependency-bearing constructors.

    tinydi never picks one of several candidate signatures. Typical fix is
    keeping a single dependency-bearing ``__init__`` overload or registering the
    service with an explicit ``factory`` and ``dependencies``.
    """

    def __init__(
        self,
        service_key: ServiceKey,
        implementation: Any,
        candidates: Sequence[Any],
    ) -> None:
        self.service_key = service_key
        self.implementation = implementation
        self.candidates = list(candidates)
        super().__init__(
            f"Cannot choose a constructor for {_type_name(implementation)} "
            f"(requested as {service_key}): {len(self.candidates)} constructors "
            "take dependency parameters",
        )


class TinyDICircularDependencyError(TinyDIError):
    """Signal that the resolution path revisits a key that is still under construction.

    ``path`` lists the cycle starting and ending with the repeated key, e.g.
    ``[X, Y, X]``.
    """

    def __init__(self, service_key: ServiceKey, path: list[ServiceKey]) -> None:
        self.service_key = service_key
        self.path = path
        chain = " -> ".join(str(key) for key in path)
        super().__init__(f"Circular dependency detected while resolving {service_key}: {chain}")


class TinyDIInstantiationError(TinyDIError):
    """Signal that the construction call of an implementation raised.

    The original exception is available as ``cause`` and as ``__cause__``.
    """

    def __init__(
        self,
        service_key: ServiceKey,
        implementation: Any,
        cause: BaseException,
    ) -> None:
        self.service_key = service_key
        self.implementation = implementation
        self.cause = cause
        super().__init__(
            f"Failed to instantiate {_type_name(implementation)} for {service_key}: "
            f"{type(cause).__name__}: {cause}",
        )


class TinyDIDependencyInferenceError(TinyDIError):
    """Signal that constructor dependencies cannot be inferred from annotations.

    Common triggers are missing annotations or forward references that cannot be
    evaluated. Typical fixes include annotating every constructor parameter or
    registering the service with explicit ``dependencies``.
    """

    def __init__(
        self,
        implementation: Any,
        parameter: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.implementation = implementation
        self.parameter = parameter
        self.cause = cause
        if parameter is not None:
            detail = f"parameter '{parameter}' has no type annotation"
        else:
            detail = f"type hints cannot be evaluated ({cause})"
        super().__init__(f"Cannot infer dependencies of {_type_name(implementation)}: {detail}")


class TinyDIScopeClosedError(TinyDIError):
    """Signal resolution through a scope that has already been closed."""

    def __init__(self, scope: Scope) -> None:
        self.scope = scope
        super().__init__(f"{scope!r} is closed")
