from tinydi.cache import InstanceCache
from tinydi.container import Container
from tinydi.dependencies import Constructor, DependenciesExtractor, Dependency
from tinydi.exceptions import (
    TinyDIAmbiguousConstructorError,
    TinyDICircularDependencyError,
    TinyDIDependencyInferenceError,
    TinyDIError,
    TinyDIInstantiationError,
    TinyDIInvalidRegistrationError,
    TinyDIScopeClosedError,
    TinyDIUnregisteredServiceError,
)
from tinydi.lock_mode import LockMode
from tinydi.registry import Binding, Registry
from tinydi.resolver import Resolver
from tinydi.scope import Scope, create_child_scope, create_root_scope
from tinydi.service_key import ServiceKey
from tinydi.types import Lifetime

__all__ = [
    "Binding",
    "Constructor",
    "Container",
    "DependenciesExtractor",
    "Dependency",
    "InstanceCache",
    "Lifetime",
    "LockMode",
    "Registry",
    "Resolver",
    "Scope",
    "ServiceKey",
    "TinyDIAmbiguousConstructorError",
    "TinyDICircularDependencyError",
    "TinyDIDependencyInferenceError",
    "TinyDIError",
    "TinyDIInstantiationError",
    "TinyDIInvalidRegistrationError",
    "TinyDIScopeClosedError",
    "TinyDIUnregisteredServiceError",
    "create_child_scope",
    "create_root_scope",
]
