from phiwire.bindings import Factory, Instance, TypeName
from phiwire.container import Container
from phiwire.exceptions import (
    PhiWireCyclicDependencyError,
    PhiWireError,
    PhiWireInvalidBindingError,
    PhiWireMissingArgumentError,
    PhiWireNotInstantiableError,
    PhiWireUnresolvableTypeError,
)
from phiwire.introspection import ParameterDescriptor, SignatureIntrospector
from phiwire.lock_mode import LockMode
from phiwire.resolvers import ResolverProtocol

__all__ = [
    "Container",
    "Factory",
    "Instance",
    "LockMode",
    "ParameterDescriptor",
    "PhiWireCyclicDependencyError",
    "PhiWireError",
    "PhiWireInvalidBindingError",
    "PhiWireMissingArgumentError",
    "PhiWireNotInstantiableError",
    "PhiWireUnresolvableTypeError",
    "ResolverProtocol",
    "SignatureIntrospector",
    "TypeName",
]
