"""
Domain layer - Core models and rules of the object graph.

This layer contains tags, entries, field descriptors and the error taxonomy.
It has no dependencies on other layers.
"""

from .enums import FieldKind, TagKind
from .exceptions import (
    AmbiguousCapabilityValueError,
    DestinationNotPointerError,
    DuplicateNameError,
    DuplicateUnnamedTypeError,
    FieldInjectionError,
    FieldsSpecifiedError,
    InjectionError,
    InlineTagRequiredError,
    InstantiationError,
    MalformedTagError,
    MapMustBePrivateOrNamedError,
    NamedObjectNotAssignableError,
    NamedObjectNotFoundError,
    NoAssignableCapabilityValueError,
    NoAssignableObjectError,
    NoObjectWithNameError,
    NotAStructReferenceError,
    PrivateCapabilityForbiddenError,
    PrivateInlineForbiddenError,
    TagSyntaxError,
    UnexportedInjectTargetError,
    UnhandledNamedCapabilityError,
    UnsupportedInjectFieldError,
)
from .interfaces import IFieldResolver, IObjectGraph, IRegistry
from .models import Entry, FieldSpec, Ref, Tag
from .typenames import describe_type

# Rebuild Pydantic models to resolve the self reference in Entry.fields
Entry.model_rebuild()

__all__ = [
    # Enums
    "TagKind",
    "FieldKind",
    # Exceptions
    "InjectionError",
    "FieldInjectionError",
    "TagSyntaxError",
    "MalformedTagError",
    "NotAStructReferenceError",
    "DuplicateUnnamedTypeError",
    "DuplicateNameError",
    "FieldsSpecifiedError",
    "InstantiationError",
    "UnexportedInjectTargetError",
    "UnsupportedInjectFieldError",
    "NamedObjectNotFoundError",
    "NamedObjectNotAssignableError",
    "PrivateInlineForbiddenError",
    "InlineTagRequiredError",
    "MapMustBePrivateOrNamedError",
    "PrivateCapabilityForbiddenError",
    "NoAssignableCapabilityValueError",
    "AmbiguousCapabilityValueError",
    "UnhandledNamedCapabilityError",
    "DestinationNotPointerError",
    "NoAssignableObjectError",
    "NoObjectWithNameError",
    # Interfaces
    "IObjectGraph",
    "IRegistry",
    "IFieldResolver",
    # Models
    "Tag",
    "FieldSpec",
    "Entry",
    "Ref",
    # Helpers
    "describe_type",
]
