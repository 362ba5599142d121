"""
tagwire: Populate object graphs from ``inject`` tagged record fields.

Public API exports for the tagwire package.
"""

# Application exports
from tagwire.application.graph import ObjectGraph, populate
from tagwire.application.tag_parser import INJECT, INLINE, PRIVATE, named

# Domain exports
from tagwire.domain.exceptions import (
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
    UnexportedInjectTargetError,
    UnsupportedInjectFieldError,
)
from tagwire.domain.models import Entry, Ref

__version__ = "0.1.0"

__all__ = [
    # Graph
    "ObjectGraph",
    "populate",
    "Entry",
    "Ref",
    # Tags
    "INJECT",
    "PRIVATE",
    "INLINE",
    "named",
    # Exceptions
    "InjectionError",
    "FieldInjectionError",
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
    "DestinationNotPointerError",
    "NoAssignableObjectError",
    "NoObjectWithNameError",
]
