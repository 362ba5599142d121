from typing import TYPE_CHECKING, Any, Optional, Type

from tagwire.domain.typenames import describe_type

if TYPE_CHECKING:
    from tagwire.domain.models import Entry


class InjectionError(Exception):
    """Base exception for all object graph wiring errors."""


class TagSyntaxError(InjectionError):
    """Raised by the tag parser when a tag does not follow ``key:"value"``.

    Attributes:
        raw_tag: The tag string being parsed.
    """

    def __init__(self, raw_tag: str, reason: str) -> None:
        self.raw_tag = raw_tag
        self.reason = reason
        super().__init__(f"invalid tag `{raw_tag}`: {reason}")


class FieldInjectionError(InjectionError):
    """Base class for errors tied to one field of a record type.

    Attributes:
        field_name: Name of the offending field.
        field_type: Declared type of the offending field.
        owner_type: The record type declaring the field.
    """

    def __init__(self, field_name: str, field_type: Any, owner_type: Type, message: str) -> None:
        self.field_name = field_name
        self.field_type = field_type
        self.owner_type = owner_type
        super().__init__(message)

    @staticmethod
    def describe_field(field_name: str, field_type: Any, owner_type: Type) -> str:
        return f"field {field_name} ({describe_type(field_type)}) in type {describe_type(owner_type)}"


class MalformedTagError(FieldInjectionError):
    """Raised when a field annotation is not a well-formed tag string."""

    def __init__(self, raw_tag: str, field_name: str, field_type: Any, owner_type: Type) -> None:
        self.raw_tag = raw_tag
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"unexpected tag format `{raw_tag}` for {self.describe_field(field_name, field_type, owner_type)}",
        )


class NotAStructReferenceError(InjectionError):
    """Raised when an unnamed object is not an instance of a record type."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            "expected unnamed object value to be an instance of a record type "
            f"but got type {describe_type(type(value))} with value {value!r}"
        )


class DuplicateUnnamedTypeError(InjectionError):
    """Raised when two unnamed, non-private objects share a concrete type."""

    def __init__(self, dependency_type: Type) -> None:
        self.dependency_type = dependency_type
        super().__init__(f"provided two unnamed instances of type {describe_type(dependency_type)}")


class DuplicateNameError(InjectionError):
    """Raised when two objects are provided under the same name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"provided two instances named {name}")


class FieldsSpecifiedError(InjectionError):
    """Raised when an object is provided with its ``fields`` already set.

    ``fields`` is filled in by the resolver only.
    """

    def __init__(self, entry: "Entry") -> None:
        self.entry = entry
        super().__init__(f"fields were specified on object {entry} when it was provided")


class InstantiationError(InjectionError):
    """Raised when a missing dependency cannot be constructed.

    Record types must be constructible without arguments.
    """

    def __init__(self, dependency_type: Type, reason: Optional[str] = None) -> None:
        self.dependency_type = dependency_type
        self.reason = reason
        message = f"cannot create a zero value of type {describe_type(dependency_type)}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UnexportedInjectTargetError(FieldInjectionError):
    """Raised when an inject tag sits on a field that cannot be written."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"inject requested on unexported {self.describe_field(field_name, field_type, owner_type)}",
        )


class UnsupportedInjectFieldError(FieldInjectionError):
    """Raised for tagged fields that are neither references, mappings nor capabilities."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"found inject tag on unsupported {self.describe_field(field_name, field_type, owner_type)}",
        )


class NamedObjectNotFoundError(FieldInjectionError):
    """Raised when a named inject refers to a name nobody provided."""

    def __init__(self, name: str, field_name: str, field_type: Any, owner_type: Type) -> None:
        self.name = name
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"did not find object named {name} required by "
            f"{self.describe_field(field_name, field_type, owner_type)}",
        )


class NamedObjectNotAssignableError(FieldInjectionError):
    """Raised when the named object does not fit the field's declared type."""

    def __init__(self, entry: "Entry", field_name: str, field_type: Any, owner_type: Type) -> None:
        self.entry = entry
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"object named {entry.name} of type {describe_type(entry.type)} is not assignable to "
            f"{self.describe_field(field_name, field_type, owner_type)}",
        )


class PrivateInlineForbiddenError(FieldInjectionError):
    """Raised when an inline record field is tagged private."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            "cannot use private inject on inline record on "
            f"{self.describe_field(field_name, field_type, owner_type)}",
        )


class InlineTagRequiredError(FieldInjectionError):
    """Raised when a nested record field is tagged without an explicit ``inline``."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"inline record on {self.describe_field(field_name, field_type, owner_type)} "
            'requires an explicit "inline" tag',
        )


class MapMustBePrivateOrNamedError(FieldInjectionError):
    """Raised when a mapping field is tagged with anything but private or a name."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"inject on map {self.describe_field(field_name, field_type, owner_type)} must be named or private",
        )


class PrivateCapabilityForbiddenError(FieldInjectionError):
    """Raised for ``private`` on a capability field, which cannot be instantiated."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            "found private inject tag on capability "
            f"{self.describe_field(field_name, field_type, owner_type)}",
        )


class NoAssignableCapabilityValueError(FieldInjectionError):
    """Raised when no provided object satisfies a capability field."""

    def __init__(self, field_name: str, field_type: Any, owner_type: Type) -> None:
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"found no assignable value for {self.describe_field(field_name, field_type, owner_type)}",
        )


class AmbiguousCapabilityValueError(FieldInjectionError):
    """Raised when more than one provided object satisfies a capability field.

    Attributes:
        first: The first matching entry in registration order.
        second: The next matching entry.
    """

    def __init__(
        self,
        first: "Entry",
        second: "Entry",
        field_name: str,
        field_type: Any,
        owner_type: Type,
    ) -> None:
        self.first = first
        self.second = second
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"found two assignable values for {self.describe_field(field_name, field_type, owner_type)}. "
            f"one type {describe_type(first.type)} with value {first.value!r} and "
            f"another type {describe_type(second.type)} with value {second.value!r}",
        )


class UnhandledNamedCapabilityError(FieldInjectionError):
    """Raised when a named capability field is still empty after the first pass.

    Named fields are always settled in the first pass, so this signals a bug.
    """

    def __init__(self, name: str, field_name: str, field_type: Any, owner_type: Type) -> None:
        self.name = name
        super().__init__(
            field_name,
            field_type,
            owner_type,
            f"unhandled named instance with name {name} on "
            f"{self.describe_field(field_name, field_type, owner_type)}",
        )


class DestinationNotPointerError(InjectionError):
    """Raised when ``resolve`` is given something other than a ``Ref``."""

    def __init__(self, destination: Any) -> None:
        self.destination = destination
        super().__init__(
            f"destination is not a reference: got type {describe_type(type(destination))}, expected Ref"
        )


class NoAssignableObjectError(InjectionError):
    """Raised when no provided object fits the destination type."""

    def __init__(self, dependency_type: Any, name: str = "") -> None:
        self.dependency_type = dependency_type
        self.name = name
        message = f"no provided object is assignable to {describe_type(dependency_type)}"
        if name:
            message += f" with the name {name}"
        super().__init__(message)


class NoObjectWithNameError(InjectionError):
    """Raised when ``resolve_by_name`` is given an unknown name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"no provided object with the name: {name}")
