from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from tagwire.domain.enums import FieldKind, TagKind
from tagwire.domain.typenames import describe_type

T = TypeVar("T")


class Tag(BaseModel):
    """Value object for a parsed ``inject`` tag.

    A field without an ``inject`` key has no Tag at all (``None``).

    Attributes:
        kind: How the field is satisfied.
        name: The binding name, only set for ``TagKind.NAMED``.
    """

    model_config = ConfigDict(frozen=True)

    kind: TagKind = Field(..., description="How the tagged field is satisfied.")
    name: str = Field(default="", description="Binding name for named injects.")

    @property
    def is_private(self) -> bool:
        return self.kind == TagKind.PRIVATE

    @property
    def is_named(self) -> bool:
        return self.kind == TagKind.NAMED

    @property
    def is_inline(self) -> bool:
        return self.kind == TagKind.INLINE


class FieldSpec(BaseModel):
    """Describes one annotated field of a record type.

    Attributes:
        owner_type: The record type that declares the field.
        name: Attribute name.
        annotation: Declared annotation with ``Annotated`` metadata stripped.
        target_type: The annotation with ``Optional`` unwrapped.
        kind: Classification of the target type.
        raw_tag: All string metadata joined by a space, or None if there is none.
        resolved: False when the annotation does not evaluate at runtime; kind is
                  then OTHER and annotation holds the raw annotation.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    owner_type: Type = Field(..., description="Record type declaring the field.")
    name: str = Field(..., description="Attribute name of the field.")
    annotation: Any = Field(..., description="Declared annotation without Annotated metadata.")
    target_type: Any = Field(..., description="Annotation with Optional unwrapped.")
    kind: FieldKind = Field(..., description="Classification of the target type.")
    raw_tag: Optional[str] = Field(default=None, description="Raw tag string, if any.")
    resolved: bool = Field(default=True, description="False if the annotation could not be evaluated.")


class Entry(BaseModel):
    """An object known to the graph, either provided or created by the resolver.

    Entries are compared by identity. Only ``value``, ``name`` and ``complete``
    are meant to be set by callers.

    Attributes:
        value: The instance itself.
        name: Optional binding name; empty means unnamed.
        complete: If True the value is not populated but may still be injected elsewhere.
        private: Only populated, never handed out as a dependency.
        created: The resolver created this value.
        embedded: The value is nested storage of another record, traversed inline.
        level: Dependency depth, 0 for roots.
        fields: Field name to entry wired into it, filled in during population.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    value: Any = Field(..., description="The object instance.")
    name: str = Field(default="", description="Optional name of the object.")
    complete: bool = Field(default=False, description="Skip population of this object.")
    private: bool = Field(default=False, description="Hidden from other objects' lookups.")
    created: bool = Field(default=False, description="Created by the resolver.")
    embedded: bool = Field(default=False, description="Nested record traversed inline.")
    level: int = Field(default=0, ge=0, description="Dependency depth in the graph.")
    fields: Optional[Dict[str, "Entry"]] = Field(
        default=None,
        description="Entries wired into this object's fields, keyed by field name.",
    )

    @property
    def type(self) -> Type:
        return type(self.value)

    def __str__(self) -> str:
        text = describe_type(self.type)
        if self.name:
            text += f" named {self.name}"
        return text

    def __repr__(self) -> str:
        return f"Entry({self}, level={self.level})"

    def __eq__(self, other: object) -> bool:
        return self is other

    __hash__ = object.__hash__


class Ref(Generic[T]):
    """A writable destination for ``ObjectGraph.resolve``.

    Example:
        >>> ref = Ref(UserService)
        >>> graph.resolve(ref)
        >>> ref.value.greet()
    """

    def __init__(self, dependency_type: Type[T]) -> None:
        self.type = dependency_type
        self.value: Optional[T] = None

    def __repr__(self) -> str:
        return f"Ref({describe_type(self.type)}, value={self.value!r})"
