from enum import Enum


class TagKind(str, Enum):
    """Defines how an ``inject`` tagged field is satisfied.

    Attributes:
        PLAIN: Shared singleton of the field's type.
        PRIVATE: Fresh instance visible only to this field.
        NAMED: The object provided under an explicit name.
        INLINE: Recurse into the nested record instead of assigning it.
    """

    PLAIN = "plain"
    PRIVATE = "private"
    NAMED = "named"
    INLINE = "inline"

    def __str__(self) -> str:
        return self.value


class FieldKind(str, Enum):
    """Classifies a record field by its declared annotation.

    Attributes:
        RECORD_REFERENCE: ``Optional[Record]``, a nullable reference to a record.
        RECORD_VALUE: ``Record``, nested record storage owned by the outer object.
        CAPABILITY: A Protocol or abstract base class.
        MAPPING: A keyed mapping container such as ``Dict[str, int]``.
        OTHER: Anything else (scalars, sequences, ...).
    """

    RECORD_REFERENCE = "record_reference"
    RECORD_VALUE = "record_value"
    CAPABILITY = "capability"
    MAPPING = "mapping"
    OTHER = "other"

    def __str__(self) -> str:
        return self.value
