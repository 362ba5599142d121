import logging
from typing import Any, Dict, List, Optional, Set, Type

from tagwire.application.introspection import is_assignable, is_record_instance
from tagwire.domain import (
    DuplicateNameError,
    DuplicateUnnamedTypeError,
    Entry,
    IRegistry,
    NotAStructReferenceError,
)


class ObjectRegistry(IRegistry):
    """Stores the entries of one object graph.

    Unnamed entries are kept in registration order, which is also the order in
    which they are populated and searched. Named entries live in a mapping.

    Attributes:
        _unnamed: Unnamed entries in registration order.
        _unnamed_types: Concrete types of the non-private unnamed entries.
        _named: Mapping of names to entries.
        _logger: Receives one debug line per registered entry.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        """Initialize an empty registry.

        Args:
            logger: Diagnostic logger, defaults to this module's logger.
        """
        self._unnamed: List[Entry] = []
        self._unnamed_types: Set[Type] = set()
        self._named: Dict[str, Entry] = {}
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def register(self, entry: Entry) -> None:
        """Add an entry to the registry.

        Args:
            entry: The entry to add.

        Raises:
            NotAStructReferenceError: If an unnamed value is not a record instance.
            DuplicateUnnamedTypeError: If a visible unnamed entry of the same type exists.
            DuplicateNameError: If the name is already taken.
        """
        if not entry.name:
            if not is_record_instance(entry.value):
                raise NotAStructReferenceError(entry.value)

            if not entry.private:
                if entry.type in self._unnamed_types:
                    raise DuplicateUnnamedTypeError(entry.type)
                self._unnamed_types.add(entry.type)
            self._unnamed.append(entry)
        else:
            if entry.name in self._named:
                raise DuplicateNameError(entry.name)
            self._named[entry.name] = entry

        if entry.created:
            self._logger.debug("created %s", entry)
        elif entry.embedded:
            self._logger.debug("provided embedded %s", entry)
        else:
            self._logger.debug("provided %s", entry)

    def find_assignable_unnamed(self, field_type: Any) -> List[Entry]:
        """Return visible unnamed entries compatible with ``field_type``.

        Matches are returned in registration order. Callers filling a concrete
        field take the first one; capability fields need all of them to detect
        ambiguity.

        Args:
            field_type: The field's target type.

        Returns:
            Matching entries, possibly empty.
        """
        return [entry for entry in self._unnamed if not entry.private and is_assignable(entry.type, field_type)]

    def find_named(self, name: str) -> Optional[Entry]:
        return self._named.get(name)

    @property
    def unnamed(self) -> List[Entry]:
        """The live list of unnamed entries; it grows while the graph is populated."""
        return self._unnamed

    def get_named_copy(self) -> Dict[str, Entry]:
        return self._named.copy()

    def entries(self) -> List[Entry]:
        """Every entry, unnamed ones first, in registration order."""
        return self._unnamed + list(self._named.values())

    def clear(self) -> None:
        self._unnamed.clear()
        self._unnamed_types.clear()
        self._named.clear()

    def __len__(self) -> int:
        return len(self._unnamed) + len(self._named)
