from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from tagwire.domain.models import Entry, Ref


class IObjectGraph(ABC):
    """Abstract interface for object graph operations."""

    @abstractmethod
    def provide(self, *entries: Entry) -> None:
        """Register objects with the graph.

        Args:
            entries: Entries describing the provided objects.
        """

    @abstractmethod
    def populate(self) -> None:
        """Populate every incomplete object currently in the graph."""

    @abstractmethod
    def resolve(self, destination: Ref) -> None:
        """Assign the provided object matching the destination's type.

        Args:
            destination: The reference to write into.
        """

    @abstractmethod
    def resolve_by_name(self, destination: Ref, name: str) -> None:
        """Assign the object provided under ``name`` to the destination.

        Args:
            destination: The reference to write into.
            name: The name the object was provided with.
        """

    @abstractmethod
    def objects(self) -> List[Entry]:
        """Return a snapshot of every object in the graph."""

    @abstractmethod
    def levels(self) -> List[List[Entry]]:
        """Return the objects grouped by dependency depth."""


class IRegistry(ABC):
    """Abstract interface for the store of graph entries."""

    @abstractmethod
    def register(self, entry: Entry) -> None:
        """Add an entry, enforcing the uniqueness rules.

        Args:
            entry: The entry to add.
        """

    @abstractmethod
    def find_assignable_unnamed(self, field_type: Any) -> List[Entry]:
        """Return every visible unnamed entry compatible with ``field_type``.

        Args:
            field_type: The type the caller wants to fill.
        """

    @abstractmethod
    def find_named(self, name: str) -> Optional[Entry]:
        """Return the entry provided under ``name``, if any.

        Args:
            name: The name to look up.
        """

    @abstractmethod
    def get_named_copy(self) -> Dict[str, Entry]:
        """Get a copy of the name to entry mapping."""


class IFieldResolver(ABC):
    """Abstract interface for populating the fields of graph entries."""

    @abstractmethod
    def populate_explicit(self, entry: Entry) -> None:
        """Fill concrete, named, inline and mapping fields of an entry.

        Args:
            entry: The entry whose value is populated.
        """

    @abstractmethod
    def populate_capabilities(self, entry: Entry) -> None:
        """Fill capability typed fields of an entry.

        Args:
            entry: The entry whose value is populated.
        """
