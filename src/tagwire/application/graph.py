import logging
import random
from typing import Any, List, Optional, Type, TypeVar

from tagwire.application.factory import InstanceFactory
from tagwire.application.introspection import is_assignable
from tagwire.application.registry import ObjectRegistry
from tagwire.application.resolver import FieldResolver
from tagwire.domain import (
    DestinationNotPointerError,
    Entry,
    FieldsSpecifiedError,
    IObjectGraph,
    NoAssignableObjectError,
    NoObjectWithNameError,
    Ref,
)

T = TypeVar("T")


class ObjectGraph(IObjectGraph):
    """An object graph populated from ``inject`` tagged fields.

    Seed the graph with some (possibly incomplete) objects, then call
    ``populate`` to create and connect everything they depend on. Objects are
    singletons by default; fields can ask for private instances or for objects
    provided under a name.

    Attributes:
        _registry: The entries known to the graph.
        _resolver: Populates the fields of each entry.
        _levels: Entries grouped by dependency depth after ``populate``.
        _shuffle_objects: Whether ``objects`` returns a shuffled snapshot.
        _rng: Random source used for shuffling.

    Example:
        >>> graph = ObjectGraph()
        >>> app = App()
        >>> graph.provide(Entry(value=app), Entry(value=DefaultTransport()))
        >>> graph.populate()
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        shuffle_objects: bool = True,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize an empty graph.

        Args:
            logger: Receives debug lines while the graph is populated.
                    Defaults to the ``tagwire`` module loggers.
            shuffle_objects: Shuffle ``objects()`` to expose order dependent callers.
            rng: Random source for the shuffle.
        """
        self._logger = logger
        self._registry = ObjectRegistry(logger=logger)
        self._resolver = FieldResolver(self._registry, InstanceFactory(), logger=logger)
        self._levels: List[List[Entry]] = []
        self._shuffle_objects = shuffle_objects
        self._rng = rng or random.Random()

    def provide(self, *entries: Entry) -> None:
        """Provide objects to the graph.

        Args:
            entries: Objects to add. ``name`` and ``complete`` control how each
                     one is used; see ``Entry``.

        Raises:
            FieldsSpecifiedError: If an entry already has ``fields`` set.
            NotAStructReferenceError: If an unnamed value is not a record instance.
            DuplicateUnnamedTypeError: If two unnamed objects share a type.
            DuplicateNameError: If two objects share a name.
        """
        for entry in entries:
            if entry.fields is not None:
                raise FieldsSpecifiedError(entry)
            self._registry.register(entry)

    def populate(self) -> None:
        """Populate the incomplete objects of the graph.

        Raises:
            InjectionError: On the first misconfigured field. Fields wired
                            before the failure stay wired.
        """
        done = self._populate_unnamed(0)

        for entry in self._registry.get_named_copy().values():
            if not entry.complete:
                self._resolver.populate_explicit(entry)

        # Objects created for named objects still need their own fields filled.
        self._populate_unnamed(done)

        # Capabilities go last so that every concrete candidate exists.
        for entry in self._registry.entries():
            if not entry.complete:
                self._resolver.populate_capabilities(entry)

        self._build_levels()

    def _populate_unnamed(self, start: int) -> int:
        """Run the explicit pass over unnamed entries from index ``start``.

        The unnamed list grows while we iterate, so objects created along the
        way are populated in the same pass.

        Returns:
            The number of unnamed entries processed in total.
        """
        unnamed = self._registry.unnamed
        i = start
        while i < len(unnamed):
            entry = unnamed[i]
            i += 1
            if not entry.complete:
                self._resolver.populate_explicit(entry)
        return i

    def _build_levels(self) -> None:
        entries = self._registry.entries()
        max_level = max([self._resolver.max_level] + [entry.level for entry in entries])
        levels: List[List[Entry]] = [[] for _ in range(max_level + 1)]
        for entry in entries:
            levels[entry.level].append(entry)
        self._levels = levels

    def _find(self, dependency_type: Any, name: str = "") -> Entry:
        if name:
            entry = self._registry.find_named(name)
            if entry is None:
                raise NoObjectWithNameError(name)
            if not is_assignable(entry.type, dependency_type):
                raise NoAssignableObjectError(dependency_type, name)
            return entry

        for entry in self._registry.entries():
            if not entry.private and is_assignable(entry.type, dependency_type):
                return entry
        raise NoAssignableObjectError(dependency_type)

    def resolve(self, destination: Ref) -> None:
        """Assign the first provided object matching ``destination.type``.

        Args:
            destination: Reference receiving the object.

        Raises:
            DestinationNotPointerError: If ``destination`` is not a ``Ref``.
            NoAssignableObjectError: If no object fits the type.

        Example:
            >>> ref = Ref(Answerable)
            >>> graph.resolve(ref)
        """
        if not isinstance(destination, Ref):
            raise DestinationNotPointerError(destination)
        destination.value = self._find(destination.type).value

    def resolve_by_name(self, destination: Ref, name: str) -> None:
        """Assign the object provided under ``name``.

        Args:
            destination: Reference receiving the object.
            name: Name the object was provided with.

        Raises:
            DestinationNotPointerError: If ``destination`` is not a ``Ref``.
            NoObjectWithNameError: If nothing was provided under ``name``.
            NoAssignableObjectError: If the named object does not fit the type.
        """
        if not isinstance(destination, Ref):
            raise DestinationNotPointerError(destination)
        destination.value = self._find(destination.type, name).value

    def get(self, dependency_type: Type[T], name: str = "") -> T:
        """Return the provided object for a type, optionally by name.

        Shorthand for ``resolve`` / ``resolve_by_name`` with a fresh ``Ref``.
        """
        ref: Ref[T] = Ref(dependency_type)
        if name:
            self.resolve_by_name(ref, name)
        else:
            self.resolve(ref)
        return ref.value

    def objects(self) -> List[Entry]:
        """Return every object in the graph.

        The order is unspecified, and shuffled unless disabled, so callers do
        not come to depend on it.
        """
        objects = self._registry.entries()
        if self._shuffle_objects:
            self._rng.shuffle(objects)
        return objects

    def levels(self) -> List[List[Entry]]:
        """Return the objects grouped by level, roots first.

        Only meaningful after ``populate``.
        """
        return [list(level) for level in self._levels]

    def clear(self) -> None:
        """Forget every object; the graph can be seeded again."""
        self._registry.clear()
        self._resolver.max_level = 0
        self._levels = []

    def __len__(self) -> int:
        return len(self._registry)


def populate(*values: Any) -> ObjectGraph:
    """Populate a fresh graph seeded with the given incomplete objects.

    Args:
        values: Record instances, provided unnamed.

    Returns:
        The populated graph, for lookups and level inspection.

    Example:
        >>> app = App()
        >>> populate(app)
        >>> app.name_api is not None
        True
    """
    graph = ObjectGraph()
    for value in values:
        graph.provide(Entry(value=value))
    graph.populate()
    return graph
