import logging
from typing import Iterator, Optional, Tuple

from tagwire.application.factory import InstanceFactory
from tagwire.application.introspection import (
    is_assignable,
    is_record_instance,
    is_writable,
    is_zero,
    read_field,
    record_fields,
    write_field,
)
from tagwire.application.registry import ObjectRegistry
from tagwire.application.tag_parser import parse_tag
from tagwire.domain import (
    AmbiguousCapabilityValueError,
    Entry,
    FieldKind,
    FieldSpec,
    IFieldResolver,
    InlineTagRequiredError,
    MalformedTagError,
    MapMustBePrivateOrNamedError,
    NamedObjectNotAssignableError,
    NamedObjectNotFoundError,
    NoAssignableCapabilityValueError,
    PrivateCapabilityForbiddenError,
    PrivateInlineForbiddenError,
    Tag,
    TagSyntaxError,
    UnexportedInjectTargetError,
    UnhandledNamedCapabilityError,
    UnsupportedInjectFieldError,
)


class FieldResolver(IFieldResolver):
    """Populates tagged fields of graph entries.

    Population runs in two passes. The explicit pass fills named, inline,
    mapping and concrete record fields, creating missing records on the way.
    The capability pass runs once every concrete object exists and fills
    Protocol / ABC typed fields with the single provided object satisfying them.

    Attributes:
        max_level: Deepest dependency level seen so far.
        _registry: Where dependencies are looked up and created objects stored.
        _factory: Creates zero-valued records and empty mappings.
        _logger: Receives one debug line per wired field.
    """

    def __init__(
        self,
        registry: ObjectRegistry,
        factory: Optional[InstanceFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.max_level = 0
        self._registry = registry
        self._factory = factory or InstanceFactory()
        self._logger = logger if logger is not None else logging.getLogger(__name__)

    def _tagged_fields(self, entry: Entry) -> Iterator[Tuple[FieldSpec, Tag]]:
        """Yield each field of the entry's type that carries an ``inject`` tag.

        Raises:
            MalformedTagError: If a field's tag cannot be parsed.
            UnsupportedInjectFieldError: If a tagged field's annotation does not evaluate.
        """
        for spec in record_fields(entry.type):
            if spec.raw_tag is None:
                continue
            try:
                tag = parse_tag(spec.raw_tag)
            except TagSyntaxError as e:
                raise MalformedTagError(spec.raw_tag, spec.name, spec.annotation, spec.owner_type) from e
            if tag is None:
                continue
            if not spec.resolved:
                raise UnsupportedInjectFieldError(spec.name, spec.annotation, spec.owner_type)
            yield spec, tag

    def populate_explicit(self, entry: Entry) -> None:
        """Fill every non-capability tagged field of ``entry``.

        Records created here are registered and therefore populated later in
        the same pass by the caller's work loop.

        Args:
            entry: The entry to populate.

        Raises:
            InjectionError: Any of the field level errors, on the first bad field.
        """
        # Named plain values (numbers, strings, ...) have no fields to fill
        if entry.name and not is_record_instance(entry.value):
            return

        for spec, tag in self._tagged_fields(entry):
            self._populate_field(entry, spec, tag)

    def _populate_field(self, entry: Entry, spec: FieldSpec, tag: Tag) -> None:
        if not is_writable(spec):
            raise UnexportedInjectTargetError(spec.name, spec.annotation, spec.owner_type)

        # Never overwrite values that are already set
        current = read_field(entry.value, spec)
        if not is_zero(current, spec):
            return

        if tag.is_named:
            self._assign_named(entry, spec, tag)
            return

        if spec.kind == FieldKind.RECORD_VALUE or (tag.is_inline and spec.kind == FieldKind.RECORD_REFERENCE):
            self._provide_inline(entry, spec, tag, current)
            return

        if tag.is_inline:
            raise UnsupportedInjectFieldError(spec.name, spec.annotation, spec.owner_type)

        # Capabilities are handled in the second pass
        if spec.kind == FieldKind.CAPABILITY:
            return

        if spec.kind == FieldKind.MAPPING:
            if not tag.is_private:
                raise MapMustBePrivateOrNamedError(spec.name, spec.annotation, spec.owner_type)
            write_field(entry.value, spec, self._factory.create_mapping(spec.target_type))
            self._logger.debug("made map for field %s in %s", spec.name, entry)
            return

        if spec.kind != FieldKind.RECORD_REFERENCE:
            raise UnsupportedInjectFieldError(spec.name, spec.annotation, spec.owner_type)

        if not tag.is_private:
            matches = self._registry.find_assignable_unnamed(spec.target_type)
            if matches:
                existing = matches[0]
                self._wire(entry, spec, existing)
                self._logger.debug("assigned existing %s to field %s in %s", existing, spec.name, entry)
                self.update_level(entry, existing)
                return

        created = Entry(
            value=self._factory.create_record(spec.target_type),
            private=tag.is_private,
            level=self._next_level(entry),
            created=True,
        )
        self._registry.register(created)
        self._wire(entry, spec, created)
        self._logger.debug("assigned newly created %s to field %s in %s", created, spec.name, entry)

    def _assign_named(self, entry: Entry, spec: FieldSpec, tag: Tag) -> None:
        existing = self._registry.find_named(tag.name)
        if existing is None:
            raise NamedObjectNotFoundError(tag.name, spec.name, spec.annotation, spec.owner_type)

        if not is_assignable(existing.type, spec.target_type):
            raise NamedObjectNotAssignableError(existing, spec.name, spec.annotation, spec.owner_type)

        self._wire(entry, spec, existing)
        self._logger.debug("assigned %s to field %s in %s", existing, spec.name, entry)
        self.update_level(entry, existing)

    def _provide_inline(self, entry: Entry, spec: FieldSpec, tag: Tag, storage: object) -> None:
        """Register the field's own storage so its fields are populated in place."""
        if tag.is_private:
            raise PrivateInlineForbiddenError(spec.name, spec.annotation, spec.owner_type)
        if not tag.is_inline:
            raise InlineTagRequiredError(spec.name, spec.annotation, spec.owner_type)

        if storage is None:
            storage = self._factory.create_record(spec.target_type)
            write_field(entry.value, spec, storage)

        self._registry.register(
            Entry(
                value=storage,
                private=True,
                level=self._next_level(entry),
                embedded=True,
            )
        )

    def populate_capabilities(self, entry: Entry) -> None:
        """Fill the capability typed fields of ``entry``.

        Must run after the explicit pass finished for every entry, so that all
        concrete candidates exist.

        Args:
            entry: The entry to populate.

        Raises:
            PrivateCapabilityForbiddenError: If a capability field is tagged private.
            NoAssignableCapabilityValueError: If nothing satisfies the field.
            AmbiguousCapabilityValueError: If more than one object satisfies the field.
        """
        if entry.name and not is_record_instance(entry.value):
            return

        for spec, tag in self._tagged_fields(entry):
            if spec.kind != FieldKind.CAPABILITY:
                continue

            # A new instance of a capability cannot be created
            if tag.is_private:
                raise PrivateCapabilityForbiddenError(spec.name, spec.annotation, spec.owner_type)

            if not is_zero(read_field(entry.value, spec), spec):
                continue

            if tag.is_named:
                raise UnhandledNamedCapabilityError(tag.name, spec.name, spec.annotation, spec.owner_type)

            matches = self._registry.find_assignable_unnamed(spec.target_type)
            if not matches:
                raise NoAssignableCapabilityValueError(spec.name, spec.annotation, spec.owner_type)
            if len(matches) > 1:
                raise AmbiguousCapabilityValueError(
                    matches[0], matches[1], spec.name, spec.annotation, spec.owner_type
                )

            existing = matches[0]
            self._wire(entry, spec, existing)
            self._logger.debug("assigned existing %s to capability field %s in %s", existing, spec.name, entry)
            self.update_level(entry, existing)

    def _wire(self, entry: Entry, spec: FieldSpec, dependency: Entry) -> None:
        write_field(entry.value, spec, dependency.value)
        if entry.fields is None:
            entry.fields = {}
        entry.fields[spec.name] = dependency

    def _next_level(self, entry: Entry) -> int:
        level = entry.level + 1
        if self.max_level < level:
            self.max_level = level
        return level

    def update_level(self, consumer: Entry, dependency: Entry) -> None:
        """Push ``dependency`` at least one level below ``consumer``.

        Levels only grow, so a dependency reached through several paths ends
        at the depth of its deepest consumer.
        """
        level = consumer.level + 1
        if level <= dependency.level:
            return
        dependency.level = level
        if self.max_level < level:
            self.max_level = level
