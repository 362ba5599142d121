"""Application layer - Runtime type introspection for record types.

Records are plain user classes; their fields are the class annotations in
MRO order. Tags are the string metadata of ``typing.Annotated`` annotations.
"""

import builtins
import collections.abc
import dataclasses
import functools
import inspect
import sys
import types
from enum import Enum
from typing import Annotated, Any, ClassVar, List, Tuple, Type, Union, get_args, get_origin, get_type_hints

from typing_extensions import get_protocol_members, is_protocol

from tagwire.domain import FieldKind, FieldSpec

_NON_RECORD_MODULES = frozenset({"typing_extensions"})

# Raised by get_type_hints for annotations that cannot be evaluated at runtime
_HINT_ERRORS = (AttributeError, NameError, TypeError)


def _is_library_module(module: str) -> bool:
    return module in _NON_RECORD_MODULES or module.partition(".")[0] in sys.stdlib_module_names


def is_capability_type(tp: Any) -> bool:
    """Check whether ``tp`` is satisfied structurally or by subclassing.

    Protocols and abstract base classes with abstract methods qualify.
    """
    if not inspect.isclass(tp) or is_mapping_type(tp):
        return False
    return is_protocol(tp) or inspect.isabstract(tp)


def is_mapping_type(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    return inspect.isclass(origin) and issubclass(origin, collections.abc.Mapping)


def is_record_type(tp: Any) -> bool:
    """Check whether ``tp`` is a concrete, user defined record class."""
    if not inspect.isclass(tp) or get_origin(tp) is not None:
        return False
    if _is_library_module(tp.__module__) or issubclass(tp, Enum):
        return False
    return not is_capability_type(tp) and not is_mapping_type(tp)


def is_record_instance(value: Any) -> bool:
    if value is None or inspect.isclass(value) or inspect.isroutine(value) or inspect.ismodule(value):
        return False
    return is_record_type(type(value))


def _declared_names(tp: Type) -> set:
    names = set(dir(tp))
    if is_record_type(tp):
        names.update(spec.name for spec in record_fields(tp))
    return names


def satisfies(candidate_type: Type, capability: Type) -> bool:
    """Check whether instances of ``candidate_type`` provide ``capability``.

    Protocols are checked member by member, without requiring
    ``runtime_checkable``; abstract base classes use ``issubclass``.

    Args:
        candidate_type: Concrete type of a provided object.
        capability: A Protocol or abstract base class.
    """
    if is_protocol(capability):
        if capability in getattr(candidate_type, "__mro__", ()):
            return True
        declared = _declared_names(candidate_type)
        return all(member in declared for member in get_protocol_members(capability))
    return issubclass(candidate_type, capability)


def is_assignable(value_type: Type, field_type: Any) -> bool:
    """Check whether a value of ``value_type`` may be stored in a ``field_type`` field.

    Concrete record types match by identity only.
    """
    if field_type is Any:
        return True
    if is_capability_type(field_type):
        return satisfies(value_type, field_type)
    if is_record_type(field_type):
        return value_type is field_type
    origin = get_origin(field_type) or field_type
    return inspect.isclass(origin) and issubclass(value_type, origin)


def split_annotated(annotation: Any) -> Tuple[Any, Tuple[Any, ...]]:
    """Strip ``Annotated`` and return the inner annotation with its metadata."""
    if get_origin(annotation) is Annotated:
        return annotation.__origin__, tuple(annotation.__metadata__)
    return annotation, ()


def unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Return ``(inner, True)`` for ``Optional[inner]``, else ``(annotation, False)``."""
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0], True
    return annotation, False


def classify(target_type: Any, nullable: bool) -> FieldKind:
    if is_capability_type(target_type):
        return FieldKind.CAPABILITY
    if is_mapping_type(target_type):
        return FieldKind.MAPPING
    if is_record_type(target_type):
        return FieldKind.RECORD_REFERENCE if nullable else FieldKind.RECORD_VALUE
    return FieldKind.OTHER


class _LenientNamespace(dict):
    """Name lookup that stands in ``Any`` for names missing at runtime."""

    def __init__(self, *namespaces: dict) -> None:
        super().__init__()
        self._namespaces = namespaces

    def __missing__(self, key: str) -> Any:
        for namespace in self._namespaces:
            if key in namespace:
                return namespace[key]
        return Any


def _own_annotations(klass: Type) -> dict:
    if sys.version_info >= (3, 14):
        import annotationlib

        return annotationlib.get_annotations(klass, format=annotationlib.Format.FORWARDREF)
    return dict(klass.__dict__.get("__annotations__", {}))


def _unresolved_metadata(annotation: Any, globalns: dict, localns: dict) -> Tuple[Any, ...]:
    """Read the ``Annotated`` metadata of an annotation that does not evaluate."""
    if isinstance(annotation, str):
        try:
            annotation = eval(annotation, dict(globalns), _LenientNamespace(localns, globalns, vars(builtins)))
        except (SyntaxError,) + _HINT_ERRORS:
            return ()
    return split_annotated(annotation)[1]


def _field_hints(record_type: Type) -> List[Tuple[str, Any, Any]]:
    """Return ``(name, hint, unresolved_metadata)`` for every annotation of ``record_type``.

    ``unresolved_metadata`` is None for hints that evaluated. Otherwise the
    hint is the raw annotation and the metadata is read from it as far as
    possible.
    """
    try:
        hints = get_type_hints(record_type, include_extras=True)
    except _HINT_ERRORS:
        pass
    else:
        return [(name, hint, None) for name, hint in hints.items()]

    # Some annotation does not evaluate, so resolve field by field
    fields = {}
    for klass in reversed(record_type.__mro__):
        if klass is object:
            continue
        globalns = getattr(sys.modules.get(klass.__module__), "__dict__", {})
        localns = dict(vars(klass))
        for name, annotation in _own_annotations(klass).items():
            holder = type(klass.__name__, (), {"__annotations__": {name: annotation}, "__module__": klass.__module__})
            try:
                fields[name] = (name, get_type_hints(holder, localns=localns, include_extras=True)[name], None)
            except _HINT_ERRORS:
                fields[name] = (name, annotation, _unresolved_metadata(annotation, globalns, localns))
    return list(fields.values())


@functools.lru_cache(maxsize=256)
def record_fields(record_type: Type) -> Tuple[FieldSpec, ...]:
    """List the annotated fields of a record type in declaration order.

    Base class fields come first, so fields of a base class behave as if they
    were declared inline on the subclass. ``ClassVar`` annotations are skipped,
    and so are untagged annotations that cannot be evaluated. Tagged ones are
    kept with ``resolved=False``.

    Args:
        record_type: The record class to inspect.

    Returns:
        One FieldSpec per annotated instance field.
    """
    specs = []
    for name, hint, unresolved_metadata in _field_hints(record_type):
        if unresolved_metadata is not None:
            tags = [item for item in unresolved_metadata if isinstance(item, str)]
            if tags:
                specs.append(
                    FieldSpec(
                        owner_type=record_type,
                        name=name,
                        annotation=hint,
                        target_type=hint,
                        kind=FieldKind.OTHER,
                        raw_tag=" ".join(tags),
                        resolved=False,
                    )
                )
            continue

        annotation, metadata = split_annotated(hint)
        if annotation is ClassVar or get_origin(annotation) is ClassVar:
            continue
        if isinstance(annotation, dataclasses.InitVar):
            continue

        target_type, nullable = unwrap_optional(annotation)
        target_type, inner_metadata = split_annotated(target_type)
        tags = [item for item in metadata + inner_metadata if isinstance(item, str)]

        specs.append(
            FieldSpec(
                owner_type=record_type,
                name=name,
                annotation=annotation,
                target_type=target_type,
                kind=classify(target_type, nullable),
                raw_tag=" ".join(tags) if tags else None,
            )
        )
    return tuple(specs)


def is_writable(spec: FieldSpec) -> bool:
    """Check whether the resolver may assign the field.

    Underscore prefixed fields and fields of frozen dataclasses or frozen
    pydantic models are read only.
    """
    if spec.name.startswith("_"):
        return False
    params = getattr(spec.owner_type, "__dataclass_params__", None)
    if params is not None and params.frozen:
        return False
    model_config = getattr(spec.owner_type, "model_config", None)
    return not (isinstance(model_config, dict) and model_config.get("frozen"))


def read_field(instance: Any, spec: FieldSpec) -> Any:
    return getattr(instance, spec.name, None)


def write_field(instance: Any, spec: FieldSpec, value: Any) -> None:
    setattr(instance, spec.name, value)


def _equals_zero(value: Any, target_type: Any) -> bool:
    origin = get_origin(target_type) or target_type
    if not inspect.isclass(origin):
        return False
    try:
        zero = origin()
    except TypeError:
        # No argument-free constructor, so there is no zero value to compare to
        return False
    return type(value) is type(zero) and value == zero


def is_zero_record(instance: Any) -> bool:
    """Check whether every annotated field of a record instance is zero.

    Records without annotated fields are compared to their argument-free instance.
    """
    specs = record_fields(type(instance))
    if not specs:
        return _equals_zero(instance, type(instance))
    return all(is_zero(read_field(instance, spec), spec) for spec in specs)


def is_zero(value: Any, spec: FieldSpec) -> bool:
    """Check whether a field value is unset.

    Args:
        value: The current field value.
        spec: The field being inspected.

    Returns:
        True for None. References, capabilities and mappings are otherwise
        never zero; nested records are zero when all their fields are; other
        values are compared to the argument-free instance of their type.
    """
    if value is None:
        return True
    if spec.kind == FieldKind.RECORD_VALUE:
        return is_zero_record(value)
    if spec.kind in (FieldKind.RECORD_REFERENCE, FieldKind.CAPABILITY, FieldKind.MAPPING):
        return False
    return _equals_zero(value, spec.target_type)


def mapping_factory(mapping_type: Any) -> Type:
    """Return the concrete class used to create an empty mapping of ``mapping_type``."""
    origin = get_origin(mapping_type) or mapping_type
    if not inspect.isclass(origin) or inspect.isabstract(origin):
        return dict
    if issubclass(origin, collections.defaultdict):
        return dict
    return origin
