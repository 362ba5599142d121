"""Unit tests for record type introspection."""

from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Dict, List, Mapping, Optional, Protocol
from uuid import UUID

from tagwire.application.introspection import (
    classify,
    is_assignable,
    is_capability_type,
    is_mapping_type,
    is_record_instance,
    is_record_type,
    is_writable,
    is_zero,
    is_zero_record,
    mapping_factory,
    record_fields,
    satisfies,
    unwrap_optional,
)
from tagwire.domain import FieldKind

if TYPE_CHECKING:
    from fractions import Fraction


class Greeter(Protocol):
    def greet(self) -> str: ...


class Named(Protocol):
    name: str


class Shape(ABC):
    @abstractmethod
    def area(self) -> float: ...


class Square(Shape):
    def area(self) -> float:
        return 1.0


class Plain:
    def greet(self) -> str:
        return "hi"


@dataclass
class Person:
    name: str = ""


class Color:
    pass


@dataclass
class Inner:
    color: Annotated[Optional[Color], 'inject:""'] = None


@dataclass
class Outer:
    a: Annotated[Optional[Plain], 'inject:""'] = None
    inner: Annotated[Inner, 'inject:"inline"'] = field(default_factory=Inner)
    greeter: Annotated[Optional[Greeter], 'inject:""'] = None
    table: Annotated[Optional[Dict[str, int]], 'inject:"private"'] = None
    count: int = 0
    label: Annotated[str, "json:\"label\""] = ""
    joined: Annotated[Optional[Plain], 'json:"x"', 'inject:"foo"'] = None
    kind: ClassVar[str] = "outer"


@dataclass
class Child(Outer):
    extra: Annotated[Optional[Color], 'inject:""'] = None


@dataclass(frozen=True)
class Frozen:
    a: Annotated[Optional[Plain], 'inject:""'] = None


@dataclass
class Invoice:
    a: Annotated[Optional[Plain], 'inject:""'] = None
    ratio: "Optional[Fraction]" = None

    def greet(self) -> str:
        return "invoice"


@dataclass
class Haunted:
    ghost: Annotated[Optional["Ghost"], 'inject:""'] = None
    spirit: "Annotated[Optional[Spirit], 'inject:\"private\"']" = None
    note: "Optional[Fraction]" = None


@dataclass
class Pricing:
    rate: Annotated[Decimal, 'inject:"rate"'] = Decimal(0)
    start: Annotated[Optional[date], 'inject:"start"'] = None


@dataclass
class Empty:
    pass


class Marker:
    pass


class TestTypeClassification:
    """Test cases for record, capability and mapping detection."""

    def test_record_types(self):
        """Test that user classes are records and builtins are not."""
        assert is_record_type(Plain)
        assert is_record_type(Person)
        assert not is_record_type(int)
        assert not is_record_type(str)
        assert not is_record_type(dict)
        assert not is_record_type(Greeter)
        assert not is_record_type(Shape)
        assert not is_record_type(Optional[Plain])

    def test_capability_types(self):
        """Test that protocols and abstract classes are capabilities."""
        assert is_capability_type(Greeter)
        assert is_capability_type(Shape)
        assert not is_capability_type(Square)
        assert not is_capability_type(Plain)
        assert not is_capability_type(Mapping)

    def test_mapping_types(self):
        """Test mapping detection across typing forms."""
        assert is_mapping_type(dict)
        assert is_mapping_type(Dict[str, int])
        assert is_mapping_type(Mapping[str, int])
        assert is_mapping_type(OrderedDict)
        assert not is_mapping_type(List[int])
        assert not is_mapping_type(Plain)

    def test_record_instances(self):
        """Test that only instances of records qualify."""
        assert is_record_instance(Plain())
        assert not is_record_instance(42)
        assert not is_record_instance(None)
        assert not is_record_instance(Plain)
        assert not is_record_instance({"a": 1})
        assert not is_record_instance(len)

    def test_unwrap_optional(self):
        """Test Optional unwrapping for both spellings."""
        assert unwrap_optional(Optional[Plain]) == (Plain, True)
        assert unwrap_optional(Plain | None) == (Plain, True)
        assert unwrap_optional(Plain) == (Plain, False)

    def test_classify(self):
        """Test field kind classification."""
        assert classify(Plain, True) == FieldKind.RECORD_REFERENCE
        assert classify(Plain, False) == FieldKind.RECORD_VALUE
        assert classify(Greeter, True) == FieldKind.CAPABILITY
        assert classify(Dict[str, int], True) == FieldKind.MAPPING
        assert classify(int, False) == FieldKind.OTHER

    def test_library_classes_are_not_records(self):
        """Test that standard library value classes are not records."""
        for library_type in (Decimal, date, UUID, Path, OrderedDict):
            assert not is_record_type(library_type)
        assert not is_record_instance(Decimal("1"))
        assert not is_record_instance(date(2024, 5, 1))
        assert classify(Decimal, False) == FieldKind.OTHER
        assert classify(date, True) == FieldKind.OTHER


class TestSatisfies:
    """Test cases for capability satisfaction."""

    def test_protocol_structural(self):
        """Test that a class with the right methods satisfies a protocol."""
        assert satisfies(Plain, Greeter)
        assert not satisfies(Color, Greeter)

    def test_protocol_data_member(self):
        """Test that dataclass fields satisfy protocol attributes."""
        assert satisfies(Person, Named)
        assert not satisfies(Plain, Named)

    def test_abstract_base_class(self):
        """Test that ABCs need real subclassing."""
        assert satisfies(Square, Shape)
        assert not satisfies(Plain, Shape)

    def test_is_assignable(self):
        """Test identity for records and subclassing for other types."""
        assert is_assignable(Plain, Plain)
        assert not is_assignable(Color, Plain)
        assert is_assignable(Plain, Greeter)
        assert is_assignable(int, int)
        assert is_assignable(bool, int)
        assert is_assignable(dict, Dict[str, int])
        assert is_assignable(Color, Any)
        assert not is_assignable(str, int)

    def test_record_subclass_is_not_assignable(self):
        """Test that concrete record matching does not accept subclasses."""
        assert not is_assignable(Child, Outer)


class TestRecordFields:
    """Test cases for record_fields."""

    def test_fields_in_declaration_order(self):
        """Test that every instance field is listed in order, skipping ClassVars."""
        names = [spec.name for spec in record_fields(Outer)]
        assert names == ["a", "inner", "greeter", "table", "count", "label", "joined"]

    def test_base_fields_come_first(self):
        """Test that inherited fields precede the subclass's own."""
        names = [spec.name for spec in record_fields(Child)]
        assert names[0] == "a"
        assert names[-1] == "extra"

    def test_field_specs(self):
        """Test the details of individual field specs."""
        specs = {spec.name: spec for spec in record_fields(Outer)}

        assert specs["a"].kind == FieldKind.RECORD_REFERENCE
        assert specs["a"].target_type is Plain
        assert specs["a"].raw_tag == 'inject:""'
        assert specs["a"].owner_type is Outer

        assert specs["inner"].kind == FieldKind.RECORD_VALUE
        assert specs["greeter"].kind == FieldKind.CAPABILITY
        assert specs["table"].kind == FieldKind.MAPPING
        assert specs["count"].raw_tag is None
        assert specs["count"].kind == FieldKind.OTHER

    def test_string_metadata_is_joined(self):
        """Test that several string metadata items form one tag."""
        specs = {spec.name: spec for spec in record_fields(Outer)}
        assert specs["joined"].raw_tag == 'json:"x" inject:"foo"'

    def test_untagged_unresolvable_hints_are_skipped(self):
        """Test that hints naming TYPE_CHECKING-only imports do not break inspection."""
        assert [spec.name for spec in record_fields(Invoice)] == ["a"]
        assert record_fields(Invoice)[0].resolved

    def test_tagged_unresolvable_hints_are_kept(self):
        """Test that tagged fields with unresolvable hints are reported as unresolved."""
        specs = {spec.name: spec for spec in record_fields(Haunted)}

        assert set(specs) == {"ghost", "spirit"}
        assert not specs["ghost"].resolved
        assert specs["ghost"].raw_tag == 'inject:""'
        assert specs["ghost"].kind == FieldKind.OTHER
        assert specs["spirit"].raw_tag == 'inject:"private"'
        assert specs["spirit"].annotation == "Annotated[Optional[Spirit], 'inject:\"private\"']"

    def test_unresolvable_candidate_still_satisfies(self):
        """Test that capability matching works on classes with unresolvable hints."""
        assert satisfies(Invoice, Greeter)
        assert not satisfies(Haunted, Greeter)

    def test_fields_are_cached(self):
        """Test that field specs are computed once per type."""
        assert record_fields(Outer) is record_fields(Outer)

    def test_field_cache_is_bounded(self):
        """Test that inspected classes do not accumulate without limit."""
        assert record_fields.cache_info().maxsize is not None


class TestWritableAndZero:
    """Test cases for is_writable and the zero tests."""

    def test_underscore_field_is_not_writable(self):
        """Test that private-by-convention fields are read only."""

        class Hidden:
            _a: Annotated[Optional[Plain], 'inject:""'] = None

        (spec,) = record_fields(Hidden)
        assert not is_writable(spec)

    def test_frozen_dataclass_is_not_writable(self):
        """Test that frozen dataclass fields are read only."""
        (spec,) = record_fields(Frozen)
        assert not is_writable(spec)

    def test_regular_field_is_writable(self):
        """Test that ordinary fields are writable."""
        assert all(is_writable(spec) for spec in record_fields(Outer))

    def test_references_are_zero_only_when_none(self):
        """Test the reference zero test."""
        specs = {spec.name: spec for spec in record_fields(Outer)}
        assert is_zero(None, specs["a"])
        assert not is_zero(Plain(), specs["a"])
        assert is_zero(None, specs["table"])
        assert not is_zero({}, specs["table"])

    def test_scalars_compare_to_their_zero(self):
        """Test the structural zero test for scalars."""
        specs = {spec.name: spec for spec in record_fields(Outer)}
        assert is_zero(0, specs["count"])
        assert not is_zero(3, specs["count"])
        assert is_zero("", specs["label"])
        assert not is_zero("x", specs["label"])

    def test_nested_record_zero(self):
        """Test that nested records are zero until one of their fields is set."""
        specs = {spec.name: spec for spec in record_fields(Outer)}
        assert is_zero(Inner(), specs["inner"])
        assert not is_zero(Inner(color=Color()), specs["inner"])
        assert is_zero_record(Inner())

    def test_library_values_compare_to_their_zero(self):
        """Test that set library values are never zero."""
        specs = {spec.name: spec for spec in record_fields(Pricing)}

        assert not is_zero(Decimal("1.5"), specs["rate"])
        assert is_zero(Decimal(0), specs["rate"])
        assert not is_zero(date(2024, 5, 1), specs["start"])
        assert is_zero(None, specs["start"])

    def test_records_without_fields(self):
        """Test that records without annotated fields compare to a fresh instance."""
        assert is_zero_record(Empty())
        assert not is_zero_record(Marker())

    def test_mapping_factory(self):
        """Test the classes used for new mappings."""
        assert mapping_factory(Dict[str, int]) is dict
        assert mapping_factory(Mapping[str, int]) is dict
        assert mapping_factory(OrderedDict) is OrderedDict
