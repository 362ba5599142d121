"""
Application layer - Graph population and lookups.

This layer contains the tag parser, the registry, the field resolver and the
ObjectGraph facade. It depends only on the Domain layer.
"""

from .factory import InstanceFactory
from .graph import ObjectGraph, populate
from .registry import ObjectRegistry
from .resolver import FieldResolver
from .tag_parser import INJECT, INLINE, PRIVATE, extract_tag_value, format_tag, named, parse_tag

__all__ = [
    "ObjectGraph",
    "populate",
    "ObjectRegistry",
    "FieldResolver",
    "InstanceFactory",
    "parse_tag",
    "extract_tag_value",
    "format_tag",
    "named",
    "INJECT",
    "PRIVATE",
    "INLINE",
]
