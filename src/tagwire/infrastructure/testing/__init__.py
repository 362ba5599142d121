"""
Testing utilities module.

Provides helpers for testing applications wired with tagwire.
"""

from .utilities import TestObjectGraph, create_mock_graph

__all__ = [
    "TestObjectGraph",
    "create_mock_graph",
]
