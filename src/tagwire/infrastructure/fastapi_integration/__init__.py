"""
FastAPI integration module.

Provides helpers for handing objects of a populated graph to FastAPI endpoints.
"""

from .integration import (
    ObjectGraphMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "ObjectGraphMiddleware",
]
