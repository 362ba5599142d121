from typing import Any, Type

from tagwire.application.introspection import mapping_factory
from tagwire.domain import InjectionError, InstantiationError


class InstanceFactory:
    """Creates the zero values the resolver fills in.

    Records are created by calling their class without arguments; mappings are
    created empty. Constructor failures surface as ``InstantiationError``.
    """

    def create_record(self, record_type: Type) -> Any:
        """Create a zero-valued instance of ``record_type``.

        Args:
            record_type: The record class to instantiate.

        Returns:
            A new instance whose tagged fields are still unset.

        Raises:
            InstantiationError: If the class cannot be called without arguments.

        Example:
            >>> factory = InstanceFactory()
            >>> factory.create_record(UserService)
        """
        try:
            return record_type()
        except InjectionError:
            raise
        except Exception as e:
            raise InstantiationError(record_type, f"Failed to create instance: {str(e)}") from e

    def create_mapping(self, mapping_type: Any) -> Any:
        """Create an empty mapping suitable for a ``mapping_type`` field."""
        factory = mapping_factory(mapping_type)
        try:
            return factory()
        except Exception as e:
            raise InstantiationError(factory, f"Failed to create mapping: {str(e)}") from e
