"""Schema inference."""

from .schema_inferer import SchemaInferer

__all__ = ['SchemaInferer']
