"""
Validation for tool parameters.

This package is the single source of truth for:
- The parameter schema model typed tools declare
- Checking those schemas at registration time
- Checking invocation arguments before a tool runs
"""

from .schemas import PROPERTY_TYPES, Property, ToolSchema, validate_value

__all__ = ["PROPERTY_TYPES", "Property", "ToolSchema", "validate_value"]
