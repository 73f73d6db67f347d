"""Tool base class, invocation types and the built-in tools."""
