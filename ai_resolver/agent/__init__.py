"""Tool execution engine: capabilities, registry, router and middleware."""
