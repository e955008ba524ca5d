"""Stored parameterized SQL query templates, executed against tenant databases."""
