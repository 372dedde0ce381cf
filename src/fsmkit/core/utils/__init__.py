"""Shared helpers: YAML reading and dynamic module loading."""
