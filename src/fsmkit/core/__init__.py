"""Core fsmkit packages: error taxonomy, state machinery and utilities."""
