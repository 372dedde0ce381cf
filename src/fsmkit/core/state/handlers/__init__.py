"""State machine handler infrastructure.

This package intentionally contains only the *infrastructure*:
- `registries.py`: the named handler registry base class

Concrete registries live in `fsmkit.core.state.conditions` and
`fsmkit.core.state.side_effects`.
"""
from .registries import HandlerRegistry

__all__ = ["HandlerRegistry"]
