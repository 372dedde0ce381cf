"""
fsmkit - finite state machine building blocks

Transitions between enumerated states, guarded by named conditions and
optionally paired with side effects, evaluated deterministically in
declaration order.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
