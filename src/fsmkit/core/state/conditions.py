"""Condition registry for state machine transitions.

Conditions are boolean predicates over the context that decide whether a
transition may be taken. They must not mutate the context:

```python
registry.register("has_work", lambda ctx: bool(ctx["queue"]))
```
"""
from __future__ import annotations

from typing import Any

from .handlers.registries import HandlerRegistry
from .transition import Condition


class ConditionRegistry(HandlerRegistry[Condition]):
    """Registry of condition predicates keyed by name."""

    @property
    def kind(self) -> str:
        return "condition"

    def check(self, name: str, context: Any) -> bool:
        """Evaluate a registered condition against ``context``.

        Raises:
            ConfigurationError: If the condition is not registered
        """
        return bool(self.resolve(name)(context))


__all__ = ["ConditionRegistry"]
