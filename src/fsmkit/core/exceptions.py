from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

if TYPE_CHECKING:
    from fsmkit.core.state.result import EvaluationResult
    from fsmkit.core.state.transition import Transition


class FsmError(Exception):
    """Base exception for fsmkit."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigurationError(FsmError, ValueError):
    """Raised when a machine definition cannot be built.

    Covers unregistered condition/side-effect names, invalid states,
    non-callable handlers and malformed definition documents. Always raised
    before any evaluation takes place.
    """

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        FsmError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class EvaluationError(FsmError, RuntimeError):
    """Raised when a guard or side effect fails during ``evaluate``.

    ``state`` is the state the machine is observably in after the failure:
    the source state when a condition raised, the committed destination when
    a side effect raised. Side-effect failures never roll back.
    """

    PHASE_CONDITION = "condition"
    PHASE_SIDE_EFFECT = "side_effect"

    def __init__(
        self,
        message: str = "",
        *,
        phase: str,
        state: Any,
        transition: Optional["Transition[Any, Any]"] = None,
        result: Optional["EvaluationResult[Any, Any]"] = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        FsmError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)
        self.phase = phase
        self.state = state
        self.transition = transition
        self.result = result

    @property
    def committed(self) -> bool:
        """True when the transition was committed before the failure."""
        return self.phase == self.PHASE_SIDE_EFFECT


__all__ = [
    "FsmError",
    "ConfigurationError",
    "EvaluationError",
]
