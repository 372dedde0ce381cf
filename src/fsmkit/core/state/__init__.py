from .states import ensure_state, resolve_state, state_label
from .transition import Transition
from .handlers.registries import HandlerRegistry
from .conditions import ConditionRegistry
from .side_effects import SideEffectRegistry
from .registry import TransitionRegistry
from .table import TransitionTable
from .result import EvaluationResult
from .engine import MachineRun, StateMachine
from .builder import MachineBuilder
from .loader import build_transitions, load_handlers, load_machine, read_definition
from ..exceptions import ConfigurationError, EvaluationError, FsmError


__all__ = [
    # States
    "ensure_state",
    "resolve_state",
    "state_label",
    # Transitions and tables
    "Transition",
    "TransitionTable",
    # Registries
    "HandlerRegistry",
    "ConditionRegistry",
    "SideEffectRegistry",
    "TransitionRegistry",
    # Evaluation
    "StateMachine",
    "MachineRun",
    "EvaluationResult",
    "MachineBuilder",
    # Configuration-driven authoring
    "read_definition",
    "build_transitions",
    "load_machine",
    "load_handlers",
    # Errors
    "FsmError",
    "ConfigurationError",
    "EvaluationError",
]
