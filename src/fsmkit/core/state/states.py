"""State value helpers.

A state is any hashable value with value-based equality. Enum members are the
canonical choice; plain strings or small integers work just as well.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Hashable, Mapping, Type, TypeVar, Union

from ..exceptions import ConfigurationError

S = TypeVar("S", bound=Hashable)

StateSource = Union[Type[Enum], Mapping[str, Any]]


def ensure_state(value: S, *, role: str = "state") -> S:
    """Return ``value`` if it can be used as a state, else raise.

    Raises:
        ConfigurationError: If value is None or unhashable
    """
    if value is None:
        raise ConfigurationError(f"{role} must not be None", context={"role": role})
    try:
        hash(value)
    except TypeError as exc:
        raise ConfigurationError(
            f"{role} must be hashable, got {type(value).__name__}",
            context={"role": role},
        ) from exc
    return value


def resolve_state(states: StateSource, name: Any) -> Any:
    """Resolve an externally authored state name to a state value.

    Args:
        states: Enum subclass, or a mapping of names to state values
        name: State name (Enum member name first, then member value)

    Returns:
        The matching state value

    Raises:
        ConfigurationError: If the name matches no state, or is not a
            string or integer (YAML booleans such as a bare ``yes`` included)
    """
    if isinstance(name, bool) or not isinstance(name, (str, int)):
        raise ConfigurationError(
            f"State name must be a string or integer, got {type(name).__name__}: {name!r}",
            context={"state": repr(name)},
        )
    if isinstance(states, type) and issubclass(states, Enum):
        try:
            return states[str(name)]
        except KeyError:
            pass
        try:
            return states(name)
        except ValueError:
            pass
        known = [m.name for m in states]
    elif isinstance(states, Mapping):
        if name in states:
            return states[name]
        known = [str(k) for k in states]
    else:
        raise ConfigurationError(
            f"states must be an Enum subclass or a mapping, got {type(states).__name__}"
        )
    raise ConfigurationError(
        f"Unknown state: {name!r}. Known states: {', '.join(known)}",
        context={"state": str(name)},
    )


def state_label(state: Any) -> str:
    if isinstance(state, Enum):
        return state.name
    return str(state)


__all__ = ["S", "StateSource", "ensure_state", "resolve_state", "state_label"]
