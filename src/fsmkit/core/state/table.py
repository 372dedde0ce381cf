"""Transition table: all transitions grouped by source state.

Within one source group, transitions keep the order in which they were
declared. That order is the tie-break used during evaluation.
"""
from __future__ import annotations

from collections import deque
from types import MappingProxyType
from typing import Dict, Generic, Iterable, Iterator, List, Optional, Set, Tuple

from .states import S
from .transition import C, Transition

_EMPTY: Tuple[Transition, ...] = ()


class TransitionTable(Generic[S, C]):
    """Immutable, declaration-ordered collection of transitions."""

    def __init__(self, transitions: Iterable[Transition[S, C]] = ()) -> None:
        ordered: List[Transition[S, C]] = []
        grouped: Dict[S, List[Transition[S, C]]] = {}
        for transition in transitions:
            if not isinstance(transition, Transition):
                raise TypeError(f"expected Transition, got {type(transition).__name__}")
            ordered.append(transition)
            grouped.setdefault(transition.from_state, []).append(transition)
        self._transitions: Tuple[Transition[S, C], ...] = tuple(ordered)
        self._by_state = MappingProxyType({k: tuple(v) for k, v in grouped.items()})

    def from_state(self, state: S) -> Tuple[Transition[S, C], ...]:
        """Return transitions leaving ``state`` in declaration order."""
        return self._by_state.get(state, _EMPTY)

    def source_states(self) -> List[S]:
        return list(self._by_state)

    def states(self) -> Set[S]:
        """Return every state mentioned as a source or destination."""
        found: Set[S] = set()
        for t in self._transitions:
            found.add(t.from_state)
            found.add(t.to_state)
        return found

    def is_terminal(self, state: S) -> bool:
        return not self.from_state(state)

    def allowed_targets(self, state: S) -> List[S]:
        """Distinct destinations reachable in one step, in declaration order."""
        targets: List[S] = []
        for t in self.from_state(state):
            if t.to_state not in targets:
                targets.append(t.to_state)
        return targets

    def transitions_map(self) -> Dict[S, List[S]]:
        """Return a simple from->to adjacency map."""
        return {state: self.allowed_targets(state) for state in self._by_state}

    def shortest_path(self, start: S, goal: S) -> Optional[List[S]]:
        """Return the shortest state path from start to goal (inclusive), or None."""
        if start == goal:
            return [start]

        graph = self.transitions_map()
        queue = deque([start])
        prev: Dict[S, Optional[S]] = {start: None}

        while queue:
            current = queue.popleft()
            for nxt in graph.get(current, []):
                if nxt in prev:
                    continue
                prev[nxt] = current
                if nxt == goal:
                    path: List[S] = [goal]
                    cur = prev[goal]
                    while cur is not None:
                        path.append(cur)
                        cur = prev[cur]
                    return list(reversed(path))
                queue.append(nxt)

        return None

    def unreachable_from(self, initial: S) -> Set[S]:
        """States in the table that no path from ``initial`` reaches."""
        graph = self.transitions_map()
        seen: Set[S] = {initial}
        queue = deque([initial])
        while queue:
            for nxt in graph.get(queue.popleft(), []):
                if nxt not in seen:
                    seen.add(nxt)
                    queue.append(nxt)
        return self.states() - seen

    def __iter__(self) -> Iterator[Transition[S, C]]:
        return iter(self._transitions)

    def __len__(self) -> int:
        return len(self._transitions)

    def __contains__(self, transition: object) -> bool:
        return transition in self._transitions

    def __repr__(self) -> str:
        return f"TransitionTable({len(self._transitions)} transitions, {len(self._by_state)} source states)"


__all__ = ["TransitionTable"]
