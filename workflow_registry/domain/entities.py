"""
Domain entities for finite-state workflows.

States and actions are reusable templates registered in the catalog.
Definitions compose copies of them into a closed graph, and instances
run against a definition. These objects know nothing about locking or
storage.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import List, Optional


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class State:
    """
    A reusable workflow state.

    A state may be initial, final, both, or neither; the catalog does not
    validate the combination.
    """
    id: str
    name: str
    is_initial: bool = False
    is_final: bool = False
    enabled: bool = True

    def copy(self) -> "State":
        return replace(self)


@dataclass
class WorkflowAction:
    """
    A reusable transition between states.

    An action moves an instance from any of ``from_states`` to ``to_state``.
    """
    id: str
    name: str
    from_states: List[str] = field(default_factory=list)
    to_state: str = ""
    enabled: bool = True

    def copy(self) -> "WorkflowAction":
        return replace(self, from_states=list(self.from_states))


@dataclass
class WorkflowDefinition:
    """
    A named graph of states connected by actions.

    States and actions are owned copies, kept in insertion order and
    unique by id. At most one state is initial, and every action only
    references states of this definition.
    """
    id: str
    description: str
    states: List[State] = field(default_factory=list)
    actions: List[WorkflowAction] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(cls, id: str, description: str = "") -> "WorkflowDefinition":
        """Factory method to create an empty definition."""
        return cls(id=id, description=description, created_at=utcnow())

    def get_state(self, state_id: str) -> Optional[State]:
        for state in self.states:
            if state.id == state_id:
                return state
        return None

    def get_action(self, action_id: str) -> Optional[WorkflowAction]:
        for action in self.actions:
            if action.id == action_id:
                return action
        return None

    def has_state(self, state_id: str) -> bool:
        return self.get_state(state_id) is not None

    def has_action(self, action_id: str) -> bool:
        return self.get_action(action_id) is not None

    @property
    def has_initial_state(self) -> bool:
        return any(s.is_initial for s in self.states)

    def startable_states(self) -> List[State]:
        """States an instance could start in (initial and enabled)."""
        return [s for s in self.states if s.is_initial and s.enabled]

    def add_state(self, state: State) -> State:
        """Append a copy of ``state`` and return the stored copy."""
        stored = state.copy()
        self.states.append(stored)
        return stored

    def add_action(self, action: WorkflowAction) -> WorkflowAction:
        """Append a copy of ``action`` and return the stored copy."""
        stored = action.copy()
        self.actions.append(stored)
        return stored

    def copy(self) -> "WorkflowDefinition":
        return replace(
            self,
            states=[s.copy() for s in self.states],
            actions=[a.copy() for a in self.actions],
        )


@dataclass(frozen=True)
class HistoryEntry:
    """One successful transition of an instance."""
    action_id: str
    timestamp: datetime


@dataclass
class WorkflowInstance:
    """
    A single running execution of a workflow definition.

    Only ``current_state_id`` and ``history`` ever change, and history is
    append-only.
    """
    id: str
    definition_id: str
    current_state_id: str
    history: List[HistoryEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def create(
        cls,
        id: str,
        definition_id: str,
        initial_state_id: str,
    ) -> "WorkflowInstance":
        """Factory method to create an instance at its initial state."""
        return cls(
            id=id,
            definition_id=definition_id,
            current_state_id=initial_state_id,
            history=[],
            created_at=utcnow(),
        )

    @property
    def last_transition_at(self) -> Optional[datetime]:
        return self.history[-1].timestamp if self.history else None

    def record_transition(
        self,
        action_id: str,
        to_state_id: str,
        timestamp: Optional[datetime] = None,
    ) -> HistoryEntry:
        """
        Move to ``to_state_id`` and append a history entry.

        The recorded timestamp never goes below the previous entry's, so
        history stays ordered even if the wall clock steps backwards.
        """
        timestamp = timestamp or utcnow()
        last = self.last_transition_at
        if last is not None and timestamp < last:
            timestamp = last

        entry = HistoryEntry(action_id=action_id, timestamp=timestamp)
        self.current_state_id = to_state_id
        self.history.append(entry)
        return entry

    def copy(self) -> "WorkflowInstance":
        return replace(self, history=list(self.history))
