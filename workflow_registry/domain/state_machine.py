"""
Transition rules for workflow instances.

Given a definition and an instance's current state, decides whether an
action may fire. The rules depend on the definition alone, so no catalog
lookups happen at transition time.
"""

from typing import List

from .entities import State, WorkflowAction, WorkflowDefinition


class InvalidTransitionError(Exception):
    """Raised when an action cannot fire from the current state."""

    def __init__(self, state_id: str, action_id: str, reason: str):
        self.state_id = state_id
        self.action_id = action_id
        self.reason = reason
        super().__init__(reason)


class InitialStateError(Exception):
    """Raised when a definition has no single enabled initial state."""

    def __init__(self, definition_id: str, candidates: List[str], reason: str):
        self.definition_id = definition_id
        self.candidates = candidates
        super().__init__(reason)


class InstanceStateMachine:
    """
    State machine for instances of a single workflow definition.

    An action fires only if all of these hold, checked in order:

    1. the action belongs to the definition and is enabled
    2. the current state is one of the action's source states
    3. the target state belongs to the definition and is enabled
    4. the current state is not final

    Terminal states are the definition's final states.
    """

    def __init__(self, definition: WorkflowDefinition):
        self.definition = definition

    def initial_state(self) -> State:
        """
        Return the state new instances start in.

        Raises InitialStateError if there is no enabled initial
        state, or if more than one exists.
        """
        candidates = self.definition.startable_states()
        if not candidates:
            raise InitialStateError(
                self.definition.id, [], "Initial state missing or disabled."
            )
        if len(candidates) > 1:
            ids = [s.id for s in candidates]
            raise InitialStateError(
                self.definition.id,
                ids,
                f"Definition has more than one initial state: {', '.join(ids)}",
            )
        return candidates[0]

    def validate_transition(self, state_id: str, action_id: str) -> WorkflowAction:
        """Validate a transition, returning the action or raising an error."""
        action = self.definition.get_action(action_id)
        if action is None or not action.enabled:
            raise InvalidTransitionError(
                state_id, action_id, f"Invalid or disabled action '{action_id}'."
            )

        if state_id not in action.from_states:
            raise InvalidTransitionError(
                state_id,
                action_id,
                f"Action '{action_id}' is not valid from state '{state_id}'.",
            )

        target = self.definition.get_state(action.to_state)
        if target is None or not target.enabled:
            raise InvalidTransitionError(
                state_id,
                action_id,
                f"Target state '{action.to_state}' is invalid or disabled.",
            )

        if self.is_terminal(state_id):
            raise InvalidTransitionError(
                state_id, action_id, f"Cannot act on final state '{state_id}'."
            )

        return action

    def can_transition(self, state_id: str, action_id: str) -> bool:
        """Check if an action may fire from a state."""
        try:
            self.validate_transition(state_id, action_id)
        except InvalidTransitionError:
            return False
        return True

    def is_terminal(self, state_id: str) -> bool:
        """
        Check if no action may fire from a state.

        A state the definition does not know is treated as terminal.
        """
        state = self.definition.get_state(state_id)
        return state is None or state.is_final

    def get_valid_actions(self, state_id: str) -> List[WorkflowAction]:
        """Get all actions that may fire from a state, in definition order."""
        return [
            action.copy()
            for action in self.definition.actions
            if self.can_transition(state_id, action.id)
        ]
