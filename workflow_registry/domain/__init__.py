# Domain models
from .entities import (
    State,
    WorkflowAction,
    WorkflowDefinition,
    WorkflowInstance,
    HistoryEntry,
)
from .state_machine import (
    InitialStateError, InstanceStateMachine, InvalidTransitionError
)

__all__ = [
    "State",
    "WorkflowAction",
    "WorkflowDefinition",
    "WorkflowInstance",
    "HistoryEntry",
    "InitialStateError",
    "InstanceStateMachine",
    "InvalidTransitionError",
]
