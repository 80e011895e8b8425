"""
Repository implementations for data access.

These repositories provide a clean interface between the service layer
and the in-memory registries. Each repository owns one registry and
therefore one lock.

Accessor methods do not lock on their own: callers wrap a whole logical
operation in ``repo.read()`` or ``repo.transaction()`` and call the
accessors inside it. Rows are stored as owned objects; services hand out
copies.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Generator, List, Optional

from workflow_registry.domain import (
    State, WorkflowAction, WorkflowDefinition, WorkflowInstance
)
from .store import Registry

logger = logging.getLogger(__name__)


class BaseRepository:
    """Shared locking helpers for registry-backed repositories."""

    TABLES: tuple = ()

    def __init__(self, registry: Optional[Registry] = None):
        self.registry = registry or Registry(type(self).__name__, self.TABLES)

    @contextmanager
    def read(self) -> Generator[None, None, None]:
        with self.registry.read():
            yield

    @contextmanager
    def transaction(self) -> Generator[None, None, None]:
        with self.registry.transaction():
            yield

    def _table(self, name: str) -> dict:
        return self.registry.tables[name]

    def counts(self) -> Dict[str, int]:
        return self.registry.counts()


class CatalogRepository(BaseRepository):
    """Repository for globally registered states and actions."""

    TABLES = ("states", "actions")

    def get_state(self, state_id: str) -> Optional[State]:
        return self._table("states").get(state_id)

    def get_action(self, action_id: str) -> Optional[WorkflowAction]:
        return self._table("actions").get(action_id)

    def add_state(self, state: State) -> State:
        self._table("states")[state.id] = state
        return state

    def add_action(self, action: WorkflowAction) -> WorkflowAction:
        self._table("actions")[action.id] = action
        return action

    def list_states(self) -> List[State]:
        return list(self._table("states").values())

    def list_actions(self) -> List[WorkflowAction]:
        return list(self._table("actions").values())


class DefinitionRepository(BaseRepository):
    """Repository for workflow definitions."""

    TABLES = ("definitions",)

    def get_definition(self, definition_id: str) -> Optional[WorkflowDefinition]:
        return self._table("definitions").get(definition_id)

    def add_definition(self, definition: WorkflowDefinition) -> WorkflowDefinition:
        self._table("definitions")[definition.id] = definition
        return definition

    def list_definitions(self) -> List[WorkflowDefinition]:
        return list(self._table("definitions").values())


class InstanceRepository(BaseRepository):
    """
    Repository for workflow instances.

    Besides the registry lock, every instance gets its own lock so that
    transitions on one instance are serialized without blocking others.
    """

    TABLES = ("instances",)

    def __init__(self, registry: Optional[Registry] = None):
        super().__init__(registry)
        self._instance_locks: Dict[str, threading.Lock] = {}

    def get_instance(self, instance_id: str) -> Optional[WorkflowInstance]:
        return self._table("instances").get(instance_id)

    def add_instance(self, instance: WorkflowInstance) -> WorkflowInstance:
        self._table("instances")[instance.id] = instance
        self._instance_locks[instance.id] = threading.Lock()
        return instance

    def get_lock(self, instance_id: str) -> Optional[threading.Lock]:
        return self._instance_locks.get(instance_id)

    def list_instances(
        self,
        definition_id: Optional[str] = None,
    ) -> List[WorkflowInstance]:
        instances = self._table("instances").values()
        if definition_id is not None:
            return [i for i in instances if i.definition_id == definition_id]
        return list(instances)
