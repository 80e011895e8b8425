"""
Instance service for running workflow instances.

Handles instance creation, action execution and history queries.
"""

import logging
import threading
from typing import List, Optional, Tuple

from workflow_registry.domain import (
    InitialStateError, InstanceStateMachine, InvalidTransitionError, WorkflowAction,
    WorkflowDefinition, WorkflowInstance,
)
from workflow_registry.persistence import DefinitionRepository, InstanceRepository
from .errors import ConflictError, NotFoundError, InvalidOperationError

logger = logging.getLogger(__name__)


class InstanceService:
    """
    Service for managing workflow instances.

    Transitions on one instance are serialized by that instance's lock;
    the read-validate-write sequence of execute_action never interleaves
    with another call on the same instance.
    """

    def __init__(
        self,
        instance_repo: InstanceRepository,
        definition_repo: DefinitionRepository,
    ):
        self.instance_repo = instance_repo
        self.definition_repo = definition_repo

    def create_instance(self, definition_id: str, instance_id: str) -> WorkflowInstance:
        """
        Start a new instance of a workflow definition.

        The instance begins in the definition's enabled initial state with
        an empty history.
        """
        with self.instance_repo.transaction():
            with self.definition_repo.read():
                definition = self._get_definition(definition_id)

                if self.instance_repo.get_instance(instance_id) is not None:
                    raise ConflictError(f"Instance ID '{instance_id}' already exists.")

                try:
                    initial = InstanceStateMachine(definition).initial_state()
                except InitialStateError as e:
                    raise InvalidOperationError(str(e)) from e

            instance = WorkflowInstance.create(
                id=instance_id,
                definition_id=definition_id,
                initial_state_id=initial.id,
            )
            self.instance_repo.add_instance(instance)

        logger.info(
            f"Created instance '{instance_id}' of workflow '{definition_id}' "
            f"at state '{initial.id}'"
        )
        return instance.copy()

    def execute_action(self, instance_id: str, action_id: str) -> WorkflowInstance:
        """
        Apply an action to an instance.

        On success the instance moves to the action's target state and one
        history entry is appended. On failure nothing changes.
        """
        instance, lock = self._get_instance_and_lock(instance_id)

        with lock:
            with self.definition_repo.read():
                definition = self.definition_repo.get_definition(instance.definition_id)
                if definition is None:
                    raise NotFoundError(
                        f"Workflow definition '{instance.definition_id}' missing."
                    )

                machine = InstanceStateMachine(definition)
                try:
                    action = machine.validate_transition(
                        instance.current_state_id, action_id
                    )
                except InvalidTransitionError as e:
                    logger.warning(
                        f"Rejected action '{action_id}' on instance '{instance_id}': {e}"
                    )
                    raise InvalidOperationError(str(e)) from e

            previous_state_id = instance.current_state_id
            instance.record_transition(action.id, action.to_state)
            snapshot = instance.copy()

        logger.info(
            f"Instance '{instance_id}': {previous_state_id} → {action.to_state} "
            f"via '{action.id}'"
        )
        return snapshot

    def get_instance(self, instance_id: str) -> WorkflowInstance:
        """Get an instance by ID, including its full history."""
        instance, lock = self._get_instance_and_lock(instance_id)
        with lock:
            return instance.copy()

    def list_instances(
        self,
        definition_id: Optional[str] = None,
    ) -> List[WorkflowInstance]:
        """List instances with an optional definition filter."""
        with self.instance_repo.read():
            rows = [
                (instance, self.instance_repo.get_lock(instance.id))
                for instance in self.instance_repo.list_instances(definition_id)
            ]

        snapshots = []
        for instance, lock in rows:
            with lock:
                snapshots.append(instance.copy())
        return snapshots

    def get_available_actions(self, instance_id: str) -> List[WorkflowAction]:
        """Get the actions that can currently be executed on an instance."""
        instance, lock = self._get_instance_and_lock(instance_id)

        with lock:
            with self.definition_repo.read():
                definition = self.definition_repo.get_definition(instance.definition_id)
                if definition is None:
                    raise NotFoundError(
                        f"Workflow definition '{instance.definition_id}' missing."
                    )
                return InstanceStateMachine(definition).get_valid_actions(
                    instance.current_state_id
                )

    def _get_definition(self, definition_id: str) -> WorkflowDefinition:
        definition = self.definition_repo.get_definition(definition_id)
        if definition is None:
            raise NotFoundError(f"Workflow definition '{definition_id}' not found.")
        return definition

    def _get_instance_and_lock(
        self,
        instance_id: str,
    ) -> Tuple[WorkflowInstance, threading.Lock]:
        with self.instance_repo.read():
            instance = self.instance_repo.get_instance(instance_id)
            lock = self.instance_repo.get_lock(instance_id)

        if instance is None or lock is None:
            raise NotFoundError(f"Instance '{instance_id}' not found.")
        return instance, lock
