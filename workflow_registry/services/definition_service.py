"""
Definition service for composing catalog entries into workflow graphs.

Definitions are created empty and only ever grow. Adding a state or an
action copies the catalog record into the definition.
"""

import logging
from typing import List

from workflow_registry.domain import State, WorkflowAction, WorkflowDefinition
from workflow_registry.persistence import CatalogRepository, DefinitionRepository
from .errors import ConflictError, NotFoundError, InvalidOperationError

logger = logging.getLogger(__name__)


class DefinitionService:
    """
    Service for managing workflow definitions.

    Enforces the graph invariants: a single initial state per definition,
    and actions that only reference states already in the definition.
    Operations hold the definitions lock and, while it is held, take the
    catalog lock for lookups.
    """

    def __init__(
        self,
        definition_repo: DefinitionRepository,
        catalog_repo: CatalogRepository,
    ):
        self.definition_repo = definition_repo
        self.catalog_repo = catalog_repo

    def create_definition(self, id: str, description: str = "") -> WorkflowDefinition:
        """Create a new, empty workflow definition."""
        definition = WorkflowDefinition.create(id=id, description=description)

        with self.definition_repo.transaction():
            if self.definition_repo.get_definition(id) is not None:
                raise ConflictError(f"Duplicate workflow ID '{id}'.")
            self.definition_repo.add_definition(definition)

        logger.info(f"Created workflow definition '{id}'")
        return definition.copy()

    def get_definition(self, definition_id: str) -> WorkflowDefinition:
        """Get a workflow definition by ID."""
        with self.definition_repo.read():
            return self._get_definition(definition_id).copy()

    def list_definitions(self) -> List[WorkflowDefinition]:
        with self.definition_repo.read():
            return [d.copy() for d in self.definition_repo.list_definitions()]

    def add_state(self, definition_id: str, state_id: str) -> State:
        """
        Add a catalog state to a definition.

        Only one initial state is allowed per definition.
        """
        with self.definition_repo.transaction():
            definition = self._get_definition(definition_id)
            with self.catalog_repo.read():
                stored = self._add_state_to(definition, state_id)

        logger.info(f"Added state '{state_id}' to workflow '{definition_id}'")
        return stored.copy()

    def add_action(self, definition_id: str, action_id: str) -> WorkflowAction:
        """
        Add a catalog action to a definition.

        The action's target and every source state must already be part of
        the definition.
        """
        with self.definition_repo.transaction():
            definition = self._get_definition(definition_id)
            with self.catalog_repo.read():
                stored = self._add_action_to(definition, action_id)

        logger.info(f"Added action '{action_id}' to workflow '{definition_id}'")
        return stored.copy()

    def build_definition(
        self,
        id: str,
        description: str,
        state_ids: List[str],
        action_ids: List[str],
    ) -> WorkflowDefinition:
        """
        Create a definition and populate it in one step.

        States are added first, then actions, with the same rules as
        add_state and add_action. Nothing is registered unless every
        addition succeeds.
        """
        definition = WorkflowDefinition.create(id=id, description=description)

        with self.definition_repo.transaction():
            if self.definition_repo.get_definition(id) is not None:
                raise ConflictError(f"Duplicate workflow ID '{id}'.")

            with self.catalog_repo.read():
                for state_id in state_ids:
                    self._add_state_to(definition, state_id)
                for action_id in action_ids:
                    self._add_action_to(definition, action_id)

            self.definition_repo.add_definition(definition)

        logger.info(
            f"Built workflow definition '{id}' with {len(definition.states)} states "
            f"and {len(definition.actions)} actions"
        )
        return definition.copy()

    def _get_definition(self, definition_id: str) -> WorkflowDefinition:
        definition = self.definition_repo.get_definition(definition_id)
        if definition is None:
            raise NotFoundError(f"Workflow definition '{definition_id}' not found.")
        return definition

    def _add_state_to(self, definition: WorkflowDefinition, state_id: str) -> State:
        # Caller holds the definitions write lock and the catalog read lock.
        state = self.catalog_repo.get_state(state_id)
        if state is None:
            raise NotFoundError(f"State ID '{state_id}' not found in global state list.")

        if definition.has_state(state.id):
            raise ConflictError(
                f"State '{state.id}' already exists in workflow '{definition.id}'."
            )

        if state.is_initial and definition.has_initial_state:
            raise InvalidOperationError(
                f"Workflow '{definition.id}' can only have one initial state."
            )

        return definition.add_state(state)

    def _add_action_to(
        self,
        definition: WorkflowDefinition,
        action_id: str,
    ) -> WorkflowAction:
        # Caller holds the definitions write lock and the catalog read lock.
        action = self.catalog_repo.get_action(action_id)
        if action is None:
            raise NotFoundError(f"Action with ID '{action_id}' not found.")

        if definition.has_action(action.id):
            raise ConflictError(
                f"Action '{action.id}' already exists in workflow '{definition.id}'."
            )

        if not definition.has_state(action.to_state):
            raise InvalidOperationError(
                f"The action's ToState '{action.to_state}' must exist in the workflow."
            )

        for from_state_id in action.from_states:
            if not definition.has_state(from_state_id):
                raise InvalidOperationError(
                    f"The action's FromState '{from_state_id}' does not exist "
                    "in the workflow."
                )

        return definition.add_action(action)
