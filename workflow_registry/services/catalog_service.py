"""
Catalog service for reusable states and actions.

States and actions are registered once and never updated or deleted.
"""

import logging
from typing import List

from workflow_registry.domain import State, WorkflowAction
from workflow_registry.persistence import CatalogRepository
from .errors import ConflictError, NotFoundError, InvalidOperationError

logger = logging.getLogger(__name__)


class CatalogService:
    """
    Service for the global state and action catalog.

    Every operation runs under the catalog lock as a single unit.
    """

    def __init__(self, catalog_repo: CatalogRepository):
        self.catalog_repo = catalog_repo

    def create_state(
        self,
        id: str,
        name: str,
        is_initial: bool = False,
        is_final: bool = False,
        enabled: bool = True,
    ) -> State:
        """
        Register a new state.

        The initial/final combination is not validated here; a state may be
        both or neither.
        """
        state = State(
            id=id,
            name=name,
            is_initial=is_initial,
            is_final=is_final,
            enabled=enabled,
        )

        with self.catalog_repo.transaction():
            if self.catalog_repo.get_state(id) is not None:
                raise ConflictError(f"State ID '{id}' already exists.")
            self.catalog_repo.add_state(state)

        logger.info(f"Created state '{id}'")
        return state.copy()

    def create_action(
        self,
        id: str,
        name: str,
        from_states: List[str],
        to_state: str,
        enabled: bool = True,
    ) -> WorkflowAction:
        """
        Register a new action.

        Source states are checked in list order, each for existence and then
        finality, before the target state is looked up.
        """
        with self.catalog_repo.transaction():
            if self.catalog_repo.get_action(id) is not None:
                raise ConflictError(f"Action ID '{id}' already exists.")

            for from_state_id in from_states:
                state = self.catalog_repo.get_state(from_state_id)
                if state is None:
                    raise NotFoundError(f"FromState ID '{from_state_id}' not found.")
                if state.is_final:
                    raise InvalidOperationError(
                        f"FromState '{from_state_id}' is a final state "
                        "and cannot be used as a source."
                    )

            if self.catalog_repo.get_state(to_state) is None:
                raise NotFoundError(f"ToState ID '{to_state}' not found.")

            action = WorkflowAction(
                id=id,
                name=name,
                from_states=list(from_states),
                to_state=to_state,
                enabled=enabled,
            )
            self.catalog_repo.add_action(action)

        logger.info(f"Created action '{id}': {list(from_states)} -> '{to_state}'")
        return action.copy()

    def get_state(self, state_id: str) -> State:
        """Get a catalog state by ID."""
        with self.catalog_repo.read():
            state = self.catalog_repo.get_state(state_id)
            if state is None:
                raise NotFoundError(f"State '{state_id}' not found.")
            return state.copy()

    def get_action(self, action_id: str) -> WorkflowAction:
        """Get a catalog action by ID."""
        with self.catalog_repo.read():
            action = self.catalog_repo.get_action(action_id)
            if action is None:
                raise NotFoundError(f"Action '{action_id}' not found.")
            return action.copy()

    def list_states(self) -> List[State]:
        with self.catalog_repo.read():
            return [s.copy() for s in self.catalog_repo.list_states()]

    def list_actions(self) -> List[WorkflowAction]:
        with self.catalog_repo.read():
            return [a.copy() for a in self.catalog_repo.list_actions()]
