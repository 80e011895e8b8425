"""
Unit tests for the definition service.
"""

import pytest

from workflow_registry.services.errors import (
    ConflictError, NotFoundError, InvalidOperationError
)


class TestDefinitionService:
    """Tests for DefinitionService."""

    @pytest.fixture
    def catalog(self, engine):
        """Engine with catalog entries but no definitions."""
        engine.catalog.create_state("start", "Start", is_initial=True)
        engine.catalog.create_state("other_start", "Other start", is_initial=True)
        engine.catalog.create_state("middle", "Middle")
        engine.catalog.create_state("end", "End", is_final=True)
        engine.catalog.create_action("advance", "Advance", ["start"], "middle")
        engine.catalog.create_action("finish", "Finish", ["middle"], "end")
        return engine

    @pytest.fixture
    def service(self, catalog):
        catalog.definitions.create_definition("flow", "A flow")
        return catalog.definitions

    def test_create_definition(self, engine):
        """Test definitions start empty."""
        definition = engine.definitions.create_definition("flow", "A flow")

        assert definition.id == "flow"
        assert definition.description == "A flow"
        assert definition.states == []
        assert definition.actions == []

    def test_create_definition_duplicate(self, engine):
        """Test duplicate definition id raises Conflict."""
        engine.definitions.create_definition("flow", "A flow")

        with pytest.raises(ConflictError, match="Duplicate"):
            engine.definitions.create_definition("flow", "Again")

    def test_get_definition_not_found(self, engine):
        """Test getting a non-existent definition."""
        with pytest.raises(NotFoundError):
            engine.definitions.get_definition("missing")

    def test_add_state(self, service):
        """Test adding a catalog state."""
        state = service.add_state("flow", "start")

        assert state.id == "start"
        assert [s.id for s in service.get_definition("flow").states] == ["start"]

    def test_add_state_missing_definition(self, service):
        """Test adding to a missing definition raises NotFound."""
        with pytest.raises(NotFoundError, match="definition"):
            service.add_state("missing", "start")

    def test_add_state_missing_catalog_state(self, service):
        """Test adding an unknown state raises NotFound."""
        with pytest.raises(NotFoundError, match="global state list"):
            service.add_state("flow", "ghost")

    def test_add_state_twice(self, service):
        """Test the same state cannot be added twice."""
        service.add_state("flow", "middle")

        with pytest.raises(ConflictError):
            service.add_state("flow", "middle")

    def test_second_initial_state_rejected(self, service):
        """Test a definition keeps a single initial state."""
        service.add_state("flow", "start")

        with pytest.raises(InvalidOperationError, match="one initial state"):
            service.add_state("flow", "other_start")

        initial = [s for s in service.get_definition("flow").states if s.is_initial]
        assert len(initial) == 1

    def test_duplicate_initial_reported_as_conflict(self, service):
        """Test re-adding the initial state is a Conflict, not InvalidOperation."""
        service.add_state("flow", "start")

        with pytest.raises(ConflictError):
            service.add_state("flow", "start")

    def test_same_state_in_two_definitions(self, service):
        """Test a catalog state can be reused across definitions."""
        service.create_definition("flow2", "Another")

        service.add_state("flow", "start")
        service.add_state("flow2", "start")

        assert service.get_definition("flow2").states[0].id == "start"

    def test_add_action(self, service):
        """Test adding an action whose states are all present."""
        service.add_state("flow", "start")
        service.add_state("flow", "middle")

        action = service.add_action("flow", "advance")

        assert action.id == "advance"
        assert [a.id for a in service.get_definition("flow").actions] == ["advance"]

    def test_add_action_missing_definition(self, service):
        with pytest.raises(NotFoundError):
            service.add_action("missing", "advance")

    def test_add_action_missing_catalog_action(self, service):
        with pytest.raises(NotFoundError, match="'ghost' not found"):
            service.add_action("flow", "ghost")

    def test_add_action_twice(self, service):
        """Test the same action cannot be added twice."""
        service.add_state("flow", "start")
        service.add_state("flow", "middle")
        service.add_action("flow", "advance")

        with pytest.raises(ConflictError):
            service.add_action("flow", "advance")

    def test_add_action_missing_to_state(self, service):
        """Test the target state must be in the definition."""
        service.add_state("flow", "start")

        with pytest.raises(InvalidOperationError, match="ToState"):
            service.add_action("flow", "advance")

    def test_add_action_missing_from_state(self, service):
        """Test every source state must be in the definition."""
        service.add_state("flow", "middle")

        with pytest.raises(InvalidOperationError, match="FromState 'start'"):
            service.add_action("flow", "advance")

    def test_to_state_checked_before_from_states(self, service):
        """Test a missing target is reported before a missing source."""
        with pytest.raises(InvalidOperationError, match="ToState"):
            service.add_action("flow", "advance")

    def test_rejected_action_not_added(self, service):
        """Test a failed add leaves the definition unchanged."""
        with pytest.raises(InvalidOperationError):
            service.add_action("flow", "advance")

        assert service.get_definition("flow").actions == []

    def test_returned_definition_is_a_snapshot(self, service):
        """Test callers cannot mutate the stored definition."""
        service.add_state("flow", "start")

        snapshot = service.get_definition("flow")
        snapshot.states.clear()
        snapshot.description = "changed"

        stored = service.get_definition("flow")
        assert [s.id for s in stored.states] == ["start"]
        assert stored.description == "A flow"

    def test_list_definitions(self, service):
        service.create_definition("flow2", "Another")

        assert [d.id for d in service.list_definitions()] == ["flow", "flow2"]


class TestBuildDefinition:
    """Tests for DefinitionService.build_definition."""

    @pytest.fixture
    def service(self, review_flow):
        return review_flow.definitions

    def test_build(self, service):
        """Test states and actions are added in the given order."""
        definition = service.build_definition(
            "built", "Built in one go", ["S0", "S1", "S2"], ["A", "B"]
        )

        assert [s.id for s in definition.states] == ["S0", "S1", "S2"]
        assert [a.id for a in definition.actions] == ["A", "B"]
        assert service.get_definition("built") == definition

    def test_build_duplicate_id(self, service):
        """Test building over an existing definition raises Conflict."""
        with pytest.raises(ConflictError):
            service.build_definition("D", "", [], [])

    def test_build_is_all_or_nothing(self, service):
        """Test a failing item leaves no definition behind."""
        with pytest.raises(InvalidOperationError):
            service.build_definition("partial", "", ["S0", "S1"], ["A", "B"])

        with pytest.raises(NotFoundError):
            service.get_definition("partial")

    def test_build_unknown_state(self, service):
        with pytest.raises(NotFoundError):
            service.build_definition("bad", "", ["S0", "ghost"], [])

    def test_build_duplicate_state(self, service):
        with pytest.raises(ConflictError):
            service.build_definition("bad", "", ["S0", "S0"], [])
