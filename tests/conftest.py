"""
Test configuration and fixtures.

Provides common fixtures for unit and integration tests.
"""

import os
import pytest

# Set test environment before importing app modules
os.environ["FLASK_ENV"] = "testing"

from workflow_registry.services import WorkflowEngine


@pytest.fixture
def engine():
    """Create an empty workflow engine."""
    return WorkflowEngine()


@pytest.fixture
def sample_state_data():
    """Sample state data for tests."""
    return {
        "id": "draft",
        "name": "Draft",
        "isInitial": True,
        "isFinal": False,
        "enabled": True,
    }


@pytest.fixture
def review_flow(engine):
    """
    Engine with a three-state linear workflow.

    S0 (initial) --A--> S1 --B--> S2 (final), definition "D".
    """
    engine.catalog.create_state("S0", "Start", is_initial=True)
    engine.catalog.create_state("S1", "Middle")
    engine.catalog.create_state("S2", "End", is_final=True)
    engine.catalog.create_action("A", "Advance", ["S0"], "S1")
    engine.catalog.create_action("B", "Finish", ["S1"], "S2")

    engine.definitions.create_definition("D", "Linear review")
    for state_id in ("S0", "S1", "S2"):
        engine.definitions.add_state("D", state_id)
    for action_id in ("A", "B"):
        engine.definitions.add_action("D", action_id)

    return engine


# ============================================
# Integration Test Fixtures
# ============================================

@pytest.fixture
def app(engine):
    """Create Flask test application."""
    from workflow_registry.api.app import create_app
    from workflow_registry.config import TestConfig

    app = create_app(TestConfig(), engine=engine)
    app.config["TESTING"] = True
    yield app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    return app.test_client()
