"""
API routes for the workflow registry.

Defines REST endpoints for the state/action catalog, workflow
definitions and workflow instances. Service errors are translated to
status codes by the handlers registered in app.py.
"""

import logging
from typing import Any, Dict, List

from flask import Flask, Blueprint, abort, current_app, jsonify, request

from workflow_registry.services import WorkflowEngine

logger = logging.getLogger(__name__)

# Create blueprints
catalog_bp = Blueprint("catalog", __name__)
definitions_bp = Blueprint("definitions", __name__, url_prefix="/workflowdef")
instances_bp = Blueprint("instances", __name__, url_prefix="/instances")

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}


def get_engine() -> WorkflowEngine:
    """Get the workflow engine from Flask app config."""
    return current_app.config["ENGINE"]


# ============================================
# REQUEST HELPERS
# ============================================

def request_data() -> Dict[str, Any]:
    """
    Collect request values from the JSON body and the query string.

    Body values win; the query string fills in anything missing. List
    values may be given as repeated query parameters.
    """
    body = request.get_json(silent=True)
    data: Dict[str, Any] = dict(body) if isinstance(body, dict) else {}

    for key in request.args:
        if key in data:
            continue
        values = request.args.getlist(key)
        data[key] = values if len(values) > 1 else values[0]

    return data


def require(data: Dict[str, Any], *fields: str) -> None:
    """Abort with 400 unless every field is present as a non-empty string."""
    for field in fields:
        value = data.get(field)
        if value is None or value == "":
            abort(400, description=f"{field} is required")
        if not isinstance(value, str):
            abort(400, description=f"{field} must be a string")


def parse_bool(data: Dict[str, Any], field: str, default: bool) -> bool:
    value = data.get(field)
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if str(value).strip().lower() in TRUE_VALUES:
        return True
    if str(value).strip().lower() in FALSE_VALUES:
        return False
    abort(400, description=f"{field} must be a boolean")


def parse_list(data: Dict[str, Any], field: str) -> List[str]:
    value = data.get(field)
    if value is None:
        return []
    if isinstance(value, str):
        return [v for v in value.split(",") if v]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    abort(400, description=f"{field} must be a list of IDs")


# ============================================
# CATALOG ENDPOINTS
# ============================================

@catalog_bp.route("/states", methods=["POST"])
def create_state():
    """
    Register a new global state.

    Request body:
    {
        "id": "draft",
        "name": "Draft",
        "isInitial": true,
        "isFinal": false,
        "enabled": true
    }
    """
    data = request_data()
    require(data, "id", "name")

    state = get_engine().catalog.create_state(
        id=data["id"],
        name=data["name"],
        is_initial=parse_bool(data, "isInitial", False),
        is_final=parse_bool(data, "isFinal", False),
        enabled=parse_bool(data, "enabled", True),
    )
    return jsonify(state_to_dict(state)), 200


@catalog_bp.route("/states", methods=["GET"])
def list_states():
    states = get_engine().catalog.list_states()
    return jsonify({
        "states": [state_to_dict(s) for s in states],
        "count": len(states),
    }), 200


@catalog_bp.route("/states/<state_id>", methods=["GET"])
def get_state(state_id: str):
    state = get_engine().catalog.get_state(state_id)
    return jsonify(state_to_dict(state)), 200


@catalog_bp.route("/actions", methods=["POST"])
def create_action():
    """
    Register a new global action between states.

    Request body:
    {
        "id": "submit",
        "name": "Submit",
        "fromStates": ["draft"],
        "toState": "review",
        "enabled": true
    }
    """
    data = request_data()
    require(data, "id", "name", "toState")

    action = get_engine().catalog.create_action(
        id=data["id"],
        name=data["name"],
        from_states=parse_list(data, "fromStates"),
        to_state=data["toState"],
        enabled=parse_bool(data, "enabled", True),
    )
    return jsonify(action_to_dict(action)), 200


@catalog_bp.route("/actions", methods=["GET"])
def list_actions():
    actions = get_engine().catalog.list_actions()
    return jsonify({
        "actions": [action_to_dict(a) for a in actions],
        "count": len(actions),
    }), 200


@catalog_bp.route("/actions/<action_id>", methods=["GET"])
def get_action(action_id: str):
    action = get_engine().catalog.get_action(action_id)
    return jsonify(action_to_dict(action)), 200


# ============================================
# DEFINITION ENDPOINTS
# ============================================

@definitions_bp.route("", methods=["POST"])
def create_definition():
    """
    Create a new, empty workflow definition.

    Request body:
    {
        "id": "review-flow",
        "description": "Document review"
    }
    """
    data = request_data()
    require(data, "id")

    definition = get_engine().definitions.create_definition(
        id=data["id"],
        description=data.get("description", ""),
    )
    return jsonify(definition_to_dict(definition)), 200


@definitions_bp.route("/build", methods=["POST"])
def build_definition():
    """
    Create a definition with states and actions in one request.

    Request body:
    {
        "id": "review-flow",
        "description": "Document review",
        "stateIds": ["draft", "review", "done"],
        "actionIds": ["submit", "approve"]
    }
    """
    data = request_data()
    require(data, "id")

    definition = get_engine().definitions.build_definition(
        id=data["id"],
        description=data.get("description", ""),
        state_ids=parse_list(data, "stateIds"),
        action_ids=parse_list(data, "actionIds"),
    )
    return jsonify(definition_to_dict(definition)), 200


@definitions_bp.route("", methods=["GET"])
def list_definitions():
    definitions = get_engine().definitions.list_definitions()
    return jsonify({
        "definitions": [definition_to_dict(d) for d in definitions],
        "count": len(definitions),
    }), 200


@definitions_bp.route("/<definition_id>", methods=["GET"])
def get_definition(definition_id: str):
    definition = get_engine().definitions.get_definition(definition_id)
    return jsonify(definition_to_dict(definition)), 200


@definitions_bp.route("/<definition_id>/states", methods=["POST"])
def add_definition_state(definition_id: str):
    """
    Add a global state to a workflow definition.

    Request body:
    {
        "stateId": "draft"
    }
    """
    data = request_data()
    require(data, "stateId")

    state = get_engine().definitions.add_state(definition_id, data["stateId"])
    return jsonify(state_to_dict(state)), 200


@definitions_bp.route("/<definition_id>/actions", methods=["POST"])
def add_definition_action(definition_id: str):
    """
    Add a global action to a workflow definition.

    Request body:
    {
        "actionId": "submit"
    }
    """
    data = request_data()
    require(data, "actionId")

    action = get_engine().definitions.add_action(definition_id, data["actionId"])
    return jsonify(action_to_dict(action)), 200


# ============================================
# INSTANCE ENDPOINTS
# ============================================

@instances_bp.route("", methods=["POST"])
def create_instance():
    """
    Start a new instance of a workflow.

    Request body:
    {
        "defId": "review-flow",
        "instanceId": "doc-42"
    }
    """
    data = request_data()
    require(data, "defId", "instanceId")

    instance = get_engine().instances.create_instance(
        definition_id=data["defId"],
        instance_id=data["instanceId"],
    )
    return jsonify(instance_to_dict(instance)), 200


@instances_bp.route("", methods=["GET"])
def list_instances():
    """
    List instances.

    Query params:
    - definitionId: Filter by workflow definition
    """
    instances = get_engine().instances.list_instances(
        definition_id=request.args.get("definitionId"),
    )
    return jsonify({
        "instances": [instance_to_dict(i) for i in instances],
        "count": len(instances),
    }), 200


@instances_bp.route("/<instance_id>", methods=["GET"])
def get_instance(instance_id: str):
    """Get the current state and history of an instance."""
    instance = get_engine().instances.get_instance(instance_id)
    return jsonify(instance_to_dict(instance)), 200


@instances_bp.route("/<instance_id>/actions/<action_id>", methods=["POST"])
def execute_action(instance_id: str, action_id: str):
    """Perform a transition on an instance."""
    instance = get_engine().instances.execute_action(instance_id, action_id)
    return jsonify(instance_to_dict(instance)), 200


@instances_bp.route("/<instance_id>/actions", methods=["GET"])
def get_available_actions(instance_id: str):
    """List the actions that can currently be executed on an instance."""
    actions = get_engine().instances.get_available_actions(instance_id)
    return jsonify({
        "actions": [action_to_dict(a) for a in actions],
        "count": len(actions),
    }), 200


# ============================================
# SERIALIZATION HELPERS
# ============================================

def state_to_dict(state) -> dict:
    """Convert State to API response dict."""
    return {
        "id": state.id,
        "name": state.name,
        "isInitial": state.is_initial,
        "isFinal": state.is_final,
        "enabled": state.enabled,
    }


def action_to_dict(action) -> dict:
    """Convert WorkflowAction to API response dict."""
    return {
        "id": action.id,
        "name": action.name,
        "fromStates": list(action.from_states),
        "toState": action.to_state,
        "enabled": action.enabled,
    }


def definition_to_dict(definition) -> dict:
    """Convert WorkflowDefinition to API response dict."""
    return {
        "id": definition.id,
        "description": definition.description,
        "states": [state_to_dict(s) for s in definition.states],
        "actions": [action_to_dict(a) for a in definition.actions],
        "createdAt": definition.created_at.isoformat(),
    }


def instance_to_dict(instance) -> dict:
    """Convert WorkflowInstance to API response dict."""
    return {
        "id": instance.id,
        "definitionId": instance.definition_id,
        "currentStateId": instance.current_state_id,
        "history": [
            {
                "actionId": entry.action_id,
                "timestamp": entry.timestamp.isoformat(),
            }
            for entry in instance.history
        ],
        "createdAt": instance.created_at.isoformat(),
    }


# ============================================
# ROUTE REGISTRATION
# ============================================

def register_routes(app: Flask, url_prefix: str = "") -> None:
    """Register all blueprints with the Flask app."""
    app.register_blueprint(catalog_bp, url_prefix=url_prefix)
    app.register_blueprint(definitions_bp, url_prefix=f"{url_prefix}/workflowdef")
    app.register_blueprint(instances_bp, url_prefix=f"{url_prefix}/instances")
    logger.info(f"Routes registered under '{url_prefix or '/'}'")
