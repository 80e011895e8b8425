# Service layer
from .errors import (
    WorkflowServiceError,
    ConflictError,
    NotFoundError,
    InvalidOperationError,
)
from .catalog_service import CatalogService
from .definition_service import DefinitionService
from .instance_service import InstanceService
from .engine import WorkflowEngine

__all__ = [
    "WorkflowServiceError",
    "ConflictError",
    "NotFoundError",
    "InvalidOperationError",
    "CatalogService",
    "DefinitionService",
    "InstanceService",
    "WorkflowEngine",
]
