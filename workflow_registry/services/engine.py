"""
Workflow engine - the service object behind the API.

Owns the three registries and the services built on them. One engine is
constructed at process start and passed to whatever exposes it.
"""

import logging
from typing import Dict, Optional

from workflow_registry.persistence import (
    CatalogRepository, DefinitionRepository, InstanceRepository
)
from .catalog_service import CatalogService
from .definition_service import DefinitionService
from .instance_service import InstanceService

logger = logging.getLogger(__name__)


class WorkflowEngine:
    """
    Catalog, definition registry and instance engine wired together.

    Write data flows one way: catalog entries are copied into
    definitions, and instances only read their definition.
    """

    def __init__(
        self,
        catalog_repo: Optional[CatalogRepository] = None,
        definition_repo: Optional[DefinitionRepository] = None,
        instance_repo: Optional[InstanceRepository] = None,
    ):
        self.catalog_repo = catalog_repo or CatalogRepository()
        self.definition_repo = definition_repo or DefinitionRepository()
        self.instance_repo = instance_repo or InstanceRepository()

        self.catalog = CatalogService(self.catalog_repo)
        self.definitions = DefinitionService(self.definition_repo, self.catalog_repo)
        self.instances = InstanceService(self.instance_repo, self.definition_repo)

        logger.info("Workflow engine initialized")

    def get_stats(self) -> Dict[str, int]:
        """Get registry sizes."""
        stats: Dict[str, int] = {}
        for repo in (self.catalog_repo, self.definition_repo, self.instance_repo):
            stats.update(repo.counts())
        return stats
