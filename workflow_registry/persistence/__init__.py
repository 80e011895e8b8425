# Persistence layer
from .store import Registry, ReadWriteLock
from .repositories import (
    CatalogRepository,
    DefinitionRepository,
    InstanceRepository,
)

__all__ = [
    "Registry",
    "ReadWriteLock",
    "CatalogRepository",
    "DefinitionRepository",
    "InstanceRepository",
]
