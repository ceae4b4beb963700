"""
Bot Registry and Model Catalog.

Resolves public bot identifiers to bot configuration and named models to
provider configuration.
"""

from .repository import CatalogRepository, InMemoryCatalogRepository, PostgresCatalogRepository
from .service import CatalogService, create_catalog_repository

__all__ = [
    'CatalogRepository',
    'InMemoryCatalogRepository',
    'PostgresCatalogRepository',
    'CatalogService',
    'create_catalog_repository',
]
