"""
Catalog service: bot lookup and model resolution.
"""

import asyncio
from typing import Optional

from ...shared import get_logger, get_settings
from ...shared.models import Bot, ModelInfo, ModelType
from .repository import CatalogRepository, InMemoryCatalogRepository, PostgresCatalogRepository


class CatalogService:
    """
    Async facade over a catalog repository.

    Repository calls may block on the database, so they run in a worker thread.
    Lookups are not cached; every request sees the current catalog.
    """

    def __init__(self, repository: CatalogRepository):
        self.logger = get_logger(__name__)
        self.repository = repository

    async def resolve_bot(self, public_id: str) -> Optional[Bot]:
        return await asyncio.to_thread(self.repository.get_bot_by_public_id, public_id)

    async def resolve_model_info(self, model_name: str, model_type: ModelType) -> Optional[ModelInfo]:
        model_info = await asyncio.to_thread(self.repository.get_model_info, model_name, model_type)
        if model_info is None:
            self.logger.debug(f"No {ModelType(model_type).value} model named {model_name} in catalog")
        return model_info


def create_catalog_repository() -> CatalogRepository:
    """Build the catalog repository selected by settings."""
    settings = get_settings()
    if settings.storage_backend == "postgres":
        repository = PostgresCatalogRepository()
        repository.ensure_schema()
        return repository
    return InMemoryCatalogRepository()
