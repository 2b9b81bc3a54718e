"""Section storage registry - builds storages by type tag and binds them to contexts"""

import logging
from typing import Any, Callable, Mapping

from fastapi import Depends
from sqlalchemy.orm import Session

from core.routing import RouteCollection
from db.session import get_db
from repositories.content_entity_repository import ContentEntityRepository
from repositories.entity_view_display_repository import EntityViewDisplayRepository
from services.entity_field_manager import EntityFieldManager
from services.entity_type_manager import EntityTypeManager, get_entity_type_manager
from services.sample_entity_generator import SampleEntityGenerator, get_sample_entity_generator
from services.section_storage.base import SectionStorageBase
from services.section_storage.context import Context
from services.section_storage.defaults import DefaultsSectionStorage
from services.section_storage.exceptions import ContextException, UnknownSectionStorageTypeError
from services.section_storage.overrides import OverridesSectionStorage

logger = logging.getLogger(__name__)

SectionStorageFactory = Callable[[], SectionStorageBase]


class SectionStorageManager:
    def __init__(self, factories: Mapping[str, SectionStorageFactory] | None = None):
        self._factories: dict[str, SectionStorageFactory] = dict(factories or {})

    def register(self, storage_type: str, factory: SectionStorageFactory) -> None:
        self._factories[storage_type] = factory

    def get_definitions(self) -> list[str]:
        """Registered storage types, lightest weight first."""
        return sorted(self._factories, key=lambda storage_type: self.create_instance(storage_type).weight)

    def has_definition(self, storage_type: str) -> bool:
        return storage_type in self._factories

    def create_instance(self, storage_type: str) -> SectionStorageBase:
        factory = self._factories.get(storage_type)
        if factory is None:
            raise UnknownSectionStorageTypeError(storage_type)
        return factory()

    def load(self, storage_type: str, contexts: Mapping[str, Context]) -> SectionStorageBase | None:
        """
        A storage of the given type bound to the contexts.

        Returns None when the contexts are empty or do not satisfy the
        storage, which is how an unresolvable route surfaces.
        """
        storage = self.create_instance(storage_type)
        if not contexts:
            return None
        try:
            storage.set_contexts(contexts)
        except ContextException as e:
            logger.debug(f'Contexts rejected by the "{storage_type}" section storage: {e}')
            return None
        return storage

    def load_from_route(self, storage_type: str, value, defaults: Mapping[str, Any]) -> SectionStorageBase | None:
        contexts = self.create_instance(storage_type).derive_contexts_from_route(value, defaults)
        return self.load(storage_type, contexts)

    def find_by_context(self, contexts: Mapping[str, Context], operation: str = "view") -> SectionStorageBase | None:
        """The first storage, by weight, that accepts the contexts and grants access."""
        for storage_type in self.get_definitions():
            storage = self.load(storage_type, contexts)
            if storage is not None and storage.access(operation):
                return storage
        return None

    def build_routes(self, collection: RouteCollection) -> None:
        for storage_type in self.get_definitions():
            self.create_instance(storage_type).build_routes(collection)

    def build_local_tasks(self, base_plugin_definition: dict | None = None) -> dict[str, dict]:
        local_tasks = {}
        for storage_type in self.get_definitions():
            local_tasks.update(self.create_instance(storage_type).build_local_tasks(dict(base_plugin_definition or {})))
        return local_tasks


def build_section_storage_manager(
    db: Session,
    entity_type_manager: EntityTypeManager,
    sample_entity_generator: SampleEntityGenerator,
) -> SectionStorageManager:
    display_repository = EntityViewDisplayRepository(db)
    entity_repository = ContentEntityRepository(db)
    entity_field_manager = EntityFieldManager(db, entity_type_manager)

    return SectionStorageManager({
        DefaultsSectionStorage.storage_type: lambda: DefaultsSectionStorage(
            entity_type_manager, display_repository, sample_entity_generator
        ),
        OverridesSectionStorage.storage_type: lambda: OverridesSectionStorage(
            entity_type_manager, entity_field_manager, entity_repository, display_repository
        ),
    })


def get_section_storage_manager(
    db: Session = Depends(get_db),
    entity_type_manager: EntityTypeManager = Depends(get_entity_type_manager),
    sample_entity_generator: SampleEntityGenerator = Depends(get_sample_entity_generator),
) -> SectionStorageManager:
    """Dependency for the section storage manager"""
    return build_section_storage_manager(db, entity_type_manager, sample_entity_generator)
