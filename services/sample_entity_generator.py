"""Sample entity generator - placeholder content for previewing bundle-level layouts"""

import logging
import threading
from functools import lru_cache

from faker import Faker

from models import ContentEntity
from services.entity_type_manager import EntityTypeManager, get_entity_type_manager

logger = logging.getLogger(__name__)


class SampleEntityGenerator:
    """
    Hands out one transient entity per entity type and bundle.

    The same sample is returned until it is deleted, so repeated previews of
    a layout show the same placeholder values. Samples are never persisted.
    """

    def __init__(self, entity_type_manager: EntityTypeManager, faker: Faker | None = None):
        self.entity_type_manager = entity_type_manager
        self.faker = faker or Faker()
        self._samples: dict[tuple[str, str], ContentEntity] = {}
        # Shared by request handlers running in the threadpool
        self._lock = threading.Lock()

    def get(self, entity_type_id: str, bundle: str) -> ContentEntity:
        key = (entity_type_id, bundle)
        with self._lock:
            if key not in self._samples:
                # Fails loudly for unknown entity types
                self.entity_type_manager.get_definition(entity_type_id)
                self._samples[key] = ContentEntity(
                    entity_type_id=entity_type_id,
                    bundle=bundle,
                    title=self.faker.sentence(nb_words=4).rstrip("."),
                )
                logger.debug(f"Generated sample {entity_type_id} entity for bundle {bundle}")
            return self._samples[key]

    def delete(self, entity_type_id: str, bundle: str) -> None:
        with self._lock:
            self._samples.pop((entity_type_id, bundle), None)


@lru_cache
def get_sample_entity_generator() -> SampleEntityGenerator:
    return SampleEntityGenerator(get_entity_type_manager())
