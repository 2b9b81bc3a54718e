"""
Context resolvers.

Turn the raw ``section_storage`` route value and the route defaults into the
contexts a section storage needs. An unresolvable route yields an empty
mapping rather than an error; callers decide what "not found" means.
"""

import logging
from typing import Any, Mapping

from models import LAYOUT_FIELD_NAME
from services.section_storage.context import Context
from services.section_storage.identifiers import (
    DisplayStorageKey,
    EntityStorageKey,
    decode_display_id,
    decode_entity_id,
    is_storage_id,
)

logger = logging.getLogger(__name__)


def resolve_bundle_key(defaults: Mapping[str, Any]) -> dict[str, Any]:
    """
    Fill in ``bundle`` from the parameter named by ``bundle_key``.

    Admin paths carry the bundle under the bundle entity type's name
    (``{node_type}``), so the route only records which parameter to read.
    """
    defaults = dict(defaults)
    bundle_key = defaults.get("bundle_key")
    if not defaults.get("bundle") and bundle_key and defaults.get(bundle_key):
        defaults["bundle"] = defaults[bundle_key]
    return defaults


class DefaultsContextResolver:
    storage_type = "defaults"

    def __init__(self, display_repository):
        self.display_repository = display_repository

    def extract_key(self, value, defaults: Mapping[str, Any]) -> DisplayStorageKey | None:
        defaults = resolve_bundle_key(defaults)

        if is_storage_id(value):
            return decode_display_id(value, self.storage_type)

        if defaults.get("entity_type_id") and defaults.get("bundle") and defaults.get("view_mode_name"):
            return DisplayStorageKey(
                str(defaults["entity_type_id"]),
                str(defaults["bundle"]),
                str(defaults["view_mode_name"]),
            )
        return None

    def extract_display_from_route(self, value, defaults: Mapping[str, Any]):
        key = self.extract_key(value, defaults)
        if key is None:
            return None

        display = self.display_repository.load(key.encode())
        if display is None:
            # Not saved yet: build one so the layout can be edited before the first save
            logger.debug(f"Display {key.encode()} does not exist, using an unsaved one")
            display = self.display_repository.create({
                "targetEntityType": key.entity_type_id,
                "bundle": key.bundle,
                "mode": key.view_mode,
                "status": True,
            })
        return display

    def derive_contexts_from_route(self, value, defaults: Mapping[str, Any]) -> dict[str, Context]:
        display = self.extract_display_from_route(value, defaults)
        if display is None:
            return {}
        return {"display": Context.from_entity(display)}


class OverridesContextResolver:
    storage_type = "overrides"

    def __init__(self, entity_repository, entity_field_manager):
        self.entity_repository = entity_repository
        self.entity_field_manager = entity_field_manager

    def extract_key(self, value, defaults: Mapping[str, Any]) -> EntityStorageKey | None:
        if is_storage_id(value):
            return decode_entity_id(value, self.storage_type)

        entity_type_id = defaults.get("entity_type_id")
        if entity_type_id and defaults.get(entity_type_id) not in (None, ""):
            return EntityStorageKey(str(entity_type_id), str(defaults[entity_type_id]))
        return None

    def extract_entity_from_route(self, value, defaults: Mapping[str, Any]):
        key = self.extract_key(value, defaults)
        if key is None:
            return None

        entity = self.entity_repository.load(key.entity_type_id, key.entity_id)
        if entity is None:
            return None
        if not self.entity_field_manager.has_field(entity, LAYOUT_FIELD_NAME):
            logger.debug(f"{key.encode()} has no {LAYOUT_FIELD_NAME} field")
            return None
        return entity

    def derive_contexts_from_route(self, value, defaults: Mapping[str, Any]) -> dict[str, Context]:
        entity = self.extract_entity_from_route(value, defaults)
        if entity is None:
            return {}

        contexts = {"entity": Context.from_entity(entity)}
        if defaults.get("view_mode_name"):
            contexts["view_mode"] = Context("string", defaults["view_mode_name"])
        return contexts
