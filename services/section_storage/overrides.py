"""The "overrides" section storage: a per-entity layout kept in the entity's layout field"""

import logging
from typing import Any, Mapping

from core.access import AccessResult
from core.routing import RouteCollection, Url
from core.settings import settings
from models import LAYOUT_FIELD_NAME
from services.entity_type_manager import EntityTypeDefinition, EntityTypeManager
from services.section_storage.base import SectionStorageBase
from services.section_storage.context import Context, OverridesContexts
from services.section_storage.exceptions import InvalidStorageIdError
from services.section_storage.identifiers import decode_entity_id, encode_entity_id, is_storage_id
from services.section_storage.resolvers import OverridesContextResolver

logger = logging.getLogger(__name__)


class OverridesSectionStorage(SectionStorageBase):
    storage_type = "overrides"
    context_class = OverridesContexts
    provides_revert = True
    weight = -20

    FIELD_NAME = LAYOUT_FIELD_NAME

    def __init__(
        self,
        entity_type_manager: EntityTypeManager,
        entity_field_manager,
        entity_repository,
        display_repository,
        resolver: OverridesContextResolver | None = None,
    ):
        super().__init__()
        self.entity_type_manager = entity_type_manager
        self.entity_field_manager = entity_field_manager
        self.entity_repository = entity_repository
        self.display_repository = display_repository
        self.resolver = resolver or OverridesContextResolver(entity_repository, entity_field_manager)

    def get_entity(self):
        return self.get_context_value("entity")

    def get_section_list(self):
        return self.get_entity().get(self.FIELD_NAME)

    def get_storage_id(self) -> str:
        entity = self.get_entity()
        return encode_entity_id(entity.entity_type_id, entity.id)

    def label(self) -> str | None:
        return self.get_entity().label()

    def save(self):
        return self.entity_repository.save(self.get_entity())

    def get_view_mode(self) -> str:
        view_mode = self.contexts.view_mode
        if view_mode is not None and view_mode.get_context_value():
            return view_mode.get_context_value()
        return settings.LAYOUT_BUILDER_DEFAULT_VIEW_MODE

    def get_default_section_storage(self):
        """
        The display whose layout this override replaces.

        The entity's view mode display, else the bundle's "default" display,
        else an unsaved enabled one.
        """
        return self.display_repository.collect_render_display(self.get_entity(), self.get_view_mode())

    def is_overridden(self) -> bool:
        return self.count() > 0

    # URLs

    def get_redirect_url(self) -> Url:
        entity = self.get_entity()
        return Url(f"entity.{entity.entity_type_id}.canonical", {entity.entity_type_id: entity.id})

    def get_layout_builder_url(self, rel: str = "view") -> Url:
        entity = self.get_entity()
        return Url(
            f"layout_builder.{self.storage_type}.{entity.entity_type_id}.{rel}",
            {entity.entity_type_id: entity.id},
        )

    # Contexts

    def derive_contexts_from_route(self, value, defaults: Mapping[str, Any]) -> dict[str, Context]:
        return self.resolver.derive_contexts_from_route(value, defaults)

    def get_contexts_during_preview(self) -> dict[str, Context]:
        contexts = super().get_contexts_during_preview()
        contexts["layout_builder.entity"] = contexts.pop("entity")
        return contexts

    # Access

    def access(self, operation: str, account=None, return_as_object: bool = False) -> bool | AccessResult:
        # Overriding is switched on and off on the bundle's display, not per entity
        default_section_storage = self.get_default_section_storage()
        result = AccessResult.allowed_if(
            default_section_storage.is_layout_builder_enabled(),
            reason="Layout Builder is not enabled for the default display of this bundle.",
        ).add_cacheable_dependency(default_section_storage)
        return result if return_as_object else result.is_allowed()

    # Routes

    def get_entity_types(self) -> dict[str, EntityTypeDefinition]:
        return {
            entity_type_id: entity_type
            for entity_type_id, entity_type in self.entity_type_manager.get_definitions().items()
            if entity_type.fieldable and entity_type.has_view_builder and entity_type.has_link_template("canonical")
        }

    def has_integer_id(self, entity_type: EntityTypeDefinition) -> bool:
        id_key = entity_type.get_key("id")
        definitions = self.entity_field_manager.get_field_storage_definitions(entity_type.id)
        definition = definitions.get(id_key)
        return definition is not None and definition.get_type() == "integer"

    def build_routes(self, collection: RouteCollection) -> None:
        for entity_type_id, entity_type in self.get_entity_types().items():
            defaults = {"entity_type_id": entity_type_id}

            requirements = {}
            if self.has_integer_id(entity_type):
                requirements[entity_type_id] = r"\d+"

            # section_storage is listed first so it is converted before the entity
            options = {
                "parameters": {
                    "section_storage": {},
                    entity_type_id: {"type": f"entity:{entity_type_id}"},
                },
                "_admin_route": False,
            }

            path = f"{entity_type.get_link_template('canonical')}/layout"
            self.build_layout_routes(collection, path, defaults, requirements, options, entity_type_id)

    def build_local_tasks(self, base_plugin_definition: dict) -> dict[str, dict]:
        local_tasks = {}
        for entity_type_id in self.get_entity_types():
            view_route = f"layout_builder.overrides.{entity_type_id}.view"
            cache_contexts = [f"layout_builder_is_active:{entity_type_id}"]

            local_tasks[view_route] = {
                **base_plugin_definition,
                "route_name": view_route,
                "weight": 15,
                "title": "Layout",
                "base_route": f"entity.{entity_type_id}.canonical",
                "cache_contexts": cache_contexts,
            }
            for rel, title, weight in (
                ("save", "Save Layout", None),
                ("cancel", "Cancel Layout", None),
                ("revert", "Revert to defaults", 10),
            ):
                task = {
                    **base_plugin_definition,
                    "route_name": f"layout_builder.overrides.{entity_type_id}.{rel}",
                    "title": title,
                    "parent_id": f"layout_builder_ui:{view_route}",
                    "cache_contexts": list(cache_contexts),
                }
                if weight is not None:
                    task["weight"] = weight
                local_tasks[f"layout_builder.overrides.{entity_type_id}.{rel}"] = task
        return local_tasks

    # Legacy

    def _extract_id_from_route(self, value, defaults: Mapping[str, Any]) -> str | None:
        if is_storage_id(value):
            return value

        entity_type_id = defaults.get("entity_type_id")
        if entity_type_id:
            return encode_entity_id(entity_type_id, defaults.get(entity_type_id))
        return None

    def _get_section_list_from_id(self, storage_id: str):
        if is_storage_id(storage_id):
            key = decode_entity_id(storage_id, self.storage_type)
            entity = self.entity_repository.load(key.entity_type_id, key.entity_id)
            if entity is not None and self.entity_field_manager.has_field(entity, self.FIELD_NAME):
                return entity.get(self.FIELD_NAME)
        raise InvalidStorageIdError(storage_id, self.storage_type)
