"""The "defaults" section storage: one layout per bundle and view mode, kept on the view display"""

import logging
from typing import Any, Mapping

from core.access import AccessResult
from core.routing import RouteCollection, Url, merge_deep
from services.entity_type_manager import EntityTypeDefinition, EntityTypeManager
from services.section_storage.base import SectionStorageBase
from services.section_storage.context import Context, DefaultsContexts
from services.section_storage.exceptions import InvalidStorageIdError
from services.section_storage.identifiers import decode_display_id, encode_display_id, is_storage_id
from services.section_storage.resolvers import DefaultsContextResolver, resolve_bundle_key

logger = logging.getLogger(__name__)


class DefaultsSectionStorage(SectionStorageBase):
    storage_type = "defaults"
    context_class = DefaultsContexts
    weight = 20

    def __init__(
        self,
        entity_type_manager: EntityTypeManager,
        display_repository,
        sample_entity_generator,
        resolver: DefaultsContextResolver | None = None,
    ):
        super().__init__()
        self.entity_type_manager = entity_type_manager
        self.display_repository = display_repository
        self.sample_entity_generator = sample_entity_generator
        self.resolver = resolver or DefaultsContextResolver(display_repository)

    def get_section_list(self):
        # The display is its own section list
        return self.get_display()

    def get_display(self):
        return self.get_context_value("display")

    def get_storage_id(self) -> str:
        return self.get_display().id

    def label(self) -> str:
        display = self.get_display()
        entity_type = self.entity_type_manager.get_definition(display.target_entity_type)
        return f"{entity_type.get_bundle_label(display.bundle)} {entity_type.get_plural_label()}"

    def save(self) -> str:
        return self.display_repository.save(self.get_display())

    # URLs

    def _get_route_parameters(self) -> dict[str, Any]:
        display = self.get_display()
        entity_type = self.entity_type_manager.get_definition(display.target_entity_type)
        bundle_parameter = entity_type.bundle_entity_type or "bundle"
        return {bundle_parameter: display.bundle, "view_mode_name": display.mode}

    def get_redirect_url(self) -> Url:
        entity_type_id = self.get_display().target_entity_type
        return Url(f"entity.entity_view_display.{entity_type_id}.view_mode", self._get_route_parameters())

    def get_layout_builder_url(self, rel: str = "view") -> Url:
        entity_type_id = self.get_display().target_entity_type
        return Url(f"layout_builder.{self.storage_type}.{entity_type_id}.{rel}", self._get_route_parameters())

    # Contexts

    def derive_contexts_from_route(self, value, defaults: Mapping[str, Any]) -> dict[str, Context]:
        return self.resolver.derive_contexts_from_route(value, defaults)

    def get_contexts_during_preview(self) -> dict[str, Context]:
        contexts = super().get_contexts_during_preview()

        # Previews render a generated entity of the display's bundle
        display = self.get_display()
        entity = self.sample_entity_generator.get(display.target_entity_type, display.bundle)
        contexts["layout_builder.entity"] = Context.from_entity(entity)
        return contexts

    # Access

    def access(self, operation: str, account=None, return_as_object: bool = False) -> bool | AccessResult:
        display = self.get_display()
        result = AccessResult.allowed_if(
            display.is_layout_builder_enabled(),
            reason="Layout Builder is not enabled for this display.",
        ).add_cacheable_dependency(display)
        return result if return_as_object else result.is_allowed()

    # Display settings

    def is_layout_builder_enabled(self) -> bool:
        return self.get_display().is_layout_builder_enabled()

    def enable_layout_builder(self) -> "DefaultsSectionStorage":
        self.get_display().enable_layout_builder()
        return self

    def disable_layout_builder(self) -> "DefaultsSectionStorage":
        self.get_display().disable_layout_builder()
        return self

    def is_overridable(self) -> bool:
        return self.get_display().is_overridable()

    def set_overridable(self, overridable: bool = True) -> "DefaultsSectionStorage":
        self.get_display().set_overridable(overridable)
        return self

    def get_third_party_setting(self, module: str, key: str, default: Any = None) -> Any:
        return self.get_display().get_third_party_setting(module, key, default)

    def get_third_party_settings(self, module: str) -> dict[str, Any]:
        return self.get_display().get_third_party_settings(module)

    def set_third_party_setting(self, module: str, key: str, value: Any) -> "DefaultsSectionStorage":
        self.get_display().set_third_party_setting(module, key, value)
        return self

    def unset_third_party_setting(self, module: str, key: str) -> "DefaultsSectionStorage":
        self.get_display().unset_third_party_setting(module, key)
        return self

    def get_third_party_providers(self) -> list[str]:
        return self.get_display().get_third_party_providers()

    # Routes

    def get_entity_types(self) -> dict[str, EntityTypeDefinition]:
        return {
            entity_type_id: entity_type
            for entity_type_id, entity_type in self.entity_type_manager.get_definitions().items()
            if entity_type.fieldable and entity_type.has_view_builder and entity_type.field_ui_base_route
        }

    def build_routes(self, collection: RouteCollection) -> None:
        for entity_type_id, entity_type in self.get_entity_types().items():
            entity_route = collection.get(entity_type.field_ui_base_route)
            if entity_route is None:
                logger.debug(
                    f"Skipping layout routes for {entity_type_id}: "
                    f"no route named {entity_type.field_ui_base_route}"
                )
                continue

            path = f"{entity_route.path}/display-layout/{{view_mode_name}}"

            defaults = {"entity_type_id": entity_type_id}
            # Without {bundle} in the path the bundle comes from the entity type itself
            # or from the bundle entity type's parameter
            if "{bundle}" not in path:
                if not entity_type.has_key("bundle"):
                    defaults["bundle"] = entity_type_id
                else:
                    defaults["bundle_key"] = entity_type.bundle_entity_type

            requirements = {"_field_ui_view_mode_access": f"administer {entity_type_id} display"}

            options = dict(entity_route.options)
            options["_admin_route"] = False

            self.build_layout_routes(collection, path, defaults, requirements, options, entity_type_id)

            for route_name in (
                f"entity.entity_view_display.{entity_type_id}.default",
                f"entity.entity_view_display.{entity_type_id}.view_mode",
            ):
                route = collection.get(route_name)
                if route is None:
                    continue

                route.add_defaults({
                    **defaults,
                    "section_storage_type": self.storage_type,
                    "section_storage": "",
                })
                parameters = {"section_storage": {"layout_builder_tempstore": True}}
                existing = route.get_option("parameters") or {}
                # Parameters already declared on the route win
                route.set_option("parameters", merge_deep(parameters, existing))

    def build_local_tasks(self, base_plugin_definition: dict) -> dict[str, dict]:
        local_tasks = {}
        for entity_type_id in self.get_entity_types():
            view_route = f"layout_builder.defaults.{entity_type_id}.view"
            local_tasks[view_route] = {
                **base_plugin_definition,
                "route_name": view_route,
                "title": "Manage layout",
                "base_route": view_route,
            }
            local_tasks[f"layout_builder.defaults.{entity_type_id}.save"] = {
                **base_plugin_definition,
                "route_name": f"layout_builder.defaults.{entity_type_id}.save",
                "title": "Save Layout",
                "parent_id": f"layout_builder_ui:{view_route}",
            }
            local_tasks[f"layout_builder.defaults.{entity_type_id}.cancel"] = {
                **base_plugin_definition,
                "route_name": f"layout_builder.defaults.{entity_type_id}.cancel",
                "title": "Cancel Layout",
                "parent_id": f"layout_builder_ui:{view_route}",
            }
        return local_tasks

    # Legacy

    def _extract_id_from_route(self, value, defaults: Mapping[str, Any]) -> str | None:
        if is_storage_id(value):
            return value

        defaults = resolve_bundle_key(defaults)
        return encode_display_id(
            defaults.get("entity_type_id"),
            defaults.get("bundle"),
            defaults.get("view_mode_name"),
        )

    def _get_section_list_from_id(self, storage_id: str):
        if not is_storage_id(storage_id):
            raise InvalidStorageIdError(storage_id, self.storage_type)

        display = self.display_repository.load(storage_id)
        if display is None:
            key = decode_display_id(storage_id, self.storage_type)
            display = self.display_repository.create({
                "targetEntityType": key.entity_type_id,
                "bundle": key.bundle,
                "mode": key.view_mode,
                "status": True,
            })
        return display

