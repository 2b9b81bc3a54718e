"""Route table service - assembles the route and local task tables the editing surface is reached through"""

import logging
import re
from typing import Any, Mapping

from fastapi import Depends

from core.routing import Route, RouteCollection, RouteNotFoundError
from services.entity_type_manager import EntityTypeManager, get_entity_type_manager
from services.section_storage.base import SectionStorageBase
from services.section_storage.manager import SectionStorageManager, get_section_storage_manager

logger = logging.getLogger(__name__)

LOCAL_TASK_BASE_ID = "layout_builder_ui"


class RouteTableService:
    def __init__(self, entity_type_manager: EntityTypeManager, section_storage_manager: SectionStorageManager):
        self.entity_type_manager = entity_type_manager
        self.section_storage_manager = section_storage_manager

    def build(self) -> RouteCollection:
        """
        Build the route table from scratch.

        Entity routes come first so that the field UI and the section
        storages find the base routes they hang their own routes off.
        """
        collection = RouteCollection()
        self._add_entity_routes(collection)
        self._add_field_ui_routes(collection)
        self.section_storage_manager.build_routes(collection)
        logger.debug(f"Built route table with {len(collection)} routes")
        return collection

    def build_local_tasks(self) -> dict[str, dict]:
        base_plugin_definition = {"id": LOCAL_TASK_BASE_ID, "provider": "layout_builder"}
        local_tasks = self.section_storage_manager.build_local_tasks(base_plugin_definition)
        return {f"{LOCAL_TASK_BASE_ID}:{name}": task for name, task in local_tasks.items()}

    def get_route(self, route_name: str, collection: RouteCollection | None = None) -> Route:
        collection = collection if collection is not None else self.build()
        route = collection.get(route_name)
        if route is None:
            raise RouteNotFoundError(route_name)
        return route

    def resolve(self, route_name: str, parameters: Mapping[str, Any]) -> SectionStorageBase | None:
        """
        Resolve a layout route and the values of its path variables into a section storage.

        Returns None when the route is not a layout route, a path variable
        fails its requirement, or nothing can be loaded for the values.
        """
        route = self.get_route(route_name)
        storage_type = route.get_default("section_storage_type")
        if not storage_type:
            return None

        for name in route.get_variables():
            pattern = route.requirements.get(name)
            value = parameters.get(name)
            if pattern and value is not None and not re.fullmatch(pattern, str(value)):
                logger.debug(f'Value "{value}" for {name} does not match {pattern}')
                return None

        # Only path variables come from the request; everything else is the route's own
        variables = {name: parameters[name] for name in route.get_variables() if name in parameters}
        defaults = {**route.defaults, **variables}
        return self.section_storage_manager.load_from_route(storage_type, defaults.get("section_storage"), defaults)

    def _add_entity_routes(self, collection: RouteCollection) -> None:
        for entity_type_id, entity_type in self.entity_type_manager.get_definitions().items():
            for rel, template in entity_type.link_templates.items():
                options = {}
                if f"{{{entity_type_id}}}" in template:
                    options["parameters"] = {entity_type_id: {"type": f"entity:{entity_type_id}"}}
                collection.add(
                    f"entity.{entity_type_id}.{rel.replace('-', '_')}",
                    Route(
                        path=template,
                        defaults={"entity_type_id": entity_type_id},
                        options=options,
                        methods=["GET"],
                    ),
                )

    def _add_field_ui_routes(self, collection: RouteCollection) -> None:
        for entity_type_id, entity_type in self.entity_type_manager.get_definitions().items():
            if not (entity_type.fieldable and entity_type.field_ui_base_route):
                continue
            base_route = collection.get(entity_type.field_ui_base_route)
            if base_route is None:
                continue

            defaults = {"entity_type_id": entity_type_id, "_entity_form": "entity_view_display.edit"}
            if entity_type.bundle_entity_type:
                defaults["bundle_key"] = entity_type.bundle_entity_type
            else:
                defaults["bundle"] = entity_type_id

            collection.add(
                f"entity.entity_view_display.{entity_type_id}.default",
                Route(
                    path=f"{base_route.path}/display",
                    defaults={**defaults, "view_mode_name": "default"},
                    options=dict(base_route.options),
                    methods=["GET", "POST"],
                ),
            )
            collection.add(
                f"entity.entity_view_display.{entity_type_id}.view_mode",
                Route(
                    path=f"{base_route.path}/display/{{view_mode_name}}",
                    defaults=dict(defaults),
                    options=dict(base_route.options),
                    methods=["GET", "POST"],
                ),
            )


def get_route_table_service(
    entity_type_manager: EntityTypeManager = Depends(get_entity_type_manager),
    section_storage_manager: SectionStorageManager = Depends(get_section_storage_manager),
) -> RouteTableService:
    return RouteTableService(entity_type_manager, section_storage_manager)
