"""Entity type registry - describes the entity types layouts can be built for"""

import logging
from functools import lru_cache

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EntityTypeNotFoundError(LookupError):
    def __init__(self, entity_type_id: str):
        self.entity_type_id = entity_type_id
        super().__init__(f'The "{entity_type_id}" entity type does not exist.')


class EntityTypeDefinition(BaseModel):
    """Descriptor of an entity type"""
    id: str
    label: str
    plural_label: str | None = None

    # Content entity types are fieldable and rendered through a view builder
    fieldable: bool = False
    has_view_builder: bool = False

    # Route that the field UI hangs its "Manage display" pages off
    field_ui_base_route: str | None = None

    # Relation name -> path template, e.g. {"canonical": "/node/{node}"}
    link_templates: dict[str, str] = Field(default_factory=dict)

    # Entity keys, e.g. {"id": "nid", "bundle": "type"}
    keys: dict[str, str] = Field(default_factory=lambda: {"id": "id"})

    # Config entity type holding the bundles, e.g. "node_type"
    bundle_entity_type: str | None = None
    bundles: dict[str, str] = Field(default_factory=dict)

    # Storage type of the ID field: "integer" or "string"
    id_field_type: str = "integer"

    def has_key(self, key: str) -> bool:
        return bool(self.keys.get(key))

    def get_key(self, key: str) -> str | None:
        return self.keys.get(key)

    def has_link_template(self, rel: str) -> bool:
        return rel in self.link_templates

    def get_link_template(self, rel: str) -> str | None:
        return self.link_templates.get(rel)

    def get_bundle_label(self, bundle: str) -> str:
        return self.bundles.get(bundle, bundle)

    def get_plural_label(self) -> str:
        return self.plural_label or f"{self.label} entities"


DEFAULT_ENTITY_TYPES = [
    EntityTypeDefinition(
        id="node",
        label="Content",
        plural_label="content items",
        fieldable=True,
        has_view_builder=True,
        field_ui_base_route="entity.node_type.edit_form",
        link_templates={"canonical": "/node/{node}"},
        keys={"id": "nid", "bundle": "type", "label": "title"},
        bundle_entity_type="node_type",
        bundles={"article": "Article", "page": "Basic page"},
    ),
    EntityTypeDefinition(
        id="node_type",
        label="Content type",
        plural_label="content types",
        link_templates={"edit-form": "/admin/structure/types/manage/{node_type}"},
        id_field_type="string",
    ),
    EntityTypeDefinition(
        id="user",
        label="User",
        plural_label="users",
        fieldable=True,
        has_view_builder=True,
        field_ui_base_route="entity.user.admin_form",
        link_templates={
            "canonical": "/user/{user}",
            "admin-form": "/admin/config/people/accounts",
        },
        keys={"id": "uid", "label": "name"},
        bundles={"user": "User"},
    ),
    EntityTypeDefinition(
        id="taxonomy_term",
        label="Taxonomy term",
        plural_label="taxonomy terms",
        fieldable=True,
        has_view_builder=True,
        field_ui_base_route="entity.taxonomy_vocabulary.overview_form",
        link_templates={"canonical": "/taxonomy/term/{taxonomy_term}"},
        keys={"id": "tid", "bundle": "vid", "label": "name"},
        bundle_entity_type="taxonomy_vocabulary",
        bundles={"tags": "Tags"},
    ),
    EntityTypeDefinition(
        id="taxonomy_vocabulary",
        label="Taxonomy vocabulary",
        plural_label="taxonomy vocabularies",
        link_templates={"overview-form": "/admin/structure/taxonomy/manage/{taxonomy_vocabulary}/overview"},
        id_field_type="string",
    ),
    # Blocks are rendered inside other pages, so there is no canonical page to override
    EntityTypeDefinition(
        id="block_content",
        label="Custom block",
        plural_label="custom blocks",
        fieldable=True,
        has_view_builder=True,
        field_ui_base_route="entity.block_content_type.edit_form",
        keys={"id": "id", "bundle": "type", "label": "info"},
        bundle_entity_type="block_content_type",
        bundles={"basic": "Basic block"},
    ),
    EntityTypeDefinition(
        id="block_content_type",
        label="Custom block type",
        plural_label="custom block types",
        link_templates={"edit-form": "/admin/structure/block/block-content/manage/{block_content_type}"},
        id_field_type="string",
    ),
    EntityTypeDefinition(
        id="entity_view_display",
        label="Entity view display",
        plural_label="entity view displays",
        id_field_type="string",
    ),
]


class EntityTypeManager:
    def __init__(self, definitions: list[EntityTypeDefinition] | None = None):
        self._definitions: dict[str, EntityTypeDefinition] = {}
        for definition in definitions if definitions is not None else DEFAULT_ENTITY_TYPES:
            self.add_definition(definition)

    def add_definition(self, definition: EntityTypeDefinition) -> None:
        if definition.id in self._definitions:
            logger.warning(f"Replacing entity type definition '{definition.id}'")
        self._definitions[definition.id] = definition

    def has_definition(self, entity_type_id: str) -> bool:
        return entity_type_id in self._definitions

    def get_definition(self, entity_type_id: str, exception_on_invalid: bool = True) -> EntityTypeDefinition | None:
        definition = self._definitions.get(entity_type_id)
        if definition is None and exception_on_invalid:
            raise EntityTypeNotFoundError(entity_type_id)
        return definition

    def get_definitions(self) -> dict[str, EntityTypeDefinition]:
        return dict(self._definitions)


@lru_cache
def get_entity_type_manager() -> EntityTypeManager:
    return EntityTypeManager()
