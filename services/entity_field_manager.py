"""Field schema registry - base fields per entity type plus per-bundle configured fields"""

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from db.session import get_db
from models import FieldConfig
from services.entity_type_manager import EntityTypeManager, get_entity_type_manager


@dataclass(frozen=True)
class FieldStorageDefinition:
    name: str
    type: str
    revisionable: bool = False
    base_field: bool = False

    def get_type(self) -> str:
        return self.type


class EntityFieldManager:
    def __init__(self, db: Session, entity_type_manager: EntityTypeManager):
        self.db = db
        self.entity_type_manager = entity_type_manager

    def get_base_field_definitions(self, entity_type_id: str) -> dict[str, FieldStorageDefinition]:
        entity_type = self.entity_type_manager.get_definition(entity_type_id)
        definitions = {}

        id_key = entity_type.get_key("id")
        if id_key:
            definitions[id_key] = FieldStorageDefinition(id_key, entity_type.id_field_type, base_field=True)
        definitions["uuid"] = FieldStorageDefinition("uuid", "uuid", base_field=True)
        if entity_type.has_key("bundle"):
            bundle_key = entity_type.get_key("bundle")
            definitions[bundle_key] = FieldStorageDefinition(bundle_key, "entity_reference", base_field=True)
        if entity_type.has_key("label"):
            label_key = entity_type.get_key("label")
            definitions[label_key] = FieldStorageDefinition(label_key, "string", revisionable=True, base_field=True)
        return definitions

    def get_field_storage_definitions(self, entity_type_id: str) -> dict[str, FieldStorageDefinition]:
        """All fields stored for the entity type, across every bundle."""
        definitions = self.get_base_field_definitions(entity_type_id)
        configs = self.db.scalars(
            select(FieldConfig).where(FieldConfig.entity_type_id == entity_type_id)
        ).all()
        for config in configs:
            definitions.setdefault(
                config.field_name,
                FieldStorageDefinition(config.field_name, config.field_type, revisionable=True),
            )
        return definitions

    def get_field_definitions(self, entity_type_id: str, bundle: str) -> dict[str, FieldStorageDefinition]:
        """Fields present on one bundle."""
        definitions = self.get_base_field_definitions(entity_type_id)
        configs = self.db.scalars(
            select(FieldConfig)
            .where(FieldConfig.entity_type_id == entity_type_id)
            .where(FieldConfig.bundle == bundle)
        ).all()
        for config in configs:
            definitions[config.field_name] = FieldStorageDefinition(
                config.field_name, config.field_type, revisionable=True
            )
        return definitions

    def has_field(self, entity, field_name: str) -> bool:
        if not self.entity_type_manager.has_definition(entity.entity_type_id):
            return False
        return field_name in self.get_field_definitions(entity.entity_type_id, entity.bundle)


def get_entity_field_manager(
    db: Session = Depends(get_db),
    entity_type_manager: EntityTypeManager = Depends(get_entity_type_manager),
) -> EntityFieldManager:
    return EntityFieldManager(db, entity_type_manager)
