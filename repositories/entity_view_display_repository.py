"""Entity view display repository - load/create/save displays by their dotted ID"""

import logging

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from db.session import get_db
from models import EntityViewDisplay, ContentEntity, FieldConfig, LAYOUT_FIELD_NAME
from services.section_storage.identifiers import encode_display_id

logger = logging.getLogger(__name__)

LAYOUT_FIELD_TYPE = "layout_section"


class EntityViewDisplayRepository:
    def __init__(self, session: Session):
        self.session = session

    def load(self, display_id: str) -> EntityViewDisplay | None:
        return self.session.get(EntityViewDisplay, display_id)

    def create(self, values: dict) -> EntityViewDisplay:
        """Build a display in memory; nothing is written until save()"""
        entity_type_id = values["targetEntityType"]
        bundle = values["bundle"]
        mode = values["mode"]
        return EntityViewDisplay(
            id=encode_display_id(entity_type_id, bundle, mode),
            target_entity_type=entity_type_id,
            bundle=bundle,
            mode=mode,
            status=values.get("status", True),
            third_party_settings=values.get("third_party_settings", {}),
        )

    def save(self, display: EntityViewDisplay) -> str:
        display.flush_sections()
        self._sync_layout_field(display)
        self.session.add(display)
        self.session.commit()
        self.session.refresh(display)
        logger.info(f"Saved entity view display {display.id}")
        return display.id

    def get_all_for_bundle(self, entity_type_id: str, bundle: str) -> list[EntityViewDisplay]:
        stmt = (
            select(EntityViewDisplay)
            .where(EntityViewDisplay.target_entity_type == entity_type_id)
            .where(EntityViewDisplay.bundle == bundle)
            .order_by(EntityViewDisplay.mode)
        )
        return list(self.session.scalars(stmt).all())

    def collect_render_display(self, entity: ContentEntity, view_mode: str) -> EntityViewDisplay:
        """
        Display used to render the entity in the given view mode.

        Falls back to the bundle's "default" display when the view mode has
        no enabled display of its own, and to a new, unsaved default display
        when the bundle has none at all.
        """
        candidates = [view_mode] if view_mode == "default" else [view_mode, "default"]
        for mode in candidates:
            display = self.load(encode_display_id(entity.entity_type_id, entity.bundle, mode))
            if display is not None and display.status:
                return display

        return self.create({
            "targetEntityType": entity.entity_type_id,
            "bundle": entity.bundle,
            "mode": "default",
            "status": True,
        })

    def _sync_layout_field(self, display: EntityViewDisplay) -> None:
        # Overridable displays need the layout field on their bundle, others must not have it
        config = self.session.scalar(
            select(FieldConfig)
            .where(FieldConfig.entity_type_id == display.target_entity_type)
            .where(FieldConfig.bundle == display.bundle)
            .where(FieldConfig.field_name == LAYOUT_FIELD_NAME)
        )
        if display.is_overridable() and config is None:
            self.session.add(FieldConfig(
                entity_type_id=display.target_entity_type,
                bundle=display.bundle,
                field_name=LAYOUT_FIELD_NAME,
                field_type=LAYOUT_FIELD_TYPE,
            ))
            logger.info(f"Attached {LAYOUT_FIELD_NAME} to {display.target_entity_type}.{display.bundle}")
        elif not display.is_overridable() and config is not None and self._is_last_overridable(display):
            self.session.delete(config)
            logger.info(f"Detached {LAYOUT_FIELD_NAME} from {display.target_entity_type}.{display.bundle}")

    def _is_last_overridable(self, display: EntityViewDisplay) -> bool:
        others = [
            other for other in self.get_all_for_bundle(display.target_entity_type, display.bundle)
            if other.id != display.id
        ]
        return not any(other.is_overridable() for other in others)


def get_entity_view_display_repository(db: Session = Depends(get_db)) -> EntityViewDisplayRepository:
    """Dependency for entity view display repository"""
    return EntityViewDisplayRepository(db)
