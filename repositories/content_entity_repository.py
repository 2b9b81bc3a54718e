"""Content entity repository - load/create/save content records by type and ID"""

import logging

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from db.session import get_db
from models import ContentEntity, LAYOUT_FIELD_NAME

logger = logging.getLogger(__name__)


class ContentEntityRepository:
    def __init__(self, session: Session):
        self.session = session

    def load(self, entity_type_id: str, entity_id) -> ContentEntity | None:
        # IDs arrive from paths as strings
        try:
            numeric_id = int(entity_id)
        except (TypeError, ValueError):
            return None

        stmt = (
            select(ContentEntity)
            .where(ContentEntity.entity_type_id == entity_type_id)
            .where(ContentEntity.id == numeric_id)
        )
        return self.session.scalar(stmt)

    def create(self, entity_type_id: str, values: dict) -> ContentEntity:
        """Build an entity in memory; nothing is written until save()"""
        entity = ContentEntity(
            entity_type_id=entity_type_id,
            bundle=values.get("bundle", entity_type_id),
            title=values.get("title"),
        )
        layout = entity.get(LAYOUT_FIELD_NAME)
        for section in values.get("sections", []):
            layout.append_section(section)
        return entity

    def save(self, entity: ContentEntity) -> int:
        entity.flush_sections()
        self.session.add(entity)
        self.session.commit()
        self.session.refresh(entity)
        logger.info(f"Saved {entity.entity_type_id} {entity.id}")
        return entity.id


def get_content_entity_repository(db: Session = Depends(get_db)) -> ContentEntityRepository:
    """Dependency for content entity repository"""
    return ContentEntityRepository(db)
