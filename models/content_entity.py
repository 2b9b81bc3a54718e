"""Content entity model - fieldable content records that may carry a layout override"""

import uuid
from typing import Any, Optional

from sqlalchemy import String, Integer, JSON
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.orm.attributes import flag_modified

from models.base import Base, TimestampMixin
from models.section_list import SerializedSectionsMixin, LayoutSectionItemList

LAYOUT_FIELD_NAME = "layout_builder__layout"


class ContentEntity(TimestampMixin, SerializedSectionsMixin, Base):
    """
    A content record of any fieldable entity type (node, user, term...).

    Whether the layout field is attached to the record's bundle is decided
    by the field configuration, not by this row; see EntityFieldManager.
    """
    __tablename__ = "content_entities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uuid: Mapped[str] = mapped_column(String(36), default=lambda: str(uuid.uuid4()), nullable=False, unique=True)

    entity_type_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    bundle: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Override sections, serialized Section.to_array() items in order
    layout_sections: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)

    def __repr__(self):
        return f"<ContentEntity(type='{self.entity_type_id}', id={self.id}, bundle='{self.bundle}')>"

    def label(self) -> str | None:
        return self.title

    def is_new(self) -> bool:
        return self.id is None

    def get(self, field_name: str) -> LayoutSectionItemList:
        if field_name != LAYOUT_FIELD_NAME:
            raise KeyError(f'Field "{field_name}" is unknown')
        return LayoutSectionItemList(self, field_name)

    def get_cache_tags(self) -> list[str]:
        return [f"{self.entity_type_id}:{self.id}"]

    def _read_section_data(self) -> list[dict[str, Any]]:
        return self.layout_sections or []

    def _write_section_data(self, data: list[dict[str, Any]]) -> None:
        self.layout_sections = data
        flag_modified(self, "layout_sections")
