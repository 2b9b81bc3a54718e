"""Layout tempstore model - unsaved layout drafts per section storage"""

from sqlalchemy import String, JSON
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class LayoutTempstoreEntry(TimestampMixin, Base):
    """
    Draft sections for one section storage.

    ``storage_id`` uses the storage's dotted identifier
    (``node.article.default`` for defaults, ``node.1`` for overrides).
    """
    __tablename__ = "layout_tempstore"

    storage_type: Mapped[str] = mapped_column(String(64), primary_key=True)
    storage_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    sections: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    def __repr__(self):
        return f"<LayoutTempstoreEntry(storage_type='{self.storage_type}', storage_id='{self.storage_id}')>"
