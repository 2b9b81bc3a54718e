"""Field config model - attaches a configurable field to one bundle"""

from sqlalchemy import String, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base, TimestampMixin


class FieldConfig(TimestampMixin, Base):
    __tablename__ = "field_configs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    entity_type_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    bundle: Mapped[str] = mapped_column(String(64), nullable=False)
    field_name: Mapped[str] = mapped_column(String(128), nullable=False)
    field_type: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        # A field can be attached to a bundle once
        UniqueConstraint('entity_type_id', 'bundle', 'field_name', name='uq_field_config_bundle_field'),
    )

    def __repr__(self):
        return f"<FieldConfig({self.entity_type_id}.{self.bundle}.{self.field_name}, type='{self.field_type}')>"
