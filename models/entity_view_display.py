"""Entity view display model - per-bundle display configuration and its default layout"""

from copy import deepcopy
from typing import Any

from sqlalchemy import String, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.orm.attributes import flag_modified

from models.base import Base, TimestampMixin
from models.section_list import SectionListMixin, SerializedSectionsMixin
from schemas.section import Section

LAYOUT_BUILDER_MODULE = "layout_builder"


class EntityViewDisplay(TimestampMixin, SerializedSectionsMixin, SectionListMixin, Base):
    """
    Display settings of one view mode of one bundle.

    The display is itself the section list of the ``defaults`` section
    storage. Layout Builder state lives in the ``layout_builder`` third-party
    settings: ``enabled``, ``allow_custom`` and ``sections``.
    """
    __tablename__ = "entity_view_displays"

    # "{target_entity_type}.{bundle}.{mode}"
    id: Mapped[str] = mapped_column(String(255), primary_key=True)

    target_entity_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    bundle: Mapped[str] = mapped_column(String(64), nullable=False)
    mode: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    third_party_settings: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    __table_args__ = (
        UniqueConstraint('target_entity_type', 'bundle', 'mode', name='uq_entity_view_display_target'),
    )

    def __repr__(self):
        return f"<EntityViewDisplay(id='{self.id}', status={self.status})>"

    def get_target_entity_type_id(self) -> str:
        return self.target_entity_type

    def get_target_bundle(self) -> str:
        return self.bundle

    def get_mode(self) -> str:
        return self.mode

    def get_cache_tags(self) -> list[str]:
        return [f"config:core.entity_view_display.{self.id}"]

    # Third-party settings

    def get_third_party_setting(self, module: str, key: str, default: Any = None) -> Any:
        return (self.third_party_settings or {}).get(module, {}).get(key, default)

    def get_third_party_settings(self, module: str) -> dict[str, Any]:
        return dict((self.third_party_settings or {}).get(module, {}))

    def set_third_party_setting(self, module: str, key: str, value: Any) -> "EntityViewDisplay":
        settings = deepcopy(self.third_party_settings or {})
        settings.setdefault(module, {})[key] = value
        self.third_party_settings = settings
        flag_modified(self, "third_party_settings")
        return self

    def unset_third_party_setting(self, module: str, key: str) -> "EntityViewDisplay":
        settings = deepcopy(self.third_party_settings or {})
        module_settings = settings.get(module, {})
        module_settings.pop(key, None)
        if not module_settings:
            settings.pop(module, None)
        self.third_party_settings = settings
        flag_modified(self, "third_party_settings")
        return self

    def get_third_party_providers(self) -> list[str]:
        return list((self.third_party_settings or {}).keys())

    # Layout Builder flags

    def is_layout_builder_enabled(self) -> bool:
        return bool(self.get_third_party_setting(LAYOUT_BUILDER_MODULE, "enabled", False))

    def enable_layout_builder(self) -> "EntityViewDisplay":
        return self.set_third_party_setting(LAYOUT_BUILDER_MODULE, "enabled", True)

    def disable_layout_builder(self) -> "EntityViewDisplay":
        self.set_overridable(False)
        return self.set_third_party_setting(LAYOUT_BUILDER_MODULE, "enabled", False)

    def is_overridable(self) -> bool:
        return self.is_layout_builder_enabled() and bool(
            self.get_third_party_setting(LAYOUT_BUILDER_MODULE, "allow_custom", False)
        )

    def set_overridable(self, overridable: bool = True) -> "EntityViewDisplay":
        self.set_third_party_setting(LAYOUT_BUILDER_MODULE, "allow_custom", overridable)
        # Overriding per entity only makes sense with the builder switched on
        if overridable:
            self.enable_layout_builder()
        return self

    # Section list

    def get_sections(self) -> list[Section]:
        return self._cached_sections()

    def _set_sections(self, sections: list[Section]) -> None:
        self._replace_sections(sections)

    def _read_section_data(self) -> list[dict[str, Any]]:
        return self.get_third_party_setting(LAYOUT_BUILDER_MODULE, "sections", [])

    def _write_section_data(self, data: list[dict[str, Any]]) -> None:
        self.set_third_party_setting(LAYOUT_BUILDER_MODULE, "sections", data)
