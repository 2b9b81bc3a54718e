"""Typed context values and the per-storage context records built from them"""

from dataclasses import dataclass
from typing import Any, Mapping

from models import EntityViewDisplay
from services.section_storage.exceptions import ContextException

DISPLAY_DATA_TYPE = "entity:entity_view_display"


@dataclass
class Context:
    data_type: str
    value: Any

    @classmethod
    def from_entity(cls, entity) -> "Context":
        if isinstance(entity, EntityViewDisplay):
            return cls(DISPLAY_DATA_TYPE, entity)
        return cls(f"entity:{entity.entity_type_id}", entity)

    def get_context_value(self) -> Any:
        return self.value

    def has_context_value(self) -> bool:
        return self.value is not None


def _require(mapping: Mapping[str, Context], name: str, owner: str) -> Context:
    context = mapping.get(name)
    if context is None:
        raise ContextException(f'The "{name}" context is required by the "{owner}" section storage')
    return context


@dataclass
class DefaultsContexts:
    display: Context

    def __post_init__(self):
        if self.display.data_type != DISPLAY_DATA_TYPE or not self.display.has_context_value():
            raise ContextException(
                f'The "display" context must hold an entity view display, got "{self.display.data_type}"'
            )

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Context]) -> "DefaultsContexts":
        unknown = set(mapping) - {"display"}
        if unknown:
            raise ContextException(f"Unknown contexts for defaults storage: {sorted(unknown)}")
        return cls(display=_require(mapping, "display", "defaults"))

    def to_dict(self) -> dict[str, Context]:
        return {"display": self.display}


@dataclass
class OverridesContexts:
    entity: Context
    view_mode: Context | None = None

    def __post_init__(self):
        if not self.entity.data_type.startswith("entity:") or not self.entity.has_context_value():
            raise ContextException(f'The "entity" context must hold an entity, got "{self.entity.data_type}"')
        if self.entity.data_type == DISPLAY_DATA_TYPE:
            raise ContextException('The "entity" context cannot hold an entity view display')
        if self.view_mode is not None and self.view_mode.data_type != "string":
            raise ContextException(f'The "view_mode" context must be a string, got "{self.view_mode.data_type}"')

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Context]) -> "OverridesContexts":
        unknown = set(mapping) - {"entity", "view_mode"}
        if unknown:
            raise ContextException(f"Unknown contexts for overrides storage: {sorted(unknown)}")
        return cls(entity=_require(mapping, "entity", "overrides"), view_mode=mapping.get("view_mode"))

    def to_dict(self) -> dict[str, Context]:
        contexts = {"entity": self.entity}
        if self.view_mode is not None:
            contexts["view_mode"] = self.view_mode
        return contexts
