"""Section schemas - layout sections and the components placed in them"""

from typing import Any

from pydantic import BaseModel, Field


class InvalidComponentError(KeyError):
    pass


class SectionComponent(BaseModel):
    """A single placed block inside a section, addressed by its UUID"""
    uuid: str
    region: str
    configuration: dict[str, Any] = Field(default_factory=dict)
    weight: int = 0
    additional: dict[str, Any] = Field(default_factory=dict)

    def get_plugin_id(self) -> str:
        if not self.configuration.get("id"):
            raise ValueError(f'No plugin ID specified for component with "{self.uuid}" UUID')
        return self.configuration["id"]

    def get_region(self) -> str:
        return self.region

    def set_region(self, region: str) -> "SectionComponent":
        self.region = region
        return self

    def get_weight(self) -> int:
        return self.weight

    def set_weight(self, weight: int) -> "SectionComponent":
        self.weight = weight
        return self

    def get_configuration(self) -> dict[str, Any]:
        return self.configuration

    def set_configuration(self, configuration: dict[str, Any]) -> "SectionComponent":
        self.configuration = configuration
        return self

    def to_array(self) -> dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "SectionComponent":
        return cls.model_validate(data)


class Section(BaseModel):
    """
    One layout region's content.

    The layout ID is fixed for the life of the section; settings and
    components are mutable. Components keep insertion order, and
    ``get_components_by_region`` orders them by weight.
    """
    layout_id: str
    layout_settings: dict[str, Any] = Field(default_factory=dict)
    components: dict[str, SectionComponent] = Field(default_factory=dict)

    def get_layout_id(self) -> str:
        return self.layout_id

    def get_layout_settings(self) -> dict[str, Any]:
        return self.layout_settings

    def set_layout_settings(self, layout_settings: dict[str, Any]) -> "Section":
        self.layout_settings = layout_settings
        return self

    def get_components(self) -> dict[str, SectionComponent]:
        return self.components

    def get_component(self, uuid: str) -> SectionComponent:
        if uuid not in self.components:
            raise InvalidComponentError(f'Invalid UUID "{uuid}"')
        return self.components[uuid]

    def set_component(self, component: SectionComponent) -> "Section":
        self.components[component.uuid] = component
        return self

    def remove_component(self, uuid: str) -> "Section":
        self.components.pop(uuid, None)
        return self

    def append_component(self, component: SectionComponent) -> "Section":
        component.set_weight(self.get_next_highest_weight(component.region))
        return self.set_component(component)

    def insert_component(self, delta: int, component: SectionComponent) -> "Section":
        region_components = list(self.get_components_by_region(component.region).values())
        if delta < 0 or delta > len(region_components):
            raise IndexError(f"Invalid delta {delta} for region {component.region}")

        region_components.insert(delta, component)
        for weight, region_component in enumerate(region_components):
            region_component.set_weight(weight)
        return self.set_component(component)

    def insert_after_component(self, preceding_uuid: str, component: SectionComponent) -> "Section":
        uuids = list(self.get_components_by_region(component.region))
        if preceding_uuid not in uuids:
            raise InvalidComponentError(
                f'Invalid preceding UUID "{preceding_uuid}" in region {component.region}'
            )
        return self.insert_component(uuids.index(preceding_uuid) + 1, component)

    def get_components_by_region(self, region: str) -> dict[str, SectionComponent]:
        in_region = [c for c in self.components.values() if c.region == region]
        return {c.uuid: c for c in sorted(in_region, key=lambda c: c.weight)}

    def get_next_highest_weight(self, region: str) -> int:
        weights = [c.weight for c in self.components.values() if c.region == region]
        return max(weights) + 1 if weights else 0

    def to_array(self) -> dict[str, Any]:
        return {
            "layout_id": self.layout_id,
            "layout_settings": self.layout_settings,
            "components": {uuid: c.to_array() for uuid, c in self.components.items()},
        }

    @classmethod
    def from_array(cls, data: dict[str, Any]) -> "Section":
        return cls.model_validate(data)
