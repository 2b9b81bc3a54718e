import pytest

from schemas.section import InvalidComponentError, Section, SectionComponent


def component(uuid: str, region: str = "content", weight: int = 0) -> SectionComponent:
    return SectionComponent(uuid=uuid, region=region, weight=weight, configuration={"id": "system_branding_block"})


@pytest.mark.unit
class TestSectionComponent:

    def test_get_plugin_id(self):
        assert component("a").get_plugin_id() == "system_branding_block"

    def test_get_plugin_id_without_id(self):
        with pytest.raises(ValueError, match='"a" UUID'):
            SectionComponent(uuid="a", region="content").get_plugin_id()

    def test_from_array_restores_component(self):
        original = component("a", region="first", weight=3)

        assert SectionComponent.from_array(original.to_array()) == original


@pytest.mark.unit
class TestSection:

    def setup_method(self):
        self.section = Section(layout_id="layout_twocol")

    def test_get_component_unknown_uuid(self):
        with pytest.raises(InvalidComponentError):
            self.section.get_component("missing")

    def test_append_component_gets_next_weight(self):
        self.section.append_component(component("a"))
        self.section.append_component(component("b"))
        self.section.append_component(component("c", region="second"))

        assert self.section.get_component("a").get_weight() == 0
        assert self.section.get_component("b").get_weight() == 1
        assert self.section.get_component("c").get_weight() == 0

    def test_insert_component_reweights_region(self):
        self.section.append_component(component("a"))
        self.section.append_component(component("b"))
        self.section.insert_component(1, component("c"))

        assert list(self.section.get_components_by_region("content")) == ["a", "c", "b"]

    def test_insert_component_invalid_delta(self):
        with pytest.raises(IndexError):
            self.section.insert_component(2, component("a"))

    def test_insert_after_component(self):
        self.section.append_component(component("a"))
        self.section.append_component(component("b"))
        self.section.insert_after_component("a", component("c"))

        assert list(self.section.get_components_by_region("content")) == ["a", "c", "b"]

    def test_insert_after_unknown_component(self):
        with pytest.raises(InvalidComponentError):
            self.section.insert_after_component("missing", component("c"))

    def test_remove_component(self):
        self.section.append_component(component("a"))
        self.section.remove_component("a")

        assert self.section.get_components() == {}

    def test_to_array(self):
        self.section.set_layout_settings({"label": "Hero"})
        self.section.append_component(component("a"))

        data = self.section.to_array()

        assert data["layout_id"] == "layout_twocol"
        assert data["layout_settings"] == {"label": "Hero"}
        assert data["components"]["a"]["region"] == "content"
        assert Section.from_array(data) == self.section
