import pytest

from models import ContentEntity, EntityViewDisplay, LAYOUT_FIELD_NAME
from models.section_list import SectionListMixin, SectionOutOfBoundsError, SerializedSectionsMixin
from schemas.section import Section


@pytest.mark.unit
class TestSectionList:

    def setup_method(self):
        self.display = EntityViewDisplay(
            id="node.article.full",
            target_entity_type="node",
            bundle="article",
            mode="full",
            status=True,
            third_party_settings={},
        )
        self.first = Section(layout_id="layout_onecol")
        self.second = Section(layout_id="layout_twocol")

    def test_empty(self):
        assert self.display.count() == 0
        assert not self.display.has_section(0)

    def test_append_and_get(self):
        self.display.append_section(self.first).append_section(self.second)

        assert self.display.count() == 2
        assert self.display.get_section(1) is self.second

    def test_insert_section(self):
        self.display.append_section(self.first)
        self.display.insert_section(0, self.second)

        assert [s.get_layout_id() for s in self.display.get_sections()] == ["layout_twocol", "layout_onecol"]

    def test_insert_out_of_range_appends(self):
        self.display.append_section(self.first)
        self.display.insert_section(5, self.second)

        assert self.display.get_section(1) is self.second

    def test_get_section_out_of_bounds(self):
        with pytest.raises(SectionOutOfBoundsError):
            self.display.get_section(0)

    def test_remove_section(self):
        self.display.append_section(self.first).append_section(self.second)
        self.display.remove_section(0)

        assert self.display.get_sections() == [self.second]

    def test_remove_section_out_of_bounds(self):
        with pytest.raises(IndexError):
            self.display.remove_section(3)

    def test_remove_all_sections(self):
        self.display.append_section(self.first)
        self.display.remove_all_sections()

        assert self.display.count() == 0

    def test_remove_all_sections_leaves_blank_section(self):
        self.display.append_section(self.first)
        self.display.remove_all_sections(set_blank=True)

        assert [s.get_layout_id() for s in self.display.get_sections()] == ["layout_builder_blank"]

    def test_edits_are_written_on_flush(self):
        self.display.append_section(self.first)

        assert "layout_builder" not in self.display.third_party_settings

        self.display.flush_sections()

        assert self.display.get_third_party_setting("layout_builder", "sections") == [self.first.to_array()]


@pytest.mark.unit
class TestLayoutSectionItemList:

    def setup_method(self):
        self.entity = ContentEntity(entity_type_id="node", bundle="article", title="Hello")

    def test_is_live_view_over_entity(self):
        self.entity.get(LAYOUT_FIELD_NAME).append_section(Section(layout_id="layout_onecol"))

        layout = self.entity.get(LAYOUT_FIELD_NAME)
        assert layout.count() == 1
        assert not layout.is_empty()
        assert layout.get_entity() is self.entity

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            self.entity.get("body")

    def test_flush_writes_column(self):
        section = Section(layout_id="layout_onecol")
        self.entity.get(LAYOUT_FIELD_NAME).append_section(section)
        self.entity.flush_sections()

        assert self.entity.layout_sections == [section.to_array()]

    def test_reads_stored_sections(self):
        entity = ContentEntity(
            entity_type_id="node",
            bundle="article",
            layout_sections=[{"layout_id": "layout_twocol", "layout_settings": {}, "components": {}}],
        )

        assert entity.get(LAYOUT_FIELD_NAME).get_section(0).get_layout_id() == "layout_twocol"


@pytest.mark.unit
class TestSectionListHooks:

    def test_missing_section_hooks(self):
        class Incomplete(SectionListMixin):
            pass

        with pytest.raises(NotImplementedError, match="Incomplete must implement get_sections"):
            Incomplete().count()
        with pytest.raises(NotImplementedError, match="_set_sections"):
            Incomplete()._set_sections([])

    def test_missing_serialization_hooks(self):
        class Incomplete(SerializedSectionsMixin):
            pass

        with pytest.raises(NotImplementedError, match="_read_section_data"):
            Incomplete().flush_sections()
