import pytest
from unittest.mock import Mock

from core.routing import RouteCollection
from models import LAYOUT_FIELD_NAME
from services.entity_type_manager import EntityTypeDefinition, EntityTypeManager
from services.section_storage.context import Context
from services.section_storage.exceptions import InvalidStorageIdError, SectionListAssignmentError
from services.section_storage.overrides import OverridesSectionStorage


@pytest.fixture
def overrides_storage(entity_type_manager, entity_field_manager, entity_repository, display_repository):
    return OverridesSectionStorage(entity_type_manager, entity_field_manager, entity_repository, display_repository)


@pytest.mark.unit
class TestOverridesSectionStorage:

    @pytest.fixture(autouse=True)
    def setup(self, overrides_storage, sample_node, article_display, display_repository, entity_repository):
        self.storage = overrides_storage
        self.node = sample_node
        self.display = article_display
        self.display_repository = display_repository
        self.entity_repository = entity_repository
        self.storage.set_context("entity", Context.from_entity(self.node))

    def test_storage_type(self):
        assert self.storage.get_storage_type() == "overrides"
        assert self.storage.FIELD_NAME == LAYOUT_FIELD_NAME

    def test_section_list_is_the_layout_field(self, sample_section):
        section_list = self.storage.get_section_list()
        section_list.append_section(sample_section)

        assert section_list.get_entity() is self.node
        assert self.node.get(LAYOUT_FIELD_NAME).get_sections() == [sample_section]

    def test_get_storage_id(self):
        assert self.storage.get_storage_id() == f"node.{self.node.id}"

    def test_label(self):
        assert self.storage.label() == self.node.title

    def test_save(self, sample_section):
        self.storage.append_section(sample_section)

        assert self.storage.save() == self.node.id
        assert self.node.layout_sections == [sample_section.to_array()]

    def test_is_overridden(self, sample_section):
        assert not self.storage.is_overridden()

        self.storage.append_section(sample_section)

        assert self.storage.is_overridden()

    def test_default_section_storage_uses_configured_view_mode(self):
        assert self.storage.get_default_section_storage() is self.display

    def test_default_section_storage_uses_view_mode_context(self):
        teaser = self.display_repository.create({"targetEntityType": "node", "bundle": "article", "mode": "teaser"})
        self.display_repository.save(teaser)
        self.storage.set_context("view_mode", Context("string", "teaser"))

        assert self.storage.get_default_section_storage() is teaser

    @pytest.mark.parametrize("enabled, has_data, expected", [
        (True, True, True),
        (True, False, True),
        (False, True, False),
        (False, False, False),
    ])
    def test_access_follows_default_display(self, enabled, has_data, expected, sample_section):
        if not enabled:
            self.display.disable_layout_builder()
        if has_data:
            self.storage.append_section(sample_section)

        assert self.storage.access("view") is expected

    def test_access_result_depends_on_default_display(self):
        result = self.storage.access("view", return_as_object=True)

        assert result.is_allowed()
        assert result.cache_dependencies == [self.display]
        assert result.cache_tags == ["config:core.entity_view_display.node.article.full"]

    def test_redirect_url(self):
        url = self.storage.get_redirect_url()

        assert url.route_name == "entity.node.canonical"
        assert url.route_parameters == {"node": self.node.id}

    def test_layout_builder_url(self):
        url = self.storage.get_layout_builder_url("revert")

        assert url.route_name == "layout_builder.overrides.node.revert"
        assert url.route_parameters == {"node": self.node.id}

    def test_contexts_during_preview_rename_entity(self):
        contexts = self.storage.get_contexts_during_preview()

        assert list(contexts) == ["layout_builder.entity"]
        assert contexts["layout_builder.entity"].get_context_value() is self.node

    def test_contexts_during_preview_keep_view_mode(self):
        self.storage.set_context("view_mode", Context("string", "teaser"))

        contexts = self.storage.get_contexts_during_preview()

        assert sorted(contexts) == ["layout_builder.entity", "view_mode"]
        assert contexts["layout_builder.entity"].get_context_value() is self.node
        assert contexts["view_mode"].get_context_value() == "teaser"
        assert "entity" not in contexts


@pytest.mark.unit
class TestOverridesSectionStorageLegacy:

    @pytest.fixture(autouse=True)
    def setup(self, overrides_storage):
        self.storage = overrides_storage

    def test_extract_id_from_route(self):
        with pytest.deprecated_call():
            assert self.storage.extract_id_from_route("node.5", {}) == "node.5"

    def test_extract_id_from_route_defaults(self):
        with pytest.deprecated_call():
            assert self.storage.extract_id_from_route(None, {"entity_type_id": "node", "node": 7}) == "node.7"

    def test_extract_id_from_route_without_entity_type(self):
        with pytest.deprecated_call():
            assert self.storage.extract_id_from_route(None, {}) is None

    def test_get_section_list_from_id(self, sample_node):
        with pytest.deprecated_call():
            section_list = self.storage.get_section_list_from_id(f"node.{sample_node.id}")

        assert section_list.get_entity() is sample_node

    def test_get_section_list_from_id_without_layout_field(self, sample_page):
        with pytest.deprecated_call(), pytest.raises(InvalidStorageIdError):
            self.storage.get_section_list_from_id(f"node.{sample_page.id}")

    @pytest.mark.parametrize("storage_id", ["node", "node.999"])
    def test_get_section_list_from_invalid_id(self, storage_id, db_session):
        with pytest.deprecated_call(), pytest.raises(InvalidStorageIdError, match=storage_id):
            self.storage.get_section_list_from_id(storage_id)

    def test_set_section_list_always_fails(self):
        with pytest.deprecated_call(), pytest.raises(SectionListAssignmentError, match="derived from context"):
            self.storage.set_section_list(Mock())


@pytest.mark.unit
class TestOverridesRouteBuilding:

    def setup_method(self):
        self.entity_field_manager = Mock()
        self.entity_field_manager.get_field_storage_definitions.side_effect = self._storage_definitions
        self.entity_type_manager = EntityTypeManager()
        self.storage = OverridesSectionStorage(self.entity_type_manager, self.entity_field_manager, Mock(), Mock())

    @staticmethod
    def _storage_definitions(entity_type_id):
        id_type = "string" if entity_type_id == "media" else "integer"
        definition = Mock()
        definition.get_type.return_value = id_type
        return {"nid": definition, "uid": definition, "tid": definition, "mid": definition}

    def test_candidate_entity_types(self):
        # Custom blocks have no canonical page to put a layout on
        assert set(self.storage.get_entity_types()) == {"node", "user", "taxonomy_term"}

    def test_builds_view_save_cancel_and_revert(self):
        collection = RouteCollection()

        self.storage.build_routes(collection)

        view = collection.get("layout_builder.overrides.node.view")
        assert view.path == "/node/{node}/layout"
        assert view.defaults["entity_type_id"] == "node"
        assert view.defaults["section_storage_type"] == "overrides"
        assert view.defaults["section_storage"] == ""
        assert view.defaults["_title"] == "Edit layout"
        assert view.options["_admin_route"] is False
        assert view.options["_layout_builder"] is True
        assert view.options["parameters"] == {
            "section_storage": {"layout_builder_tempstore": True},
            "node": {"type": "entity:node"},
        }
        assert list(view.options["parameters"]) == ["section_storage", "node"]

        assert collection.get("layout_builder.overrides.node.save").path == "/node/{node}/layout/save"
        assert collection.get("layout_builder.overrides.node.cancel").path == "/node/{node}/layout/cancel"
        revert = collection.get("layout_builder.overrides.node.revert")
        assert revert.path == "/node/{node}/layout/revert"
        assert revert.methods == ["GET", "POST"]

    def test_integer_ids_get_digit_requirement(self):
        collection = RouteCollection()

        self.storage.build_routes(collection)

        assert collection.get("layout_builder.overrides.node.view").requirements == {
            "node": r"\d+",
            "_layout_builder_access": "view",
        }

    def test_string_ids_have_no_digit_requirement(self):
        self.entity_type_manager.add_definition(EntityTypeDefinition(
            id="media",
            label="Media",
            fieldable=True,
            has_view_builder=True,
            link_templates={"canonical": "/media/{media}"},
            keys={"id": "mid"},
            id_field_type="string",
        ))
        collection = RouteCollection()

        self.storage.build_routes(collection)

        assert "media" not in collection.get("layout_builder.overrides.media.view").requirements

    def test_building_twice_gives_the_same_table(self):
        first, second = RouteCollection(), RouteCollection()

        self.storage.build_routes(first)
        self.storage.build_routes(second)
        self.storage.build_routes(second)

        assert first.names() == second.names()
        assert first.all() == second.all()

    def test_local_tasks(self):
        tasks = self.storage.build_local_tasks({"id": "layout_builder_ui"})

        view = tasks["layout_builder.overrides.node.view"]
        assert view["weight"] == 15
        assert view["base_route"] == "entity.node.canonical"
        assert view["cache_contexts"] == ["layout_builder_is_active:node"]

        parent_id = "layout_builder_ui:layout_builder.overrides.node.view"
        assert tasks["layout_builder.overrides.node.save"]["parent_id"] == parent_id
        assert "weight" not in tasks["layout_builder.overrides.node.save"]
        assert "weight" not in tasks["layout_builder.overrides.node.cancel"]

        revert = tasks["layout_builder.overrides.node.revert"]
        assert revert["title"] == "Revert to defaults"
        assert revert["weight"] == 10
        assert revert["parent_id"] == parent_id
        assert revert["cache_contexts"] == ["layout_builder_is_active:node"]
