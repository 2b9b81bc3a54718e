import pytest

from models import LAYOUT_FIELD_NAME


@pytest.mark.integration
class TestLayoutBuilderEndpoints:

    @pytest.fixture(autouse=True)
    def setup(self, client, db_session, article_display, sample_node):
        self.client = client
        self.db = db_session
        self.display = article_display
        self.node = sample_node
        self.override_url = f"/api/v1/layout-builder/overrides/node.{self.node.id}"

    def test_view_override_starts_from_defaults(self):
        response = self.client.get(f"{self.override_url}/")

        assert response.status_code == 200
        data = response.json()
        assert data["storage_type"] == "overrides"
        assert data["storage_id"] == f"node.{self.node.id}"
        assert data["label"] == self.node.title
        assert data["has_unsaved_changes"] is False
        assert len(data["sections"]) == 1
        assert data["preview_contexts"] == ["layout_builder.entity"]
        assert data["layout_builder_url"] == f"/node/{self.node.id}/layout"
        assert data["redirect_url"] == f"/node/{self.node.id}"
        assert data["cache_tags"] == ["config:core.entity_view_display.node.article.full"]

    def test_view_defaults(self):
        response = self.client.get("/api/v1/layout-builder/defaults/node.article.full/")

        assert response.status_code == 200
        data = response.json()
        assert data["label"] == "Article content items"
        assert data["is_overridden"] is None
        assert data["preview_contexts"] == ["display", "layout_builder.entity"]
        assert data["layout_builder_url"] == "/admin/structure/types/manage/article/display-layout/full"
        assert data["redirect_url"] == "/admin/structure/types/manage/article/display/full"

    def test_view_disabled_display_is_forbidden(self):
        response = self.client.get("/api/v1/layout-builder/defaults/node.article.teaser/")

        assert response.status_code == 403

    def test_view_override_of_bundle_without_layout_field(self, sample_page):
        response = self.client.get(f"/api/v1/layout-builder/overrides/node.{sample_page.id}/")

        assert response.status_code == 404

    def test_view_unknown_storage_type(self):
        response = self.client.get("/api/v1/layout-builder/layout_library/node.1/")

        assert response.status_code == 404

    @pytest.mark.parametrize("storage_id", ["node", "node.article"])
    def test_view_malformed_defaults_id(self, storage_id):
        response = self.client.get(f"/api/v1/layout-builder/defaults/{storage_id}/")

        assert response.status_code == 400
        assert "section storage type is invalid" in response.json()["detail"]

    def test_edit_save_round_trip(self, make_section):
        sections = [make_section("layout_twocol"), make_section("layout_onecol")]
        payload = {"sections": [s.to_array() for s in sections]}

        response = self.client.put(f"{self.override_url}/sections/", json=payload)
        assert response.status_code == 200
        assert response.json()["has_unsaved_changes"] is True

        response = self.client.get(f"{self.override_url}/")
        assert response.json()["has_unsaved_changes"] is True
        assert [s["layout_id"] for s in response.json()["sections"]] == ["layout_twocol", "layout_onecol"]

        response = self.client.post(f"{self.override_url}/save/")
        assert response.status_code == 200
        assert response.json()["redirect_url"] == f"/node/{self.node.id}"

        self.db.refresh(self.node)
        assert self.node.layout_sections == payload["sections"]

    def test_cancel_keeps_saved_layout(self, make_section):
        self.client.put(f"{self.override_url}/sections/", json={"sections": [make_section().to_array()]})

        response = self.client.post(f"{self.override_url}/cancel/")

        assert response.status_code == 200
        self.db.refresh(self.node)
        assert self.node.layout_sections == []

    def test_revert_override(self, make_section):
        self.node.get(LAYOUT_FIELD_NAME).append_section(make_section())
        self.node.flush_sections()
        self.db.commit()

        response = self.client.post(f"{self.override_url}/revert/")

        assert response.status_code == 200
        self.db.refresh(self.node)
        assert self.node.layout_sections == []

    def test_revert_defaults_is_not_found(self):
        response = self.client.post("/api/v1/layout-builder/defaults/node.article.full/revert/")

        assert response.status_code == 404

    def test_routes(self):
        response = self.client.get("/api/v1/layout-builder/routes/")

        assert response.status_code == 200
        routes = {route["name"]: route for route in response.json()}
        assert routes["layout_builder.overrides.node.view"]["path"] == "/node/{node}/layout"
        assert routes["layout_builder.overrides.node.view"]["requirements"]["node"] == r"\d+"
        assert routes["layout_builder.defaults.node.save"]["methods"] == ["GET", "POST"]

    def test_local_tasks(self):
        response = self.client.get("/api/v1/layout-builder/local-tasks/")

        assert response.status_code == 200
        tasks = response.json()
        assert tasks["layout_builder_ui:layout_builder.overrides.node.revert"]["weight"] == 10

    def test_resolve_route(self):
        response = self.client.get(
            "/api/v1/layout-builder/resolve/layout_builder.defaults.node.view",
            params={"node_type": "article", "view_mode_name": "full"},
        )

        assert response.status_code == 200
        assert response.json()["storage_id"] == "node.article.full"
        assert response.json()["access_allowed"] is True

    def test_resolve_unknown_route(self):
        response = self.client.get("/api/v1/layout-builder/resolve/layout_builder.defaults.media.view")

        assert response.status_code == 404

    def test_resolve_unresolvable_route(self):
        response = self.client.get(
            "/api/v1/layout-builder/resolve/layout_builder.overrides.node.view", params={"node": "999"}
        )

        assert response.status_code == 404


@pytest.mark.integration
def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
