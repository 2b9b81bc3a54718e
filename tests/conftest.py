import os
from typing import Generator

# Must be set before the application and its engine are imported
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient
from faker import Faker

from main import app
from models.base import Base
from models import EntityViewDisplay, ContentEntity
from db.session import get_db
from core.settings import Settings
from schemas.section import Section, SectionComponent
from repositories.entity_view_display_repository import EntityViewDisplayRepository
from repositories.content_entity_repository import ContentEntityRepository
from repositories.layout_tempstore_repository import LayoutTempstoreRepository
from services.entity_type_manager import EntityTypeManager
from services.entity_field_manager import EntityFieldManager
from services.sample_entity_generator import SampleEntityGenerator
from services.section_storage.manager import build_section_storage_manager

fake = Faker()

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={
        "check_same_thread": False,
    },
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a test database session."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database session override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def mock_settings():
    """Mock settings for testing."""
    return Settings(
        DATABASE_NAME="test_db",
        DATABASE_USER="test_user",
        DATABASE_PASSWORD="test_pass",
        DATABASE_HOST="localhost",
        DATABASE_PORT=5432,
        LAYOUT_BUILDER_DEFAULT_VIEW_MODE="full",
    )


@pytest.fixture
def entity_type_manager() -> EntityTypeManager:
    return EntityTypeManager()


@pytest.fixture
def display_repository(db_session: Session) -> EntityViewDisplayRepository:
    return EntityViewDisplayRepository(db_session)


@pytest.fixture
def entity_repository(db_session: Session) -> ContentEntityRepository:
    return ContentEntityRepository(db_session)


@pytest.fixture
def tempstore(db_session: Session) -> LayoutTempstoreRepository:
    return LayoutTempstoreRepository(db_session)


@pytest.fixture
def entity_field_manager(db_session: Session, entity_type_manager: EntityTypeManager) -> EntityFieldManager:
    return EntityFieldManager(db_session, entity_type_manager)


@pytest.fixture
def section_storage_manager(db_session: Session, entity_type_manager: EntityTypeManager):
    return build_section_storage_manager(db_session, entity_type_manager, SampleEntityGenerator(entity_type_manager))


def _make_section(layout_id: str = "layout_onecol", label: str | None = None) -> Section:
    """A section holding one component in its content region"""
    component = SectionComponent(
        uuid=fake.uuid4(),
        region="content",
        configuration={"id": "system_powered_by_block", "label": label or fake.sentence(nb_words=3)},
    )
    return Section(layout_id=layout_id, components={component.uuid: component})


@pytest.fixture
def make_section():
    """Factory for sections with one component"""
    return _make_section


@pytest.fixture
def sample_section() -> Section:
    return _make_section()


@pytest.fixture
def article_display(display_repository: EntityViewDisplayRepository) -> EntityViewDisplay:
    """A saved, Layout Builder enabled and overridable full display of articles."""
    display = display_repository.create({"targetEntityType": "node", "bundle": "article", "mode": "full"})
    display.set_overridable(True)
    display.append_section(_make_section(label="Default block"))
    display_repository.save(display)
    return display


@pytest.fixture
def sample_node(article_display: EntityViewDisplay, entity_repository: ContentEntityRepository) -> ContentEntity:
    """A saved article without a layout of its own."""
    node = entity_repository.create("node", {"bundle": "article", "title": fake.sentence(nb_words=4)})
    entity_repository.save(node)
    return node


@pytest.fixture
def sample_page(db_session: Session, entity_repository: ContentEntityRepository) -> ContentEntity:
    """A saved page; pages have no layout field."""
    node = entity_repository.create("node", {"bundle": "page", "title": fake.sentence(nb_words=4)})
    entity_repository.save(node)
    return node
