from concurrent.futures import ThreadPoolExecutor

import pytest
from faker import Faker

from services.entity_type_manager import EntityTypeNotFoundError
from services.sample_entity_generator import SampleEntityGenerator


@pytest.mark.unit
class TestSampleEntityGenerator:

    @pytest.fixture(autouse=True)
    def setup(self, entity_type_manager):
        faker = Faker()
        faker.seed_instance(1234)
        self.generator = SampleEntityGenerator(entity_type_manager, faker)

    def test_get_builds_transient_entity(self):
        entity = self.generator.get("node", "article")

        assert entity.entity_type_id == "node"
        assert entity.bundle == "article"
        assert entity.title
        assert entity.is_new()

    def test_get_is_cached_per_bundle(self):
        assert self.generator.get("node", "article") is self.generator.get("node", "article")
        assert self.generator.get("node", "article") is not self.generator.get("node", "page")

    def test_delete(self):
        first = self.generator.get("node", "article")
        self.generator.delete("node", "article")

        assert self.generator.get("node", "article") is not first

    def test_unknown_entity_type(self):
        with pytest.raises(EntityTypeNotFoundError):
            self.generator.get("commerce_product", "default")

    def test_concurrent_get_shares_one_sample(self):
        with ThreadPoolExecutor(max_workers=8) as executor:
            samples = list(executor.map(lambda _: self.generator.get("node", "article"), range(32)))

        assert all(sample is samples[0] for sample in samples)
