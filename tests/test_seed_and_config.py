"""Tests for the demo seed script and environment-driven settings."""

from nodetree.config import Settings, load_settings
from nodetree.nodes.store import NodeStore
from scripts.seed import DEMO_FOREST, seed
from tests.fixtures import ids


class TestSeed:
    async def test_seed_loads_demo_forest(self, db):
        count = await seed(db)
        assert count == len(DEMO_FOREST)

        store = NodeStore(db)
        assert ids(await store.list_roots()) == [1, 5, 10]
        assert ids(await store.list_descendants(1, 2)) == [2, 3, 4, 6]
        assert ids(await store.list_descendants(5, 3)) == [7, 8, 9]
        assert (await store.get(12)).title == "twelve"

    async def test_seed_replaces_existing_nodes(self, db):
        store = NodeStore(db)
        for _ in range(15):
            await store.create_with_placeholder()
        await seed(db)
        await seed(db)
        assert ids(await store.list_roots()) == [1, 5, 10]

    async def test_next_id_after_seed(self, db):
        await seed(db)
        node = await NodeStore(db).create_with_placeholder(10)
        assert node.id == 13


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "NODETREE_DB_PATH",
            "NODETREE_LOG_LEVEL",
            "NODETREE_DEFAULT_LANGUAGE",
            "NODETREE_CREATE_RETRIES",
            "NODETREE_CORS_ORIGINS",
            "NODETREE_HOST",
            "NODETREE_PORT",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = load_settings(env_file=None)
        assert settings == Settings()
        assert settings.db_path == "nodetree.db"
        assert settings.create_retries == 3
        assert settings.port == 8000

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("NODETREE_DB_PATH", "/tmp/forest.db")
        monkeypatch.setenv("NODETREE_LOG_LEVEL", "debug")
        monkeypatch.setenv("NODETREE_DEFAULT_LANGUAGE", "es")
        monkeypatch.setenv("NODETREE_CREATE_RETRIES", "5")
        monkeypatch.setenv("NODETREE_CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("NODETREE_HOST", "0.0.0.0")
        monkeypatch.setenv("NODETREE_PORT", "9000")
        settings = load_settings(env_file=None)
        assert settings.db_path == "/tmp/forest.db"
        assert settings.log_level == "DEBUG"
        assert settings.default_language == "es"
        assert settings.create_retries == 5
        assert settings.cors_origins == ["http://a.test", "http://b.test"]
        assert settings.host == "0.0.0.0"
        assert settings.port == 9000
