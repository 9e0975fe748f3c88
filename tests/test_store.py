"""Tests for SettingsStore."""

import asyncio

import pytest

from settlex import Lifecycle, SettingsStore, StoreUnavailableError

SCHEMA = {"vale_path": "", "config_path": "", "debounce_seconds": 0.5}


class TestStore:
    def test_creation_from_schema(self):
        s = SettingsStore({"x": 10, "y": "hello"})
        assert s.get("x") == 10
        assert s.get("y") == "hello"

    def test_initial_overrides(self):
        s = SettingsStore({"x": 10, "y": "hello"}, initial={"x": 99})
        assert s.get("x") == 99
        assert s.get("y") == "hello"

    def test_get_nonexistent(self):
        s = SettingsStore({"x": 1})
        assert s.get("nope") is None

    def test_set(self):
        s = SettingsStore({"x": 0})
        s.set("x", 42)
        assert s.get("x") == 42

    def test_set_nonexistent_is_noop(self):
        s = SettingsStore({"x": 0})
        s.set("nope", 99)  # no-op, no error
        assert s.snapshot() == {"x": 0}

    def test_update_batches(self):
        s = SettingsStore({"x": 0, "y": 0})
        log = []
        s.observable("x").subscribe(lambda v: log.append((v, s.get("y"))))
        s.update({"x": 1, "y": 2})
        assert log == [(1, 2)]

    def test_no_writes_after_dispose(self):
        s = SettingsStore({"x": 0})
        s.dispose()
        s.set("x", 5)
        assert s.get("x") == 0


class TestPersistence:
    def test_load(self, config_store):
        async def scenario():
            s = SettingsStore(SCHEMA, config_store)
            await s.load()
            return s.snapshot()

        assert asyncio.run(scenario()) == {
            "vale_path": "/usr/local/bin/vale",
            "config_path": "",
            "debounce_seconds": 0.5,
        }

    def test_save(self, config_store):
        async def scenario():
            s = SettingsStore(SCHEMA, config_store)
            await s.save("config_path", "/home/me/.vale.ini")
            return s.get("config_path")

        assert asyncio.run(scenario()) == "/home/me/.vale.ini"
        assert config_store.saves == [{"config_path": "/home/me/.vale.ini"}]
        assert config_store.document["config_path"] == "/home/me/.vale.ini"

    def test_failed_save_rolls_back_to_store(self, config_store):
        async def scenario():
            s = SettingsStore(SCHEMA, config_store)
            await s.load()
            config_store.fail_with = OSError("Failed to write config")
            seen = []
            s.observable("vale_path").subscribe(seen.append)
            with pytest.raises(OSError, match="Failed to write config"):
                await s.save("vale_path", "/opt/vale")
            return s.get("vale_path"), seen

        value, seen = asyncio.run(scenario())
        assert value == "/usr/local/bin/vale"
        assert seen == ["/opt/vale", "/usr/local/bin/vale"]

    def test_save_unknown_key(self, config_store):
        async def scenario():
            s = SettingsStore(SCHEMA, config_store)
            with pytest.raises(KeyError):
                await s.save("nope", 1)

        asyncio.run(scenario())
        assert config_store.saves == []

    def test_missing_store(self):
        async def scenario():
            s = SettingsStore(SCHEMA)
            with pytest.raises(StoreUnavailableError):
                await s.load()
            with pytest.raises(StoreUnavailableError):
                await s.save("vale_path", "/opt/vale")

        asyncio.run(scenario())

    def test_load_after_destroy_changes_nothing(self, config_store):
        async def scenario():
            lifecycle = Lifecycle("settings-page")
            s = SettingsStore(SCHEMA, config_store, lifecycle=lifecycle)
            lifecycle.destroy()
            await s.load()
            return s.get("vale_path")

        assert asyncio.run(scenario()) == ""
