"""Layered configuration and TURNSTILE_* overrides."""
import pytest

from turnstile.core.config import (
    ConfigManager,
    chain_offsets,
    clear_config_cache,
    default_handler_order,
    get_config,
    is_cached,
)
from turnstile.core.exceptions import ConfigError
from turnstile.core.state import Identity, Machine
from turnstile.core.utils.merge import deep_merge


class TestConfigManager:
    def test_bundled_defaults(self):
        cfg = ConfigManager(environ={}).load_config()
        assert cfg["handlers"]["default_order"] == 100
        assert cfg["chains"] == {"watch_offset": 50, "finish_offset": 100}
        assert cfg["logging"]["level"] == "WARNING"

    def test_project_file_is_merged(self, write_yaml):
        path = write_yaml("chains:\n  finish_offset: 80\n", name="turnstile.yaml")
        cfg = ConfigManager(path, environ={}).load_config()
        assert cfg["chains"] == {"watch_offset": 50, "finish_offset": 80}

    def test_config_path_from_environment(self, write_yaml):
        path = write_yaml("handlers:\n  default_order: 7\n", name="turnstile.yaml")
        manager = ConfigManager(environ={"TURNSTILE_CONFIG": str(path)})
        assert manager.get("handlers.default_order") == 7

    def test_env_overrides_are_typed(self):
        env = {
            "TURNSTILE_HANDLERS__DEFAULT_ORDER": "42",
            "TURNSTILE_LOGGING__LEVEL": "debug",
            "TURNSTILE_EXTRA__RATIO": "0.5",
            "TURNSTILE_EXTRA__ENABLED": "true",
            "TURNSTILE_EXTRA__TAGS": '["a", "b"]',
        }
        cfg = ConfigManager(environ=env).load_config()
        assert cfg["handlers"]["default_order"] == 42
        assert cfg["logging"]["level"] == "debug"
        assert cfg["extra"] == {"ratio": 0.5, "enabled": True, "tags": ["a", "b"]}

    def test_malformed_override_key(self):
        manager = ConfigManager(environ={"TURNSTILE_CHAINS____WATCH_OFFSET": "1"})
        with pytest.raises(ConfigError):
            manager.load_config()
        assert manager.load_config(strict=False)["chains"]["watch_offset"] == 50

    def test_override_through_scalar_is_rejected(self):
        manager = ConfigManager(environ={"TURNSTILE_HANDLERS__DEFAULT_ORDER__X": "1"})
        with pytest.raises(ConfigError):
            manager.load_config()

    def test_invalid_yaml_fails_closed(self, write_yaml):
        path = write_yaml("chains: [unclosed\n", name="broken.yaml")
        with pytest.raises(ConfigError):
            ConfigManager(path, environ={}).load_config()

    def test_missing_file_fails_closed(self, tmp_path):
        with pytest.raises(ConfigError):
            ConfigManager(tmp_path / "absent.yaml", environ={}).load_config()

    def test_non_mapping_file(self, write_yaml):
        path = write_yaml("- just\n- a list\n", name="list.yaml")
        with pytest.raises(ConfigError):
            ConfigManager(path, environ={}).load_config()

    def test_get_default_for_missing_key(self):
        assert ConfigManager(environ={}).get("nope.nothing", "fallback") == "fallback"

    def test_overrides_do_not_leak_into_bundled_defaults(self):
        ConfigManager(environ={"TURNSTILE_CHAINS__WATCH_OFFSET": "1"}).load_config()
        assert ConfigManager(environ={}).load_config()["chains"]["watch_offset"] == 50


class TestConfigCache:
    def test_cached_until_environment_changes(self, monkeypatch):
        first = get_config()
        assert is_cached()
        assert get_config() is first
        monkeypatch.setenv("TURNSTILE_CHAINS__WATCH_OFFSET", "5")
        assert not is_cached()
        assert chain_offsets() == (5, 100)

    def test_clear(self):
        get_config()
        clear_config_cache()
        assert not is_cached()

    def test_typed_accessors(self, monkeypatch):
        assert default_handler_order() == 100
        monkeypatch.setenv("TURNSTILE_HANDLERS__DEFAULT_ORDER", "3")
        assert default_handler_order() == 3

    def test_non_numeric_default_order_is_a_config_error(self, monkeypatch):
        monkeypatch.setenv("TURNSTILE_HANDLERS__DEFAULT_ORDER", "soon")
        with pytest.raises(ConfigError):
            default_handler_order()
        with pytest.raises(ConfigError):
            Machine("idle")

    def test_chain_offsets_must_leave_room_for_the_watcher(self, monkeypatch):
        monkeypatch.setenv("TURNSTILE_CHAINS__WATCH_OFFSET", "100")
        with pytest.raises(ConfigError) as excinfo:
            chain_offsets()
        assert excinfo.value.context == {"watch_offset": 100, "finish_offset": 100}

    def test_engine_reads_default_order_once(self, monkeypatch):
        monkeypatch.setenv("TURNSTILE_HANDLERS__DEFAULT_ORDER", "5")
        machine = Machine("idle")
        monkeypatch.setenv("TURNSTILE_HANDLERS__DEFAULT_ORDER", "9")
        machine.add_handler("go", lambda ctx: None)
        machine.add_error_handler(lambda ctx: None)
        assert [info.order for info in machine._handlers[Identity.of("go")]] == [5]
        assert [info.order for info in machine._error_handlers] == [5]


class TestMerge:
    def test_deep_merge_is_recursive_and_pure(self):
        base = {"a": {"x": 1, "y": 2}, "b": 1}
        merged = deep_merge(base, {"a": {"y": 3}, "c": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
        assert base == {"a": {"x": 1, "y": 2}, "b": 1}

    def test_lists_are_replaced(self):
        assert deep_merge({"a": [1, 2]}, {"a": [3]}) == {"a": [3]}
