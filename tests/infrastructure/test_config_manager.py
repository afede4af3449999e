#!/usr/bin/env python3
"""Tests for the ConfigManager module."""

import pytest
import yaml

from kpackager.core.constants import DEFAULT_CONFIG_ENTRY, ErrorCode
from kpackager.infrastructure.config_manager import (
    ConfigError,
    ConfigManager,
    ConfigSource,
    deep_merge,
    get_config_manager,
    parse_env_value,
    set_global_config,
)


def _write(path, data):
    path.write_text(yaml.dump(data))
    return str(path)


class TestConfigSource:
    """Tests for ConfigSource enum."""

    def test_precedence_order(self):
        """Test config source precedence ordering."""
        assert ConfigSource.COMPILED_DEFAULTS.value < ConfigSource.USER_CONFIG.value
        assert ConfigSource.USER_CONFIG.value < ConfigSource.ENVIRONMENT.value
        assert ConfigSource.ENVIRONMENT.value < ConfigSource.CLI_ARGS.value
        assert ConfigSource.CLI_ARGS.value < ConfigSource.RUNTIME.value


class TestDeepMerge:
    """Tests for deep_merge()."""

    def test_nested_dicts_combine(self):
        """Test nested mappings merge key by key."""
        merged = deep_merge({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}}

    def test_lists_replaced(self):
        """Test lists are replaced, not concatenated."""
        assert deep_merge({"p": ["**"]}, {"p": ["*.drl"]}) == {"p": ["*.drl"]}

    def test_inputs_unchanged(self):
        """Test the base mapping is not modified."""
        base = {"a": {"x": 1}}
        deep_merge(base, {"a": {"x": 2}})
        assert base == {"a": {"x": 1}}


class TestParseEnvValue:
    """Tests for parse_env_value()."""

    @pytest.mark.parametrize(
        "raw,default,parsed",
        [("yes", False, True), ("false", True, False), ("42", 1, 42), ("1.5", 0.5, 1.5)],
    )
    def test_typed_defaults(self, raw, default, parsed):
        """Test values follow the type of their default."""
        assert parse_env_value(raw, default) == parsed

    def test_unset_default_keeps_string(self):
        """Test keys without a default are never coerced."""
        assert parse_env_value("123") == "123"
        assert parse_env_value("true") == "true"

    @pytest.mark.parametrize("raw,default", [("maybe", False), ("ten", 10)])
    def test_type_mismatch(self, raw, default):
        """Test a value that does not fit its default is rejected."""
        with pytest.raises(ConfigError, match="Expected a"):
            parse_env_value(raw, default)

    def test_list_default(self):
        """Test list keys split on commas."""
        assert parse_env_value("**.drl, **.bpmn,", []) == ["**.drl", "**.bpmn"]

    def test_string_default(self):
        """Test string keys keep the raw value."""
        assert parse_env_value("123", "drools.packagebuilder.conf") == "123"


class TestConfigManager:
    """Tests for ConfigManager."""

    def test_defaults(self):
        """Test compiled defaults are available."""
        config = ConfigManager(load_environment=False)

        assert config.get("kpackager.config_entry") == DEFAULT_CONFIG_ENTRY
        assert config.get("kpackager.logging.level") == "INFO"
        assert config.get("kpackager.missing", default="x") == "x"

    def test_load_file(self, tmp_path):
        """Test loading a YAML file."""
        path = _write(tmp_path / "c.yaml", {"kpackager": {"package": {"name": "pkg"}}})
        config = ConfigManager(path, load_environment=False)

        assert config.get("kpackager.package.name") == "pkg"
        assert config.get("kpackager.config_entry") == DEFAULT_CONFIG_ENTRY

    def test_load_empty_file(self, tmp_path):
        """Test an empty file contributes nothing."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config = ConfigManager(str(path), load_environment=False)

        assert config.get("kpackager.config_entry") == DEFAULT_CONFIG_ENTRY

    def test_load_missing_file(self, tmp_path):
        """Test a missing file raises NOT_FOUND."""
        with pytest.raises(ConfigError) as exc_info:
            ConfigManager(load_environment=False).load_file(str(tmp_path / "none.yaml"))

        assert exc_info.value.error_code == ErrorCode.NOT_FOUND

    def test_load_non_mapping(self, tmp_path):
        """Test a YAML document that is not a mapping is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ConfigError, match="Invalid config format"):
            ConfigManager(load_environment=False).load_file(str(path))

    def test_environment(self, monkeypatch):
        """Test KPACKAGER_* variables map onto the kpackager section."""
        monkeypatch.setenv("KPACKAGER_LOGGING_LEVEL", "DEBUG")
        monkeypatch.setenv("KPACKAGER_CONFIG_ENTRY", "build.conf")
        monkeypatch.setenv("KPACKAGER_PACKAGE_NAME", "org.example")
        config = ConfigManager()

        assert config.get("kpackager.logging.level") == "DEBUG"
        assert config.get("kpackager.config_entry") == "build.conf"
        assert config.get("kpackager.package.name") == "org.example"

    def test_environment_numeric_name_stays_string(self):
        """Test a numeric-looking package name is kept as text."""
        config = ConfigManager(load_environment=False)
        config.load_environment({"KPACKAGER_PACKAGE_NAME": "123", "KPACKAGER_LOGGING_FILE": "1"})

        assert config.get("kpackager.package.name") == "123"
        assert config.get("kpackager.logging.file") == "1"

    def test_environment_lists(self):
        """Test list keys and archives from the environment."""
        config = ConfigManager(load_environment=False)
        applied = config.load_environment(
            {
                "KPACKAGER_ARCHIVES": "a.jar,b.jar",
                "KPACKAGER_PATTERNS": "**.drl,**.bpmn",
                "KPACKAGER_UNKNOWN": "ignored",
                "HOME": "/root",
            }
        )
        section = config.get_section()

        assert sorted(applied) == ["KPACKAGER_ARCHIVES", "KPACKAGER_PATTERNS"]
        assert section["archives"] == [{"path": "a.jar"}, {"path": "b.jar"}]
        assert section["patterns"] == ["**.drl", "**.bpmn"]

    def test_environment_reload_clears(self):
        """Test reloading without variables removes the layer."""
        config = ConfigManager(load_environment=False)
        config.load_environment({"KPACKAGER_CONFIG_ENTRY": "x.conf"})
        assert config.load_environment({}) == []

        assert config.get("kpackager.config_entry") == DEFAULT_CONFIG_ENTRY

    def test_precedence(self, tmp_path):
        """Test higher layers win."""
        path = _write(tmp_path / "c.yaml", {"kpackager": {"patterns": ["**"]}})
        config = ConfigManager(path, load_environment=False)
        config.load_environment({"KPACKAGER_PATTERNS": "*.rf"})
        assert config.get("kpackager.patterns") == ["*.rf"]

        config.load_dict({"kpackager": {"patterns": ["*.drl"]}}, ConfigSource.CLI_ARGS)
        assert config.get("kpackager.patterns") == ["*.drl"]

        config.set("kpackager.patterns", ["*.bpmn"])
        assert config.get("kpackager.patterns") == ["*.bpmn"]

    def test_get_section_deep_merges(self, tmp_path):
        """Test nested dicts merge while lists are replaced."""
        path = _write(
            tmp_path / "c.yaml",
            {"kpackager": {"logging": {"file": "x.log"}, "exclusions": ["a.drl"]}},
        )
        config = ConfigManager(path, load_environment=False)
        config.load_dict({"kpackager": {"exclusions": ["b.drl"]}}, ConfigSource.CLI_ARGS)
        section = config.get_section()

        assert section["logging"]["file"] == "x.log"
        assert section["logging"]["level"] == "INFO"
        assert section["exclusions"] == ["b.drl"]

    def test_load_dict_copies(self):
        """Test later changes to the input do not leak in."""
        data = {"kpackager": {"patterns": ["**"]}}
        config = ConfigManager(load_environment=False)
        config.load_dict(data)
        data["kpackager"]["patterns"].append("*.drl")

        assert config.get("kpackager.patterns") == ["**"]

    def test_clear(self):
        """Test clearing keeps compiled defaults."""
        config = ConfigManager(load_environment=False)
        config.set("kpackager.config_entry", "other.conf")
        config.clear()
        config.clear(ConfigSource.COMPILED_DEFAULTS)

        assert config.get("kpackager.config_entry") == DEFAULT_CONFIG_ENTRY

    def test_clear_single_source(self):
        """Test clearing one layer."""
        config = ConfigManager(load_environment=False)
        config.set("kpackager.config_entry", "cli.conf", ConfigSource.CLI_ARGS)
        config.set("kpackager.config_entry", "runtime.conf")
        config.clear(ConfigSource.RUNTIME)

        assert config.get("kpackager.config_entry") == "cli.conf"


class TestGlobalConfig:
    """Tests for the global config helpers."""

    def test_get_config_manager_is_cached(self):
        """Test the global manager is created once."""
        assert get_config_manager() is get_config_manager()

    def test_set_global_config(self):
        """Test installing a custom global manager."""
        config = ConfigManager(load_environment=False)
        set_global_config(config)
        assert get_config_manager() is config
