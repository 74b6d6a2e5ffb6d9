"""Tests for settings loading."""

from pathlib import Path

import pytest

from wocker_pgsql.config import PgsqlSettings, load_settings, substitute_env_vars


class TestSubstituteEnvVars:
    def test_required_variable(self, monkeypatch):
        monkeypatch.setenv("PG_NET", "devnet")

        assert substitute_env_vars("network: ${PG_NET}") == "network: devnet"

    def test_default_value(self, monkeypatch):
        monkeypatch.delenv("PG_UNSET", raising=False)

        assert substitute_env_vars("${PG_UNSET:-fallback}") == "fallback"

    def test_missing_variable(self, monkeypatch):
        monkeypatch.delenv("PG_UNSET", raising=False)

        with pytest.raises(ValueError, match="PG_UNSET not set"):
            substitute_env_vars("${PG_UNSET}")

    def test_custom_error_message(self, monkeypatch):
        monkeypatch.delenv("PG_UNSET", raising=False)

        with pytest.raises(ValueError, match="set it please"):
            substitute_env_vars("${PG_UNSET:?set it please}")


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml")

        assert settings.network == "workspace"
        assert settings.data_dir == Path.home() / ".workspace"
        assert settings.core_version is None

    def test_yaml_config_section(self, tmp_path, monkeypatch):
        monkeypatch.setenv("PG_DATA", str(tmp_path / "data"))
        config = tmp_path / "config.yaml"
        config.write_text(
            "config:\n"
            "  data_dir: ${PG_DATA}\n"
            "  core_version: '1.0.18'\n"
            "  network: ${PG_NETWORK:-custom}\n"
        )

        settings = load_settings(config)

        assert settings.data_dir == tmp_path / "data"
        assert settings.core_version == "1.0.18"
        assert settings.network == "custom"

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        config = tmp_path / "config.yaml"
        config.write_text("config:\n  network: from-file\n")
        monkeypatch.setenv("WOCKER_PGSQL_NETWORK", "from-env")

        assert load_settings(config).network == "from-env"

    def test_path_from_environment(self, tmp_path, monkeypatch):
        config = tmp_path / "config.yaml"
        config.write_text("config:\n  log_level: DEBUG\n")
        monkeypatch.setenv("WOCKER_PGSQL_CONFIG", str(config))

        assert load_settings().log_level == "DEBUG"

    def test_missing_config_key(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("network: x\n")

        with pytest.raises(ValueError, match="missing 'config' key"):
            load_settings(config)

    def test_malformed_yaml(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("config: [unclosed\n")

        with pytest.raises(ValueError, match="Error parsing YAML"):
            load_settings(config)


class TestPgsqlSettings:
    def test_paths(self, tmp_path):
        paths = PgsqlSettings(data_dir=tmp_path).paths

        assert paths.registry_file == tmp_path / "plugins/pgsql/config.json"
        assert paths.servers_json == tmp_path / "plugins/pgsql/servers.json"
        assert paths.passfile("a") == tmp_path / "plugins/pgsql/passwords/a.pgpass"
        assert paths.service_data_dir("a") == tmp_path / "db/pgsql/a"
        dump_dir = paths.service_dump_dir("a", "app")
        assert dump_dir == tmp_path / "plugins/pgsql/dump/a/app"

    @pytest.mark.parametrize(
        ("core_version", "supported"),
        [
            (None, True),
            ("1.0.19", True),
            ("1.1.0", True),
            ("1.0.18", False),
            ("0.9", False),
        ],
    )
    def test_volume_storage_gate(self, core_version, supported):
        settings = PgsqlSettings(core_version=core_version)

        assert settings.supports_volume_storage() is supported
