from __future__ import annotations

from pathlib import Path

import pytest

from users_api.config import DEFAULT_PORT, Settings, load_settings


def test_defaults_without_file_or_environment() -> None:
    settings = load_settings(environ={})

    assert settings.host == "0.0.0.0"
    assert settings.port == DEFAULT_PORT == 3000
    assert settings.environment == "development"
    assert settings.log_level == "INFO"
    assert settings.public_dir.name == "public"
    assert not settings.is_production


def test_environment_variables_override_defaults(tmp_path: Path) -> None:
    settings = load_settings(
        environ={
            "PORT": "8080",
            "HOST": "127.0.0.1",
            "NODE_ENV": "production",
            "PUBLIC_DIR": str(tmp_path),
            "LOG_LEVEL": "debug",
        }
    )

    assert settings.port == 8080
    assert settings.host == "127.0.0.1"
    assert settings.environment == "production"
    assert settings.is_production
    assert settings.public_dir == tmp_path.resolve()
    assert settings.log_level == "DEBUG"


def test_app_env_takes_priority_over_node_env() -> None:
    settings = load_settings(environ={"APP_ENV": "staging", "NODE_ENV": "production"})

    assert settings.environment == "staging"


def test_yaml_file_is_loaded_and_environment_wins(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text(
        "port: 4000\nenvironment: production\npublic_dir: assets\n",
        encoding="utf-8",
    )

    from_file = load_settings(config_path, environ={})
    overridden = load_settings(config_path, environ={"PORT": "5000"})

    assert from_file.port == 4000
    assert from_file.environment == "production"
    assert from_file.public_dir == (tmp_path / "assets").resolve()
    assert overridden.port == 5000
    assert overridden.environment == "production"


def test_config_path_can_come_from_environment(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text("host: 10.0.0.5\n", encoding="utf-8")

    settings = load_settings(environ={"USERS_API_CONFIG": str(config_path)})

    assert settings.host == "10.0.0.5"


def test_empty_yaml_file_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text("", encoding="utf-8")

    assert load_settings(config_path, environ={}).port == DEFAULT_PORT


@pytest.mark.parametrize("value", ["abc", "-1", "70000"])
def test_invalid_port_is_rejected(value: str) -> None:
    with pytest.raises(ValueError):
        load_settings(environ={"PORT": value})


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text("port: 3000\ndatabase: users.db\n", encoding="utf-8")

    with pytest.raises(ValueError, match="database"):
        load_settings(config_path, environ={})


def test_non_mapping_yaml_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "settings.yaml"
    config_path.write_text("- port\n- 3000\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(config_path, environ={})


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "absent.yaml", environ={})


def test_unknown_log_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        Settings.from_dict({"log_level": "chatty"})
