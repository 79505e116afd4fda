import importlib

import pytest


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for key in ["HY2CONFIG_CONFIG_DIR", "XDG_CONFIG_HOME"]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    yield tmp_path
    monkeypatch.undo()
    _reload_config_module()


def _reload_config_module():
    import hy2config.core.config as config

    return importlib.reload(config)


def test_config_dir_uses_env_var(clean_env, monkeypatch, tmp_path):
    custom_dir = tmp_path / "custom_config"
    monkeypatch.setenv("HY2CONFIG_CONFIG_DIR", str(custom_dir))

    config = _reload_config_module()

    assert config.CONFIG_DIR == custom_dir
    assert config.CONFIG_DIR.exists()


def test_config_dir_uses_xdg(clean_env, monkeypatch, tmp_path):
    xdg_config_home = tmp_path / "xdg"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(xdg_config_home))

    config = _reload_config_module()

    assert config.CONFIG_DIR == xdg_config_home / "hy2config"
    assert config.CONFIG_DIR.exists()


def test_log_dir_created_inside_config_dir(clean_env, monkeypatch, tmp_path):
    monkeypatch.setenv("HY2CONFIG_CONFIG_DIR", str(tmp_path / "cfg"))

    config = _reload_config_module()

    assert config.LOG_DIR.exists()
    assert config.LOG_DIR.parent == config.CONFIG_DIR
    assert str(config.CLI_LOG_FILE).startswith(str(config.LOG_DIR))
