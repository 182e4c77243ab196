from __future__ import annotations

from pathlib import Path

from report_cli.shared import paths


def test_get_config_dir_uses_env_override(tmp_path: Path) -> None:
    env = {paths.CONFIG_DIR_ENV: str(tmp_path / "config")}
    result = paths.get_config_dir(create=True, env=env)
    assert result == tmp_path / "config"
    assert result.exists()


def test_default_config_path_uses_file_override(tmp_path: Path) -> None:
    cfg_path = tmp_path / "nested" / "custom.yaml"
    env = {paths.CONFIG_FILE_ENV: str(cfg_path)}
    resolved = paths.default_config_path(create_parents=True, env=env)
    assert resolved == cfg_path
    assert resolved.parent.exists()


def test_default_config_path_under_config_dir(tmp_path: Path) -> None:
    env = {paths.CONFIG_DIR_ENV: str(tmp_path)}
    assert paths.default_config_path(env=env) == tmp_path / paths.DEFAULT_CONFIG_FILE


def test_resolve_path_expands_user(tmp_path: Path, monkeypatch) -> None:
    fake_home = tmp_path / "home"
    fake_home.mkdir()
    monkeypatch.setenv("HOME", str(fake_home))
    result = paths.resolve_path("~/file.txt")
    assert result == fake_home / "file.txt"
