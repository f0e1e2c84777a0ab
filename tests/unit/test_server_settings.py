from __future__ import annotations

from pathlib import Path

from idea_flow.settings import DEFAULT_MAX_BODY_BYTES, DEFAULT_PORT, get_server_settings

_ENV = (
    "IDEA_FLOW_BACKUPS_DIR",
    "IDEA_FLOW_KEEP_COUNT",
    "IDEA_FLOW_MAX_BODY_BYTES",
    "IDEA_FLOW_HOST",
    "IDEA_FLOW_PORT",
    "IDEA_FLOW_STATIC_DIR",
)


def _clear_env(monkeypatch) -> None:
    for name in _ENV:
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)

    settings = get_server_settings()

    assert settings.backups_dir == (Path.cwd() / "backups").resolve()
    assert settings.keep_count == 20
    assert settings.max_body_bytes == DEFAULT_MAX_BODY_BYTES == 10 * 1024 * 1024
    assert settings.host == "127.0.0.1"
    assert settings.port == DEFAULT_PORT == 3001
    assert settings.static_dir == Path.cwd()


def test_env_overrides(tmp_path: Path, monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("IDEA_FLOW_BACKUPS_DIR", str(tmp_path / "snapshots"))
    monkeypatch.setenv("IDEA_FLOW_KEEP_COUNT", "5")
    monkeypatch.setenv("IDEA_FLOW_MAX_BODY_BYTES", "1024")
    monkeypatch.setenv("IDEA_FLOW_HOST", "0.0.0.0")
    monkeypatch.setenv("IDEA_FLOW_PORT", "8080")
    monkeypatch.setenv("IDEA_FLOW_STATIC_DIR", str(tmp_path / "public"))

    settings = get_server_settings()

    assert settings.backups_dir == (tmp_path / "snapshots").resolve()
    assert settings.keep_count == 5
    assert settings.max_body_bytes == 1024
    assert settings.host == "0.0.0.0"
    assert settings.port == 8080
    assert settings.static_dir == (tmp_path / "public").resolve()


def test_bad_numbers_fall_back(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("IDEA_FLOW_KEEP_COUNT", "many")
    monkeypatch.setenv("IDEA_FLOW_PORT", "")
    monkeypatch.setenv("IDEA_FLOW_MAX_BODY_BYTES", "1.5mb")

    settings = get_server_settings()

    assert settings.keep_count == 20
    assert settings.port == DEFAULT_PORT
    assert settings.max_body_bytes == DEFAULT_MAX_BODY_BYTES


def test_keep_count_has_floor_of_one(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("IDEA_FLOW_KEEP_COUNT", "0")
    assert get_server_settings().keep_count == 1


def test_empty_static_dir_disables_static(monkeypatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.setenv("IDEA_FLOW_STATIC_DIR", "")
    assert get_server_settings().static_dir is None
