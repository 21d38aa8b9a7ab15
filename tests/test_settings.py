from __future__ import annotations

import pytest

from gdgfinder.config.settings import get_logging_config, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    # `get_settings` is lru_cached; every test here changes its inputs.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_packaged_defaults_load():
    settings = get_settings()

    assert settings.directory.url.startswith("https://")
    assert settings.search.max_workers >= 1
    assert settings.search.cancel_check_interval >= 1
    assert "handlers" in get_logging_config()


def test_env_overrides_whitelisted_keys(monkeypatch):
    monkeypatch.setenv("GDGFINDER_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("GDGFINDER_DIRECTORY_URL", "https://example.test/directory.json")
    monkeypatch.setenv("GDGFINDER_SORT_WORKERS", "4")

    settings = get_settings()

    assert settings.app.log_level == "DEBUG"
    assert settings.directory.url == "https://example.test/directory.json"
    assert settings.search.max_workers == 4


def test_external_config_file(monkeypatch, tmp_path):
    path = tmp_path / "gdgfinder.yaml"
    path.write_text("search:\n  max_workers: 3\n", encoding="utf-8")
    monkeypatch.setenv("GDGFINDER_CONFIG_PATH", str(path))

    settings = get_settings()

    assert settings.search.max_workers == 3
    # Sections missing from the file fall back to model defaults.
    assert settings.app.http_timeout_seconds == 15


def test_external_config_must_be_a_mapping(monkeypatch, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("GDGFINDER_CONFIG_PATH", str(path))

    with pytest.raises(ValueError, match="expected a mapping"):
        get_settings()


def test_dotenv_at_project_root_is_read(monkeypatch, tmp_path):
    from gdgfinder.core.env import get_project_root, load_dotenv_if_present, resolve_project_path

    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n", encoding="utf-8")
    (tmp_path / ".env").write_text("GDGFINDER_SORT_WORKERS=5\n", encoding="utf-8")
    nested = tmp_path / "docs" / "notes"
    nested.mkdir(parents=True)
    monkeypatch.chdir(nested)
    # set-then-delete so monkeypatch removes whatever python-dotenv writes.
    monkeypatch.setenv("GDGFINDER_SORT_WORKERS", "")
    monkeypatch.delenv("GDGFINDER_SORT_WORKERS")
    get_project_root.cache_clear()
    load_dotenv_if_present.cache_clear()
    try:
        assert get_project_root() == tmp_path.resolve()
        assert resolve_project_path("data/directory.json") == tmp_path.resolve() / "data" / "directory.json"
        assert get_settings().search.max_workers == 5
    finally:
        get_project_root.cache_clear()
        load_dotenv_if_present.cache_clear()
