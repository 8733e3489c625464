"""Tests for database URL handling."""

from pathlib import Path

from lending.infrastructure.persistence.database import resolve_url


class TestResolveUrl:
    def test_memory_urls_unchanged(self):
        assert resolve_url("sqlite+aiosqlite://").database is None
        assert resolve_url("sqlite+aiosqlite:///:memory:").database == ":memory:"

    def test_home_is_expanded_and_parent_created(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        url = resolve_url("sqlite+aiosqlite:///~/data/lending.db")
        assert url.database == str((tmp_path / "data" / "lending.db").resolve())
        assert (tmp_path / "data").is_dir()
        assert url.drivername == "sqlite+aiosqlite"

    def test_relative_path_made_absolute(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        url = resolve_url("sqlite+aiosqlite:///ledger.db")
        assert Path(url.database).is_absolute()

    def test_other_backends_untouched(self):
        url = resolve_url("postgresql+asyncpg://u:p@localhost/lending")
        assert url.database == "lending"
        assert url.host == "localhost"
