"""Unit tests for core.config module."""

from pathlib import Path

import pytest

from ziptree.core.config import ALLOWED_COMPRESSION, ConfigResolver
from ziptree.core.errors import ConfigError


def _resolver(tmp_path: Path, cli=None, user: str | None = None, system: str | None = None):
    user_path = tmp_path / "user.yaml"
    system_path = tmp_path / "system.yaml"
    if user is not None:
        user_path.write_text(user)
    if system is not None:
        system_path.write_text(system)
    return ConfigResolver(
        cli_args=cli or {},
        user_config_path=user_path,
        system_config_path=system_path,
    )


class TestConfigResolver:
    """Tests for ConfigResolver."""

    def test_cli_priority(self, tmp_path):
        """Test that CLI args have highest priority."""
        resolver = _resolver(
            tmp_path,
            cli={"archives": {"compression": "stored"}},
            user="archives:\n  compression: deflated\n",
        )

        value, source = resolver.resolve("archives.compression")
        assert value == "stored"
        assert source == "cli"

    def test_cli_dotted_key(self, tmp_path):
        resolver = _resolver(tmp_path, cli={"archives.chunk_size": 1024})
        assert resolver.resolve("archives.chunk_size") == (1024, "cli")

    def test_env_priority(self, tmp_path, monkeypatch):
        """Test that ENV overrides config files."""
        monkeypatch.setenv("ZIPTREE_ARCHIVES_COMPRESSION", "stored")
        resolver = _resolver(tmp_path, user="archives:\n  compression: deflated\n")

        value, source = resolver.resolve("archives.compression")
        assert value == "stored"
        assert source == "env"

    def test_user_config_priority(self, tmp_path):
        """Test that user config overrides system config."""
        resolver = _resolver(
            tmp_path,
            user="logging:\n  level: verbose\n",
            system="logging:\n  level: debug\n",
        )

        assert resolver.resolve("logging.level") == ("verbose", "user_config")

    def test_system_config(self, tmp_path):
        resolver = _resolver(tmp_path, system="archives:\n  chunk_size: 4096\n")
        assert resolver.resolve("archives.chunk_size") == (4096, "system_config")

    def test_defaults(self, tmp_path):
        resolver = _resolver(tmp_path)
        assert resolver.resolve("archives.compression") == ("deflated", "default")
        assert resolver.resolve("archives.chunk_size") == (65536, "default")

    def test_missing_key_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            _resolver(tmp_path).resolve("nonexistent.key")

    def test_invalid_yaml(self, tmp_path):
        resolver = _resolver(tmp_path, user="archives: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to load config"):
            resolver.resolve("archives.compression")


class TestTypedResolvers:
    def test_logging_policy_default(self, tmp_path):
        policy = _resolver(tmp_path).resolve_logging_policy()
        assert policy.level_name == "normal"

    def test_logging_policy_normalized(self, tmp_path):
        policy = _resolver(tmp_path, cli={"logging.level": " DEBUG "}).resolve_logging_policy()
        assert policy.level_name == "debug"
        assert policy.source == "cli"

    def test_logging_policy_invalid(self, tmp_path):
        with pytest.raises(ConfigError, match="Allowed values"):
            _resolver(tmp_path, cli={"logging.level": "loud"}).resolve_logging_policy()

    @pytest.mark.parametrize(
        ("raw", "expected"), [("true", True), ("0", False), ("Yes", True), ("off", False)]
    )
    def test_bool_from_env(self, tmp_path, monkeypatch, raw, expected):
        monkeypatch.setenv("ZIPTREE_ARCHIVES_DEBUG_INCLUDE_TRACE", raw)
        assert _resolver(tmp_path).resolve_bool("archives.debug.include_trace", False) is expected

    def test_bool_invalid(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ZIPTREE_ARCHIVES_DEBUG_INCLUDE_TRACE", "maybe")
        with pytest.raises(ConfigError):
            _resolver(tmp_path).resolve_bool("archives.debug.include_trace", False)

    def test_int_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ZIPTREE_ARCHIVES_CHUNK_SIZE", "8192")
        assert _resolver(tmp_path).resolve_int("archives.chunk_size", 1) == 8192

    @pytest.mark.parametrize("raw", [0, -5, True, "big"])
    def test_int_invalid(self, tmp_path, raw):
        resolver = _resolver(tmp_path, cli={"archives.chunk_size": raw})
        with pytest.raises(ConfigError):
            resolver.resolve_int("archives.chunk_size", 1)

    def test_choice(self, tmp_path):
        resolver = _resolver(tmp_path, cli={"archives.compression": "STORED"})
        assert resolver.resolve_choice("archives.compression", ALLOWED_COMPRESSION, "x") == "stored"

    def test_choice_invalid(self, tmp_path):
        resolver = _resolver(tmp_path, cli={"archives.compression": "bzip2"})
        with pytest.raises(ConfigError, match="Allowed values"):
            resolver.resolve_choice("archives.compression", ALLOWED_COMPRESSION, "deflated")

    def test_invalid_config_surfaces_from_pack(self, tmp_path):
        import asyncio

        from ziptree.archives import ArchiveService
        from ziptree.file_io import MemoryFileSystem

        fs = MemoryFileSystem()
        fs.create_directory("/src")
        svc = ArchiveService(fs, resolver=_resolver(tmp_path, cli={"archives.chunk_size": 0}))
        with pytest.raises(ConfigError):
            asyncio.run(svc.create_from_directory("/src", "/out.zip"))
        assert not fs.exists("/out.zip")
