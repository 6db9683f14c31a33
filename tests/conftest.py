"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path (for 'ziptree.*' imports without an install)
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))


@pytest.fixture(autouse=True)
def _isolate_process_globals(monkeypatch):
    """Keep verbosity, console output, buses and ZIPTREE_* env from leaking between tests."""
    from ziptree.core.events import get_event_bus
    from ziptree.core.log_bus import get_log_bus
    from ziptree.core.logging import VerbosityLevel, set_console, set_verbosity

    for key in list(os.environ):
        if key.startswith("ZIPTREE_"):
            monkeypatch.delenv(key, raising=False)

    yield

    set_verbosity(VerbosityLevel.NORMAL)
    set_console(False)
    get_event_bus().clear()
    get_log_bus().clear()


@pytest.fixture
def config_resolver(tmp_path):
    """ConfigResolver isolated from the user's real config files.

    Returns:
        ConfigResolver instance
    """
    from ziptree.core.config import ConfigResolver

    return ConfigResolver(
        cli_args={},
        user_config_path=tmp_path / "no-user.yaml",
        system_config_path=tmp_path / "no-system.yaml",
    )


@pytest.fixture
def memory_fs():
    """Empty MemoryFileSystem with a /src tree root.

    Returns:
        MemoryFileSystem instance
    """
    from ziptree.file_io import MemoryFileSystem

    fs = MemoryFileSystem()
    fs.create_directory("/src")
    return fs


@pytest.fixture
def memory_service(memory_fs, config_resolver):
    """ArchiveService bound to memory_fs.

    Returns:
        ArchiveService instance
    """
    from ziptree.archives import ArchiveService

    return ArchiveService(memory_fs, resolver=config_resolver)


@pytest.fixture
def local_service(config_resolver):
    """ArchiveService bound to the real disk.

    Returns:
        ArchiveService instance
    """
    from ziptree.archives import ArchiveService
    from ziptree.file_io import LocalFileSystem

    return ArchiveService(LocalFileSystem(), resolver=config_resolver)
