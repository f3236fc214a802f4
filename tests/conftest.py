"""Shared fixtures for FolderSync tests."""

import pytest


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Point the FolderSync config directory at a temporary location."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("FOLDERSYNC_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def source_dir(tmp_path):
    """Create an empty source directory."""
    path = tmp_path / "source"
    path.mkdir()
    return path


@pytest.fixture
def dest_dir(tmp_path):
    """Path of the destination directory (not created)."""
    return tmp_path / "destination"
