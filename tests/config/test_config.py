from __future__ import annotations

import logging
from pathlib import Path

import pytest

from netids.config import (
    MAX_ID,
    MIN_ID,
    ConfigurationError,
    RegistryConfig,
    configure_logging,
    get_interchange_config,
    get_registry_config,
)


def test_registry_config_defaults_to_published_range() -> None:
    config = get_registry_config()

    assert (config.min_id, config.max_id) == (MIN_ID, MAX_ID) == (10, 1_000_000)
    assert config.is_valid(10)
    assert config.is_valid(999_999)
    assert not config.is_valid(9)
    assert not config.is_valid(1_000_000)


def test_registry_config_rejects_empty_range() -> None:
    with pytest.raises(ValueError, match="greater than min_id"):
        RegistryConfig(min_id=10, max_id=10)


def test_interchange_config_defaults_to_cwd(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("NETIDS_EXPORT_DIR", raising=False)
    monkeypatch.chdir(tmp_path)

    config = get_interchange_config()

    assert config.export_path("Lobby") == tmp_path.resolve() / "Lobby_NetworkIDs.json"


def test_interchange_config_reads_export_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("NETIDS_EXPORT_DIR", str(tmp_path))

    config = get_interchange_config()

    assert config.export_dir == tmp_path
    assert config.looks_importable(Path("ids.TXT"))
    assert not config.looks_importable(Path("ids.csv"))


def test_interchange_config_rejects_file_as_export_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    not_a_dir = tmp_path / "file"
    not_a_dir.write_text("", encoding="utf-8")
    monkeypatch.setenv("NETIDS_EXPORT_DIR", str(not_a_dir))

    with pytest.raises(ConfigurationError, match="not a directory"):
        get_interchange_config()


def test_configure_logging_keeps_existing_handlers() -> None:
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level

    configure_logging(level=logging.DEBUG)

    assert root.handlers == handlers
    assert root.level == level
