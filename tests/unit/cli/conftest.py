"""Fixtures for CLI tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from vidshrink.pipeline.worker import TranscodeWorker


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch) -> None:
    """Point the CLI at an empty config and clear VIDSHRINK_* variables."""
    for name in list(os.environ):
        if name.startswith("VIDSHRINK_"):
            monkeypatch.delenv(name)
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("VIDSHRINK_CONFIG_PATH", str(config_dir / "config.toml"))


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def use_worker() -> Callable[..., object]:
    """Patch the compress command to use the given prober and encoder."""

    @contextmanager
    def _use(prober, encoder) -> Iterator[object]:
        with patch("vidshrink.cli.compress._build_worker") as mock_build:
            mock_build.side_effect = lambda config: TranscodeWorker(
                prober,
                encoder,
                target_codec=config.encoder.target_codec,
                temp_directory=config.jobs.temp_directory,
                check_disk_space=False,
            )
            yield mock_build

    return _use


@pytest.fixture
def log_file() -> Callable[[Path], Path]:
    return lambda root: root / "compression_log.json"
