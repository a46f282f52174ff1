"""Tests for cli.py — Click CLI commands."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from eventemitter.cli import main
from eventemitter.config import load_config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Write a valid config file and return its path."""
    config = tmp_path / "eventemitter.yaml"
    config.write_text("""
events: [message, close]
max_listeners: 25
diagnostics: log
""")
    return str(config)


# --- Help / Version ---


def test_help(runner):
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "validate" in result.output
    assert "init" in result.output


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "version" in result.output.lower()


# --- validate ---


def test_validate_ok(runner, config_file):
    result = runner.invoke(main, ["validate", "-c", config_file])
    assert result.exit_code == 0
    assert "Config OK: 2 events, max_listeners=25" in result.output


def test_validate_unlimited(runner, tmp_path):
    config = tmp_path / "eventemitter.yaml"
    config.write_text("max_listeners: unlimited\n")
    result = runner.invoke(main, ["validate", "-c", str(config)])
    assert result.exit_code == 0
    assert "max_listeners=unlimited" in result.output


def test_validate_reports_errors(runner, tmp_path):
    config = tmp_path / "eventemitter.yaml"
    config.write_text("events: [a, a]\ndiagnostics: pager\n")
    result = runner.invoke(main, ["validate", "-c", str(config)])
    assert result.exit_code == 1
    assert "Found 2 error(s)" in result.output
    assert "Duplicate event name: 'a'" in result.output


def test_validate_unparseable(runner, tmp_path):
    config = tmp_path / "eventemitter.yaml"
    config.write_text("max_listeners: plenty\n")
    result = runner.invoke(main, ["validate", "-c", str(config)])
    assert result.exit_code == 1
    assert "Config error" in result.output


def test_validate_applies_config_log_level(runner, tmp_path, monkeypatch, clean_logging):
    monkeypatch.delenv("EVENTEMITTER_LOG_LEVEL", raising=False)
    config = tmp_path / "eventemitter.yaml"
    config.write_text("log_level: DEBUG\n")
    result = runner.invoke(main, ["validate", "-c", str(config)])
    assert result.exit_code == 0
    assert clean_logging.level == logging.DEBUG


def test_validate_flag_overrides_config_log_level(runner, tmp_path, monkeypatch, clean_logging):
    monkeypatch.delenv("EVENTEMITTER_LOG_LEVEL", raising=False)
    config = tmp_path / "eventemitter.yaml"
    config.write_text("log_level: DEBUG\n")
    result = runner.invoke(main, ["--log-level", "ERROR", "validate", "-c", str(config)])
    assert result.exit_code == 0
    assert clean_logging.level == logging.ERROR


def test_validate_missing_file(runner, tmp_path):
    result = runner.invoke(main, ["validate", "-c", str(tmp_path / "absent.yaml")])
    assert result.exit_code != 0


# --- init ---


def test_init_writes_config(runner, tmp_path):
    out = tmp_path / "eventemitter.yaml"
    result = runner.invoke(
        main, ["init", "-o", str(out), "-e", "message", "-e", "close", "--max-listeners", "5"]
    )
    assert result.exit_code == 0
    data = yaml.safe_load(out.read_text())
    assert data["events"] == ["message", "close"]
    assert data["max_listeners"] == 5


def test_init_refuses_overwrite(runner, config_file):
    result = runner.invoke(main, ["init", "-o", config_file])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_init_force_overwrites(runner, config_file):
    result = runner.invoke(main, ["init", "-o", config_file, "--force"])
    assert result.exit_code == 0
    assert yaml.safe_load(Path(config_file).read_text())["events"] == []


def test_init_rejects_reserved_event(runner, tmp_path):
    out = tmp_path / "eventemitter.yaml"
    result = runner.invoke(main, ["init", "-o", str(out), "-e", "removeListener"])
    assert result.exit_code == 1
    assert not out.exists()


def test_init_unlimited_max_listeners(runner, tmp_path):
    out = tmp_path / "eventemitter.yaml"
    result = runner.invoke(main, ["init", "-o", str(out), "--max-listeners", "unlimited"])
    assert result.exit_code == 0
    assert yaml.safe_load(out.read_text())["max_listeners"] == "unlimited"
    assert load_config(str(out)).max_listeners == math.inf


@pytest.mark.parametrize("value", ["0", "lots"])
def test_init_rejects_bad_max_listeners(runner, tmp_path, value):
    out = tmp_path / "eventemitter.yaml"
    result = runner.invoke(main, ["init", "-o", str(out), "--max-listeners", value])
    assert result.exit_code == 2
    assert not out.exists()
