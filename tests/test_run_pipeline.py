import os

import pytest
from click.testing import CliRunner
from loguru import logger

from ops import run_pipeline
from ops.run_pipeline import ConfigOverride, cli, handle_critical_error


@pytest.fixture
def runner():
    return CliRunner()


def test_forecast_command_prints_electoral_votes(runner, config_path, tmp_path, monkeypatch):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))

    result = runner.invoke(cli, ["--config-file", str(config_path), "forecast"])

    assert result.exit_code == 0, result.output
    assert "Projected electoral votes" in result.output
    assert "electoral_votes" in result.output


def test_summary_command_prints_race_counts(runner, config_path, tmp_path, monkeypatch):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))

    result = runner.invoke(cli, ["--config-file", str(config_path), "summary"])

    assert result.exit_code == 0, result.output
    assert "Races won per party" in result.output
    assert "races" in result.output


def test_default_command_runs_full_pipeline_without_maps(
    runner, config_path, tmp_path, monkeypatch
):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))

    result = runner.invoke(cli, ["--config-file", str(config_path), "--skip-maps"])

    assert result.exit_code == 0, result.output
    assert "Most recent election" in result.output
    assert "Projected electoral votes" in result.output
    assert not (tmp_path / "maps" / "popvote_trend.png").exists()


def test_config_override_changes_forecast(runner, config_path, tmp_path, monkeypatch):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))

    result = runner.invoke(
        cli,
        [
            "--config-file",
            str(config_path),
            "--config",
            "forecast.base_year=2016",
            "--config",
            "forecast.target_year=2020",
            "forecast",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "R_pv2p_2020" in result.output


def test_dry_run_executes_nothing(runner, config_path, tmp_path, monkeypatch):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))

    result = runner.invoke(cli, ["--config-file", str(config_path), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Projected electoral votes" not in result.output


def test_missing_config_file_exits(runner, tmp_path):
    result = runner.invoke(cli, ["--config-file", str(tmp_path / "missing.yaml"), "summary"])

    assert result.exit_code == 1


def test_missing_input_file_exits(runner, config_path, data_files, tmp_path, monkeypatch):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))
    (data_files / "ec.csv").unlink()

    result = runner.invoke(cli, ["--config-file", str(config_path), "forecast"])

    assert result.exit_code == 1


def test_malformed_override_is_usage_error(runner, config_path):
    result = runner.invoke(cli, ["--config-file", str(config_path), "--config", "no-equals"])

    assert result.exit_code == 2


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("forecast.base_year=2016", ("forecast.base_year", 2016)),
        ("forecast.weights=[0.5, 0.5]", ("forecast.weights", [0.5, 0.5])),
        ("analysis.two_party_tolerance=1.5", ("analysis.two_party_tolerance", 1.5)),
        ("project_name=Bond Election", ("project_name", "Bond Election")),
        ("description=", ("description", "")),
    ],
)
def test_config_override_parsing(raw, expected):
    assert ConfigOverride().convert(raw, None, None) == expected


def test_trace_level_kept_out_of_environment(runner, config_path, tmp_path, monkeypatch):
    monkeypatch.setenv("PROJECT_ROOT_OVERRIDE", str(tmp_path))
    monkeypatch.delenv("LOGURU_LEVEL", raising=False)
    monkeypatch.setattr(run_pipeline, "ACTIVE_LOG_LEVEL", "INFO")

    result = runner.invoke(cli, ["--config-file", str(config_path), "--trace", "summary"])

    assert result.exit_code == 0, result.output
    assert run_pipeline.ACTIVE_LOG_LEVEL == "TRACE"
    assert "LOGURU_LEVEL" not in os.environ


def test_critical_error_suggests_trace_at_default_level(monkeypatch):
    monkeypatch.setattr(run_pipeline, "ACTIVE_LOG_LEVEL", "INFO")
    messages = []
    logger.add(messages.append, format="{message}")

    handle_critical_error(ValueError("bad input"), "Loading data")

    assert any("ValueError: bad input" in m for m in messages)
    assert any("--trace" in m for m in messages)
