"""Command-line interface tests."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from linkweaver import cli
from linkweaver.cli import main
from linkweaver.settings import LOGGING, build_logging_config


@pytest.fixture(autouse=True)
def _keep_test_logging(monkeypatch):
    # dictConfig would bind handlers to the runner's temporary streams.
    calls = []
    monkeypatch.setattr(cli, "configure_logging", calls.append)
    return calls


def _write_inputs(tmp_path, article, destinations):
    document = tmp_path / "article.html"
    document.write_text(article, encoding="utf-8")
    targets = tmp_path / "targets.json"
    targets.write_text(json.dumps(destinations), encoding="utf-8")
    return document, targets


def test_inject_writes_output_file(tmp_path, article, destinations):
    document, targets = _write_inputs(tmp_path, article, destinations)
    output = tmp_path / "out.html"

    runner = CliRunner()
    result = runner.invoke(
        main,
        [
            "inject",
            str(document),
            "--targets",
            str(targets),
            "--min-links",
            "0",
            "--min-distance",
            "40",
            "-o",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    written = output.read_text(encoding="utf-8")
    assert written.count('data-internal-link="semantic"') == 3


def test_inject_prints_to_stdout(tmp_path, article, destinations):
    document, targets = _write_inputs(tmp_path, article, destinations)

    runner = CliRunner()
    result = runner.invoke(
        main,
        ["inject", str(document), "-t", str(targets), "--max-links", "1", "--min-distance", "40"],
    )

    assert result.exit_code == 0
    assert result.output.count('data-internal-link="semantic"') == 1


def test_bad_targets_file_is_reported(tmp_path, article):
    document = tmp_path / "article.html"
    document.write_text(article, encoding="utf-8")
    targets = tmp_path / "targets.yaml"
    targets.write_text("just a string\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(main, ["inject", str(document), "-t", str(targets)])

    assert result.exit_code == 1
    assert "must contain a list" in result.output


def test_verbose_flag_requests_debug_logging(tmp_path, article, destinations, _keep_test_logging):
    document, targets = _write_inputs(tmp_path, article, destinations)

    result = CliRunner().invoke(main, ["-v", "inject", str(document), "-t", str(targets), "-o", str(tmp_path / "o.html")])

    assert result.exit_code == 0
    assert _keep_test_logging == ["DEBUG"]


def test_logging_config_levels(monkeypatch):
    monkeypatch.setenv("LINKWEAVER_LOG_LEVEL", "warning")

    assert build_logging_config()["loggers"]["linkweaver"]["level"] == "WARNING"
    assert build_logging_config("debug")["loggers"]["linkweaver"]["level"] == "DEBUG"
    assert build_logging_config()["root"]["handlers"] == ["console"]
    assert LOGGING["version"] == 1
