"""Tests for the CLI trigger and read/update commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import cli
from fakes import StubAdapter, candidate
from ingest.base import Source
from ingest.runner import IngestionRunner


@pytest.fixture()
def base_args(tmp_path: Path) -> list:
    return ["--config", str(tmp_path / "missing.yaml"), "--db", str(tmp_path / "cli.db")]


def _patch_runner(monkeypatch: pytest.MonkeyPatch, adapters) -> None:
    monkeypatch.setattr(cli, "build_runner", lambda config, db: IngestionRunner(adapters, db))


def test_ingest_success(monkeypatch, capsys, base_args) -> None:
    _patch_runner(monkeypatch, {"github": StubAdapter([candidate(Source.GITHUB, "https://github.com/a/b")])})

    code = cli.main(base_args + ["ingest", "--source", "all", "--limit", "3"])

    assert code == cli.EXIT_OK
    body = json.loads(capsys.readouterr().out)
    assert body["success"] is True
    assert body["count"] == 1
    assert body["sources"] == ["github"]
    assert body["outcomes"][0]["status"] == "success"


def test_ingest_empty(monkeypatch, capsys, base_args) -> None:
    _patch_runner(monkeypatch, {"github": StubAdapter([])})

    code = cli.main(base_args + ["ingest"])

    assert code == cli.EXIT_EMPTY
    assert "No opportunities found" in capsys.readouterr().err


def test_ingest_rejects_non_positive_limit(base_args) -> None:
    with pytest.raises(SystemExit):
        cli.main(base_args + ["ingest", "--limit", "0"])


def test_list_and_set_status(monkeypatch, capsys, base_args) -> None:
    _patch_runner(monkeypatch, {"reddit": StubAdapter([candidate(Source.REDDIT, "https://reddit.com/r/a/1")])})
    cli.main(base_args + ["ingest"])
    capsys.readouterr()

    assert cli.main(base_args + ["list", "--source", "reddit"]) == cli.EXIT_OK
    listing = json.loads(capsys.readouterr().out)
    assert listing["total"] == 1
    opportunity_id = listing["opportunities"][0]["id"]

    assert cli.main(base_args + ["set-status", str(opportunity_id), "pursuing"]) == cli.EXIT_OK
    assert json.loads(capsys.readouterr().out)["opportunity"]["status"] == "pursuing"

    assert cli.main(base_args + ["set-status", "999", "passed"]) == cli.EXIT_EMPTY

    assert cli.main(base_args + ["runs", "--source", "reddit"]) == cli.EXIT_OK
    runs = json.loads(capsys.readouterr().out)["runs"]
    assert runs[0]["status"] == "success"
