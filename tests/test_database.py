"""Tests for the sqlite persistence layer."""

from __future__ import annotations

import pytest

from fakes import candidate
from ingest.base import Source
from ingest.runner import RunOutcome
from scorer import ScoringEngine


def _scored(url: str, source: Source = Source.GITHUB, **values):
    return ScoringEngine().score_candidate(candidate(source, url, **values))


def test_upsert_returns_decoded_rows_in_batch_order(db) -> None:
    records = [
        _scored("https://github.com/a/one", raw_data={"stars": 10}),
        _scored("https://github.com/a/two"),
    ]

    stored = db.upsert_opportunities(records)

    assert [row["source_url"] for row in stored] == ["https://github.com/a/one", "https://github.com/a/two"]
    assert stored[0]["raw_data"] == {"stars": 10}
    assert stored[0]["score_breakdown"]["base_score"] == records[0].score_breakdown["base_score"]
    assert stored[0]["status"] == "new"
    assert stored[0]["final_score"] == records[0].final_score


def test_upsert_keeps_identity_and_status(db) -> None:
    url = "https://github.com/a/one"
    first = db.upsert_opportunities([_scored(url, title="v1")])[0]
    db.update_status(first["id"], "watching")

    second = db.upsert_opportunities([_scored(url, title="v2")])[0]

    assert second["id"] == first["id"]
    assert second["title"] == "v2"
    assert second["status"] == "watching"
    assert second["last_scored_at"] is not None
    assert db.count_opportunities() == 1


def test_upsert_empty_batch(db) -> None:
    assert db.upsert_opportunities([]) == []


def test_failed_upsert_rolls_back_whole_batch(db) -> None:
    good = _scored("https://github.com/a/ok").to_row()
    bad = _scored("https://github.com/a/bad").to_row()
    bad["title"] = None

    with pytest.raises(Exception):
        db.upsert_opportunities([good, bad])

    assert db.count_opportunities() == 0


def test_update_status_validation(db) -> None:
    row = db.upsert_opportunities([_scored("https://github.com/a/one")])[0]

    with pytest.raises(ValueError, match="Invalid status"):
        db.update_status(row["id"], "archived")
    with pytest.raises(LookupError):
        db.update_status(9999, "passed")

    assert db.update_status(row["id"], "passed")["status"] == "passed"


def test_list_opportunities_filters_and_sorting(db) -> None:
    db.upsert_opportunities([
        _scored("https://github.com/a/low", revenue_potential=0, skill_match=0),
        _scored("https://github.com/a/high", revenue_potential=100, skill_match=100),
        _scored("https://reddit.com/r/a/1", source=Source.REDDIT),
    ])

    by_score = db.list_opportunities()
    assert by_score[0]["source_url"] == "https://github.com/a/high"
    assert [r["final_score"] for r in by_score] == sorted((r["final_score"] for r in by_score), reverse=True)

    github_only = db.list_opportunities(source="github")
    assert {r["source"] for r in github_only} == {"github"}
    assert db.count_opportunities(source="github") == 2

    by_source = db.list_opportunities(sort_by="source")
    assert by_source[-1]["source"] == "reddit"

    low_cut = by_score[-1]["final_score"]
    assert len(db.list_opportunities(max_score=low_cut)) == 1
    assert len(db.list_opportunities(limit=1, offset=1)) == 1
    assert db.list_opportunities(status="pursuing") == []


def test_get_opportunity_lookups(db) -> None:
    row = db.upsert_opportunities([_scored("https://github.com/a/one")])[0]

    assert db.get_opportunity(row["id"])["source_url"] == "https://github.com/a/one"
    assert db.get_opportunity_by_source_url("https://github.com/a/one")["id"] == row["id"]
    assert db.get_opportunity(12345) is None


def test_run_outcomes_are_appended(db) -> None:
    db.insert_run_outcome(RunOutcome("github", "failed", 0, 0, "Failed to ingest from github"))
    db.insert_run_outcome(RunOutcome("reddit", "success", 12, 12))

    runs = db.list_run_outcomes()
    assert [r["source"] for r in runs] == ["reddit", "github"]
    assert runs[1]["error_message"] == "Failed to ingest from github"
    assert runs[0]["completed_at"] is not None
    assert [r["source"] for r in db.list_run_outcomes(source="github")] == ["github"]
