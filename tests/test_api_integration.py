"""
Integration tests for the HTTP API.

Scope
-----
These tests drive the FastAPI app end to end with `TestClient`:
1.  **CRUD** and the mapping of core errors to 400 / 404.
2.  **Two-phase delete**: stage, cancel, commit.
3.  **Reads**: snapshot, layout, export, template.
4.  **Uploads**: CSV merge and JSON restore through `POST /import/{kind}`.

The session is injected with in-memory storage and a fixed clock, so no file
is written and "today" is deterministic.
"""

from __future__ import annotations

import json
from typing import Any

import pytest
from conftest import fixed_clock, sample_rows
from fastapi.testclient import TestClient

from lifeline.api.app import create_app
from lifeline.core.store.storage import MemoryStorage
from lifeline.pipelines.csv_import import CSV_TEMPLATE
from lifeline.session import TimelineSession


@pytest.fixture  # type: ignore[misc]
def client() -> TestClient:
    session = TimelineSession.open(MemoryStorage(), seed_samples=False, clock=fixed_clock)
    return TestClient(create_app(session))


def _seed(client: TestClient) -> list[dict[str, Any]]:
    created = []
    for row in sample_rows():
        resp = client.post("/events", json=row)
        assert resp.status_code == 201, resp.text
        created.append(resp.json())
    return created


# --------------------------------------------------------------------------- #
# CRUD
# --------------------------------------------------------------------------- #


def test_create_list_get(client: TestClient) -> None:
    job = _seed(client)[1]
    assert job["end"] == ""
    assert job["start"] == "2020-03-01"
    assert job["id"]

    listed = client.get("/events").json()
    assert [e["title"] for e in listed] == ["Moved to New York", "Software Developer at TechCorp"]

    only_jobs = client.get("/events", params={"category": "Job"}).json()
    assert [e["id"] for e in only_jobs] == [job["id"]]

    assert client.get(f"/events/{job['id']}").json() == job


def test_create_rejects_bad_input(client: TestClient) -> None:
    resp = client.post(
        "/events", json={"category": "Pets", "title": "Rex", "start": "2020-01-01"}
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Bad Request"

    resp = client.post("/events", json={"category": "Job", "title": "Dev", "start": ""})
    assert resp.status_code == 400
    assert client.get("/events").json() == []


def test_update_and_unknown_ids(client: TestClient) -> None:
    home = _seed(client)[0]
    body = {**home, "title": "Moved to Brooklyn", "end": ""}
    resp = client.put(f"/events/{home['id']}", json=body)
    assert resp.status_code == 200, resp.text
    assert resp.json()["title"] == "Moved to Brooklyn"
    assert resp.json()["end"] == ""
    assert resp.json()["id"] == home["id"]

    assert client.get("/events/ghost").status_code == 404
    assert client.put("/events/ghost", json=body).status_code == 404


def test_clear_reports_removed_count(client: TestClient) -> None:
    _seed(client)
    resp = client.delete("/events")
    assert resp.json() == {"removed": 2}
    assert client.get("/events").json() == []


# --------------------------------------------------------------------------- #
# Two-phase delete
# --------------------------------------------------------------------------- #


def test_stage_then_cancel_keeps_event(client: TestClient) -> None:
    home = _seed(client)[0]
    staged = client.post(f"/events/{home['id']}/delete")
    assert staged.status_code == 202
    assert staged.json() == {"pending": home["id"]}
    assert len(client.get("/events").json()) == 2

    assert client.post("/deletion/cancel").json() == {"pending": None}
    assert client.get("/deletion").json() == {"pending": None}
    assert len(client.get("/events").json()) == 2


def test_stage_then_commit_removes_event(client: TestClient) -> None:
    home, job = _seed(client)
    client.post(f"/events/{home['id']}/delete")

    resp = client.post("/deletion/commit")
    assert resp.status_code == 200
    assert resp.json()["deleted"]["id"] == home["id"]
    assert [e["id"] for e in client.get("/events").json()] == [job["id"]]

    # Nothing staged any more: a second commit is a no-op.
    assert client.post("/deletion/commit").json() == {"deleted": None}


def test_stage_unknown_id_is_404(client: TestClient) -> None:
    home = _seed(client)[0]
    client.post(f"/events/{home['id']}/delete")

    resp = client.post("/events/ghost/delete")
    assert resp.status_code == 404
    assert resp.json()["error"] == "Not Found"
    # The earlier stage is untouched.
    assert client.get("/deletion").json() == {"pending": home["id"]}


# --------------------------------------------------------------------------- #
# Reads
# --------------------------------------------------------------------------- #


def test_snapshot_groups_by_category(client: TestClient) -> None:
    home, job = _seed(client)
    snap = client.get("/snapshot", params={"date": "2021-01-01"}).json()

    assert snap["query_date"] == "2021-01-01"
    groups = {g["category"]: [e["id"] for e in g["matches"]] for g in snap["results"]}
    assert groups == {
        "Residence": [home["id"]],
        "Job": [job["id"]],
        "Relationship": [],
        "Vehicle": [],
    }

    later = client.get("/snapshot", params={"date": "2023-01-01"}).json()
    later_groups = {g["category"]: g["matches"] for g in later["results"]}
    assert later_groups["Residence"] == []
    assert [e["id"] for e in later_groups["Job"]] == [job["id"]]


def test_snapshot_rejects_bad_date(client: TestClient) -> None:
    resp = client.get("/snapshot", params={"date": "not-a-date"})
    assert resp.status_code == 400


def test_layout_on_empty_store(client: TestClient) -> None:
    geo = client.get("/layout", params={"width": 1000, "height": 500}).json()
    assert geo["min_date"] == "2024-05-01"
    assert geo["max_date"] == "2025-05-01"
    assert len(geo["ticks"]) == 11
    assert geo["ticks"][0]["x"] == 0
    assert geo["ticks"][-1]["x"] == pytest.approx(1000)
    assert geo["axis_y"] == pytest.approx(470)
    assert geo["bars"] == []


def test_layout_bars_follow_start_order(client: TestClient) -> None:
    _seed(client)
    geo = client.get("/layout").json()
    assert [b["title"] for b in geo["bars"]] == [
        "Moved to New York",
        "Software Developer at TechCorp",
    ]
    assert [b["y"] for b in geo["bars"]] == [5, 45]
    assert geo["bars"][1]["ongoing"] is True


def test_export_and_template_downloads(client: TestClient) -> None:
    _seed(client)
    exported = client.get("/export")
    assert exported.status_code == 200
    assert exported.headers["content-type"].startswith("application/json")
    assert "life-timeline-backup.json" in exported.headers["content-disposition"]
    assert [e["title"] for e in json.loads(exported.text)] == [
        "Moved to New York",
        "Software Developer at TechCorp",
    ]

    tpl = client.get("/template")
    assert tpl.headers["content-type"].startswith("text/csv")
    assert tpl.text == CSV_TEMPLATE


# --------------------------------------------------------------------------- #
# Uploads
# --------------------------------------------------------------------------- #


def test_csv_upload_merges_and_dedups(client: TestClient) -> None:
    files = {"file": ("events.csv", CSV_TEMPLATE, "text/csv")}
    first = client.post("/import/csv", files=files)
    assert first.status_code == 200, first.text
    assert first.json()["imported"] == 3

    second = client.post("/import/csv", files=files)
    assert second.json()["imported"] == 0
    assert second.json()["skipped_duplicate"] == 3
    assert len(client.get("/events").json()) == 3


def test_csv_upload_with_bad_row_changes_nothing(client: TestClient) -> None:
    _seed(client)
    bad = "Category,Title,Start,End,Notes\nJob,Dev,2020-01-01,,\nJob,Ops,2020-13-01,,\n"
    resp = client.post("/import/csv", files={"file": ("bad.csv", bad, "text/csv")})

    assert resp.status_code == 400
    body = resp.json()
    assert body["line"] == 3
    assert body["value"] == "2020-13-01"
    assert body["detail"] == 'Invalid start date "2020-13-01" on line 3'
    assert len(client.get("/events").json()) == 2


def test_json_upload_replaces_dataset(client: TestClient) -> None:
    _seed(client)
    backup = json.dumps(
        [
            {
                "id": "a",
                "category": "Vehicle",
                "title": "Honda Civic",
                "start": "2022-03-15",
                "end": "",
                "notes": "",
            }
        ]
    )
    resp = client.post(
        "/import/json", files={"file": ("backup.json", backup, "application/json")}
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["kind"] == "json"
    assert [e["id"] for e in client.get("/events").json()] == ["a"]


def test_json_upload_rejects_garbage(client: TestClient) -> None:
    _seed(client)
    resp = client.post(
        "/import/json", files={"file": ("backup.json", "{not json", "application/json")}
    )
    assert resp.status_code == 400
    assert len(client.get("/events").json()) == 2


def test_upload_that_is_not_utf8_is_400(client: TestClient) -> None:
    _seed(client)
    resp = client.post(
        "/import/json", files={"file": ("backup.json", b"\xff\xfe[", "application/json")}
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "File is not valid UTF-8 text"
    assert len(client.get("/events").json()) == 2


def test_unknown_import_kind_is_rejected(client: TestClient) -> None:
    resp = client.post("/import/xml", files={"file": ("a.xml", "<a/>", "text/xml")})
    assert resp.status_code == 422
