from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from api.server import create_app
from db import Database, StorageError


def _month(client: TestClient, month: str) -> dict:
    res = client.get(f"/api/month/{month}")
    assert res.status_code == 200
    return res.json()


def test_health(client: TestClient) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert res.json()["storage"] == "up"


def test_catalog_endpoint(client: TestClient) -> None:
    data = client.get("/api/catalog").json()
    liver = next(o for o in data["organs"] if o["code"] == "liver")
    assert "Parasite" in liver["causes"]


def test_abattage_submissions_add_up(client: TestClient) -> None:
    body = {"date": "2024-12-15", "species": "ovine", "number": 10, "weight": 100}
    assert client.post("/api/abattage", json=body).json() == {"ok": True}
    assert client.post("/api/abattage", json={**body, "number": 5, "weight": 20}).status_code == 200

    data = _month(client, "2024-12")
    rows = [r for r in data["abattage"] if r["species"] == "ovine"]
    assert len(rows) == 1
    assert rows[0]["total_number"] == 15
    assert rows[0]["total_weight"] == 120


def test_seizure_submissions_add_up(client: TestClient) -> None:
    body = {"date": "2024-12-16", "species": "caprine", "organ": "liver", "cause": "Parasite", "number": 2}
    client.post("/api/seizures", json=body)
    client.post("/api/seizures", json={**body, "number": 3})

    data = _month(client, "2024-12")
    record = next(r for r in data["seizures"] if r["species"] == "caprine")
    assert record["total_number"] == 5


def test_negative_number_is_rejected_and_store_unchanged(client: TestClient) -> None:
    res = client.post(
        "/api/abattage",
        json={"date": "2024-12-20", "species": "ovine", "number": -1, "weight": 10},
    )
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Validation error"
    assert [d["field"] for d in body["details"]] == ["number"]
    assert _month(client, "2024-12")["abattage"] == []


def test_invalid_cause_for_organ(client: TestClient) -> None:
    res = client.post(
        "/api/seizures",
        json={"date": "2024-12-16", "species": "ovine", "organ": "head", "cause": "Parasite", "number": 1},
    )
    assert res.status_code == 400
    assert res.json()["details"][0]["code"] == "invalid_cause"


def test_malformed_json_body(client: TestClient) -> None:
    res = client.post("/api/abattage", content=b"{not json", headers={"content-type": "application/json"})
    assert res.status_code == 400
    assert res.json()["details"][0]["field"] == "body"


def test_bad_month_parameter(client: TestClient) -> None:
    for month in ("2024-13", "2024-1", "december"):
        res = client.get(f"/api/month/{month}")
        assert res.status_code == 400
        assert "YYYY-MM" in res.json()["error"]
    assert client.get("/api/export/2024_12/report.pdf").status_code == 400


def test_month_with_trailing_newline_is_rejected(client: TestClient) -> None:
    for path in (
        "/api/month/2024-12%0A",
        "/api/month/2024-12%0A/summary",
        "/api/export/2024-12%0A/abattage.csv",
        "/api/export/2024-12%0A/saisies.csv",
        "/api/export/2024-12%0A/report.pdf",
    ):
        res = client.get(path)
        assert res.status_code == 400, path
        assert "content-disposition" not in res.headers


def test_invalid_seizure_never_reaches_store(client: TestClient) -> None:
    res = client.post(
        "/api/seizures",
        json={"date": "2024-12-16", "species": "ovine", "organ": "head", "cause": "Parasite", "number": 4},
    )
    assert res.status_code == 400
    assert _month(client, "2024-12")["seizures"] == []


def test_oversized_number_gets_itemised_400(client: TestClient) -> None:
    res = client.post(
        "/api/abattage",
        json={"date": "2024-12-20", "species": "ovine", "number": 10**20, "weight": 10},
    )
    assert res.status_code == 400
    assert [(d["field"], d["code"]) for d in res.json()["details"]] == [("number", "too_large")]
    assert _month(client, "2024-12")["abattage"] == []


def test_month_summary_view(client: TestClient) -> None:
    client.post("/api/abattage", json={"date": "2024-12-15", "species": "ovine", "number": 10, "weight": 100})
    client.post(
        "/api/seizures",
        json={"date": "2024-12-16", "species": "ovine", "organ": "meat", "cause": "Abcès", "number": 2},
    )
    data = client.get("/api/month/2024-12/summary").json()
    assert data["month"] == "2024-12"
    ovine = next(s for s in data["summary"]["by_species"] if s["species"] == "ovine")
    assert (ovine["slaughtered"], ovine["seizures"]) == (10, 2)
    assert [d["date"] for d in data["days"]] == ["2024-12-16", "2024-12-15"]


def test_export_abattage_csv(client: TestClient) -> None:
    client.post("/api/abattage", json={"date": "2024-12-15", "species": "ovine", "number": 10, "weight": 100})
    client.post("/api/abattage", json={"date": "2024-12-17", "species": "ovine", "number": 5, "weight": 20})

    res = client.get("/api/export/2024-12/abattage.csv")
    assert res.status_code == 200
    assert res.headers["content-type"] == "text/csv; charset=utf-8"
    assert res.headers["content-disposition"].startswith("attachment")
    lines = res.text.split("\n")
    assert lines == ["species;total_abattus;total_poids", "ovine;15;120"]


def test_export_seizures_csv(client: TestClient) -> None:
    client.post(
        "/api/seizures",
        json={"date": "2024-12-16", "species": "caprine", "organ": "liver", "cause": "Parasite", "number": 2},
    )
    res = client.get("/api/export/2024-12/saisies.csv")
    assert res.headers["content-type"] == "text/csv; charset=utf-8"
    assert 'filename="saisies-2024-12.csv"' in res.headers["content-disposition"]
    assert res.text.split("\n") == ["species;organ;cause;total_saisi", "caprine;liver;Parasite;2"]


def test_export_pdf(client: TestClient) -> None:
    res = client.get("/api/export/2024-12/report.pdf")
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert res.headers["content-disposition"].startswith("inline")
    assert len(res.content) > 1024
    assert res.content.startswith(b"%PDF")


class _FailingDatabase(Database):
    async def query_month(self, year_month: str):
        raise StorageError("disk I/O error")


def test_storage_failure_maps_to_503(tmp_path: Path) -> None:
    app = create_app(db_path=str(tmp_path / "x.db"), database=_FailingDatabase())
    with TestClient(app) as c:
        res = c.get("/api/month/2024-12")
    assert res.status_code == 503
    assert res.json() == {"error": "Stockage indisponible"}
