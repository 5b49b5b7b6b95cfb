import io

import pandas as pd
import pytest
from fastapi.testclient import TestClient


def test_inspections_csv(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/reports/inspections", headers=auth_headers)
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert 'filename="inspections.csv"' in res.headers["content-disposition"]

    df = pd.read_csv(io.StringIO(res.text))
    assert list(df["id"]) == ["insp-001", "insp-002", "insp-003"]
    assert list(df["non_conformances"]) == [1, 1, 0]
    assert df.loc[0, "tags"] == "finish, cosmetic, scratch"


def test_inspections_status_filter(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/reports/inspections", params={"status": "In Progress"}, headers=auth_headers)
    df = pd.read_csv(io.StringIO(res.text))
    assert list(df["id"]) == ["insp-002", "insp-003"]


def test_inspection_detail_resolves_titles(client: TestClient, auth_headers) -> None:
    client.post(
        "/api/v1/inspections/insp-002/custom-checkpoints",
        json={"title": "Edge Sanding", "category": "Finish"},
        headers=auth_headers,
    )
    client.delete("/api/v1/checkpoints/chk-8", headers=auth_headers)

    res = client.get("/api/v1/reports/inspections/insp-002", headers=auth_headers)
    assert res.status_code == 200
    df = pd.read_csv(io.StringIO(res.text), keep_default_na=False)
    assert list(df["checkpoint_id"]) == ["chk-3", "chk-5", "chk-8", "chk-10", "custom-1"]
    assert list(df["title"]) == ["Component Check", "Surface Finish", "", "Overall Dimensions", "Edge Sanding"]
    assert df.loc[3, "tags"] == "measurement, specification"


@pytest.mark.parametrize(
    "fmt, media_type, magic",
    [
        ("xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", b"PK"),
        ("pdf", "application/pdf", b"%PDF"),
    ],
)
def test_binary_formats(client: TestClient, auth_headers, fmt, media_type, magic) -> None:
    for path in ("/api/v1/reports/inspections", "/api/v1/reports/inspections/insp-001"):
        res = client.get(path, params={"format": fmt}, headers=auth_headers)
        assert res.status_code == 200
        assert res.headers["content-type"] == media_type
        assert res.content.startswith(magic)


def test_xlsx_round_trips_rows(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/reports/inspections/insp-001", params={"format": "xlsx"}, headers=auth_headers)
    df = pd.read_excel(io.BytesIO(res.content), engine="openpyxl")
    assert len(df) == 6
    assert list(df.columns)[:3] == ["checkpoint_id", "category", "title"]


def test_report_for_unknown_inspection(client: TestClient, auth_headers) -> None:
    res = client.get("/api/v1/reports/inspections/insp-404", headers=auth_headers)
    assert res.status_code == 404
