"""
End-to-end tests for the HTTP API using FastAPI's TestClient.
"""

import pytest


def test_health(client):
    assert client.get("/").json()["status"] == "ok"
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["sessions"] == 0


def test_upload_returns_summary(client, sample_csv):
    response = client.post(
        "/upload", files={"file": ("people.csv", sample_csv.encode(), "text/csv")}
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["filename"] == "people.csv"
    assert body["shape"] == [5, 4]
    assert body["columns"] == ["id", "name", "age", "city"]
    assert body["duplicates"] == 1
    assert body["column_stats"]["age"] == {
        "dtype": "numeric",
        "min": 25,
        "max": 41,
        "mean": 31.5,
        "missing": 1,
    }
    assert body["column_stats"]["city"] == {"dtype": "categorical", "unique": 2, "missing": 1}
    assert body["pending"] is None


def test_upload_rejects_non_csv(client):
    response = client.post(
        "/upload", files={"file": ("data.xlsx", b"a\n1\n", "application/vnd.ms-excel")}
    )
    assert response.status_code == 415
    assert response.json()["detail"]["error"] == "UnsupportedFileType"


def test_upload_rejects_empty_file(client):
    response = client.post("/upload", files={"file": ("empty.csv", b"", "text/csv")})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "EmptyFile"


def test_upload_reports_malformed_row(client):
    response = client.post(
        "/upload", files={"file": ("bad.csv", b"a,b\n1,2\n3\n", "text/csv")}
    )
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["error"] == "MalformedRow"
    assert detail["row"] == 2
    assert detail["expected"] == 2
    assert detail["actual"] == 1


def test_get_and_preview(client, session_id):
    body = client.get(f"/datasets/{session_id}").json()
    assert body["session_id"] == session_id

    preview = client.get(f"/datasets/{session_id}/preview", params={"limit": 2}).json()
    assert preview["rows_returned"] == 2
    assert preview["total_rows"] == 5
    assert preview["data"][0] == {"id": 1, "name": "Alice", "age": 30, "city": "Paris"}


def test_unknown_session_is_404(client):
    response = client.get("/datasets/nope")
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "DatasetNotFound"


def test_remove_columns_is_pending_until_confirmed(client, session_id):
    response = client.post(
        f"/datasets/{session_id}/clean/remove-columns", json={"columns": ["age"]}
    )
    assert response.status_code == 200
    pending = response.json()["pending"]
    assert pending["columns"] == ["id", "name", "city"]
    assert pending["shape"] == [5, 3]

    body = client.get(f"/datasets/{session_id}").json()
    assert body["columns"] == ["id", "name", "age", "city"]
    assert body["pending"]["label"] == "Remove columns: age"

    confirmed = client.post(f"/datasets/{session_id}/pending/confirm").json()
    assert confirmed["columns"] == ["id", "name", "city"]
    assert "age" not in confirmed["column_stats"]
    assert confirmed["pending"] is None


def test_remove_columns_requires_a_name(client, session_id):
    response = client.post(
        f"/datasets/{session_id}/clean/remove-columns", json={"columns": []}
    )
    assert response.status_code == 422


def test_remove_duplicates_and_confirm(client, session_id):
    client.post(f"/datasets/{session_id}/clean/remove-duplicates")
    body = client.post(f"/datasets/{session_id}/pending/confirm").json()
    assert body["shape"] == [4, 4]
    assert body["duplicates"] == 0


def test_fill_missing_and_confirm(client, session_id):
    response = client.post(
        f"/datasets/{session_id}/clean/fill-missing",
        json={
            "rules": {
                "age": {"method": "median"},
                "city": {"method": "constant", "value": "Unknown"},
            }
        },
    )
    assert response.status_code == 200
    rows = response.json()["pending"]["rows"]
    assert rows[1]["age"] == 30
    assert rows[2]["city"] == "Unknown"

    body = client.post(f"/datasets/{session_id}/pending/confirm").json()
    assert body["missing_cells"] == 0
    assert body["column_stats"]["city"]["unique"] == 3


def test_fill_missing_rejects_bad_rule(client, session_id):
    response = client.post(
        f"/datasets/{session_id}/clean/fill-missing",
        json={"rules": {"city": {"method": "mean"}}},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InvalidFillRule"
    assert client.get(f"/datasets/{session_id}/pending").json()["pending"] is None


@pytest.mark.parametrize("value", [[1, 2], {"x": 1}])
def test_fill_missing_rejects_non_scalar_constant(client, session_id, value):
    response = client.post(
        f"/datasets/{session_id}/clean/fill-missing",
        json={"rules": {"city": {"method": "constant", "value": value}}},
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "InvalidFillRule"
    assert client.get(f"/datasets/{session_id}/pending").json()["pending"] is None


def test_fill_missing_requires_rules(client, session_id):
    response = client.post(f"/datasets/{session_id}/clean/fill-missing", json={"rules": {}})
    assert response.status_code == 400


def test_cancel_pending(client, session_id):
    client.post(f"/datasets/{session_id}/clean/remove-duplicates")
    assert client.delete(f"/datasets/{session_id}/pending").json()["discarded"] is True
    assert client.get(f"/datasets/{session_id}").json()["shape"] == [5, 4]


def test_confirm_without_pending_is_409(client, session_id):
    response = client.post(f"/datasets/{session_id}/pending/confirm")
    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "NoPendingEdit"


def test_replace_dataset_drops_pending(client, session_id):
    client.post(f"/datasets/{session_id}/clean/remove-duplicates")
    response = client.post(
        f"/datasets/{session_id}/upload",
        files={"file": ("other.csv", b"x,y\n1,2\n", "text/csv")},
    )
    body = response.json()
    assert body["session_id"] == session_id
    assert body["filename"] == "other.csv"
    assert body["shape"] == [1, 2]
    assert body["pending"] is None


def test_failed_replace_keeps_old_dataset(client, session_id):
    response = client.post(
        f"/datasets/{session_id}/upload",
        files={"file": ("bad.csv", b"x,y\n1\n", "text/csv")},
    )
    assert response.status_code == 400
    assert client.get(f"/datasets/{session_id}").json()["shape"] == [5, 4]


def test_profile(client, session_id):
    body = client.get(f"/datasets/{session_id}/profile").json()
    profile = body["profile"]
    assert profile["overview"]["rows"] == 5
    assert profile["correlations"]["columns"] == ["id", "age"]
    assert len(profile["variables"]) == 4


def test_distribution(client, session_id):
    numeric = client.get(
        f"/datasets/{session_id}/distribution", params={"column": "age", "bins": 5}
    ).json()
    assert len(numeric["histogram"]) == 5

    categorical = client.get(
        f"/datasets/{session_id}/distribution", params={"column": "city"}
    ).json()
    assert categorical["value_counts"][0] == {"value": "Paris", "count": 3}

    missing = client.get(
        f"/datasets/{session_id}/distribution", params={"column": "nope"}
    )
    assert missing.status_code == 400


def test_download_formats(client, session_id):
    csv = client.get(f"/datasets/{session_id}/download", params={"format": "csv"})
    assert csv.status_code == 200
    assert csv.headers["content-type"].startswith("text/csv")
    assert 'filename="dataset.csv"' in csv.headers["content-disposition"]
    assert csv.text.split("\n")[0] == "id,name,age,city"

    as_json = client.get(f"/datasets/{session_id}/download", params={"format": "json"})
    assert as_json.headers["content-type"].startswith("application/json")
    assert len(as_json.json()) == 5

    tsv = client.get(f"/datasets/{session_id}/download", params={"format": "tsv"})
    assert tsv.text.split("\n")[0] == "id\tname\tage\tcity"

    bad = client.get(f"/datasets/{session_id}/download", params={"format": "xlsx"})
    assert bad.status_code == 422


def test_delete_session(client, session_id):
    assert client.delete(f"/datasets/{session_id}").status_code == 200
    assert client.get(f"/datasets/{session_id}").status_code == 404
    assert client.delete(f"/datasets/{session_id}").status_code == 404
