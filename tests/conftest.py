import pytest
from fastapi.testclient import TestClient

from analytics.ingest import parse_csv_text
from api.deps import session_store
from api.main import app
from storage.sessions import SessionStore

SAMPLE_CSV = (
    "id,name,age,city\n"
    "1,Alice,30,Paris\n"
    "2,Bob,,Berlin\n"
    "3,Carol,25,\n"
    "1,Alice,30,Paris\n"
    "4,Dan,41,Paris\n"
)


@pytest.fixture
def sample_csv():
    return SAMPLE_CSV


@pytest.fixture
def dataset():
    return parse_csv_text(SAMPLE_CSV)


@pytest.fixture
def store():
    return SessionStore(ttl_seconds=60)


@pytest.fixture
def client(store):
    app.dependency_overrides[session_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_id(client, sample_csv):
    response = client.post(
        "/upload", files={"file": ("people.csv", sample_csv.encode(), "text/csv")}
    )
    assert response.status_code == 200, response.text
    return response.json()["session_id"]
