"""Tests for the DocuGuard HTTP API."""

import pytest
from fastapi.testclient import TestClient

from docuguard.core.constants import get_reports_dir, get_snapshot_path
from docuguard.core.exceptions import AnalyzerError, ConflictNotFoundError, DuplicateIdError, ValidationError
from docuguard.daemon.server import create_app, error_status
from docuguard.models.conflict import Severity
from docuguard.persistence.snapshot import JsonSnapshotStore
from docuguard.workspace import Workspace


BATCH = {
    "documents": [
        {"title": "handbook.txt", "content": "Notice is 2 weeks."},
        {"title": "memo.txt", "content": "Notice is 4 weeks."},
    ]
}


@pytest.fixture
def workspace(temp_dir, analyzer, config, ids, clock):
    """Workspace with one scripted conflict between handbook and memo."""
    analyzer.set(
        "handbook.txt", "memo.txt",
        [("Notice is 2 weeks.", "Notice is 4 weeks.", "Notice periods differ.", Severity.HIGH)],
    )
    return Workspace(
        analyzer=analyzer,
        config=config,
        snapshot_store=JsonSnapshotStore(get_snapshot_path(temp_dir)),
        base_path=temp_dir,
        id_factory=ids,
        clock=clock,
    )


@pytest.fixture
def client(workspace):
    """Test client running the app lifespan."""
    with TestClient(create_app(workspace)) as test_client:
        yield test_client


@pytest.fixture
def analyzed(client):
    """Client after one batch analysis; returns the created document ids."""
    response = client.post("/analysis/batch", json=BATCH)
    assert response.status_code == 200, response.text
    return client, [d["id"] for d in response.json()["documents"]]


def _first_conflict_id(client) -> str:
    return client.get("/conflicts").json()["conflicts"][0]["id"]


class TestErrorStatus:
    """Tests for domain error to HTTP status mapping."""

    @pytest.mark.parametrize(
        "error, status",
        [
            (ConflictNotFoundError("missing"), 404),
            (DuplicateIdError("taken"), 409),
            (ValidationError("bad"), 400),
            (AnalyzerError("upstream"), 502),
        ],
    )
    def test_mapping(self, error, status):
        """Test each error family maps to its status."""
        assert error_status(error) == status


class TestHealthAndStatus:
    """Tests for health, status and history endpoints."""

    def test_health(self, client):
        """Test the health endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["uptime_seconds"] >= 0

    def test_status_empty(self, client):
        """Test dashboard numbers on an empty workspace."""
        data = client.get("/status").json()

        assert data["dashboard"] == {
            "documents_processed": 0,
            "reports_generated": 0,
            "unresolved_conflicts": 0,
        }
        assert data["is_analyzing"] is False
        assert data["notifications"] == []

    def test_status_drains_notifications(self, analyzed):
        """Test notifications are delivered once."""
        client, _ = analyzed

        first = client.get("/status").json()["notifications"]
        assert [n["message"] for n in first] == ["Analysis complete! Found 1 new potential conflicts."]
        assert client.get("/status").json()["notifications"] == []

    def test_history(self, analyzed):
        """Test the activity log with a limit."""
        client, _ = analyzed

        data = client.get("/history", params={"limit": 1}).json()
        assert data["total"] == 2
        assert [e["type"] for e in data["events"]] == ["analysis_complete"]


class TestAnalysis:
    """Tests for the analysis endpoints."""

    def test_batch(self, analyzed):
        """Test a batch run returns the run summary and new ids."""
        client, doc_ids = analyzed

        assert len(doc_ids) == 2
        status = client.get("/analysis").json()
        assert status["is_analyzing"] is False
        assert status["last_run"]["conflicts_created"] == 1

    def test_batch_needs_two_documents(self, client):
        """Test a single document is refused."""
        response = client.post("/analysis/batch", json={"documents": BATCH["documents"][:1]})
        assert response.status_code == 400

    def test_batch_request_validation(self, client):
        """Test malformed bodies are rejected by the request model."""
        response = client.post("/analysis/batch", json={"documents": [{"content": "x"}]})
        assert response.status_code == 422

    def test_analyzer_failure(self, client, analyzer):
        """Test analyzer errors surface as a bad gateway."""
        analyzer.set("handbook.txt", "memo.txt", AnalyzerError("quota exceeded"))

        response = client.post("/analysis/batch", json=BATCH)

        assert response.status_code == 502
        assert response.json()["error"] == "AnalyzerError"

    def test_pair(self, analyzed, analyzer):
        """Test re-analyzing a pair replaces its conflicts."""
        client, (first_id, second_id) = analyzed
        analyzer.set("handbook.txt", "memo.txt", [])

        response = client.post("/analysis/pair", json={"first_id": first_id, "second_id": second_id})

        assert response.status_code == 200
        assert response.json()["run"]["conflicts_replaced"] == 1
        assert client.get("/conflicts").json()["total"] == 0

    def test_pair_unknown_document(self, analyzed):
        """Test an unknown document id."""
        client, (first_id, _) = analyzed

        response = client.post("/analysis/pair", json={"first_id": first_id, "second_id": "missing"})
        assert response.status_code == 404


class TestDocuments:
    """Tests for the document endpoints."""

    def test_list(self, analyzed):
        """Test documents with their unresolved counts."""
        client, _ = analyzed

        data = client.get("/documents").json()
        assert data["total"] == 2
        assert [d["conflicts"] for d in data["documents"]] == [1, 1]

    def test_get(self, analyzed):
        """Test one document with its conflicts."""
        client, (first_id, _) = analyzed

        data = client.get(f"/documents/{first_id}").json()
        assert data["title"] == "handbook.txt"
        assert len(data["conflicts"]) == 1

    def test_get_unknown(self, client):
        """Test a missing document."""
        assert client.get("/documents/missing").status_code == 404

    def test_save(self, analyzed):
        """Test replacing content."""
        client, (first_id, _) = analyzed

        response = client.put(f"/documents/{first_id}", json={"content": "Notice is 3 weeks."})

        assert response.status_code == 200
        assert response.json()["document"]["content"] == "Notice is 3 weeks."


class TestConflicts:
    """Tests for the conflict endpoints."""

    def test_list_default_filter(self, analyzed):
        """Test the inbox defaults to unresolved conflicts."""
        client, _ = analyzed

        data = client.get("/conflicts").json()
        assert data["total"] == 1
        assert data["stats"]["unresolved"] == 1

    def test_list_invalid_filter(self, client):
        """Test an unknown sort order."""
        assert client.get("/conflicts", params={"sort": "newest"}).status_code == 400

    def test_get(self, analyzed):
        """Test one conflict."""
        client, _ = analyzed
        conflict_id = _first_conflict_id(client)

        assert client.get(f"/conflicts/{conflict_id}").json()["severity"] == "High"

    def test_resolve(self, analyzed):
        """Test resolving a conflict."""
        client, _ = analyzed
        conflict_id = _first_conflict_id(client)

        response = client.post(f"/conflicts/{conflict_id}/resolve", json={"resolution": "ignore"})

        assert response.status_code == 200
        assert response.json()["conflict"]["status"] == "ignored"
        assert client.get("/conflicts/stats").json()["ignored"] == 1

    def test_resolve_unknown(self, client):
        """Test resolving a missing conflict."""
        response = client.post("/conflicts/missing/resolve", json={"resolution": "ignore"})
        assert response.status_code == 404

    def test_resolve_invalid(self, analyzed):
        """Test an unknown resolution value."""
        client, _ = analyzed
        conflict_id = _first_conflict_id(client)

        response = client.post(f"/conflicts/{conflict_id}/resolve", json={"resolution": "maybe"})
        assert response.status_code == 400

    def test_report(self, analyzed, temp_dir):
        """Test report export."""
        client, _ = analyzed

        response = client.post("/conflicts/report", json={})

        assert response.status_code == 200
        data = response.json()
        assert data["conflict_count"] == 1
        assert data["filename"] == "DocuGuard_Report_2024-05-01.txt"
        assert (get_reports_dir(temp_dir) / data["filename"]).exists()
        assert client.get("/status").json()["dashboard"]["reports_generated"] == 1

    def test_report_empty(self, client):
        """Test nothing to export."""
        assert client.post("/conflicts/report", json={}).status_code == 400


class TestGraphAndProfile:
    """Tests for graph rendering and profile endpoints."""

    def test_graph_json(self, analyzed):
        """Test the default JSON rendering."""
        client, (first_id, _) = analyzed

        data = client.get("/graph", params={"hover": first_id}).json()
        assert data["edge_count"] == 1
        assert data["viewport"]["hovered_node_id"] == first_id

    def test_graph_svg(self, analyzed):
        """Test SVG media type."""
        client, _ = analyzed

        response = client.get("/graph", params={"format": "svg"})
        assert response.headers["content-type"].startswith("image/svg+xml")
        assert response.text.startswith("<svg")

    def test_graph_invalid_format(self, client):
        """Test an unsupported format."""
        assert client.get("/graph", params={"format": "png"}).status_code == 400

    def test_graph_unknown_hover(self, analyzed):
        """Test hovering a missing node."""
        client, _ = analyzed
        assert client.get("/graph", params={"hover": "missing"}).status_code == 404

    def test_profile(self, client):
        """Test reading and updating the profile."""
        assert client.get("/profile").json()["name"] == "Guest User"

        response = client.put("/profile", json={"name": "Dana", "theme": "light"})

        assert response.status_code == 200
        assert response.json()["theme"] == "light"
        assert client.get("/profile").json()["name"] == "Dana"

    def test_profile_invalid_theme(self, client):
        """Test a domain validation failure."""
        assert client.put("/profile", json={"theme": "sepia"}).status_code == 400

    def test_toggle_theme(self, client):
        """Test the theme toggle."""
        assert client.post("/profile/theme").json() == {"theme": "light"}
