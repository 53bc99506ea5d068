from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from docrouter.api.app import create_app
from docrouter.config.settings import Settings
from docrouter.runner.request_runner import Operation, RunResponse


def _make_client(**settings: object) -> tuple[TestClient, MagicMock]:
    runner = MagicMock()
    runner.run.return_value = RunResponse(ok=True, payload={"message": "ok", "results": []})
    app = create_app(runner, Settings(**settings))
    return TestClient(app), runner


def _files(*names: str, size: int = 4) -> list[tuple[str, tuple[str, bytes, str]]]:
    return [("documents", (n, b"x" * size, "application/pdf")) for n in names]


class TestIndex:
    def test_liveness(self) -> None:
        client, _runner = _make_client()

        response = client.get("/")

        assert response.status_code == 200
        assert "running" in response.text


class TestUpload:
    def test_defaults_to_classify_and_extract(self) -> None:
        client, runner = _make_client()

        response = client.post("/api/upload", files=_files("a.pdf", "b.pdf"))

        assert response.status_code == 200
        assert response.json() == {"message": "ok", "results": []}
        operation, documents, cancel_event = runner.run.call_args.args
        assert operation is Operation.CLASSIFY_AND_EXTRACT
        assert [d.local_id for d in documents] == ["a.pdf", "b.pdf"]
        assert documents[0].mime_type == "application/pdf"
        assert documents[0].content == b"xxxx"
        assert not cancel_event.is_set()

    @pytest.mark.parametrize("operation", ["summarize", "workflow"])
    def test_selects_operation(self, operation: str) -> None:
        client, runner = _make_client()

        client.post(f"/api/upload?operation={operation}", files=_files("a.pdf"))

        assert runner.run.call_args.args[0] is Operation(operation)

    def test_no_files(self) -> None:
        client, runner = _make_client()

        response = client.post("/api/upload")

        assert response.status_code == 400
        assert response.json() == {"error": "No files uploaded"}
        runner.run.assert_not_called()

    def test_too_many_files(self) -> None:
        client, runner = _make_client(max_upload_files=2)

        response = client.post("/api/upload", files=_files("a.pdf", "b.pdf", "c.pdf"))

        assert response.status_code == 400
        runner.run.assert_not_called()

    def test_oversize_file(self) -> None:
        client, runner = _make_client(max_upload_file_size_bytes=10)

        response = client.post("/api/upload", files=_files("a.pdf", size=11))

        assert response.status_code == 400
        assert "a.pdf" in response.json()["error"]
        runner.run.assert_not_called()

    def test_file_at_the_size_limit_is_read_whole(self) -> None:
        client, runner = _make_client(max_upload_file_size_bytes=10)

        response = client.post("/api/upload", files=_files("a.pdf", size=10))

        assert response.status_code == 200
        _operation, documents, _event = runner.run.call_args.args
        assert documents[0].content == b"x" * 10

    def test_far_oversize_file_is_rejected(self) -> None:
        client, runner = _make_client(max_upload_file_size_bytes=10)

        response = client.post("/api/upload", files=_files("a.pdf", size=10_000))

        assert response.status_code == 400
        assert "10 byte limit" in response.json()["error"]
        runner.run.assert_not_called()

    @pytest.mark.parametrize("operation", ["translate", "classify"])
    def test_unknown_operation(self, operation: str) -> None:
        client, runner = _make_client()

        response = client.post(f"/api/upload?operation={operation}", files=_files("a.pdf"))

        assert response.status_code == 400
        runner.run.assert_not_called()

    def test_runner_error_status_is_forwarded(self) -> None:
        client, runner = _make_client()
        runner.run.return_value = RunResponse(
            ok=False, status_code=500, error="Internal server error", details="boom"
        )

        response = client.post("/api/upload", files=_files("a.pdf"))

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error", "details": "boom"}


class TestClassify:
    def test_single_document(self) -> None:
        client, runner = _make_client()

        response = client.post(
            "/api/classify", files={"document": ("a.pdf", b"%PDF", "application/pdf")}
        )

        assert response.status_code == 200
        operation, documents, _event = runner.run.call_args.args
        assert operation is Operation.CLASSIFY_SINGLE
        assert [d.local_id for d in documents] == ["a.pdf"]

    def test_missing_document(self) -> None:
        client, runner = _make_client()

        response = client.post("/api/classify")

        assert response.status_code == 400
        runner.run.assert_not_called()
