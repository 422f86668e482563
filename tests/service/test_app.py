"""Tests for the FastAPI service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from annote.config import AnnoteConfig
from annote.orchestrator import Annotator
from annote.service import create_app


class _RecordingAnnotator(Annotator):
    configs: list[AnnoteConfig] = []

    def __init__(self, config: AnnoteConfig) -> None:
        super().__init__(config)
        self.configs.append(config)


@pytest.fixture
def client() -> TestClient:
    _RecordingAnnotator.configs = []
    return TestClient(create_app(_RecordingAnnotator))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_annotate_endpoint_returns_document(client: TestClient) -> None:
    response = client.post(
        "/annotate",
        json={"source": "//\n// Hello\nx = 1;\n//\ny = 2;\n", "filename": "a.js", "highlight": False},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["blocks"] == 2
    assert "<p>Hello</p>" in data["html"]
    assert "<pre><code>x = 1;</code></pre>" in data["html"]
    assert _RecordingAnnotator.configs[-1].highlight is False
    assert _RecordingAnnotator.configs[-1].markdown is True


def test_run_endpoint_reports_each_file(client: TestClient, tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    (src / "ok.js").write_text("// doc\nok();\n", encoding="utf-8")
    (src / "bad.js").write_bytes(b"\xff\xfe")

    response = client.post(
        "/run",
        json={"path": str(src), "write_to": str(tmp_path / "docs"), "highlight": False},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "partial"
    results = {Path(item["source"]).name: item for item in data["files"]}
    assert results["ok.js"]["ok"] is True
    assert results["bad.js"]["ok"] is False
    assert "read failed" in results["bad.js"]["error"]
    assert Path(results["ok.js"]["output"]).exists()


def test_run_endpoint_maps_missing_path_to_404(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/run", json={"path": str(tmp_path / "missing")})
    assert response.status_code == 404


def test_run_endpoint_maps_bad_options_to_400(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/run", json={"path": str(tmp_path), "maxdepth": -1})
    assert response.status_code == 400


class _LoopCheckingAnnotator(Annotator):
    calls: list[bool] = []

    def render_document(self, *args, **kwargs):
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self.calls.append(False)
        else:
            self.calls.append(True)
        return super().render_document(*args, **kwargs)


def test_annotate_endpoint_renders_off_the_event_loop() -> None:
    _LoopCheckingAnnotator.calls = []
    client = TestClient(create_app(_LoopCheckingAnnotator))

    response = client.post("/annotate", json={"source": "// Doc\nx = 1;\n"})

    assert response.status_code == 200
    assert response.json()["blocks"] == 1
    assert _LoopCheckingAnnotator.calls == [False]
