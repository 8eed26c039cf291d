"""Tests for the stateless editor-extension routes."""

from __future__ import annotations

from collections.abc import Callable

from httpx import AsyncClient

from codestruct.repositories.fakes import FakeReasoningClient


async def test_analyze_batch(
    client: AsyncClient,
    reasoning: FakeReasoningClient,
    analysis_json: Callable[..., str],
) -> None:
    reasoning.queue(analysis_json())
    resp = await client.post(
        "/api/extension/analyze",
        json={
            "files": [
                {"path": "src/a.py", "content": "x = 1\n"},
                {"path": "web/b.ts", "content": "let b;", "language": "ts"},
            ]
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["metadata"] == {"fallback": False}
    assert body["data"]["architecture"].startswith("Layered")
    prompt = str(reasoning.calls[0]["prompt"])
    assert "src/a.py (python)" in prompt
    assert "web/b.ts (ts)" in prompt


async def test_analyze_batch_fallback(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/extension/analyze",
        json={"files": [{"path": "a.py", "content": "x"}]},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["metadata"] == {"fallback": True}
    assert body["data"]["detectedLanguages"] == {"unknown": 1.0}


async def test_analyze_batch_limits(client: AsyncClient) -> None:
    resp = await client.post("/api/extension/analyze", json={"files": []})
    assert resp.status_code == 400

    files = [{"path": f"f{i}.py", "content": "x"} for i in range(6)]
    resp = await client.post("/api/extension/analyze", json={"files": files})
    assert resp.status_code == 400

    resp = await client.post(
        "/api/extension/analyze",
        json={"files": [{"path": "/abs.py", "content": "x"}]},
    )
    assert resp.status_code == 400


async def test_analyze_file(
    client: AsyncClient, reasoning: FakeReasoningClient
) -> None:
    reasoning.queue(
        '{"summary": "One issue.", "issues": ['
        '{"type": "naming", "severity": "low",'
        ' "description": "Unclear name", "line": 1}]}'
    )
    resp = await client.post(
        "/api/extension/analyze-file",
        json={"content": "q = 1\n", "fileName": "m.py"},
    )

    assert resp.status_code == 200
    issue = resp.json()["data"]["issues"][0]
    assert issue["file"] == "m.py"
    assert issue["severity"] == "low"


async def test_generate_docs(
    client: AsyncClient, reasoning: FakeReasoningClient
) -> None:
    reasoning.queue("/** Adds. */\nfunction add(a, b) { return a + b; }")
    resp = await client.post(
        "/api/extension/generate-docs",
        json={"content": "function add(a, b) { return a + b; }",
              "fileName": "add.js"},
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["documented"].startswith("/** Adds. */")


async def test_improve_unusable_reply_is_500(
    client: AsyncClient, reasoning: FakeReasoningClient
) -> None:
    reasoning.queue("not json at all")
    resp = await client.post(
        "/api/extension/improve",
        json={"content": "x = 1", "fileName": "a.py"},
    )
    assert resp.status_code == 500
    assert resp.json()["success"] is False


async def test_missing_file_name_is_400(client: AsyncClient) -> None:
    resp = await client.post(
        "/api/extension/improve", json={"content": "x = 1"}
    )
    assert resp.status_code == 400
