from pathlib import Path

import pytest

from profilekit.discovery import InMemoryDeclarationSource
from profilekit.installer import ProfileInstaller
from profilekit.loader import ObjectCodeLoader


def _installer(root: str = "base") -> ProfileInstaller:
    source = InMemoryDeclarationSource(
        {
            "base": {"profiles": ["childA"], "dependencies": ["moduleX"]},
            "childA": {"dependencies": ["moduleY"], "remove_dependencies": ["moduleX"]},
        }
    )
    loader = ObjectCodeLoader(
        {
            "base": {"base_install_tasks": lambda payload, context: {"base_task": context}},
            "childA": {"childA_install_tasks": lambda payload, context: {"childA_task": context}},
        }
    )
    return ProfileInstaller(root, source=source, loader=loader)


def test_webapp_graph_and_catalog() -> None:
    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    from profilekit.webapp import create_app

    client = TestClient(create_app(_installer()))

    graph = client.get("/api/graph")
    assert graph.status_code == 200
    assert graph.json()["dependencies"] == ["moduleY"]

    catalog = client.get("/api/catalog")
    assert catalog.status_code == 200
    assert [item["function"] for item in catalog.json()["hooks"]["hook_install_tasks"]] == [
        "base_install_tasks",
        "childA_install_tasks",
    ]


def test_webapp_dispatch_is_idempotent() -> None:
    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    from profilekit.webapp import create_app

    client = TestClient(create_app(_installer()))
    body = {"context": {"langcode": "en"}}

    first = client.post("/api/dispatch/install_tasks", json=body)
    second = client.post("/api/dispatch/hook_install_tasks", json=body)

    assert first.status_code == 200
    assert first.json()["payload"] == {"base_task": {"langcode": "en"}, "childA_task": {"langcode": "en"}}
    assert second.json()["invoked"] == []

    invocations = client.get("/api/invocations", params={"hook": "install_tasks"})
    assert [record["invoked"] for record in invocations.json()["records"]] == [True, True]


def test_webapp_error_statuses(tmp_path: Path) -> None:
    pytest.importorskip("fastapi")
    from fastapi.testclient import TestClient

    from profilekit.webapp import create_app

    client = TestClient(create_app(_installer()))
    assert client.post("/api/dispatch/uninstall", json={}).status_code == 404
    assert client.get("/api/invocations", params={"hook": "uninstall"}).status_code == 400

    missing = TestClient(create_app(ProfileInstaller("ghost", project_path=tmp_path)))
    assert missing.get("/api/graph").status_code == 404
