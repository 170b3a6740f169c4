"""Read-mostly HTTP API for inspecting a profile installer."""

from __future__ import annotations

from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.responses import JSONResponse

from profilekit.errors import InvalidContextError, NotFoundError
from profilekit.hooks import coerce_hook
from profilekit.installer import ProfileInstaller
from profilekit.reporting import graph_payload


def create_app(installer: ProfileInstaller) -> FastAPI:
    app = FastAPI(title="profilekit")

    def _graph():
        try:
            return installer.graph
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    @app.get("/api/graph", response_class=JSONResponse)
    def graph() -> dict[str, Any]:
        return graph_payload(_graph())

    @app.get("/api/catalog", response_class=JSONResponse)
    def catalog() -> dict[str, Any]:
        _graph()
        return {"root": installer.root, "hooks": installer.catalog.as_dict()}

    @app.get("/api/invocations", response_class=JSONResponse)
    def invocations(hook: str | None = None) -> dict[str, Any]:
        try:
            records = installer.engine.invocations(hook)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return {
            "records": [record.model_dump() for record in records],
            "reentrant_skips": [skip.model_dump() for skip in installer.engine.reentrant_skips],
        }

    @app.post("/api/dispatch/{hook}", response_class=JSONResponse)
    def dispatch(hook: str, body: dict[str, Any] | None = Body(default=None)) -> dict[str, Any]:
        body = body or {}
        try:
            name = coerce_hook(hook)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=f"Unknown hook: {hook}") from exc
        _graph()
        try:
            result = installer.engine.dispatch(name, body.get("context"), body.get("payload"))
        except InvalidContextError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return result.model_dump(mode="json")

    return app
