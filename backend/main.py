from __future__ import annotations

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend.agent.graph import build_research_graph
from backend.api.routes import inject_dependencies, router
from backend.config import settings
from backend.mcp_client.client import MCPWorkspaceClient
from backend.utils.logger import get_logger

log = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the workspace server, wire the research pipeline, stop on shutdown."""
    workspace = MCPWorkspaceClient()
    try:
        await workspace.connect()
    except Exception as exc:
        # calendar and notes stay unavailable; manual research still works
        log.error("Google Workspace MCP server failed to start: %s", exc)

    inject_dependencies(build_research_graph(workspace), workspace)
    log.info("🚀 %s ready (google=%s)", settings.APP_NAME, "mock" if settings.MOCK_GOOGLE else "live")
    yield
    await workspace.disconnect()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME, version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    # mounted last so /api routes win
    app.mount("/", StaticFiles(directory=settings.FRONTEND_DIR, html=True), name="frontend")
    return app


app = create_app()


def run() -> None:
    uvicorn.run("backend.main:app", host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    run()
