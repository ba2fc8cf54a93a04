from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import uvicorn
from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field

from agent.agent import ChatOrchestrator, build_orchestrator
from agent.errors import ChatValidationError, UpstreamCapabilityError
from config.settings import Settings, get_settings


logging.basicConfig(
    level=get_settings().log_level,
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("padtask")


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId", description="Caller-defined conversation key")
    message: Optional[str] = Field(None, description="User's latest message")
    current_tasks: Optional[str] = Field(
        None,
        alias="currentTasks",
        description="Task list markdown currently shown to the user",
    )


class ClearRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(None, alias="sessionId")


router = APIRouter()


def _orchestrator(request: Request) -> ChatOrchestrator:
    return request.app.state.orchestrator


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get("/health")
def health() -> Dict[str, Any]:
    return {"status": "ok", "timestamp": _utc_timestamp()}


@router.post("/chat")
def chat(request: Request, req: Optional[ChatRequest] = None) -> Dict[str, Any]:
    req = req or ChatRequest()
    logger.info(
        "Incoming chat: session_id=%s message_len=%s has_current_tasks=%s",
        req.session_id,
        len(req.message or ""),
        bool(req.current_tasks and req.current_tasks.strip()),
    )
    reply = _orchestrator(request).chat(req.session_id, req.message, req.current_tasks)
    return {"message": reply.message, "todoMarkdown": reply.todo_markdown}


@router.post("/clear")
def clear(request: Request, req: Optional[ClearRequest] = None) -> Dict[str, Any]:
    session_id = req.session_id if req else None
    _orchestrator(request).clear(session_id)
    logger.info("Cleared session: session_id=%s", session_id)
    return {"success": True}


async def _validation_error(request: Request, exc: ChatValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": ChatValidationError.public_message})


async def _upstream_error(request: Request, exc: UpstreamCapabilityError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": UpstreamCapabilityError.public_message})


def create_app(
    orchestrator: Optional[ChatOrchestrator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="PadTask", version="1.0.0")
    app.state.orchestrator = orchestrator or build_orchestrator(settings)

    # CORS: allow the browser client during development
    if settings.is_development:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(ChatValidationError, _validation_error)
    app.add_exception_handler(UpstreamCapabilityError, _upstream_error)

    app.include_router(router)
    app.include_router(router, prefix="/api")

    # mounted last so the API routes take precedence over "/"
    if settings.static_dir and os.path.isdir(settings.static_dir):
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        logger.info("Serving static client from %s", settings.static_dir)

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    logger.info("PadTask server running on http://localhost:%s", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
