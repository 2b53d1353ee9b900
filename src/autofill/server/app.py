from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, AsyncIterator

from fastapi import Body, Depends, FastAPI, HTTPException, Request

from ..browser.sandbox import SandboxPolicy
from ..browser.session import AutofillSession
from ..config import Settings
from ..errors import BrowserError, SandboxViolation
from ..logging import setup_logging
from .schemas import MessageResponse, OpenRequest, OpenResponse

logger = logging.getLogger(__name__)

_session_lock = asyncio.Lock()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    settings = Settings.from_env()
    settings.ensure_directories()
    setup_logging(settings.log_level, settings.log_dir / "autofill.log")
    return settings


def build_sandbox(settings: Settings) -> SandboxPolicy:
    return SandboxPolicy.from_hosts(settings.allowlist_hosts, step_timeout_s=settings.step_timeout_s)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    app.state.session = None
    yield
    session = app.state.session
    if session is not None:
        await session.stop()
        app.state.session = None


app = FastAPI(title="Autofill API", lifespan=lifespan)


async def get_session(request: Request, settings: Settings = Depends(get_settings)) -> AutofillSession:
    async with _session_lock:
        session = getattr(request.app.state, "session", None)
        if session is None:
            session = AutofillSession(
                build_sandbox(settings),
                headless=settings.headless_default,
                thresholds=settings.thresholds(),
            )
            await session.start()
            request.app.state.session = session
        return session


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/open")
async def open_endpoint(request: OpenRequest, session: AutofillSession = Depends(get_session)) -> OpenResponse:
    try:
        url = await session.open_url(str(request.url))
    except SandboxViolation as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except BrowserError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return OpenResponse(url=url)


@app.post("/message")
async def message_endpoint(
    payload: Any = Body(...),
    session: AutofillSession = Depends(get_session),
) -> MessageResponse:
    # Malformed messages are answered through the response string, never an HTTP error.
    response = await session.send(payload)
    return MessageResponse(response=response)
