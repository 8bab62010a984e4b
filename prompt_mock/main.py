"""FastAPI application entry point — serves the mock backend over HTTP."""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import Depends, FastAPI, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prompt_mock.api.control import router as control_router
from prompt_mock.api.http import MockRequest
from prompt_mock.api.interceptor import RouteInterceptor, get_interceptor
from prompt_mock.config import get_settings
from prompt_mock.utils.logging import setup_logging

logger = structlog.get_logger()

INTERCEPTED_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan — startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info(
        "promptmock.starting",
        port=settings.port,
        api_prefix=settings.api_prefix,
        seeded=settings.seed,
    )
    yield
    logger.info("promptmock.shutdown")


app = FastAPI(
    title="PromptMock",
    description="Deterministic stateful mock of the prompt management API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(control_router, prefix="/__mock__", tags=["control"])


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "promptmock", "version": "0.1.0"}


@app.api_route("/{path:path}", methods=INTERCEPTED_METHODS, include_in_schema=False)
async def intercept(
    path: str,
    request: Request,
    interceptor: RouteInterceptor = Depends(get_interceptor),
) -> Response:
    """Answer any other request from the mock backend.

    The interceptor holds a blocking store lock, so it runs on the threadpool.
    """
    body = await request.body()
    result = await run_in_threadpool(
        interceptor.handle,
        MockRequest(
            method=request.method,
            path=request.url.path,
            query=dict(request.query_params),
            headers=dict(request.headers),
            body=body or None,
        ),
    )
    if result is None:
        return JSONResponse(
            status_code=404,
            content={"error": f"No mock route for {request.method} {request.url.path}"},
        )
    return Response(
        content=result.body,
        status_code=result.status_code,
        media_type=result.content_type,
    )
