"""
FastAPI application factory.

Pipeline failures are GenerationError subclasses; a single exception handler
maps them to {"error": kind, "detail": message} with the class's status code.
Routes are plain (sync) functions, so FastAPI runs each request in its thread
pool and concurrent generations proceed in parallel.
"""

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from cvgen import __version__
from cvgen.config import Settings, load_settings
from cvgen.contexts.generation.pipeline import DocumentPipeline
from cvgen.api.routes import generate, persons, system, templates
from cvgen.exceptions import GenerationError


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(
        title="cvgen",
        description="CV generation from person data and document templates",
        version=__version__,
    )
    app.state.settings = settings
    app.state.pipeline = DocumentPipeline(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GenerationError)
    async def generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(f"[api] {request.method} {request.url.path} -> {exc.http_status} {exc.kind}: {exc.message}")
        return JSONResponse(exc.to_dict(), status_code=exc.http_status)

    app.include_router(generate.router)
    app.include_router(persons.router)
    app.include_router(templates.router)
    app.include_router(system.router)

    return app
