import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.routing import Mount

from chemanalyzer.config import get_settings
from chemanalyzer.exceptions import (
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
    QuotaExceededError,
    TransportError,
)
from chemanalyzer.mcp_server import mcp
from chemanalyzer.models.common import ErrorResponse
from chemanalyzer.routers.analysis import router as analysis_router
from chemanalyzer.services import analysis as analysis_service


# --- FastAPI app ---

api = FastAPI(title="ChemAnalyzer", version="0.1.0")
api.include_router(analysis_router)


# --- Exception handlers ---

def _error(status_code: int, error_code: str, exc: Exception) -> JSONResponse:
    body = ErrorResponse(error_code=error_code, message=str(exc))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@api.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    return _error(503, "configuration_error", exc)


@api.exception_handler(QuotaExceededError)
async def quota_error_handler(request: Request, exc: QuotaExceededError):
    return _error(429, "quota_exceeded", exc)


@api.exception_handler(EmptyResponseError)
async def empty_response_handler(request: Request, exc: EmptyResponseError):
    return _error(502, "empty_response", exc)


@api.exception_handler(MalformedResponseError)
async def malformed_response_handler(request: Request, exc: MalformedResponseError):
    return _error(502, "malformed_response", exc)


@api.exception_handler(TransportError)
async def transport_error_handler(request: Request, exc: TransportError):
    return _error(502, "transport_error", exc)


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)


@asynccontextmanager
async def lifespan(app: Starlette):
    async with mcp_app.lifespan(app):
        yield
    await analysis_service.get_analysis_client().aclose()


app = Starlette(
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
    lifespan=lifespan,
)


def run():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "chemanalyzer.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
