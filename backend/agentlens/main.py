import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from agentlens.config import get_settings
from agentlens.database import engine, Base
from agentlens.exceptions import AgentLensError
from agentlens.routers import agents, demo

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(levelname)s:%(name)s:%(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type", "x-demo-session"]
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="AgentLens Demo API",
    description="Demo sessions, synthesized agent runs, replays and run metrics",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(AgentLensError)
async def agentlens_error_handler(request: Request, exc: AgentLensError) -> JSONResponse:
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return _error(400, message)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    # Runs in ServerErrorMiddleware, outside CORSMiddleware, so CORS headers are added here
    return _error(500, str(exc) or "Unknown error", headers=CORS_HEADERS)


app.include_router(demo.router, prefix="/api", tags=["Demo"])
app.include_router(agents.router, prefix="/api", tags=["Agents"])


@app.options("/{path:path}", include_in_schema=False)
async def preflight(path: str):
    """Bare OPTIONS requests (no Origin) still get an empty CORS reply."""
    return Response(status_code=200, headers=CORS_HEADERS)


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "agentlens-demo-api"}
