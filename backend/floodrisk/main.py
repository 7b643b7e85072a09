import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from floodrisk.config.settings import settings
from floodrisk.schemas.flood_risk import ErrorResponse
from floodrisk.services.flood_risk_service import create_flood_risk_service
from floodrisk.v1.routes.flood_risk import router as flood_risk_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = httpx.AsyncClient(
        timeout=settings.HTTP_TIMEOUT_SECONDS,
        follow_redirects=True,
        headers={"User-Agent": settings.HTTP_USER_AGENT},
    )
    app.state.flood_risk_service = create_flood_risk_service(client)
    logger.info("[FloodRiskEngine] service ready")
    yield
    await client.aclose()


app = FastAPI(
    title="Flood Risk Engine API",
    version="1.0.0",
    description="Multi-source flood risk assessment, batch scoring and regional alerts",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(message="Validation failed", errors=errors).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"[FloodRiskEngine] unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc) or "Internal server error"},
        headers={"Access-Control-Allow-Origin": "*"},
    )


app.include_router(flood_risk_router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok", "service": "floodrisk-engine"}
