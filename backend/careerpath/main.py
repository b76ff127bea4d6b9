import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from careerpath.api.router import api_router
from careerpath.core.config import settings
from careerpath.core.errors import RecruitmentError
from careerpath.db.init_db import create_all
from careerpath.db.session import engine
from careerpath.middleware.logging import RequestLoggingMiddleware

logging.basicConfig(level=logging.INFO)
logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

logger = logging.getLogger("cpm.app")

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(RecruitmentError)
async def _recruitment_error_handler(request: Request, exc: RecruitmentError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("request_failed", extra={"path": request.url.path, "detail": exc.detail})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.get("/health")
async def health_check():
    return {"status": "ok", "environment": settings.environment}


app.include_router(api_router)


@app.on_event("startup")
async def _startup() -> None:
    if settings.auto_create_tables:
        await create_all(engine)
