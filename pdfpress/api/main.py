from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdfpress import __version__
from pdfpress.api.routers import compress_router, health_router, jobs_router
from pdfpress.core.config import settings
from pdfpress.models import SessionLocal, init_db
from pdfpress.services import (
    FileStore,
    JobNotFoundError,
    JobStore,
    JobStoreError,
    PDFCompressor,
    UploadValidationError,
    WebhookClient,
)
from pdfpress.tasks.compression import CompressionPipeline
from pdfpress.tasks.runner import JobRunner

logger = structlog.get_logger()


def build_pipeline() -> CompressionPipeline:
    files = FileStore(settings.work_dir)
    files.ensure_work_dir()
    return CompressionPipeline(
        store=JobStore(SessionLocal),
        files=files,
        compressor=PDFCompressor(
            binary=settings.gs_binary,
            pdf_settings=settings.gs_pdf_settings,
            timeout=settings.compression_timeout_seconds,
        ),
        webhook=WebhookClient(
            timeout=settings.webhook_timeout_seconds,
            user_agent=settings.webhook_user_agent,
        ),
        runner=JobRunner(settings.worker_concurrency),
        max_upload_bytes=settings.max_upload_size_bytes,
        require_https_callback=settings.require_https_callback,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_db()
    pipeline = build_pipeline()
    app.state.pipeline = pipeline
    logger.info("service_started", work_dir=settings.work_dir, workers=settings.worker_concurrency)
    yield
    pipeline.runner.shutdown(wait=True)
    logger.info("service_stopped")


app = FastAPI(
    title="pdfpress - PDF Compression API",
    description="""
## Asynchronous PDF compression

Upload a PDF together with a callback URL. The file is compressed with
Ghostscript in the background and the result is POSTed to the callback.

### Flow

1. Send the PDF to `/api/compress-pdf` (fields `pdf` and `webhookUrl`)
2. Keep the returned `jobId`
3. Receive the `completed` or `failed` payload on your webhook
4. Optionally poll `/api/jobs/{jobId}`
    """,
    version=__version__,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Compression", "description": "PDF submission"},
        {"name": "Jobs", "description": "Compression job status"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    return response


@app.exception_handler(UploadValidationError)
async def validation_exception_handler(request: Request, exc: UploadValidationError) -> JSONResponse:
    logger.info("submission_rejected", path=request.url.path, error=exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


def _describe_error(error: dict) -> str:
    field = ".".join(str(part) for part in error["loc"][1:]) or "body"
    return f"{field}: {error['msg']}"


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(_describe_error(error) for error in exc.errors())
    logger.info("request_rejected", path=request.url.path, error=details)
    return JSONResponse(status_code=400, content={"success": False, "error": f"Invalid request: {details}"})


@app.exception_handler(JobNotFoundError)
async def not_found_exception_handler(request: Request, exc: JobNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"success": False, "error": "Job not found"})


@app.exception_handler(JobStoreError)
async def store_exception_handler(request: Request, exc: JobStoreError) -> JSONResponse:
    logger.error("job_store_unavailable", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"success": False, "error": "Job store unavailable"})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


app.include_router(health_router)
app.include_router(compress_router, prefix=settings.api_prefix)
app.include_router(jobs_router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {"service": "pdfpress", "version": __version__, "docs": "/docs"}
