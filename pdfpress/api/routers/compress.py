import structlog
from fastapi import APIRouter, File, Form, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from pdfpress.api.dependencies import Pipeline
from pdfpress.api.schemas import ErrorResponse, SubmitResponse
from pdfpress.core.config import settings

logger = structlog.get_logger()
router = APIRouter(tags=["Compression"])


@router.post(
    "/compress-pdf",
    response_model=SubmitResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_202_ACCEPTED,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    summary="Submit a PDF for compression",
    description=f"""
Stores the uploaded PDF and starts compressing it in the background.

**Maximum size:** {settings.max_upload_size_mb}MB

The response only carries the job id. The outcome is POSTed as JSON to
`webhookUrl` once the job is `completed` or `failed`; completed payloads
embed the compressed PDF as base64 in `fileData`.
    """,
)
async def compress_pdf(
    pipeline: Pipeline,
    pdf: UploadFile | None = File(None, description="PDF document to compress"),
    webhook_url: str | None = Form(None, alias="webhookUrl", description="HTTPS callback URL"),
) -> SubmitResponse:
    # One byte past the ceiling is enough to reject an oversize upload
    data = await pdf.read(pipeline.max_upload_bytes + 1) if pdf is not None else b""
    filename = pdf.filename if pdf is not None else None
    content_type = pdf.content_type if pdf is not None else None

    job = await run_in_threadpool(pipeline.submit, data, filename, content_type, webhook_url)

    logger.info("pdf_submitted", job_id=str(job.id), filename=filename, size=len(data))
    return SubmitResponse(job_id=job.id, status=job.status)
