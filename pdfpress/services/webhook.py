import base64
from dataclasses import dataclass
from datetime import datetime, timezone

import httpx
import structlog

from pdfpress.models import Job

logger = structlog.get_logger()

PDF_MIME_TYPE = "application/pdf"


@dataclass
class DeliveryResult:
    delivered: bool
    status_code: int | None = None
    error: str | None = None


def isoformat(value: datetime | None) -> str | None:
    """ISO-8601 with an explicit offset; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def completed_payload(job: Job, file_data: bytes) -> dict:
    return {
        "jobId": str(job.id),
        "status": "completed",
        "originalFilename": job.original_filename,
        "compressedFilename": job.compressed_filename,
        "originalSize": job.original_size,
        "compressedSize": job.compressed_size,
        "compressionRatio": job.compression_ratio,
        "fileData": base64.b64encode(file_data).decode("ascii"),
        "mimeType": PDF_MIME_TYPE,
        "completedAt": isoformat(job.completed_at),
    }


def failed_payload(job: Job) -> dict:
    return {
        "jobId": str(job.id),
        "status": "failed",
        "error": job.error_message or "Compression failed",
    }


class WebhookClient:
    """Posts terminal job outcomes to caller-supplied callback URLs.

    One attempt per job. Transport errors and non-2xx answers are logged
    and reported through DeliveryResult, never raised.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "pdfpress-webhook/1.0",
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    def deliver_completed(self, job: Job, file_data: bytes) -> DeliveryResult:
        return self._post(job, completed_payload(job, file_data))

    def deliver_failed(self, job: Job) -> DeliveryResult:
        return self._post(job, failed_payload(job))

    def _post(self, job: Job, payload: dict) -> DeliveryResult:
        headers = {"User-Agent": self.user_agent, "Content-Type": "application/json"}
        job_id = str(job.id)

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(job.callback_url, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("webhook_failed", job_id=job_id, status=payload["status"], error=str(e))
            return DeliveryResult(delivered=False, error=str(e) or e.__class__.__name__)

        if not response.is_success:
            logger.error(
                "webhook_failed",
                job_id=job_id,
                status=payload["status"],
                status_code=response.status_code,
                body=response.text[:200],
            )
            return DeliveryResult(
                delivered=False,
                status_code=response.status_code,
                error=f"Callback returned HTTP {response.status_code}",
            )

        logger.info("webhook_delivered", job_id=job_id, status=payload["status"], status_code=response.status_code)
        return DeliveryResult(delivered=True, status_code=response.status_code)
