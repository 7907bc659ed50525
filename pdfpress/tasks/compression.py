import uuid
from pathlib import Path

import structlog

from pdfpress.models import Job
from pdfpress.services import (
    DeliveryResult,
    EngineError,
    FileStore,
    JobStore,
    JobStoreError,
    PDFCompressor,
    WebhookClient,
    validate_callback_url,
    validate_upload,
)
from pdfpress.services.storage import safe_filename
from pdfpress.tasks.runner import JobRunner

logger = structlog.get_logger()


def compression_ratio(original_size: int, compressed_size: int) -> float:
    """Percentage saved, rounded to two decimals."""
    if original_size <= 0:
        return 0.0
    return round((original_size - compressed_size) / original_size * 100, 2)


class CompressionPipeline:
    """
    Coordinates one PDF from upload to webhook.

    submit() validates the upload, stores it, creates the PROCESSING job
    and hands the rest to the runner. run() is the background half:
    compress, resolve the job, deliver the webhook, then clean up.
    """

    def __init__(
        self,
        store: JobStore,
        files: FileStore,
        compressor: PDFCompressor,
        webhook: WebhookClient,
        runner: JobRunner,
        max_upload_bytes: int,
        require_https_callback: bool = True,
    ) -> None:
        self.store = store
        self.files = files
        self.compressor = compressor
        self.webhook = webhook
        self.runner = runner
        self.max_upload_bytes = max_upload_bytes
        self.require_https_callback = require_https_callback

    def submit(self, data: bytes, filename: str | None, content_type: str | None, callback_url: str | None) -> Job:
        validate_upload(data, content_type, self.max_upload_bytes)
        callback_url = validate_callback_url(callback_url, self.require_https_callback)
        original_filename = filename or "document.pdf"

        input_path = self.files.reserve_input(data)
        try:
            job = self.store.create(callback_url, original_filename, len(data))
        except JobStoreError:
            self.files.remove(input_path)
            raise

        self.runner.submit(self.run, job.id, input_path)
        return job

    def run(self, job_id: uuid.UUID, input_path: Path) -> None:
        output_path = None
        try:
            job = self.store.get(job_id)
            try:
                output_path = self.files.output_path_for(job_id, safe_filename(job.original_filename))
            except OSError as e:
                logger.error("job_failed", job_id=str(job_id), error=str(e))
                self._fail(job, f"Compression failed: {e}")
                return
            self._process(job, Path(input_path), output_path)
        except JobStoreError as e:
            # The job stays PROCESSING; nothing to deliver
            logger.error("job_store_error", job_id=str(job_id), error=str(e))
        finally:
            self.files.remove(input_path)
            self.files.remove(output_path)

    def _process(self, job: Job, input_path: Path, output_path: Path) -> None:
        job_id = str(job.id)
        try:
            self.compressor.compress(str(input_path), str(output_path))
            compressed = output_path.read_bytes()
        except EngineError as e:
            logger.error("job_failed", job_id=job_id, code=e.code.value, error=str(e))
            self._fail(job, str(e))
            return
        except Exception as e:
            logger.error("job_failed", job_id=job_id, error=str(e), error_type=type(e).__name__)
            self._fail(job, f"Compression failed: {e}")
            return

        compressed_size = len(compressed)
        ratio = compression_ratio(job.original_size, compressed_size)
        job = self.store.mark_completed(job.id, output_path.name, compressed_size, ratio)
        logger.info(
            "job_completed",
            job_id=job_id,
            original_size=job.original_size,
            compressed_size=compressed_size,
            ratio=ratio,
        )

        result = self.webhook.deliver_completed(job, compressed)
        self._record_delivery(job, result)

    def _fail(self, job: Job, message: str) -> None:
        job = self.store.mark_failed(job.id, message)
        result = self.webhook.deliver_failed(job)
        self._record_delivery(job, result)

    def _record_delivery(self, job: Job, result: DeliveryResult) -> None:
        event_type = "WEBHOOK_DELIVERED" if result.delivered else "WEBHOOK_FAILED"
        try:
            self.store.record_event(
                job.id,
                event_type,
                {"status_code": result.status_code, "error": result.error, "job_status": job.status.value},
            )
        except JobStoreError as e:
            logger.error("delivery_event_not_recorded", job_id=str(job.id), error=str(e))
