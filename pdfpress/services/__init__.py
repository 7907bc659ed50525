from .compressor import (
    CompressionFailed,
    CompressionTimeout,
    EngineError,
    EngineErrorCode,
    NoOutputError,
    PDFCompressor,
)
from .job_store import InvalidTransitionError, JobNotFoundError, JobStore, JobStoreError
from .storage import FileStore
from .validation import UploadValidationError, validate_callback_url, validate_upload
from .webhook import DeliveryResult, WebhookClient

__all__ = [
    "CompressionFailed",
    "CompressionTimeout",
    "EngineError",
    "EngineErrorCode",
    "NoOutputError",
    "PDFCompressor",
    "InvalidTransitionError",
    "JobNotFoundError",
    "JobStore",
    "JobStoreError",
    "FileStore",
    "UploadValidationError",
    "validate_callback_url",
    "validate_upload",
    "DeliveryResult",
    "WebhookClient",
]
