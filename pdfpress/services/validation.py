from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

PDF_MEDIA_TYPES = {"application/pdf", "application/x-pdf"}

_url_adapter = TypeAdapter(AnyHttpUrl)


class UploadValidationError(Exception):
    """Submission rejected before any job is created."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def validate_upload(data: bytes, content_type: str | None, max_size_bytes: int) -> None:
    if not data:
        raise UploadValidationError("No PDF file provided or file is empty")

    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type not in PDF_MEDIA_TYPES:
        raise UploadValidationError("Only PDF files are allowed")

    if len(data) > max_size_bytes:
        max_mb = max_size_bytes // (1024 * 1024)
        raise UploadValidationError(f"File too large. Max: {max_mb}MB", status_code=413)


def validate_callback_url(url: str | None, require_https: bool = True) -> str:
    """Return the callback URL as submitted, minus surrounding whitespace.

    pydantic only checks the URL; its normalised form is discarded so the
    stored callback is exactly what the client sent.
    """
    if not url or not url.strip():
        raise UploadValidationError("webhookUrl is required")

    try:
        parsed = _url_adapter.validate_python(url.strip())
    except ValidationError:
        raise UploadValidationError("webhookUrl must be a valid absolute URL")

    if require_https and parsed.scheme != "https":
        raise UploadValidationError("webhookUrl must use HTTPS")

    return url.strip()
