"""
Shared fixtures for pdfpress tests.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Generator

# ============================================================================
# Set test environment BEFORE any pdfpress imports
# ============================================================================
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["WORK_DIR"] = tempfile.mkdtemp(prefix="pdfpress-test-")
os.environ["REQUIRE_HTTPS_CALLBACK"] = "true"
os.environ["MAX_UPLOAD_SIZE_MB"] = "50"
os.environ["WORKER_CONCURRENCY"] = "2"

import pdfpress.core.config
pdfpress.core.config.get_settings.cache_clear()

import httpx
import pytest
from faker import Faker
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pdfpress.models.base import Base
from pdfpress.services import FileStore, JobStore, WebhookClient
from pdfpress.tasks.compression import CompressionPipeline

fake = Faker()

MAX_UPLOAD_BYTES = 50 * 1024 * 1024
CALLBACK_URL = "https://hooks.example.com/pdf-webhook"


def generate_pdf_bytes(size: int = 4096) -> bytes:
    """Fake PDF bytes: PDF header, padding, EOF marker."""
    header = b"%PDF-1.4\n"
    trailer = b"\n%%EOF\n"
    return header + os.urandom(max(0, size - len(header) - len(trailer))) + trailer


# ============================================================================
# Test doubles
# ============================================================================


class FakeCompressor:
    """Stands in for PDFCompressor; writes fixed bytes or raises."""

    def __init__(self, output: bytes | None = None, error: Exception | None = None) -> None:
        self.output = output if output is not None else generate_pdf_bytes(1024)
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def compress(self, input_path: str, output_path: str) -> None:
        self.calls.append((input_path, output_path))
        if self.error is not None:
            raise self.error
        Path(output_path).write_bytes(self.output)


class InlineRunner:
    """Runs submitted work immediately on the calling thread."""

    def __init__(self) -> None:
        self.submitted: list[tuple] = []

    def submit(self, fn, *args):
        self.submitted.append((fn, args))
        fn(*args)

    def shutdown(self, wait: bool = True) -> None:
        pass


class WebhookRecorder:
    """httpx.MockTransport handler that records every callback request."""

    def __init__(self, status_code: int = 200, error: Exception | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"success": self.status_code < 400})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture(scope="function")
def session_factory(db_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def job_store(session_factory) -> JobStore:
    return JobStore(session_factory)


@pytest.fixture
def processing_job(job_store: JobStore):
    """Create and return a job in PROCESSING status."""
    return job_store.create(CALLBACK_URL, fake.file_name(extension="pdf"), 2_097_152)


# ============================================================================
# File System Fixtures
# ============================================================================


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def file_store(temp_dir: Path) -> FileStore:
    store = FileStore(temp_dir / "work")
    store.ensure_work_dir()
    return store


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    return generate_pdf_bytes(4096)


# ============================================================================
# Pipeline Fixtures
# ============================================================================


@pytest.fixture
def compressor() -> FakeCompressor:
    return FakeCompressor()


@pytest.fixture
def webhook_recorder() -> WebhookRecorder:
    return WebhookRecorder()


@pytest.fixture
def runner() -> InlineRunner:
    return InlineRunner()


@pytest.fixture
def pipeline(job_store, file_store, compressor, webhook_recorder, runner) -> CompressionPipeline:
    return CompressionPipeline(
        store=job_store,
        files=file_store,
        compressor=compressor,
        webhook=WebhookClient(timeout=5.0, transport=webhook_recorder.transport),
        runner=runner,
        max_upload_bytes=MAX_UPLOAD_BYTES,
    )


@pytest.fixture
def make_compressor():
    """Factory for FakeCompressor instances."""
    return FakeCompressor


@pytest.fixture
def make_recorder():
    """Factory for WebhookRecorder instances."""
    return WebhookRecorder


@pytest.fixture
def make_pipeline(job_store, file_store):
    """Build a pipeline around custom doubles."""

    def _make(compressor=None, recorder=None, runner=None) -> CompressionPipeline:
        recorder = recorder or WebhookRecorder()
        return CompressionPipeline(
            store=job_store,
            files=file_store,
            compressor=compressor or FakeCompressor(),
            webhook=WebhookClient(timeout=5.0, transport=recorder.transport),
            runner=runner or InlineRunner(),
            max_upload_bytes=MAX_UPLOAD_BYTES,
        )

    return _make
