"""
Integration test fixtures.

A full FastAPI test client whose pipeline runs jobs inline against an
in-memory database, a fake engine and a recorded webhook endpoint.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from pdfpress.api.dependencies import get_job_store, get_pipeline
from pdfpress.api.main import app


@pytest.fixture(scope="function")
def client(pipeline, job_store) -> Generator[TestClient, None, None]:
    """Create a test client with overridden dependencies."""
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_job_store] = lambda: job_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
