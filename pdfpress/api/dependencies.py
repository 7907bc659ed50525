from typing import Annotated

from fastapi import Depends, Request

from pdfpress.models import SessionLocal
from pdfpress.services import JobStore
from pdfpress.tasks.compression import CompressionPipeline


def get_pipeline(request: Request) -> CompressionPipeline:
    return request.app.state.pipeline


def get_job_store() -> JobStore:
    return JobStore(SessionLocal)


Pipeline = Annotated[CompressionPipeline, Depends(get_pipeline)]
Jobs = Annotated[JobStore, Depends(get_job_store)]
